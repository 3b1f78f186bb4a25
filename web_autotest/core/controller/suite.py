# web_autotest/core/controller/suite.py
"""
Suite executor: setup -> tests (with retries) -> teardown, plus reporting.

Responsibilities:
- Open the browser for the suite when auto_browser is set and none is open,
  and close it again at the end (only if this run opened it)
- Run setup once; a failing setup (continue_on_error off) skips all tests
- Run each test up to retries + 1 times; a test's own steps always stop at
  the first failure
- On a failing attempt: best-effort screenshot / trace archive named
  <sanitized test name>_attempt<N>
- Run teardown exactly once, whatever happened before
- Render JUnit XML when asked, writing it to junit_path when one is given;
  a failed write becomes SuiteResult.error

Test failures are always contained in a failed TestResult. A setup or
teardown failure that continue_on_error does not absorb ends up in
SuiteResult.error. Nothing here raises for an expected failure.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Optional

from ..action import Suite, Test
from ..errors import StepAbortedError
from ..session import BrowserSession
from ..settings import settings
from .runner import StepRunner
from ...reporting.junit import render_junit
from ...reporting.schemas import StepResult, SuiteResult, TestResult
from ...reporting.writer import write_junit

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]+")


def sanitize_filename(name: str) -> str:
    """Collapse unsafe characters to "_" and cap the length at 100."""
    return _UNSAFE_CHARS.sub("_", str(name))[:100]


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of a best-effort operation; failures are logged, never raised."""

    what: str
    ok: bool
    error: Optional[str] = None


async def cleanup(what: str, op: Awaitable[object]) -> CleanupResult:
    try:
        await op
    except Exception as e:  # noqa: BLE001
        logger.warning("%s failed (ignored): %s", what, e)
        return CleanupResult(what=what, ok=False, error=str(e) or e.__class__.__name__)
    return CleanupResult(what=what, ok=True)


class SuiteExecutor:
    def __init__(self, runner: StepRunner) -> None:
        self.runner = runner

    @property
    def session(self) -> BrowserSession:
        return self.runner.session

    def resolve_artifacts_dir(self, suite: Suite) -> Path:
        if suite.artifacts_dir:
            return Path(suite.artifacts_dir)
        root = settings.artifacts_root or Path.cwd()
        return root / f"artifacts_{int(time.time() * 1000)}"

    async def run_suite(self, suite: Suite) -> SuiteResult:
        setup: list[StepResult] = []
        tests: list[TestResult] = []
        teardown: list[StepResult] = []
        error: Optional[str] = None
        aborted = False
        auto_opened = False

        try:
            # 1) browser for the whole suite
            if suite.auto_browser and not self.session.is_open:
                headless = settings.headless if suite.headless is None else suite.headless
                try:
                    await self.session.open(headless=headless)
                    auto_opened = True
                except Exception as e:  # noqa: BLE001
                    error = f"browser open failed: {e}"
                    aborted = True
                    logger.error(error)
                    await cleanup("closing half-open browser", self.session.close())

            # 2) setup
            if not aborted:
                try:
                    setup = await self.runner.run(
                        suite.setup, continue_on_error=suite.continue_on_error
                    )
                except StepAbortedError as e:
                    setup = e.results
                    error = f"setup failed at {e.failed.name}: {e}"
                    aborted = True
                    logger.error(error)

            # 3) artifact directory, created only when something may be written there
            artifacts_dir = self.resolve_artifacts_dir(suite)
            if suite.wants_artifact_dir:
                await cleanup("creating artifacts dir", _mkdir(artifacts_dir))

            # 4) tests
            if not aborted:
                for test in suite.tests:
                    result = await self._run_test(test, suite, artifacts_dir)
                    tests.append(result)
                    if not result.ok and not suite.continue_on_error:
                        logger.info("stopping after failed test %r", test.name)
                        break

            # 5) teardown, unconditionally
            try:
                teardown = await self.runner.run(
                    suite.teardown, continue_on_error=suite.continue_on_error
                )
            except StepAbortedError as e:
                teardown = e.results
                teardown_error = f"teardown failed at {e.failed.name}: {e}"
                logger.error(teardown_error)
                error = error or teardown_error

            result = SuiteResult(
                setup=setup, tests=tests, teardown=teardown, error=error, aborted=aborted
            )

            # 6) report
            if suite.junit or suite.junit_path:
                junit = render_junit(result)
                update: dict = {"junit": junit}
                if suite.junit_path:
                    try:
                        write_junit(junit, suite.junit_path)
                        logger.info("junit report written: %s", suite.junit_path)
                    except OSError as e:
                        write_error = f"junit write failed: {e}"
                        logger.error(write_error)
                        update["error"] = result.error or write_error
                result = result.model_copy(update=update)

            logger.info(
                "suite finished: %d tests, %d failed%s",
                len(result.tests),
                result.failures,
                f" ({result.error})" if result.error else "",
            )
            return result
        finally:
            # 7) release what we acquired
            if auto_opened:
                await cleanup("closing browser", self.session.close())

    async def _run_test(self, test: Test, suite: Suite, artifacts_dir: Path) -> TestResult:
        attempt = 0
        artifacts: list[str] = []
        steps: list[StepResult] = []
        last_error: Optional[str] = None

        while attempt <= suite.retries:
            tracing = False
            if suite.trace_on_failure:
                tracing = (await cleanup("starting trace", self.session.start_tracing())).ok

            try:
                steps = await self.runner.run(test.steps, continue_on_error=False)
            except StepAbortedError as e:
                steps = e.results
                last_error = str(e)
                attempt += 1
                logger.info("test %r attempt %d failed: %s", test.name, attempt, last_error)
                artifacts.extend(await self._capture(test, attempt, suite, artifacts_dir, tracing))
                continue

            if tracing:
                await cleanup("stopping trace", self.session.discard_tracing())
            return TestResult(
                name=test.name, ok=True, artifacts=artifacts, attempts=attempt + 1, steps=steps
            )

        return TestResult(
            name=test.name,
            ok=False,
            error=last_error,
            artifacts=artifacts,
            attempts=attempt,
            steps=steps,
        )

    async def _capture(
        self, test: Test, attempt: int, suite: Suite, artifacts_dir: Path, tracing: bool
    ) -> list[str]:
        stem = f"{sanitize_filename(test.name)}_attempt{attempt}"
        saved: list[str] = []
        if suite.on_failure_screenshot:
            png = str(artifacts_dir / f"{stem}.png")
            if (await cleanup("failure screenshot", self.session.screenshot(png, full_page=True))).ok:
                saved.append(png)
        if tracing:
            trace = str(artifacts_dir / f"{stem}_trace.zip")
            if (await cleanup("saving trace", self.session.stop_tracing(trace))).ok:
                saved.append(trace)
        return saved


async def _mkdir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
