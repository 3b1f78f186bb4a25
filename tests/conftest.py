"""Shared fixtures: an in-memory BrowserDriver and scripted action registries."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from web_autotest.core.controller.runner import StepRunner
from web_autotest.core.errors import ActionExecutionError
from web_autotest.core.registry import ActionRegistry
from web_autotest.core.result import ActionResult
from web_autotest.core.session import BrowserSession


@dataclass(eq=False)
class FakePage:
    number: int
    url: str = "about:blank"
    title: str = ""
    # selector -> {"text": str, "attrs": dict, "value": str, "visible": bool}
    elements: dict[str, dict[str, Any]] = field(default_factory=dict)
    viewport: tuple[int, int] | None = None
    closed: bool = False


class FakeDriver:
    """Records calls; behaves like a tiny browser with one shared context."""

    def __init__(self) -> None:
        self._running = False
        self.calls: list[tuple] = []
        self.pages: list[FakePage] = []
        self.launch_args: list[str] | None = None
        self.headless: bool | None = None
        self.starts = 0
        self.stops = 0
        self.tracing = False
        self.fail_start = False
        self.fail_stop = False
        self.fail_screenshot = False
        self.fail_tracing = False
        self.fail_trace_stop = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, *, headless: bool = True, args: list[str] | None = None) -> None:
        if self.fail_start:
            raise RuntimeError("chromium missing")
        self.starts += 1
        self.headless = headless
        self.launch_args = list(args or [])
        self._running = True

    async def stop(self) -> None:
        self.stops += 1
        self._running = False
        if self.fail_stop:
            raise RuntimeError("stop exploded")

    async def new_page(self) -> FakePage:
        page = FakePage(number=len(self.pages) + 1)
        self.pages.append(page)
        return page

    async def close_page(self, page: FakePage) -> None:
        page.closed = True

    async def goto(self, page: FakePage, url: str, *, wait_until: str = "domcontentloaded") -> None:
        self.calls.append(("goto", url, wait_until))
        page.url = url

    def _element(self, page: FakePage, selector: str) -> dict[str, Any]:
        if selector not in page.elements:
            raise TimeoutError(f"waiting for {selector} timed out")
        return page.elements[selector]

    async def wait_for(self, page, selector, *, state="visible", timeout_ms=None) -> None:
        present = selector in page.elements
        visible = present and page.elements[selector].get("visible", True)
        ok = {
            "visible": visible,
            "hidden": not visible,
            "attached": present,
            "detached": not present,
        }[state]
        if not ok:
            raise TimeoutError(f"{selector} not {state}")

    async def wait_for_text(self, page, selector, text, *, timeout_ms=None) -> None:
        if text not in self._element(page, selector).get("text", ""):
            raise TimeoutError(f"text {text!r} not found in {selector}")

    async def click(self, page, selector, *, timeout_ms=None) -> None:
        self._element(page, selector)
        self.calls.append(("click", selector))

    async def type_text(self, page, selector, text, *, delay_ms=None, clear_first=False) -> None:
        el = self._element(page, selector)
        el["value"] = text if clear_first else el.get("value", "") + text

    async def fill(self, page, selector, value) -> None:
        self._element(page, selector)["value"] = value

    async def set_viewport(self, page, width, height) -> None:
        page.viewport = (width, height)

    async def title(self, page) -> str:
        return page.title

    async def url(self, page) -> str:
        return page.url

    async def count(self, page, selector) -> int:
        return 1 if selector in page.elements else 0

    async def text_content(self, page, selector, *, timeout_ms=None):
        return self._element(page, selector).get("text")

    async def get_attribute(self, page, selector, name, *, timeout_ms=None):
        return self._element(page, selector).get("attrs", {}).get(name)

    async def input_value(self, page, selector, *, timeout_ms=None) -> str:
        return self._element(page, selector).get("value", "")

    async def evaluate(self, page, expression) -> Any:
        return {"expression": expression}

    async def screenshot(self, page, path=None, *, full_page=False) -> bytes:
        if self.fail_screenshot:
            raise RuntimeError("screenshot failed")
        data = b"\x89PNG-fake"
        if path is not None:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            Path(path).write_bytes(data)
        self.calls.append(("screenshot", path, full_page))
        return data

    async def tracing_start(self, page, *, screenshots=True, snapshots=True, sources=False) -> None:
        if self.fail_tracing:
            raise RuntimeError("tracing unavailable")
        self.tracing = True
        self.calls.append(("tracing_start",))

    async def tracing_stop(self, page, path=None) -> None:
        if not self.tracing:
            raise RuntimeError("tracing not started")
        if self.fail_trace_stop:
            raise RuntimeError("trace stop failed")
        self.tracing = False
        if path is not None:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            Path(path).write_bytes(b"PK-fake")
        self.calls.append(("tracing_stop", path))


class Script:
    """
    A registry of fake actions that record their invocations.

    - "ok" always succeeds
    - "fail" always raises ActionExecutionError
    - "flaky" fails the first `flaky_failures` calls, then succeeds
    - "soft_fail" returns ActionResult.failure(...)
    """

    def __init__(self, flaky_failures: int = 1) -> None:
        self.calls: list[str] = []
        self.flaky_failures = flaky_failures
        self.registry = ActionRegistry()

        async def ok(session, params):
            self.calls.append("ok")
            return ActionResult.success("fine")

        async def fail(session, params):
            self.calls.append("fail")
            raise ActionExecutionError("fail", "boom")

        async def flaky(session, params):
            self.calls.append("flaky")
            if self.calls.count("flaky") <= self.flaky_failures:
                raise ActionExecutionError("flaky", "not yet")
            return ActionResult.success()

        async def soft_fail(session, params):
            self.calls.append("soft_fail")
            return ActionResult.failure("soft failure")

        async def echo(session, params):
            self.calls.append("echo")
            return ActionResult.with_output("hello")

        for name, fn in {
            "ok": ok,
            "fail": fail,
            "flaky": flaky,
            "soft_fail": soft_fail,
            "echo": echo,
        }.items():
            self.registry.register(name, fn)


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def session(driver: FakeDriver) -> BrowserSession:
    return BrowserSession(driver)


@pytest.fixture
def script() -> Script:
    return Script()


@pytest.fixture
def runner(script: Script, session: BrowserSession) -> StepRunner:
    return StepRunner(script.registry, session)
