# web_autotest/core/controller/runner.py
"""
Sequential step runner.

Responsibilities:
- Resolve each step's action in the registry and validate its arguments
- Execute actions strictly in order against one BrowserSession
- Record one StepResult per executed step
- Stop on the first failure unless continue_on_error is set

Failures never escape as raw exceptions: an unknown action, invalid
arguments or a failing action all become a failed StepResult. When
continue_on_error is off the runner then raises StepAbortedError, which
carries the partial result log.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pydantic import ValidationError

from ..action import Step
from ..errors import StepAbortedError, UnknownActionError
from ..registry import ActionRegistry
from ..result import ActionResult
from ..session import BrowserSession
from ...reporting.schemas import StepResult

logger = logging.getLogger(__name__)


def _describe(e: BaseException) -> str:
    return str(e) or e.__class__.__name__


class StepRunner:
    def __init__(self, registry: ActionRegistry, session: BrowserSession) -> None:
        self.registry = registry
        self.session = session

    async def run_step(self, step: Step) -> StepResult:
        """Execute one step; never raises for action-level failures."""
        try:
            _meta, params = self.registry.validate_step(step)
        except UnknownActionError as e:
            return StepResult(name=step.name, ok=False, message=str(e))
        except ValidationError as e:
            return StepResult(name=step.name, ok=False, message=f"invalid arguments: {e}")

        fn = self.registry.get_action(step.name)
        try:
            res = await fn(self.session, params)
        except Exception as e:  # noqa: BLE001
            return StepResult(name=step.name, ok=False, message=_describe(e))

        if isinstance(res, ActionResult):
            if res.meta:
                logger.debug("step %s meta: %s", step.name, res.meta)
            if not res.ok:
                return StepResult(
                    name=step.name, ok=False, message=res.message or "action reported failure"
                )
            return StepResult(name=step.name, ok=True, message="ok", output=res.output)
        return StepResult(name=step.name, ok=True, message="ok")

    async def run(self, steps: Sequence[Step], *, continue_on_error: bool = False) -> list[StepResult]:
        results: list[StepResult] = []
        for step in steps:
            result = await self.run_step(step)
            results.append(result)
            if result.ok:
                logger.debug("step %s ok", step.name)
                continue
            logger.info("step %s failed: %s", step.name, result.message)
            if not continue_on_error:
                raise StepAbortedError(results)
        return results
