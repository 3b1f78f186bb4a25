"""Plan executor: one flat list of steps, run once."""

from __future__ import annotations

import logging

from ..action import Plan
from ..errors import StepAbortedError
from .runner import StepRunner
from ...reporting.schemas import PlanStepResult, StepResult

logger = logging.getLogger(__name__)


class PlanExecutor:
    def __init__(self, runner: StepRunner) -> None:
        self.runner = runner

    async def run_plan(self, plan: Plan) -> list[PlanStepResult]:
        """
        Run `plan.steps` and number the results from 1. A failing step with
        continue_on_error off ends the plan early; the partial log is
        returned, not raised.
        """
        try:
            results = await self.runner.run(plan.steps, continue_on_error=plan.continue_on_error)
        except StepAbortedError as e:
            results = e.results
            logger.info("plan stopped at step %d of %d", len(results), len(plan.steps))
        return _numbered(results)


def _numbered(results: list[StepResult]) -> list[PlanStepResult]:
    return [
        PlanStepResult(step=i, name=r.name, ok=r.ok, message=r.message, output=r.output)
        for i, r in enumerate(results, start=1)
    ]
