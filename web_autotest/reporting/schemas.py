"""
Result models produced while running plans and suites.

Results are appended to their logs in execution order and never mutated
afterwards, so every model here is frozen.
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


class StepResult(_Result):
    """One executed step."""

    name: str
    ok: bool
    message: Optional[str] = None
    output: Optional[str] = None


class PlanStepResult(_Result):
    """A plan step outcome with its 1-based position in the plan."""

    step: int
    name: str
    ok: bool
    message: Optional[str] = None
    output: Optional[str] = None


class TestResult(_Result):
    """Final outcome of one test after all attempts."""

    __test__ = False  # not a pytest test class

    name: str
    ok: bool
    error: Optional[str] = None
    artifacts: List[str] = Field(default_factory=list)
    attempts: int = 0
    steps: List[StepResult] = Field(default_factory=list)


class SuiteResult(_Result):
    setup: List[StepResult] = Field(default_factory=list)
    tests: List[TestResult] = Field(default_factory=list)
    teardown: List[StepResult] = Field(default_factory=list)
    junit: Optional[str] = None
    error: Optional[str] = None
    aborted: bool = False

    @property
    def failures(self) -> int:
        return sum(1 for t in self.tests if not t.ok)

    @property
    def ok(self) -> bool:
        return self.error is None and self.failures == 0
