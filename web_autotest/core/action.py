"""
定义测试描述层的数据契约（只读）：
- Step: 一次动作调用（name + arguments）
- Plan: 扁平步骤列表 + continue_on_error
- Test: 套件内可重试的一组步骤
- Suite: setup / tests / teardown + 重试、产物、报告配置

描述文件使用 camelCase 键（continueOnError / autoBrowser ...），
Python 侧统一使用 snake_case，两者都可以作为输入。
"""
# @file purpose: Define plan/suite description contracts.

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Description(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Step(_Description):
    name: str = Field(..., min_length=1, description="Registered action name.")
    arguments: dict[str, Any] = Field(
        default_factory=dict, description="Opaque arguments, validated by the action."
    )


class Plan(_Description):
    steps: list[Step]
    continue_on_error: bool = False


class Test(_Description):
    __test__ = False  # not a pytest test class

    name: str = Field(..., min_length=1)
    steps: list[Step] = Field(default_factory=list)


class Suite(_Description):
    setup: list[Step] = Field(default_factory=list)
    tests: list[Test]
    teardown: list[Step] = Field(default_factory=list)
    continue_on_error: bool = False
    retries: int = Field(default=0, ge=0, description="Extra attempts per test.")
    auto_browser: bool = True
    headless: bool | None = None

    junit: bool = False
    junit_path: str | None = None
    artifacts_dir: str | None = None
    on_failure_screenshot: bool = False
    trace_on_failure: bool = False

    @property
    def wants_artifact_dir(self) -> bool:
        return bool(
            self.on_failure_screenshot
            or self.trace_on_failure
            or self.junit_path
            or self.artifacts_dir
        )
