"""
结构化的动作返回值，用于向上层（编排/CLI）汇报执行结果。
"""
# @file purpose: Define ActionResult model for action outputs.

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """
    统一的动作返回值：
    - ok: 是否成功
    - output: 动作产出的文本（标题/URL/文本/属性/eval 结果/base64 截图等）
    - message: 人类可读的说明（如 "navigated: https://..."），失败时为原因
    - meta: 其它诊断信息（selector/URL/路径等），便于日志与回放
    """

    ok: bool = True
    output: Optional[str] = None
    message: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, message: str | None = None, **meta: Any) -> "ActionResult":
        return cls(ok=True, message=message, meta=meta)

    @classmethod
    def with_output(cls, output: str, **meta: Any) -> "ActionResult":
        return cls(ok=True, output=output, meta=meta)

    @classmethod
    def failure(cls, message: str, **meta: Any) -> "ActionResult":
        return cls(ok=False, message=message, meta=meta)
