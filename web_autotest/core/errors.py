"""
定义项目级异常类型，统一错误语义与捕获边界。
- AutotestError: 所有自定义异常的基类
- ActionExecutionError: 动作执行期错误（元素缺失、超时、断言不符等）
- UnknownActionError: 步骤引用了未注册的动作
- BrowserNotOpenError: 尚未打开浏览器就调用页面动作
- StepAbortedError: continue_on_error=False 时步骤失败，中止当前步骤序列
- DescriptionError: 计划/套件描述文件无法解析或校验失败
"""
# @file purpose: Define error taxonomy for web-autotest.

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..reporting.schemas import StepResult


class AutotestError(Exception):
    """Base class for all custom errors in web-autotest."""


class ActionExecutionError(AutotestError):
    """
    Raised when an action fails to execute.
    统一封装上下文，便于 CLI/编排层打印一致的信息与诊断。
    """

    def __init__(
        self,
        action: str,
        message: str,
        *,
        selector: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.action: str = action
        self.selector: str | None = selector
        self.url: str | None = url
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        parts = [f"[{self.action}] {super().__str__()}"]
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        return " | ".join(parts)


class UnknownActionError(AutotestError, KeyError):
    """Raised by the registry when an action name has no handler."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown action: {name}")
        self.name = name

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class BrowserNotOpenError(AutotestError):
    """Raised when a page is needed but no browser is held by the session."""

    def __init__(self, message: str = "browser is not open, call browser_open first") -> None:
        super().__init__(message)


class StepAbortedError(AutotestError):
    """
    A step failed while continue_on_error was off.

    `results` is the result log up to and including the failing step,
    `failed` is that last (failing) entry.
    """

    def __init__(self, results: list["StepResult"]) -> None:
        self.results = list(results)
        self.failed = self.results[-1]
        super().__init__(self.failed.message or "step failed")


class DescriptionError(AutotestError):
    """Raised when a plan/suite description cannot be loaded or validated."""
