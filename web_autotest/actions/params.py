"""
入参模型: 定义内置动作的 Pydantic v2 参数约束。
Why: 在描述文件 → 执行器 的边界先做强校验, 拦截坏数据, 统一错误结构。
编排层把 Step.arguments 原样透传，校验只发生在这里。

描述文件沿用 camelCase 键（timeoutMs / fullPage ...），snake_case 同样接受。
"""
# @file purpose: Define parameter schemas for built-in actions using Pydantic v2.

from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# 辅助约束类型
NonEmptyStr = Annotated[str, Field(min_length=1)]
TimeoutMs = Annotated[int, Field(gt=0, le=600_000)]

DEFAULT_TIMEOUT_MS = 15_000


class ActionName(str, Enum):
    """The closed set of built-in action identifiers."""

    BROWSER_OPEN = "browser_open"
    BROWSER_CLOSE = "browser_close"
    PAGE_GOTO = "page_goto"
    PAGE_CLICK = "page_click"
    PAGE_TYPE = "page_type"
    PAGE_FILL = "page_fill"
    PAGE_ASSERT = "page_assert"
    PAGE_SCREENSHOT = "page_screenshot"
    PAGE_EVAL = "page_eval"
    PAGE_WAIT_FOR = "page_wait_for"
    PAGE_TITLE_GET = "page_title_get"
    PAGE_URL_GET = "page_url_get"
    PAGE_TEXT_GET = "page_text_get"
    PAGE_ATTRIBUTE_GET = "page_attribute_get"
    PAGE_VIEWPORT = "page_viewport"
    PAGE_NEW = "page_new"
    PAGE_SWITCH = "page_switch"
    PAGE_CLOSE = "page_close"
    TRACING_START = "tracing_start"
    TRACING_STOP = "tracing_stop"


class _Params(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class NoParams(_Params):
    """For actions that take no arguments."""


class BrowserOpenParams(_Params):
    headless: Optional[bool] = None
    disable_extensions: bool = True
    args: list[str] = Field(default_factory=list)
    lang: Optional[str] = None


class GotoParams(_Params):
    url: AnyUrl
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "domcontentloaded"


class ClickParams(_Params):
    selector: NonEmptyStr
    timeout_ms: TimeoutMs = DEFAULT_TIMEOUT_MS


class TypeParams(_Params):
    selector: NonEmptyStr
    text: str
    delay_ms: Optional[int] = Field(default=None, ge=0)
    clear: bool = False


class FillParams(_Params):
    selector: NonEmptyStr
    value: str


AssertKind = Literal[
    "visible",
    "hidden",
    "text_contains",
    "count_is",
    "title_is",
    "title_contains",
    "url_contains",
    "attribute_is",
    "value_is",
]


class AssertParams(_Params):
    kind: AssertKind = "visible"
    # title_* and url_contains ignore the selector
    selector: str
    text: Optional[str] = None
    count: Optional[int] = None
    name: Optional[str] = None
    timeout_ms: TimeoutMs = DEFAULT_TIMEOUT_MS


class ScreenshotParams(_Params):
    full_page: bool = False


class EvalParams(_Params):
    expression: NonEmptyStr


class WaitForParams(_Params):
    selector: NonEmptyStr
    state: Literal["visible", "hidden", "attached", "detached"] = "visible"
    timeout_ms: TimeoutMs = DEFAULT_TIMEOUT_MS


class SelectorParams(_Params):
    selector: NonEmptyStr
    timeout_ms: TimeoutMs = DEFAULT_TIMEOUT_MS


class AttributeParams(_Params):
    selector: NonEmptyStr
    name: NonEmptyStr
    timeout_ms: TimeoutMs = DEFAULT_TIMEOUT_MS


class ViewportParams(_Params):
    width: Annotated[int, Field(gt=0)]
    height: Annotated[int, Field(gt=0)]


class PageNewParams(_Params):
    id: Optional[NonEmptyStr] = None


class PageSwitchParams(_Params):
    id: NonEmptyStr


class PageCloseParams(_Params):
    id: Optional[NonEmptyStr] = None


class TracingStartParams(_Params):
    screenshots: bool = True
    snapshots: bool = True
    sources: bool = False


class TracingStopParams(_Params):
    path: Optional[str] = None
