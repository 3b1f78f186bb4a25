"""
Browser driver protocol (abstraction).

This Protocol defines the minimal browser control surface that action
implementations and the browser session rely on. It allows plugging
different backends (Playwright today, an in-memory fake in tests)
without changing actions.

Notes:
- `page` is an opaque handle returned by `new_page()`. In the Playwright
  implementation it is a `Page` living in one shared BrowserContext.
- `timeout_ms=None` means the driver's default timeout.
"""

from __future__ import annotations

from typing import Any, Literal, Protocol

WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]
ElementState = Literal["visible", "hidden", "attached", "detached"]


class BrowserDriver(Protocol):
    # -------- lifecycle --------
    @property
    def running(self) -> bool: ...
    async def start(self, *, headless: bool = True, args: list[str] | None = None) -> None: ...
    async def stop(self) -> None: ...
    async def new_page(self) -> Any: ...
    async def close_page(self, page: Any) -> None: ...

    # -------- navigation & waits --------
    async def goto(
        self, page: Any, url: str, *, wait_until: WaitUntil = "domcontentloaded"
    ) -> None: ...
    async def wait_for(
        self,
        page: Any,
        selector: str,
        *,
        state: ElementState = "visible",
        timeout_ms: int | None = None,
    ) -> None: ...
    async def wait_for_text(
        self, page: Any, selector: str, text: str, *, timeout_ms: int | None = None
    ) -> None: ...

    # -------- interactions --------
    async def click(self, page: Any, selector: str, *, timeout_ms: int | None = None) -> None: ...
    async def type_text(
        self,
        page: Any,
        selector: str,
        text: str,
        *,
        delay_ms: int | None = None,
        clear_first: bool = False,
    ) -> None: ...
    async def fill(self, page: Any, selector: str, value: str) -> None: ...
    async def set_viewport(self, page: Any, width: int, height: int) -> None: ...

    # -------- queries --------
    async def title(self, page: Any) -> str: ...
    async def url(self, page: Any) -> str: ...
    async def count(self, page: Any, selector: str) -> int: ...
    async def text_content(
        self, page: Any, selector: str, *, timeout_ms: int | None = None
    ) -> str | None: ...
    async def get_attribute(
        self, page: Any, selector: str, name: str, *, timeout_ms: int | None = None
    ) -> str | None: ...
    async def input_value(
        self, page: Any, selector: str, *, timeout_ms: int | None = None
    ) -> str: ...
    async def evaluate(self, page: Any, expression: str) -> Any: ...

    # -------- utilities --------
    async def screenshot(
        self, page: Any, path: str | None = None, *, full_page: bool = False
    ) -> bytes: ...
    async def tracing_start(
        self, page: Any, *, screenshots: bool = True, snapshots: bool = True, sources: bool = False
    ) -> None: ...
    async def tracing_stop(self, page: Any, path: str | None = None) -> None: ...
