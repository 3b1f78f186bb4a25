"""
Playwright-based BrowserDriver implementation.

Conforms to io/driver.py's BrowserDriver Protocol. One driver holds one
Chromium process with a single BrowserContext; every page opened through
`new_page()` shares that context (cookies, storage, tracing).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from ..core.settings import settings

logger = logging.getLogger(__name__)

# Wrapped in a strict-mode function so the expression can be any JS expression
_EVAL_JS = 'expression => Function(`"use strict"; return (${expression});`)()'

_TEXT_CONTAINS_JS = """
([selector, expected]) => {
  const el = document.querySelector(selector);
  return !!el && (el.textContent || "").includes(expected);
}
"""


class PlaywrightDriver:
    """
    A concrete BrowserDriver based on Playwright Chromium.
    - `page` handles in this implementation are Playwright `Page` objects.
    """

    def __init__(
        self,
        *,
        slow_mo_ms: int | None = None,
        default_timeout_ms: int | None = None,
    ) -> None:
        self.slow_mo_ms = settings.slow_mo_ms if slow_mo_ms is None else slow_mo_ms
        self.default_timeout_ms = (
            settings.default_timeout_ms if default_timeout_ms is None else default_timeout_ms
        )

        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    # ---------------- lifecycle ----------------

    @property
    def running(self) -> bool:
        return self._browser is not None

    async def start(self, *, headless: bool = True, args: list[str] | None = None) -> None:
        """Launch Playwright, Chromium and the shared context once."""
        if self._browser is not None:
            return
        pw = await async_playwright().start()
        self._pw = pw
        try:
            self._browser = await pw.chromium.launch(
                headless=headless, slow_mo=self.slow_mo_ms, args=list(args or [])
            )
            self._context = await self._browser.new_context()
            self._context.set_default_timeout(self.default_timeout_ms)
        except Exception:
            await self.stop()
            raise
        logger.debug("chromium launched (headless=%s)", headless)

    async def stop(self) -> None:
        """Close the context, the browser and stop Playwright."""
        try:
            if self._context is not None:
                try:
                    await self._context.close()
                except Exception as e:  # noqa: BLE001
                    logger.warning("closing browser context failed: %s", e)
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._pw is not None:
                await self._pw.stop()
            self._pw = None
            self._browser = None
            self._context = None

    async def new_page(self) -> Page:
        self._ensure_started()
        assert self._context is not None
        return await self._context.new_page()

    async def close_page(self, page: Any) -> None:
        await self._as_page(page).close()

    # ---------------- primitives ----------------

    async def goto(self, page: Any, url: str, *, wait_until: str = "domcontentloaded") -> None:
        await self._as_page(page).goto(url, wait_until=wait_until)

    async def wait_for(
        self,
        page: Any,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: Optional[int] = None,
    ) -> None:
        await self._as_page(page).wait_for_selector(
            selector, state=state, timeout=self._timeout(timeout_ms)
        )

    async def wait_for_text(
        self, page: Any, selector: str, text: str, *, timeout_ms: Optional[int] = None
    ) -> None:
        await self._as_page(page).wait_for_function(
            _TEXT_CONTAINS_JS, arg=[selector, text], timeout=self._timeout(timeout_ms)
        )

    async def click(self, page: Any, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        await self._as_page(page).click(selector, timeout=self._timeout(timeout_ms))

    async def type_text(
        self,
        page: Any,
        selector: str,
        text: str,
        *,
        delay_ms: Optional[int] = None,
        clear_first: bool = False,
    ) -> None:
        p = self._as_page(page)
        if clear_first:
            await p.fill(selector, "")
        await p.type(selector, text, delay=delay_ms or 0)

    async def fill(self, page: Any, selector: str, value: str) -> None:
        await self._as_page(page).fill(selector, value)

    async def set_viewport(self, page: Any, width: int, height: int) -> None:
        await self._as_page(page).set_viewport_size({"width": width, "height": height})

    async def title(self, page: Any) -> str:
        return await self._as_page(page).title()

    async def url(self, page: Any) -> str:
        return self._as_page(page).url

    async def count(self, page: Any, selector: str) -> int:
        return await self._as_page(page).locator(selector).count()

    async def text_content(
        self, page: Any, selector: str, *, timeout_ms: Optional[int] = None
    ) -> Optional[str]:
        p = self._as_page(page)
        to = self._timeout(timeout_ms)
        await p.wait_for_selector(selector, timeout=to)
        return await p.locator(selector).first.text_content(timeout=to)

    async def get_attribute(
        self, page: Any, selector: str, name: str, *, timeout_ms: Optional[int] = None
    ) -> Optional[str]:
        locator = self._as_page(page).locator(selector).first
        to = self._timeout(timeout_ms)
        await locator.wait_for(state="attached", timeout=to)
        return await locator.get_attribute(name, timeout=to)

    async def input_value(
        self, page: Any, selector: str, *, timeout_ms: Optional[int] = None
    ) -> str:
        locator = self._as_page(page).locator(selector).first
        to = self._timeout(timeout_ms)
        await locator.wait_for(state="attached", timeout=to)
        return await locator.input_value(timeout=to)

    async def evaluate(self, page: Any, expression: str) -> Any:
        return await self._as_page(page).evaluate(_EVAL_JS, expression)

    async def screenshot(
        self, page: Any, path: str | None = None, *, full_page: bool = False
    ) -> bytes:
        if path is not None:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        return await self._as_page(page).screenshot(path=path, full_page=full_page, type="png")

    async def tracing_start(
        self, page: Any, *, screenshots: bool = True, snapshots: bool = True, sources: bool = False
    ) -> None:
        await self._as_page(page).context.tracing.start(
            screenshots=screenshots, snapshots=snapshots, sources=sources
        )

    async def tracing_stop(self, page: Any, path: str | None = None) -> None:
        if path is not None:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        await self._as_page(page).context.tracing.stop(path=path)

    # ---------------- internals ----------------

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        return timeout_ms or self.default_timeout_ms

    def _ensure_started(self) -> None:
        if self._browser is None:
            raise RuntimeError("Browser not started. Call start() first.")

    @staticmethod
    def _as_page(page: Any) -> Page:
        if not isinstance(page, Page):
            raise TypeError("page must be a Playwright Page (returned by new_page()).")
        return page
