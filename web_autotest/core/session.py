"""
Browser session: the explicit browser/page state every action runs against.

A session wraps one BrowserDriver and tracks the logical pages (tabs)
opened through it, keyed by page id, plus which one is current. It is
created empty, filled by `open()` and emptied by `close()`.

One run owns a session at a time; there is no locking. Concurrent suites
must each use their own session or be serialized by the caller.
"""
# @file purpose: Hold browser/page state for one run.

from __future__ import annotations

import base64
import logging
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .errors import ActionExecutionError, BrowserNotOpenError
from ..io.driver import BrowserDriver

logger = logging.getLogger(__name__)

# Flags passed to Chromium when extensions are disabled
NO_EXTENSION_ARGS = (
    "--disable-extensions",
    "--disable-component-extensions-with-background-pages",
    "--disable-features=ExtensionsToolbarMenu",
)


def _default_driver() -> BrowserDriver:
    from ..io.playwright_driver import PlaywrightDriver  # lazy: keeps playwright optional in tests

    return PlaywrightDriver()


class BrowserSession:
    def __init__(
        self,
        driver: Optional[BrowserDriver] = None,
        *,
        driver_factory: Callable[[], BrowserDriver] = _default_driver,
    ) -> None:
        self._driver = driver
        self._driver_factory = driver_factory
        self._pages: Dict[str, Any] = {}
        self._current_id: Optional[str] = None
        self._page_counter = 1

    # ---------------- state ----------------

    @property
    def driver(self) -> BrowserDriver:
        if self._driver is None:
            self._driver = self._driver_factory()
        return self._driver

    @property
    def is_open(self) -> bool:
        return self._driver is not None and self._driver.running

    @property
    def current_page_id(self) -> Optional[str]:
        return self._current_id

    @property
    def page_ids(self) -> list[str]:
        return list(self._pages)

    @property
    def page(self) -> Any:
        """The current page; raises BrowserNotOpenError when there is none."""
        if not self.is_open or self._current_id is None:
            raise BrowserNotOpenError()
        return self._pages[self._current_id]

    def _next_page_id(self) -> str:
        page_id = f"page{self._page_counter}"
        self._page_counter += 1
        return page_id

    # ---------------- lifecycle ----------------

    async def open(
        self,
        *,
        headless: bool = True,
        disable_extensions: bool = True,
        lang: str | None = None,
        args: list[str] | None = None,
    ) -> str:
        """(Re)launch the browser with one fresh page; returns its id."""
        if self.is_open:
            await self.close()

        launch_args: list[str] = []
        if disable_extensions:
            launch_args.extend(NO_EXTENSION_ARGS)
        if lang:
            launch_args.append(f"--lang={lang}")
        if args:
            launch_args.extend(args)

        await self.driver.start(headless=headless, args=launch_args)
        page = await self.driver.new_page()
        self._pages.clear()
        page_id = self._next_page_id()
        self._pages[page_id] = page
        self._current_id = page_id
        logger.info("browser opened (headless=%s, page=%s)", headless, page_id)
        return page_id

    async def close(self) -> None:
        if not self.is_open:
            return
        try:
            await self.driver.stop()
        finally:
            self._pages.clear()
            self._current_id = None
            logger.info("browser closed")

    # ---------------- tabs ----------------

    async def new_page(self, page_id: str | None = None) -> str:
        if not self.is_open:
            raise BrowserNotOpenError()
        page =await self.driver.new_page()
        page_id = page_id or self._next_page_id()
        self._pages[page_id] = page
        self._current_id = page_id
        return page_id

    def switch(self, page_id: str) -> None:
        if page_id not in self._pages:
            raise ActionExecutionError("page_switch", f"unknown page id: {page_id}")
        self._current_id = page_id

    async def close_page(self, page_id: str | None = None) -> str:
        page_id = page_id or self._current_id
        if not page_id:
            raise ActionExecutionError("page_close", "no page to close")
        page = self._pages.get(page_id)
        if page is None:
            raise ActionExecutionError("page_close", f"unknown page id: {page_id}")
        await self.driver.close_page(page)
        del self._pages[page_id]
        if self._current_id == page_id:
            # dicts keep insertion order: fall back to the oldest remaining tab
            self._current_id = next(iter(self._pages), None)
        return page_id

    # ---------------- capture ----------------

    async def screenshot(self, path: str | None = None, *, full_page: bool = False) -> bytes:
        return await self.driver.screenshot(self.page, path, full_page=full_page)

    async def start_tracing(
        self, *, screenshots: bool = True, snapshots: bool = True, sources: bool = False
    ) -> None:
        await self.driver.tracing_start(
            self.page, screenshots=screenshots, snapshots=snapshots, sources=sources
        )

    async def discard_tracing(self) -> None:
        await self.driver.tracing_stop(self.page, None)

    async def stop_tracing(self, path: str | None = None) -> Optional[str]:
        """
        Stop tracing. With a path the archive is saved there and None is
        returned; without one the archive is returned base64-encoded.
        """
        if path is not None:
            await self.driver.tracing_stop(self.page, path)
            return None
        with tempfile.TemporaryDirectory() as tmp:
            zip_path = Path(tmp) / "trace.zip"
            await self.driver.tracing_stop(self.page, str(zip_path))
            return base64.b64encode(zip_path.read_bytes()).decode("ascii")
