"""
Built-in action implementations bound to a BrowserSession:
- browser_open / browser_close
- page_goto / page_click / page_type / page_fill / page_viewport
- page_assert / page_wait_for
- page_title_get / page_url_get / page_text_get / page_attribute_get / page_eval
- page_screenshot / tracing_start / tracing_stop
- page_new / page_switch / page_close (tabs)

Each action:
  1) Expects a BrowserSession + validated params (Pydantic v2)
  2) Returns ActionResult, or raises ActionExecutionError on failure

Importing this module registers every action on `default_registry`.
"""

# @file purpose: Implement and register built-in actions.
from __future__ import annotations

import base64
import json
from contextlib import contextmanager
from typing import Any, Iterator

from web_autotest.core.errors import ActionExecutionError, AutotestError
from web_autotest.core.registry import action, default_registry
from web_autotest.core.result import ActionResult
from web_autotest.core.session import BrowserSession
from web_autotest.core.settings import settings

from .params import (
    ActionName,
    AssertParams,
    AttributeParams,
    BrowserOpenParams,
    ClickParams,
    EvalParams,
    FillParams,
    GotoParams,
    NoParams,
    PageCloseParams,
    PageNewParams,
    PageSwitchParams,
    ScreenshotParams,
    SelectorParams,
    TracingStartParams,
    TracingStopParams,
    TypeParams,
    ViewportParams,
    WaitForParams,
)


@contextmanager
def _failing_as(name: str, message: str, **context: Any) -> Iterator[None]:
    """Re-raise driver/Playwright errors as ActionExecutionError."""
    try:
        yield
    except AutotestError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ActionExecutionError(action=name, message=f"{message}: {e}", cause=e, **context) from e


# ---------------- browser lifecycle ----------------


@action(ActionName.BROWSER_OPEN, params_model=BrowserOpenParams)
async def browser_open(session: BrowserSession, params: BrowserOpenParams) -> ActionResult:
    """Launch Chromium (closing a running one first)."""
    headless = settings.headless if params.headless is None else params.headless
    with _failing_as("browser_open", "failed to launch browser"):
        page_id = await session.open(
            headless=headless,
            disable_extensions=params.disable_extensions,
            lang=params.lang,
            args=params.args,
        )
    return ActionResult.success(f"browser opened (headless={headless})", page=page_id)


@action(ActionName.BROWSER_CLOSE, params_model=NoParams)
async def browser_close(session: BrowserSession, params: NoParams) -> ActionResult:
    """Close the browser and forget all pages."""
    with _failing_as("browser_close", "failed to close browser"):
        await session.close()
    return ActionResult.success("browser closed")


# ---------------- navigation & interaction ----------------


@action(ActionName.PAGE_GOTO, params_model=GotoParams)
async def page_goto(session: BrowserSession, params: GotoParams) -> ActionResult:
    """Navigate the current page to a URL."""
    url = str(params.url)
    with _failing_as("page_goto", "failed to open url", url=url):
        await session.driver.goto(session.page, url, wait_until=params.wait_until)
    return ActionResult.success(f"navigated: {url}", url=url)


@action(ActionName.PAGE_CLICK, params_model=ClickParams)
async def page_click(session: BrowserSession, params: ClickParams) -> ActionResult:
    """Click the element matching a selector."""
    with _failing_as("page_click", "failed to click element", selector=params.selector):
        await session.driver.click(session.page, params.selector, timeout_ms=params.timeout_ms)
    return ActionResult.success(f"clicked: {params.selector}", selector=params.selector)


@action(ActionName.PAGE_TYPE, params_model=TypeParams)
async def page_type(session: BrowserSession, params: TypeParams) -> ActionResult:
    """Type text key by key (optionally clearing the field first)."""
    with _failing_as("page_type", "failed to input text", selector=params.selector):
        await session.driver.type_text(
            session.page,
            params.selector,
            params.text,
            delay_ms=params.delay_ms,
            clear_first=params.clear,
        )
    return ActionResult.success(f"typed into {params.selector}", selector=params.selector)


@action(ActionName.PAGE_FILL, params_model=FillParams)
async def page_fill(session: BrowserSession, params: FillParams) -> ActionResult:
    """Replace the value of an input."""
    with _failing_as("page_fill", "failed to fill element", selector=params.selector):
        await session.driver.fill(session.page, params.selector, params.value)
    return ActionResult.success(f"filled {params.selector}", selector=params.selector)


@action(ActionName.PAGE_VIEWPORT, params_model=ViewportParams)
async def page_viewport(session: BrowserSession, params: ViewportParams) -> ActionResult:
    """Resize the viewport of the current page."""
    with _failing_as("page_viewport", "failed to set viewport"):
        await session.driver.set_viewport(session.page, params.width, params.height)
    return ActionResult.success(f"viewport {params.width}x{params.height}")


@action(ActionName.PAGE_WAIT_FOR, params_model=WaitForParams)
async def page_wait_for(session: BrowserSession, params: WaitForParams) -> ActionResult:
    """Wait until a selector reaches a state."""
    with _failing_as(
        "page_wait_for", f"element did not become {params.state} in time", selector=params.selector
    ):
        await session.driver.wait_for(
            session.page, params.selector, state=params.state, timeout_ms=params.timeout_ms
        )
    return ActionResult.success(f"waited for {params.selector}", selector=params.selector)


# ---------------- assertions ----------------


def _mismatch(message: str, params: AssertParams) -> ActionExecutionError:
    return ActionExecutionError(
        action="page_assert", message=message, details={"kind": params.kind}
    )


@action(ActionName.PAGE_ASSERT, params_model=AssertParams)
async def page_assert(session: BrowserSession, params: AssertParams) -> ActionResult:
    """Assert visibility, text, count, title, URL, attribute or value."""
    page = session.page
    driver = session.driver
    kind = params.kind

    with _failing_as("page_assert", f"assert {kind} failed", selector=params.selector):
        if kind in ("visible", "hidden"):
            await driver.wait_for(page, params.selector, state=kind, timeout_ms=params.timeout_ms)
            return ActionResult.success(f"assert {kind}: {params.selector}")

        if kind == "text_contains":
            if not params.text:
                raise _mismatch("text_contains requires a 'text' argument", params)
            await driver.wait_for_text(
                page, params.selector, params.text, timeout_ms=params.timeout_ms
            )
            return ActionResult.success(f"assert text contains on {params.selector}")

        if kind == "count_is":
            count = await driver.count(page, params.selector)
            if count != params.count:
                raise _mismatch(f"count {count} != {params.count}", params)
            return ActionResult.success(f"assert count {count}")

        if kind in ("title_is", "title_contains"):
            title = await driver.title(page)
            if kind == "title_is" and title != params.text:
                raise _mismatch(f"title '{title}' != '{params.text}'", params)
            if kind == "title_contains" and (not params.text or params.text not in title):
                raise _mismatch(f"title '{title}' does not contain '{params.text}'", params)
            return ActionResult.success(f"assert {kind} '{params.text}'")

        if kind == "url_contains":
            url = await driver.url(page)
            if not params.text or params.text not in url:
                raise _mismatch(f"url '{url}' does not contain '{params.text}'", params)
            return ActionResult.success(f"assert url contains '{params.text}'")

        if kind == "attribute_is":
            if not params.name:
                raise _mismatch("attribute_is requires a 'name' argument", params)
            value = await driver.get_attribute(
                page, params.selector, params.name, timeout_ms=params.timeout_ms
            )
            if value != params.text:
                raise _mismatch(
                    f"attribute '{params.name}' = '{value}' != '{params.text}'", params
                )
            return ActionResult.success(f"assert attribute '{params.name}' is '{params.text}'")

        # value_is
        value = await driver.input_value(page, params.selector, timeout_ms=params.timeout_ms)
        if value != params.text:
            raise _mismatch(f"value '{value}' != '{params.text}'", params)
        return ActionResult.success(f"assert value is '{params.text}'")


# ---------------- queries ----------------


@action(ActionName.PAGE_TITLE_GET, params_model=NoParams)
async def page_title_get(session: BrowserSession, params: NoParams) -> ActionResult:
    """Return the page title."""
    with _failing_as("page_title_get", "failed to read title"):
        return ActionResult.with_output(await session.driver.title(session.page))


@action(ActionName.PAGE_URL_GET, params_model=NoParams)
async def page_url_get(session: BrowserSession, params: NoParams) -> ActionResult:
    """Return the page URL."""
    with _failing_as("page_url_get", "failed to read url"):
        return ActionResult.with_output(await session.driver.url(session.page))


@action(ActionName.PAGE_TEXT_GET, params_model=SelectorParams)
async def page_text_get(session: BrowserSession, params: SelectorParams) -> ActionResult:
    """Return the textContent of the first match."""
    with _failing_as("page_text_get", "failed to extract text", selector=params.selector):
        text = await session.driver.text_content(
            session.page, params.selector, timeout_ms=params.timeout_ms
        )
    return ActionResult.with_output(text or "", selector=params.selector, empty=text is None)


@action(ActionName.PAGE_ATTRIBUTE_GET, params_model=AttributeParams)
async def page_attribute_get(session: BrowserSession, params: AttributeParams) -> ActionResult:
    """Return an attribute of the first match."""
    with _failing_as("page_attribute_get", "failed to read attribute", selector=params.selector):
        value = await session.driver.get_attribute(
            session.page, params.selector, params.name, timeout_ms=params.timeout_ms
        )
    return ActionResult.with_output(value or "", selector=params.selector, name=params.name)


@action(ActionName.PAGE_EVAL, params_model=EvalParams)
async def page_eval(session: BrowserSession, params: EvalParams) -> ActionResult:
    """Evaluate a JS expression and return its JSON serialization."""
    with _failing_as("page_eval", "failed to evaluate expression"):
        result = await session.driver.evaluate(session.page, params.expression)
    return ActionResult.with_output(json.dumps(result, ensure_ascii=False))


# ---------------- capture ----------------


@action(ActionName.PAGE_SCREENSHOT, params_model=ScreenshotParams)
async def page_screenshot(session: BrowserSession, params: ScreenshotParams) -> ActionResult:
    """Screenshot the current page as base64 PNG."""
    with _failing_as("page_screenshot", "failed to take screenshot"):
        png = await session.screenshot(full_page=params.full_page)
    return ActionResult.with_output(
        base64.b64encode(png).decode("ascii"), mime_type="image/png"
    )


@action(ActionName.TRACING_START, params_model=TracingStartParams)
async def tracing_start(session: BrowserSession, params: TracingStartParams) -> ActionResult:
    """Start Playwright tracing on the shared context."""
    with _failing_as("tracing_start", "failed to start tracing"):
        await session.start_tracing(
            screenshots=params.screenshots, snapshots=params.snapshots, sources=params.sources
        )
    return ActionResult.success("tracing started")


@action(ActionName.TRACING_STOP, params_model=TracingStopParams)
async def tracing_stop(session: BrowserSession, params: TracingStopParams) -> ActionResult:
    """Stop tracing and save the zip to `path`, or return it base64-encoded."""
    with _failing_as("tracing_stop", "failed to stop tracing"):
        encoded = await session.stop_tracing(params.path)
    if encoded is None:
        return ActionResult.success(f"trace saved: {params.path}", path=params.path)
    return ActionResult.with_output(encoded, mime_type="application/zip")


# ---------------- tabs ----------------


@action(ActionName.PAGE_NEW, params_model=PageNewParams)
async def page_new(session: BrowserSession, params: PageNewParams) -> ActionResult:
    """Open a new tab and make it current; returns its id."""
    with _failing_as("page_new", "failed to open tab"):
        page_id = await session.new_page(params.id)
    return ActionResult.with_output(page_id)


@action(ActionName.PAGE_SWITCH, params_model=PageSwitchParams)
async def page_switch(session: BrowserSession, params: PageSwitchParams) -> ActionResult:
    """Make another tab current."""
    session.switch(params.id)
    return ActionResult.success(f"switched to {params.id}")


@action(ActionName.PAGE_CLOSE, params_model=PageCloseParams)
async def page_close(session: BrowserSession, params: PageCloseParams) -> ActionResult:
    """Close a tab (default: the current one)."""
    with _failing_as("page_close", "failed to close tab"):
        page_id = await session.close_page(params.id)
    return ActionResult.success(f"closed {page_id}")


# every ActionName must have a handler once this module is imported
default_registry.verify(ActionName)
