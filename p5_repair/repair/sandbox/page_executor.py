"""
Page executor - runs a document in headless Chromium and reports errors.

This is the page-execution oracle: the repair passes only see
``execute(html) -> List[ErrorEvent]``. Each call owns a fresh temporary
file and a fresh browser, both released on every exit path.

Features:
- Load via file:// URL until network idle (bounded by a timeout)
- Fixed settle delay so setup()/draw() and shader compiles can throw
- Captures uncaught page errors, console output and failed requests
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from p5_repair.core.config import settings

from ..contracts.events import ErrorEvent, EventType

logger = logging.getLogger("p5_repair.repair.sandbox")


class PageExecutor(ABC):
    """
    Abstract page-execution oracle.

    Implementations never raise: a page that cannot be loaded or observed
    yields an empty event list.
    """

    @abstractmethod
    async def execute(self, html: str, settle_ms: Optional[int] = None) -> List[ErrorEvent]:
        """
        Execute ``html`` and collect error events.

        Args:
            html: Full document text
            settle_ms: Override the post-load quiescence delay

        Returns:
            Events in the order they were observed
        """
        pass


class PlaywrightPageExecutor(PageExecutor):
    """
    Playwright-backed executor.

    Usage:
        executor = PlaywrightPageExecutor()
        events = await executor.execute(html)
        for event in events:
            print(event.type.value, event.message)
    """

    def __init__(
        self,
        timeout_ms: Optional[int] = None,
        settle_ms: Optional[int] = None,
        browser_args: Optional[Sequence[str]] = None,
    ):
        """
        Args:
            timeout_ms: Maximum wait for the page load
            settle_ms: Default post-load quiescence delay
            browser_args: Chromium command-line flags
        """
        self.timeout_ms = timeout_ms or settings.PAGE_LOAD_TIMEOUT_MS
        self.settle_ms = settle_ms if settle_ms is not None else settings.PAGE_SETTLE_MS
        self.browser_args = list(browser_args if browser_args is not None else settings.BROWSER_ARGS)

    async def execute(self, html: str, settle_ms: Optional[int] = None) -> List[ErrorEvent]:
        settle = self.settle_ms if settle_ms is None else settle_ms
        fd, temp_path = tempfile.mkstemp(prefix="_p5_repair_", suffix=".html")

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(html)
            return await self._run(Path(temp_path).resolve().as_uri(), settle)
        except Exception as e:
            logger.error(f"Page execution failed: {e}")
            return []
        finally:
            try:
                os.unlink(temp_path)
            except OSError:
                pass

    async def _run(self, url: str, settle_ms: int) -> List[ErrorEvent]:
        from playwright.async_api import async_playwright

        events: List[ErrorEvent] = []

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True, args=self.browser_args)
            try:
                page = await browser.new_page()

                page.on("pageerror", lambda error: events.append(self._page_error(error)))
                page.on("console", lambda msg: events.append(self._console(msg)))
                page.on("requestfailed", lambda request: events.append(self._request_failed(request)))

                await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
                await page.wait_for_timeout(settle_ms)
            finally:
                await browser.close()

        logger.info(f"Page run captured {len(events)} events")
        return events

    @staticmethod
    def _page_error(error) -> ErrorEvent:
        name = getattr(error, "name", None) or ""
        message = getattr(error, "message", None) or str(error)
        if name and not message.startswith(name):
            message = f"{name}: {message}"
        return ErrorEvent(
            type=EventType.PAGE_ERROR,
            message=message,
            stack=getattr(error, "stack", None),
        )

    @staticmethod
    def _console(msg) -> ErrorEvent:
        event_type = EventType.CONSOLE_ERROR if msg.type == "error" else EventType.CONSOLE_MESSAGE
        return ErrorEvent(type=event_type, message=msg.text)

    @staticmethod
    def _request_failed(request) -> ErrorEvent:
        return ErrorEvent(
            type=EventType.REQUEST_FAILED,
            message=request.failure or "request failed",
            url=request.url,
        )
