"""Playwright browser lifecycle for a domagent run.

Launches Chromium, opens one page at the configured viewport, optionally
navigates to a start URL, and hands out a PlaywrightElementService bound to
that page.
"""

from __future__ import annotations

import logging
from typing import Any

from domagent.engine.page_service import PlaywrightElementService
from domagent.models import DEFAULT_VIEWPORT

logger = logging.getLogger("domagent.engine.browser_session")


class BrowserSession:
    """Owns the Playwright browser, context and page.

    Usage::

        async with BrowserSession(start_url="https://example.com") as session:
            results = await TaskSequencer(session.service).run_sequence(tasks, model_config)
    """

    def __init__(
        self,
        start_url: str = "",
        headless: bool = True,
        viewport: tuple[int, int] = DEFAULT_VIEWPORT,
    ) -> None:
        self._start_url = start_url
        self._headless = headless
        self._viewport = viewport

        # Managed lifecycle -- set by start()/stop()
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None
        self._service: PlaywrightElementService | None = None

    @property
    def service(self) -> PlaywrightElementService:
        if self._service is None:
            raise RuntimeError("BrowserSession.start() has not been called")
        return self._service

    async def start(self) -> None:
        """Launch the browser and open the page. Call once before using ``service``."""
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._headless)
        self._context = await self._browser.new_context(
            viewport={"width": self._viewport[0], "height": self._viewport[1]},
        )
        self._page = await self._context.new_page()
        if self._start_url:
            logger.info("Navigating to %s", self._start_url)
            await self._page.goto(self._start_url, wait_until="domcontentloaded")
        self._service = PlaywrightElementService(self._page)

    async def stop(self) -> None:
        """Close the page, browser and Playwright.  Safe to call more than once."""
        for name, closer in (
            ("context", self._context and self._context.close),
            ("browser", self._browser and self._browser.close),
            ("playwright", self._playwright and self._playwright.stop),
        ):
            if not closer:
                continue
            try:
                await closer()
            except Exception as exc:
                logger.debug("Ignoring error while closing %s: %s", name, exc)
        self._context = None
        self._browser = None
        self._playwright = None
        self._page = None
        self._service = None

    async def __aenter__(self) -> BrowserSession:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
