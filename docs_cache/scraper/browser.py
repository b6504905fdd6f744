"""Shared headless-browser session for rendered-page fetches.

One :class:`BrowserSession` lives for a whole run.  Chromium is launched on
the first :meth:`BrowserSession.render` call, never before, and every render
gets its own page that is closed on all exit paths.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from docs_cache.config import settings

logger = logging.getLogger(__name__)


@dataclass
class RenderedPage:
    """The DOM of a page after client-side rendering settled."""

    url: str
    title: str
    html: str


class BrowserSession:
    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = settings.request_timeout if timeout is None else timeout
        self._playwright = None
        self._browser = None
        self._lock = asyncio.Lock()

    async def _ensure_started(self) -> None:
        # Concurrent first renders must not launch two browsers.
        async with self._lock:
            if self._browser is not None:
                return
            # Imported lazily so runs without rendered pages never need a browser.
            from playwright.async_api import async_playwright  # noqa: PLC0415

            logger.debug("Launching headless Chromium")
            try:
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(headless=True)
            except Exception:
                logger.error("Failed to launch the browser", exc_info=True)
                await self.close()
                raise

    async def render(self, url: str) -> RenderedPage:
        """Navigate to *url*, wait for network idle and return the DOM.

        Raises:
            playwright.async_api.Error: Navigation failed or timed out.
        """
        await self._ensure_started()
        assert self._browser is not None
        page = await self._browser.new_page(user_agent=settings.user_agent)
        try:
            logger.debug("Rendering %s", url)
            await page.goto(url, wait_until="networkidle", timeout=int(self.timeout * 1000))
            title = await page.title()
            html = await page.content()
            return RenderedPage(url=url, title=title, html=html)
        finally:
            await page.close()

    async def close(self) -> None:
        """Shut down the browser engine; safe to call when never started."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
