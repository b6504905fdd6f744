"""Dispatches each source to its strategy, concurrently or one at a time."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

import httpx

from docs_cache.cache.models import FetchResult, FetchType, Source
from docs_cache.cache.writer import CacheWriter
from docs_cache.config import settings
from docs_cache.scraper.browser import BrowserSession
from docs_cache.scraper.strategies import FetchStrategy, strategy_for

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    CONCURRENT = "concurrent"
    SEQUENTIAL = "sequential"


def build_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """HTTP client shared by every strategy in a run."""
    return httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout if timeout is None else timeout,
        follow_redirects=True,
    )


class Scheduler:
    """Runs a batch of sources and returns their results in request order.

    The browser session is only created when at least one requested source
    needs it, and it is closed when the run ends, however it ends.
    """

    def __init__(
        self,
        writer: CacheWriter,
        *,
        client: Optional[httpx.AsyncClient] = None,
        browser_factory: Callable[[], BrowserSession] = BrowserSession,
    ) -> None:
        self.writer = writer
        self._client = client
        self._browser_factory = browser_factory

    async def run(self, sources: Sequence[Source], mode: RunMode = RunMode.CONCURRENT) -> List[FetchResult]:
        needs_browser = any(strategy_for(s.type).needs_browser for s in sources)
        browser = self._browser_factory() if needs_browser else None
        owns_client = self._client is None
        client = build_client() if owns_client else self._client

        try:
            strategies: dict[FetchType, FetchStrategy] = {}
            for source in sources:
                if source.type not in strategies:
                    strategies[source.type] = strategy_for(source.type)(
                        client=client, writer=self.writer, browser=browser
                    )

            logger.info("Fetching %d source(s) mode=%s", len(sources), RunMode(mode).value)
            if RunMode(mode) is RunMode.SEQUENTIAL:
                results = []
                for source in sources:
                    results.append(await strategies[source.type].fetch(source))
                return results

            # gather() keeps argument order regardless of completion order.
            return list(await asyncio.gather(*(strategies[s.type].fetch(s) for s in sources)))
        finally:
            if browser is not None:
                await browser.close()
            if owns_client:
                await client.aclose()
