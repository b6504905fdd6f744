"""Fetch strategies: one per registry ``type``, all with the same contract.

``await strategy.fetch(source)`` always returns a :class:`FetchResult` and, on
success, has written ``<name>.md`` into the cache.  Any exception raised while
acquiring or converting is turned into a failed result; a previously cached
file is never touched by a failed attempt.

New strategies subclass :class:`FetchStrategy`, implement :meth:`build` and
register themselves with :func:`register_strategy`.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, ClassVar, Dict, Optional, Type

import httpx
from bs4 import BeautifulSoup

from docs_cache.cache.models import FetchResult, FetchType, Source
from docs_cache.cache.writer import CacheWriter, utc_timestamp
from docs_cache.errors import FetchError, HttpError
from docs_cache.scraper.browser import BrowserSession
from docs_cache.scraper.extractor import extract_content, extract_title
from docs_cache.scraper.links import insert_provenance, rewrite_relative_links
from docs_cache.scraper.markdown import clean, to_markdown

logger = logging.getLogger(__name__)

STRATEGIES: Dict[FetchType, Type["FetchStrategy"]] = {}


def register_strategy(fetch_type: FetchType) -> Callable[[Type["FetchStrategy"]], Type["FetchStrategy"]]:
    """Class decorator binding a strategy class to a registry ``type`` tag."""

    def _register(cls: Type[FetchStrategy]) -> Type[FetchStrategy]:
        STRATEGIES[fetch_type] = cls
        return cls

    return _register


def strategy_for(fetch_type: FetchType) -> Type["FetchStrategy"]:
    try:
        return STRATEGIES[fetch_type]
    except KeyError:
        raise FetchError(f"No fetch strategy registered for type {fetch_type.value!r}") from None


async def http_get_text(client: httpx.AsyncClient, url: str) -> str:
    """GET *url* and return the body.

    Raises:
        HttpError: The response status is not 2xx.
    """
    response = await client.get(url)
    if not response.is_success:
        raise HttpError(url, response.status_code, response.reason_phrase)
    return response.text


class FetchStrategy(ABC):
    """Shared fetch contract and failure policy."""

    #: Whether :meth:`build` needs the shared :class:`BrowserSession`.
    needs_browser: ClassVar[bool] = False

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        writer: CacheWriter,
        browser: Optional[BrowserSession] = None,
    ) -> None:
        self.client = client
        self.writer = writer
        self.browser = browser

    @abstractmethod
    async def build(self, source: Source) -> str:
        """Acquire *source* and return the finished Markdown document."""

    async def fetch(self, source: Source) -> FetchResult:
        started = time.monotonic()
        logger.info("Fetching %s (%s) from %s", source.name, source.type.value, source.url)
        try:
            content = await self.build(source)
            await self.writer.persist(source.name, content)
        except Exception as e:
            duration = time.monotonic() - started
            kept = self.writer.has_cached(source.name)
            logger.warning(
                "Fetch failed for %s: %s%s",
                source.name,
                e,
                " (keeping existing cache)" if kept else "",
            )
            return FetchResult(
                name=source.name,
                success=False,
                error=str(e) or type(e).__name__,
                duration=duration,
                used_existing_cache=kept,
            )

        duration = time.monotonic() - started
        logger.info("Fetched %s in %.2fs", source.name, duration)
        return FetchResult(name=source.name, success=True, duration=duration)


@register_strategy(FetchType.DIRECT_MARKDOWN)
class DirectMarkdownStrategy(FetchStrategy):
    """Markdown served as-is: anchor relative links, add provenance."""

    async def build(self, source: Source) -> str:
        text = await http_get_text(self.client, source.url)
        text = rewrite_relative_links(text, source.url)
        return insert_provenance(text, source.url, utc_timestamp())


@register_strategy(FetchType.HTML)
class HtmlStrategy(FetchStrategy):
    """Server-rendered HTML converted wholesale to Markdown."""

    async def build(self, source: Source) -> str:
        html = await http_get_text(self.client, source.url)
        soup = BeautifulSoup(html, "html.parser")
        title = extract_title(html)
        body = soup.body if soup.body is not None else soup
        markdown = to_markdown(str(body))
        return clean(markdown, title or source.name, source.url)


@register_strategy(FetchType.RENDERED_PAGE)
class RenderedPageStrategy(FetchStrategy):
    """Client-rendered pages: render in the browser, extract, convert."""

    needs_browser = True

    async def build(self, source: Source) -> str:
        if self.browser is None:
            raise FetchError(f"No browser session available for rendered page {source.name!r}")
        page = await self.browser.render(source.url)
        fragment = extract_content(page.html, selectors=source.content_selectors or None)
        markdown = to_markdown(fragment)
        return clean(markdown, page.title or source.name, source.url)
