"""Scraper package — fetch strategies, extraction and Markdown normalisation."""

from docs_cache.scraper.extractor import extract_content
from docs_cache.scraper.markdown import clean, to_markdown
from docs_cache.scraper.scheduler import RunMode, Scheduler
from docs_cache.scraper.strategies import STRATEGIES, FetchStrategy, register_strategy

__all__ = [
    "STRATEGIES",
    "FetchStrategy",
    "RunMode",
    "Scheduler",
    "clean",
    "extract_content",
    "register_strategy",
    "to_markdown",
]
