"""High-level runner for a docs-cache update.

``run_update`` wires the registry, the scheduler, the version probe and the
metadata write together so the CLI (and tests) can drive a complete run with a
single call.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

import httpx

from docs_cache.cache.models import UpdateReport
from docs_cache.cache.registry import load_registry, select_sources
from docs_cache.cache.writer import CacheWriter
from docs_cache.config import settings
from docs_cache.scraper.browser import BrowserSession
from docs_cache.scraper.scheduler import RunMode, Scheduler, build_client
from docs_cache.version import detect_upstream_version

logger = logging.getLogger(__name__)


async def run_update(
    source_name: Optional[str] = None,
    mode: RunMode = RunMode.CONCURRENT,
    *,
    cache_dir: Optional[Path] = None,
    client: Optional[httpx.AsyncClient] = None,
    browser_factory: Callable[[], BrowserSession] = BrowserSession,
) -> UpdateReport:
    """Refresh the cache for every source (or just *source_name*).

    Pipeline:
        1. Load and validate the registry.  ``ConfigError`` and
           ``NotFoundError`` propagate before anything is fetched.
        2. Run every selected source through its strategy.
        3. Probe the upstream changelog for the current version.
        4. Once every source has finished, merge the version and a fresh
           timestamp into the registry's ``cache`` block, exactly once.

    Returns:
        The :class:`UpdateReport` with one result per selected source.
    """
    cache_dir = Path(cache_dir or settings.cache_dir)
    writer = CacheWriter(cache_dir)
    sources, _metadata = load_registry(writer.registry_path)
    selected = select_sources(sources, source_name)

    owns_client = client is None
    client = build_client() if owns_client else client
    try:
        scheduler = Scheduler(writer, client=client, browser_factory=browser_factory)
        results = await scheduler.run(selected, mode)
        report = UpdateReport(results=results)

        report.detected_version = await detect_upstream_version(client)
        if not report.succeeded:
            logger.warning("No source succeeded; previously cached files were kept")
        await asyncio.to_thread(writer.update_metadata, report.detected_version)
        report.metadata_updated = True
    finally:
        if owns_client:
            await client.aclose()

    return report
