"""Cache-integrity check: every registered source has a usable cached file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from docs_cache.cache.registry import load_registry
from docs_cache.cache.writer import CacheWriter


@dataclass
class CacheIssue:
    name: str
    problem: str


def check_cache(cache_dir: Optional[Path] = None) -> List[CacheIssue]:
    """Return one :class:`CacheIssue` per problem found; empty means healthy.

    Raises:
        ConfigError: The registry itself cannot be loaded.
    """
    writer = CacheWriter(cache_dir)
    sources, metadata = load_registry(writer.registry_path)

    issues: List[CacheIssue] = []
    for source in sources:
        path = writer.path_for(source.name)
        if not path.is_file():
            issues.append(CacheIssue(source.name, f"missing {path.name}"))
        elif path.stat().st_size == 0:
            issues.append(CacheIssue(source.name, f"{path.name} is empty"))

    if metadata.last_updated is None:
        issues.append(CacheIssue("cache", "lastUpdated is not set; the cache was never refreshed"))
    return issues
