"""Cache package — registry, models and on-disk writer."""

from docs_cache.cache.models import (
    CacheMetadata,
    FetchResult,
    FetchType,
    Source,
    UpdateBehavior,
    UpdateReport,
)
from docs_cache.cache.registry import load_registry, select_sources
from docs_cache.cache.writer import CacheWriter

__all__ = [
    "CacheMetadata",
    "CacheWriter",
    "FetchResult",
    "FetchType",
    "Source",
    "UpdateBehavior",
    "UpdateReport",
    "load_registry",
    "select_sources",
]
