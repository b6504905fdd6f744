"""Source registry: reads and validates ``sources.json``.

The registry file is colocated with the cached documents and has the shape::

    {
      "baseUrl": "https://docs.example.com",          # optional
      "cache": {"claudeCodeVersion": ..., "lastUpdated": ..., "updateBehavior": "auto"},
      "sources": [
        {"name": "hooks", "url": "https://...", "type": "spa", "description": "..."},
        {"name": "readme", "path": "/readme.md", "type": "md"}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from docs_cache.cache.models import CacheMetadata, FetchType, Source, UpdateBehavior
from docs_cache.config import settings
from docs_cache.errors import ConfigError, NotFoundError

logger = logging.getLogger(__name__)

# Names become ``<name>.md`` verbatim, so keep them to a portable subset.
_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Registry file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Registry file is not valid JSON: {path} ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Registry top level must be an object, got {type(data).__name__}: {path}")
    return data


def _parse_metadata(payload: Any) -> CacheMetadata:
    """Build :class:`CacheMetadata`, defaulting anything absent or unrecognised."""
    if not isinstance(payload, dict):
        return CacheMetadata()

    version = payload.get("claudeCodeVersion")
    last_updated = payload.get("lastUpdated")
    behavior_raw = payload.get("updateBehavior", UpdateBehavior.AUTO.value)
    try:
        behavior = UpdateBehavior(behavior_raw)
    except ValueError:
        logger.warning("Unknown updateBehavior %r, falling back to 'auto'", behavior_raw)
        behavior = UpdateBehavior.AUTO

    return CacheMetadata(
        claude_code_version=version if isinstance(version, str) and version else None,
        last_updated=last_updated if isinstance(last_updated, str) and last_updated else None,
        update_behavior=behavior,
    )


def _entry_label(index: int, entry: Any) -> str:
    if isinstance(entry, dict) and entry.get("name"):
        return f"sources[{index}] ({entry['name']!r})"
    return f"sources[{index}]"


def _parse_source(index: int, entry: Any, base_url: Optional[str]) -> Source:
    label = _entry_label(index, entry)
    if not isinstance(entry, dict):
        raise ConfigError(f"Registry entry {label} must be an object")

    name = str(entry.get("name") or "").strip()
    if not name:
        raise ConfigError(f"Registry entry {label} is missing 'name'")
    if not _SAFE_NAME.match(name):
        raise ConfigError(f"Registry entry {label} has a name that is not filesystem-safe")

    url = str(entry.get("url") or "").strip()
    path = str(entry.get("path") or "").strip()
    if not url and path:
        if not base_url:
            raise ConfigError(f"Registry entry {label} uses 'path' but the registry has no 'baseUrl'")
        url = urljoin(base_url, path)
    if not url:
        raise ConfigError(f"Registry entry {label} is missing 'url'")

    type_raw = entry.get("type") or FetchType.RENDERED_PAGE.value
    try:
        fetch_type = FetchType(type_raw)
    except ValueError:
        allowed = ", ".join(t.value for t in FetchType)
        raise ConfigError(f"Registry entry {label} has unknown type {type_raw!r} (expected one of: {allowed})")

    selectors = entry.get("contentSelectors") or ()
    if isinstance(selectors, str):
        selectors = (selectors,)

    return Source(
        name=name,
        url=url,
        type=fetch_type,
        description=str(entry.get("description") or ""),
        content_selectors=tuple(str(s) for s in selectors),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_registry(path: Optional[Path] = None) -> Tuple[List[Source], CacheMetadata]:
    """Load *path* (default ``settings.registry_path``) into sources + metadata.

    Raises:
        ConfigError: The file is absent, is not JSON, has no ``sources`` list,
            or contains an invalid entry.
    """
    path = path or settings.registry_path
    data = _read_json(path)

    raw_sources = data.get("sources")
    if not isinstance(raw_sources, list):
        raise ConfigError(f"Registry file has no 'sources' list: {path}")

    base_url = data.get("baseUrl") or None
    sources: List[Source] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw_sources):
        source = _parse_source(index, entry, base_url)
        if source.name in seen:
            raise ConfigError(f"Registry entry {_entry_label(index, entry)} duplicates an earlier name")
        seen.add(source.name)
        sources.append(source)

    metadata = _parse_metadata(data.get("cache"))
    logger.debug("Loaded %d sources from %s", len(sources), path)
    return sources, metadata


def select_sources(sources: Sequence[Source], name: Optional[str] = None) -> List[Source]:
    """Return every source, or just the one called *name*.

    Raises:
        NotFoundError: *name* is given but no source carries it.
    """
    if not name:
        return list(sources)
    matches = [s for s in sources if s.name == name]
    if not matches:
        raise NotFoundError(name, [s.name for s in sources])
    return matches
