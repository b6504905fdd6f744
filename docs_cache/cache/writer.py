"""Cache writer: per-source Markdown files and the shared metadata block."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from docs_cache.config import settings
from docs_cache.errors import ConfigError

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    tmp_path.replace(path)


def atomic_write_json(path: Path, payload: dict) -> None:
    atomic_write_text(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with a ``Z`` suffix and millisecond precision."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CacheWriter:
    """Writes into one cache directory.

    Each source owns a distinct ``<name>.md`` file, so concurrent ``persist``
    calls never collide.  ``update_metadata`` is meant to run once, after every
    per-source write has finished.
    """

    def __init__(self, cache_dir: Optional[Path] = None, registry_path: Optional[Path] = None) -> None:
        self.cache_dir = Path(cache_dir or settings.cache_dir)
        self.registry_path = Path(registry_path or self.cache_dir / settings.registry_filename)

    def path_for(self, name: str) -> Path:
        return self.cache_dir / f"{name}.md"

    def has_cached(self, name: str) -> bool:
        return self.path_for(name).is_file()

    async def persist(self, name: str, content: str) -> Path:
        """Overwrite ``<name>.md`` with *content*, creating the directory if needed."""
        path = self.path_for(name)
        await asyncio.to_thread(atomic_write_text, path, content)
        logger.debug("Wrote %s (%d chars)", path, len(content))
        return path

    def update_metadata(self, detected_version: Optional[str], now: Optional[datetime] = None) -> dict[str, Any]:
        """Merge *detected_version* and a fresh timestamp into the registry file.

        The file is re-read so that any field this run does not own (notably an
        operator-set ``updateBehavior``) is written back untouched.  A ``None``
        version keeps whatever version was recorded before.

        Returns:
            The merged ``cache`` block as written.
        """
        try:
            data = json.loads(self.registry_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigError(f"Registry file not found: {self.registry_path}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Registry file is not valid JSON: {self.registry_path} ({e})") from e

        cache = data.get("cache")
        if not isinstance(cache, dict):
            cache = {}
        if detected_version:
            cache["claudeCodeVersion"] = detected_version
        cache["lastUpdated"] = utc_timestamp(now)
        data["cache"] = cache

        atomic_write_json(self.registry_path, data)
        logger.info(
            "Updated cache metadata version=%s lastUpdated=%s",
            cache.get("claudeCodeVersion"),
            cache["lastUpdated"],
        )
        return cache
