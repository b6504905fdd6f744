"""Shared fixtures: an isolated cache directory with a registry file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

CHANGELOG_URL = "https://changelog.test/CHANGELOG.md"


@pytest.fixture
def cache_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point the settings singleton at a fresh cache directory."""
    directory = tmp_path / "docs-cache"
    directory.mkdir()
    monkeypatch.setattr("docs_cache.config.settings.cache_dir", directory)
    monkeypatch.setattr("docs_cache.config.settings.changelog_url", CHANGELOG_URL)
    return directory


@pytest.fixture
def write_registry(cache_dir: Path) -> Callable[..., Path]:
    """Write ``sources.json`` into the cache directory and return its path."""

    def _write(sources: list[dict[str, Any]], cache: Optional[dict[str, Any]] = None, **extra: Any) -> Path:
        payload: dict[str, Any] = {"cache": cache or {"updateBehavior": "auto"}, "sources": sources}
        payload.update(extra)
        path = cache_dir / "sources.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write
