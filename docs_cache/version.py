"""Upstream version probe and the update-behavior policy."""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Tuple

import httpx

from docs_cache.cache.models import CacheMetadata, UpdateBehavior
from docs_cache.config import settings
from docs_cache.errors import VersionProbeError

logger = logging.getLogger(__name__)

# "## [1.2.3]", "## 1.2.3" or "## 1.2.3 - 2025-01-01" at the start of a line.
_VERSION_HEADING = re.compile(r"^##\s+\[?(\d+\.\d+\.\d+)\]?", re.MULTILINE)


def parse_changelog_version(text: str) -> Optional[str]:
    """Return the first version heading in a changelog, or ``None``."""
    match = _VERSION_HEADING.search(text)
    return match.group(1) if match else None


async def fetch_upstream_version(client: httpx.AsyncClient, url: Optional[str] = None) -> str:
    """Fetch the changelog and return the newest version it lists.

    Raises:
        VersionProbeError: Network failure, non-2xx status, or no version heading.
    """
    url = url or settings.changelog_url
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise VersionProbeError(f"Changelog unreachable: {url} ({e})") from e
    if not response.is_success:
        raise VersionProbeError(f"Changelog returned HTTP {response.status_code}: {url}")
    version = parse_changelog_version(response.text)
    if version is None:
        raise VersionProbeError(f"No version heading found in changelog: {url}")
    return version


async def detect_upstream_version(client: httpx.AsyncClient, url: Optional[str] = None) -> Optional[str]:
    """Like :func:`fetch_upstream_version` but degrades to ``None``."""
    try:
        version = await fetch_upstream_version(client, url)
    except VersionProbeError as e:
        logger.warning("Upstream version unknown: %s", e)
        return None
    logger.info("Detected upstream version %s", version)
    return version


def _version_key(version: str) -> Tuple[int, ...]:
    core = version.strip().lstrip("vV").split("-", 1)[0].split("+", 1)[0]
    parts = []
    for piece in core.split("."):
        digits = re.match(r"\d+", piece)
        parts.append(int(digits.group(0)) if digits else 0)
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as *a* is older than, equal to, or newer than *b*."""
    ka, kb = _version_key(a), _version_key(b)
    return (ka > kb) - (ka < kb)


def should_update(
    metadata: CacheMetadata,
    upstream: Optional[str],
    confirm: Optional[Callable[[str], bool]] = None,
) -> bool:
    """Decide whether the cache should be refreshed under the configured policy.

    ``confirm`` is asked for the ``ask``/``askAlways`` policies; without it
    those policies answer "no".
    """
    behavior = metadata.update_behavior
    cached = metadata.claude_code_version
    if upstream is None:
        is_newer = cached is None
    else:
        is_newer = cached is None or compare_versions(upstream, cached) > 0

    if behavior is UpdateBehavior.NEVER:
        return False
    if behavior is UpdateBehavior.ALWAYS:
        return True
    if behavior is UpdateBehavior.AUTO:
        return is_newer

    prompt = f"Upstream version {upstream or 'unknown'} (cached: {cached or 'none'}). Update docs cache?"
    if behavior is UpdateBehavior.ASK and not is_newer:
        return False
    return bool(confirm and confirm(prompt))
