"""Centralised settings for the docs-cache tooling.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

DEFAULT_CHANGELOG_URL = (
    "https://raw.githubusercontent.com/anthropics/claude-code/main/CHANGELOG.md"
)

# Matches branding suffixes such as " - Claude Code Docs" or " | Anthropic".
DEFAULT_TITLE_SUFFIX_PATTERN = (
    r"\s+[-|–—]\s+(?:Claude Code|Claude|Anthropic)"
    r"(?:\s+(?:Docs|Documentation))?\s*$"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Cache location
    # ------------------------------------------------------------------
    cache_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("DOCS_CACHE_DIR", Path.cwd() / "docs-cache")
        )
    )
    registry_filename: str = field(
        default_factory=lambda: os.environ.get("DOCS_CACHE_REGISTRY", "sources.json")
    )

    @property
    def registry_path(self) -> Path:
        """Absolute path to the source registry, colocated with the cache."""
        return self.cache_dir / self.registry_filename

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("DOCS_CACHE_REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "DOCS_CACHE_USER_AGENT",
            "Mozilla/5.0 (compatible; docs-cache/1.0)",
        )
    )
    changelog_url: str = field(
        default_factory=lambda: os.environ.get("DOCS_CACHE_CHANGELOG_URL", DEFAULT_CHANGELOG_URL)
    )

    # ------------------------------------------------------------------
    # Extraction / normalisation
    # ------------------------------------------------------------------
    content_min_length: int = field(
        default_factory=lambda: int(os.environ.get("DOCS_CACHE_CONTENT_MIN_LENGTH", "500"))
    )
    title_suffix_pattern: str = field(
        default_factory=lambda: os.environ.get(
            "DOCS_CACHE_TITLE_SUFFIX_PATTERN", DEFAULT_TITLE_SUFFIX_PATTERN
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("DOCS_CACHE_LOG_LEVEL", "WARNING")
    )


# Module-level singleton. Import this everywhere:
#   from docs_cache.config import settings
settings = Settings()
