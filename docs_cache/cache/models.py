"""Dataclass models shared by the registry, the strategies and the writer.

These are plain Python objects.  The registry deserialises the JSON file into
them; the CLI serialises :class:`FetchResult` back to JSON for ``--json``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FetchType(str, Enum):
    """Acquisition strategy tag.  Values are the registry's ``type`` field."""

    DIRECT_MARKDOWN = "md"
    HTML = "html"
    RENDERED_PAGE = "spa"


class UpdateBehavior(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    AUTO = "auto"
    ASK = "ask"
    ASK_ALWAYS = "askAlways"


@dataclass(frozen=True)
class Source:
    """One fetchable unit from the registry."""

    name: str
    url: str
    type: FetchType = FetchType.RENDERED_PAGE
    description: str = ""
    content_selectors: tuple[str, ...] = ()

    @property
    def filename(self) -> str:
        return f"{self.name}.md"


@dataclass
class CacheMetadata:
    """The ``cache`` block of the registry file."""

    claude_code_version: Optional[str] = None
    last_updated: Optional[str] = None
    update_behavior: UpdateBehavior = UpdateBehavior.AUTO


@dataclass
class FetchResult:
    """Outcome of one source's fetch attempt."""

    name: str
    success: bool
    error: Optional[str] = None
    duration: Optional[float] = None
    used_existing_cache: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys used by the registry file."""
        payload: dict[str, Any] = {"name": self.name, "success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        if self.duration is not None:
            payload["duration"] = round(self.duration, 3)
        if self.used_existing_cache:
            payload["usedExistingCache"] = True
        return payload


@dataclass
class UpdateReport:
    """Aggregated outcome of one ``update`` run."""

    results: list[FetchResult] = field(default_factory=list)
    detected_version: Optional[str] = None
    metadata_updated: bool = False

    @property
    def succeeded(self) -> list[FetchResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[FetchResult]:
        return [r for r in self.results if not r.success]

    @property
    def ok(self) -> bool:
        return not self.failed
