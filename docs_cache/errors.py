"""Exception hierarchy for the docs-cache tooling.

``ConfigError`` and ``NotFoundError`` are fatal and abort a run before any
fetch happens.  ``FetchError`` (and its ``HttpError`` subclass) is recovered
per source and only surfaces in the run summary.  ``VersionProbeError`` is
recovered by degrading to an unknown upstream version.
"""

from __future__ import annotations

from typing import Sequence


class DocsCacheError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(DocsCacheError):
    """The registry file is missing, malformed, or has an invalid entry."""


class NotFoundError(DocsCacheError):
    """A requested source name is not present in the registry."""

    def __init__(self, name: str, known: Sequence[str]) -> None:
        self.name = name
        self.known = list(known)
        available = ", ".join(self.known) if self.known else "(none)"
        super().__init__(f"Source {name!r} not found. Available sources: {available}")


class FetchError(DocsCacheError):
    """Acquiring or converting a single source failed."""


class HttpError(FetchError):
    """The server answered with a non-2xx status code."""

    def __init__(self, url: str, status_code: int, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        detail = f"HTTP {status_code}"
        if reason:
            detail = f"{detail} {reason}"
        super().__init__(f"{detail} for {url}")


class VersionProbeError(DocsCacheError):
    """The upstream changelog was unreachable or had no version heading."""
