"""Utilities for rendering run results in the CLI."""

from __future__ import annotations

from typing import Any, Dict, List

from docs_cache.cache.models import FetchResult, UpdateReport


def _describe_failure(result: FetchResult) -> str:
    kept = "kept previous cache" if result.used_existing_cache else "no cached copy"
    return f"  - {result.name}: {result.error or 'unknown error'} ({kept})"


def render_summary(report: UpdateReport) -> str:
    """Render an update run as a short human-readable summary.

    Every failed source is itemised with its error and whether an older
    cached copy is still on disk.
    """
    lines: List[str] = [
        "📚 Docs cache update",
        f"  Total: {len(report.results)}",
        f"  Succeeded: {len(report.succeeded)}",
        f"  Failed: {len(report.failed)}",
        f"  Upstream version: {report.detected_version or 'unknown'}",
    ]

    if report.failed:
        lines.append("")
        lines.append("Failed:")
        lines.extend(_describe_failure(r) for r in report.failed)

    return "\n".join(lines)


def render_json(report: UpdateReport) -> Dict[str, Any]:
    return {
        "results": [r.to_dict() for r in report.results],
        "summary": {
            "total": len(report.results),
            "succeeded": len(report.succeeded),
            "failed": len(report.failed),
        },
        "detectedVersion": report.detected_version,
        "metadataUpdated": report.metadata_updated,
    }
