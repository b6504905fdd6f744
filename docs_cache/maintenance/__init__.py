"""Repository maintenance helpers that sit next to the docs cache."""

from docs_cache.maintenance.frontmatter import run_hook, validate_frontmatter
from docs_cache.maintenance.integrity import CacheIssue, check_cache
from docs_cache.maintenance.release import bump_version, git_release, update_manifests

__all__ = [
    "CacheIssue",
    "bump_version",
    "check_cache",
    "git_release",
    "run_hook",
    "update_manifests",
    "validate_frontmatter",
]
