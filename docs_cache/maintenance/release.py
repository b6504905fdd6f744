"""Version bump for the plugin manifest and ``package.json``, plus git release."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import List, Sequence

from docs_cache.errors import ConfigError

logger = logging.getLogger(__name__)

BUMP_KINDS = ("patch", "minor", "major")

MANIFEST_FILES = (
    Path(".claude-plugin") / "plugin.json",
    Path("package.json"),
)


def bump_version(version: str, kind: str = "patch") -> str:
    """Return *version* bumped by *kind* (``patch``, ``minor`` or ``major``)."""
    if kind not in BUMP_KINDS:
        raise ValueError(f"Unknown bump kind {kind!r}; use one of: {', '.join(BUMP_KINDS)}")
    try:
        major, minor, patch = (int(p) for p in version.strip().split(".")[:3])
    except ValueError as e:
        raise ValueError(f"Not a semantic version: {version!r}") from e

    if kind == "major":
        return f"{major + 1}.0.0"
    if kind == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"


def _write_version(path: Path, version: str) -> str:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Manifest not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Manifest is not valid JSON: {path} ({e})") from e
    old = str(data.get("version", ""))
    data["version"] = version
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return old


def update_manifests(root: Path, kind: str = "patch") -> tuple[str, str]:
    """Bump the version in every manifest under *root*.

    The plugin manifest is the source of truth for the current version.

    Returns:
        ``(old_version, new_version)``.
    """
    primary = root / MANIFEST_FILES[0]
    try:
        current = json.loads(primary.read_text(encoding="utf-8"))["version"]
    except FileNotFoundError as e:
        raise ConfigError(f"Manifest not found: {primary}") from e
    except (json.JSONDecodeError, KeyError) as e:
        raise ConfigError(f"Manifest has no readable version: {primary}") from e

    new = bump_version(str(current), kind)
    for rel in MANIFEST_FILES:
        _write_version(root / rel, new)
        logger.info("Updated %s: %s -> %s", rel, current, new)
    return str(current), new


def release_commands(version: str) -> List[Sequence[str]]:
    return [
        ["git", "add", "."],
        ["git", "commit", "-m", f"chore: bump version to {version}"],
        ["git", "tag", f"v{version}"],
        ["git", "push"],
        ["git", "push", "--tags"],
    ]


def git_release(root: Path, version: str) -> None:
    """Commit, tag and push the bump.

    Raises:
        subprocess.CalledProcessError: A git command failed.
    """
    for command in release_commands(version):
        logger.info("Running %s", " ".join(command))
        subprocess.run(command, cwd=root, check=True)
