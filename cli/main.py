"""docs-cache CLI — entry-point for the cache and maintenance utilities.

Usage:
    python cli/main.py --help

Commands:
    update    → refresh the Markdown docs cache from the source registry
    check     → verify every registered source has a cached document
    version   → compare the cached upstream version with the changelog
    hook      → plugin hook entry points (frontmatter validation)
    release   → bump the plugin version and tag a release
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from docs_cache.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import typer

from cli.commands.cache import check, update, version
from cli.commands.hook import hook_app
from cli.commands.release import release_app

app = typer.Typer(
    name="docs-cache",
    help="Docs cache and plugin maintenance CLI.",
    no_args_is_help=True,
)

# ---------------------------------------------------------------------------
# Cache commands
# ---------------------------------------------------------------------------
app.command("update")(update)
app.command("check")(check)
app.command("version")(version)

# ---------------------------------------------------------------------------
# Maintenance command groups
# ---------------------------------------------------------------------------
app.add_typer(hook_app, name="hook")
app.add_typer(release_app, name="release")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
