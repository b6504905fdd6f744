"""Hook commands invoked by the plugin host, not by people."""

import json
import sys

import typer

from docs_cache.maintenance.frontmatter import run_hook

hook_app = typer.Typer(help="Plugin hook entry points.")


@hook_app.command("validate-frontmatter")
def validate_frontmatter_hook() -> None:
    """Read a PreToolUse payload on stdin and deny writes with bad frontmatter.

    Always exits 0; a denial is signalled through the JSON printed on stdout.
    """
    decision = run_hook(sys.stdin.read())
    if decision is not None:
        typer.echo(json.dumps(decision))
