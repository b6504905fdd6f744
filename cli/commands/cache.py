"""Cache commands: refresh the docs cache, check it, compare versions."""

from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer

from docs_cache.cache.registry import load_registry
from docs_cache.config import settings
from docs_cache.errors import ConfigError, NotFoundError
from docs_cache.logging import init_logging
from docs_cache.maintenance.integrity import check_cache
from docs_cache.scraper.scheduler import RunMode, build_client
from docs_cache.updater import run_update
from docs_cache.version import detect_upstream_version, should_update

from cli.rendering import render_json, render_summary


def _run_and_report(source: Optional[str], sequential: bool, as_json: bool) -> None:
    mode = RunMode.SEQUENTIAL if sequential else RunMode.CONCURRENT
    try:
        report = asyncio.run(run_update(source, mode))
    except NotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    except ConfigError as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(render_json(report), indent=2))
    else:
        typer.echo(render_summary(report))
    raise typer.Exit(code=0 if report.ok else 1)


def update(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr."),
    sequential: bool = typer.Option(False, "--sequential", "-s", help="Fetch one source at a time."),
    source: Optional[str] = typer.Option(None, "--source", help="Only refresh the named source."),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
) -> None:
    """Fetch every registered source and rewrite the docs cache."""
    init_logging(verbose)
    _run_and_report(source, sequential, as_json)


def check(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr."),
) -> None:
    """Verify that every registered source has a cached document."""
    init_logging(verbose)
    try:
        issues = check_cache()
    except ConfigError as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    if not issues:
        typer.echo(f"✅ Docs cache is complete ({settings.cache_dir})")
        return
    typer.echo(f"❌ Docs cache has {len(issues)} issue(s):")
    for issue in issues:
        typer.echo(f"  - {issue.name}: {issue.problem}")
    raise typer.Exit(code=1)


async def _probe_upstream() -> Optional[str]:
    async with build_client() as client:
        return await detect_upstream_version(client)


def version(
    apply: bool = typer.Option(False, "--apply", help="Run the update when the policy says so."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr."),
) -> None:
    """Compare the cached upstream version with the latest changelog entry."""
    init_logging(verbose)
    try:
        _sources, metadata = load_registry()
    except ConfigError as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    upstream = asyncio.run(_probe_upstream())
    typer.echo(f"Cached version  : {metadata.claude_code_version or '(none)'}")
    typer.echo(f"Upstream version: {upstream or 'unknown'}")
    typer.echo(f"Update behavior : {metadata.update_behavior.value}")
    typer.echo(f"Last updated    : {metadata.last_updated or '(never)'}")

    if not should_update(metadata, upstream, confirm=typer.confirm):
        typer.echo("✅ No docs cache update needed.")
        return

    typer.echo("⚠️ Docs cache update recommended.")
    if apply:
        _run_and_report(None, sequential=False, as_json=False)
