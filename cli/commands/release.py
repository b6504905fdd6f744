"""Release commands for the plugin repository."""

import subprocess
from pathlib import Path

import typer

from docs_cache.errors import ConfigError
from docs_cache.maintenance.release import BUMP_KINDS, git_release, update_manifests

release_app = typer.Typer(help="Version bumps and releases.")


@release_app.command("bump")
def release_bump(
    kind: str = typer.Argument("patch", help="Bump kind: patch | minor | major"),
    root: Path = typer.Option(Path("."), "--root", help="Repository root."),
    no_git: bool = typer.Option(False, "--no-git", help="Only edit the manifests."),
) -> None:
    """Bump the plugin version, then commit, tag and push."""
    if kind not in BUMP_KINDS:
        typer.echo(f"Usage: release bump [{'|'.join(BUMP_KINDS)}]", err=True)
        raise typer.Exit(code=1)

    try:
        old, new = update_manifests(root, kind)
    except ConfigError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"✓ Updated .claude-plugin/plugin.json: {old} → {new}")
    typer.echo(f"✓ Updated package.json: {old} → {new}")

    if no_git:
        return

    typer.echo("\n📦 Committing and pushing...")
    try:
        git_release(root, new)
    except subprocess.CalledProcessError as e:
        typer.echo(f"❌ git failed: {' '.join(e.cmd)} (exit {e.returncode})", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"\n🎉 Version {new} released!")
