"""
CLI commands: merge-main and rebase-main.

Thin wrappers over ``dotsync.core.services.branch_sync``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from dotsync.core.observability.logging_config import configure_from_flags


def _sync(mode: str, dry_run: bool, branch: str | None, repo_path: Path | None) -> None:
    from dotsync.adapters.vcs.git import GitRepo
    from dotsync.core.services.branch_sync import sync_branch
    from dotsync.ui.cli.console import ClickConsole

    repo = GitRepo(repo_path or Path.cwd())
    result = sync_branch(repo, mode, target=branch, dry_run=dry_run, console=ClickConsole())
    if not result.ok:
        sys.exit(result.exit_code)


def _branch_options(func):
    func = click.option(
        "--repo",
        "repo_path",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Repository to operate on (default: current directory).",
    )(func)
    func = click.option("--debug", is_flag=True, help="Enable debug logging.")(func)
    func = click.option("--branch", default=None, help="Target branch (default: main, then master).")(func)
    func = click.option("--dry-run", is_flag=True, help="List the affected commits and stop.")(func)
    return func


@click.command("merge-main")
@_branch_options
def merge_main(dry_run: bool, branch: str | None, debug: bool, repo_path: Path | None) -> None:
    """Merge the latest origin/main (or master) into the current branch."""
    configure_from_flags(debug=debug)
    _sync("merge", dry_run, branch, repo_path)


@click.command("rebase-main")
@_branch_options
def rebase_main(dry_run: bool, branch: str | None, debug: bool, repo_path: Path | None) -> None:
    """Rebase the current branch onto the latest origin/main (or master).

    Uncommitted changes are stashed first and restored afterwards.
    """
    configure_from_flags(debug=debug)
    _sync("rebase", dry_run, branch, repo_path)
