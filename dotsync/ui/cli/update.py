"""
CLI command: update-all.

Thin wrapper over ``dotsync.core.use_cases.update_all``.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from dotsync.core.config.loader import ConfigError, load_settings
from dotsync.core.observability.logging_config import configure_from_flags
from dotsync.core.services.summary import Summary

logger = logging.getLogger(__name__)

# -h selects Homebrew, so help is --help only
CONTEXT_SETTINGS = {"help_option_names": ["--help"]}


def render_summary(summary: Summary, dry_run: bool = False) -> None:
    """Print the end-of-run summary."""
    from dotsync.ui.cli.console import ClickConsole

    ClickConsole().section("Summary")

    if summary.updated:
        click.secho("Updated:", fg="green", bold=True)
        for title in summary.updated:
            click.secho("  ✓ ", fg="green", nl=False)
            click.echo(title)

    for group in summary.groups:
        click.echo()
        click.secho(f"{group.label} updated ({group.count}):", fg="green", bold=True)
        for name in group.names:
            click.secho("  ✓ ", fg="green", nl=False)
            click.echo(name)

    if summary.skipped:
        click.echo()
        click.secho("Skipped:", fg="yellow", bold=True)
        for item in summary.skipped:
            click.secho("  ⊘ ", fg="yellow", nl=False)
            click.echo(item)

    if summary.failed:
        click.echo()
        click.secho("Failed:", fg="red", bold=True)
        for name, error in summary.failed.items():
            click.secho("  ✗ ", fg="red", nl=False)
            click.echo(f"{name}: {error}")

    click.echo()
    if dry_run:
        click.secho("Dry-run complete. Nothing was changed.", fg="yellow", bold=True)
    elif summary.failed:
        click.secho("Finished with failures (see above).", fg="yellow", bold=True)
    else:
        click.secho("All packages are up-to-date!", fg="green", bold=True)
    click.echo()


@click.command("update-all", context_settings=CONTEXT_SETTINGS)
@click.option("-a", "--apt", "apt", is_flag=True, help="Update APT packages.")
@click.option("-p", "--pacman", "pacman", is_flag=True, help="Update Pacman packages.")
@click.option("-y", "--yay", "yay", is_flag=True, help="Update Yay (AUR) packages.")
@click.option("-n", "--npm", "npm", is_flag=True, help="Update npm global packages.")
@click.option("-h", "--homebrew", "homebrew", is_flag=True, help="Update Homebrew.")
@click.option("-z", "--zinit", "zinit", is_flag=True, help="Update Zinit plugins.")
@click.option("--no-git-check", is_flag=True, help="Skip the dotfiles self-update check.")
@click.option(
    "--dotfiles-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Dotfiles clone to self-update (default: ~/dotfiles).",
)
@click.option("--dry-run", is_flag=True, help="Query package managers but change nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the summary as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yml (default: ~/.config/dotsync/config.yml).",
)
def update_all(
    apt: bool,
    pacman: bool,
    yay: bool,
    npm: bool,
    homebrew: bool,
    zinit: bool,
    no_git_check: bool,
    dotfiles_dir: Path | None,
    dry_run: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: Path | None,
) -> None:
    """Update the dotfiles clone and every installed package manager.

    With no selection flag every package manager is updated; with one
    or more, only those are.

    Examples:

        update-all

        update-all -h -n

        update-all --dry-run --no-git-check
    """
    from dotsync.adapters.registry import default_registry
    from dotsync.core.observability.console import Console
    from dotsync.core.services.stages import StageSelection
    from dotsync.core.use_cases.update_all import run_update_all
    from dotsync.ui.cli.console import ClickConsole

    configure_from_flags(debug=debug, verbose=verbose, quiet=quiet)

    flags = {
        "apt": apt,
        "pacman": pacman,
        "yay": yay,
        "npm": npm,
        "homebrew": homebrew,
        "zinit": zinit,
    }
    selection = StageSelection.from_flags(
        [name for name, on in flags.items() if on],
        git_check=not no_git_check,
    )

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if dotfiles_dir is not None:
        settings.dotfiles_dir = dotfiles_dir.expanduser()

    # JSON mode keeps stdout for the document; progress goes to the log
    console = Console() if as_json else ClickConsole()

    try:
        result = run_update_all(
            selection=selection,
            settings=settings,
            registry=default_registry(dry_run=dry_run),
            console=console,
        )
    except Exception as e:
        logger.exception("update-all aborted")
        click.secho(f"\n❌ Error occurred: {e}. Exiting.", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    render_summary(result.summary, dry_run=dry_run)
