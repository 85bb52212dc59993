"""
dotsync — CLI entrypoint.

Usage:
    dotsync --help
    dotsync update-all -h -n
    dotsync rebase-main --dry-run
"""

from __future__ import annotations

import click

from dotsync import __version__


@click.group()
@click.version_option(version=__version__, prog_name="dotsync")
def cli() -> None:
    """dotsync — keep a dotfiles machine and its package managers current."""


# ── Register commands from dotsync/ui/cli/ ──────────────────────

from dotsync.ui.cli.branch import merge_main, rebase_main  # noqa: E402
from dotsync.ui.cli.update import update_all  # noqa: E402

cli.add_command(update_all)
cli.add_command(merge_main)
cli.add_command(rebase_main)


if __name__ == "__main__":
    cli()
