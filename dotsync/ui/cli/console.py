"""
Coloured terminal Console for the CLI commands.
"""

from __future__ import annotations

import logging

import click

from dotsync.core.observability.console import Console

logger = logging.getLogger(__name__)

RULE = "━" * 40


class ClickConsole(Console):
    """Console that writes icon-prefixed, coloured lines with click."""

    def section(self, title: str) -> None:
        logger.debug("section: %s", title)
        click.echo()
        click.secho(RULE, fg="blue", bold=True)
        click.secho(title, fg="blue", bold=True)
        click.secho(RULE, fg="blue", bold=True)

    def info(self, message: str) -> None:
        logger.debug(message)
        click.secho("ℹ ", fg="cyan", nl=False)
        click.echo(message)

    def success(self, message: str) -> None:
        logger.debug(message)
        click.secho(f"✓ {message}", fg="green")

    def warning(self, message: str) -> None:
        logger.info(message)
        click.secho(f"⚠ {message}", fg="yellow")

    def skip(self, message: str) -> None:
        logger.debug("skip: %s", message)
        click.secho(f"⊘ {message}", fg="yellow")

    def error(self, message: str) -> None:
        logger.info(message)
        click.secho(f"❌ {message}", fg="red", err=True)

    def detail(self, lines: list[str], indent: str = "  ") -> None:
        for line in lines:
            click.echo(f"{indent}{line}")
