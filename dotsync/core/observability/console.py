"""
Console — user-facing progress messages from core services.

Services never print directly. They talk to a Console, which by
default forwards to the logger. The CLI swaps in a coloured
implementation (``dotsync.ui.cli.console.ClickConsole``).
"""

from __future__ import annotations

import logging

logger = logging.getLogger("dotsync.console")


class Console:
    """Message sink with one method per message kind."""

    def section(self, title: str) -> None:
        logger.info("== %s ==", title)

    def info(self, message: str) -> None:
        logger.info(message)

    def success(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def skip(self, message: str) -> None:
        logger.info("skip: %s", message)

    def error(self, message: str) -> None:
        logger.error(message)

    def detail(self, lines: list[str], indent: str = "  ") -> None:
        """Raw command output (commit lists, status listings)."""
        for line in lines:
            logger.info("%s%s", indent, line)

    def hints(self, commands: list[str]) -> None:
        """Remediation commands the user can copy."""
        for cmd in commands:
            self.info(f"  {cmd}")


class RecordingConsole(Console):
    """Console that keeps every message, for tests and JSON output."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def _add(self, kind: str, message: str) -> None:
        self.messages.append((kind, message))

    def section(self, title: str) -> None:
        self._add("section", title)

    def info(self, message: str) -> None:
        self._add("info", message)

    def success(self, message: str) -> None:
        self._add("success", message)

    def warning(self, message: str) -> None:
        self._add("warning", message)

    def skip(self, message: str) -> None:
        self._add("skip", message)

    def error(self, message: str) -> None:
        self._add("error", message)

    def detail(self, lines: list[str], indent: str = "  ") -> None:
        for line in lines:
            self._add("detail", f"{indent}{line}")

    def of_kind(self, kind: str) -> list[str]:
        return [m for k, m in self.messages if k == kind]

    def text(self) -> str:
        return "\n".join(m for _, m in self.messages)
