"""
Parser for ``nvm list`` / ``nvm current`` output.

``nvm list --no-alias`` prints one installed runtime per line, with
markers and (unless ``--no-colors``) ANSI colours::

    ->     v18.17.0 *
           v20.5.1 *
             system

This module turns that text into typed version identifiers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_VERSION_RE = re.compile(r"\bv?(\d+\.\d+\.\d+)\b")
_SYSTEM_RE = re.compile(r"(?:^|\s)system(?:\s|\*|$)")
_ALIAS_RE = re.compile(r"^\s*\S+\s+->")       # "default -> 18 (-> v18.17.0)"


@dataclass(frozen=True)
class NodeVersion:
    """One installed runtime: a semantic version or the system node."""

    value: str                      # '18.17.0' or 'system'

    def __str__(self) -> str:
        return self.value


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def parse_nvm_list(text: str) -> list[NodeVersion]:
    """Extract installed runtimes from ``nvm list --no-alias`` output.

    Alias lines, ``N/A`` entries and blanks are ignored. Order of first
    appearance is kept and duplicates are dropped.
    """
    found: list[NodeVersion] = []
    seen: set[str] = set()

    for raw in strip_ansi(text).splitlines():
        line = raw.strip()
        if not line or "N/A" in line:
            continue
        if _ALIAS_RE.match(line) and not line.startswith("->"):
            continue

        m = _VERSION_RE.search(line)
        if m:
            value = m.group(1)
        elif _SYSTEM_RE.search(f" {line} "):
            value = "system"
        else:
            continue

        if value not in seen:
            seen.add(value)
            found.append(NodeVersion(value))

    return found


def parse_nvm_current(text: str) -> str | None:
    """Normalise ``nvm current`` output; None when no runtime is active."""
    value = strip_ansi(text).strip()
    if not value or value == "none":
        return None
    return value
