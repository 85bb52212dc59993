"""
Tool detection — which package managers exist on this host.

Executables are resolved on PATH with ``shutil.which``. zinit and nvm
are shell functions, so they count as present when their defining
script exists. Nothing is cached between runs.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from dotsync.adapters.registry import AdapterRegistry
from dotsync.core.models.action import Action
from dotsync.core.models.capability import Capability, CapabilitySet
from dotsync.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Executables looked up on PATH
EXECUTABLE_TOOLS = ("brew", "apt-get", "pacman", "yay", "npm", "ncu", "paccache")


def is_available(name: str, which: Callable[[str], str | None] = shutil.which) -> bool:
    """Whether ``name`` resolves on the current search path."""
    return which(name) is not None


class CapabilityProbe:
    """Detects capabilities for one run.

    ``which`` is injectable so tests can describe a host without
    touching PATH.
    """

    def __init__(
        self,
        settings: Settings,
        which: Callable[[str], str | None] = shutil.which,
    ):
        self.settings = settings
        self._which = which

    def _shell_functions(self) -> dict[str, Path]:
        return {
            "zinit": self.settings.zinit_script,
            "nvm": self.settings.nvm_script,
        }

    def check(self, name: str) -> Capability:
        """Detect a single tool right now."""
        script = self._shell_functions().get(name)
        if script is not None:
            present = script.is_file()
            return Capability(
                name=name,
                present=present,
                path=str(script) if present else None,
                kind="shell-function",
            )

        path = self._which(name)
        return Capability(name=name, present=path is not None, path=path)

    def detect(self) -> CapabilitySet:
        """Snapshot every known tool."""
        names = [*EXECUTABLE_TOOLS, *self._shell_functions()]
        caps = CapabilitySet(tools={n: self.check(n) for n in names})
        logger.info("Detected tools: %s", ", ".join(caps.present()) or "none")
        return caps


class StaticProbe(CapabilityProbe):
    """Probe answering from a fixed CapabilitySet (tests, --mock)."""

    def __init__(self, capabilities: CapabilitySet, settings: Settings | None = None):
        super().__init__(settings or Settings())
        self._caps = capabilities

    def check(self, name: str) -> Capability:
        return self._caps.get(name) or Capability(name=name, present=False)

    def detect(self) -> CapabilitySet:
        return self._caps.model_copy(deep=True)


# ═══════════════════════════════════════════════════════════════════
#  Privilege
# ═══════════════════════════════════════════════════════════════════


def _euid() -> int:
    return os.geteuid() if hasattr(os, "geteuid") else -1


def resolve_privilege(
    registry: AdapterRegistry,
    euid: Callable[[], int] = _euid,
) -> list[str] | None:
    """Command prefix for privileged package managers.

    Returns:
        ``[]`` when already root, ``["sudo"]`` when non-interactive
        sudo works, ``None`` when no elevation is available.
    """
    if euid() == 0:
        return []

    receipt = registry.execute(Action(id="privilege.sudo-check", argv=["sudo", "-n", "true"]))
    if receipt.ok:
        return ["sudo"]

    logger.info("Non-interactive sudo unavailable: %s", receipt.error)
    return None
