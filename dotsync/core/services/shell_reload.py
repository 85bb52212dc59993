"""
Shell configuration reload.

A child process cannot change its parent shell, so this only proves
the rc file still sources cleanly in a fresh zsh and tells the user
how to pick up new aliases in their own session.
"""

from __future__ import annotations

import logging

from dotsync.adapters.registry import AdapterRegistry
from dotsync.core.models.action import Action
from dotsync.core.models.settings import Settings
from dotsync.core.observability.console import Console

logger = logging.getLogger(__name__)

RELOAD_HINT = "Run 'exec zsh' to load new aliases and functions in this shell"


def reload_shell_config(settings: Settings, registry: AdapterRegistry, console: Console) -> bool:
    """Source the rc file in a child zsh. Best effort; never raises.

    Returns:
        True when the rc file was sourced without error.
    """
    rc_file = settings.shell_rc
    if not rc_file.is_file() and not registry.mock_mode:
        logger.debug("No shell rc file at %s", rc_file)
        return False

    console.info(f"Reloading {rc_file.name}...")
    receipt = registry.execute(
        Action(
            id="shell.reload",
            adapter="zsh-function",
            argv=["true"],
            params={"source": str(rc_file), "quiet_source": False},
        )
    )
    if not receipt.ok:
        logger.info("Sourcing %s failed: %s", rc_file, receipt.error)
        return False

    console.info(RELOAD_HINT)
    return True
