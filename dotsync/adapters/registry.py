"""
Adapter registry — central dispatch for every external command.

Stages never talk to adapters directly, always through the registry.
It handles registration, lookup, mock mode and dry-run.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from dotsync.adapters.base import Adapter, ExecutionContext
from dotsync.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry and dispatcher for adapters.

    Features:
        - Register adapters by name
        - Mock mode: route every action to one mock adapter
        - Dry-run: mutating actions return a skipped receipt
    """

    def __init__(self, dry_run: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._dry_run = dry_run
        self._mock_adapter: Adapter | None = None

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    @property
    def mock_mode(self) -> bool:
        return self._mock_adapter is not None

    def set_mock_mode(self, mock_adapter: Adapter | None) -> None:
        """Route all actions to ``mock_adapter`` (None disables)."""
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def execute(
        self,
        action: Action,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> Receipt:
        """Execute an action through its adapter. Never raises.

        1. Resolve the adapter (or the mock)
        2. Validate the action
        3. Skip it if mutating under dry-run
        4. Fail it if the adapter's tool is missing
        5. Execute and time it
        """
        start_time = time.monotonic()
        context = ExecutionContext(
            action=action,
            cwd=cwd,
            env=env or {},
            dry_run=self._dry_run,
        )

        adapter = self._mock_adapter or self.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        try:
            is_valid, error_msg = adapter.validate(context)
        except Exception as e:
            is_valid, error_msg = False, f"Validation error: {e}"
        if not is_valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {error_msg}",
            )

        if self._dry_run and action.mutating:
            logger.info("[dry-run] %s", action.display)
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] Would execute: {action.display}",
                metadata={"dry_run": True},
            )

        if not adapter.is_available():
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Adapter '{adapter.name}' is not available on this system",
                return_code=127,
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            # Adapters should never raise
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt


def default_registry(dry_run: bool = False) -> AdapterRegistry:
    """Registry with the real shell, zsh-function and nvm adapters."""
    from dotsync.adapters.languages.node import NvmAdapter
    from dotsync.adapters.shell.command import ShellCommandAdapter
    from dotsync.adapters.shell.functions import ShellFunctionAdapter

    registry = AdapterRegistry(dry_run=dry_run)
    registry.register(ShellCommandAdapter())
    registry.register(ShellFunctionAdapter())
    registry.register(NvmAdapter())
    return registry
