"""
Adapter base — the contract between stages and external tools.

Stages never spawn processes themselves. They build Actions and hand
them to the AdapterRegistry, which picks the adapter by name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field

from dotsync.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run one action."""

    action: Action
    cwd: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)
    dry_run: bool = False


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions; failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'nvm')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the adapter's underlying tool is installed. Never raises."""

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action before running it.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """
        if not context.action.argv:
            return False, "Missing command (empty argv)"
        return True, ""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action and return a receipt. MUST never raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
