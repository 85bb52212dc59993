"""
Action and Receipt models — the command execution contract.

Stages describe every external command as an Action. Adapters run it
and hand back a Receipt. Failures (non-zero exit, missing binary) are
captured in the Receipt; adapters never raise.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A requested external command.

    ``id`` is stable and descriptive (``brew.upgrade``,
    ``npm.install@18.17.0``) so test doubles can script responses
    per command.
    """

    id: str
    adapter: str = "shell"
    argv: list[str] = Field(default_factory=list)
    params: dict[str, Any] = Field(default_factory=dict)
    capture: bool = True            # False = stream output to the terminal
    mutating: bool = False          # skipped under --dry-run

    @property
    def display(self) -> str:
        """Command line as the user would type it."""
        return " ".join(self.argv)


class Receipt(BaseModel):
    """Result of executing an Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the command failed."""
        return self.status == "failed"

    @property
    def lines(self) -> list[str]:
        """Non-empty, stripped output lines."""
        return [ln.strip() for ln in self.output.splitlines() if ln.strip()]

    @classmethod
    def success(
        cls,
        adapter: str,
        action_id: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        kwargs.setdefault("return_code", 0)
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        adapter: str,
        action_id: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="skipped",
            output=reason,
            **kwargs,
        )
