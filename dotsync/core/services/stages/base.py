"""
Stage template — the shared shape of every package-manager update.

A stage runs in four steps:

1. not selected on the command line  → skipped ("not requested by user")
2. precondition (tool present, sudo available) fails → skipped, no mutation
3. sub-steps in a fixed order (sync → upgrade → secondary → orphans → clean)
4. the stage's "before" lists become its updated-item groups

Cleanup-type failures are warnings. A failed core upgrade ends the
stage as ``failed``; the run always moves on to the next stage.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from dotsync.adapters.registry import AdapterRegistry
from dotsync.core.models.action import Action, Receipt
from dotsync.core.models.capability import CapabilitySet
from dotsync.core.models.report import StageResult, UpdateReport
from dotsync.core.models.settings import Settings
from dotsync.core.observability.console import Console
from dotsync.core.services.detection import CapabilityProbe, resolve_privilege

logger = logging.getLogger(__name__)

NOT_REQUESTED = "not requested by user"

# Short CLI flag → stage flag name
SHORT_FLAGS: dict[str, str] = {
    "a": "apt",
    "p": "pacman",
    "y": "yay",
    "n": "npm",
    "h": "homebrew",
    "z": "zinit",
}


@dataclass(frozen=True)
class StageSelection:
    """Which package-manager stages the user asked for.

    With no selective flag every stage runs; with any flag only the
    named ones do. The git self-update check has its own switch.
    """

    enabled: frozenset[str] = frozenset(SHORT_FLAGS.values())
    git_check: bool = True

    @classmethod
    def from_flags(cls, selected: Iterable[str] = (), git_check: bool = True) -> StageSelection:
        chosen = frozenset(selected)
        unknown = chosen - set(SHORT_FLAGS.values())
        if unknown:
            raise ValueError(f"Unknown stage(s): {', '.join(sorted(unknown))}")
        if not chosen:
            return cls(git_check=git_check)
        return cls(enabled=chosen, git_check=git_check)

    def is_enabled(self, flag: str) -> bool:
        return flag in self.enabled


@dataclass
class StageContext:
    """Everything a stage needs, owned by one update-all run."""

    registry: AdapterRegistry
    console: Console
    settings: Settings
    probe: CapabilityProbe
    capabilities: CapabilitySet
    selection: StageSelection = field(default_factory=StageSelection)
    report: UpdateReport = field(default_factory=UpdateReport)
    privilege_resolver: Callable[[AdapterRegistry], list[str] | None] = resolve_privilege
    _privilege: list[str] | None = field(default=None, init=False)
    _privilege_checked: bool = field(default=False, init=False)

    @property
    def dry_run(self) -> bool:
        return self.registry.dry_run

    def privilege_prefix(self) -> list[str] | None:
        """Sudo prefix, resolved once per run (see resolve_privilege)."""
        if not self._privilege_checked:
            self._privilege = self.privilege_resolver(self.registry)
            self._privilege_checked = True
        return self._privilege

    def run(
        self,
        action_id: str,
        argv: list[str],
        *,
        adapter: str = "shell",
        capture: bool = True,
        mutating: bool = False,
        params: dict[str, Any] | None = None,
        cwd: Path | None = None,
    ) -> Receipt:
        action = Action(
            id=action_id,
            adapter=adapter,
            argv=argv,
            capture=capture,
            mutating=mutating,
            params=params or {},
        )
        return self.registry.execute(action, cwd=cwd)


class Stage(ABC):
    """One package-manager update routine."""

    name: ClassVar[str]             # "Homebrew": report key
    title: ClassVar[str]            # "Homebrew packages": summary label
    flag: ClassVar[str]             # "homebrew": selection key
    tool: ClassVar[str]             # "brew": required capability
    heading: ClassVar[str]          # "Updating Homebrew"
    absent_reason: ClassVar[str] = ""
    privileged: ClassVar[bool] = False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r}>"

    # ── Template ────────────────────────────────────────────────

    def execute(self, ctx: StageContext) -> StageResult:
        """Run the stage with its selection and precondition checks."""
        if not ctx.selection.is_enabled(self.flag):
            ctx.console.section(self.name)
            ctx.console.skip(f"{self.name} skipped ({NOT_REQUESTED})")
            return self.skipped(NOT_REQUESTED)

        blocked = self.precondition(ctx)
        if blocked is not None:
            return blocked

        ctx.console.section(self.heading)
        return self.run(ctx)

    def precondition(self, ctx: StageContext) -> StageResult | None:
        """Return a skipped result when the stage cannot run."""
        if not ctx.probe.check(self.tool).present:
            ctx.console.section(self.name)
            reason = self.absent_reason or "not installed"
            ctx.console.skip(f"{self.tool} not found, skipping ({reason})")
            return self.skipped(reason)

        if self.privileged and ctx.privilege_prefix() is None:
            ctx.console.section(self.heading)
            ctx.console.warning(
                f"sudo access required for {self.tool}. Skipping {self.name} updates."
            )
            ctx.console.info(f"Run with sudo or configure passwordless sudo for {self.tool}")
            return self.skipped("no sudo access")

        return None

    @abstractmethod
    def run(self, ctx: StageContext) -> StageResult:
        """The manager-specific sub-steps."""

    # ── Helpers ─────────────────────────────────────────────────

    def skipped(self, reason: str) -> StageResult:
        return StageResult.skipped(self.name, reason, title=self.title)

    def updated(self, items: dict[str, list[str]] | None = None) -> StageResult:
        return StageResult.updated(self.name, title=self.title, items=items)

    def failed(
        self,
        ctx: StageContext,
        receipt: Receipt,
        step: str,
        items: dict[str, list[str]] | None = None,
    ) -> StageResult:
        error = f"{step} failed: {receipt.error or 'exit code ' + str(receipt.return_code)}"
        ctx.console.error(error)
        ctx.console.warning(f"Skipping remaining {self.name} steps")
        return StageResult.failed(self.name, error, title=self.title, items=items)

    def sudo(self, ctx: StageContext, *argv: str) -> list[str]:
        """Prefix ``argv`` with the run's privilege prefix."""
        return [*(ctx.privilege_prefix() or []), *argv]

    def step(
        self,
        ctx: StageContext,
        action_id: str,
        argv: list[str],
        message: str,
        **kwargs: Any,
    ) -> Receipt:
        """Announce and run a mutating sub-step, streaming its output."""
        ctx.console.info(message)
        kwargs.setdefault("capture", False)
        return ctx.run(action_id, argv, mutating=True, **kwargs)

    def tolerate(self, ctx: StageContext, receipt: Receipt, warning: str) -> bool:
        """Warn on a non-fatal failure. Returns True when it succeeded."""
        if receipt.failed:
            logger.info("%s: tolerated failure of %s: %s", self.name, receipt.action_id, receipt.error)
            ctx.console.warning(warning)
            return False
        return True

    def query(
        self,
        ctx: StageContext,
        action_id: str,
        argv: list[str],
        parse: Callable[[list[str]], list[str]] | None = None,
        **kwargs: Any,
    ) -> list[str]:
        """Best-effort read-only query. Failure degrades to ``[]``."""
        receipt = ctx.run(action_id, argv, **kwargs)
        if not receipt.ok:
            logger.debug("%s: query %s failed: %s", self.name, action_id, receipt.error)
            return []
        lines = receipt.lines
        return parse(lines) if parse else lines


def first_column(lines: list[str]) -> list[str]:
    """``name version -> version`` lines to package names."""
    return [ln.split()[0] for ln in lines if ln.split()]
