"""
Update-all use case — the top-level orchestrator.

Runs the dotfiles self-update check, then every package-manager stage
in a fixed order, one at a time, collecting results into a single
UpdateReport. Ends with a shell reload and a summary.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from dotsync.adapters.registry import AdapterRegistry, default_registry
from dotsync.core.models.capability import CapabilitySet
from dotsync.core.models.report import StageResult, UpdateReport
from dotsync.core.models.settings import Settings
from dotsync.core.observability.console import Console
from dotsync.core.services.detection import CapabilityProbe, resolve_privilege
from dotsync.core.services.self_update import check_for_updates
from dotsync.core.services.shell_reload import reload_shell_config
from dotsync.core.services.stages import Stage, StageContext, StageSelection, default_stages
from dotsync.core.services.summary import Summary, summarize

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Result of an update-all run."""

    report: UpdateReport = field(default_factory=UpdateReport)
    summary: Summary = field(default_factory=Summary)
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)
    dry_run: bool = False

    @property
    def has_failures(self) -> bool:
        return bool(self.report.failures)

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "detected": self.capabilities.present(),
            "summary": self.summary.to_dict(),
            "stages": {name: status.value for name, status in self.report.statuses.items()},
        }


def run_update_all(
    selection: StageSelection | None = None,
    settings: Settings | None = None,
    registry: AdapterRegistry | None = None,
    console: Console | None = None,
    probe: CapabilityProbe | None = None,
    privilege_resolver: Callable[[AdapterRegistry], list[str] | None] = resolve_privilege,
    stages: list[Stage] | None = None,
) -> UpdateResult:
    """Update the dotfiles clone and every selected package manager.

    Args:
        selection: Which stages run and whether the git check runs.
        settings: Host paths. Defaults to ``Settings()``.
        registry: Adapter registry; a real one is built when None.
        console: Progress sink; log-only when None.
        probe: Tool detection; a PATH-based probe when None.
        privilege_resolver: Produces the sudo prefix (tests inject one).
        stages: Override the stage list (tests).

    Returns:
        UpdateResult with the report and the computed summary.
    """
    selection = selection or StageSelection()
    settings = settings or Settings()
    registry = registry or default_registry()
    console = console or Console()
    probe = probe or CapabilityProbe(settings)

    report = UpdateReport()
    result = UpdateResult(report=report, dry_run=registry.dry_run)

    if registry.dry_run:
        console.warning("Dry-run: package managers are queried but nothing is changed")

    # ── Dotfiles self-update ─────────────────────────────────────
    git_result = check_for_updates(
        settings.dotfiles_dir,
        console,
        enabled=selection.git_check,
        dry_run=registry.dry_run,
        on_updated=lambda: reload_shell_config(settings, registry, console),
    )
    report.record(git_result)

    # ── Package managers ─────────────────────────────────────────
    capabilities = probe.detect()
    result.capabilities = capabilities

    ctx = StageContext(
        registry=registry,
        console=console,
        settings=settings,
        probe=probe,
        capabilities=capabilities,
        selection=selection,
        report=report,
        privilege_resolver=privilege_resolver,
    )

    for stage in stages if stages is not None else default_stages():
        logger.debug("Running stage %s", stage.name)
        try:
            stage_result = stage.execute(ctx)
        except Exception as e:
            logger.exception("Stage %s raised", stage.name)
            console.error(f"{stage.name} aborted: {e}")
            stage_result = StageResult.failed(stage.name, f"unexpected error: {e}", title=stage.title)
        logger.info("Stage %s: %s", stage.name, stage_result.status.value)
        report.record(stage_result)

    reload_shell_config(settings, registry, console)

    result.summary = summarize(report)
    return result
