"""Zinit — zsh plugin manager (core self-update, plugins, cache clear)."""

from __future__ import annotations

from dotsync.core.models.action import Receipt
from dotsync.core.models.report import StageResult
from dotsync.core.services.stages.base import Stage, StageContext


class ZinitStage(Stage):
    name = "Zinit"
    title = "Zinit plugins"
    flag = "zinit"
    tool = "zinit"
    heading = "Updating Zinit"
    absent_reason = "not installed"

    def _zinit(self, ctx: StageContext, action_id: str, *args: str, message: str) -> Receipt:
        return self.step(
            ctx,
            action_id,
            ["zinit", *args],
            message,
            adapter="zsh-function",
            params={"source": str(ctx.settings.zinit_script)},
        )

    def run(self, ctx: StageContext) -> StageResult:
        core = self._zinit(ctx, "zinit.self-update", "self-update", message="Updating Zinit core...")
        self.tolerate(ctx, core, "Zinit core self-update failed, continuing with plugins")

        plugins = self._zinit(ctx, "zinit.update", "update", "--parallel", message="Updating Zinit plugins...")
        if plugins.failed:
            return self.failed(ctx, plugins, "zinit update --parallel")
        ctx.console.success("Zinit updated successfully")

        cleanup = self._zinit(ctx, "zinit.cclear", "cclear", message="Cleaning up...")
        self.tolerate(ctx, cleanup, "zinit cclear failed")

        return self.updated()
