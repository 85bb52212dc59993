"""Homebrew — formulae, casks and cleanup."""

from __future__ import annotations

from dotsync.core.models.report import StageResult
from dotsync.core.services.stages.base import Stage, StageContext

FORMULAE = "Homebrew formulae"
CASKS = "Homebrew casks"


class HomebrewStage(Stage):
    name = "Homebrew"
    title = "Homebrew packages"
    flag = "homebrew"
    tool = "brew"
    heading = "Updating Homebrew"
    absent_reason = "not available on this system"

    def run(self, ctx: StageContext) -> StageResult:
        items: dict[str, list[str]] = {}

        sync = self.step(ctx, "brew.update", ["brew", "update"], "Updating Homebrew formula list...")
        self.tolerate(ctx, sync, "brew update failed, upgrading against the cached formula list")

        # The outdated lists are read before upgrading; brew may still
        # upgrade a slightly different set (e.g. new dependencies).
        formulae = self.query(ctx, "brew.outdated-formula", ["brew", "outdated", "--formula", "--quiet"])
        upgrade = self.step(ctx, "brew.upgrade", ["brew", "upgrade"], "Upgrading formulae...")
        if upgrade.failed:
            return self.failed(ctx, upgrade, "brew upgrade")
        if formulae:
            items[FORMULAE] = formulae

        casks = self.query(ctx, "brew.outdated-cask", ["brew", "outdated", "--cask", "--quiet"])
        cask_upgrade = self.step(ctx, "brew.upgrade-cask", ["brew", "upgrade", "--cask"], "Upgrading casks...")
        if self.tolerate(ctx, cask_upgrade, "brew upgrade --cask failed, casks left as they were") and casks:
            items[CASKS] = casks

        cleanup = self.step(ctx, "brew.cleanup", ["brew", "cleanup"], "Cleaning up old versions...")
        self.tolerate(ctx, cleanup, "brew cleanup failed")

        ctx.console.success("Homebrew updated successfully")
        return self.updated(items)
