"""Pacman (Arch Linux) — privileged; yields to yay when yay runs."""

from __future__ import annotations

from dotsync.core.models.report import StageResult
from dotsync.core.services.stages.base import Stage, StageContext, first_column

PACKAGES = "Pacman packages"
YIELDS_TO_YAY = "using yay instead"


class PacmanStage(Stage):
    name = "Pacman"
    title = "Pacman packages"
    flag = "pacman"
    tool = "pacman"
    heading = "Updating Pacman"
    absent_reason = "not an Arch Linux system"
    privileged = True

    def execute(self, ctx: StageContext) -> StageResult:
        # yay wraps pacman and also handles the official repos, so it
        # wins regardless of the pacman flag
        if ctx.capabilities.has("yay") and ctx.selection.is_enabled("yay"):
            ctx.console.section(self.name)
            ctx.console.skip("Skipping Pacman (yay will handle all package updates)")
            return self.skipped(YIELDS_TO_YAY)
        return super().execute(ctx)

    def run(self, ctx: StageContext) -> StageResult:
        keep = ctx.settings.pacman_cache_keep

        outdated = self.query(ctx, "pacman.query-upgrades", ["pacman", "-Qu"], first_column)

        upgrade = self.step(
            ctx,
            "pacman.upgrade",
            self.sudo(ctx, "pacman", "-Syu", "--noconfirm"),
            "Syncing package databases and upgrading packages...",
        )
        if upgrade.failed:
            return self.failed(ctx, upgrade, "pacman -Syu")

        ctx.console.info("Removing orphaned packages...")
        orphans = self.query(ctx, "pacman.query-orphans", ["pacman", "-Qdtq"])
        if orphans:
            removed = ctx.run(
                "pacman.remove-orphans",
                self.sudo(ctx, "pacman", "-Rns", "--noconfirm", *orphans),
                capture=False,
                mutating=True,
            )
            if self.tolerate(ctx, removed, "Failed to remove orphaned packages"):
                ctx.console.success(f"Removed {len(orphans)} orphaned package(s)")
        else:
            ctx.console.info("No orphaned packages found")

        clean = self.step(
            ctx,
            "pacman.paccache",
            self.sudo(ctx, "paccache", f"-rk{keep}"),
            f"Cleaning package cache (keeping {keep} versions)...",
        )
        self.tolerate(ctx, clean, "paccache not found, skipping cache cleanup (install pacman-contrib)")

        ctx.console.success("Pacman updated successfully")
        return self.updated({PACKAGES: outdated} if outdated else {})
