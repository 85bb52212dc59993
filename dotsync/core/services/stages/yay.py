"""Yay — AUR helper; upgrades official repos and AUR together."""

from __future__ import annotations

import re

from dotsync.core.models.report import StageResult
from dotsync.core.services.stages.base import Stage, StageContext, first_column

PACKAGES = "Yay AUR packages"

# yay -Sc complains about partial downloads it cannot open
_DOWNLOAD_NOISE = re.compile(r"could not open file.*download-")


def filter_cache_noise(lines: list[str]) -> list[str]:
    return [ln for ln in lines if not _DOWNLOAD_NOISE.search(ln)]


class YayStage(Stage):
    name = "Yay"
    title = "Yay AUR packages"
    flag = "yay"
    tool = "yay"
    heading = "Updating Yay (AUR)"
    absent_reason = "not installed or not an Arch Linux system"

    def run(self, ctx: StageContext) -> StageResult:
        outdated = self.query(ctx, "yay.query-upgrades", ["yay", "-Qu"], first_column)

        upgrade = self.step(
            ctx,
            "yay.upgrade",
            ["yay", "-Syu", "--noconfirm"],
            "Syncing AUR databases and upgrading packages...",
        )
        if upgrade.failed:
            return self.failed(ctx, upgrade, "yay -Syu")

        ctx.console.info("Cleaning package cache...")
        clean = ctx.run("yay.clean-cache", ["yay", "-Sc", "--noconfirm"], mutating=True)
        stderr = clean.metadata.get("stderr") or clean.error or ""
        noise_free = filter_cache_noise(clean.output.splitlines() + stderr.splitlines())
        ctx.console.detail([ln for ln in noise_free if ln.strip()])

        ctx.console.success("Yay updated successfully")
        return self.updated({PACKAGES: outdated} if outdated else {})
