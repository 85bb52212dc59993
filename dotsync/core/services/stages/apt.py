"""APT (Debian/Ubuntu) — privileged; update, upgrade, dist-upgrade, cleanup."""

from __future__ import annotations

from dotsync.core.models.report import StageResult
from dotsync.core.services.stages.base import Stage, StageContext

PACKAGES = "APT packages"


def parse_upgradable(lines: list[str]) -> list[str]:
    """Names from ``apt list --upgradable``.

    Lines look like ``git/jammy-updates 1:2.34.1-1ubuntu1.10 amd64 [upgradable from: ...]``;
    the leading ``Listing...`` line and apt's CLI warning are dropped.
    """
    names = []
    for line in lines:
        if "/" not in line or line.startswith(("Listing", "WARNING")):
            continue
        names.append(line.split("/", 1)[0])
    return names


class AptStage(Stage):
    name = "APT"
    title = "APT packages"
    flag = "apt"
    tool = "apt-get"
    heading = "Updating APT"
    absent_reason = "not a Debian/Ubuntu system"
    privileged = True

    def run(self, ctx: StageContext) -> StageResult:
        sync = self.step(
            ctx, "apt.update", self.sudo(ctx, "apt-get", "update"), "Updating package list...",
        )
        self.tolerate(ctx, sync, "apt-get update failed, upgrading against the cached package list")

        upgradable = self.query(ctx, "apt.list-upgradable", ["apt", "list", "--upgradable"], parse_upgradable)

        upgrade = self.step(
            ctx, "apt.upgrade", self.sudo(ctx, "apt-get", "upgrade", "-y"), "Upgrading packages...",
        )
        if upgrade.failed:
            return self.failed(ctx, upgrade, "apt-get upgrade")

        dist = self.step(
            ctx,
            "apt.dist-upgrade",
            self.sudo(ctx, "apt-get", "dist-upgrade", "-y"),
            "Performing distribution upgrade...",
        )
        self.tolerate(ctx, dist, "apt-get dist-upgrade failed")

        autoremove = self.step(
            ctx,
            "apt.autoremove",
            self.sudo(ctx, "apt-get", "autoremove", "-y"),
            "Removing unnecessary packages...",
        )
        self.tolerate(ctx, autoremove, "apt-get autoremove failed")

        autoclean = self.step(
            ctx, "apt.autoclean", self.sudo(ctx, "apt-get", "autoclean"), "Cleaning package cache...",
        )
        self.tolerate(ctx, autoclean, "apt-get autoclean failed")

        ctx.console.success("APT updated successfully")
        return self.updated({PACKAGES: upgradable} if upgradable else {})
