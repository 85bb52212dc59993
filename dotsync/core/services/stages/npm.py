"""
npm global packages — across every nvm-installed Node runtime.

With nvm, each installed runtime gets its own pass: switch to it,
collect missing "default" packages plus globals with upgrades
available (npm-check-updates), install the union in one
``npm install -g`` call. The runtime that was active before the stage
is restored afterwards. Without nvm the current runtime gets one pass
(upgrades only).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from dotsync.core.models.action import Receipt
from dotsync.core.models.report import StageResult
from dotsync.core.services.nvm_versions import NodeVersion, parse_nvm_current, parse_nvm_list
from dotsync.core.services.stages.base import Stage, StageContext

logger = logging.getLogger(__name__)

PACKAGES = "NPM packages"
NCU_PACKAGE = "npm-check-updates"


# ═══════════════════════════════════════════════════════════════════
#  Parsing helpers
# ═══════════════════════════════════════════════════════════════════


def read_default_packages(path: Path) -> list[str]:
    """Package names from an nvm default-packages file.

    One name per line; ``#`` comment lines and blank lines are ignored.
    A missing or unreadable file means no defaults.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No default packages file at %s", path)
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable default packages file %s: %s", path, e)
        return []

    names = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            names.append(line)
    return names


def _load_json(text: str) -> dict | None:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def parse_installed_globals(text: str) -> set[str] | None:
    """Names from ``npm list -g --json``; None when unparseable."""
    data = _load_json(text)
    if data is None:
        return None
    return set((data.get("dependencies") or {}).keys())


def parse_ncu_upgrades(text: str) -> list[str]:
    """Names from ``ncu -g --jsonUpgraded`` (``{"name": "version"}``)."""
    data = _load_json(text)
    return list(data.keys()) if data else []


def unique(names: list[str]) -> list[str]:
    """Order-preserving de-duplication."""
    return list(dict.fromkeys(names))


# ═══════════════════════════════════════════════════════════════════
#  Runtime session
# ═══════════════════════════════════════════════════════════════════


class NodeSession:
    """Runs Node tooling under one selected runtime.

    With nvm, every command is executed after ``nvm use <active>``;
    switching only changes ``active``. Without nvm commands run
    directly against whatever node is on PATH.
    """

    def __init__(self, ctx: StageContext, use_nvm: bool):
        self.ctx = ctx
        self.use_nvm = use_nvm
        self.active: str | None = None

    def run(self, action_id: str, argv: list[str], *, mutating: bool = False, capture: bool = True) -> Receipt:
        if not self.use_nvm:
            return self.ctx.run(action_id, argv, mutating=mutating, capture=capture)
        return self.ctx.run(
            action_id,
            argv,
            adapter="nvm",
            mutating=mutating,
            capture=capture,
            params={"source": str(self.ctx.settings.nvm_script), "version": self.active or ""},
        )

    def current(self) -> str | None:
        receipt = self.run("nvm.current", ["nvm", "current"])
        return parse_nvm_current(receipt.output) if receipt.ok else None

    def versions(self) -> list[NodeVersion]:
        receipt = self.run("nvm.list", ["nvm", "list", "--no-alias", "--no-colors"])
        return parse_nvm_list(receipt.output) if receipt.ok else []

    def use(self, version: str) -> bool:
        """Make ``version`` the runtime for subsequent commands."""
        previous, self.active = self.active, version
        receipt = self.run(f"nvm.use@{version}", ["nvm", "current"])
        if not receipt.ok:
            self.active = previous
            return False
        return True


# ═══════════════════════════════════════════════════════════════════
#  Stage
# ═══════════════════════════════════════════════════════════════════


@dataclass
class RuntimePass:
    """Outcome of one runtime's check-and-install pass."""

    ok: bool
    installed: list[str]


class NpmStage(Stage):
    name = "NPM"
    title = "NPM global packages"
    flag = "npm"
    tool = "npm"
    heading = "Updating NPM Global Packages"
    absent_reason = "Node.js not installed"

    def precondition(self, ctx: StageContext) -> StageResult | None:
        # Under nvm, npm is only on PATH inside a shell that sourced nvm.sh
        if ctx.probe.check("nvm").present:
            return None
        return super().precondition(ctx)

    def run(self, ctx: StageContext) -> StageResult:
        use_nvm = ctx.probe.check("nvm").present
        session = NodeSession(ctx, use_nvm)

        if not self._ensure_ncu(ctx, session):
            return self.skipped(f"could not install {NCU_PACKAGE}")

        if use_nvm:
            return self._run_all_runtimes(ctx, session)

        ctx.console.info("NVM not detected, updating global packages for current Node installation...")
        outcome = self._update_runtime(ctx, session, defaults=[], where="")
        if not outcome.ok:
            return StageResult.failed(self.name, "npm install -g failed", title=self.title)
        ctx.console.success("NPM global packages updated successfully")
        return self.updated({PACKAGES: outcome.installed} if outcome.installed else {})

    # ── Steps ───────────────────────────────────────────────────

    def _ensure_ncu(self, ctx: StageContext, session: NodeSession) -> bool:
        if session.run("ncu.version", ["ncu", "--version"]).ok:
            return True

        ctx.console.info(f"{NCU_PACKAGE} not found, attempting to install...")
        receipt = session.run("ncu.install", ["npm", "install", "-g", NCU_PACKAGE], mutating=True)
        if receipt.failed:
            ctx.console.warning(f"Failed to install {NCU_PACKAGE}, skipping npm updates")
            return False
        ctx.console.success(f"{NCU_PACKAGE} installed successfully")
        return True

    def _run_all_runtimes(self, ctx: StageContext, session: NodeSession) -> StageResult:
        ctx.console.info("NVM detected, updating packages for all Node versions...")

        original = session.current()
        versions = session.versions()
        if not versions:
            ctx.console.warning("No Node versions found in nvm")
            return self.skipped("no Node versions in nvm")

        defaults = read_default_packages(ctx.settings.default_packages_path)
        installed: list[str] = []
        passes_ok = 0

        for version in versions:
            ctx.console.info(f"Switching to Node {version}...")
            if not session.use(version.value):
                ctx.console.warning(f"Failed to switch to Node {version}, skipping")
                continue

            outcome = self._update_runtime(ctx, session, defaults, where=f" in Node {version}")
            if outcome.ok:
                passes_ok += 1
                installed.extend(outcome.installed)

        if original:
            ctx.console.info(f"Restoring original Node version: {original}")
            if not session.use(original.lstrip("v")):
                ctx.console.warning(f"Failed to restore Node {original}")

        if passes_ok == 0:
            error = "no Node runtime could be updated"
            ctx.console.error(error)
            return StageResult.failed(self.name, error, title=self.title)

        ctx.console.success("NPM global packages updated successfully")
        return self.updated({PACKAGES: installed} if installed else {})

    def _update_runtime(
        self,
        ctx: StageContext,
        session: NodeSession,
        defaults: list[str],
        where: str,
    ) -> RuntimePass:
        """Install missing defaults plus upgradable globals in one call."""
        ctx.console.info(f"Checking for updates{where}...")
        suffix = f"@{session.active}" if session.active else ""
        wanted: list[str] = []

        if defaults:
            # npm list exits non-zero on peer-dep problems but still prints JSON
            listing = session.run(f"npm.list-globals{suffix}", ["npm", "list", "-g", "--json", "--depth=0"])
            present = parse_installed_globals(listing.output)
            if present is None:
                logger.info("Could not read installed globals%s; not enforcing defaults", where)
            else:
                for pkg in defaults:
                    if pkg not in present:
                        ctx.console.info(f"Default package '{pkg}' not installed, adding to update list")
                        wanted.append(pkg)

        upgrades = session.run(f"ncu.upgraded{suffix}", ["ncu", "-g", "--jsonUpgraded"])
        wanted.extend(parse_ncu_upgrades(upgrades.output))
        wanted = unique(wanted)

        if not wanted:
            ctx.console.info(f"No updates needed{where}")
            return RuntimePass(ok=True, installed=[])

        ctx.console.info(f"Updating {len(wanted)} package(s){where}: {' '.join(wanted)}")
        receipt = session.run(
            f"npm.install{suffix}",
            ["npm", "install", "-g", *wanted],
            mutating=True,
            capture=False,
        )
        if receipt.failed:
            ctx.console.warning(f"Failed to update packages{where}, continuing")
            return RuntimePass(ok=False, installed=[])

        ctx.console.success(f"Updated packages{where}")
        return RuntimePass(ok=True, installed=wanted)
