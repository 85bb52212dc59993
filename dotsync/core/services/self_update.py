"""
Git self-update — bring the dotfiles clone up to date before updating
packages.

Only acts when the clone sits on its main branch with a clean tree.
Every other situation is reported as skipped with a reason and the run
moves on. A failed pull is reported as failed; the run still moves on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from dotsync.adapters.vcs.git import GitRepo
from dotsync.core.models.report import StageResult
from dotsync.core.observability.console import Console

logger = logging.getLogger(__name__)

NAME = "Git self-update"
TITLE = "Dotfiles repository"

DISABLED = "disabled by flag"
NOT_FOUND = "directory not found"
NOT_A_REPO = "not a git repo"
FETCH_FAILED = "fetch failed"
NO_MAIN_BRANCH = "no main branch found"
NOT_ON_MAIN = "not on main branch"
UNCOMMITTED = "uncommitted changes"
DRY_RUN = "dry-run"


def _skipped(reason: str) -> StageResult:
    return StageResult.skipped(NAME, reason, title=TITLE)


def _display_path(path: Path) -> str:
    home = Path.home()
    try:
        return f"~/{path.relative_to(home)}"
    except ValueError:
        return str(path)


def check_for_updates(
    dotfiles_dir: Path,
    console: Console,
    *,
    enabled: bool = True,
    dry_run: bool = False,
    on_updated: Callable[[], object] | None = None,
) -> StageResult:
    """Fetch the dotfiles clone and fast-forward or rebase it onto main.

    Args:
        dotfiles_dir: The clone to update.
        console: Where progress goes.
        enabled: False when ``--no-git-check`` was passed.
        dry_run: Report what would be pulled without pulling.
        on_updated: Called after a successful pull (shell reload).
    """
    if not enabled:
        console.section("Git Self-Update Check")
        console.skip("Git self-update check disabled (--no-git-check flag)")
        return _skipped(DISABLED)

    if not dotfiles_dir.is_dir():
        console.section("Git Self-Update Check")
        console.skip(f"Dotfiles directory not found at {dotfiles_dir}")
        return _skipped(NOT_FOUND)

    console.section("Checking for Dotfiles Updates")
    repo = GitRepo(dotfiles_dir)

    if not repo.is_repo():
        console.warning("Not in a git repository")
        console.skip("Git self-update check skipped")
        return _skipped(NOT_A_REPO)

    console.info("Fetching latest changes from remote...")
    fetched = repo.fetch(prune=True, remote=repo.remote)
    if fetched.returncode != 0:
        logger.info("git fetch failed in %s: %s", dotfiles_dir, fetched.stderr.strip())
        console.warning("Failed to fetch from remote repository")
        console.warning("This might be a network issue or remote access problem")
        console.info("Continuing with package updates...")
        return _skipped(FETCH_FAILED)

    main = repo.detect_main_branch()
    if main is None:
        console.warning(f"Could not find {repo.remote_ref('main')} or {repo.remote_ref('master')}")
        console.skip("Git self-update check skipped")
        return _skipped(NO_MAIN_BRANCH)

    current = repo.current_branch() or ""
    if current != main:
        console.warning(f"Not on {main} branch (currently on: {current})")
        console.skip("Git self-update check skipped (not on main branch)")
        return _skipped(NOT_ON_MAIN)

    upstream = repo.remote_ref(main)
    behind = repo.count_commits(f"HEAD..{upstream}")
    if behind == 0:
        console.success("Dotfiles are up-to-date with remote")
        return StageResult.current(NAME, title=TITLE)

    console.info(f"Found {behind} new commit(s) available:")
    console.detail(repo.log_oneline(f"HEAD..{upstream}"))

    where = _display_path(dotfiles_dir)
    if repo.is_dirty(include_untracked=True):
        console.warning("Cannot pull updates - you have uncommitted changes:")
        console.detail(repo.status_short())
        console.warning("Updates are available but can't be pulled until you commit your changes.")
        console.info("To pull these updates later, commit your changes and re-run update-all:")
        console.hints([
            f"cd {where}",
            "git status           # to see changes",
            "git add .            # to stage changes",
            "git commit -m '...'  # to commit changes",
            "git pull --rebase    # to pull and rebase",
        ])
        console.info("Continuing with package updates...")
        return _skipped(UNCOMMITTED)

    ahead = repo.count_commits(f"{upstream}..HEAD")
    rebase = ahead > 0

    if dry_run:
        how = "rebase" if rebase else "fast-forward"
        console.info(f"[dry-run] Would {how} {behind} commit(s) from {upstream}")
        return _skipped(DRY_RUN)

    if rebase:
        console.info(f"You have {ahead} local commit(s) ahead of remote")
        console.info("Using rebase to replay your commits on top of remote changes...")
    else:
        console.info("Pulling latest changes...")

    pulled = repo.pull(main, rebase=rebase)
    if pulled.returncode != 0:
        logger.warning("git pull failed in %s: %s", dotfiles_dir, pulled.stderr.strip())
        if rebase:
            console.warning("Failed to rebase changes from remote")
            console.warning("This might indicate merge conflicts during rebase")
            hints = ["git status", "git rebase --abort      # to cancel the rebase", "git pull --rebase       # to try again"]
        else:
            console.warning("Failed to pull changes from remote")
            console.warning("This might indicate merge conflicts or other issues")
            hints = ["git status", "git pull"]
        console.info("Please resolve manually:")
        console.hints([f"cd {where}", *hints])
        return StageResult.failed(NAME, "git pull --rebase failed" if rebase else "git pull --ff-only failed", title=TITLE)

    if rebase:
        console.success("Successfully rebased local commits on top of remote changes")
    else:
        console.success("Successfully pulled latest dotfiles changes")

    if on_updated is not None:
        on_updated()
    console.info("Continuing with package updates...")
    return StageResult.updated(NAME, title=TITLE)
