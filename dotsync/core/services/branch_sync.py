"""
Branch sync — merge the latest origin main into the current branch, or
rebase the current branch onto it.

Shared flow for ``merge-main`` and ``rebase-main``:
repo check → branch check → target resolution → fetch → dry-run
listing or the actual merge/rebase. Every git call runs against an
explicit repository path.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

from dotsync.adapters.vcs.git import GitRepo
from dotsync.core.observability.console import Console

logger = logging.getLogger(__name__)

SyncMode = Literal["merge", "rebase"]

STASH_MESSAGE = "Auto-stash before rebase"


class BranchSyncResult(BaseModel):
    """Outcome of a merge-main / rebase-main run."""

    mode: str
    exit_code: int = 0
    branch: str | None = None
    target: str | None = None
    error: str | None = None
    commits: list[str] = Field(default_factory=list)   # dry-run listing
    dry_run: bool = False
    stashed: bool = False
    stash_pending: bool = False     # stash left for a manual ``git stash pop``

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def _fail(result: BranchSyncResult, console: Console, error: str, *notes: str) -> BranchSyncResult:
    console.error(f"Error: {error}")
    for note in notes:
        console.info(note)
    result.exit_code = 1
    result.error = error
    return result


def resolve_target(repo: GitRepo, branch: str | None) -> tuple[str | None, str | None]:
    """Pick the branch to sync with.

    Returns:
        ``(target, None)`` on success, ``(None, error)`` otherwise.
    """
    if branch:
        if not repo.has_remote_branch(branch):
            return None, f"Branch '{repo.remote_ref(branch)}' does not exist"
        return branch, None

    main = repo.detect_main_branch()
    if main is None:
        return None, f"Could not find {repo.remote_ref('main')} or {repo.remote_ref('master')}"
    return main, None


def sync_branch(
    repo: GitRepo,
    mode: SyncMode,
    target: str | None = None,
    dry_run: bool = False,
    console: Console | None = None,
) -> BranchSyncResult:
    """Merge or rebase the current branch against ``origin/<target>``.

    Args:
        repo: Repository to operate on.
        mode: ``"merge"`` or ``"rebase"``.
        target: Explicit branch name; auto-detects main/master when None.
        dry_run: List the affected commits and stop.
        console: Where progress goes.

    Returns:
        BranchSyncResult with ``exit_code`` 0 on success or dry-run.
    """
    console = console or Console()
    result = BranchSyncResult(mode=mode, dry_run=dry_run)
    verb = "merge" if mode == "merge" else "rebase"

    if not repo.is_repo():
        return _fail(result, console, "Not in a git repository")

    branch = repo.current_branch()
    if branch is None:
        return _fail(result, console, "Could not determine the current branch")
    if branch == "HEAD":
        return _fail(result, console, "You are in detached HEAD state", "Please checkout a branch first")
    result.branch = branch

    resolved, error = resolve_target(repo, target)
    if resolved is None:
        return _fail(result, console, error or "No target branch")
    result.target = resolved

    if branch == resolved:
        into = "into itself" if mode == "merge" else "onto itself"
        return _fail(result, console, f"You are already on {resolved}", f"Cannot {verb} a branch {into}")

    upstream = repo.remote_ref(resolved)
    if mode == "merge":
        console.info(f"Merging latest {upstream} into {branch}")
    else:
        console.info(f"Rebasing {branch} onto latest {upstream}")

    fetched = repo.fetch(prune=True)
    if fetched.returncode != 0:
        return _fail(result, console, f"git fetch failed: {fetched.stderr.strip()}")

    if dry_run:
        if mode == "merge":
            result.commits = repo.log_oneline(f"{branch}..{upstream}")
        else:
            result.commits = repo.log_oneline(branch, f"^{upstream}")
        console.info(f"Commits that would be {verb}d:")
        console.detail(result.commits)
        console.info(f"Dry-run complete. Run without --dry-run to execute the {verb}.")
        return result

    if mode == "merge":
        return _merge(repo, upstream, result, console)
    return _rebase(repo, upstream, result, console)


def _merge(repo: GitRepo, upstream: str, result: BranchSyncResult, console: Console) -> BranchSyncResult:
    if repo.has_tracked_changes():
        console.detail(repo.status_short())
        return _fail(
            result,
            console,
            "You have uncommitted changes",
            "Please commit or stash your changes before merging",
        )

    merged = repo.merge(upstream)
    console.detail([ln for ln in merged.stdout.splitlines() if ln.strip()])
    if merged.returncode != 0:
        logger.info("git merge %s failed: %s", upstream, merged.stderr.strip())
        return _fail(
            result,
            console,
            "Merge failed - you may need to resolve conflicts",
            "After resolving conflicts, run 'git merge --continue' or 'git commit'",
        )

    console.success("Merge completed successfully")
    return result


def _rebase(repo: GitRepo, upstream: str, result: BranchSyncResult, console: Console) -> BranchSyncResult:
    if repo.has_tracked_changes():
        console.info("Stashing uncommitted changes...")
        stashed = repo.stash_push(STASH_MESSAGE, include_untracked=True)
        if stashed.returncode != 0:
            return _fail(result, console, f"git stash failed: {stashed.stderr.strip()}")
        result.stashed = True

    rebased = repo.rebase(upstream)
    console.detail([ln for ln in rebased.stdout.splitlines() if ln.strip()])
    if rebased.returncode != 0:
        logger.info("git rebase %s failed: %s", upstream, rebased.stderr.strip())
        notes = ["After resolving conflicts, run 'git rebase --continue'"]
        if result.stashed:
            result.stash_pending = True
            notes.append(
                "Your changes are stashed and can be restored with 'git stash pop' after completing the rebase"
            )
        return _fail(result, console, "Rebase failed - you may need to resolve conflicts", *notes)

    console.success("Rebase completed successfully")

    if result.stashed:
        console.info("Restoring stashed changes...")
        popped = repo.stash_pop()
        if popped.returncode != 0:
            result.stash_pending = True
            return _fail(
                result,
                console,
                "Failed to automatically restore stashed changes",
                "You may need to manually resolve stash conflicts with 'git stash pop'",
            )

    return result
