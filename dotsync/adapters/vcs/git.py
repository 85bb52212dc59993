"""
Git operations bound to one repository path.

Every call passes ``cwd=`` explicitly; nothing here changes the
process working directory. Uses the git CLI only.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

MAIN_BRANCH_CANDIDATES = ("main", "master")


def run_git(
    *args: str,
    cwd: Path,
    timeout: int | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the result.

    Never raises on exit code. A git binary that cannot be started
    yields returncode 127 with the error in stderr.
    """
    cmd = ["git", *args]
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except OSError as e:
        logger.warning("Cannot run git: %s", e)
        return subprocess.CompletedProcess(cmd, 127, stdout="", stderr=str(e))


class GitRepo:
    """Thin query/command wrapper over one working tree."""

    def __init__(self, path: Path, remote: str = "origin"):
        self.path = Path(path)
        self.remote = remote

    def __repr__(self) -> str:
        return f"<GitRepo path={str(self.path)!r}>"

    def git(self, *args: str) -> subprocess.CompletedProcess[str]:
        return run_git(*args, cwd=self.path)

    def _out(self, *args: str) -> str | None:
        r = self.git(*args)
        return r.stdout.strip() if r.returncode == 0 else None

    # ── Queries ─────────────────────────────────────────────────

    def is_repo(self) -> bool:
        if not self.path.is_dir():
            return False
        return self.git("rev-parse", "--git-dir").returncode == 0

    def current_branch(self) -> str | None:
        """Branch name, ``"HEAD"`` when detached, None on error."""
        return self._out("rev-parse", "--abbrev-ref", "HEAD")

    def remote_ref(self, branch: str) -> str:
        return f"{self.remote}/{branch}"

    def has_remote_branch(self, branch: str) -> bool:
        ref = f"refs/remotes/{self.remote}/{branch}"
        return self.git("show-ref", "--verify", "--quiet", ref).returncode == 0

    def detect_main_branch(self) -> str | None:
        """First of main/master that exists on the remote."""
        for candidate in MAIN_BRANCH_CANDIDATES:
            if self.has_remote_branch(candidate):
                return candidate
        return None

    def count_commits(self, revision_range: str) -> int:
        """``rev-list --count``; 0 when the range cannot be resolved."""
        out = self._out("rev-list", "--count", revision_range)
        try:
            return int(out) if out else 0
        except ValueError:
            return 0

    def log_oneline(self, *revisions: str) -> list[str]:
        out = self._out("log", "--oneline", *revisions)
        return [ln for ln in out.splitlines() if ln.strip()] if out else []

    def has_tracked_changes(self) -> bool:
        """Modified or staged tracked files relative to HEAD."""
        self.git("update-index", "-q", "--refresh")
        return self.git("diff-index", "--quiet", "HEAD", "--").returncode != 0

    def untracked_files(self) -> list[str]:
        out = self._out("ls-files", "--others", "--exclude-standard")
        return [ln for ln in out.splitlines() if ln.strip()] if out else []

    def is_dirty(self, include_untracked: bool = True) -> bool:
        if self.has_tracked_changes():
            return True
        return include_untracked and bool(self.untracked_files())

    def status_short(self) -> list[str]:
        out = self._out("status", "--short")
        return [ln for ln in out.splitlines() if ln.strip()] if out else []

    def stash_list(self) -> list[str]:
        out = self._out("stash", "list")
        return [ln for ln in out.splitlines() if ln.strip()] if out else []

    # ── Commands ────────────────────────────────────────────────

    def fetch(self, prune: bool = True, remote: str | None = None) -> subprocess.CompletedProcess[str]:
        args = ["fetch"]
        if prune:
            args.append("--prune")
        if remote:
            args.append(remote)
        return self.git(*args)

    def pull(self, branch: str, *, rebase: bool = False) -> subprocess.CompletedProcess[str]:
        mode = "--rebase" if rebase else "--ff-only"
        return self.git("pull", mode, self.remote, branch)

    def merge(self, ref: str) -> subprocess.CompletedProcess[str]:
        return self.git("merge", ref)

    def rebase(self, ref: str) -> subprocess.CompletedProcess[str]:
        return self.git("rebase", ref)

    def stash_push(self, message: str, include_untracked: bool = True) -> subprocess.CompletedProcess[str]:
        args = ["stash", "push"]
        if include_untracked:
            args.append("--include-untracked")
        args += ["-m", message]
        return self.git(*args)

    def stash_pop(self) -> subprocess.CompletedProcess[str]:
        return self.git("stash", "pop")
