"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest

from dotsync.adapters.mock import MockAdapter
from dotsync.adapters.registry import AdapterRegistry
from dotsync.core.models.capability import CapabilitySet
from dotsync.core.models.settings import Settings
from dotsync.core.observability.console import RecordingConsole
from dotsync.core.services.detection import StaticProbe
from dotsync.core.services.stages.base import StageContext, StageSelection

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


# ── Host description ────────────────────────────────────────────────


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every path into tmp_path."""
    return Settings(
        dotfiles_dir=tmp_path / "dotfiles",
        nvm_dir=tmp_path / "nvm",
        zinit_home=tmp_path / "zinit" / "zinit.git",
        shell_rc=tmp_path / ".zshrc",
    )


@pytest.fixture
def mock() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def registry(mock: MockAdapter) -> AdapterRegistry:
    """Registry routing every action to the mock."""
    reg = AdapterRegistry()
    reg.set_mock_mode(mock)
    return reg


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def no_git(tmp_path: Path, monkeypatch) -> Path:
    """PATH reduced to an empty directory, so no git binary resolves."""
    empty = tmp_path / "empty-bin"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty


@pytest.fixture
def make_ctx(registry: AdapterRegistry, console: RecordingConsole, settings: Settings):
    """Factory for a StageContext on a described host.

    ``tools`` are the present capabilities, ``flags`` the selected
    stages (empty = all), ``privilege`` what the sudo check returns.
    """

    def _make(
        *tools: str,
        flags: tuple[str, ...] = (),
        privilege: list[str] | None = None,
        reg: AdapterRegistry | None = None,
    ) -> StageContext:
        caps = CapabilitySet.of(*tools)
        prefix = ["sudo"] if privilege is None else privilege
        return StageContext(
            registry=reg or registry,
            console=console,
            settings=settings,
            probe=StaticProbe(caps, settings),
            capabilities=caps,
            selection=StageSelection.from_flags(flags),
            privilege_resolver=lambda _reg: prefix,
        )

    return _make


# ── Git sandboxes ───────────────────────────────────────────────────


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and fail the test on error."""
    result = subprocess.run(["git", *args], cwd=str(cwd), capture_output=True, text=True)
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout.strip()


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolated git identity and config for real repositories."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_MERGE_AUTOEDIT", "no")
    monkeypatch.setenv("GIT_EDITOR", "true")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")


@dataclass
class GitSandbox:
    """A bare origin, a clone that publishes to it, and the clone under test."""

    origin: Path
    upstream: Path
    work: Path
    main: str

    def commit(self, repo: Path, filename: str, content: str = "x\n", message: str | None = None) -> None:
        (repo / filename).write_text(content)
        git(repo, "add", filename)
        git(repo, "commit", "-q", "-m", message or f"Add {filename}")

    def publish(self, filename: str, content: str = "x\n", branch: str | None = None) -> None:
        """Commit on the upstream clone and push it to origin."""
        branch = branch or self.main
        git(self.upstream, "checkout", "-q", branch)
        self.commit(self.upstream, filename, content)
        git(self.upstream, "push", "-q", "origin", branch)


def make_sandbox(root: Path, main: str = "main") -> GitSandbox:
    origin = root / "origin.git"
    upstream = root / "upstream"
    work = root / "work"

    git(root, "init", "-q", "--bare", "-b", main, str(origin))
    git(root, "init", "-q", "-b", main, str(upstream))
    sandbox = GitSandbox(origin=origin, upstream=upstream, work=work, main=main)
    sandbox.commit(upstream, "README", "dotfiles\n", "Initial commit")
    git(upstream, "remote", "add", "origin", str(origin))
    git(upstream, "push", "-q", "-u", "origin", main)
    git(root, "clone", "-q", str(origin), str(work))
    return sandbox


@pytest.fixture
def sandbox(tmp_path: Path, git_env: None) -> GitSandbox:
    return make_sandbox(tmp_path)
