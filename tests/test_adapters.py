"""
Tests for adapter protocol, registry, mock, and shell adapters.
"""

import shutil
from pathlib import Path

import pytest

from dotsync.adapters.base import ExecutionContext
from dotsync.adapters.languages.node import NvmAdapter
from dotsync.adapters.mock import MockAdapter
from dotsync.adapters.registry import AdapterRegistry, default_registry
from dotsync.adapters.shell.command import ShellCommandAdapter
from dotsync.adapters.shell.functions import ShellFunctionAdapter
from dotsync.adapters.vcs.git import GitRepo, run_git
from dotsync.core.models.action import Action, Receipt

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="test-mock")
        receipt = mock.execute(ExecutionContext(action=Action(id="op-1")))
        assert receipt.ok
        assert mock.call_count == 1

    def test_set_output(self):
        mock = MockAdapter()
        mock.set_output("brew.outdated-formula", "git\nnode\n")
        receipt = mock.execute(ExecutionContext(action=Action(id="brew.outdated-formula")))
        assert receipt.lines == ["git", "node"]

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("op-fail", error="Intentional failure", return_code=100)
        receipt = mock.execute(ExecutionContext(action=Action(id="op-fail")))
        assert receipt.failed
        assert receipt.return_code == 100
        assert "Intentional failure" in receipt.error

    def test_responses_are_copies(self):
        mock = MockAdapter()
        mock.set_output("x", "out")
        first = mock.execute(ExecutionContext(action=Action(id="x")))
        first.output = "changed"
        second = mock.execute(ExecutionContext(action=Action(id="x")))
        assert second.output == "out"

    def test_called_ids(self):
        mock = MockAdapter()
        for i in range(3):
            mock.execute(ExecutionContext(action=Action(id=f"op-{i}")))
        assert mock.called_ids == ["op-0", "op-1", "op-2"]
        assert mock.was_called("op-1")

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("op-1")
        mock.execute(ExecutionContext(action=Action(id="op-1")))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(ExecutionContext(action=Action(id="op-1"))).ok


# ── Registry Tests ───────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_register_and_get(self):
        reg = AdapterRegistry()
        reg.register(ShellCommandAdapter())
        assert reg.get("shell") is not None
        assert reg.get("zsh-function") is None

    def test_unknown_adapter_fails(self):
        reg = AdapterRegistry()
        receipt = reg.execute(Action(id="x", adapter="nope", argv=["true"]))
        assert receipt.failed
        assert "No adapter registered" in receipt.error

    def test_validation_failure(self):
        reg = AdapterRegistry()
        reg.register(ShellCommandAdapter())
        receipt = reg.execute(Action(id="x", argv=[]))
        assert receipt.failed
        assert "Validation failed" in receipt.error

    def test_mock_mode_routes_everything(self):
        reg = AdapterRegistry()
        mock = MockAdapter()
        reg.set_mock_mode(mock)
        assert reg.mock_mode
        receipt = reg.execute(Action(id="zinit.update", adapter="zsh-function", argv=["zinit", "update"]))
        assert receipt.ok
        assert mock.was_called("zinit.update")

    def test_dry_run_skips_mutating(self):
        reg = AdapterRegistry(dry_run=True)
        mock = MockAdapter()
        reg.set_mock_mode(mock)
        receipt = reg.execute(Action(id="brew.upgrade", argv=["brew", "upgrade"], mutating=True))
        assert receipt.status == "skipped"
        assert "brew upgrade" in receipt.output
        assert mock.call_count == 0

    def test_dry_run_runs_queries(self):
        reg = AdapterRegistry(dry_run=True)
        mock = MockAdapter()
        reg.set_mock_mode(mock)
        reg.execute(Action(id="brew.outdated-formula", argv=["brew", "outdated"]))
        assert mock.was_called("brew.outdated-formula")

    def test_adapter_exception_becomes_failure(self):
        class Exploding(MockAdapter):
            def execute(self, context):
                raise RuntimeError("kaboom")

        reg = AdapterRegistry()
        reg.set_mock_mode(Exploding())
        receipt = reg.execute(Action(id="x", argv=["true"]))
        assert receipt.failed
        assert "kaboom" in receipt.error

    def test_default_registry(self):
        reg = default_registry(dry_run=True)
        for name in ("shell", "zsh-function", "nvm"):
            assert reg.get(name) is not None
        assert reg.dry_run

    def test_unavailable_adapter_fails_with_127(self):
        reg = AdapterRegistry()
        mock = MockAdapter(adapter_name="m", available=False)
        reg.register(mock)
        receipt = reg.execute(Action(id="x", adapter="m", argv=["true"]))
        assert receipt.failed
        assert receipt.return_code == 127
        assert mock.call_count == 0

    def test_unavailable_adapter_still_skips_under_dry_run(self):
        reg = AdapterRegistry(dry_run=True)
        reg.register(MockAdapter(adapter_name="m", available=False))
        receipt = reg.execute(Action(id="x", adapter="m", argv=["true"], mutating=True))
        assert receipt.status == "skipped"


# ── Shell Adapter Tests ──────────────────────────────────────────────


class TestShellCommandAdapter:
    def test_success_captures_output(self):
        reg = default_registry()
        receipt = reg.execute(Action(id="echo", argv=["echo", "hello"]))
        assert receipt.ok
        assert receipt.output == "hello"
        assert receipt.return_code == 0

    def test_non_zero_exit(self):
        reg = default_registry()
        receipt = reg.execute(Action(id="false", argv=["false"]))
        assert receipt.failed
        assert receipt.return_code == 1

    def test_missing_binary(self):
        reg = default_registry()
        receipt = reg.execute(Action(id="missing", argv=["dotsync-no-such-tool-xyz"]))
        assert receipt.failed
        assert receipt.return_code == 127
        assert "Command not found" in receipt.error

    def test_cwd(self, tmp_path: Path):
        reg = default_registry()
        receipt = reg.execute(Action(id="pwd", argv=["pwd"]), cwd=tmp_path)
        assert Path(receipt.output).resolve() == tmp_path.resolve()

    def test_env_overlay(self):
        reg = default_registry()
        receipt = reg.execute(
            Action(id="env", argv=["sh", "-c", "echo $DOTSYNC_TEST_VALUE"]),
            env={"DOTSYNC_TEST_VALUE": "42"},
        )
        assert receipt.output == "42"


class TestShellFunctionAdapter:
    def test_requires_source_param(self):
        adapter = ShellFunctionAdapter(shell="bash", adapter_name="bash-function")
        ctx = ExecutionContext(action=Action(id="x", argv=["f"]))
        ok, msg = adapter.validate(ctx)
        assert not ok
        assert "source" in msg

    def test_missing_script(self, tmp_path: Path):
        adapter = ShellFunctionAdapter()
        ctx = ExecutionContext(action=Action(id="x", argv=["f"], params={"source": str(tmp_path / "no.zsh")}))
        ok, msg = adapter.validate(ctx)
        assert not ok
        assert "Script not found" in msg

    @requires_bash
    def test_runs_sourced_function(self, tmp_path: Path):
        script = tmp_path / "lib.sh"
        script.write_text('greet() { echo "hello $1"; }\n')
        reg = AdapterRegistry()
        reg.register(ShellFunctionAdapter(shell="bash", adapter_name="bash-function"))
        receipt = reg.execute(
            Action(id="greet", adapter="bash-function", argv=["greet", "world"], params={"source": str(script)})
        )
        assert receipt.ok, receipt.error
        assert receipt.output == "hello world"

    @requires_bash
    def test_script_output_shown_only_when_not_quiet(self, tmp_path: Path):
        script = tmp_path / "rc.sh"
        script.write_text("echo loading-rc\n")
        reg = AdapterRegistry()
        reg.register(ShellFunctionAdapter(shell="bash", adapter_name="bash-function"))

        quiet = reg.execute(Action(id="q", adapter="bash-function", argv=["true"], params={"source": str(script)}))
        loud = reg.execute(
            Action(
                id="l",
                adapter="bash-function",
                argv=["true"],
                params={"source": str(script), "quiet_source": False},
            )
        )

        assert quiet.output == ""
        assert loud.output == "loading-rc"

    @requires_bash
    def test_function_exit_code_propagates(self, tmp_path: Path):
        script = tmp_path / "lib.sh"
        script.write_text("fail() { return 4; }\n")
        reg = AdapterRegistry()
        reg.register(ShellFunctionAdapter(shell="bash", adapter_name="bash-function"))
        receipt = reg.execute(
            Action(id="fail", adapter="bash-function", argv=["fail"], params={"source": str(script)})
        )
        assert receipt.failed
        assert receipt.return_code == 4


@requires_bash
class TestNvmAdapter:
    def _fake_nvm(self, tmp_path: Path) -> Path:
        script = tmp_path / "nvm.sh"
        script.write_text(
            "nvm() {\n"
            '  case "$1" in\n'
            '    use) [ "$3" = "18.17.0" ] && export FAKE_NODE="$3" && return 0; return 1 ;;\n'
            '    current) echo "v${FAKE_NODE:-none}" ;;\n'
            "  esac\n"
            "}\n"
        )
        return script

    def test_runs_under_selected_version(self, tmp_path: Path):
        reg = AdapterRegistry()
        reg.register(NvmAdapter())
        receipt = reg.execute(
            Action(
                id="nvm.current",
                adapter="nvm",
                argv=["nvm", "current"],
                params={"source": str(self._fake_nvm(tmp_path)), "version": "18.17.0"},
            )
        )
        assert receipt.ok, receipt.error
        assert receipt.output == "v18.17.0"

    def test_use_failure(self, tmp_path: Path):
        reg = AdapterRegistry()
        reg.register(NvmAdapter())
        receipt = reg.execute(
            Action(
                id="nvm.use@99.0.0",
                adapter="nvm",
                argv=["nvm", "current"],
                params={"source": str(self._fake_nvm(tmp_path)), "version": "99.0.0"},
            )
        )
        assert receipt.failed
        assert receipt.error == "nvm use 99.0.0 failed"

    def test_no_version_skips_use(self, tmp_path: Path):
        reg = AdapterRegistry()
        reg.register(NvmAdapter())
        receipt = reg.execute(
            Action(
                id="nvm.current",
                adapter="nvm",
                argv=["nvm", "current"],
                params={"source": str(self._fake_nvm(tmp_path))},
            )
        )
        assert receipt.output == "vnone"


class TestReceiptContract:
    def test_skip_receipt_from_registry_keeps_adapter_name(self):
        reg = AdapterRegistry(dry_run=True)
        reg.register(ShellCommandAdapter())
        receipt = reg.execute(Action(id="x", argv=["rm", "-rf", "/nothing"], mutating=True))
        assert isinstance(receipt, Receipt)
        assert receipt.adapter == "shell"
        assert receipt.metadata["dry_run"] is True


# ── Git Wrapper Tests ────────────────────────────────────────────────


class TestRunGitWithoutGit:
    def test_missing_binary_returns_127(self, tmp_path: Path, no_git):
        result = run_git("status", cwd=tmp_path)
        assert result.returncode == 127
        assert result.stdout == ""
        assert result.stderr

    def test_repo_queries_degrade(self, tmp_path: Path, no_git):
        repo = GitRepo(tmp_path)
        assert not repo.is_repo()
        assert repo.current_branch() is None
        assert repo.count_commits("HEAD..origin/main") == 0
        assert repo.stash_list() == []
