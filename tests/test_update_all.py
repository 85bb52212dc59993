"""
Tests for the update-all orchestrator and the shell reload.
"""

from dotsync.adapters.mock import MockAdapter
from dotsync.core.models.capability import CapabilitySet
from dotsync.core.models.report import StageStatus
from dotsync.core.services.detection import StaticProbe
from dotsync.core.services.shell_reload import RELOAD_HINT, reload_shell_config
from dotsync.core.services.stages import HomebrewStage, NpmStage, StageSelection
from dotsync.core.use_cases.update_all import run_update_all


def run(registry, console, settings, *tools, flags=(), git_check=False, privilege=("sudo",)):
    return run_update_all(
        selection=StageSelection.from_flags(flags, git_check=git_check),
        settings=settings,
        registry=registry,
        console=console,
        probe=StaticProbe(CapabilitySet.of(*tools), settings),
        privilege_resolver=lambda _reg: list(privilege) if privilege is not None else None,
    )


class TestRunUpdateAll:
    def test_only_selected_stage_runs(self, registry, console, settings, mock):
        result = run(registry, console, settings, "brew", "npm", "apt-get", flags=("npm",))
        report = result.report

        assert report.status_of("NPM") == StageStatus.UPDATED
        for name in ("Zinit", "Homebrew", "APT", "Pacman", "Yay"):
            assert report.status_of(name) == StageStatus.SKIPPED
            assert f"{name} (not requested by user)" in report.skipped
        assert not any(i.startswith("brew.") for i in mock.called_ids)

    def test_git_check_disabled(self, registry, console, settings):
        result = run(registry, console, settings, git_check=False)
        assert "Git self-update (disabled by flag)" in result.report.skipped

    def test_git_check_missing_directory(self, registry, console, settings):
        result = run(registry, console, settings, git_check=True)
        assert "Git self-update (directory not found)" in result.report.skipped

    def test_git_not_installed_skips_self_update(self, registry, console, settings, mock, no_git):
        settings.dotfiles_dir.mkdir()
        result = run(registry, console, settings, "brew", git_check=True)

        assert "Git self-update (not a git repo)" in result.report.skipped
        assert result.report.status_of("Homebrew") == StageStatus.UPDATED
        assert mock.was_called("brew.upgrade")

    def test_all_skipped_is_a_normal_run(self, registry, console, settings):
        result = run(registry, console, settings)
        assert not result.has_failures
        assert result.summary.updated == []
        assert len(result.summary.skipped) == 7

    def test_failure_does_not_stop_later_stages(self, registry, console, settings, mock):
        mock.set_failure("brew.upgrade")
        mock.set_output("ncu.upgraded", '{"typescript": "5.3.0"}')
        result = run(registry, console, settings, "brew", "npm")

        assert result.report.status_of("Homebrew") == StageStatus.FAILED
        assert result.report.status_of("NPM") == StageStatus.UPDATED
        assert result.summary.failed["Homebrew"].startswith("brew upgrade failed")
        assert result.summary.groups[0].names == ["typescript"]

    def test_raising_stage_is_recorded_as_failed(self, registry, console, settings, mock):
        class BrokenStage(HomebrewStage):
            def run(self, ctx):
                raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")

        result = run_update_all(
            selection=StageSelection.from_flags((), git_check=False),
            settings=settings,
            registry=registry,
            console=console,
            probe=StaticProbe(CapabilitySet.of("brew", "npm"), settings),
            privilege_resolver=lambda _reg: ["sudo"],
            stages=[BrokenStage(), NpmStage()],
        )

        assert result.report.status_of("Homebrew") == StageStatus.FAILED
        assert result.summary.failed["Homebrew"].startswith("unexpected error:")
        assert result.report.status_of("NPM") == StageStatus.UPDATED
        assert any("Homebrew aborted" in m for m in console.of_kind("error"))

    def test_yay_excludes_pacman(self, registry, console, settings, mock):
        result = run(registry, console, settings, "pacman", "yay")
        assert "Pacman (using yay instead)" in result.report.skipped
        assert result.report.status_of("Yay") == StageStatus.UPDATED
        assert not any(i.startswith("pacman.") for i in mock.called_ids)

    def test_privilege_missing(self, registry, console, settings, mock):
        result = run(registry, console, settings, "apt-get", privilege=None)
        assert "APT (no sudo access)" in result.report.skipped
        assert not any(i.startswith("apt.") for i in mock.called_ids)

    def test_capabilities_snapshot(self, registry, console, settings):
        result = run(registry, console, settings, "brew")
        assert result.capabilities.present() == ["brew"]
        assert result.to_dict()["detected"] == ["brew"]

    def test_shell_reloaded_at_end(self, registry, console, settings, mock):
        run(registry, console, settings)
        assert mock.called_ids[-1] == "shell.reload"

    def test_to_dict(self, registry, console, settings):
        data = run(registry, console, settings, "brew", flags=("homebrew",)).to_dict()
        assert data["stages"]["Homebrew"] == "updated"
        assert data["stages"]["APT"] == "skipped"
        assert data["dry_run"] is False


class TestReloadShellConfig:
    def test_sources_rc_file(self, registry, console, settings, mock):
        settings.shell_rc.write_text("alias ll='ls -l'\n")
        assert reload_shell_config(settings, registry, console)
        action = mock.call_log[0].action
        assert action.adapter == "zsh-function"
        assert action.params["source"] == str(settings.shell_rc)
        assert action.params["quiet_source"] is False
        assert RELOAD_HINT in console.of_kind("info")

    def test_failure_is_quiet(self, registry, console, settings, mock):
        mock.set_failure("shell.reload")
        assert not reload_shell_config(settings, registry, console)
        assert console.of_kind("warning") == []

    def test_missing_rc_file_with_real_adapters(self, console, settings):
        from dotsync.adapters.registry import default_registry

        assert not reload_shell_config(settings, default_registry(), console)
        assert console.messages == []

    def test_runs_under_dry_run(self, console, settings):
        from dotsync.adapters.registry import AdapterRegistry

        reg = AdapterRegistry(dry_run=True)
        mock = MockAdapter()
        reg.set_mock_mode(mock)
        reload_shell_config(settings, reg, console)
        assert mock.was_called("shell.reload")
