"""
Tests for runners, the git client and the registry reader.
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from buildprep.adapters.mock import MockRunner
from buildprep.adapters.registry_query import RegistryReader
from buildprep.adapters.shell.command import CommandRunner
from buildprep.adapters.vcs.git import GitClient
from buildprep.core.models.command import CommandResult
from buildprep.core.models.environment import EnvironmentOverlay

# ── Command result ───────────────────────────────────────────────────


class TestCommandResult:
    def test_ok(self):
        assert CommandResult.completed("git", ["status"]).ok

    def test_non_zero(self):
        result = CommandResult.completed("git", [], exit_status=128, stderr="fatal\n")
        assert not result.ok
        assert result.failure_reason() == "exited with status 128"
        assert result.output == "fatal"

    def test_launch_failure(self):
        result = CommandResult.launch_failure("nope", ["-v"], error="cannot launch nope")
        assert not result.ok
        assert result.exit_status is None
        assert result.failure_reason() == "cannot launch nope"

    def test_output_joins_streams(self):
        result = CommandResult.completed("x", [], stdout=" out \n", stderr="err\n")
        assert result.output == "out\nerr"
        assert result.command_line == "x"


# ── Mock runner ──────────────────────────────────────────────────────


class TestMockRunner:
    def test_default_success(self):
        mock = MockRunner()
        result = mock.run("git", ["status"])
        assert result.ok
        assert mock.call_count == 1

    def test_set_response_by_subsequence(self):
        mock = MockRunner()
        mock.set_response(["origin", "tag"], stdout="fetched")
        assert mock.run("git", ["fetch", "origin", "tag", "v1"]).stdout == "fetched"
        assert mock.run("git", ["fetch", "origin", "main"]).stdout == ""

    def test_latest_pattern_wins(self):
        mock = MockRunner()
        mock.set_failure(["fetch"])
        mock.set_response(["fetch", "origin", "main"], stdout="ok")
        assert mock.run("git", ["fetch", "origin", "main"]).ok
        assert not mock.run("git", ["fetch", "origin", "dev"]).ok

    def test_matches_program_basename(self):
        mock = MockRunner()
        mock.set_response(["cmake", "--version"], stdout="cmake version 3.28.1")
        assert "3.28.1" in mock.run("/usr/local/bin/cmake", ["--version"]).stdout

    def test_launch_error_response(self):
        mock = MockRunner()
        mock.set_response(["ghost"], error="cannot launch ghost")
        result = mock.run("ghost")
        assert not result.ok
        assert result.error == "cannot launch ghost"

    def test_which(self):
        mock = MockRunner(programs={"git": "/usr/bin/git"})
        mock.add_program("cmake")
        assert mock.which("git") == "/usr/bin/git"
        assert mock.which("cmake") == "/usr/bin/cmake"
        assert mock.which("zig") is None

    def test_env_log_uses_overlay(self):
        overlay = EnvironmentOverlay(base={"PATH": "/usr/bin"}, separator=":")
        mock = MockRunner(overlay=overlay)
        overlay.add("PATH", "/sdk/bin")
        mock.run("cl", env={"CL": "/nologo"})
        assert mock.env_log[0]["PATH"] == "/sdk/bin:/usr/bin"
        assert mock.env_log[0]["CL"] == "/nologo"

    def test_reset(self):
        mock = MockRunner()
        mock.set_failure(["git"])
        mock.run("git")
        mock.reset()
        assert mock.call_count == 0
        assert mock.run("git").ok


# ── Command runner ───────────────────────────────────────────────────


class TestCommandRunner:
    def test_name(self):
        assert CommandRunner().name == "shell"

    def test_run_captures(self):
        completed = subprocess.CompletedProcess(["git", "--version"], 0, "git version 2.43.0\n", "")
        runner = CommandRunner(overlay=EnvironmentOverlay(base={"PATH": "/usr/bin"}))
        with patch("buildprep.adapters.shell.command.subprocess.run", return_value=completed) as run:
            result = runner.run("git", ["--version"], cwd="/tmp")

        assert result.ok
        assert result.stdout == "git version 2.43.0\n"
        assert result.cwd == "/tmp"
        _, kwargs = run.call_args
        assert run.call_args.args[0] == ["git", "--version"]
        assert kwargs["env"] == {"PATH": "/usr/bin"}
        assert kwargs["capture_output"] is True

    def test_non_zero_exit_is_a_value(self):
        completed = subprocess.CompletedProcess(["cmake"], 2, "", "CMake Error")
        with patch("buildprep.adapters.shell.command.subprocess.run", return_value=completed):
            result = CommandRunner(overlay=EnvironmentOverlay(base={})).run("cmake")

        assert not result.ok
        assert result.exit_status == 2
        assert result.stderr == "CMake Error"

    def test_launch_failure_is_a_value(self):
        with patch(
            "buildprep.adapters.shell.command.subprocess.run",
            side_effect=FileNotFoundError(2, "No such file or directory"),
        ):
            result = CommandRunner(overlay=EnvironmentOverlay(base={})).run("nonexistent-tool")

        assert not result.ok
        assert result.exit_status is None
        assert "cannot launch nonexistent-tool" in result.error

    def test_undecodable_output_is_replaced(self):
        script = "import sys; sys.stdout.buffer.write(b'\\xffversion 1.2\\n')"
        result = CommandRunner().run(sys.executable, ["-c", script])

        assert result.ok
        assert result.stdout == "\ufffdversion 1.2\n"

    def test_decoding_is_tolerant(self):
        completed = subprocess.CompletedProcess(["reg"], 0, "", "")
        with patch("buildprep.adapters.shell.command.subprocess.run", return_value=completed) as run:
            CommandRunner(overlay=EnvironmentOverlay(base={})).run("reg", ["query", "HKLM"])

        assert run.call_args.kwargs["errors"] == "replace"
        assert run.call_args.kwargs["encoding"] == "utf-8"

    def test_which_reads_overlay_path(self, tmp_path):
        overlay = EnvironmentOverlay(base={"PATH": "/nowhere"})
        runner = CommandRunner(overlay=overlay)
        with patch("buildprep.adapters.shell.command.shutil.which", return_value=None) as which:
            overlay.add("PATH", str(tmp_path))
            runner.which("cl")
        assert which.call_args.kwargs["path"] == overlay.get("PATH")


# ── Git client ───────────────────────────────────────────────────────


class TestGitClient:
    def test_clone_shallow(self, tmp_path, runner, git):
        dest = tmp_path / "git" / "dawn"

        result, skipped = git.clone("https://example.com/dawn.git", dest)

        assert not skipped
        assert result.ok
        assert dest.parent.is_dir()
        assert runner.commands() == [
            ["git", "clone", "--depth", "1", "https://example.com/dawn.git", str(dest)]
        ]

    def test_clone_full(self, tmp_path, runner, git):
        git.clone("https://example.com/x.git", tmp_path / "x", shallow=False)
        assert "--depth" not in runner.commands()[0]

    def test_clone_skipped_when_present(self, tmp_path, runner, git):
        (tmp_path / "dawn").mkdir()
        result, skipped = git.clone("https://example.com/dawn.git", tmp_path / "dawn")
        assert skipped
        assert result is None
        assert runner.call_count == 0

    def test_clone_requires_url(self, tmp_path, git):
        with pytest.raises(ValueError):
            git.clone("", tmp_path / "x")

    def test_update_submodules(self, runner, git):
        git.update_submodules(Path("/r"), recursive=True)
        assert runner.commands() == [
            ["git", "-C", "/r", "submodule", "update", "--init", "--recursive"]
        ]

    def test_fetch_commands(self, runner, git):
        git.fetch_tag(Path("/r"), "v1")
        git.fetch_branch(Path("/r"), "main")
        assert runner.commands() == [
            ["git", "-C", "/r", "fetch", "--depth", "1", "origin", "tag", "v1"],
            ["git", "-C", "/r", "fetch", "--depth", "1", "origin", "main"],
        ]

    def test_is_available(self, runner, git):
        assert not git.is_available()
        runner.add_program("git")
        assert git.is_available()


# ── Registry reader ──────────────────────────────────────────────────


class TestRegistryReader:
    KEY = r"HKLM\SOFTWARE\Example"

    def test_get_value(self, runner):
        runner.set_response(
            ["query", self.KEY],
            stdout=f"\n{self.KEY}\n    InstallDir    REG_SZ    C:\\Example\n",
        )
        assert RegistryReader(runner).get_value(self.KEY, "InstallDir") == "C:\\Example"

    def test_missing_key(self, runner):
        runner.set_failure(["query", self.KEY])
        reader = RegistryReader(runner)
        assert reader.query(self.KEY) is None
        assert reader.get_value(self.KEY, "InstallDir") is None
