"""
Tests for the CLI commands and global options.

Commands construct their own shell runner, so these tests patch the
runner class with a prepared ``MockRunner``.
"""

import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from buildprep.adapters.mock import MockRunner
from buildprep.main import cli

RUNNER_CLASS = "buildprep.adapters.shell.command.CommandRunner"


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "buildprep.yml"
    path.write_text(textwrap.dedent(body))
    return path


CHECK_CONFIG = """\
    name: demo
    requirements:
      - name: CMake
        program: cmake
        minimum_version: "3.16.0"
        hint: Install CMake 3.16+
      - name: Ninja
        program: ninja
        required: false
      - name: MSVC
        probe: msvc
        platforms: [win32]
"""

BUILD_CONFIG = """\
    name: demo
    requirements: []
    dependencies:
      - name: dawn
        git_url: https://example.com/dawn.git
        version: v1.0
"""


@pytest.fixture
def mock_runner() -> MockRunner:
    mock = MockRunner()
    mock.add_program("cmake")
    mock.set_response(["cmake", "--version"], stdout="cmake version 3.28.1\n")
    return mock


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "validate the toolchain" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestCheckCommand:
    def test_satisfied(self, tmp_path, mock_runner):
        config = _write_config(tmp_path, CHECK_CONFIG)
        with patch(RUNNER_CLASS, return_value=mock_runner):
            result = CliRunner().invoke(cli, ["--config", str(config), "check"])

        assert result.exit_code == 0, result.output
        assert "TOOLCHAIN VALIDATION" in result.output
        assert "CMake (v3.28.1)" in result.output
        assert "Ninja (optional)" in result.output
        assert "Summary: 2 satisfied, 1 unsatisfied" in result.output
        assert "Toolchain satisfied" in result.output

    def test_mandatory_failure_exits_1(self, tmp_path):
        config = _write_config(tmp_path, CHECK_CONFIG)
        with patch(RUNNER_CLASS, return_value=MockRunner()):
            result = CliRunner().invoke(cli, ["--config", str(config), "check"])

        assert result.exit_code == 1
        assert "Reason: command \"cmake\" was not found on PATH" in result.output
        assert "Install CMake 3.16+" in result.output

    def test_skip(self, tmp_path):
        config = _write_config(tmp_path, CHECK_CONFIG)
        with patch(RUNNER_CLASS, return_value=MockRunner()):
            result = CliRunner().invoke(
                cli, ["--config", str(config), "check", "--skip", "cmake"]
            )
        assert result.exit_code == 0, result.output

    def test_json(self, tmp_path, mock_runner):
        config = _write_config(tmp_path, CHECK_CONFIG)
        with patch(RUNNER_CLASS, return_value=mock_runner):
            result = CliRunner().invoke(cli, ["--config", str(config), "check", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert [r["name"] for r in data["reports"]] == ["CMake", "Ninja", "MSVC"]
        assert data["failures"] == []

    def test_invalid_config(self, tmp_path):
        config = _write_config(tmp_path, "dependencies: [{name: x}]\n")
        result = CliRunner().invoke(cli, ["--config", str(config), "check"])
        assert result.exit_code == 1
        assert "Invalid build configuration" in result.output


class TestBuildCommand:
    def test_build_success(self, tmp_path):
        config = _write_config(tmp_path, BUILD_CONFIG)
        with patch(RUNNER_CLASS, return_value=MockRunner()):
            result = CliRunner().invoke(cli, ["--config", str(config), "build"])

        assert result.exit_code == 0, result.output
        assert "BUILD SUMMARY" in result.output
        assert "Ref: v1.0 (tag)" in result.output
        assert "Build pipeline completed" in result.output

    def test_build_failure(self, tmp_path):
        config = _write_config(tmp_path, BUILD_CONFIG)
        mock = MockRunner()
        mock.set_failure(["fetch"], stderr="couldn't find remote ref")
        with patch(RUNNER_CLASS, return_value=mock):
            result = CliRunner().invoke(cli, ["--config", str(config), "build"])

        assert result.exit_code == 1
        assert "✗ Failed" in result.output
        assert "Failed to check out dawn reference" in result.output

    def test_ref_override_json(self, tmp_path):
        config = _write_config(tmp_path, BUILD_CONFIG)
        mock = MockRunner()
        with patch(RUNNER_CLASS, return_value=mock):
            result = CliRunner().invoke(
                cli, ["--config", str(config), "build", "--json", "--ref", "dawn=v2.0"]
            )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["report"]["dependencies"][0]["version"] == "v2.0"

    def test_bad_ref_override(self, tmp_path):
        config = _write_config(tmp_path, BUILD_CONFIG)
        result = CliRunner().invoke(cli, ["--config", str(config), "build", "--ref", "dawn"])
        assert result.exit_code == 2
        assert "NAME=VERSION" in result.output

    def test_unknown_dependency_override(self, tmp_path):
        config = _write_config(tmp_path, BUILD_CONFIG)
        with patch(RUNNER_CLASS, return_value=MockRunner()):
            result = CliRunner().invoke(
                cli, ["--config", str(config), "build", "--ref", "skia=m120"]
            )
        assert result.exit_code == 1
        assert "Unknown dependency" in result.output

    def test_toolchain_failure_reported(self, tmp_path):
        config = _write_config(
            tmp_path,
            """\
            requirements:
              - name: Git
                program: git
            dependencies:
              - name: dawn
                git_url: https://example.com/dawn.git
            """,
        )
        with patch(RUNNER_CLASS, return_value=MockRunner()):
            result = CliRunner().invoke(cli, ["--config", str(config), "build"])

        assert result.exit_code == 1
        assert "Toolchain requirements not met" in result.output
        assert "BUILD SUMMARY" not in result.output


class TestResolveCommand:
    def test_resolves_fallback(self, tmp_path):
        mock = MockRunner()
        mock.set_failure(["origin", "tag", "1.2.0"])
        mock.set_failure(["origin", "1.2.0"])
        with patch(RUNNER_CLASS, return_value=mock):
            result = CliRunner().invoke(cli, ["resolve", str(tmp_path), "1.2.0"])

        assert result.exit_code == 0, result.output
        assert "Checked out tag v1.2.0" in result.output

    def test_nothing_resolves(self, tmp_path):
        mock = MockRunner()
        mock.set_failure(["fetch"])
        with patch(RUNNER_CLASS, return_value=mock):
            result = CliRunner().invoke(
                cli, ["resolve", str(tmp_path), "1.2.0", "--prefix", "", "--fallback", "main"]
            )

        assert result.exit_code == 1
        assert "No candidate resolved: 1.2.0, main" in result.output

    def test_missing_repo(self, tmp_path):
        result = CliRunner().invoke(cli, ["resolve", str(tmp_path / "nope"), "1.0"])
        assert result.exit_code == 1
        assert "Repository not found" in result.output


class TestBuildRunLog:
    def test_failure_points_at_run_log(self, tmp_path):
        config = _write_config(tmp_path, BUILD_CONFIG)
        mock = MockRunner()
        mock.set_failure(["fetch"], stderr="couldn't find remote ref")
        with patch(RUNNER_CLASS, return_value=mock):
            result = CliRunner().invoke(cli, ["--config", str(config), "build"])

        log_path = tmp_path / ".git.temp" / "buildprep.log"
        assert result.exit_code == 1
        assert f"Run log: {log_path.resolve()}" in result.output
        assert "couldn't find remote ref" in log_path.read_text(encoding="utf-8")

    def test_shell_braces_in_steps(self, tmp_path):
        config = _write_config(
            tmp_path,
            """\
            requirements: []
            dependencies:
              - name: dawn
                git_url: https://example.com/dawn.git
                steps:
                  - [sh, -c, "echo ${HOME}"]
            """,
        )
        mock = MockRunner()
        with patch(RUNNER_CLASS, return_value=mock):
            result = CliRunner().invoke(cli, ["--config", str(config), "build"])

        assert result.exit_code == 0, result.output
        assert ["sh", "-c", "echo ${HOME}"] in mock.commands()
