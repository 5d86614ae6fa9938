"""
Mock runner — scripted test double for every external program.

Used by tests (and ``--dry-run``-style experiments) to simulate tool
output without a real toolchain.  Succeeds with empty output by
default; responses are configured per command pattern.

A pattern is a token sequence matched as a contiguous run anywhere in
``[program, *args]``, so ``["origin", "tag"]`` matches every tag fetch
and ``["origin", "tag", "2.0.0"]`` only one.  The most recently
registered matching pattern wins.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence

from buildprep.adapters.base import Runner
from buildprep.core.models.command import CommandResult
from buildprep.core.models.environment import EnvironmentOverlay


def _matches(command: list[str], pattern: Sequence[str]) -> bool:
    size = len(pattern)
    if size == 0:
        return True
    return any(
        command[i:i + size] == list(pattern)
        for i in range(len(command) - size + 1)
    )


class MockRunner(Runner):
    """Universal mock runner for testing."""

    def __init__(
        self,
        programs: Mapping[str, str] | None = None,
        overlay: EnvironmentOverlay | None = None,
        default_stdout: str = "",
    ):
        super().__init__(overlay if overlay is not None else EnvironmentOverlay(base={}))
        self._programs: dict[str, str] = dict(programs or {})
        self._default_stdout = default_stdout
        self._responses: list[tuple[tuple[str, ...], CommandResult]] = []
        self._call_log: list[CommandResult] = []
        self._env_log: list[dict[str, str]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[CommandResult]:
        """Every invocation received, as (unfilled) results."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def env_log(self) -> list[dict[str, str]]:
        """The environment each invocation would have received."""
        return self._env_log

    def commands(self) -> list[list[str]]:
        """Every invocation as ``[program, *args]``."""
        return [[c.program, *c.args] for c in self._call_log]

    def add_program(self, program: str, path: str | None = None) -> None:
        """Make ``which(program)`` resolve."""
        self._programs[program] = path or f"/usr/bin/{program}"

    def which(self, program: str) -> str | None:
        return self._programs.get(program)

    def set_response(
        self,
        pattern: Sequence[str],
        stdout: str = "",
        stderr: str = "",
        exit_status: int = 0,
        error: str | None = None,
    ) -> None:
        """Set the result for commands matching ``pattern``."""
        template = CommandResult(
            program="",
            exit_status=None if error else exit_status,
            stdout=stdout,
            stderr=stderr,
            error=error,
        )
        self._responses.append((tuple(pattern), template))

    def set_failure(
        self,
        pattern: Sequence[str],
        stderr: str = "Mock failure",
        exit_status: int = 1,
    ) -> None:
        """Configure commands matching ``pattern`` to fail."""
        self.set_response(pattern, stderr=stderr, exit_status=exit_status)

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        cwd: str | None = None,
        env: Mapping[str, str | None] | None = None,
        capture: bool = True,
        input: str | None = None,
    ) -> CommandResult:
        args = [str(a) for a in args]
        self._call_log.append(CommandResult(program=program, args=args, cwd=cwd))
        self._env_log.append(self.overlay.as_env(env))

        command = [program, *args]
        basename = os.path.basename(program)
        for pattern, template in reversed(self._responses):
            if _matches(command, pattern) or _matches([basename, *args], pattern):
                return template.model_copy(
                    update={"program": program, "args": args, "cwd": cwd}
                )

        return CommandResult.completed(
            program, args, exit_status=0, stdout=self._default_stdout, cwd=cwd
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._env_log.clear()
        self._responses.clear()
