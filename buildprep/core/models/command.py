"""
Command result model — the execution contract for external programs.

The runner sends a program + arguments, and gets a ``CommandResult``
back.  Never exceptions: a non-zero exit is a failed result, and a
program that could not be launched at all sets ``error``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of one external program invocation."""

    program: str
    args: list[str] = Field(default_factory=list)
    cwd: str | None = None
    exit_status: int | None = None   # None when the process never ran
    stdout: str = ""
    stderr: str = ""
    error: str | None = None         # launch failure (not found, permission)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the program ran and exited with status 0."""
        return self.exit_status == 0 and self.error is None

    @property
    def succeeded(self) -> bool:
        return self.ok

    @property
    def command_line(self) -> str:
        return " ".join([self.program, *self.args])

    @property
    def output(self) -> str:
        """Trimmed stdout and stderr, joined by a newline."""
        parts = [p.strip() for p in (self.stdout, self.stderr) if p]
        return "\n".join(p for p in parts if p)

    def failure_reason(self) -> str:
        if self.error:
            return self.error
        return f"exited with status {self.exit_status}"

    @classmethod
    def completed(
        cls,
        program: str,
        args: list[str],
        exit_status: int = 0,
        stdout: str = "",
        stderr: str = "",
        **kwargs,
    ) -> CommandResult:
        """Create a result for a process that ran to completion."""
        return cls(
            program=program,
            args=list(args),
            exit_status=exit_status,
            stdout=stdout,
            stderr=stderr,
            **kwargs,
        )

    @classmethod
    def launch_failure(
        cls,
        program: str,
        args: list[str],
        error: str,
        **kwargs,
    ) -> CommandResult:
        """Create a result for a process that could not be started."""
        return cls(program=program, args=list(args), error=error, **kwargs)
