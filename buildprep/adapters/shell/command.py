"""
Command runner — execute external programs and capture their output.

This is the SINGLE PLACE where ``subprocess.run`` is called.  Every
other component (git, probes, requirement checks, build recipes) goes
through it, so environment handling and logging live here.

No timeouts: these are one-shot setup operations, and a hung tool
hangs the pipeline.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence

from buildprep.adapters.base import Runner
from buildprep.core.models.command import CommandResult

logger = logging.getLogger(__name__)


class CommandRunner(Runner):
    """Run programs as real subprocesses, with the overlay environment."""

    @property
    def name(self) -> str:
        return "shell"

    def which(self, program: str) -> str | None:
        return shutil.which(program, path=self.overlay.get("PATH"))

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
        descriptor = " ".join([program, *args])
        if capture:
            logger.debug("Executing: %s (cwd=%s)", descriptor, cwd)
        else:
            logger.info("Executing: %s (cwd=%s)", descriptor, cwd)

        start = time.monotonic()
        try:
            result = subprocess.run(
                [program, *args],
                cwd=cwd,
                env=self.overlay.as_env(env),
                capture_output=capture,
                text=True,
                encoding="utf-8",
                errors="replace",
                input=input,
            )
        except OSError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("Cannot launch %s: %s", program, e)
            return CommandResult.launch_failure(
                program,
                args,
                error=f"cannot launch {program}: {e}",
                cwd=cwd,
                duration_ms=elapsed_ms,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        outcome = CommandResult.completed(
            program,
            args,
            exit_status=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            cwd=cwd,
            duration_ms=elapsed_ms,
        )

        if outcome.ok:
            logger.debug("Command succeeded: %s (%d ms)", descriptor, elapsed_ms)
        else:
            logger.info(
                "Command failed: %s (exit %s, %d ms)\n%s",
                descriptor,
                outcome.exit_status,
                elapsed_ms,
                outcome.output,
            )
        return outcome
