"""
Runner base — the contract between the engine and external programs.

The engine never calls ``subprocess`` directly.  It goes through a
``Runner``, which executes a program and returns a ``CommandResult``.
Runners never raise for tool failures: a non-zero exit or a launch
error is captured in the result.

Two implementations exist: ``CommandRunner`` (real processes) and
``MockRunner`` (scripted responses for tests).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from buildprep.core.models.command import CommandResult
from buildprep.core.models.environment import EnvironmentOverlay


class Runner(ABC):
    """Abstract base class for command runners.

    Every runner is bound to an ``EnvironmentOverlay``; each invocation
    and each program lookup reads its accumulated search paths.
    """

    def __init__(self, overlay: EnvironmentOverlay | None = None):
        self._overlay = overlay if overlay is not None else EnvironmentOverlay()

    @property
    def overlay(self) -> EnvironmentOverlay:
        return self._overlay

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def which(self, program: str) -> str | None:
        """Resolve a program to an executable path, or None."""

    @abstractmethod
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
        """Run a program to completion.

        MUST never raise for a failing program.  Launch failures are
        reported through ``CommandResult.error``.

        Args:
            program: Program name or path.
            args: Arguments.
            cwd: Working directory.
            env: Extra variables for this call, layered over the overlay.
            capture: Capture stdout/stderr (False streams them to the
                terminal, for long build steps).
            input: Text fed to stdin.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
