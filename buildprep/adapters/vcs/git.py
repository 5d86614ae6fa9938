"""
Git client — the git CLI operations the pipeline needs.

Clone, submodule update, shallow fetch of a tag or branch, checkout.
Every operation returns a ``CommandResult``; deciding what a failure
means is the caller's job (see ``core.services.git_refs``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.core.models.command import CommandResult

logger = logging.getLogger(__name__)


class GitClient:
    """Git operations through a ``Runner``.

    Args:
        runner: Runner used for every git invocation.
        program: Git executable (default: ``git`` from the search path).
        remote: Remote fetched from.
    """

    def __init__(self, runner: Runner, program: str = "git", remote: str = "origin"):
        self._runner = runner
        self._program = program
        self._remote = remote

    @property
    def runner(self) -> Runner:
        return self._runner

    def is_available(self) -> bool:
        return self._runner.which(self._program) is not None

    def _git(self, args: list[str], **kwargs) -> CommandResult:
        return self._runner.run(self._program, args, **kwargs)

    # ── Acquisition ─────────────────────────────────────────────

    def clone(
        self,
        repo_url: str,
        destination: Path,
        shallow: bool = True,
        extra_args: list[str] | None = None,
    ) -> tuple[CommandResult | None, bool]:
        """Clone ``repo_url`` into ``destination`` unless it already exists.

        Returns:
            ``(result, skipped)``.  ``result`` is None when skipped.

        Raises:
            ValueError: If the URL or destination is missing.
        """
        if not repo_url:
            raise ValueError("clone requires a repo_url")
        if not destination:
            raise ValueError("clone requires a destination path")

        destination = Path(destination)
        if destination.exists():
            logger.info("Repository already exists at %s, skipping clone", destination)
            return None, True

        destination.parent.mkdir(parents=True, exist_ok=True)
        args = ["clone"]
        if shallow:
            args += ["--depth", "1"]
        args += [repo_url, str(destination), *(extra_args or [])]

        logger.info("Cloning %s into %s (shallow=%s)", repo_url, destination, shallow)
        return self._git(args), False

    def update_submodules(self, repo_path: Path, recursive: bool = False) -> CommandResult:
        if not repo_path:
            raise ValueError("update_submodules requires a repository path")
        args = ["-C", str(repo_path), "submodule", "update", "--init"]
        if recursive:
            args.append("--recursive")
        logger.info("Updating submodules in %s (recursive=%s)", repo_path, recursive)
        return self._git(args)

    # ── Reference resolution primitives ─────────────────────────

    def fetch_tag(self, repo_path: Path, ref: str) -> CommandResult:
        """Shallow-fetch a single tag."""
        return self._git(
            ["-C", str(repo_path), "fetch", "--depth", "1", self._remote, "tag", ref]
        )

    def fetch_branch(self, repo_path: Path, ref: str) -> CommandResult:
        """Shallow-fetch a single branch head."""
        return self._git(
            ["-C", str(repo_path), "fetch", "--depth", "1", self._remote, ref]
        )

    def checkout(self, repo_path: Path, ref: str, detach: bool = False) -> CommandResult:
        args = ["-C", str(repo_path), "checkout"]
        if detach:
            args.append("--detach")
        args.append(ref)
        return self._git(args)
