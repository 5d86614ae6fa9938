"""
Resolve use case — reference resolution on an existing clone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.adapters.vcs.git import GitClient
from buildprep.core.models.checkout import CheckoutOutcome
from buildprep.core.services.git_refs import (
    collect_unique_refs,
    derive_fallback_refs,
    resolve_git_ref,
)


@dataclass
class ResolveResult:
    """Result of resolving a version in a local clone."""

    repo_path: Path | None = None
    candidates: list[str] = field(default_factory=list)
    outcome: CheckoutOutcome | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None and self.outcome.ok

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
            return result
        result["repo_path"] = str(self.repo_path)
        result["candidates"] = self.candidates
        if self.outcome:
            result["outcome"] = self.outcome.model_dump(mode="json")
        return result


def resolve_reference(
    repo_path: Path,
    version: str,
    fallbacks: list[str] | None = None,
    prefix: str = "v",
    runner: Runner | None = None,
) -> ResolveResult:
    """Check out ``version`` (or an alternate spelling) in ``repo_path``.

    Args:
        repo_path: An existing git clone.
        version: Requested version.
        fallbacks: Explicit alternate refs, tried after the derived one.
        prefix: Prefix used to derive the alternate spelling ("" = none).
        runner: Runner for git (default: shell runner).
    """
    result = ResolveResult(repo_path=repo_path)
    if not repo_path.is_dir():
        result.error = f"Repository not found: {repo_path}"
        return result

    if runner is None:
        from buildprep.adapters.shell.command import CommandRunner

        runner = CommandRunner()

    extra = [*derive_fallback_refs(version, prefix), *(fallbacks or [])]
    result.candidates = collect_unique_refs(version, extra)
    result.outcome = resolve_git_ref(GitClient(runner), repo_path, version, extra)
    return result
