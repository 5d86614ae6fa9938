"""
Build recipes — the per-dependency build delegate.

The pipeline treats a recipe as an opaque, possibly long-running,
fallible black box: it hands over a ``BuildRequest`` and gets a
``BuildResult``.  It never inspects or retries a recipe's internals.

``CommandRecipe`` is the declarative default: it runs the ``steps``
declared for a dependency in buildprep.yml inside the clone.  Step
arguments may use ``{repo}``, ``{artifacts}``, ``{ref}`` and
``{version}`` placeholders.  Projects with more involved builds
register their own ``BuildRecipe`` under the dependency name.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.core.models.build import BuildRequest, BuildResult, DependencySpec

logger = logging.getLogger(__name__)


class BuildRecipe(ABC):
    """Abstract base class for dependency build recipes.

    Recipes report failure through ``BuildResult(ok=False)``.  The
    pipeline turns an exception escaping ``build`` into the same
    ``DelegateFailure``.
    """

    @abstractmethod
    def build(self, request: BuildRequest) -> BuildResult:
        """Build (and install into ``request.artifacts_root``)."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


def artifacts_present(artifacts_root: Path, artifacts: list[str]) -> bool:
    """True when every declared artifact exists (none declared → False)."""
    if not artifacts:
        return False
    return all((artifacts_root / name).exists() for name in artifacts)


class CommandRecipe(BuildRecipe):
    """Run a dependency's declared command steps in its clone."""

    def __init__(self, dependency: DependencySpec, runner: Runner):
        self._dependency = dependency
        self._runner = runner

    def _expand(self, token: str, request: BuildRequest) -> str:
        # Only known placeholders; other braces (shell, CMake) pass through.
        values = {
            "{repo}": str(request.repo_path),
            "{artifacts}": str(request.artifacts_root),
            "{ref}": request.resolved_ref or "",
            "{version}": request.version,
        }
        for placeholder, value in values.items():
            token = token.replace(placeholder, value)
        return token

    def build(self, request: BuildRequest) -> BuildResult:
        dep = self._dependency

        if not request.force_clean and artifacts_present(request.artifacts_root, dep.artifacts):
            logger.info(
                "%s artifacts already exist in %s, skipping build",
                dep.name,
                request.artifacts_root,
            )
            return BuildResult(ok=True, name=dep.name, version=request.version, skipped=True)

        request.artifacts_root.mkdir(parents=True, exist_ok=True)
        if not dep.steps:
            logger.info("%s declares no build steps; sources prepared only", dep.name)
            return BuildResult(ok=True, name=dep.name, version=request.version)

        env = {**dep.env, **request.env}
        for index, step in enumerate(dep.steps, start=1):
            if not step:
                return BuildResult(
                    ok=False,
                    name=dep.name,
                    version=request.version,
                    error=f"step {index} is empty",
                )
            argv = [self._expand(token, request) for token in step]
            logger.info("%s step %d/%d: %s", dep.name, index, len(dep.steps), " ".join(argv))
            result = self._runner.run(
                argv[0],
                argv[1:],
                cwd=str(request.repo_path),
                env=env,
                capture=False,
            )
            if not result.ok:
                return BuildResult(
                    ok=False,
                    name=dep.name,
                    version=request.version,
                    error=f"step {index} ({' '.join(argv)}) {result.failure_reason()}",
                )

        logger.info("%s build completed", dep.name)
        return BuildResult(ok=True, name=dep.name, version=request.version)


def recipe_for(
    dependency: DependencySpec,
    runner: Runner,
    overrides: Mapping[str, BuildRecipe] | None = None,
) -> BuildRecipe:
    """The registered recipe for a dependency, else its ``CommandRecipe``."""
    if overrides and dependency.name in overrides:
        return overrides[dependency.name]
    return CommandRecipe(dependency, runner)
