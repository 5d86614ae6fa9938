"""
Build pipeline — the orchestration loop.

Sequential and fail-fast:

    requirements → merge probe search paths → for each dependency, in order:
        (force-clean) → clone → submodules → resolve ref → build recipe

Mandatory requirement failures stop the run before any repository is
touched.  Any error while acquiring or building one dependency aborts
the rest: no later dependency is cloned or built.  ``Pipeline.report``
is filled in as the run progresses, so callers still have the partial
picture after an exception.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.adapters.vcs.git import GitClient
from buildprep.core.config.loader import effective_requirements
from buildprep.core.errors import (
    AcquisitionError,
    BuildPrepError,
    DelegateFailure,
    ReferenceResolutionError,
)
from buildprep.core.models.build import BuildConfig, BuildRequest, BuildResult, DependencySpec
from buildprep.core.models.checkout import CheckoutOutcome
from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.services.git_refs import derive_fallback_refs, resolve_git_ref
from buildprep.core.services.probes import ProbeContext
from buildprep.core.services.recipes import BuildRecipe, recipe_for
from buildprep.core.services.requirements import (
    evaluate_requirements,
    merge_search_paths,
    raise_for_failures,
)

logger = logging.getLogger(__name__)


@dataclass
class DependencyOutcome:
    """What happened to one dependency."""

    name: str
    version: str = ""
    repo_path: str = ""
    cloned: bool = False
    checkout: CheckoutOutcome | None = None
    build: BuildResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.build is not None and self.build.ok

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "repo_path": self.repo_path,
            "cloned": self.cloned,
            "ok": self.ok,
            "checkout": self.checkout.model_dump(mode="json") if self.checkout else None,
            "build": self.build.model_dump(mode="json") if self.build else None,
            "error": self.error,
        }


@dataclass
class PipelineReport:
    """Result of a pipeline run (possibly partial)."""

    requirements: list[RequirementReport] = field(default_factory=list)
    added_paths: list[tuple[str, str]] = field(default_factory=list)
    dependencies: list[DependencyOutcome] = field(default_factory=list)

    @property
    def requirements_ok(self) -> bool:
        return not any(r.is_blocking for r in self.requirements)

    @property
    def all_ok(self) -> bool:
        return self.requirements_ok and all(d.ok for d in self.dependencies)

    def to_dict(self) -> dict:
        return {
            "requirements": [r.model_dump(mode="json") for r in self.requirements],
            "added_paths": [{"var": v, "path": p} for v, p in self.added_paths],
            "dependencies": [d.to_dict() for d in self.dependencies],
        }


class Pipeline:
    """One build-preparation run over a ``BuildConfig``.

    Args:
        config: Loaded build configuration.
        runner: Runner for every external program; its overlay receives
            the probes' search paths.
        requirements: Override the requirement list (default: config's
            list, else the built-in defaults).
        recipes: Build recipes by dependency name (default: each
            dependency's ``CommandRecipe``).
        versions: Version overrides by dependency name.
        force: Remove existing clones and rebuild even if artifacts exist.
        platform: Platform identifier override (tests).
        machine: CPU architecture override (tests).
    """

    def __init__(
        self,
        config: BuildConfig,
        runner: Runner,
        *,
        requirements: list[RequirementSpec] | None = None,
        recipes: Mapping[str, BuildRecipe] | None = None,
        versions: Mapping[str, str] | None = None,
        force: bool = False,
        platform: str | None = None,
        machine: str | None = None,
    ):
        self.config = config
        self.runner = runner
        self.git = GitClient(runner)
        self.requirements = (
            requirements if requirements is not None else effective_requirements(config)
        )
        self._recipes = dict(recipes or {})
        self._versions = dict(versions or {})
        self.force = force

        ctx_kwargs = {}
        if platform is not None:
            ctx_kwargs["platform"] = platform
        if machine is not None:
            ctx_kwargs["machine"] = machine
        self.ctx = ProbeContext(runner=runner, **ctx_kwargs)
        self.report = PipelineReport()

    # ── Stages ──────────────────────────────────────────────────

    def check_requirements(self) -> list[RequirementReport]:
        """Evaluate requirements once and merge probe discoveries.

        Raises:
            AggregateToolError: If any mandatory requirement failed.
        """
        reports = evaluate_requirements(self.requirements, self.ctx)
        self.report.requirements = reports
        self.report.added_paths = merge_search_paths(reports, self.runner.overlay)
        return raise_for_failures(reports)

    def version_for(self, dep: DependencySpec) -> str:
        return self._versions.get(dep.name, dep.version).strip()

    def repo_path_for(self, dep: DependencySpec) -> Path:
        return self.config.git_root_path / dep.slug

    def acquire(self, dep: DependencySpec, outcome: DependencyOutcome) -> CheckoutOutcome:
        """Clone (if needed) and check out the requested reference.

        Raises:
            AcquisitionError: Clone or submodule update failed.
            ReferenceResolutionError: No candidate ref resolved.
        """
        repo_path = self.repo_path_for(dep)

        if self.force and repo_path.exists():
            logger.info("Force enabled, removing existing %s repository at %s", dep.name, repo_path)
            shutil.rmtree(repo_path)

        logger.info(
            "Preparing %s sources from %s into %s (version=%s)",
            dep.name, dep.git_url, repo_path, outcome.version,
        )
        result, _ = self.git.clone(dep.git_url, repo_path, shallow=dep.shallow)
        if result is not None:
            if not result.ok:
                raise AcquisitionError(
                    dep.name,
                    f"Failed to clone repository: {result.output or result.failure_reason()}",
                )
            outcome.cloned = True

        if dep.submodules:
            sub = self.git.update_submodules(repo_path, recursive=dep.recursive_submodules)
            if not sub.ok:
                raise AcquisitionError(
                    dep.name,
                    f"Failed to initialize submodules:\n{sub.output or sub.failure_reason()}",
                )

        checkout = resolve_git_ref(
            self.git,
            repo_path,
            outcome.version,
            derive_fallback_refs(outcome.version, dep.ref_prefix),
        )
        outcome.checkout = checkout
        if not checkout.ok:
            raise ReferenceResolutionError(dep.name, checkout)

        if checkout.skipped:
            logger.info("No version requested for %s, keeping default checkout", dep.name)
        else:
            logger.info("Checked out %s %s %s", dep.name, checkout.ref_type, checkout.ref)
        return checkout

    def build(self, dep: DependencySpec, outcome: DependencyOutcome) -> BuildResult:
        """Delegate to the dependency's recipe.

        Raises:
            DelegateFailure: The recipe reported failure or raised.
        """
        request = BuildRequest(
            name=dep.name,
            version=outcome.version,
            repo_path=self.repo_path_for(dep),
            resolved_ref=outcome.checkout.ref if outcome.checkout else None,
            artifacts_root=self.config.artifacts_root_path / dep.slug,
            force_clean=self.force,
        )
        recipe = recipe_for(dep, self.runner, self._recipes)
        logger.info("Building %s with %r", dep.name, recipe)
        try:
            result = recipe.build(request)
        except BuildPrepError:
            raise
        except Exception as e:
            logger.debug("%s recipe raised", dep.name, exc_info=True)
            raise DelegateFailure(dep.name, f"{type(e).__name__}: {e}") from e
        outcome.build = result
        if not result.ok:
            raise DelegateFailure(dep.name, result.error)
        return result

    def process(self, dep: DependencySpec) -> DependencyOutcome:
        """Acquire and build one dependency; record the outcome either way."""
        outcome = DependencyOutcome(
            name=dep.name,
            version=self.version_for(dep),
            repo_path=str(self.repo_path_for(dep)),
        )
        self.report.dependencies.append(outcome)
        try:
            self.acquire(dep, outcome)
            self.build(dep, outcome)
        except Exception as e:
            outcome.error = str(e)
            logger.error("%s failed: %s", dep.name, e)
            raise
        return outcome

    # ── Full run ────────────────────────────────────────────────

    def run(self) -> PipelineReport:
        """Run every stage in order.

        Raises:
            AggregateToolError, AcquisitionError, ReferenceResolutionError,
            DelegateFailure: On the first failure (fail-fast).
        """
        self.check_requirements()

        self.config.git_root_path.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Beginning build orchestration for %d dependencies",
            len(self.config.dependencies),
        )
        for dep in self.config.dependencies:
            self.process(dep)

        logger.info("Build pipeline completed successfully")
        return self.report
