"""
Build use case — the full pipeline from config to built dependencies.

Loads buildprep.yml, runs the pipeline, and turns the first failure
into a result value the CLI can render.  The partial pipeline report is
kept either way.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.core.config.loader import ConfigError, find_config_file, load_config
from buildprep.core.engine.pipeline import Pipeline, PipelineReport
from buildprep.core.errors import AggregateToolError, BuildPrepError
from buildprep.core.models.build import BuildConfig
from buildprep.core.models.requirement import RequirementReport
from buildprep.core.observability.logging_config import run_log
from buildprep.core.services.recipes import BuildRecipe

logger = logging.getLogger(__name__)


@dataclass
class BuildRunResult:
    """Result of a build run."""

    report: PipelineReport | None = None
    config: BuildConfig | None = None
    config_path: Path | None = None
    tool_failures: list[RequirementReport] = field(default_factory=list)
    failed_dependency: str | None = None
    log_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
        if self.failed_dependency:
            result["failed_dependency"] = self.failed_dependency
        if self.config:
            result["name"] = self.config.name
            result["config_path"] = str(self.config_path) if self.config_path else None
        if self.log_path:
            result["log_path"] = str(self.log_path)
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def parse_ref_overrides(values: list[str] | tuple[str, ...]) -> dict[str, str]:
    """Parse ``NAME=VERSION`` pairs.

    Raises:
        ValueError: On an entry without ``=`` or with an empty name.
    """
    overrides: dict[str, str] = {}
    for value in values:
        name, sep, version = value.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected NAME=VERSION, got '{value}'")
        overrides[name.strip()] = version.strip()
    return overrides


def run_build(
    runner: Runner | None = None,
    config_path: Path | None = None,
    config: BuildConfig | None = None,
    versions: Mapping[str, str] | None = None,
    recipes: Mapping[str, BuildRecipe] | None = None,
    force: bool = False,
    platform: str | None = None,
) -> BuildRunResult:
    """Run the build pipeline.

    Args:
        runner: Runner for every external program (default: shell runner).
        config_path: Optional explicit path to buildprep.yml.
        config: An already loaded config (wins over ``config_path``).
        versions: Version overrides by dependency name.
        recipes: Build recipes by dependency name.
        force: Re-clone and rebuild everything.
        platform: Platform identifier override.

    Returns:
        BuildRunResult with the (possibly partial) pipeline report.
    """
    result = BuildRunResult()

    # ── Load config ─────────────────────────────────────────────
    if config is None:
        try:
            if config_path is None:
                config_path = find_config_file()
            if config_path is None:
                result.error = "No buildprep.yml found."
                return result
            config = load_config(config_path)
        except ConfigError as e:
            result.error = str(e)
            return result
    result.config = config
    result.config_path = config_path

    unknown = sorted(set(versions or {}) - {d.name for d in config.dependencies})
    if unknown:
        result.error = f"Unknown dependency in version overrides: {', '.join(unknown)}"
        return result

    if runner is None:
        from buildprep.adapters.shell.command import CommandRunner

        runner = CommandRunner()

    pipeline = Pipeline(
        config,
        runner,
        recipes=recipes,
        versions=versions,
        force=force,
        platform=platform,
    )
    result.report = pipeline.report

    # ── Run ─────────────────────────────────────────────────────
    result.log_path = config.run_log_path
    capture = run_log(result.log_path) if result.log_path else nullcontext()
    try:
        with capture:
            pipeline.run()
    except AggregateToolError as e:
        result.tool_failures = e.failures
        result.error = str(e)
    except BuildPrepError as e:
        result.failed_dependency = getattr(e, "dependency", None)
        result.error = str(e)

    return result
