"""
Toolcheck use case — evaluate the declared toolchain and report on it.

Uses the requirements from buildprep.yml when one is found, otherwise
the built-in defaults.  Never raises for failing tools: the result
carries every report plus the mandatory failures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.core.config.loader import (
    ConfigError,
    effective_requirements,
    find_config_file,
    load_config,
)
from buildprep.core.models.build import BuildConfig
from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.services.probes import ProbeContext
from buildprep.core.services.requirements import (
    blocking_failures,
    evaluate_requirements,
    merge_search_paths,
)

logger = logging.getLogger(__name__)


@dataclass
class ToolcheckResult:
    """Result of a toolchain check."""

    reports: list[RequirementReport] = field(default_factory=list)
    failures: list[RequirementReport] = field(default_factory=list)
    added_paths: list[tuple[str, str]] = field(default_factory=list)
    config_path: Path | None = None
    platform: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures

    @property
    def satisfied(self) -> list[RequirementReport]:
        return [r for r in self.reports if r.ok and not r.skipped]

    @property
    def skipped(self) -> list[RequirementReport]:
        return [r for r in self.reports if r.skipped]

    @property
    def unsatisfied(self) -> list[RequirementReport]:
        return [r for r in self.reports if r.failed]

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
            return result
        result["platform"] = self.platform
        result["config_path"] = str(self.config_path) if self.config_path else None
        result["reports"] = [r.model_dump(mode="json") for r in self.reports]
        result["failures"] = [r.name for r in self.failures]
        result["added_paths"] = [{"var": v, "path": p} for v, p in self.added_paths]
        return result


def disable_requirements(
    specs: list[RequirementSpec],
    names: list[str] | None,
) -> list[RequirementSpec]:
    """Mark the named specs as disabled (case-insensitive name match)."""
    if not names:
        return list(specs)
    wanted = {n.strip().lower() for n in names}
    return [
        spec.model_copy(update={"enabled": False})
        if spec.name.lower() in wanted or spec.program.lower() in wanted
        else spec
        for spec in specs
    ]


def run_toolcheck(
    runner: Runner | None = None,
    config_path: Path | None = None,
    config: BuildConfig | None = None,
    skip: list[str] | None = None,
    platform: str | None = None,
) -> ToolcheckResult:
    """Check the toolchain.

    Args:
        runner: Runner for every probe (default: the shell runner).
        config_path: Optional explicit path to buildprep.yml.
        config: An already loaded config (wins over ``config_path``).
        skip: Requirement names (or programs) to disable.
        platform: Platform identifier override.

    Returns:
        ToolcheckResult with every report.
    """
    result = ToolcheckResult()

    if config is None:
        try:
            if config_path is None:
                config_path = find_config_file()
            if config_path is not None:
                config = load_config(config_path)
                result.config_path = config_path
        except ConfigError as e:
            result.error = str(e)
            return result

    if runner is None:
        from buildprep.adapters.shell.command import CommandRunner

        runner = CommandRunner()

    specs = disable_requirements(effective_requirements(config), skip)
    ctx = ProbeContext(runner=runner)
    if platform:
        ctx.platform = platform
    result.platform = ctx.platform

    result.reports = evaluate_requirements(specs, ctx)
    result.failures = blocking_failures(result.reports)
    result.added_paths = merge_search_paths(result.reports, runner.overlay)

    logger.info(
        "Toolcheck: %d satisfied, %d unsatisfied, %d skipped",
        len(result.satisfied),
        len(result.unsatisfied),
        len(result.skipped),
    )
    return result
