"""
Requirement evaluation — check a declared toolchain and report on all of it.

Every spec yields exactly one report, in declaration order.  Specs for
other platforms (or explicitly disabled ones) are reported as skipped
and never count as failures.

Failures are values, not exceptions: ``evaluate_requirements`` always
returns the full list, and ``ensure_tooling`` is the separate
aggregation step that raises a single ``AggregateToolError`` when at
least one mandatory, non-skipped requirement failed.

The evaluator never writes the environment overlay; probe reports carry
their search paths and ``merge_search_paths`` applies them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from buildprep.core.errors import AggregateToolError
from buildprep.core.models.environment import EnvironmentOverlay
from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.services.probes import ProbeContext, run_probe
from buildprep.core.services.versioning import compare_versions, parse_version

logger = logging.getLogger(__name__)


def _report(spec: RequirementSpec, **fields) -> RequirementReport:
    fields.setdefault("hint", spec.hint)
    return RequirementReport(
        name=spec.name,
        program=spec.program,
        required=spec.required,
        **fields,
    )


def check_requirement(spec: RequirementSpec, ctx: ProbeContext) -> RequirementReport:
    """Evaluate one spec: platform filter, probe or standard version check."""
    if not spec.applies_to(ctx.platform):
        logger.debug("Skipping %s: not applicable on %s", spec.name, ctx.platform)
        return _report(
            spec,
            ok=True,
            skipped=True,
            reason=f"not applicable on {ctx.platform}",
            hint=None,
        )

    if not spec.enabled:
        logger.debug("Skipping %s: disabled", spec.name)
        return _report(spec, ok=True, skipped=True, reason="disabled", hint=None)

    if spec.probe is not None:
        logger.debug("Using %s probe for %s", spec.probe.value, spec.name)
        return run_probe(ctx, spec)

    return _check_version(spec, ctx)


def _check_version(spec: RequirementSpec, ctx: ProbeContext) -> RequirementReport:
    """Standard check: resolve, run, parse, compare against bounds."""
    logger.debug("Checking tool availability: %s (%s)", spec.name, spec.program)
    resolved = ctx.runner.which(spec.program)
    if not resolved:
        return _report(
            spec,
            ok=False,
            reason=f'command "{spec.program}" was not found on PATH',
        )

    execution = ctx.runner.run(resolved, spec.version_args)
    if not execution.ok:
        return _report(
            spec,
            ok=False,
            path=resolved,
            reason=f"{spec.label} {execution.failure_reason()}",
            output=execution.output,
        )

    version = parse_version(execution.stdout, execution.stderr, spec.version_pattern)
    if spec.version_required and version is None:
        return _report(
            spec,
            ok=False,
            path=resolved,
            reason=f"{spec.label} did not report a version in the expected format",
            output=execution.output,
        )

    found = str(version) if version is not None else None

    if version is not None and spec.minimum_version and (
        compare_versions(version, spec.minimum_version) < 0
    ):
        return _report(
            spec,
            ok=False,
            version=found,
            path=resolved,
            reason=(
                f"{spec.label} {found} is older than required minimum "
                f"{spec.minimum_version}"
            ),
            output=execution.output,
        )

    if version is not None and spec.maximum_version and (
        compare_versions(version, spec.maximum_version) > 0
    ):
        return _report(
            spec,
            ok=False,
            version=found,
            path=resolved,
            reason=(
                f"{spec.label} {found} is newer than supported maximum "
                f"{spec.maximum_version}"
            ),
            output=execution.output,
        )

    return _report(
        spec,
        ok=True,
        version=found,
        path=resolved,
        output=execution.output,
        hint=None,
    )


def evaluate_requirements(
    specs: Iterable[RequirementSpec],
    ctx: ProbeContext,
) -> list[RequirementReport]:
    """Evaluate every spec in order.  Never raises for failed requirements."""
    specs = list(specs)
    logger.info(
        "Checking %d toolchain requirements on %s", len(specs), ctx.platform
    )
    reports = [check_requirement(spec, ctx) for spec in specs]
    for report in reports:
        if report.failed:
            level = logging.WARNING if report.required else logging.INFO
            logger.log(level, "Requirement %s failed: %s", report.name, report.reason)
    return reports


def blocking_failures(reports: Iterable[RequirementReport]) -> list[RequirementReport]:
    """Failed, non-skipped, mandatory reports."""
    return [r for r in reports if r.is_blocking]


def raise_for_failures(reports: list[RequirementReport]) -> list[RequirementReport]:
    """Aggregation step: raise ``AggregateToolError`` if anything blocks."""
    failures = blocking_failures(reports)
    if failures:
        raise AggregateToolError(failures, reports)
    return reports


def ensure_tooling(
    specs: Iterable[RequirementSpec],
    ctx: ProbeContext,
) -> list[RequirementReport]:
    """Evaluate and aggregate.

    Returns:
        All reports when no mandatory requirement failed.

    Raises:
        AggregateToolError: Carrying every mandatory failure and all reports.
    """
    return raise_for_failures(evaluate_requirements(specs, ctx))


def merge_search_paths(
    reports: Iterable[RequirementReport],
    overlay: EnvironmentOverlay,
) -> list[tuple[str, str]]:
    """Compose successful probes' search paths into the overlay.

    The single place probe discoveries reach the environment.  Merging
    is idempotent, so running it again adds nothing.

    Returns:
        The ``(variable, path)`` pairs that were newly added.
    """
    added: list[tuple[str, str]] = []
    for report in reports:
        if report.ok and not report.skipped and report.search_paths:
            added.extend(overlay.merge(report.search_paths))
    return added
