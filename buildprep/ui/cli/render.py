"""
Terminal rendering for the toolchain and build summaries.
"""

from __future__ import annotations

import click

from buildprep.core.engine.pipeline import PipelineReport
from buildprep.core.models.requirement import RequirementReport

_RULE = "=" * 70


def _count(n: int) -> str:
    return f"{n} path" if n == 1 else f"{n} paths"


def _detail_labels(report: RequirementReport) -> list[str]:
    labels = []
    if report.version:
        labels.append(f"v{report.version}")
    if report.details.get("arch"):
        labels.append(str(report.details["arch"]))
    if report.details.get("installed_via_pyenv"):
        labels.append("via pyenv")
    if report.skipped:
        labels.append("skipped")
    return labels


def render_toolchain(reports: list[RequirementReport], verbose: bool = False) -> None:
    """Print the satisfied / unsatisfied requirement summary."""
    satisfied = [r for r in reports if not r.failed]
    unsatisfied = [r for r in reports if r.failed]

    click.echo()
    click.echo(_RULE)
    click.secho("TOOLCHAIN VALIDATION", bold=True)
    click.echo(_RULE)

    if satisfied:
        click.echo()
        click.secho("✓ Satisfied Requirements:", fg="green")
        for report in satisfied:
            labels = _detail_labels(report)
            suffix = f" ({', '.join(labels)})" if labels else ""
            click.secho("  ✓ ", fg="green", nl=False)
            click.echo(f"{report.name}{suffix}")
            if report.skipped:
                if verbose and report.reason:
                    click.secho(f"    {report.reason}", dim=True)
                continue
            if report.path:
                click.echo(f"    {report.path}")
            if report.details.get("bin_path"):
                click.secho(f"    Bin: {report.details['bin_path']}", dim=True)
            elif report.bin_paths:
                click.secho(f"    Bin: {_count(len(report.bin_paths))}", dim=True)
            if report.include_paths:
                click.secho(f"    Inc: {_count(len(report.include_paths))}", dim=True)
            if report.lib_paths:
                click.secho(f"    Lib: {_count(len(report.lib_paths))}", dim=True)

    if unsatisfied:
        click.echo()
        click.secho("✗ Unsatisfied Requirements:", fg="red")
        for report in unsatisfied:
            optional = "" if report.required else " (optional)"
            click.secho("  ✗ ", fg="red", nl=False)
            click.echo(f"{report.name}{optional}")
            if report.reason:
                click.echo(f"    Reason: {report.reason}")
            if report.version:
                click.echo(f"    Found: v{report.version}")
            if report.hint:
                click.secho("    Hint: ", fg="yellow", nl=False)
                click.echo(report.hint)

    click.echo()
    click.echo(_RULE)
    click.echo(f"Summary: {len(satisfied)} satisfied, {len(unsatisfied)} unsatisfied")
    click.echo(_RULE)
    click.echo()


def render_build(report: PipelineReport) -> None:
    """Print one line per dependency that was attempted."""
    click.echo()
    click.echo(_RULE)
    click.secho("BUILD SUMMARY", bold=True)
    click.echo(_RULE)
    for outcome in report.dependencies:
        if outcome.ok:
            status = "✓ Skipped (up to date)" if outcome.build and outcome.build.skipped else "✓ Complete"
            color = "green"
        else:
            status, color = "✗ Failed", "red"
        click.echo(f"{outcome.name:<30} ", nl=False)
        click.secho(status, fg=color)
        if outcome.version:
            click.echo(f"  Version: {outcome.version}")
        if outcome.checkout and outcome.checkout.ref:
            click.echo(f"  Ref: {outcome.checkout.ref} ({outcome.checkout.ref_type})")
        if outcome.error:
            for line in outcome.error.splitlines()[:10]:
                click.echo(f"  │ {line}")
    click.echo(_RULE)
    click.echo()
