"""
buildprep — CLI entrypoint.

Usage:
    python -m buildprep.main --help
    python -m buildprep.main check
    python -m buildprep.main build --ref dawn=v20250101.0
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from buildprep import __version__
from buildprep.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="buildprep")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to buildprep.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """buildprep — validate the toolchain and prepare native dependencies."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("BUILDPREP_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("BUILDPREP_LOG_FILE"),
        log_file_level=os.environ.get("BUILDPREP_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--skip", "skip", multiple=True, help="Skip a requirement by name.")
@click.pass_context
def check(ctx: click.Context, as_json: bool, skip: tuple[str, ...]) -> None:
    """Validate the toolchain and exit.

    Examples:

        buildprep check

        buildprep check --skip depot_tools --skip Go
    """
    from buildprep.core.use_cases.toolcheck import run_toolcheck
    from buildprep.ui.cli.render import render_toolchain

    result = run_toolcheck(
        config_path=ctx.obj.get("config_path"),
        skip=list(skip) if skip else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        render_toolchain(result.reports, verbose=ctx.obj.get("verbose", False))

    if result.failures:
        click.secho(
            f"❌ {len(result.failures)} mandatory requirement(s) failed",
            fg="red",
            bold=True,
        )
        sys.exit(1)

    click.secho("✅ Toolchain satisfied", fg="green", bold=True)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--force", is_flag=True, help="Re-clone and rebuild every dependency.")
@click.option(
    "--ref",
    "refs",
    multiple=True,
    metavar="NAME=VERSION",
    help="Override a dependency's version.",
)
@click.pass_context
def build(ctx: click.Context, as_json: bool, force: bool, refs: tuple[str, ...]) -> None:
    """Validate the toolchain, then fetch and build every dependency.

    Examples:

        buildprep build

        buildprep build --force --ref ffmpeg=n7.1.2
    """
    from buildprep.core.use_cases.build import parse_ref_overrides, run_build
    from buildprep.ui.cli.render import render_build, render_toolchain

    try:
        versions = parse_ref_overrides(refs)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--ref") from e

    result = run_build(
        config_path=ctx.obj.get("config_path"),
        versions=versions,
        force=force,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    report = result.report
    quiet = ctx.obj.get("quiet", False)

    if report and report.requirements and not quiet:
        render_toolchain(report.requirements, verbose=ctx.obj.get("verbose", False))

    if report and report.dependencies:
        render_build(report)

    if result.error:
        if result.tool_failures:
            click.secho("❌ Toolchain requirements not met:", fg="red", bold=True)
            for failure in result.tool_failures:
                click.echo(f"   • {failure.name}: {failure.reason}")
        else:
            click.secho(f"❌ {result.error}", fg="red")
        if result.log_path:
            click.echo(f"   Run log: {result.log_path}")
        sys.exit(1)

    click.secho("✅ Build pipeline completed", fg="green", bold=True)


@cli.command()
@click.argument("repo_path", type=click.Path(file_okay=False, path_type=Path))
@click.argument("version")
@click.option("--fallback", "fallbacks", multiple=True, help="Additional ref to try.")
@click.option(
    "--prefix",
    default="v",
    show_default=True,
    help="Prefix for the alternate tag spelling ('' to disable).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def resolve(
    repo_path: Path,
    version: str,
    fallbacks: tuple[str, ...],
    prefix: str,
    as_json: bool,
) -> None:
    """Check out VERSION (tag or branch) in an existing clone."""
    from buildprep.core.use_cases.resolve import resolve_reference

    result = resolve_reference(repo_path, version, list(fallbacks), prefix=prefix)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    outcome = result.outcome
    if outcome is None:
        click.secho("❌ No checkout was attempted", fg="red")
        sys.exit(1)

    if outcome.skipped:
        click.secho(f"⊘ Nothing to resolve ({outcome.reason})", fg="yellow")
        return

    if outcome.ok:
        click.secho(f"✅ Checked out {outcome.ref_type} {outcome.ref}", fg="green", bold=True)
        return

    click.secho(f"❌ No candidate resolved: {', '.join(result.candidates)}", fg="red", bold=True)
    click.echo(outcome.describe_attempts())
    sys.exit(1)


if __name__ == "__main__":
    cli()
