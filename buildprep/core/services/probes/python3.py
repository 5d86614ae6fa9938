"""
Python 3 probe — make sure a suitable Python 3 interpreter is available.

Without pyenv, ``python3`` (or a ``python`` that reports Python 3) on
the search path is used.  With pyenv, pyenv owns the interpreter: the
newest stable installed version at or above the minimum is selected
(optionally installing the newest installable one first), pinned with
``pyenv local``, and located with ``pyenv which python``.

Options:
    allow_install (bool): Let pyenv install a Python when none fits.
        Default False.
"""

from __future__ import annotations

import logging
import re

from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.models.version import Version
from buildprep.core.services.probes.base import ProbeContext, make_report
from buildprep.core.services.versioning import compare_versions, parse_version

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_VERSION = "3.11.0"

# Stable releases only: no a/b/rc suffixes, no other implementations.
_STABLE = re.compile(r"^3\.\d+\.\d+$")


def parse_pyenv_versions(text: str) -> list[str]:
    """Version names from ``pyenv versions`` / ``pyenv install --list``.

    Handles the active marker and trailing origin notes:
    ``* 3.12.5 (set by /home/me/.python-version)`` → ``3.12.5``.
    """
    names: list[str] = []
    for line in text.splitlines():
        cleaned = line.strip().lstrip("*").strip()
        if cleaned:
            names.append(cleaned.split()[0])
    return names


def pick_stable(versions: list[str], minimum: str) -> str | None:
    """Newest stable 3.x version at or above ``minimum``."""
    candidates = [
        v for v in versions
        if _STABLE.match(v) and compare_versions(v, minimum) >= 0
    ]
    if not candidates:
        return None
    return max(candidates, key=Version)


def _check_direct(ctx: ProbeContext, spec: RequirementSpec, minimum: str) -> RequirementReport:
    for program in ("python3", "python"):
        path = ctx.runner.which(program)
        if not path:
            continue
        result = ctx.runner.run(path, ["--version"])
        if not result.ok or "Python 3" not in result.output:
            continue
        version = parse_version(result.stdout, result.stderr)
        if version is not None and compare_versions(version, minimum) < 0:
            return make_report(
                spec,
                ok=False,
                version=str(version),
                path=path,
                reason=f"Python {version} is older than required minimum {minimum}",
                hint=f"Install Python {minimum} or newer, or install pyenv",
            )
        logger.info("Python 3 found on PATH as %r: %s", program, path)
        return make_report(
            spec,
            ok=True,
            version=str(version) if version else None,
            path=path,
            details={"installed_via_pyenv": False},
        )

    return make_report(
        spec,
        ok=False,
        reason="Python 3 is not available and pyenv is not installed",
        hint=(
            f"Install Python {minimum} or newer, or install pyenv from "
            "https://github.com/pyenv/pyenv"
        ),
    )


def probe_python3(ctx: ProbeContext, spec: RequirementSpec) -> RequirementReport:
    """Check for (and with pyenv, select) a Python 3 interpreter."""
    minimum = spec.minimum_version or DEFAULT_MINIMUM_VERSION
    allow_install = bool(spec.probe_options.get("allow_install", False))
    logger.info("Ensuring Python %s or newer is available", minimum)

    pyenv = ctx.runner.which("pyenv")
    if not pyenv:
        return _check_direct(ctx, spec, minimum)

    # pyenv present: it decides which interpreter is used
    logger.info("pyenv detected at %s, using it to manage Python", pyenv)
    listed = ctx.runner.run(pyenv, ["versions"])
    if not listed.ok:
        return make_report(
            spec,
            ok=False,
            path=pyenv,
            reason="Failed to query pyenv versions",
            output=listed.output,
            hint="Ensure pyenv is properly installed",
        )

    installed = parse_pyenv_versions(listed.stdout)
    logger.debug("pyenv installed versions: %s", installed)
    target = pick_stable(installed, minimum)
    installed_now = False

    if target is None:
        if not allow_install:
            return make_report(
                spec,
                ok=False,
                path=pyenv,
                reason=f"No Python {minimum}+ version is installed in pyenv",
                hint=f"Run 'pyenv install' for Python {minimum} or newer",
            )
        available = ctx.runner.run(pyenv, ["install", "--list"])
        if not available.ok:
            return make_report(
                spec,
                ok=False,
                path=pyenv,
                reason="Failed to list pyenv installable versions",
                output=available.output,
                hint='Run "pyenv install --list" manually to debug',
            )
        target = pick_stable(parse_pyenv_versions(available.stdout), minimum)
        if target is None:
            return make_report(
                spec,
                ok=False,
                path=pyenv,
                reason=f"No Python {minimum}+ versions available in pyenv",
                hint="Update pyenv or install Python 3 manually",
            )
        logger.info("Installing Python %s via pyenv", target)
        install = ctx.runner.run(pyenv, ["install", target], capture=False)
        if not install.ok:
            return make_report(
                spec,
                ok=False,
                path=pyenv,
                version=target,
                reason=f"Failed to install Python {target} via pyenv",
                hint=f'Run "pyenv install {target}" manually',
            )
        installed_now = True

    local = ctx.runner.run(pyenv, ["local", target])
    if not local.ok:
        return make_report(
            spec,
            ok=False,
            path=pyenv,
            version=target,
            reason=f"Failed to set pyenv local to {target}",
            output=local.output,
            hint=f'Run "pyenv local {target}" manually',
        )

    located = ctx.runner.run(pyenv, ["which", "python"])
    if not located.ok or not located.stdout.strip():
        return make_report(
            spec,
            ok=False,
            version=target,
            reason="Python is still not available after pyenv configuration",
            hint='Restart your shell or run "pyenv rehash" and try again',
        )

    python_path = located.stdout.strip()
    logger.info("Python %s available via pyenv: %s", target, python_path)
    return make_report(
        spec,
        ok=True,
        version=target,
        path=python_path,
        details={"installed_via_pyenv": True, "installed_now": installed_now},
    )
