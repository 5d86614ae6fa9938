"""
MSVC probe — find ``cl.exe`` and the paths it needs to compile.

If ``cl`` is already on the search path (Developer Command Prompt) it
is used as is.  Otherwise Visual Studio is located through
``vswhere.exe`` (found via the VisualStudio\\Setup registry key or the
Program Files default), the newest ``VC/Tools/MSVC/<version>`` toolset
is selected and its bin, include and lib directories are reported.

The compiler prints its banner when run without arguments, e.g.
``Microsoft (R) C/C++ Optimizing Compiler Version 19.41.34120 for x64``.

Options:
    minimum_version (str): Lowest accepted compiler version, default 19.41.
    host_arch (str): Host toolset architecture, default ``x64``.
    target_arch (str): Target architecture, default ``x64``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.services.probes.base import (
    ProbeContext,
    existing_dirs,
    list_version_dirs,
    make_report,
    not_applicable,
)
from buildprep.core.services.versioning import (
    compare_versions,
    parse_version,
    version_sort_key,
)

logger = logging.getLogger(__name__)

VS_SETUP_KEY = r"HKLM\SOFTWARE\Microsoft\VisualStudio\Setup"
SHARED_INSTALL_VALUE = "SharedInstallationPath"
VC_TOOLS_COMPONENT = "Microsoft.VisualStudio.Component.VC.Tools.x86.x64"
DEFAULT_MINIMUM_VERSION = "19.41"

_TOOLSET_VERSION = re.compile(r"^\d+\.\d+\.\d+")

INSTALL_HINT = (
    "Install Visual Studio 2022 v17.11 or later with C++ development tools, "
    "or run from Developer Command Prompt"
)


def find_vswhere(ctx: ProbeContext) -> Path | None:
    """Locate vswhere.exe: registry first, then Program Files."""
    shared = ctx.registry_reader().get_value(VS_SETUP_KEY, SHARED_INSTALL_VALUE)
    if shared:
        # <root>\Shared → <root>\Installer\vswhere.exe
        candidate = Path(shared.strip()).parent / "Installer" / "vswhere.exe"
        logger.debug("vswhere candidate from registry: %s", candidate)
        if candidate.is_file():
            return candidate

    program_files = (
        ctx.getenv("ProgramFiles(x86)")
        or ctx.getenv("ProgramFiles")
        or r"C:\Program Files (x86)"
    )
    candidate = Path(program_files) / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"
    return candidate if candidate.is_file() else None


def select_toolset(vc_tools: Path) -> str | None:
    """Greatest MSVC toolset directory name (numeric order)."""
    versions = sorted(list_version_dirs(vc_tools, _TOOLSET_VERSION), key=version_sort_key)
    return versions[-1] if versions else None


def _discover_cl(ctx: ProbeContext, host: str, target: str) -> tuple[Path | None, dict[str, list[str]], str]:
    """Find cl.exe inside a Visual Studio installation.

    Returns:
        ``(cl_path, search_paths, failure_reason)``.
    """
    vswhere = find_vswhere(ctx)
    if vswhere is None:
        logger.warning("vswhere.exe not found, cannot auto-detect Visual Studio")
        return None, {}, "MSVC compiler (cl.exe) not found on PATH and vswhere.exe not available"

    logger.info("Found vswhere.exe at %s", vswhere)
    result = ctx.runner.run(
        str(vswhere),
        ["-latest", "-requires", VC_TOOLS_COMPONENT, "-property", "installationPath"],
    )
    install_path = result.stdout.strip() if result.ok else ""
    not_found = "MSVC compiler (cl.exe) not found on PATH or in Visual Studio installation"
    if not install_path:
        return None, {}, not_found

    vc_tools = Path(install_path) / "VC" / "Tools" / "MSVC"
    toolset = select_toolset(vc_tools)
    if toolset is None:
        return None, {}, not_found

    toolset_root = vc_tools / toolset
    cl_dir = toolset_root / "bin" / f"Host{host}" / target
    cl_exe = cl_dir / "cl.exe"
    if not cl_exe.is_file():
        return None, {}, not_found

    logger.info("Found cl.exe in Visual Studio installation: %s", cl_exe)
    search_paths = {
        "PATH": [str(cl_dir)],
        "INCLUDE": existing_dirs(
            toolset_root / "include",
            toolset_root / "atlmfc" / "include",
        ),
        "LIB": existing_dirs(
            toolset_root / "lib" / target,
            toolset_root / "atlmfc" / "lib" / target,
        ),
    }
    return cl_exe, {var: paths for var, paths in search_paths.items() if paths}, ""


def probe_msvc(ctx: ProbeContext, spec: RequirementSpec) -> RequirementReport:
    """Check for MSVC at or above the minimum compiler version."""
    options = spec.probe_options
    minimum = str(options.get("minimum_version", DEFAULT_MINIMUM_VERSION))
    host = str(options.get("host_arch", "x64"))
    target = str(options.get("target_arch", "x64"))

    logger.info("Checking for MSVC %s or newer", minimum)
    if ctx.platform != "win32":
        return not_applicable(spec, "not on Windows")

    search_paths: dict[str, list[str]] = {}
    found = ctx.runner.which("cl")
    cl_path = Path(found) if found else None
    if cl_path is None:
        logger.info("cl.exe not on PATH, searching for Visual Studio installation")
        cl_path, search_paths, reason = _discover_cl(ctx, host, target)
        if cl_path is None:
            return make_report(spec, ok=False, reason=reason, hint=INSTALL_HINT)

    # cl exits non-zero without input files but still prints its banner
    banner = ctx.runner.run(str(cl_path), [])
    version = parse_version(banner.stdout, banner.stderr)
    if version is None:
        return make_report(
            spec,
            ok=False,
            path=str(cl_path),
            reason="Could not parse MSVC version",
            output=banner.output,
            search_paths=search_paths,
        )

    if compare_versions(version, minimum) < 0:
        return make_report(
            spec,
            ok=False,
            version=str(version),
            path=str(cl_path),
            reason=f"MSVC {version} is older than required {minimum}",
            hint="Update to Visual Studio 2022 v17.11 or later",
            search_paths=search_paths,
        )

    logger.info("MSVC %s found at %s", version, cl_path)
    return make_report(
        spec,
        ok=True,
        version=str(version),
        path=str(cl_path),
        search_paths=search_paths,
    )
