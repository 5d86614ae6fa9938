"""
Windows SDK probe — locate the newest installed Windows 10/11 SDK.

The SDK root comes from ``WindowsSdkDir`` (set inside a Developer
Command Prompt) or from the ``KitsRoot10`` registry value.  Installed
versions are the ``10.x.y.z`` directories under ``<root>/bin``; the
greatest one must meet a minimum build number (third field).

Options:
    minimum_build (int): Lowest accepted build, default 22631.
    arch (str): Binary/library architecture, default ``x64``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.models.version import Version
from buildprep.core.services.probes.base import (
    ProbeContext,
    existing_dirs,
    list_version_dirs,
    make_report,
    not_applicable,
)
from buildprep.core.services.versioning import version_sort_key

logger = logging.getLogger(__name__)

INSTALLED_ROOTS_KEY = r"HKLM\SOFTWARE\Microsoft\Windows Kits\Installed Roots"
KITS_ROOT_VALUE = "KitsRoot10"
DEFAULT_MINIMUM_BUILD = 22631

_SDK_VERSION = re.compile(r"^10\.\d+\.\d+\.\d+$")
_INCLUDE_SUBDIRS = ("um", "shared", "ucrt", "winrt")
_LIB_SUBDIRS = ("um", "ucrt")


def _install_hint(minimum_build: int) -> str:
    return (
        f"Install Windows SDK 10.0.{minimum_build} or newer from "
        "https://developer.microsoft.com/en-us/windows/downloads/windows-sdk/"
    )


def _find_sdk_root(ctx: ProbeContext) -> tuple[Path | None, str]:
    """SDK root directory, or None and the reason it wasn't found."""
    direct = ctx.getenv("WindowsSdkDir")
    if direct and Path(direct).is_dir():
        logger.debug("Windows SDK root from WindowsSdkDir: %s", direct)
        return Path(direct), ""

    values = ctx.registry_reader().query(INSTALLED_ROOTS_KEY)
    if values is None:
        return None, "Windows SDK not found in registry"
    root = values.get(KITS_ROOT_VALUE)
    if not root:
        return None, f"Could not parse {KITS_ROOT_VALUE} from registry"
    logger.debug("Windows SDK root from registry: %s", root)
    return Path(root.strip()), ""


def select_sdk_version(bin_dir: Path) -> str | None:
    """Greatest ``10.x.y.z`` directory under ``bin_dir`` (numeric order)."""
    versions = sorted(list_version_dirs(bin_dir, _SDK_VERSION), key=version_sort_key)
    logger.debug("Found Windows SDK versions: %s", versions)
    return versions[-1] if versions else None


def probe_windows_sdk(ctx: ProbeContext, spec: RequirementSpec) -> RequirementReport:
    """Check for a Windows SDK and compute its bin/include/lib paths."""
    options = spec.probe_options
    try:
        minimum_build = int(options.get("minimum_build", DEFAULT_MINIMUM_BUILD))
    except (TypeError, ValueError) as e:
        raise ValueError(f"{spec.name}: 'minimum_build' must be an integer") from e
    arch = str(options.get("arch", "x64"))
    hint = _install_hint(minimum_build)

    logger.info("Checking for Windows SDK 10.0.%d.x or newer", minimum_build)
    if ctx.platform != "win32":
        return not_applicable(spec, "not on Windows")

    sdk_root, reason = _find_sdk_root(ctx)
    if sdk_root is None:
        return make_report(spec, ok=False, reason=reason, hint=hint)

    bin_dir = sdk_root / "bin"
    if not bin_dir.is_dir():
        return make_report(
            spec,
            ok=False,
            path=str(bin_dir),
            reason="Windows SDK bin directory not found",
            hint="Reinstall Windows SDK",
        )

    latest = select_sdk_version(bin_dir)
    if latest is None:
        return make_report(
            spec,
            ok=False,
            path=str(sdk_root),
            reason="No Windows SDK versions found in bin directory",
            hint=hint,
        )

    build_number = Version(latest).parts[2]
    if build_number < minimum_build:
        return make_report(
            spec,
            ok=False,
            version=latest,
            path=str(sdk_root),
            reason=f"Windows SDK {latest} is older than required 10.0.{minimum_build}",
            hint=f"Update Windows SDK to 10.0.{minimum_build} or newer",
        )

    sdk_bin = bin_dir / latest / arch
    if not sdk_bin.is_dir():
        return make_report(
            spec,
            ok=False,
            version=latest,
            path=str(sdk_root),
            reason=f"Windows SDK {arch} bin directory not found: {sdk_bin}",
            hint="Reinstall Windows SDK",
        )

    include_root = sdk_root / "Include" / latest
    lib_root = sdk_root / "Lib" / latest
    search_paths = {
        "PATH": [str(sdk_bin)],
        "INCLUDE": existing_dirs(*(include_root / sub for sub in _INCLUDE_SUBDIRS)),
        "LIB": existing_dirs(*(lib_root / sub / arch for sub in _LIB_SUBDIRS)),
    }

    logger.info("Windows SDK %s found at %s", latest, sdk_root)
    return make_report(
        spec,
        ok=True,
        version=latest,
        path=str(sdk_root),
        search_paths={var: paths for var, paths in search_paths.items() if paths},
        details={"bin_path": str(sdk_bin)},
    )
