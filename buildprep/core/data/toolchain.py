"""
Built-in toolchain requirements.

Used when buildprep.yml has no ``requirements`` section.  The list is
ordered: checks run and are reported in this order.
"""

from __future__ import annotations

from buildprep.core.models.requirement import ProbeKind, RequirementSpec

MINIMUM_VERSIONS: dict[str, str] = {
    "node": "22.0.0",
    "cmake": "3.16.0",
    "cargo": "1.75.0",
    "zig": "0.15.1",
    "clang": "12.0.0",
    "ninja": "1.12.0",
    "go": "1.23.0",
    "python": "3.11.0",
}

DEFAULT_REQUIREMENTS: list[RequirementSpec] = [
    RequirementSpec(
        name="Node.js",
        program="node",
        minimum_version=MINIMUM_VERSIONS["node"],
        hint="Install Node.js 22 or newer from https://nodejs.org/en/download/",
    ),
    RequirementSpec(
        name="Git",
        program="git",
        hint="Install Git from https://git-scm.com/downloads",
    ),
    RequirementSpec(
        name="CMake",
        program="cmake",
        minimum_version=MINIMUM_VERSIONS["cmake"],
        hint="Install a recent CMake from https://cmake.org/download/",
    ),
    RequirementSpec(
        name="Cargo",
        program="cargo",
        minimum_version=MINIMUM_VERSIONS["cargo"],
        hint="Install a recent Rust toolchain via https://rustup.rs/",
    ),
    RequirementSpec(
        name="Zig",
        program="zig",
        version_args=["version"],
        minimum_version=MINIMUM_VERSIONS["zig"],
        hint="Install Zig 0.15.1 or newer from https://ziglang.org/download/",
    ),
    RequirementSpec(
        name="Clang",
        program="clang",
        minimum_version=MINIMUM_VERSIONS["clang"],
        hint=(
            "Install Clang 12 or newer with C++20 support. On Windows, install "
            "Visual Studio 2022+ or LLVM from https://releases.llvm.org/"
        ),
    ),
    RequirementSpec(
        name="Ninja",
        program="ninja",
        minimum_version=MINIMUM_VERSIONS["ninja"],
        hint="Install Ninja 1.12 or newer from https://ninja-build.org/ or via package manager",
    ),
    RequirementSpec(
        name="Go",
        program="go",
        version_args=["version"],
        version_pattern=r"go version go(\d+\.\d+(?:\.\d+)?)",
        minimum_version=MINIMUM_VERSIONS["go"],
        hint="Install Go 1.23 or newer from https://go.dev/dl/",
    ),
    RequirementSpec(
        name="depot_tools",
        program="gclient",
        hint=(
            "Install depot_tools and add to PATH. See https://commondatastorage."
            "googleapis.com/chrome-infra-docs/flat/depot_tools/docs/html/"
            "depot_tools_tutorial.html"
        ),
    ),
    RequirementSpec(
        name="Python 3",
        program="python3",
        minimum_version=MINIMUM_VERSIONS["python"],
        probe=ProbeKind.PYTHON3,
        hint="Install Python 3.11 or newer, or install pyenv to manage Python versions",
    ),
    # Windows-only capabilities
    RequirementSpec(
        name="CPU Architecture (x64)",
        platforms=["win32"],
        probe=ProbeKind.CPU_ARCH,
        probe_options={"arch": "x64"},
    ),
    RequirementSpec(
        name="Windows SDK",
        platforms=["win32"],
        probe=ProbeKind.WINDOWS_SDK,
        probe_options={"minimum_build": 22631},
    ),
    RequirementSpec(
        name="MSVC",
        platforms=["win32"],
        probe=ProbeKind.MSVC,
        probe_options={"minimum_version": "19.41"},
    ),
]
