"""
Capability probe plumbing — the context probes run in and report helpers.

A capability probe answers "is capability C present, where, and which
extra search paths does using it require?".  Every probe follows the
same shape:

    1. not applicable on this platform   → ok, skipped
    2. direct discovery on the search path
    3. registry / metadata lookup for an installation root
    4. enumerate installed versions, pick the greatest (numeric sort)
    5. enforce a minimum version or build number
    6. compute auxiliary paths (bin, include, lib)
    7. report version, primary path and the path lists

Probes never raise for expected absence; they return a failed report
with a hint.  They raise ``ValueError`` only for contract violations
such as a malformed option.  They never touch the environment overlay:
discovered paths travel in ``RequirementReport.search_paths`` and the
caller merges them.
"""

from __future__ import annotations

import os
import platform as _platform
import sys
from dataclasses import dataclass, field
from pathlib import Path

from buildprep.adapters.base import Runner
from buildprep.adapters.registry_query import RegistryReader
from buildprep.core.models.requirement import RequirementReport, RequirementSpec


@dataclass
class ProbeContext:
    """Everything a requirement check or probe needs from the outside world.

    ``platform`` uses ``sys.platform`` identifiers (``win32``,
    ``linux``, ``darwin``); ``machine`` is the host CPU as reported by
    ``platform.machine()``.
    """

    runner: Runner
    platform: str = field(default_factory=lambda: sys.platform)
    machine: str = field(default_factory=_platform.machine)
    registry: RegistryReader | None = None

    def registry_reader(self) -> RegistryReader:
        """The injected registry reader, else one over this runner."""
        if self.registry is None:
            self.registry = RegistryReader(self.runner)
        return self.registry

    def getenv(self, name: str, default: str | None = None) -> str | None:
        """Read a variable through the runner's overlay."""
        value = self.runner.overlay.get(name)
        return value if value is not None else default


def make_report(spec: RequirementSpec, **fields) -> RequirementReport:
    """Build a report for ``spec``; the probe's hint wins over the spec's."""
    hint = fields.pop("hint", None) or spec.hint
    return RequirementReport(
        name=spec.name,
        program=spec.program,
        required=spec.required,
        hint=hint,
        **fields,
    )


def not_applicable(spec: RequirementSpec, reason: str) -> RequirementReport:
    return make_report(spec, ok=True, skipped=True, reason=reason)


def existing_dirs(*paths: Path) -> list[str]:
    """String form of the given paths that exist as directories, in order."""
    return [str(p) for p in paths if p.is_dir()]


def list_version_dirs(root: Path, pattern) -> list[str]:
    """Names of subdirectories of ``root`` matching a compiled regex."""
    if not root.is_dir():
        return []
    return [
        entry.name
        for entry in os.scandir(root)
        if entry.is_dir() and pattern.match(entry.name)
    ]
