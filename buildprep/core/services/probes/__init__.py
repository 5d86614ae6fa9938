"""
Capability probes — one module per ``ProbeKind``.

``run_probe`` is the only dispatcher: a closed table from kind to
probe function, so every probe is enumerable and testable on its own.
"""

from __future__ import annotations

from collections.abc import Callable

from buildprep.core.models.requirement import ProbeKind, RequirementReport, RequirementSpec
from buildprep.core.services.probes.base import ProbeContext
from buildprep.core.services.probes.cpu_arch import probe_cpu_arch
from buildprep.core.services.probes.msvc import probe_msvc
from buildprep.core.services.probes.python3 import probe_python3
from buildprep.core.services.probes.windows_sdk import probe_windows_sdk

ProbeFn = Callable[[ProbeContext, RequirementSpec], RequirementReport]

PROBES: dict[ProbeKind, ProbeFn] = {
    ProbeKind.WINDOWS_SDK: probe_windows_sdk,
    ProbeKind.MSVC: probe_msvc,
    ProbeKind.CPU_ARCH: probe_cpu_arch,
    ProbeKind.PYTHON3: probe_python3,
}


def run_probe(ctx: ProbeContext, spec: RequirementSpec) -> RequirementReport:
    """Dispatch ``spec`` to its probe.

    Raises:
        ValueError: If the spec declares no probe.
    """
    if spec.probe is None:
        raise ValueError(f"Requirement '{spec.name}' does not declare a probe")
    return PROBES[spec.probe](ctx, spec)


__all__ = ["PROBES", "ProbeContext", "run_probe"]
