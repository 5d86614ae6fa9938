"""
CPU architecture probe — the host must match the architecture we build for.
"""

from __future__ import annotations

import logging

from buildprep.core.models.requirement import RequirementReport, RequirementSpec
from buildprep.core.services.probes.base import ProbeContext, make_report

logger = logging.getLogger(__name__)

ARCH_ALIASES: dict[str, tuple[str, ...]] = {
    "x64": ("x64", "amd64", "x86_64"),
    "arm64": ("arm64", "aarch64"),
    "x86": ("x86", "ia32", "i386", "i686"),
}


def normalize_arch(machine: str) -> str:
    """Canonical architecture name for a ``platform.machine()`` value."""
    lowered = machine.strip().lower()
    for canonical, aliases in ARCH_ALIASES.items():
        if lowered in aliases:
            return canonical
    return lowered


def probe_cpu_arch(ctx: ProbeContext, spec: RequirementSpec) -> RequirementReport:
    required = str(spec.probe_options.get("arch", "x64")).lower()
    logger.info("Checking CPU architecture (required: %s)", required)

    valid = ARCH_ALIASES.get(required, (required,))
    arch = ctx.machine.strip().lower()
    if arch not in valid:
        return make_report(
            spec,
            ok=False,
            reason=f"CPU architecture {ctx.machine} does not match required {required}",
            hint=f"This build requires {required} architecture",
            details={"arch": ctx.machine, "required_arch": required},
        )

    return make_report(
        spec,
        ok=True,
        details={"arch": normalize_arch(arch), "required_arch": required},
    )
