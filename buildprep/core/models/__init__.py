"""
Domain models — types shared by the engine, adapters and CLI.

All models are re-exported here for convenient access:

    from buildprep.core.models import RequirementSpec, RequirementReport, Version
"""

from buildprep.core.models.build import (
    BuildConfig,
    BuildRequest,
    BuildResult,
    DependencySpec,
)
from buildprep.core.models.checkout import CheckoutOutcome, RefAttempt
from buildprep.core.models.command import CommandResult
from buildprep.core.models.environment import EnvironmentOverlay
from buildprep.core.models.requirement import (
    ProbeKind,
    RequirementReport,
    RequirementSpec,
)
from buildprep.core.models.version import Version

__all__ = [
    # build.py
    "BuildConfig",
    "BuildRequest",
    "BuildResult",
    # checkout.py
    "CheckoutOutcome",
    # command.py
    "CommandResult",
    "DependencySpec",
    # environment.py
    "EnvironmentOverlay",
    # requirement.py
    "ProbeKind",
    "RefAttempt",
    "RequirementReport",
    "RequirementSpec",
    # version.py
    "Version",
]
