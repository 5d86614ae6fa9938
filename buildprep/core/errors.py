"""
Domain errors raised by the engine.

Requirement-level problems (not found, bad version output, version out
of bounds, probe failure) are never raised one by one: they are
collected as reports and raised together as ``AggregateToolError``.
Reference resolution and build delegate failures are raised
immediately, since nothing downstream can proceed without a source
tree.
"""

from __future__ import annotations

from buildprep.core.models.checkout import CheckoutOutcome
from buildprep.core.models.requirement import RequirementReport


class BuildPrepError(Exception):
    """Base class for all buildprep domain errors."""


class AggregateToolError(BuildPrepError):
    """One or more mandatory toolchain requirements failed.

    Attributes:
        failures: The failing, non-skipped, mandatory reports.
        reports: Every report of the evaluation run, for summaries.
    """

    header = "One or more tooling checks failed:"

    def __init__(
        self,
        failures: list[RequirementReport],
        reports: list[RequirementReport],
    ):
        if not failures:
            raise ValueError("AggregateToolError requires at least one failure")
        self.failures = list(failures)
        self.reports = list(reports)
        details = "\n".join(f.failure_line() for f in self.failures)
        super().__init__(f"{self.header}\n{details}")


class ReferenceResolutionError(BuildPrepError):
    """Every ref candidate failed both the tag and the branch strategy."""

    def __init__(self, dependency: str, outcome: CheckoutOutcome):
        self.dependency = dependency
        self.outcome = outcome
        super().__init__(
            f"Failed to check out {dependency} reference. Attempts:\n"
            f"{outcome.describe_attempts()}"
        )


class AcquisitionError(BuildPrepError):
    """Cloning or preparing a dependency's repository failed."""

    def __init__(self, dependency: str, message: str):
        self.dependency = dependency
        super().__init__(f"{dependency}: {message}")


class DelegateFailure(BuildPrepError):
    """A dependency's build recipe reported failure."""

    def __init__(self, dependency: str, error: str | None):
        self.dependency = dependency
        self.error = error or "unknown error"
        super().__init__(f"{dependency} build failed: {self.error}")
