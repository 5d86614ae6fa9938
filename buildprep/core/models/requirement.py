"""
Requirement models — what the toolchain must provide, and what we found.

A ``RequirementSpec`` is authored by the caller (YAML or the built-in
defaults) and never mutated.  Each evaluation produces exactly one
``RequirementReport`` per spec, including specs skipped for platform
reasons, so operators always see the full list.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProbeKind(str, Enum):
    """Capability probes the evaluator knows how to dispatch.

    Closed set: a spec can only name one of these, never an arbitrary
    callable.
    """

    WINDOWS_SDK = "windows_sdk"
    MSVC = "msvc"
    CPU_ARCH = "cpu_arch"
    PYTHON3 = "python3"


class RequirementSpec(BaseModel):
    """A declared expectation that some tool is available.

    Either a standard version check (``probe`` is None: resolve
    ``program``, run it with ``version_args``, compare against the
    bounds) or a capability probe (``probe`` names the kind, and
    ``probe_options`` carries its parameters).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    program: str = ""
    version_args: list[str] = Field(default_factory=lambda: ["--version"])
    minimum_version: str | None = None
    maximum_version: str | None = None
    version_pattern: str | None = None   # regex, group 1 = version text
    platforms: list[str] | None = None   # None = every platform
    required: bool = True
    enabled: bool = True
    description: str = ""
    hint: str | None = None
    probe: ProbeKind | None = None
    probe_options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("version_pattern")
    @classmethod
    def _pattern_has_group(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            compiled = re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid version_pattern: {e}") from e
        if compiled.groups < 1:
            raise ValueError("version_pattern needs a capture group for the version text")
        return value

    @model_validator(mode="after")
    def _program_or_probe(self) -> RequirementSpec:
        if self.probe is None and not self.program:
            raise ValueError(
                f"Requirement '{self.name}' needs a 'program' or a 'probe'"
            )
        return self

    @property
    def version_required(self) -> bool:
        """A parsable version is mandatory once any bound is declared."""
        return self.minimum_version is not None or self.maximum_version is not None

    @property
    def label(self) -> str:
        """How the tool is named in failure messages."""
        return self.description or self.program or self.name

    def applies_to(self, platform: str) -> bool:
        return self.platforms is None or platform in self.platforms


class RequirementReport(BaseModel):
    """Result of evaluating one ``RequirementSpec``.

    ``search_paths`` maps environment variables (``PATH``, ``INCLUDE``,
    ``LIB``) to the directories a probe discovered.  They are surfaced
    to operators and merged into the environment overlay by the caller.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    program: str = ""
    required: bool = True
    ok: bool = False
    skipped: bool = False
    version: str | None = None
    path: str | None = None
    reason: str | None = None
    hint: str | None = None
    output: str | None = None
    search_paths: dict[str, list[str]] = Field(default_factory=dict)
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return not self.ok and not self.skipped

    @property
    def is_blocking(self) -> bool:
        """A failure that must stop the pipeline."""
        return self.failed and self.required

    @property
    def bin_paths(self) -> list[str]:
        return self.search_paths.get("PATH", [])

    @property
    def include_paths(self) -> list[str]:
        return self.search_paths.get("INCLUDE", [])

    @property
    def lib_paths(self) -> list[str]:
        return self.search_paths.get("LIB", [])

    def failure_line(self) -> str:
        """Multi-line description used in aggregate failure messages."""
        parts = [f"- {self.name}: {self.reason or 'failed'}"]
        if self.path:
            parts.append(f"  located at {self.path}")
        if self.output:
            parts.append(f"  output: {self.output}")
        if self.hint:
            parts.append(f"  hint: {self.hint}")
        return "\n".join(parts)
