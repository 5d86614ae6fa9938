"""
Build configuration models — what buildprep.yml declares.

Loaded by ``buildprep.core.config.loader`` and validated here.  The
dependency list is ordered: the pipeline acquires and builds
dependencies strictly in declaration order.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from buildprep.core.models.requirement import RequirementSpec


class DependencySpec(BaseModel):
    """A native dependency acquired from git and handed to a build recipe."""

    name: str
    git_url: str
    version: str = ""
    ref_prefix: str = "v"           # alternate tag spelling, e.g. "v" or "n"
    shallow: bool = True
    submodules: bool = False
    recursive_submodules: bool = False
    steps: list[list[str]] = Field(default_factory=list)
    artifacts: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "git_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("steps")
    @classmethod
    def _no_empty_steps(cls, steps: list[list[str]]) -> list[list[str]]:
        for index, step in enumerate(steps, start=1):
            if not step or not step[0].strip():
                raise ValueError(f"step {index} has no program")
        return steps

    @property
    def slug(self) -> str:
        """Directory-safe name (``google/dawn`` → ``google-dawn``)."""
        return self.name.replace("/", "-").replace(" ", "-").lower()


class BuildConfig(BaseModel):
    """Top-level buildprep.yml schema."""

    name: str = "buildprep"
    version: str = ""
    git_root: str = ".git.temp"
    artifacts_root: str = "artifacts"
    run_log: str | None = "buildprep.log"   # under git_root; None disables
    requirements: list[RequirementSpec] | None = None   # None = built-in defaults
    dependencies: list[DependencySpec] = Field(default_factory=list)

    # Directory the config was loaded from; relative paths resolve here.
    base_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    @field_validator("dependencies")
    @classmethod
    def _unique_names(cls, deps: list[DependencySpec]) -> list[DependencySpec]:
        seen: set[str] = set()
        for dep in deps:
            if dep.name in seen:
                raise ValueError(f"duplicate dependency name: {dep.name}")
            seen.add(dep.name)
        return deps

    def resolve_path(self, value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else (self.base_dir / path).resolve()

    @property
    def git_root_path(self) -> Path:
        return self.resolve_path(self.git_root)

    @property
    def artifacts_root_path(self) -> Path:
        return self.resolve_path(self.artifacts_root)

    @property
    def run_log_path(self) -> Path | None:
        if not self.run_log:
            return None
        path = Path(self.run_log)
        return path if path.is_absolute() else self.git_root_path / path

    def get_dependency(self, name: str) -> DependencySpec | None:
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None


class BuildRequest(BaseModel):
    """What the pipeline hands to a dependency's build recipe."""

    name: str
    version: str
    repo_path: Path
    resolved_ref: str | None = None
    artifacts_root: Path
    force_clean: bool = False
    env: dict[str, str] = Field(default_factory=dict)


class BuildResult(BaseModel):
    """What a build recipe reports back."""

    ok: bool
    name: str
    version: str = ""
    skipped: bool = False
    error: str | None = None
