"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from buildprep.adapters.mock import MockRunner
from buildprep.adapters.vcs.git import GitClient
from buildprep.core.services.probes import ProbeContext


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def runner() -> MockRunner:
    """A mock runner with an empty ambient environment."""
    return MockRunner()


@pytest.fixture
def git(runner: MockRunner) -> GitClient:
    return GitClient(runner)


@pytest.fixture
def linux_ctx(runner: MockRunner) -> ProbeContext:
    return ProbeContext(runner=runner, platform="linux", machine="x86_64")


@pytest.fixture
def windows_ctx(runner: MockRunner) -> ProbeContext:
    return ProbeContext(runner=runner, platform="win32", machine="AMD64")
