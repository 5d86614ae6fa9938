"""
Adapters — everything that talks to programs outside the process.
"""

from buildprep.adapters.base import Runner
from buildprep.adapters.mock import MockRunner
from buildprep.adapters.registry_query import RegistryReader
from buildprep.adapters.shell.command import CommandRunner
from buildprep.adapters.vcs.git import GitClient

__all__ = ["CommandRunner", "GitClient", "MockRunner", "RegistryReader", "Runner"]
