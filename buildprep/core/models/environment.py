"""
Environment overlay — search-path state shared by every subprocess.

Capability probes discover directories (compiler binaries, SDK
headers, libraries) that later build steps must see.  Instead of
writing to ``os.environ``, probes return those directories as data and
the pipeline merges them here, once, at its boundary.  The command
runner then reads ``as_env()`` for every invocation.

Additions are an idempotent set-union: a directory already present
(ambient or previously added) is never added twice, and existing
entries keep their order.  Added entries come first, in the order they
were added.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


class EnvironmentOverlay:
    """Ambient environment plus accumulated search-path additions."""

    def __init__(
        self,
        base: Mapping[str, str] | None = None,
        separator: str = os.pathsep,
    ):
        self._base: dict[str, str] = dict(os.environ if base is None else base)
        self._separator = separator
        self._added: dict[str, list[str]] = {}

    @property
    def separator(self) -> str:
        return self._separator

    @property
    def added(self) -> dict[str, list[str]]:
        """Everything added so far, per variable (a copy)."""
        return {var: list(paths) for var, paths in self._added.items()}

    def _base_entries(self, var: str) -> list[str]:
        raw = self._base.get(var, "")
        return [p for p in raw.split(self._separator) if p]

    def entries(self, var: str) -> list[str]:
        """Current entries of a search-path variable, added ones first."""
        return [*self._added.get(var, []), *self._base_entries(var)]

    def contains(self, var: str, path: str) -> bool:
        key = os.path.normcase(os.path.normpath(path))
        return any(
            os.path.normcase(os.path.normpath(entry)) == key
            for entry in self.entries(var)
        )

    def add(self, var: str, path: str) -> bool:
        """Add ``path`` to ``var`` unless already present.

        Returns:
            True if the path was added, False if it was already there.
        """
        if not path:
            return False
        if self.contains(var, path):
            logger.debug("%s already contains %s", var, path)
            return False
        self._added.setdefault(var, []).append(path)
        logger.info("Added %s to %s", path, var)
        return True

    def merge(self, additions: Mapping[str, Iterable[str]]) -> list[tuple[str, str]]:
        """Add every path of every variable; return what was actually new."""
        new: list[tuple[str, str]] = []
        for var, paths in additions.items():
            for path in paths:
                if self.add(var, path):
                    new.append((var, path))
        return new

    def get(self, var: str) -> str | None:
        """Composed value of a variable (None when unset and nothing added)."""
        if var in self._added:
            return self._separator.join(self.entries(var))
        return self._base.get(var)

    def as_env(self, overrides: Mapping[str, str | None] | None = None) -> dict[str, str]:
        """Full environment mapping for a subprocess.

        Args:
            overrides: Extra variables for this call only.  ``None``
                values become empty strings.
        """
        env = dict(self._base)
        for var in self._added:
            env[var] = self._separator.join(self.entries(var))
        for key, value in (overrides or {}).items():
            env[key] = "" if value is None else str(value)
        return env
