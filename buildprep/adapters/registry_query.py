"""
Registry reader — read-only key/value lookups in the Windows registry.

Queries go through ``reg.exe query`` via the runner, so tests can
script them with ``MockRunner`` on any platform.  A missing key, a
failing query or unparsable output all mean "absent" (None), never an
exception.
"""

from __future__ import annotations

import logging
import re

from buildprep.adapters.base import Runner

logger = logging.getLogger(__name__)

REG_EXE = r"C:\Windows\System32\reg.exe"

# "    KitsRoot10    REG_SZ    C:\Program Files (x86)\Windows Kits\10\"
_VALUE_LINE = re.compile(r"^\s+(.+?)\s{2,}(REG_[A-Z_]+)\s*(.*)$")


def parse_registry_output(text: str) -> dict[str, str]:
    """Parse ``reg query`` output into ``{value_name: data}``.

    Key header lines and blank lines are ignored.  Pure function.
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        match = _VALUE_LINE.match(line)
        if match:
            name, _kind, data = match.groups()
            values[name.strip()] = data.strip()
    return values


class RegistryReader:
    """Look up registry values by key path."""

    def __init__(self, runner: Runner, program: str = REG_EXE):
        self._runner = runner
        self._program = program

    def query(self, key: str) -> dict[str, str] | None:
        """All values directly under ``key``, or None if it can't be read."""
        result = self._runner.run(self._program, ["query", key])
        if not result.ok:
            logger.debug("Registry key not readable: %s (%s)", key, result.failure_reason())
            return None
        return parse_registry_output(result.stdout)

    def get_value(self, key: str, name: str) -> str | None:
        values = self.query(key)
        if values is None:
            return None
        value = values.get(name)
        return value or None
