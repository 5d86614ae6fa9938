"""
Version parsing — turn noisy ``--version`` output into a ``Version``.

Pure functions, no I/O.  Tools print versions in every shape imaginable
(``cmake version 3.28.1``, ``go version go1.23.0 linux/amd64``,
``v22.1.0``, a compiler banner on stderr), so the default parser looks
for the first whitespace-delimited token holding a dotted digit run.

Finding no version is a normal outcome: some requirements gate on the
exit code alone.
"""

from __future__ import annotations

import re

from buildprep.core.models.version import Version, compare_parts


def _digit_runs(token: str) -> list[str]:
    """Runs of ``[0-9.]`` inside a token that contain at least one digit."""
    runs: list[str] = []
    buffer = ""
    for char in token + " ":
        if char.isdigit() or char == ".":
            buffer += char
            continue
        if any(c.isdigit() for c in buffer):
            runs.append(buffer)
        buffer = ""
    return runs


def extract_version_text(text: str) -> str | None:
    """Return the raw version substring found in ``text``, or None.

    The first token holding a dotted run wins.  When no token has one,
    the first digit run anywhere is used (``ninja 12`` style output).
    """
    first_undotted: str | None = None
    for token in text.split():
        for run in _digit_runs(token):
            stripped = run.strip(".")
            if "." in stripped:
                return stripped
            if first_undotted is None and stripped:
                first_undotted = stripped
    return first_undotted


def parse_version(
    stdout: str | None,
    stderr: str | None = None,
    pattern: str | None = None,
) -> Version | None:
    """Parse a version from combined stdout + stderr.

    Args:
        stdout: Captured standard output.
        stderr: Captured standard error (compilers print banners here).
        pattern: Optional regex whose first group is the version text.
            When given, it replaces the default token scan.

    Returns:
        The parsed ``Version`` or None when no digits were found.
    """
    combined = f"{stdout or ''} {stderr or ''}"

    if pattern:
        match = re.search(pattern, combined)
        if not match:
            return None
        version = Version(match.group(1))
        return version if version else None

    text = extract_version_text(combined)
    if text is None:
        return None
    version = Version(text)
    return version if version else None


def compare_versions(a: Version | str, b: Version | str) -> int:
    """Three-way compare: -1, 0 or 1.  Missing segments count as zero."""
    return compare_parts(Version.coerce(a).parts, Version.coerce(b).parts)


def version_sort_key(text: str) -> tuple[int, ...]:
    """Sort key for directory names such as ``10.0.22631.0``.

    Consistent with ``compare_versions``: trailing zeros are dropped so
    ``1.2`` and ``1.2.0`` sort as equals.
    """
    parts = list(Version(text).parts)
    while parts and parts[-1] == 0:
        parts.pop()
    return tuple(parts)
