"""
Version model — an ordered sequence of non-negative integers.

Versions come from free-form tool output, so the model is deliberately
forgiving: a single leading tag character (``v1.2``, ``n7.1``) is
dropped, segments without a leading digit are ignored, and comparison
pads the shorter side with zeros.  ``Version("1.2") == Version("1.2.0")``.

No precision beyond what was extracted is ever assumed.  Two versions
that agree on every digit we could see compare equal even if the tool
printed a different patch identifier after them.
"""

from __future__ import annotations

from functools import total_ordering
from typing import Iterable


def _leading_int(segment: str) -> int | None:
    """Integer value of the leading digits in ``segment`` (None if none)."""
    digits = ""
    for char in segment:
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else None


def normalize_version(text: str) -> tuple[int, ...]:
    """Split a dotted version string into integer segments.

    ``"v3.16.0-rc1"`` → ``(3, 16, 0)``.  Returns ``()`` when nothing
    numeric is left.
    """
    cleaned = strip_version_prefix(str(text).strip())
    parts: list[int] = []
    for segment in cleaned.split("."):
        value = _leading_int(segment)
        if value is not None:
            parts.append(value)
    return tuple(parts)


def strip_version_prefix(text: str) -> str:
    """Drop a single leading non-digit tag character (``v``, ``V``, ``n``)."""
    if text and not text[0].isdigit():
        return text[1:]
    return text


def compare_parts(a: Iterable[int], b: Iterable[int]) -> int:
    """Compare two segment sequences, padding the shorter with zeros."""
    left, right = list(a), list(b)
    for index in range(max(len(left), len(right))):
        x = left[index] if index < len(left) else 0
        y = right[index] if index < len(right) else 0
        if x > y:
            return 1
        if x < y:
            return -1
    return 0


@total_ordering
class Version:
    """A parsed, comparable version.

    Keeps the text it was built from for display; equality and ordering
    only look at the numeric segments.
    """

    __slots__ = ("parts", "text")

    def __init__(self, value: str | Iterable[int]):
        if isinstance(value, str):
            self.text = strip_version_prefix(value.strip())
            self.parts = normalize_version(value)
        else:
            self.parts = tuple(int(p) for p in value)
            self.text = ".".join(str(p) for p in self.parts)
        if any(p < 0 for p in self.parts):
            raise ValueError(f"Version segments must be non-negative: {value!r}")

    @classmethod
    def coerce(cls, value: Version | str | Iterable[int]) -> Version:
        return value if isinstance(value, Version) else cls(value)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Version({self.text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Version, str, tuple, list)):
            return compare_parts(self.parts, Version.coerce(other).parts) == 0
        return NotImplemented

    def __lt__(self, other: Version | str) -> bool:
        return compare_parts(self.parts, Version.coerce(other).parts) < 0

    def __hash__(self) -> int:
        # Trailing zeros do not change equality, so they must not change the hash.
        parts = list(self.parts)
        while parts and parts[-1] == 0:
            parts.pop()
        return hash(tuple(parts))

    def __bool__(self) -> bool:
        return bool(self.parts)
