"""
Logging configuration — console setup and per-run build logs.

``setup_logging`` is called once at startup by main.py.  Every module
that does ``logger = logging.getLogger(__name__)`` inherits this config.

Console level is resolved in precedence order:
    CLI flag  >  BUILDPREP_LOG_LEVEL env var  >  WARNING (default)

Optional process-wide file output via BUILDPREP_LOG_FILE /
BUILDPREP_LOG_FILE_LEVEL.

``run_log`` additionally captures one build run at DEBUG into a file
next to the clones, so the full command trail of a failed build is on
disk even when the console was quiet.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

# WARNING level: minimal, no noise
_FMT_MINIMAL = "%(message)s"

# INFO level: timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# File output: always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

RUN_LOG_NAME = "buildprep.log"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file kept across runs.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_VERBOSE
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)
        root.addHandler(_file_handler(Path(log_file), file_level, mode="a"))

    root.setLevel(effective_level)
    logging.raiseExceptions = False


@contextmanager
def run_log(path: Path, level: str = "DEBUG") -> Iterator[Path]:
    """Copy every record emitted inside the block into ``path``.

    The file is truncated at the start of each run.  Console handlers
    keep their own levels, so lowering the root level for the file
    does not make the console any noisier.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = _file_handler(path, _parse_level(level), mode="w")

    root = logging.getLogger()
    previous = root.level
    root.addHandler(handler)
    root.setLevel(min(previous, handler.level) if previous else handler.level)
    try:
        yield path
    finally:
        root.removeHandler(handler)
        handler.close()
        root.setLevel(previous)


def _file_handler(path: Path, level: int, mode: str) -> logging.FileHandler:
    handler = logging.FileHandler(path, mode=mode, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return handler


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
