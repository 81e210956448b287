"""
Logging setup for the protobuild CLI.

main.py calls ``setup_logging`` once. Modules log through
``logging.getLogger(__name__)``.

Level precedence:
    --debug / --verbose / --quiet  >  PROTOBUILD_LOG_LEVEL  >  WARNING

What reaches the console at each level:
    ERROR    failing protoc command lines (quiet mode) and fatal errors
    WARNING  config problems such as ignored vendored includes
    INFO     discovery counts, protoc exits, descriptor writes and skips
    DEBUG    planning, vendor lookups, include order, pool scheduling

A build log can be kept with PROTOBUILD_LOG_FILE / PROTOBUILD_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys

# Marks a record whose message is a protoc command line:
#     logger.error("%s", command, extra=COMMAND)
COMMAND = {"command": True}

_FMT_CONSOLE = "protobuild: %(message)s"
_FMT_VERBOSE = "protobuild: [%(component)s] %(message)s"
# --jobs runs protoc on pool threads, so debug output names the thread
_FMT_DEBUG = "%(relativeCreated)7.0fms %(levelname)-5s %(threadName)s %(component)s:%(lineno)d %(message)s"
_FMT_FILE = "%(asctime)s %(levelname)-5s %(threadName)s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class _ComponentFilter(logging.Filter):
    """Adds ``component``: the last segment of the logger name (executor, protoc, ...)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = record.name.rsplit(".", 1)[-1]
        return True


class _ConsoleFormatter(logging.Formatter):
    """Prints command-line records bare so they can be pasted into a shell."""

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, "command", False):
            return record.getMessage()
        return super().format(record)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for a protobuild run.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional build log path.
        log_file_level: Level for the build log; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt = _FMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt = _FMT_VERBOSE
    else:
        fmt = _FMT_CONSOLE

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.addFilter(_ComponentFilter())
    console.setFormatter(_ConsoleFormatter(fmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # A broken stderr must not turn into a traceback mid-build
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
