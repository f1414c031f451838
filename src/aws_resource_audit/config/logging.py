"""Run log configuration."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "aws_resource_audit"

# Between INFO and WARNING
SUCCESS = 25

# Names rendered in the run log where they differ from the stdlib ones
_LEVEL_NAMES = {logging.WARNING: "WARN"}

_LEVEL_COLORS = {
    "ERROR": "\033[0;31m",
    "SUCCESS": "\033[0;32m",
    "WARN": "\033[1;33m",
    "INFO": "\033[0;34m",
    "DEBUG": "\033[0;35m",
}
_RESET = "\033[0m"

logging.addLevelName(SUCCESS, "SUCCESS")


class RunLogFormatter(logging.Formatter):
    """Format records as ``YYYY-MM-DD HH:MM:SS | LEVEL | message``."""

    def __init__(self, color: bool = False):
        super().__init__(fmt="%(asctime)s | %(levelname)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        levelname = _LEVEL_NAMES.get(record.levelno, original)
        # Records are shared between handlers; restore the name once rendered
        record.levelname = levelname
        try:
            line = super().format(record)
        finally:
            record.levelname = original

        if self.color and (color := _LEVEL_COLORS.get(levelname)):
            return f"{color}{line}{_RESET}"
        return line


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Set up console logging for the package logger.

    Replaces any handlers left by a previous run in the same process.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(RunLogFormatter(color=sys.stderr.isatty()))
    logger.addHandler(console)
    return logger


def attach_run_log(log_file: str | Path) -> Path | None:
    """
    Append log lines to the run log file as well as the console.

    Returns:
        The run log path, or None if the file cannot be opened. The run then
        carries on with console logging only.
    """
    path = Path(log_file)
    logger = logging.getLogger(LOGGER_NAME)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot open run log %s, logging to console only: %s", path, e)
        return None

    handler.setFormatter(RunLogFormatter())
    logger.addHandler(handler)
    return path
