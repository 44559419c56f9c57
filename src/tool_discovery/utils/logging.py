"""Logging setup for tool discovery."""

import logging
import sys
from pathlib import Path
from typing import TextIO

LOGGER_NAME = "tool-discovery"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: int = logging.WARNING,
    log_file: Path | None = None,
    stream: TextIO | None = None,
    console: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Configure the package logger.

    Handlers installed by an earlier call are replaced, so calling this
    more than once (tests, repeated CLI invocations in one process) does
    not duplicate output.

    Args:
        level: Logging level for the package logger.
        log_file: Optional file that receives the same records.
        stream: Stream for console output (defaults to stderr).
        console: Whether to log to the console at all.

    Returns:
        The configured ``tool-discovery`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(_LOG_FORMAT)

    if console:
        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def trim_log_file(log_file: Path, keep_lines: int = 10) -> None:
    """Keep only the last ``keep_lines`` lines of a log file."""
    try:
        lines = log_file.read_text(encoding="utf-8").splitlines(keepends=True)
    except FileNotFoundError:
        return
    if len(lines) <= keep_lines:
        return
    tmp_path = log_file.with_suffix(log_file.suffix + ".tmp")
    tmp_path.write_text("".join(lines[-keep_lines:]), encoding="utf-8")
    tmp_path.replace(log_file)
