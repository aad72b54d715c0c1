"""Logger setup for codeinspector and a log sink for pipeline progress."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

from .models import ProgressEvent

_LOGGER_NAME = "codeinspector"
_CONSOLE_FORMAT = "[codeinspector] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the codeinspector hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send codeinspector logs to stderr (reports own stdout) and optionally to a file."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # The file always gets the full trace.
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


def progress_logger(name: str = "progress") -> Callable[[ProgressEvent], None]:
    """Return a progress callback that records each pipeline event at DEBUG level."""
    logger = get_logger(name)

    def _log(event: ProgressEvent) -> None:
        position = f"{event.current}/{event.total}" if event.total else str(event.current)
        if event.detail:
            logger.debug("%s %s: %s", event.stage, position, event.detail)
        else:
            logger.debug("%s %s", event.stage, position)

    return _log


__all__ = ["configure_logging", "get_logger", "progress_logger"]
