"""
Logging for conversion runs.

Every run logs to stdout. A run may also keep a log file, either named
with --log-file or written as legfed.log under LOG_DIR, so that the
per-kind Item counts and duplicate summaries of a load survive it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEFAULT_LOG_NAME = "legfed.log"


def setup_logging(
    name: Optional[str] = None,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    log_dir: Optional[Path] = None,
    console: bool = True,
    format_string: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Configure the logger a conversion run reports through.

    Handlers already on the logger are replaced, so calling this again
    in one process does not double every line.

    Args:
        name: Logger name; the root logger when None, which every
            legfed module logger propagates to
        level: Level for the logger and its handlers
        log_file: Log file path; relative to log_dir when both are given
        log_dir: Directory for the log file (legfed.log unless log_file names one)
        console: Also log to stdout
        format_string: Log line format

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    formatter = logging.Formatter(format_string)

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    log_path = log_file
    if log_dir is not None:
        log_path = log_dir / (log_file or DEFAULT_LOG_NAME)
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def level_from_name(name: str, verbose: bool = False) -> int:
    """Resolve a LOG_LEVEL value such as "INFO"; --verbose forces DEBUG."""
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO
