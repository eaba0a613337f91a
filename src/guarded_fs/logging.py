"""Logging setup for guarded-fs.

Diagnostics never go to stdout: a host may be speaking a protocol there.
Handlers write to stderr and, optionally, to a log file.
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "GUARDED_FS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str | None) -> int:
    # CLI flag > env var > WARNING
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    numeric_level = getattr(logging, name, None)
    if not isinstance(numeric_level, int):
        print(f"Warning: Invalid log level '{name}', using WARNING", file=sys.stderr)
        return logging.WARNING
    return numeric_level


def setup_logging(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """Configure the guarded_fs package logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR). Falls back to
               the GUARDED_FS_LOG_LEVEL env var, then WARNING.
        log_file: Optional file that receives a copy of every record.

    Returns:
        The configured guarded_fs logger.
    """
    numeric_level = _resolve_level(level)

    logger = logging.getLogger("guarded_fs")
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if not any(getattr(h, "_guarded_fs_stderr", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler._guarded_fs_stderr = True
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if log_file:
        target = os.path.abspath(log_file)
        known = {getattr(h, "baseFilename", None) for h in logger.handlers}
        if target not in known:
            file_handler = logging.FileHandler(target, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (typically called with __name__)."""
    return logging.getLogger(name)
