"""Logging configuration for the reconciliation CLI and services.

Dual output (stdout + file) with the level taken from LOG_LEVEL.
Default: INFO. Settlement warnings are logged at WARNING, per-month ledger
details at DEBUG.
"""

import logging
import os
import sys
from pathlib import Path

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Third-party loggers kept at WARNING unless LOG_LEVEL=DEBUG
QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.pool")


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to LOG_LEVEL and then INFO.

    Args:
        level_name: Explicit level name (case-insensitive), optional

    Returns:
        Logging level constant
    """
    level_str = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_logging(log_file: str = "logs/reconcile.log", level_name: str | None = None) -> None:
    """
    Configure the root logger for stdout and file output.

    Args:
        log_file: Path to log file (default: logs/reconcile.log)
        level_name: Level name overriding LOG_LEVEL (optional)
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # ISO format: [YYYY-MM-DD HH:MM:SS]
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = get_log_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Driver chatter only at DEBUG; SQL echo is controlled by DATABASE_ECHO
    library_level = logging.DEBUG if log_level == logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
