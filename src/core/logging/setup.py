"""Logging setup and configuration."""

import logging
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_ROTATION_WHEN = "midnight"
DEFAULT_BACKUP_COUNT = 7

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "aiohttp",
    "aiokafka",
    "kafka",
    "sqlalchemy.engine",
    "urllib3",
]


def parse_log_level(level: str | int) -> int:
    """Convert a level name such as "debug" to its numeric value."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def get_log_file_path(log_dir: Path, name: str, worker_id: str | None = None) -> Path:
    """
    Build log file path with a date subfolder.

    Structure: {log_dir}/{YYYY-MM-DD}/{name}_{HHMM}[_{worker_id}].log
    """
    now = datetime.now()
    filename = f"{name}_{now.strftime('%H%M')}"
    if worker_id:
        filename = f"{filename}_{worker_id}"
    return log_dir / now.strftime("%Y-%m-%d") / f"{filename}.log"


def setup_logging(
    name: str = "mm_processor",
    level: str | int = logging.INFO,
    json_format: bool = True,
    log_dir: Path | None = None,
    suppress_noisy: bool = True,
    worker_id: str | None = None,
    stage: str | None = None,
) -> logging.Logger:
    """
    Configure the root logger for stdout and, optionally, a rotating file.

    Containers capture stdout, so stdout is always configured. When log_dir is
    given, a daily-rotated file handler receives JSON lines as well.

    Args:
        name: Logger name and log file prefix
        level: Minimum level for all handlers (name or number)
        json_format: Use JSON lines on stdout instead of the console format
        log_dir: Directory for rotated log files (disabled when None)
        suppress_noisy: Quiet down HTTP, Kafka and SQL client loggers
        worker_id: Worker identifier for context
        stage: Stage name for context

    Returns:
        Configured logger instance
    """
    numeric_level = parse_log_level(level)

    if worker_id:
        set_log_context(worker_id=worker_id)
    if stage:
        set_log_context(stage=stage)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    root_logger.addHandler(console_handler)

    log_file = None
    if log_dir is not None:
        log_file = get_log_file_path(Path(log_dir), name, worker_id)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_file,
            when=DEFAULT_ROTATION_WHEN,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(max(logging.WARNING, numeric_level))

    logger = logging.getLogger(name)
    logger.debug(
        "Logging initialized",
        extra={"log_file": str(log_file) if log_file else None, "json": json_format},
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Use this instead of logging.getLogger() to ensure consistent naming.
    """
    return logging.getLogger(name)
