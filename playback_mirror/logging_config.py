"""Structured logging for Playback Mirror.

JSON records go to a rotating file, a short human-readable line goes to the
console. The playback sync logger can be given its own level because the
poller logs on every one-second cycle at DEBUG.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter

DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE_NAME = "playback_mirror.log"
POLL_LOGGER_NAME = "playback_mirror.services.playback_sync"

JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def setup_logging(
    log_level: str = "INFO",
    poll_log_level: str | None = None,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Configure the root logger with a JSON file handler and a console handler.

    Args:
        log_level: Level for the root logger and the console
        poll_log_level: Level for the playback sync logger; inherits log_level when None
        log_dir: Directory for the rotating JSON log, defaults to ./logs

    Returns:
        Configured root logger instance
    """
    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(_level(log_level))
    root_logger.handlers.clear()

    # 10MB per file, 5 backups
    json_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    json_handler.setFormatter(JsonFormatter(JSON_FORMAT, timestamp=True, static_fields={"service": "playback-mirror"}))
    json_handler.setLevel(logging.DEBUG)
    root_logger.addHandler(json_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    console_handler.setLevel(_level(log_level))
    root_logger.addHandler(console_handler)

    poll_logger = logging.getLogger(POLL_LOGGER_NAME)
    poll_logger.setLevel(_level(poll_log_level) if poll_log_level else logging.NOTSET)

    # The poller makes a request every second; keep per-request noise out of the console
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name (typically __name__)."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **extra_fields: Fields added to the JSON record, e.g. event_type, track_id
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra_fields)
