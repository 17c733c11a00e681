"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import structlog

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def configure_logging(
    log_level: str = "INFO",
    log_dir: str | None = None,
    log_backup_count: int = 7,
) -> None:
    """
    Configure structlog on top of stdlib logging.

    Logs are rendered as JSON to stderr at ``log_level``. When ``log_dir`` is
    given, every level is also written to ``<log_dir>/app.log`` with daily
    rotation.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (invalid values fall
            back to INFO)
        log_dir: optional directory for the rotating file handler
        log_backup_count: number of rotated files to keep
    """
    level_name = log_level.upper()
    if level_name not in _VALID_LEVELS:
        print(
            f"Warning: Invalid log level '{log_level}', defaulting to INFO",
            file=sys.stderr,
        )
        level_name = "INFO"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level_name))
    console_handler.setFormatter(json_formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        try:
            log_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(
                f"Warning: Failed to create log directory '{log_dir}': {e}. "
                "Falling back to console-only logging.",
                file=sys.stderr,
            )
        else:
            file_handler = TimedRotatingFileHandler(
                log_path / "app.log",
                when="midnight",
                backupCount=log_backup_count,
                encoding="utf-8",
            )
            file_handler.suffix = "%Y-%m-%d"
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(json_formatter)
            root_logger.addHandler(file_handler)

    # ADK and genai are chatty at DEBUG
    logging.getLogger("google_adk").setLevel(logging.INFO)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)  # type: ignore[no-any-return]
