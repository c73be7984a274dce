"""Logging configuration for k3d-manager.

Structured events go to stderr, rendered for humans by default or as JSON
with --json-logs. With --log-file, every event is also appended to a file
as one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

# Processors shared by structlog events and records from plain stdlib loggers
SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=SHARED_PROCESSORS,
    )


def configure_logging(
    level: str = "warning",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure logging for the application.

    Called once on startup from the CLI group. Replaces any handlers a
    previous call installed.

    Args:
        level: Log level (debug, info, warning, error)
        log_file: Optional file that receives every event as a JSON line,
                  in addition to stderr
        json_output: If True, stderr output is JSON instead of console text
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        _formatter(
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
        )
    )
    handlers: list[logging.Handler] = [console]

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
