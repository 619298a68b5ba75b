"""
Structured logging configuration using structlog.

Provides consistent JSON logging for automation and pretty console output
for interactive use.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from objectstore.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        settings: Application settings. If None, uses default settings.
    """
    if settings is None:
        settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Command output goes to stdout, so logs go to stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    # Set levels for noisy libraries
    for name in ("botocore", "aiobotocore", "boto3", "urllib3", "google", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name. If None, uses the caller's module name.

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


class OperationLogger:
    """Logger for command-line storage operations."""

    def __init__(self, backend: str) -> None:
        self.backend = backend
        self.logger = get_logger("objectstore.cli")

    def log_operation_completed(
        self,
        operation: str,
        duration_ms: float,
        **fields: object,
    ) -> None:
        """Log a successful operation."""
        self.logger.info(
            "operation_completed",
            operation=operation,
            backend=self.backend,
            duration_ms=round(duration_ms, 2),
            **fields,
        )

    def log_operation_failed(
        self,
        operation: str,
        error_code: str,
        error: str,
    ) -> None:
        """Log a failed operation."""
        self.logger.error(
            "operation_failed",
            operation=operation,
            backend=self.backend,
            error_code=error_code,
            error=error,
        )
