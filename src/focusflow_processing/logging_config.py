"""Structured logging configuration using structlog.

Usage:
    from focusflow_processing.logging_config import configure_logging, get_logger

    # In main.py startup
    configure_logging(log_level="INFO")

    # In application code
    logger = get_logger(__name__)
    logger.info("pipeline_started", content_id="abc", input_type="pdf")

Pipeline code binds run context once (``logger.bind(content_id=..., run_id=...)``)
and logs event names, so every line of one run can be correlated.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: If True, output JSON logs for production. If False, use
                   human-readable console output for development.

    Processor Pipeline:
    1. Merge context variables (bound per request/run)
    2. Add log level and logger name
    3. Add timestamp (ISO8601 UTC)
    4. Add callsite info (file, function, line)
    5. Format as console or JSON
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]

    if json_logs:
        # format_exc_info must run before JSON rendering
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Configured structlog logger (BoundLogger)

    Note: Returns Any to avoid complex structlog type annotations.
    The actual type is structlog.stdlib.BoundLogger.
    """
    return structlog.get_logger(name)
