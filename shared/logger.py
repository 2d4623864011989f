"""Structured logging setup."""
import logging
import sys

import structlog

from shared.exceptions import ConfigurationError

LOG_FORMATS = ("json", "console")

def setup_logging(level: str = "INFO", log_format: str = "json") -> structlog.BoundLogger:
    """Configure structlog for a sample run.

    Events go to stderr so the Data View rows printed on stdout stay readable.
    `console` renders colourless key=value lines for interactive runs.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ConfigurationError(f"Unknown log level '{level}'")
    if log_format not in LOG_FORMATS:
        raise ConfigurationError(f"Unknown log format '{log_format}', expected one of {', '.join(LOG_FORMATS)}")

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            renderer
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger()
