"""Logging configuration for Career Compass."""

import logging
import sys

# Logger name for the application
LOGGER_NAME = "career_compass"

# Pipeline modules log under their import path
PACKAGE_LOGGER_NAME = "src"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def _build_handler(level: int, format_string: str, date_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
    return handler


def configure_logging(
    level: str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure and return the main application logger.

    Records from the pipeline modules (``logging.getLogger(__name__)`` under
    ``src``) are sent to the same stderr stream.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO if not specified.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The configured application logger.
    """
    global _configured

    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    loggers = [logging.getLogger(LOGGER_NAME), logging.getLogger(PACKAGE_LOGGER_NAME)]

    for logger in loggers:
        logger.setLevel(log_level)
        if not _configured:
            logger.handlers.clear()
            logger.addHandler(_build_handler(log_level, format_string, date_format))
            logger.propagate = False
        else:
            for handler in logger.handlers:
                handler.setLevel(log_level)

    _configured = True
    return loggers[0]


def get_logger(name: str) -> logging.Logger:
    """Get a child logger for a specific component.

    Args:
        name: The component name (will be prefixed with 'career_compass.').
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Reset logging configuration (useful for testing)."""
    global _configured

    for name in (LOGGER_NAME, PACKAGE_LOGGER_NAME):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    _configured = False
