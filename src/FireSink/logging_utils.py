# ============================================================================
# FireSink - Logging Utilities
#
# Purpose: Centralized logging configuration and utilities
# Inputs: Log level, format string
# Outputs: Configured logger instances
# Dependencies: logging (stdlib)
# Usage: logger = get_logger(__name__)
#
# Changelog:
#   2026-09-02: Initial logging setup
#   2026-09-21: ContextFormatter - append url/verb/path/error extras to log lines
# ============================================================================

import logging
from typing import Any, Dict, Optional

_LOGGING_CONFIGURED = False

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Extras attached by the dispatcher and client; rendered in this order
CONTEXT_FIELDS = ("url", "verb", "path", "error")


class ContextFormatter(logging.Formatter):
    """Formatter that appends known ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        pairs = [f"{name}={getattr(record, name)!s}" for name in CONTEXT_FIELDS if hasattr(record, name)]
        if pairs:
            message = f"{message} [{' '.join(pairs)}]"
        return message


def log_context(**fields: Any) -> Dict[str, Any]:
    """
    Build an ``extra`` mapping for structured log entries.

    None values are dropped so the formatter only renders what is known.

    Args:
        **fields: Context values (url, verb, path, error)

    Returns:
        Dict suitable for the ``extra`` argument of logging calls
    """
    return {key: value for key, value in fields.items() if value is not None}


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Configure logging for the entire package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        format_string: Optional custom format string
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    if format_string is None:
        format_string = DEFAULT_FORMAT

    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter(format_string, datefmt="%Y-%m-%d %H:%M:%S"))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
    )

    _LOGGING_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
