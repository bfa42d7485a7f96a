"""
Structured logging configuration for Mantissa Bulwark.

Provides consistent logging across all modules, with JSON output for
log aggregation and a human-readable format for the CLI. Admission
decisions are logged as events with an ``event_type`` field.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in via extra=.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.

    Useful when admission runs as a webhook and logs are shipped to
    a central aggregator.
    """

    def __init__(
        self,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize structured formatter.

        Args:
            include_location: Include file/line location
            extra_fields: Additional fields to include in every log
        """
        super().__init__()
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_location:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable logs.

    Useful for local development and CLI usage.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"

        output = f"[{timestamp}] {level:>8} {record.name}: {record.getMessage()}"

        event_type = getattr(record, "event_type", None)
        if event_type:
            output += f" ({event_type})"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class BulwarkLogger:
    """
    Wrapper around Python logging for admission events.

    Keeps persistent context fields (for example the request's pod and
    namespace) and attaches them to every record.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self._context: dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context fields for all logs."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        """Clear context fields."""
        self._context.clear()

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        extra = {**self._context, **kwargs}
        self.logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def admission_started(self, pod: str, namespace: str, operation: str) -> None:
        """Log the start of an admission request."""
        self.debug(
            f"Admission started for {namespace}/{pod}",
            event_type="admission.started",
            pod=pod,
            namespace=namespace,
            operation=operation,
        )

    def candidate_rejected(self, policy: str, container: str, errors: list[str]) -> None:
        """Log a candidate policy that did not fit a container."""
        self.debug(
            f"Policy {policy} rejected for container {container}",
            event_type="admission.candidate_rejected",
            policy=policy,
            container=container,
            errors=errors,
        )

    def admission_admitted(self, pod: str, namespace: str, policies: dict[str, str]) -> None:
        """Log an admitted request with the policy chosen per container."""
        self.info(
            f"Admitted {namespace}/{pod}",
            event_type="admission.admitted",
            pod=pod,
            namespace=namespace,
            policies=policies,
        )

    def admission_denied(self, pod: str, namespace: str, reason: str, message: str) -> None:
        """Log a denied request."""
        self.warning(
            f"Denied {namespace}/{pod}: {message}",
            event_type="admission.denied",
            pod=pod,
            namespace=namespace,
            reason=reason,
        )


def configure_logging(
    level: str = "INFO",
    format: str = "human",
    output: str = "stderr",
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure logging for Bulwark.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (human, json)
        output: Output destination (stderr, stdout)
        extra_fields: Extra fields to include in structured logs
    """
    root_logger = logging.getLogger("bulwark")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout if output == "stdout" else sys.stderr)
    if format == "json":
        handler.setFormatter(StructuredFormatter(extra_fields=extra_fields))
    else:
        handler.setFormatter(HumanReadableFormatter())

    root_logger.addHandler(handler)


def get_logger(name: str) -> BulwarkLogger:
    """
    Get a Bulwark logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        BulwarkLogger instance
    """
    if not name.startswith("bulwark"):
        name = f"bulwark.{name}"
    return BulwarkLogger(name)


# Configure logging from environment on import
configure_logging(
    level=os.getenv("BULWARK_LOG_LEVEL", "INFO"),
    format=os.getenv("BULWARK_LOG_FORMAT", "human"),
)
