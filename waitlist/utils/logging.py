"""Structured logging for the waitlist service.

Provides JSON or text formatted logging with context support for
submission tracking and storage diagnostics.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# LogRecord attributes that are not user-supplied context
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename",
    "funcName", "levelname", "levelno", "lineno",
    "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info",
    "thread", "threadName", "exc_info", "exc_text",
    "message", "asctime", "taskName",
))


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS
    }


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, include_extras: bool = True):
        """Initialize JSON formatter.

        Args:
            include_extras: Include extra fields in output
        """
        super().__init__()
        self._include_extras = include_extras

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted string
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self._include_extras:
            extras = {}
            for key, value in _extras(record).items():
                try:
                    json.dumps(value)  # Check if serializable
                    extras[key] = value
                except (TypeError, ValueError):
                    extras[key] = str(value)

            if extras:
                log_data["context"] = extras

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Text formatter with context support."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text, appending extra context as key=value."""
        base = super().format(record)

        extras = [f"{key}={value}" for key, value in _extras(record).items()]
        if extras:
            return f"{base} | {' '.join(extras)}"

        return base


class SubmissionLogger:
    """Logger for waitlist submission events.

    Every method emits one record with an ``event`` field so the JSON
    output can be filtered per stage.

    Example:
        >>> logger = SubmissionLogger("waitlist.api")
        >>> logger.entry_saved(email="jane@example.com", path="media/waitlist.csv")
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def request_received(self, method: str, **context: Any) -> None:
        """Log an incoming request (DEBUG, may include the raw body)."""
        self._logger.debug(
            f"Waitlist request: {method}",
            extra={"event": "request_received", "method": method, **context},
        )

    def submission_rejected(self, reason: str, status_code: int, **context: Any) -> None:
        """Log a client error.

        Args:
            reason: Message returned to the client
            status_code: HTTP status sent
            **context: Additional context
        """
        self._logger.info(
            f"Submission rejected: {reason}",
            extra={
                "event": "submission_rejected",
                "reason": reason,
                "status_code": status_code,
                **context,
            },
        )

    def entry_saved(self, email: str, path: str, **context: Any) -> None:
        """Log a stored waitlist entry."""
        self._logger.info(
            f"Waitlist entry saved for: {email}",
            extra={"event": "entry_saved", "email": email, "path": path, **context},
        )

    def storage_failed(self, message: str, **context: Any) -> None:
        """Log a storage failure with the active exception's traceback."""
        self._logger.exception(
            f"Storage failure: {message}",
            extra={"event": "storage_failed", **context},
        )


def setup_logging(
    level: str = "INFO",
    format: str = "text",
    file: str | Path | None = None,
    rotate_size_mb: int = 10,
    retain_count: int = 5,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ('json' or 'text')
        file: Log file path (None for stdout only)
        rotate_size_mb: Log rotation size in MB
        retain_count: Number of rotated files to retain
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    if format == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file:
        file_path = Path(file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=rotate_size_mb * 1024 * 1024,
            backupCount=retain_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Configure uvicorn loggers to propagate to root (so they go to file handler)
    for uvicorn_logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True


def get_submission_logger(name: str) -> SubmissionLogger:
    """Get a submission logger instance."""
    return SubmissionLogger(name)
