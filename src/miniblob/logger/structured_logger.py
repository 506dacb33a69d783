"""
Structured logger with JSON output and file support.

Wraps a stdlib ``logging.Logger`` so that keyword context passed to the
MiniBlob ``Logger`` interface survives as record attributes, rendered either
as ``key=value`` pairs or as JSON fields.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .interface import Logger

# Attributes every LogRecord carries; anything else came from caller kwargs.
RESERVED_RECORD_KEYS = frozenset({
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module",
    "msecs", "message", "msg", "name", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "thread",
    "threadName", "taskName",
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in RESERVED_RECORD_KEYS and key != "session_id"
    }


class JsonFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        session_id = getattr(record, "session_id", None)
        if session_id:
            log_data["session_id"] = str(session_id)

        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Text formatter that appends extra kwargs to the message as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        s = super().format(record)
        extra_args = _extra_fields(record)
        if extra_args:
            s += " " + " ".join(f"{k}={v}" for k, v in extra_args.items())
        return s


class StructuredLogger(Logger):
    """Logger implementation with structured JSON logging and file output.

    Example:
        logger = StructuredLogger(name="miniblob-auth")
        logger.warning("Descriptor unreadable", path="/data/c1/.container.auth")

        logger = StructuredLogger(
            name="miniblob",
            json_format=True,
            log_file="/var/log/miniblob.log",
        )
    """

    def __init__(
        self,
        name: str = "miniblob",
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        json_format: bool = False,
    ):
        """Initialize the structured logger.

        Args:
            name: Logger name (e.g., "miniblob-auth", "miniblob-storage")
            level: Logging level (logging.DEBUG, logging.INFO, etc.)
            log_file: Optional file path for log output
            json_format: If True, output logs as JSON; otherwise use text format
        """
        self._name = name
        self._session_id = str(uuid.uuid4())[:8]
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        # Re-creating a logger with the same name must not duplicate output
        if self._logger.hasHandlers():
            self._logger.handlers.clear()

        self._logger.propagate = False

        if json_format:
            formatter: logging.Formatter = JsonFormatter()
        else:
            formatter = TextFormatter(
                "%(asctime)s [%(levelname)s] [%(name)s] [session:%(session_id)s] %(message)s"
            )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self._logger.addHandler(console_handler)

        if log_file:
            try:
                file_handler = logging.FileHandler(log_file)
                file_handler.setFormatter(formatter)
                self._logger.addHandler(file_handler)
            except OSError as e:
                print(f"Failed to setup log file {log_file}: {e}", file=sys.stderr)

    @property
    def name(self) -> str:
        return self._name

    def get_session_id(self) -> str:
        return self._session_id

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        extra: Dict[str, Any] = {"session_id": self._session_id}

        for k, v in kwargs.items():
            if k in RESERVED_RECORD_KEYS:
                # LogRecord refuses to overwrite its own attributes
                extra[f"_{k}"] = v
            else:
                extra[k] = v

        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)
