"""
Logger interface for MiniBlob.

Abstract base class defining the logging contract that every component
(resolver, layout manager, orchestrator, index) logs through.
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract base class for logging interface.

    Key/value context is passed as keyword arguments and rendered by the
    implementation (appended to text output or merged into JSON records).

    Example:
        logger.warning("Descriptor unreadable", path=str(path), error=str(e))
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        pass

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message."""
        pass

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None:
        """Log a critical message."""
        pass

    @abstractmethod
    def get_session_id(self) -> str:
        """Get the session identifier stamped on every record of this logger."""
        pass
