"""Plain text logging used across the deployment tooling."""

from __future__ import annotations

import abc
import sys
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TextIO, Union


class LoggingLevel(str, Enum):
    """Named logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class Logger(abc.ABC):
    """Interface for the loggers components write to.

    Messages use printf-style placeholders filled from ``args``.
    """

    @abc.abstractmethod
    def debug(self, msg: str, *args: Any) -> None:
        """Log a debug message."""

    @abc.abstractmethod
    def info(self, msg: str, *args: Any) -> None:
        """Log an informational message."""

    @abc.abstractmethod
    def warn(self, msg: str, *args: Any) -> None:
        """Log a warning."""

    @abc.abstractmethod
    def error(self, msg: str, *args: Any) -> None:
        """Log an error."""

    @abc.abstractmethod
    def set_level(self, level: Union[LoggingLevel, str]) -> None:
        """Change the logging level."""


class DefaultLogger(Logger):
    """Writes timestamped, prefixed lines to a text stream.

    When no stream is given, lines go to whatever ``sys.stderr`` is at write time.
    Every message is written whatever the level; the level is only recorded.
    """

    def __init__(self, stream: Optional[TextIO] = None, prefix: str = "[DOSync] ") -> None:
        self.stream = stream
        self.prefix = prefix
        self.level: Optional[LoggingLevel] = None
        self._lock = threading.Lock()

    def _emit(self, text: str) -> None:
        stamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S")
        stream = self.stream if self.stream is not None else sys.stderr
        with self._lock:
            stream.write(f"{stamp} {self.prefix}{text}\n")
            stream.flush()

    def _log(self, label: str, msg: str, args: tuple) -> None:
        text = msg % args if args else msg
        self._emit(f"{label}: {text}")

    def debug(self, msg: str, *args: Any) -> None:
        self._log("DEBUG", msg, args)

    def info(self, msg: str, *args: Any) -> None:
        self._log("INFO", msg, args)

    def warn(self, msg: str, *args: Any) -> None:
        self._log("WARN", msg, args)

    def error(self, msg: str, *args: Any) -> None:
        self._log("ERROR", msg, args)

    def set_level(self, level: Union[LoggingLevel, str]) -> None:
        """Record the new level and log the change; raises ValueError if unknown."""
        new_level = LoggingLevel(level)
        with self._lock:
            self.level = new_level
        self._emit(f"[LogX] Log level set to: {new_level}")


def new_default_logger() -> DefaultLogger:
    """Return a logger writing to standard error with the ``[DOSync]`` prefix."""
    return DefaultLogger(None, "[DOSync] ")


def new_logger(log_type: str) -> Logger:
    """Return a logger for ``log_type``; output goes to standard output at info level."""
    logger = DefaultLogger(sys.stdout, "[Log] ")
    logger.level = LoggingLevel.INFO
    return logger