"""Core types shared by all health checkers."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union


class HealthCheckType(str, Enum):
    """The kind of health check to perform."""

    DOCKER = "docker"
    HTTP = "http"
    TCP = "tcp"
    COMMAND = "command"

    def __str__(self) -> str:
        return self.value


@dataclass
class HealthCheckResult:
    """The outcome of a single health check."""

    healthy: bool
    message: str = ""
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class HealthCheckConfig:
    """Configuration for a health checker.

    Durations are in seconds. Zero values are replaced by defaults on validation.
    """

    type: Optional[Union[HealthCheckType, str]] = None
    endpoint: str = ""
    port: int = 0
    command: str = ""
    timeout: float = 0.0
    retry_interval: float = 0.0
    success_threshold: int = 0
    failure_threshold: int = 0


class HealthCheckError(Exception):
    """Raised when a health check cannot be completed or reports a failure.

    ``result`` holds the result recorded for the failed check, when there is one.
    """

    def __init__(self, message: str, result: Optional[HealthCheckResult] = None) -> None:
        super().__init__(message)
        self.result = result


class HealthChecker(abc.ABC):
    """Interface implemented by every health checker.

    A replica is any object with a ``container_id`` attribute.
    """

    @abc.abstractmethod
    def check(self, replica: Any) -> bool:
        """Check the replica and return whether it is healthy."""

    @abc.abstractmethod
    def check_with_details(self, replica: Any) -> HealthCheckResult:
        """Check the replica and return the detailed result."""

    @abc.abstractmethod
    def configure(self, config: HealthCheckConfig) -> None:
        """Apply a new configuration."""

    @abc.abstractmethod
    def get_type(self) -> HealthCheckType:
        """Return the kind of this checker."""