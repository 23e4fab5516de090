"""Health checkers with preset answers, for use in tests and dry runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .types import HealthChecker, HealthCheckConfig, HealthCheckResult, HealthCheckType


@dataclass
class StubHealthChecker(HealthChecker):
    """A checker that always reports ``is_healthy`` or raises ``error_to_return``."""

    checker_type: Union[HealthCheckType, str]
    is_healthy: bool
    error_to_return: Optional[BaseException] = None
    config: HealthCheckConfig = field(default_factory=HealthCheckConfig)

    def __post_init__(self) -> None:
        self.checker_type = HealthCheckType(self.checker_type)
        if self.config.type is None:
            self.config.type = self.checker_type

    def check(self, replica: Any) -> bool:
        if self.error_to_return is not None:
            raise self.error_to_return
        return self.is_healthy

    def check_with_details(self, replica: Any) -> HealthCheckResult:
        if self.error_to_return is not None:
            raise self.error_to_return
        message = "Service is healthy" if self.is_healthy else "Service is unhealthy"
        return HealthCheckResult(healthy=self.is_healthy, message=message)

    def configure(self, config: HealthCheckConfig) -> None:
        self.config = config

    def get_type(self) -> HealthCheckType:
        return self.checker_type


def new_stub_health_checker(
    checker_type: Union[HealthCheckType, str], healthy: bool
) -> StubHealthChecker:
    """Create a stub checker with the standard default configuration."""
    check_type = HealthCheckType(checker_type)
    return StubHealthChecker(
        checker_type=check_type,
        is_healthy=healthy,
        config=HealthCheckConfig(
            type=check_type,
            timeout=5.0,
            retry_interval=1.0,
            success_threshold=2,
            failure_threshold=3,
        ),
    )


def new_stub_docker_health_checker(healthy: bool) -> StubHealthChecker:
    return new_stub_health_checker(HealthCheckType.DOCKER, healthy)


def new_stub_http_health_checker(healthy: bool) -> StubHealthChecker:
    return new_stub_health_checker(HealthCheckType.HTTP, healthy)


def new_stub_tcp_health_checker(healthy: bool) -> StubHealthChecker:
    return new_stub_health_checker(HealthCheckType.TCP, healthy)


def new_stub_command_health_checker(healthy: bool) -> StubHealthChecker:
    return new_stub_health_checker(HealthCheckType.COMMAND, healthy)