"""Construction of health checkers from a configuration."""

from __future__ import annotations

from .commandcheck import CommandHealthChecker
from .dockercheck import DockerHealthChecker
from .httpcheck import HTTPHealthChecker
from .tcpcheck import TCPHealthChecker
from .types import HealthChecker, HealthCheckConfig, HealthCheckType
from .validation import ConfigValidationError

_CHECKERS = {
    HealthCheckType.DOCKER: DockerHealthChecker,
    HealthCheckType.HTTP: HTTPHealthChecker,
    HealthCheckType.TCP: TCPHealthChecker,
    HealthCheckType.COMMAND: CommandHealthChecker,
}


def new_health_checker(config: HealthCheckConfig) -> HealthChecker:
    """Return the checker matching ``config.type``; raises ConfigValidationError."""
    if not config.type:
        raise ConfigValidationError("health check type must be specified")
    try:
        check_type = HealthCheckType(config.type)
    except ValueError:
        raise ConfigValidationError(f"unsupported health check type: {config.type}") from None
    return _CHECKERS[check_type](config)