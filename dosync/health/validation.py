"""Validation and defaulting of health check configurations."""

from __future__ import annotations

from dataclasses import replace

from .types import HealthCheckConfig, HealthCheckError, HealthCheckType

DEFAULT_TIMEOUT = 5.0
DEFAULT_RETRY_INTERVAL = 1.0
DEFAULT_SUCCESS_THRESHOLD = 1
DEFAULT_FAILURE_THRESHOLD = 3

MIN_TIMEOUT = 1.0
MIN_RETRY_INTERVAL = 0.1
MIN_SUCCESS_THRESHOLD = 1
MIN_FAILURE_THRESHOLD = 1

MAX_TIMEOUT = 300.0
MAX_SUCCESS_THRESHOLD = 10
MAX_FAILURE_THRESHOLD = 10

MAX_PORT = 65535


class ConfigValidationError(HealthCheckError, ValueError):
    """Raised when a health check configuration is invalid."""


def _format_seconds(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


def validate_config(config: HealthCheckConfig) -> HealthCheckConfig:
    """Return a validated copy of ``config`` with defaults applied.

    The given config is left untouched. Raises ConfigValidationError.
    """
    try:
        check_type = HealthCheckType(config.type)
    except ValueError:
        shown = "" if config.type is None else config.type
        raise ConfigValidationError(f"invalid health check type: {shown}") from None

    validated = replace(config, type=check_type)

    if validated.timeout <= 0:
        validated.timeout = DEFAULT_TIMEOUT
    elif validated.timeout < MIN_TIMEOUT:
        raise ConfigValidationError(
            f"timeout {_format_seconds(validated.timeout)} is less than minimum "
            f"{_format_seconds(MIN_TIMEOUT)}"
        )
    elif validated.timeout > MAX_TIMEOUT:
        raise ConfigValidationError(
            f"timeout {_format_seconds(validated.timeout)} exceeds maximum "
            f"{_format_seconds(MAX_TIMEOUT)}"
        )

    if validated.retry_interval <= 0:
        validated.retry_interval = DEFAULT_RETRY_INTERVAL
    elif validated.retry_interval < MIN_RETRY_INTERVAL:
        raise ConfigValidationError(
            f"retry interval {_format_seconds(validated.retry_interval)} is less than "
            f"minimum {_format_seconds(MIN_RETRY_INTERVAL)}"
        )

    if validated.success_threshold <= 0:
        validated.success_threshold = DEFAULT_SUCCESS_THRESHOLD
    elif validated.success_threshold < MIN_SUCCESS_THRESHOLD:
        raise ConfigValidationError(
            f"success threshold {validated.success_threshold} is less than minimum "
            f"{MIN_SUCCESS_THRESHOLD}"
        )
    elif validated.success_threshold > MAX_SUCCESS_THRESHOLD:
        raise ConfigValidationError(
            f"success threshold {validated.success_threshold} exceeds maximum "
            f"{MAX_SUCCESS_THRESHOLD}"
        )

    if validated.failure_threshold <= 0:
        validated.failure_threshold = DEFAULT_FAILURE_THRESHOLD
    elif validated.failure_threshold < MIN_FAILURE_THRESHOLD:
        raise ConfigValidationError(
            f"failure threshold {validated.failure_threshold} is less than minimum "
            f"{MIN_FAILURE_THRESHOLD}"
        )
    elif validated.failure_threshold > MAX_FAILURE_THRESHOLD:
        raise ConfigValidationError(
            f"failure threshold {validated.failure_threshold} exceeds maximum "
            f"{MAX_FAILURE_THRESHOLD}"
        )

    if check_type is HealthCheckType.HTTP:
        if not validated.endpoint:
            raise ConfigValidationError("HTTP health check requires an endpoint")
        if not validated.endpoint.startswith("/"):
            validated.endpoint = "/" + validated.endpoint
    elif check_type is HealthCheckType.TCP:
        _validate_tcp(validated)
    elif check_type is HealthCheckType.COMMAND:
        if not validated.command:
            raise ConfigValidationError("command health check requires a command")

    return validated


def _validate_tcp(config: HealthCheckConfig) -> None:
    if config.port <= 0:
        raise ConfigValidationError("TCP health check requires a valid port (> 0)")
    if config.port > MAX_PORT:
        raise ConfigValidationError(
            f"TCP health check port must be <= {MAX_PORT}, got {config.port}"
        )