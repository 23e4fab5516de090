"""Errors raised by the rolling update manager."""

from __future__ import annotations

from typing import Optional


class ManagerError(Exception):
    """Base class for rolling update manager errors."""

    default_message = "rolling update manager error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class MissingComposeFileError(ManagerError):
    default_message = "compose file path is required"


class InitFailedError(ManagerError):
    default_message = "failed to initialize rolling update manager"


class InvalidConfigError(ManagerError):
    default_message = "invalid rolling update configuration"


class ComponentInitFailedError(ManagerError):
    default_message = "failed to initialize component"


class ServiceNotFoundError(ManagerError):
    default_message = "service not found"


class UpdateFailedError(ManagerError):
    default_message = "update operation failed"


class RollbackFailedError(ManagerError):
    default_message = "rollback operation failed"


class HealthCheckFailedError(ManagerError):
    default_message = "health check failed"


class DependencyCheckFailedError(ManagerError):
    default_message = "dependency check failed"


class ReplicaDetectionFailedError(ManagerError):
    default_message = "replica detection failed"


class NotificationFailedError(ManagerError):
    default_message = "notification failed to send"


class MetricsRecordingFailedError(ManagerError):
    default_message = "metrics recording failed"


class CleanupFailedError(ManagerError):
    default_message = "cleanup after failure failed"


class StrategyExecutionFailedError(ManagerError):
    default_message = "update strategy execution failed"


class CircularDependencyError(ManagerError):
    default_message = "circular dependency detected"


class ErrorWithContext(ManagerError):
    """Wraps an error with the component, service and version it concerns."""

    def __init__(
        self,
        err: Optional[BaseException],
        context: str = "",
        component: str = "",
        service_name: str = "",
        version: str = "",
        critical: bool = False,
        recoverable: bool = False,
    ) -> None:
        self.err = err
        self.context = context
        self.component = component
        self.service_name = service_name
        self.version = version
        self.critical = critical
        self.recoverable = recoverable
        super().__init__(self._render())
        self.__cause__ = err

    def _render(self) -> str:
        msg = f"[{self.component}] {self.context}: {self.err}"
        if self.service_name:
            msg = f"{msg} (service: {self.service_name}"
            if self.version:
                msg = f"{msg}, version: {self.version})"
            else:
                msg = f"{msg})"
        return msg

    def __str__(self) -> str:
        return self._render()


def wrap_error(
    err: Optional[BaseException],
    component: str,
    context: str,
    service: str,
    version: str,
    critical: bool,
    recoverable: bool,
) -> ErrorWithContext:
    """Return ``err`` wrapped with context information."""
    return ErrorWithContext(
        err,
        context=context,
        component=component,
        service_name=service,
        version=version,
        critical=critical,
        recoverable=recoverable,
    )


def _find_context(err: Optional[BaseException]) -> Optional[ErrorWithContext]:
    seen = set()
    current = err
    while current is not None and id(current) not in seen:
        if isinstance(current, ErrorWithContext):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def is_recoverable(err: Optional[BaseException]) -> bool:
    """True when the nearest context in the chain marks the error recoverable."""
    found = _find_context(err)
    return found.recoverable if found is not None else False


def is_critical(err: Optional[BaseException]) -> bool:
    """True when marked critical; errors without context count as critical."""
    found = _find_context(err)
    return found.critical if found is not None else True


def get_error_component(err: Optional[BaseException]) -> str:
    """Return the component named by the error's context, or ``unknown``."""
    found = _find_context(err)
    return found.component if found is not None else "unknown"


def get_error_service(err: Optional[BaseException]) -> str:
    """Return the service named by the error's context, or an empty string."""
    found = _find_context(err)
    return found.service_name if found is not None else ""


def get_error_version(err: Optional[BaseException]) -> str:
    """Return the version named by the error's context, or an empty string."""
    found = _find_context(err)
    return found.version if found is not None else ""