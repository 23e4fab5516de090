"""Recovery from errors that occur during a rolling update."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from ..logx import Logger, new_default_logger
from .errors import (
    CircularDependencyError,
    HealthCheckFailedError,
    get_error_component,
    is_critical,
    is_recoverable,
    wrap_error,
)

DEFAULT_MAX_RETRIES = 3
_HEALTH_RETRY_STEP = 10.0


def _replica_name(replica: Any) -> str:
    return str(getattr(replica, "replica_id", replica))


class RecoveryHandler:
    """Decides how to recover from manager errors and reports failures.

    ``manager`` is the rolling update manager whose replica manager, health
    checker, dependency manager, metrics collector and notifiers are used.
    Methods return None when all is well and raise when recovery fails.
    """

    def __init__(
        self,
        manager: Any,
        logger: Optional[Logger] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.manager = manager
        self.logger = logger if logger is not None else new_default_logger()
        self.max_retries = max_retries
        self._sleep = sleep

    def handle_error(self, err: Optional[BaseException], service: str, version: str) -> None:
        """Try to recover from ``err``; raise an error when recovery is impossible."""
        if err is None:
            return

        self.logger.error("Error occurred: %s", err)
        component = get_error_component(err)
        self.logger.debug("Error component: %s", component)

        if not is_recoverable(err):
            self.logger.error("Non-recoverable error: %s", err)
            raise err

        handlers = {
            "strategy": self._handle_strategy_error,
            "health": self._handle_health_error,
            "replica": self._handle_replica_error,
            "dependency": self._handle_dependency_error,
        }
        handler = handlers.get(component)
        if handler is not None:
            handler(err, service, version)
            return

        if is_critical(err):
            self.logger.warn(
                "Critical error in unknown component: %s, attempting rollback", err
            )
            self._perform_rollback(service, "Error in unknown component")
            return
        raise err

    def _handle_strategy_error(self, err: BaseException, service: str, version: str) -> None:
        self.logger.warn("Strategy error: %s", err)
        self._perform_rollback(service, f"Strategy error: {err}")

    def _all_replicas_healthy(self, replicas: Any) -> bool:
        checker = self.manager.health_checker
        for replica in replicas:
            try:
                healthy = checker.check(replica)
            except Exception as exc:
                self.logger.warn("Replica %s still unhealthy: %s", _replica_name(replica), exc)
                return False
            if not healthy:
                self.logger.warn(
                    "Replica %s still unhealthy: %s", _replica_name(replica), "not healthy"
                )
                return False
        return True

    def _handle_health_error(self, err: BaseException, service: str, version: str) -> None:
        self.logger.warn("Health check error: %s", err)

        for attempt in range(1, self.max_retries + 1):
            self.logger.info(
                "Retrying health check for service %s (%d/%d)",
                service,
                attempt,
                self.max_retries,
            )
            self._sleep(_HEALTH_RETRY_STEP * attempt)

            try:
                replicas = self.manager.replica_manager.get_service_replicas(service)
            except Exception as exc:
                self.logger.error("Failed to get replicas for health retry: %s", exc)
                continue

            if self._all_replicas_healthy(replicas):
                self.logger.info("Health check now passing for service %s", service)
                return

        self.logger.error(
            "Health check persistently failing for service %s, rolling back", service
        )
        self._perform_rollback(service, "Persistent health check failures")

    def _handle_replica_error(self, err: BaseException, service: str, version: str) -> None:
        self.logger.warn("Replica error: %s", err)
        self.logger.info("Attempting to refresh replica information for %s", service)
        replica_manager = self.manager.replica_manager

        try:
            replica_manager.refresh_replicas()
        except Exception as exc:
            self.logger.error("Failed to refresh replicas: %s", exc)
            self._perform_rollback(service, "Failed to refresh replicas")
            return

        try:
            replicas = replica_manager.get_service_replicas(service)
        except Exception as exc:
            self.logger.error("Still unable to detect replicas for %s: %s", service, exc)
            self._perform_rollback(service, "Persistent replica detection failure")
            return
        if not replicas:
            self.logger.error("Still unable to detect replicas for %s: %s", service, "none found")
            self._perform_rollback(service, "Persistent replica detection failure")
            return

        self.logger.info("Successfully refreshed replica information for %s", service)

    def _handle_dependency_error(self, err: BaseException, service: str, version: str) -> None:
        self.logger.warn("Dependency error: %s", err)

        if isinstance(err, CircularDependencyError):
            self.logger.error(
                "Circular dependency detected: %s - requires manual intervention", err
            )
            raise err

        try:
            order = self.manager.dependency_manager.get_update_order([service])
        except Exception as exc:
            self.logger.error("Persistent dependency resolution error: %s", exc)
            raise

        self.logger.info("Successfully resolved dependencies for %s: %s", service, order)

    def _perform_rollback(self, service: str, reason: str) -> None:
        self.logger.info("Initiating rollback for service %s: %s", service, reason)
        try:
            self.manager.rollback(service)
        except Exception as exc:
            self.logger.error("Rollback failed for service %s: %s", service, exc)
            raise wrap_error(
                exc, "rollback", "automatic rollback failed", service, "", True, False
            ) from exc
        self.logger.info("Rollback successful for service %s", service)

    def cleanup_after_failure(self, service: str, version: str, err: BaseException) -> None:
        """Record the failure in metrics and notify; secondary errors are only logged."""
        self.logger.info("Performing cleanup after failure for service %s", service)
        reason = str(err)

        collector = getattr(self.manager, "metrics_collector", None)
        if collector is not None:
            try:
                collector.record_deployment_failure(service, version, reason)
            except Exception as exc:
                self.logger.error("Failed to record deployment failure in metrics: %s", exc)

        for notifier in getattr(self.manager, "notifiers", None) or ():
            if notifier.should_notify_on_failure():
                try:
                    notifier.send_deployment_failure(service, version, reason)
                except Exception as exc:
                    self.logger.error("Failed to send failure notification: %s", exc)

        self.logger.info("Cleanup completed for service %s", service)

    def ensure_completion(self, service: str, version: str, duration: float) -> None:
        """Verify every replica is healthy, then record and announce success.

        ``duration`` is in seconds. Raises when a replica is unhealthy.
        """
        self.logger.info("Verifying deployment completion for service %s", service)

        try:
            replicas = self.manager.replica_manager.get_service_replicas(service)
        except Exception as exc:
            self.logger.error("Failed to get replicas for completion verification: %s", exc)
            raise

        checker = self.manager.health_checker
        for replica in replicas:
            problem: Any = None
            try:
                healthy = checker.check(replica)
            except Exception as exc:
                healthy = False
                problem = exc
            if not healthy:
                self.logger.error(
                    "Replica %s is unhealthy after deployment: %s",
                    _replica_name(replica),
                    problem if problem is not None else "not healthy",
                )
                raise wrap_error(
                    HealthCheckFailedError(),
                    "completion",
                    "health check failed after deployment",
                    service,
                    version,
                    True,
                    True,
                )

        collector = getattr(self.manager, "metrics_collector", None)
        if collector is not None:
            try:
                collector.record_deployment_success(service, version, duration)
            except Exception as exc:
                self.logger.error("Failed to record deployment success in metrics: %s", exc)

        for notifier in getattr(self.manager, "notifiers", None) or ():
            if notifier.should_notify_on_success():
                try:
                    notifier.send_deployment_success(service, version, duration)
                except Exception as exc:
                    self.logger.error("Failed to send success notification: %s", exc)

        self.logger.info("Deployment successfully completed for service %s", service)