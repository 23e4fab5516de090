"""The rolling update manager: updates services replica by replica."""

from __future__ import annotations

import time
from typing import Any, Iterable, List, Optional, Sequence

from ..health.factory import new_health_checker
from ..health.types import HealthChecker, HealthCheckConfig, HealthCheckType
from ..logx import Logger, new_default_logger
from .config import NotifierAdapter, RollingUpdateConfig, StrategyAdapter
from .errors import (
    ComponentInitFailedError,
    ErrorWithContext,
    HealthCheckFailedError,
    InvalidConfigError,
    RollbackFailedError,
    ServiceNotFoundError,
    wrap_error,
)
from .interfaces import Notifier, UpdateStrategy
from .recovery import RecoveryHandler


def create_health_check_config(timeout: float, retries: int) -> HealthCheckConfig:
    """Return the Docker health check configuration used by the manager.

    Fields left at zero are defaulted when the configuration is validated.
    """
    return HealthCheckConfig(
        type=HealthCheckType.DOCKER,
        timeout=timeout,
        failure_threshold=retries,
    )


def _replica_name(replica: Any) -> str:
    return str(getattr(replica, "replica_id", replica))


class RollingUpdateManager:
    """Coordinates replicas, health checks, strategy, rollback and reporting.

    The replica manager, dependency manager and rollback controller must be
    supplied. A Docker health checker, the configured strategy and the
    configured notifiers are built when not given. The metrics collector is
    optional.
    """

    def __init__(
        self,
        config: Optional[RollingUpdateConfig],
        replica_manager: Any = None,
        health_checker: Optional[HealthChecker] = None,
        dependency_manager: Any = None,
        rollback_controller: Any = None,
        strategy: Optional[UpdateStrategy] = None,
        notifiers: Optional[Iterable[Notifier]] = None,
        metrics_collector: Any = None,
        logger: Optional[Logger] = None,
    ) -> None:
        if config is None:
            raise InvalidConfigError()

        self.config = config
        self.logger: Logger = logger if logger is not None else new_default_logger()
        self.recovery = RecoveryHandler(self, self.logger)

        try:
            self._init_components(
                replica_manager,
                health_checker,
                dependency_manager,
                rollback_controller,
                strategy,
                notifiers,
                metrics_collector,
            )
        except Exception as exc:
            raise wrap_error(
                exc,
                "initialization",
                "failed to initialize manager components",
                "",
                "",
                True,
                False,
            ) from exc

        self.logger.info("RollingUpdateManager successfully initialized")

    def _require(self, component: Any, name: str, label: str) -> Any:
        if component is None:
            raise wrap_error(
                ComponentInitFailedError(f"{label} is required"),
                name,
                f"failed to initialize {label}",
                "",
                "",
                True,
                False,
            )
        return component

    def _init_components(
        self,
        replica_manager: Any,
        health_checker: Optional[HealthChecker],
        dependency_manager: Any,
        rollback_controller: Any,
        strategy: Optional[UpdateStrategy],
        notifiers: Optional[Iterable[Notifier]],
        metrics_collector: Any,
    ) -> None:
        self.logger.info("Initializing ReplicaManager")
        self.replica_manager = self._require(replica_manager, "replica", "ReplicaManager")

        self.logger.info("Initializing HealthChecker")
        if health_checker is None:
            health_config = create_health_check_config(
                self.config.health_check_timeout, self.config.health_check_retries
            )
            try:
                health_checker = new_health_checker(health_config)
            except Exception as exc:
                raise wrap_error(
                    exc, "health", "failed to initialize HealthChecker", "", "", True, False
                ) from exc
        self.health_checker = health_checker

        self.logger.info("Initializing UpdateStrategy: %s", self.config.update_strategy)
        self.strategy = (
            strategy
            if strategy is not None
            else StrategyAdapter(self.config.update_strategy, self.logger)
        )

        self.logger.info("Initializing RollbackController")
        self.rollback_controller = self._require(
            rollback_controller, "rollback", "RollbackController"
        )

        self.logger.info("Initializing DependencyManager")
        self.dependency_manager = self._require(
            dependency_manager, "dependency", "DependencyManager"
        )

        self.logger.info("Initializing Notifiers")
        if notifiers is not None:
            self.notifiers: List[Notifier] = list(notifiers)
        else:
            self.notifiers = []
            notifications = self.config.notifications_config
            if notifications is not None:
                slack = notifications.slack_config
                if slack is not None and slack.enabled:
                    self.notifiers.append(NotifierAdapter(slack, self.logger))

        self.logger.info("Initializing MetricsCollector")
        self.metrics_collector = metrics_collector

    def _recover_or_fail(self, err: ErrorWithContext, service: str, version: str) -> None:
        try:
            self.recovery.handle_error(err, service, version)
        except Exception as recovery_err:
            self.logger.error("Failed to recover from error: %s", recovery_err)
            self.recovery.cleanup_after_failure(service, version, recovery_err)
            raise

    def _fail_update(
        self,
        err: Optional[BaseException],
        component: str,
        context: str,
        service: str,
        version: str,
    ) -> ErrorWithContext:
        wrapped = wrap_error(err, component, context, service, version, True, False)
        self.recovery.cleanup_after_failure(service, version, wrapped)
        return wrapped

    def _health_callback(self, replica: Any) -> bool:
        try:
            return bool(self.health_checker.check(replica))
        except Exception as exc:
            self.logger.error(
                "Health check error for replica %s: %s", _replica_name(replica), exc
            )
            return False

    def _service_replicas(
        self, svc: str, image_tag: str, context: str
    ) -> Sequence[Any]:
        try:
            return self.replica_manager.get_service_replicas(svc)
        except Exception as exc:
            wrapped = wrap_error(exc, "replica", context, svc, image_tag, True, True)
            self._recover_or_fail(wrapped, svc, image_tag)
            return []

    def update(self, service: str, new_image_tag: str) -> None:
        """Roll ``service`` and its dependants out to ``new_image_tag``.

        Raises ErrorWithContext (or the error recovery gave up on) on failure.
        """
        self.logger.info("Starting update for service %s to version %s", service, new_image_tag)
        start = time.monotonic()

        if self.metrics_collector is not None:
            try:
                self.metrics_collector.record_deployment_start(service, new_image_tag)
            except Exception as exc:
                self.logger.error("Error recording deployment start: %s", exc)

        try:
            services = self.replica_manager.get_all_replicas()
        except Exception as exc:
            raise self._fail_update(
                exc, "replica", "failed to get service replicas", service, new_image_tag
            ) from exc

        if service not in services:
            raise self._fail_update(
                ServiceNotFoundError(),
                "validation",
                "service not found in compose file",
                service,
                new_image_tag,
            )

        for notifier in self.notifiers:
            if notifier.should_notify_on_start():
                try:
                    notifier.send_deployment_start(service, new_image_tag)
                except Exception as exc:
                    self.logger.error("Error sending start notification: %s", exc)

        try:
            update_order = self.dependency_manager.get_update_order([service])
        except Exception as exc:
            raise self._fail_update(
                exc, "dependency", "failed to determine update order", service, new_image_tag
            ) from exc

        self.logger.info("Update order determined: %s", update_order)

        for svc in update_order:
            self.logger.info("Updating service %s according to dependency order", svc)
            image_tag = new_image_tag if svc == service else ""

            replicas = self._service_replicas(svc, image_tag, "failed to get service replicas")
            self.logger.info("Found %d replicas for service %s", len(replicas), svc)

            try:
                self.strategy.execute(replicas, image_tag, self._health_callback)
            except Exception as exc:
                wrapped = wrap_error(
                    exc, "strategy", "strategy execution failed", svc, image_tag, True, True
                )
                self._recover_or_fail(wrapped, svc, image_tag)

            updated = self._service_replicas(svc, image_tag, "failed to get updated replicas")
            for replica in updated:
                try:
                    healthy = self.health_checker.check(replica)
                except Exception:
                    healthy = False
                if not healthy:
                    wrapped = wrap_error(
                        HealthCheckFailedError(),
                        "health",
                        f"health check failed for replica {_replica_name(replica)}",
                        svc,
                        image_tag,
                        True,
                        True,
                    )
                    self._recover_or_fail(wrapped, svc, image_tag)

            self.logger.info("Successfully updated service %s", svc)

        duration = time.monotonic() - start
        self.recovery.ensure_completion(service, new_image_tag, duration)
        self.logger.info(
            "Rolling update completed successfully for service %s to version %s "
            "(duration: %.3fs)",
            service,
            new_image_tag,
            duration,
        )

    def _verify_service(self, service: str, version: str) -> None:
        try:
            services = self.replica_manager.get_all_replicas()
        except Exception as exc:
            raise wrap_error(
                exc, "replica", "failed to get service list", service, version, True, False
            ) from exc
        if service not in services:
            raise wrap_error(
                ServiceNotFoundError(), "validation", "service not found", service, version,
                True, False,
            )

    def _current_version(self, service: str) -> str:
        try:
            replicas = self.replica_manager.get_service_replicas(service)
        except Exception:
            return "unknown"
        return "current" if replicas else "unknown"

    def _announce_rollback(
        self, service: str, current: str, target: str, metrics_message: str
    ) -> None:
        if self.metrics_collector is not None:
            try:
                self.metrics_collector.record_rollback(service, current, target)
            except Exception as exc:
                self.logger.error(metrics_message, exc)

        for notifier in self.notifiers:
            if notifier.should_notify_on_rollback():
                try:
                    notifier.send_rollback(service, current, target)
                except Exception as exc:
                    self.logger.error("Failed to send rollback notification: %s", exc)

    def _verify_health_after(
        self, service: str, version: str, replicas_context: str, unhealthy_context: str
    ) -> None:
        try:
            replicas = self.replica_manager.get_service_replicas(service)
        except Exception as exc:
            raise wrap_error(
                exc, "replica", replicas_context, service, version, True, False
            ) from exc
        for replica in replicas:
            try:
                healthy = self.health_checker.check(replica)
            except Exception:
                healthy = False
            if not healthy:
                raise wrap_error(
                    HealthCheckFailedError(), "health", unhealthy_context, service, version,
                    True, False,
                )

    def rollback(self, service: str) -> None:
        """Roll ``service`` back to the most recent entry of its rollback history."""
        self.logger.info("Starting rollback for service %s", service)
        self._verify_service(service, "")

        try:
            entries = self.rollback_controller.get_rollback_history(service)
        except Exception as exc:
            raise wrap_error(
                exc, "rollback", "failed to get rollback history", service, "", True, False
            ) from exc

        if not entries:
            raise RollbackFailedError(f"no rollback history for service {service}")

        previous_version = entries[0].image_tag
        current_version = self._current_version(service)
        self._announce_rollback(
            service, current_version, previous_version,
            "Failed to record rollback in metrics: %s",
        )

        try:
            self.rollback_controller.rollback(service)
        except Exception as exc:
            raise wrap_error(
                exc, "rollback", "rollback execution failed", service, previous_version,
                True, False,
            ) from exc

        self._verify_health_after(
            service,
            previous_version,
            "failed to get replicas after rollback",
            "service unhealthy after rollback",
        )
        self.logger.info(
            "Successfully rolled back service %s to version %s", service, previous_version
        )

    def rollback_to_version(self, service: str, version: str) -> None:
        """Roll ``service`` back to the given ``version``."""
        self.logger.info(
            "Starting targeted rollback for service %s to version %s", service, version
        )
        self._verify_service(service, version)

        current_version = self._current_version(service)
        self._announce_rollback(
            service, current_version, version,
            "Failed to record targeted rollback in metrics: %s",
        )

        try:
            self.rollback_controller.rollback_to_version(service, version)
        except Exception as exc:
            raise wrap_error(
                exc, "rollback", "targeted rollback execution failed", service, version,
                True, False,
            ) from exc

        self._verify_health_after(
            service,
            version,
            "failed to get replicas after targeted rollback",
            "service unhealthy after targeted rollback",
        )
        self.logger.info("Successfully rolled back service %s to version %s", service, version)