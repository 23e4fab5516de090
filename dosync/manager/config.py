"""Configuration for rolling updates and the built-in strategy and notifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

from ..logx import Logger
from .errors import MissingComposeFileError
from .interfaces import Notifier, UpdateStrategy

DEFAULT_HEALTH_CHECK_TIMEOUT = 30.0
DEFAULT_HEALTH_CHECK_RETRIES = 3
DEFAULT_UPDATE_STRATEGY = "one-at-a-time"


def _format_seconds(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


@dataclass
class SlackConfig:
    """Settings for Slack notifications."""

    enabled: bool = False
    webhook_url: str = ""
    channel: str = ""
    username: str = ""
    icon_emoji: str = ""


@dataclass
class NotificationsConfig:
    """Settings for the notification providers."""

    slack_config: Optional[SlackConfig] = None


@dataclass
class NotificationConfigItem:
    """A single notification provider and its settings."""

    type: str = ""
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RollingUpdateConfig:
    """Settings for the rolling update manager. Durations are in seconds."""

    compose_file_path: str = ""
    health_check_timeout: float = 0.0
    health_check_retries: int = 0
    update_strategy: str = ""
    rollback_on_failure: bool = False
    rollback_config: Any = None
    notifications_config: Optional[NotificationsConfig] = None
    metrics_db: str = ""

    def validate(self) -> None:
        """Raise MissingComposeFileError when no compose file is set."""
        if not self.compose_file_path:
            raise MissingComposeFileError()

    def apply_defaults(self) -> None:
        """Fill in unset timeout, retries and strategy."""
        if self.health_check_timeout == 0:
            self.health_check_timeout = DEFAULT_HEALTH_CHECK_TIMEOUT
        if self.health_check_retries == 0:
            self.health_check_retries = DEFAULT_HEALTH_CHECK_RETRIES
        if not self.update_strategy:
            self.update_strategy = DEFAULT_UPDATE_STRATEGY


class StrategyAdapter(UpdateStrategy):
    """Strategy that leaves replica replacement to compose and records each request."""

    def __init__(self, strategy: str, logger: Logger) -> None:
        self.strategy = strategy
        self.logger = logger

    def execute(
        self,
        replicas: Sequence[Any],
        image_tag: str,
        health_check: Callable[[Any], bool],
    ) -> None:
        self.logger.info(
            "Executing strategy '%s' for %d replicas with imageTag '%s'",
            self.strategy,
            len(replicas),
            image_tag,
        )


class NotifierAdapter(Notifier):
    """Notifier that reports every deployment event to the log."""

    def __init__(self, config: Optional[SlackConfig], logger: Logger) -> None:
        self.config = config
        self.logger = logger

    def should_notify_on_start(self) -> bool:
        return True

    def should_notify_on_success(self) -> bool:
        return True

    def should_notify_on_failure(self) -> bool:
        return True

    def should_notify_on_rollback(self) -> bool:
        return True

    def send_deployment_start(self, service: str, version: str) -> None:
        self.logger.info("NotifierAdapter: Deployment start for %s:%s", service, version)

    def send_deployment_success(self, service: str, version: str, duration: float) -> None:
        self.logger.info(
            "NotifierAdapter: Deployment success for %s:%s in %s",
            service,
            version,
            _format_seconds(duration),
        )

    def send_deployment_failure(self, service: str, version: str, reason: str) -> None:
        self.logger.info(
            "NotifierAdapter: Deployment failure for %s:%s, reason: %s", service, version, reason
        )

    def send_rollback(self, service: str, from_version: str, to_version: str) -> None:
        self.logger.info(
            "NotifierAdapter: Rollback for %s from %s to %s", service, from_version, to_version
        )