"""Interfaces for update strategies and notification providers."""

from __future__ import annotations

import abc
from typing import Any, Callable, Sequence


class UpdateStrategy(abc.ABC):
    """Carries out an update across the replicas of a service."""

    @abc.abstractmethod
    def execute(
        self,
        replicas: Sequence[Any],
        image_tag: str,
        health_check: Callable[[Any], bool],
    ) -> None:
        """Update the replicas to ``image_tag``; raise on failure."""


class Notifier(abc.ABC):
    """Sends notifications about deployment events. Durations are in seconds."""

    @abc.abstractmethod
    def should_notify_on_start(self) -> bool:
        """Whether to notify when a deployment starts."""

    @abc.abstractmethod
    def should_notify_on_success(self) -> bool:
        """Whether to notify when a deployment succeeds."""

    @abc.abstractmethod
    def should_notify_on_failure(self) -> bool:
        """Whether to notify when a deployment fails."""

    @abc.abstractmethod
    def should_notify_on_rollback(self) -> bool:
        """Whether to notify on rollbacks."""

    @abc.abstractmethod
    def send_deployment_start(self, service: str, version: str) -> None:
        """Notify that a deployment started."""

    @abc.abstractmethod
    def send_deployment_success(self, service: str, version: str, duration: float) -> None:
        """Notify that a deployment succeeded."""

    @abc.abstractmethod
    def send_deployment_failure(self, service: str, version: str, reason: str) -> None:
        """Notify that a deployment failed."""

    @abc.abstractmethod
    def send_rollback(self, service: str, from_version: str, to_version: str) -> None:
        """Notify that a service was rolled back."""