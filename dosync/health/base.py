"""Shared state tracking for health checker implementations."""

from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, Optional, Tuple, Union

from .types import HealthChecker, HealthCheckConfig, HealthCheckError, HealthCheckResult, HealthCheckType
from .validation import validate_config


class BaseChecker(HealthChecker):
    """Tracks consecutive results against success and failure thresholds.

    Concrete checkers override ``check`` and usually ``check_with_details``.
    """

    def __init__(
        self,
        checker_type: Union[HealthCheckType, str],
        config: HealthCheckConfig,
    ) -> None:
        self.config = validate_config(config)
        self._type = HealthCheckType(checker_type)
        self._success_count = 0
        self._failure_count = 0
        self._healthy = False
        self._last_message = ""
        self._last_check_time: Optional[datetime] = None
        self._last_check_monotonic: Optional[float] = None
        self._lock = threading.Lock()

    def get_type(self) -> HealthCheckType:
        return self._type

    def configure(self, config: HealthCheckConfig) -> None:
        """Replace the configuration and reset the consecutive counters."""
        validated = validate_config(config)
        with self._lock:
            self.config = validated
            self._success_count = 0
            self._failure_count = 0

    def update_status(self, healthy: bool, message: str) -> None:
        """Record the outcome of a check and update the tracked health."""
        with self._lock:
            self._last_check_time = datetime.now()
            self._last_check_monotonic = time.monotonic()
            self._last_message = message
            if healthy:
                self._success_count += 1
                self._failure_count = 0
                if self._success_count >= self.config.success_threshold:
                    self._healthy = True
            else:
                self._failure_count += 1
                self._success_count = 0
                if self._failure_count >= self.config.failure_threshold:
                    self._healthy = False

    def get_status(self) -> Tuple[bool, str, Optional[datetime]]:
        """Return (healthy, last message, time of last check or None)."""
        with self._lock:
            return self._healthy, self._last_message, self._last_check_time

    def create_result(self) -> HealthCheckResult:
        """Build a result from the tracked status."""
        healthy, message, timestamp = self.get_status()
        return HealthCheckResult(
            healthy=healthy,
            message=message,
            timestamp=timestamp if timestamp is not None else datetime.now(),
        )

    def should_check(self) -> bool:
        """Return True when no check has run or the retry interval has elapsed."""
        with self._lock:
            if self._last_check_monotonic is None:
                return True
            elapsed = time.monotonic() - self._last_check_monotonic
            return elapsed >= self.config.retry_interval

    def check(self, replica: Any) -> bool:
        raise NotImplementedError(
            "BaseChecker.check must be overridden by a specific health checker implementation"
        )

    def check_with_details(self, replica: Any) -> HealthCheckResult:
        """Run ``check`` and return the tracked status as a result.

        Failures raise HealthCheckError carrying an unhealthy result.
        """
        try:
            self.check(replica)
        except NotImplementedError:
            raise
        except HealthCheckError as exc:
            if exc.result is None:
                exc.result = HealthCheckResult(healthy=False, message=str(exc))
            raise
        except Exception as exc:
            result = HealthCheckResult(healthy=False, message=str(exc))
            raise HealthCheckError(str(exc), result) from exc
        return self.create_result()