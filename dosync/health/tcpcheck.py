"""Health checks that open a TCP connection to the configured port."""

from __future__ import annotations

import socket
from dataclasses import replace
from typing import Any, NoReturn

from .base import BaseChecker
from .types import HealthCheckConfig, HealthCheckError, HealthCheckResult, HealthCheckType
from .validation import ConfigValidationError

_HOST = "localhost"


class TCPHealthChecker(BaseChecker):
    """Healthy when a TCP connection to the configured port can be opened."""

    def __init__(self, config: HealthCheckConfig) -> None:
        if not config.type:
            config = replace(config, type=HealthCheckType.TCP)
        elif config.type != HealthCheckType.TCP:
            raise ConfigValidationError(
                f"invalid health check type for TCPHealthChecker: {config.type}"
            )
        try:
            super().__init__(HealthCheckType.TCP, config)
        except ConfigValidationError as exc:
            raise ConfigValidationError(f"invalid TCP configuration: {exc}") from exc

    def _fail(self, message: str) -> NoReturn:
        self.update_status(False, message)
        raise HealthCheckError(message, self.create_result())

    def check(self, replica: Any) -> bool:
        if not self.should_check():
            return self.get_status()[0]
        return self.check_with_details(replica).healthy

    def check_with_details(self, replica: Any) -> HealthCheckResult:
        """Connect; raises HealthCheckError when the connection fails."""
        port = self.config.port
        if port <= 0:
            self._fail(f"Invalid port configured for TCP health check: {port}")

        address = f"{_HOST}:{port}"
        try:
            connection = socket.create_connection((_HOST, port), timeout=self.config.timeout)
        except OSError as exc:
            self._fail(f"TCP connection failed to {address}: {exc}")
        connection.close()

        self.update_status(True, f"TCP connection successful to {address}")
        return self.create_result()