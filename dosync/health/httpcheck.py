"""Health checks that issue an HTTP GET and expect a 2xx status."""

from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from dataclasses import replace
from typing import Any, NoReturn

from .base import BaseChecker
from .types import HealthCheckConfig, HealthCheckError, HealthCheckType
from .types import HealthCheckResult
from .validation import ConfigValidationError

_HOST = "localhost"


class HTTPHealthChecker(BaseChecker):
    """Requests the configured endpoint on the configured port."""

    def __init__(self, config: HealthCheckConfig) -> None:
        if not config.type:
            config = replace(config, type=HealthCheckType.HTTP)
        elif config.type != HealthCheckType.HTTP:
            raise ConfigValidationError(
                f"invalid health check type for HTTPHealthChecker: {config.type}"
            )
        try:
            super().__init__(HealthCheckType.HTTP, config)
        except ConfigValidationError as exc:
            raise ConfigValidationError(f"invalid HTTP configuration: {exc}") from exc
        self._opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))

    def _fail(self, message: str) -> NoReturn:
        self.update_status(False, message)
        raise HealthCheckError(message, self.create_result())

    def _target_url(self) -> str:
        if self.config.port <= 0:
            return f"http://{_HOST}{self.config.endpoint}"
        return f"http://{_HOST}:{self.config.port}{self.config.endpoint}"

    def _describe(self, exc: BaseException) -> str:
        reason = getattr(exc, "reason", exc)
        if isinstance(reason, TimeoutError) or isinstance(exc, TimeoutError):
            return f"deadline exceeded after {self.config.timeout:g}s"
        return str(reason)

    def check(self, replica: Any) -> bool:
        if not self.should_check():
            return self.get_status()[0]
        return self.check_with_details(replica).healthy

    def check_with_details(self, replica: Any) -> HealthCheckResult:
        """Issue the request; raises HealthCheckError when no response arrives."""
        url = self._target_url()
        try:
            request = urllib.request.Request(url, method="GET")
        except ValueError as exc:
            self._fail(f"Failed to create HTTP request for {url}: {exc}")

        try:
            with self._opener.open(request, timeout=self.config.timeout) as response:
                status = response.status
        except urllib.error.HTTPError as exc:
            status = exc.code
            exc.close()
        except (OSError, http.client.HTTPException) as exc:
            self._fail(f"HTTP request failed for {url}: {self._describe(exc)}")

        if 200 <= status < 300:
            self.update_status(True, f"HTTP check successful for {url}: Status {status}")
        else:
            self.update_status(False, f"HTTP check failed for {url}: Status {status}")
        return self.create_result()