"""Health checks based on the health status Docker reports for a container."""

from __future__ import annotations

import json
import subprocess
from dataclasses import replace
from typing import Any, Dict, NoReturn, Optional

from .base import BaseChecker
from .types import HealthCheckConfig, HealthCheckError, HealthCheckResult, HealthCheckType
from .validation import ConfigValidationError


class DockerCliClient:
    """Inspects containers through the ``docker`` command line tool."""

    _closed: bool = False

    def container_inspect(self, container_id: str, timeout: float) -> Dict[str, Any]:
        """Return the inspect document of a container; raises RuntimeError."""
        if self._closed:
            raise RuntimeError("docker client is closed")
        try:
            completed = subprocess.run(
                ["docker", "inspect", "--type", "container", container_id],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise RuntimeError(f"docker inspect timed out after {timeout:g}s") from exc
        except OSError as exc:
            raise RuntimeError(f"cannot run docker: {exc}") from exc

        if completed.returncode != 0:
            detail = completed.stderr.strip()
            raise RuntimeError(
                detail or f"docker inspect exited with code {completed.returncode}"
            )
        try:
            data = json.loads(completed.stdout)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"invalid docker inspect output: {exc}") from exc
        if isinstance(data, list):
            if not data:
                raise RuntimeError(f"no such container: {container_id}")
            data = data[0]
        if not isinstance(data, dict):
            raise RuntimeError("unexpected docker inspect output")
        return data

    def close(self) -> None:
        """Mark the client closed; later inspections raise RuntimeError."""
        self._closed = True


class DockerHealthChecker(BaseChecker):
    """Reports the health status of Docker's own container health check."""

    def __init__(self, config: HealthCheckConfig, client: Optional[Any] = None) -> None:
        if not config.type:
            config = replace(config, type=HealthCheckType.DOCKER)
        elif config.type != HealthCheckType.DOCKER:
            raise ConfigValidationError(
                f"invalid health check type for DockerHealthChecker: {config.type}"
            )
        super().__init__(HealthCheckType.DOCKER, config)
        self.client = client if client is not None else DockerCliClient()

    def _fail(self, message: str) -> NoReturn:
        self.update_status(False, message)
        raise HealthCheckError(message, HealthCheckResult(healthy=False, message=message))

    def check(self, replica: Any) -> bool:
        if not self.should_check():
            return self.get_status()[0]
        return self.check_with_details(replica).healthy

    def check_with_details(self, replica: Any) -> HealthCheckResult:
        """Inspect the container; raises HealthCheckError if its status is unavailable."""
        container_id = getattr(replica, "container_id", "")
        if not container_id:
            self._fail("Container ID is empty")

        try:
            info = self.client.container_inspect(container_id, self.config.timeout)
        except Exception as exc:
            self._fail(f"Failed to inspect container {container_id}: {exc}")

        state = info.get("State") if isinstance(info, dict) else None
        health = state.get("Health") if isinstance(state, dict) else None
        if not isinstance(health, dict):
            self._fail(f"Container {container_id} does not have a health check configured")

        status = health.get("Status", "")
        healthy = False
        if status == "healthy":
            healthy = True
            message = f"Container {container_id} is healthy"
        elif status == "unhealthy":
            message = f"Container {container_id} is unhealthy"
        elif status == "starting":
            message = f"Container {container_id} is starting"
        else:
            message = f"Container {container_id} has unknown health status: {status}"

        self.update_status(healthy, message)
        return HealthCheckResult(healthy=healthy, message=message)

    def close(self) -> None:
        """Close the client when it supports closing."""
        closer = getattr(self.client, "close", None)
        if callable(closer):
            closer()