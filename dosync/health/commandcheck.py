"""Health checks that run a command inside the container with ``docker exec``."""

from __future__ import annotations

import subprocess
from dataclasses import replace
from typing import Any, NoReturn, Optional, Union

from .base import BaseChecker
from .types import HealthCheckConfig, HealthCheckError, HealthCheckResult, HealthCheckType
from .validation import ConfigValidationError

_MAX_OUTPUT = 100


def _summarise(text: str) -> str:
    text = text.strip()
    if len(text) > _MAX_OUTPUT:
        text = text[:97] + "..."
    return text


def _as_text(data: Optional[Union[bytes, str]]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data


def _format_seconds(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


class CommandHealthChecker(BaseChecker):
    """Runs the configured command in the container; exit status 0 means healthy."""

    def __init__(self, config: HealthCheckConfig) -> None:
        if not config.type:
            config = replace(config, type=HealthCheckType.COMMAND)
        elif config.type != HealthCheckType.COMMAND:
            raise ConfigValidationError(
                f"invalid health check type for CommandHealthChecker: {config.type}"
            )
        try:
            super().__init__(HealthCheckType.COMMAND, config)
        except ConfigValidationError as exc:
            raise ConfigValidationError(f"invalid command configuration: {exc}") from exc

    def _fail(self, message: str) -> NoReturn:
        self.update_status(False, message)
        raise HealthCheckError(message, HealthCheckResult(healthy=False, message=message))

    def check(self, replica: Any) -> bool:
        if not self.should_check():
            return self.get_status()[0]
        return self.check_with_details(replica).healthy

    def check_with_details(self, replica: Any) -> HealthCheckResult:
        """Run the command; raises HealthCheckError when it fails."""
        container_id = getattr(replica, "container_id", "")
        if not container_id:
            self._fail("Container ID is empty")
        command = self.config.command
        if not command:
            self._fail("No command specified for command health check")

        timeout = self.config.timeout
        full_command = f"docker exec {container_id} /bin/sh -c '{command}'"
        stdout = ""
        stderr = ""
        try:
            completed = subprocess.run(
                ["sh", "-c", full_command],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            healthy = False
            stderr = _as_text(exc.stderr)
            fallback = f"timeout after {_format_seconds(timeout)}"
        except OSError as exc:
            healthy = False
            fallback = f"error: {exc}"
        else:
            stdout, stderr = completed.stdout, completed.stderr
            healthy = completed.returncode == 0
            fallback = f"exit code: {completed.returncode}"

        if healthy:
            message = f"Command '{command}' executed successfully in container {container_id}"
            if stdout:
                message += f" (output: {_summarise(stdout)})"
        else:
            message = f"Command '{command}' failed in container {container_id}"
            if stderr:
                message += f" (error: {_summarise(stderr)})"
            else:
                message += f" ({fallback})"

        self.update_status(healthy, message)
        result = HealthCheckResult(healthy=healthy, message=message)
        if not healthy:
            raise HealthCheckError(message, result)
        return result

    def close(self) -> None:
        """Nothing to release."""