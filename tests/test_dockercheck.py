import os
import time
from types import SimpleNamespace

import pytest

from dosync.health.dockercheck import DockerCliClient, DockerHealthChecker
from dosync.health.types import HealthCheckConfig, HealthCheckError, HealthCheckType
from dosync.health.validation import ConfigValidationError


class FakeDockerClient:
    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {}
        self.error = error
        self.calls = []
        self.closed = False

    def container_inspect(self, container_id, timeout):
        self.calls.append((container_id, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def _health(status):
    return {"State": {"Health": {"Status": status}}}


def _install_fake_docker(directory, monkeypatch, body):
    script = directory / "docker"
    script.write_text("#!/bin/sh\n" + body + "\n")
    script.chmod(0o755)
    monkeypatch.setenv("PATH", f"{directory}{os.pathsep}{os.environ.get('PATH', '')}")


def test_new_docker_health_checker():
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER))
    assert checker.get_type() is HealthCheckType.DOCKER
    assert isinstance(checker.client, DockerCliClient)
    assert checker.config.timeout == 5.0


def test_new_docker_health_checker_wrong_type():
    with pytest.raises(ConfigValidationError, match="DockerHealthChecker"):
        DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.HTTP, endpoint="/x"))


@pytest.mark.parametrize(
    "response, expected_healthy, expected_message",
    [
        (_health("healthy"), True, "Container test-container is healthy"),
        (_health("unhealthy"), False, "Container test-container is unhealthy"),
        (_health("starting"), False, "Container test-container is starting"),
        (_health("odd"), False, "Container test-container has unknown health status: odd"),
    ],
)
def test_check_statuses(response, expected_healthy, expected_message):
    client = FakeDockerClient(response=response)
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER), client)
    result = checker.check_with_details(SimpleNamespace(container_id="test-container"))
    assert result.healthy is expected_healthy
    assert result.message == expected_message
    healthy, message, _ = checker.get_status()
    assert healthy is expected_healthy
    assert message == expected_message
    assert client.calls == [("test-container", 5.0)]


def test_container_without_health_check():
    client = FakeDockerClient(response={"State": {"Health": None}})
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER), client)
    with pytest.raises(HealthCheckError) as info:
        checker.check_with_details(SimpleNamespace(container_id="test-container"))
    expected = "Container test-container does not have a health check configured"
    assert info.value.result.message == expected
    assert info.value.result.healthy is False
    assert checker.get_status()[:2] == (False, expected)


def test_container_inspect_error():
    client = FakeDockerClient(error=RuntimeError("docker inspect error"))
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER), client)
    with pytest.raises(HealthCheckError) as info:
        checker.check_with_details(SimpleNamespace(container_id="test-container"))
    expected = "Failed to inspect container test-container: docker inspect error"
    assert str(info.value) == expected
    assert checker.get_status()[:2] == (False, expected)


def test_empty_container_id():
    client = FakeDockerClient(response=_health("healthy"))
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER), client)
    with pytest.raises(HealthCheckError, match="Container ID is empty"):
        checker.check_with_details(SimpleNamespace(container_id=""))
    assert client.calls == []
    assert checker.get_status()[:2] == (False, "Container ID is empty")


def test_should_check_rate_limiting():
    client = FakeDockerClient(response=_health("healthy"))
    config = HealthCheckConfig(type=HealthCheckType.DOCKER, retry_interval=0.1)
    checker = DockerHealthChecker(config, client)
    replica = SimpleNamespace(container_id="test-container")

    assert checker.should_check() is True
    assert checker.check(replica) is True
    assert checker.should_check() is False
    assert checker.check(replica) is True
    assert len(client.calls) == 1

    time.sleep(0.11)
    assert checker.should_check() is True
    assert checker.check(replica) is True
    assert len(client.calls) == 2


def test_close_closes_client():
    client = FakeDockerClient()
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER), client)
    checker.close()
    assert client.closed is True


def test_cli_client_parses_inspect_output(tmp_path, monkeypatch):
    body = "cat <<'EOF'\n" '[{"Id": "abc", "State": {"Health": {"Status": "healthy"}}}]\n' "EOF"
    _install_fake_docker(tmp_path, monkeypatch, body)
    info = DockerCliClient().container_inspect("abc", 5.0)
    assert info["Id"] == "abc"
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER))
    result = checker.check_with_details(SimpleNamespace(container_id="abc"))
    assert result.healthy is True
    assert result.message == "Container abc is healthy"


def test_cli_client_reports_failure(tmp_path, monkeypatch):
    _install_fake_docker(tmp_path, monkeypatch, 'echo "Error: No such object: x" >&2\nexit 1')
    with pytest.raises(RuntimeError, match="No such object: x"):
        DockerCliClient().container_inspect("x", 5.0)
    checker = DockerHealthChecker(HealthCheckConfig(type=HealthCheckType.DOCKER))
    with pytest.raises(HealthCheckError) as info:
        checker.check_with_details(SimpleNamespace(container_id="x"))
    assert str(info.value) == "Failed to inspect container x: Error: No such object: x"