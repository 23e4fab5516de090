import pytest

from dosync.health.types import HealthCheckConfig, HealthCheckError, HealthCheckType
from dosync.health.validation import ConfigValidationError, validate_config


@pytest.mark.parametrize(
    "config",
    [
        HealthCheckConfig(type=HealthCheckType.DOCKER),
        HealthCheckConfig(
            type=HealthCheckType.HTTP,
            endpoint="/health",
            timeout=10.0,
            retry_interval=2.0,
            success_threshold=2,
            failure_threshold=3,
        ),
        HealthCheckConfig(type=HealthCheckType.HTTP, endpoint="health"),
        HealthCheckConfig(type=HealthCheckType.TCP, port=8080),
        HealthCheckConfig(type=HealthCheckType.COMMAND, command="curl localhost:8080/health"),
    ],
    ids=["docker-minimal", "http-complete", "http-no-slash", "tcp", "command"],
)
def test_valid_configs(config):
    validated = validate_config(config)
    assert validated.timeout > 0
    assert validated.retry_interval > 0
    assert validated.success_threshold > 0
    assert validated.failure_threshold > 0
    if validated.type is HealthCheckType.HTTP:
        assert validated.endpoint.startswith("/")


@pytest.mark.parametrize(
    "config",
    [
        HealthCheckConfig(type="invalid"),
        HealthCheckConfig(type=HealthCheckType.HTTP),
        HealthCheckConfig(type=HealthCheckType.TCP, port=0),
        HealthCheckConfig(type=HealthCheckType.TCP, port=70000),
        HealthCheckConfig(type=HealthCheckType.COMMAND),
        HealthCheckConfig(type=HealthCheckType.DOCKER, timeout=0.01),
        HealthCheckConfig(type=HealthCheckType.DOCKER, timeout=600.0),
        HealthCheckConfig(type=HealthCheckType.DOCKER, retry_interval=0.01),
        HealthCheckConfig(type=HealthCheckType.DOCKER, success_threshold=20),
        HealthCheckConfig(type=HealthCheckType.DOCKER, failure_threshold=20),
    ],
    ids=[
        "invalid-type",
        "http-no-endpoint",
        "tcp-port-low",
        "tcp-port-high",
        "command-missing",
        "timeout-low",
        "timeout-high",
        "retry-low",
        "success-high",
        "failure-high",
    ],
)
def test_invalid_configs(config):
    with pytest.raises(ConfigValidationError):
        validate_config(config)


def test_default_values():
    validated = validate_config(HealthCheckConfig(type=HealthCheckType.DOCKER))
    assert validated.timeout == 5.0
    assert validated.retry_interval == 1.0
    assert validated.success_threshold == 1
    assert validated.failure_threshold == 3


def test_endpoint_normalised_without_mutating_input():
    original = HealthCheckConfig(type=HealthCheckType.HTTP, endpoint="health")
    validated = validate_config(original)
    assert validated.endpoint == "/health"
    assert original.endpoint == "health"
    assert original.timeout == 0.0


def test_string_type_is_converted():
    validated = validate_config(HealthCheckConfig(type="tcp", port=80))
    assert validated.type is HealthCheckType.TCP


def test_missing_type_message():
    with pytest.raises(ConfigValidationError, match="invalid health check type"):
        validate_config(HealthCheckConfig())


def test_error_messages():
    with pytest.raises(ConfigValidationError, match="HTTP health check requires an endpoint"):
        validate_config(HealthCheckConfig(type=HealthCheckType.HTTP))
    with pytest.raises(ConfigValidationError, match="TCP health check requires a valid port"):
        validate_config(HealthCheckConfig(type=HealthCheckType.TCP))
    with pytest.raises(ConfigValidationError, match="got 70000"):
        validate_config(HealthCheckConfig(type=HealthCheckType.TCP, port=70000))


def test_validation_error_is_health_check_error():
    with pytest.raises(HealthCheckError):
        validate_config(HealthCheckConfig(type=HealthCheckType.COMMAND))
    with pytest.raises(ValueError):
        validate_config(HealthCheckConfig(type=HealthCheckType.COMMAND))


def test_boundary_values_accepted():
    validated = validate_config(
        HealthCheckConfig(
            type=HealthCheckType.TCP,
            port=65535,
            timeout=300.0,
            retry_interval=0.1,
            success_threshold=10,
            failure_threshold=10,
        )
    )
    assert validated.port == 65535
    assert validated.timeout == 300.0
    assert validated.retry_interval == 0.1