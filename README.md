# dosync

Health checks for the replicas of Docker Compose services, and a rolling
update manager that uses them. The manager updates services in dependency
order, recovers from failures and rolls back.

## Installation

```
pip install dosync
```

Install the test extra to run the test suite:

```
pip install "dosync[test]"
```

## Health checks

There are four kinds of check, named by `HealthCheckType` in
`dosync.health.types`:

| Type | Checker | How it probes |
| --- | --- | --- |
| `docker` | `DockerHealthChecker` (`dosync.health.dockercheck`) | Runs `docker inspect` and reads the container's own health status. |
| `http` | `HTTPHealthChecker` (`dosync.health.httpcheck`) | Sends `GET http://localhost:<port><endpoint>`. Any 2xx status counts as healthy. |
| `tcp` | `TCPHealthChecker` (`dosync.health.tcpcheck`) | Opens a TCP connection to `localhost:<port>`. |
| `command` | `CommandHealthChecker` (`dosync.health.commandcheck`) | Runs `docker exec <container> /bin/sh -c '<command>'`. Exit status 0 counts as healthy. |

Build a `HealthCheckConfig` and pass it to `new_health_checker` in
`dosync.health.factory`. It returns the checker that matches `config.type`.
A replica is any object with a `container_id` attribute, and it may also have
a `replica_id`.

```python
from dataclasses import dataclass

from dosync.health.factory import new_health_checker
from dosync.health.types import HealthCheckConfig, HealthCheckError, HealthCheckType


@dataclass
class Replica:
    container_id: str
    replica_id: str = "1"


checker = new_health_checker(HealthCheckConfig(type=HealthCheckType.TCP, port=8080))
try:
    result = checker.check_with_details(Replica("web-1"))
    print(result.healthy, result.message)
except HealthCheckError as exc:
    print("check failed:", exc, exc.result)
```

Durations are given in seconds. `validate_config` in
`dosync.health.validation` returns a checked copy of the configuration with
defaults filled in:

- The timeout defaults to 5 s and must lie between 1 s and 300 s.
- The retry interval defaults to 1 s and must be at least 0.1 s.
- The success threshold defaults to 1 and may be at most 10.
- The failure threshold defaults to 3 and may be at most 10.
- An HTTP check needs an endpoint. A leading `/` is added if it is missing.
- A TCP check needs a port from 1 to 65535.
- A command check needs a command.

An invalid configuration raises `ConfigValidationError`, which is both a
`HealthCheckError` and a `ValueError`. `new_health_checker` raises the same
error when the type is missing or unknown.

### Status tracking

The checkers derive from `BaseChecker` (`dosync.health.base`), which keeps a
status that changes only after a run of equal results. The status becomes
healthy after `success_threshold` successes in a row and unhealthy after
`failure_threshold` failures in a row. It starts out unhealthy.

`get_status()` returns `(healthy, last_message, last_check_time)`.
`should_check()` reports whether `retry_interval` has passed since the last
probe. Within that interval, `check()` returns the stored status and does not
probe again. `configure()` validates and applies a new configuration and
resets the counters.

### Failures

When a probe cannot complete, `check_with_details()` records the failure and
raises `HealthCheckError`, whose `result` attribute holds the recorded result.
This happens for:

- an empty container ID
- a failed `docker inspect`
- a container that has no health check configured
- a refused or timed-out connection
- a command that exits with a non-zero status

Probes that do complete return a `HealthCheckResult` with `healthy`,
`message` and `timestamp`. This includes an HTTP response outside 2xx and a
Docker status of `unhealthy` or `starting`.

`DockerHealthChecker` takes an optional `client` argument. The client is any
object with `container_inspect(container_id, timeout)`, which returns the
inspect document as a dict. The default client is `DockerCliClient`.

### Stubs

`dosync.health.stubs` has `StubHealthChecker` and the helpers
`new_stub_health_checker`, `new_stub_docker_health_checker`,
`new_stub_http_health_checker`, `new_stub_tcp_health_checker` and
`new_stub_command_health_checker`. A stub always returns its preset
`is_healthy`, or raises `error_to_return` when that is set.

## Logging

`dosync.logx` provides the `Logger` interface and `DefaultLogger`, which
writes timestamped, prefixed lines with printf-style formatting.

- `new_default_logger()` writes to standard error with the prefix `[DOSync] `.
- `new_logger(log_type)` writes to standard output with the prefix `[Log] `.

Every message is written whatever the level. `set_level` only records the
level and logs the change.

## Rolling updates

`RollingUpdateManager` lives in `dosync.manager.rolling`. Some of its
components must be passed in, and any object with the right methods will do:

| Argument | Methods the manager calls |
| --- | --- |
| `replica_manager` | `get_all_replicas()`, returning a container of service names; `get_service_replicas(service)`; `refresh_replicas()` |
| `dependency_manager` | `get_update_order([service])`, returning the services to update in order |
| `rollback_controller` | `get_rollback_history(service)`, returning entries with `image_tag`, newest first; `rollback(service)`; `rollback_to_version(service, version)` |
| `metrics_collector` (optional) | `record_deployment_start`, `record_deployment_success`, `record_deployment_failure`, `record_rollback` |

The manager builds defaults for anything else that is not given:

- The health checker defaults to a Docker checker made by
  `create_health_check_config(config.health_check_timeout, config.health_check_retries)`.
- The strategy defaults to `StrategyAdapter`.
- The notifiers default to a `NotifierAdapter` when
  `config.notifications_config.slack_config.enabled` is set.

A missing required component raises `ErrorWithContext`.

`RollingUpdateConfig` (`dosync.manager.config`) holds the settings.
`apply_defaults()` fills in a 30 s health check timeout, 3 retries and the
`one-at-a-time` strategy. `validate()` raises `MissingComposeFileError` when
`compose_file_path` is empty.

### Updating a service

`update(service, tag)` does the following:

1. Checks that the service exists.
2. Notifies the start.
3. For each service in the dependency order, runs the strategy and then
   checks every replica. Only the requested service gets the new tag.
4. Finishes with `RecoveryHandler.ensure_completion`, which checks every
   replica again, records success and notifies.

When a step fails, the manager passes the error to `RecoveryHandler`
(`dosync.manager.recovery`):

- A strategy error leads to a rollback.
- A health error is retried up to `max_retries` times, sleeping 10 s, 20 s,
  30 s and so on. If it still fails, the service is rolled back.
- A replica error leads to a refresh of the replicas, with a rollback if the
  refresh fails or finds none.
- A dependency error leads to a fresh attempt at ordering.
  `CircularDependencyError` is raised again as it is.

When recovery fails, `cleanup_after_failure` records the failure and notifies
the notifiers, and then the error is raised.

### Rolling back

`rollback(service)` returns the service to the newest entry of its rollback
history. It raises `RollbackFailedError` when there is no history.
`rollback_to_version(service, version)` returns the service to the given
version. Both methods record the rollback, notify, and then check the health
of every replica.

### Errors

Failures are raised as `ErrorWithContext` (`dosync.manager.errors`). It wraps
the underlying error, often one of the `ManagerError` subclasses such as
`ServiceNotFoundError` or `HealthCheckFailedError`. It records the
`component`, `service_name`, `version`, `critical` and `recoverable`.

`wrap_error`, `is_recoverable`, `is_critical`, `get_error_component`,
`get_error_service` and `get_error_version` work on any error, following its
`__cause__` chain.

## What this package does not do

- There is no command-line tool.
- It does not detect replicas from a Compose file or resolve dependencies
  between services. You supply the replica manager and the dependency manager.
- It does not store rollback history or Compose file backups. You supply the
  rollback controller.
- It has no metrics store. The metrics collector is optional and supplied by
  you.
- `StrategyAdapter` does not replace containers. It only logs each request.
  To replace replicas, pass your own `UpdateStrategy`
  (`dosync.manager.interfaces`).
- `NotifierAdapter` does not post to Slack or anywhere else. It writes each
  event to the log. Implement `Notifier` to send real notifications.
- The HTTP and TCP checks always probe `localhost`, not a container's own
  address.