# edgestrap

Building blocks for starting up a long-running service. It has these parts:

- a metrics registry that reports on an interval to a message bus
- a secret provider that reads secrets from configuration
- a startup retry timer
- a bridge from standard `logging` to a service logger
- a plain TCP listener

It has no dependencies outside the standard library.

## Install

```
pip install edgestrap
```

To run the tests:

```
pip install "edgestrap[test]"
pytest
```

## Metrics

`edgestrap.instruments` provides these instruments:

- `Counter`
- `Gauge`
- `GaugeFloat64`
- `Histogram`, a uniform reservoir of 1028 values by default, with a `HistogramSnapshot` for count, min, max, mean, standard deviation and variance
- `Timer`, which records durations in nanoseconds, either through `update`, `update_since` or the `time()` context manager
- `Meter`

The instruments are held in a `Registry`. Registering a name twice raises
`DuplicateMetricError`.

`edgestrap.manager.MetricsManager` registers named instruments with optional
tags:

- A blank metric or tag name raises `MetricNameError`.
- `get_counter`, `get_gauge`, `get_gauge_float64` and `get_timer` look up an
  instrument by kind. They return `None` if the name is missing or of another
  kind, and log a warning for the wrong kind.
- `run()` starts a background thread that calls the reporter every `interval`
  seconds. `stop()` ends it. The manager also works as a context manager.
- `reset_interval()` changes the interval. A running loop uses the new value
  at once.

```python
from edgestrap.instruments import Counter
from edgestrap.manager import MetricsManager

manager = MetricsManager(None, 5.0, reporter)
requests = Counter()
manager.register("RequestCount", requests, {"gateway": "my-gateway"})
requests.inc(1)
manager.get_counter("RequestCount").count()   # 1
```

`edgestrap.reporter.MessageBusReporter(logger, base_topic, service_name,
client_provider, config)` is a reporter. `client_provider` is a callable that
returns an object with `publish(envelope, topic)`. It may return `None` until
the client is ready.

`report(registry, metric_tags)` works as follows:

- It publishes every metric that `TelemetryInfo` enables. A configured name
  enables every metric whose name starts with it.
- Each metric becomes a `Metric` with fields such as `counter-count`,
  `gauge-value` or `timer-mean`. Its tags include `service`.
- The metric is wrapped in a `MessageEnvelope` and sent to
  `<base_topic>/telemetry/<service>/<metric>`.
- The payload is base64-encoded when `EDGEX_MSG_BASE64_PAYLOAD` is true.
- Unsupported instruments (such as `Meter`) and publish failures are collected
  into one `ReportError`.

## Secrets

- `edgestrap.secrets.is_security_enabled()` reads
  `EDGEX_SECURITY_SECRET_STORE`. Any value other than `false` means secure
  mode.
- `add_secret_name_prefix(name)` builds the store path `/v1/secret/edgex/<name>`.
- `edgestrap.insecure.InsecureProvider` serves secrets from a mapping of
  `InsecureSecretsInfo` entries, or from a callable that returns that mapping.
  - `get_secret` returns the named keys, or all keys if none are given.
  - `has_secret` and `list_secret_names` look up secrets.
  - `store_secret` writes through a configuration client's
    `put_configuration_value`, using the keys from `secret_name_path` and
    `secret_data_path`.
  - Callbacks can be registered per secret name, or with the `*` wildcard. A
    callback for the specific name takes precedence over the wildcard.
  - Failures raise `SecretError`.

  ```python
  from edgestrap.insecure import InsecureProvider, InsecureSecretsInfo

  password = "password"
  provider = InsecureProvider(
      {"DB": InsecureSecretsInfo("redisdb", {"username": "user", "password": password})}
  )
  provider.get_secret("redisdb", "username")   # {"username": "user"}
  ```

- `edgestrap.jwtauth.JWTSecretProvider.add_authentication_data(headers)` sets
  a `Bearer` authorization header when the provider returns a non-empty token.
  The insecure provider always returns an empty token.
- `edgestrap.secret_types.unmarshal_service_secrets_json` parses and validates
  a service's secrets file into `ServiceSecrets`. Failures raise
  `SecretsValidationError`. `ServiceSecrets.marshal_json()` writes the compact
  JSON form back.

## Startup

`edgestrap.timer.StartupTimer(duration, interval)` bounds retry loops. Both
values are in seconds. `format_duration` formats durations such as
`1m30s` or `1.5ms`.

```python
from edgestrap.timer import StartupTimer

timer = StartupTimer(duration=60, interval=1)
while timer.has_not_elapsed():
    if try_connect():
        break
    timer.sleep_for_interval()
```

## Logging and listening

- `edgestrap.logbridge.adapt_logging(client, logger_name="openziti")` attaches
  a `LoggingAdapter` to the named logger and stops the logger's propagation.
  Each record is passed to the client's `debug`, `info`, `warning` or `error`
  with the format `openziti: %s`.
- `edgestrap.listener.setup_web_listener(security_options, service_name, addr)`
  returns a listening TCP socket for `host:port`. If the options ask for zero
  trust mode (`is_zero_trust_mode`), it logs a warning and listens normally.

## What it does not do

- It has no client for a secure secret store. Only the configuration-backed
  provider is included.
- It does not register services with a service registry.
- It provides no zero trust overlay network.
- It has no configuration loading or settings-merging helpers.
- It has no command-line program and no HTTP server. The listener only opens
  the socket.