"""Publishing of registered metrics to a message bus."""

from __future__ import annotations

import base64
import json
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Union

from .instruments import Counter, Gauge, GaugeFloat64, Histogram, Timer
from .manager import validate_metric_name

_LOG = logging.getLogger(__name__)

API_VERSION = "v3"
DEFAULT_BASE_TOPIC = "edgex"
METRICS_PUBLISH_TOPIC = "telemetry"
CONTENT_TYPE_JSON = "application/json"
ENV_BASE64_PAYLOAD = "EDGEX_MSG_BASE64_PAYLOAD"

SERVICE_NAME_TAG_KEY = "service"
COUNTER_COUNT_NAME = "counter-count"
GAUGE_VALUE_NAME = "gauge-value"
GAUGE_FLOAT64_VALUE_NAME = "gaugeFloat64-value"
TIMER_COUNT_NAME = "timer-count"
TIMER_MEAN_NAME = "timer-mean"
TIMER_MIN_NAME = "timer-min"
TIMER_MAX_NAME = "timer-max"
TIMER_STDDEV_NAME = "timer-stddev"
TIMER_VARIANCE_NAME = "timer-variance"
HISTOGRAM_COUNT_NAME = "histogram-count"
HISTOGRAM_MEAN_NAME = "histogram-mean"
HISTOGRAM_MIN_NAME = "histogram-min"
HISTOGRAM_MAX_NAME = "histogram-max"
HISTOGRAM_STDDEV_NAME = "histogram-stddev"
HISTOGRAM_VARIANCE_NAME = "histogram-variance"

_TRUE_VALUES = {"1", "t", "true"}


def build_topic(*args: str) -> str:
    """Join topic levels with '/'."""
    return "/".join(args)


@dataclass(frozen=True)
class MetricTag:
    name: str
    value: str


@dataclass(frozen=True)
class MetricField:
    name: str
    value: Any


@dataclass
class Metric:
    """A named set of metric fields with tags, stamped in nanoseconds."""

    name: str
    fields: list[MetricField]
    tags: list[MetricTag] = field(default_factory=list)
    timestamp: int = field(default_factory=time.time_ns)
    api_version: str = API_VERSION

    def __post_init__(self) -> None:
        self.fields = list(self.fields)
        self.tags = list(self.tags)
        validate_metric_name(self.name, "metric")
        if not self.fields:
            raise ValueError("one or more metric fields are required")
        for metric_field in self.fields:
            validate_metric_name(metric_field.name, "field")
        for tag in self.tags:
            validate_metric_name(tag.name, "tag")

    def to_json(self) -> str:
        document: dict[str, Any] = {
            "apiVersion": self.api_version,
            "name": self.name,
            "fields": [{"name": f.name, "value": f.value} for f in self.fields],
        }
        if self.tags:
            document["tags"] = [{"name": t.name, "value": t.value} for t in self.tags]
        document["timestamp"] = self.timestamp
        return json.dumps(document)

    @classmethod
    def from_json(cls, data: Union[str, bytes, Mapping[str, Any]]) -> Metric:
        """Build a Metric from its JSON text or an already decoded object."""
        document = data if isinstance(data, Mapping) else json.loads(data)
        if not isinstance(document, Mapping):
            raise ValueError("metric JSON must be an object")
        return cls(
            name=document.get("name", ""),
            fields=[MetricField(f["name"], f.get("value")) for f in document.get("fields") or []],
            tags=[MetricTag(t["name"], t.get("value", "")) for t in document.get("tags") or []],
            timestamp=document.get("timestamp", 0),
            api_version=document.get("apiVersion", API_VERSION),
        )


@dataclass(frozen=True)
class MessageEnvelope:
    """A message bus payload with its correlation id and content type."""

    payload: bytes
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    content_type: str = CONTENT_TYPE_JSON
    api_version: str = API_VERSION
    base64_payload: bool = False

    def payload_json(self) -> Any:
        """Decode the payload as JSON, undoing base64 encoding if applied."""
        raw = base64.b64decode(self.payload) if self.base64_payload else self.payload
        return json.loads(raw)


@dataclass
class TelemetryInfo:
    """Telemetry settings: report interval, enabled metrics and service tags."""

    interval: str = ""
    metrics: dict[str, bool] = field(default_factory=dict)
    tags: Optional[dict[str, str]] = None

    def get_enabled_metric_name(self, metric_name: str) -> Optional[str]:
        """Return the configured name that prefixes ``metric_name`` if it is enabled."""
        for configured, enabled in self.metrics.items():
            if metric_name.startswith(configured):
                return configured if enabled else None
        return None


def _format_errors(errors: Sequence[str]) -> str:
    heading = "1 error occurred" if len(errors) == 1 else f"{len(errors)} errors occurred"
    points = "\n\t".join(f"* {error}" for error in errors)
    return f"{heading}:\n\t{points}\n\n"


class ReportError(Exception):
    """Raised when one or more metrics could not be reported."""

    def __init__(self, message: str, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors) or [message]

    @classmethod
    def _collect(cls, errors: Sequence[str]) -> ReportError:
        return cls(_format_errors(errors), errors)


class _MessageClient(Protocol):
    def publish(self, envelope: MessageEnvelope, topic: str) -> None: ...


def _build_tags(tags: Optional[Mapping[str, str]]) -> list[MetricTag]:
    return [MetricTag(name, value) for name, value in (tags or {}).items()]


def _base64_enabled() -> bool:
    return os.environ.get(ENV_BASE64_PAYLOAD, "").strip().lower() in _TRUE_VALUES


def _fields_for(item: Any) -> Optional[list[MetricField]]:
    if isinstance(item, Counter):
        return [MetricField(COUNTER_COUNT_NAME, item.snapshot().count())]
    if isinstance(item, Gauge):
        return [MetricField(GAUGE_VALUE_NAME, item.snapshot().value())]
    if isinstance(item, GaugeFloat64):
        return [MetricField(GAUGE_FLOAT64_VALUE_NAME, item.snapshot().value())]
    if isinstance(item, Timer):
        snap = item.snapshot()
        return [
            MetricField(TIMER_COUNT_NAME, snap.count()),
            MetricField(TIMER_MIN_NAME, snap.min()),
            MetricField(TIMER_MAX_NAME, snap.max()),
            MetricField(TIMER_MEAN_NAME, snap.mean()),
            MetricField(TIMER_STDDEV_NAME, snap.std_dev()),
            MetricField(TIMER_VARIANCE_NAME, snap.variance()),
        ]
    if isinstance(item, Histogram):
        snap = item.snapshot()
        return [
            MetricField(HISTOGRAM_COUNT_NAME, snap.count()),
            MetricField(HISTOGRAM_MIN_NAME, snap.min()),
            MetricField(HISTOGRAM_MAX_NAME, snap.max()),
            MetricField(HISTOGRAM_MEAN_NAME, snap.mean()),
            MetricField(HISTOGRAM_STDDEV_NAME, snap.std_dev()),
            MetricField(HISTOGRAM_VARIANCE_NAME, snap.variance()),
        ]
    return None


class MessageBusReporter:
    """Reports enabled metrics, one message per metric, to a message bus."""

    def __init__(
        self,
        logger: Optional[logging.Logger],
        base_topic: str,
        service_name: str,
        client_provider: Optional[Callable[[], Optional[_MessageClient]]],
        config: TelemetryInfo,
    ) -> None:
        self._logger = logger if logger is not None else _LOG
        self.service_name = service_name
        self.config = config
        self.base_metrics_topic = build_topic(base_topic, METRICS_PUBLISH_TOPIC, service_name)
        self._client_provider = client_provider
        self._client: Optional[_MessageClient] = None

    def _envelope(self, metric: Metric) -> MessageEnvelope:
        data = metric.to_json().encode()
        if _base64_enabled():
            return MessageEnvelope(payload=base64.b64encode(data), base64_payload=True)
        return MessageEnvelope(payload=data)

    def report(
        self,
        registry: Any,
        metric_tags: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> None:
        """Publish every enabled metric in ``registry``; raise ReportError on failures."""
        # The client may only become available once the service has finished starting.
        if self._client is None and self._client_provider is not None:
            self._client = self._client_provider()
        if self._client is None:
            raise ReportError("messaging client not available. Unable to report metrics")

        service_tags = _build_tags(self.config.tags)
        service_tags.append(MetricTag(SERVICE_NAME_TAG_KEY, self.service_name))
        tags_by_metric = metric_tags or {}

        errors: list[str] = []
        published = 0
        for item_name, item in registry.items():
            name = self.config.get_enabled_metric_name(item_name)
            if name is None:
                continue

            fields = _fields_for(item)
            if fields is None:
                errors.append(f"metric type {type(item).__name__} not supported")
                continue

            tags = service_tags + _build_tags(tags_by_metric.get(item_name))
            try:
                metric = Metric(name, fields, tags)
            except ValueError as err:
                errors.append(f"unable to create metric for '{name}': {err}")
                continue

            topic = build_topic(self.base_metrics_topic, name)
            try:
                self._client.publish(self._envelope(metric), topic)
            except Exception as err:
                errors.append(f"failed to publish metric '{name}' to topic '{topic}': {err}")
                continue
            published += 1

        self._logger.debug(
            "Publish %d metrics to the '%s' base topic", published, self.base_metrics_topic
        )
        if errors:
            raise ReportError._collect(errors)