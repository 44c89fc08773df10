"""Registration of named metrics with tags, reported on a fixed interval."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Mapping, Optional, Protocol

from .instruments import Counter, Gauge, GaugeFloat64, Registry, Timer
from .timer import format_duration

_LOG = logging.getLogger(__name__)


class MetricNameError(ValueError):
    """Raised for an empty or blank metric or tag name."""


def validate_metric_name(name: str, kind: str) -> None:
    """Raise MetricNameError if ``name`` is empty or blank."""
    if not name.strip():
        raise MetricNameError(f"{kind} name can not be empty or blank")


class _Reporter(Protocol):
    def report(self, registry: Registry, metric_tags: dict[str, dict[str, str]]) -> None: ...


class MetricsManager:
    """Holds registered metrics and their tags and reports them periodically."""

    def __init__(
        self,
        logger: Optional[logging.Logger],
        interval: float,
        reporter: Optional[_Reporter],
    ) -> None:
        self._logger = logger if logger is not None else _LOG
        self._interval = interval
        self._reporter = reporter
        self._registry = Registry()
        self._metric_tags: dict[str, dict[str, str]] = {}
        self._tags_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._signal = threading.Event()
        self._stopping = False
        self._thread: Optional[threading.Thread] = None

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def reporter(self) -> Optional[_Reporter]:
        return self._reporter

    @property
    def registry(self) -> Registry:
        return self._registry

    def reset_interval(self, interval: float) -> None:
        """Change the report interval; a running loop picks it up at once."""
        if self._thread is not None and interval <= 0:
            raise ValueError("report interval must be positive")
        self._interval = interval
        if self._thread is None:
            return
        self._signal.set()
        self._logger.info(
            "Metrics Manager report interval changed to %s", format_duration(interval)
        )

    def register(self, name: str, item: Any, tags: Optional[Mapping[str, str]] = None) -> None:
        """Register ``item`` under ``name`` with optional tags."""
        validate_metric_name(name, "metric")
        if tags:
            self._set_metric_tags(name, tags)
        self._registry.register(name, item)

    def _set_metric_tags(self, name: str, tags: Mapping[str, str]) -> None:
        for tag_name in tags:
            validate_metric_name(tag_name, "Tag")
        with self._tags_lock:
            self._metric_tags[name] = dict(tags)

    def is_registered(self, name: str) -> bool:
        return self._registry.get(name) is not None

    def unregister(self, name: str) -> None:
        with self._tags_lock:
            self._registry.unregister(name)
            self._metric_tags.pop(name, None)

    def tags(self) -> dict[str, dict[str, str]]:
        """Return a copy of the tags of every metric that has them."""
        with self._tags_lock:
            return {name: dict(tags) for name, tags in self._metric_tags.items()}

    def run(self) -> None:
        """Start reporting in a background thread every ``interval`` seconds."""
        if self._interval <= 0:
            raise ValueError("report interval must be positive")
        with self._state_lock:
            if self._thread is not None:
                raise RuntimeError("metrics manager is already running")
            self._stopping = False
            self._signal.clear()
            self._thread = threading.Thread(
                target=self._loop, name="metrics-manager", daemon=True
            )
            self._thread.start()
        self._logger.info(
            "Metrics Manager started with a report interval of %s",
            format_duration(self._interval),
        )

    def stop(self) -> None:
        """Stop the reporting thread and wait for it to exit."""
        with self._state_lock:
            thread = self._thread
            if thread is None:
                return
            self._stopping = True
            self._signal.set()
            self._thread = None
        thread.join()

    def __enter__(self) -> MetricsManager:
        self.run()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _loop(self) -> None:
        deadline = time.monotonic() + self._interval
        while True:
            remaining = deadline - time.monotonic()
            if remaining > 0 and self._signal.wait(remaining):
                self._signal.clear()
                if self._stopping:
                    break
                deadline = time.monotonic() + self._interval
                continue
            if self._stopping:
                break
            self._report()
            deadline = time.monotonic() + self._interval
        self._logger.info("Exited Metrics Manager Run...")

    def _report(self) -> None:
        if self._reporter is None:
            self._logger.error("no metrics reporter configured")
            return
        try:
            self._reporter.report(self._registry, self.tags())
        except Exception as err:  # a failed report must not end the loop
            self._logger.error("%s", err)
            return
        self._logger.debug("Reported metrics...")

    def _get_typed(self, name: str, kind: type, label: str) -> Any | None:
        metric = self._registry.get(name)
        if metric is None:
            return None
        if not isinstance(metric, kind):
            self._logger.warning(
                "Unable to get %s metric by name '%s': Registered metric by that name is not a %s",
                label,
                name,
                label,
            )
            return None
        return metric

    def get_counter(self, name: str) -> Optional[Counter]:
        return self._get_typed(name, Counter, "Counter")

    def get_gauge(self, name: str) -> Optional[Gauge]:
        return self._get_typed(name, Gauge, "Gauge")

    def get_gauge_float64(self, name: str) -> Optional[GaugeFloat64]:
        return self._get_typed(name, GaugeFloat64, "GaugeFloat64")

    def get_timer(self, name: str) -> Optional[Timer]:
        return self._get_typed(name, Timer, "Timer")