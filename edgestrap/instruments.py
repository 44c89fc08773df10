"""Metric instruments (counters, gauges, histograms, timers, meters) and a registry."""

from __future__ import annotations

import math
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from time import perf_counter
from typing import Any, Iterator, Union

DEFAULT_RESERVOIR_SIZE = 1028

Number = Union[int, float]


class DuplicateMetricError(ValueError):
    """Raised when a metric name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"duplicate metric: {name}")
        self.name = name


def _to_nanoseconds(duration: timedelta | Number) -> int:
    if isinstance(duration, timedelta):
        whole_seconds = duration.days * 86_400 + duration.seconds
        return whole_seconds * 1_000_000_000 + duration.microseconds * 1_000
    return round(duration * 1_000_000_000)


class Counter:
    """A thread-safe integer counter."""

    def __init__(self, count: int = 0) -> None:
        self._count = count
        self._lock = threading.Lock()

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._count += amount

    def dec(self, amount: int = 1) -> None:
        with self._lock:
            self._count -= amount

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    def count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> Counter:
        """Return an independent copy holding the current count."""
        return Counter(self.count())

    def __repr__(self) -> str:
        return f"Counter(count={self.count()})"


class Gauge:
    """A thread-safe integer gauge."""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def update(self, value: int) -> None:
        with self._lock:
            self._value = value

    def value(self) -> int:
        with self._lock:
            return self._value

    def snapshot(self) -> Gauge:
        """Return an independent copy holding the current value."""
        return Gauge(self.value())

    def __repr__(self) -> str:
        return f"Gauge(value={self.value()})"


class GaugeFloat64:
    """A thread-safe floating-point gauge."""

    def __init__(self, value: float = 0.0) -> None:
        self._value = float(value)
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def value(self) -> float:
        with self._lock:
            return self._value

    def snapshot(self) -> GaugeFloat64:
        """Return an independent copy holding the current value."""
        return GaugeFloat64(self.value())

    def __repr__(self) -> str:
        return f"GaugeFloat64(value={self.value()})"


@dataclass(frozen=True)
class HistogramSnapshot:
    """Statistics over the values sampled by a histogram at one moment."""

    total: int
    values: tuple[Number, ...]

    def count(self) -> int:
        return self.total

    def min(self) -> Number:
        return min(self.values) if self.values else 0

    def max(self) -> Number:
        return max(self.values) if self.values else 0

    def mean(self) -> float:
        if not self.values:
            return 0.0
        return sum(self.values) / len(self.values)

    def variance(self) -> float:
        if not self.values:
            return 0.0
        mean = self.mean()
        return sum((value - mean) ** 2 for value in self.values) / len(self.values)

    def std_dev(self) -> float:
        return math.sqrt(self.variance())


class Histogram:
    """A histogram backed by a uniform reservoir sample."""

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE) -> None:
        if reservoir_size <= 0:
            raise ValueError("reservoir size must be positive")
        self._size = reservoir_size
        self._values: list[Number] = []
        self._total = 0
        self._random = random.Random()
        self._lock = threading.Lock()

    def update(self, value: Number) -> None:
        with self._lock:
            self._total += 1
            if len(self._values) < self._size:
                self._values.append(value)
                return
            slot = self._random.randrange(self._total)
            if slot < self._size:
                self._values[slot] = value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._total = 0

    def snapshot(self) -> HistogramSnapshot:
        with self._lock:
            return HistogramSnapshot(self._total, tuple(self._values))

    def __repr__(self) -> str:
        return f"Histogram(count={self.snapshot().count()})"


class Timer:
    """Records durations, kept in nanoseconds, in a histogram."""

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE) -> None:
        self._histogram = Histogram(reservoir_size)

    def update(self, duration: timedelta | Number) -> None:
        """Record a duration given as a timedelta or as seconds."""
        self._histogram.update(_to_nanoseconds(duration))

    def update_since(self, started: float) -> None:
        """Record the time elapsed since ``started``, a ``time.perf_counter()`` value."""
        self.update(perf_counter() - started)

    @contextmanager
    def time(self) -> Iterator[None]:
        """Record how long the ``with`` block takes."""
        started = perf_counter()
        try:
            yield
        finally:
            self.update_since(started)

    def snapshot(self) -> HistogramSnapshot:
        return self._histogram.snapshot()

    def __repr__(self) -> str:
        return f"Timer(count={self.snapshot().count()})"


class Meter:
    """Counts marked events."""

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    def mark(self, amount: int = 1) -> None:
        with self._lock:
            self._count += amount

    def count(self) -> int:
        with self._lock:
            return self._count


class Registry:
    """A thread-safe mapping of metric names to instruments."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, item: Any) -> None:
        with self._lock:
            if name in self._items:
                raise DuplicateMetricError(name)
            self._items[name] = item

    def get(self, name: str) -> Any | None:
        with self._lock:
            return self._items.get(name)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._items.pop(name, None)

    def items(self) -> list[tuple[str, Any]]:
        """Return the registered (name, item) pairs."""
        with self._lock:
            return list(self._items.items())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)