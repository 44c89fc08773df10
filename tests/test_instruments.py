import statistics
from datetime import timedelta
from time import perf_counter

import pytest

from edgestrap.instruments import (
    Counter,
    DuplicateMetricError,
    Gauge,
    GaugeFloat64,
    Histogram,
    HistogramSnapshot,
    Meter,
    Registry,
    Timer,
)


def test_counter_inc_and_dec():
    counter = Counter()
    counter.inc(50)
    assert counter.count() == 50
    counter.dec(50)
    assert counter.count() == Counter().count()


def test_counter_clear():
    counter = Counter()
    counter.inc(7)
    counter.clear()
    assert counter.count() == Counter().count()


def test_counter_snapshot_is_independent():
    counter = Counter()
    counter.inc(50)
    snap = counter.snapshot()
    counter.inc(9)
    assert snap.count() == 50
    assert counter.count() > snap.count()


def test_gauge_update_and_snapshot():
    gauge = Gauge()
    gauge.update(50)
    snap = gauge.snapshot()
    gauge.update(8)
    assert snap.value() == 50
    assert gauge.value() == 8


def test_gauge_float64_update():
    gauge = GaugeFloat64()
    gauge.update(50.55)
    assert gauge.snapshot().value() == 50.55


def test_empty_histogram_snapshot():
    snap = Histogram().snapshot()
    assert snap.count() == 0
    assert snap.min() == 0
    assert snap.max() == 0
    assert snap.mean() == 0.0
    assert snap.std_dev() == 0.0
    assert snap.variance() == 0.0


def test_histogram_statistics():
    values = [3, 1, 4, 1, 5, 9, 2, 6]
    histogram = Histogram()
    for value in values:
        histogram.update(value)
    snap = histogram.snapshot()
    assert snap.count() == len(values)
    assert snap.min() == min(values)
    assert snap.max() == max(values)
    assert snap.mean() == pytest.approx(statistics.mean(values))
    assert snap.variance() == pytest.approx(statistics.pvariance(values))
    assert snap.std_dev() == pytest.approx(statistics.pstdev(values))


def test_histogram_reservoir_is_bounded():
    histogram = Histogram(reservoir_size=100)
    for value in range(2000):
        histogram.update(value)
    snap = histogram.snapshot()
    assert snap.count() == 2000
    assert len(snap.values) == 100
    assert set(snap.values) <= set(range(2000))


def test_histogram_clear():
    histogram = Histogram()
    histogram.update(5)
    histogram.clear()
    assert histogram.snapshot() == Histogram().snapshot()


def test_histogram_rejects_bad_reservoir():
    with pytest.raises(ValueError):
        Histogram(reservoir_size=0)


def test_snapshot_values_are_frozen():
    snap = HistogramSnapshot(2, (1, 3))
    assert snap.mean() == pytest.approx(statistics.mean([1, 3]))
    with pytest.raises(AttributeError):
        snap.total = 5


def test_timer_update_in_nanoseconds():
    timer = Timer()
    timer.update(timedelta(seconds=1))
    timer.update(1)
    snap = timer.snapshot()
    assert snap.count() == 2
    assert snap.min() == snap.max() == 1_000_000_000


def test_timer_update_since_and_context():
    timer = Timer()
    timer.update_since(perf_counter())
    with timer.time():
        pass
    snap = timer.snapshot()
    assert snap.count() == 2
    assert snap.min() >= 0


def test_meter_mark():
    meter = Meter()
    meter.mark(5)
    assert meter.count() == 5


def test_registry_register_get_unregister():
    registry = Registry()
    counter = Counter()
    registry.register("my-counter", counter)
    assert registry.get("my-counter") is counter
    assert "my-counter" in registry
    assert registry.items() == [("my-counter", counter)]
    registry.unregister("my-counter")
    assert registry.get("my-counter") is None
    assert len(registry) == 0


def test_registry_duplicate():
    registry = Registry()
    registry.register("my-counter", Counter())
    with pytest.raises(DuplicateMetricError) as info:
        registry.register("my-counter", Counter())
    assert info.value.name == "my-counter"