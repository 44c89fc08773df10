from datetime import timedelta

from edgestrap.timer import StartupTimer, format_duration


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_format_zero():
    assert format_duration(0) == "0s"


def test_format_milliseconds():
    assert format_duration(0.0015) == "1.5ms"


def test_format_timedelta_matches_seconds():
    assert format_duration(timedelta(seconds=90)) == format_duration(90)
    assert format_duration(timedelta(microseconds=2)) == format_duration(2e-6)


def test_since_as_string():
    clock = FakeClock()
    timer = StartupTimer(120, 1, clock=clock)
    clock.now += 90
    assert timer.since_as_string() == "1m30s"


def test_remaining_at_start_is_full_duration():
    clock = FakeClock()
    timer = StartupTimer(60, 1, clock=clock)
    assert timer.remaining_as_string() == format_duration(60)


def test_remaining_counts_down():
    clock = FakeClock()
    timer = StartupTimer(100, 1, clock=clock)
    clock.now += 40
    assert timer.remaining_as_string() == format_duration(60)


def test_remaining_never_negative():
    clock = FakeClock()
    timer = StartupTimer(10, 1, clock=clock)
    clock.now += 50
    assert timer.remaining_as_string() == format_duration(0)


def test_has_not_elapsed():
    clock = FakeClock()
    timer = StartupTimer(10, 1, clock=clock)
    assert timer.has_not_elapsed() is True
    clock.now += 9
    assert timer.has_not_elapsed() is True
    clock.now += 1
    assert timer.has_not_elapsed() is False


def test_zero_duration_has_elapsed():
    timer = StartupTimer(0, 1)
    assert timer.has_not_elapsed() is False


def test_sleep_for_interval_uses_interval():
    pauses = []
    timer = StartupTimer(30, 5, sleep=pauses.append)
    timer.sleep_for_interval()
    timer.sleep_for_interval()
    assert pauses == [5, 5]