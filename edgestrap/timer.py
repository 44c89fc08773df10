"""A startup timer that bounds retries, and duration formatting."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Callable, Union

Seconds = Union[int, float]


def _to_nanoseconds(duration: timedelta | Seconds) -> int:
    if isinstance(duration, timedelta):
        whole_seconds = duration.days * 86_400 + duration.seconds
        return whole_seconds * 1_000_000_000 + duration.microseconds * 1_000
    if isinstance(duration, int):
        return duration * 1_000_000_000
    return round(duration * 1_000_000_000)


def _split_fraction(value: int, precision: int) -> tuple[int, str]:
    whole, fraction = divmod(value, 10**precision)
    digits = f"{fraction:0{precision}d}".rstrip("0")
    return whole, f".{digits}" if digits else ""


def format_duration(seconds: timedelta | Seconds) -> str:
    """Format a duration such as ``1h2m3.5s``, ``1.5ms`` or ``0s``."""
    nanoseconds = _to_nanoseconds(seconds)
    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)

    if magnitude == 0:
        return "0s"
    if magnitude < 1_000:
        return f"{sign}{magnitude}ns"
    if magnitude < 1_000_000:
        whole, fraction = _split_fraction(magnitude, 3)
        return f"{sign}{whole}{fraction}\u00b5s"
    if magnitude < 1_000_000_000:
        whole, fraction = _split_fraction(magnitude, 6)
        return f"{sign}{whole}{fraction}ms"

    whole_seconds, fraction = _split_fraction(magnitude, 9)
    hours, rest = divmod(whole_seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}{fraction}s"
    if minutes:
        return f"{sign}{minutes}m{secs}{fraction}s"
    return f"{sign}{secs}{fraction}s"


class StartupTimer:
    """Tracks a total startup duration and the pause between retries, in seconds."""

    def __init__(
        self,
        duration: Seconds,
        interval: Seconds,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.duration = duration
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._start = clock()

    def _elapsed(self) -> float:
        return self._clock() - self._start

    def since_as_string(self) -> str:
        """Time since the timer was created."""
        return format_duration(self._elapsed())

    def remaining_as_string(self) -> str:
        """Time left before the duration elapses, never below zero."""
        return format_duration(max(self.duration - self._elapsed(), 0))

    def has_not_elapsed(self) -> bool:
        return self._clock() < self._start + self.duration

    def sleep_for_interval(self) -> None:
        self._sleep(self.interval)