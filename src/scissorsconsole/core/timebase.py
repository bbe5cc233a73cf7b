"""Zero-origin display clock for device timestamps."""

from __future__ import annotations

from typing import Optional

NS_PER_SECOND = 1_000_000_000


def ns_to_seconds(timestamp_ns: int) -> float:
    """Convert a nanosecond device counter into floating-point seconds."""
    return timestamp_ns / float(NS_PER_SECOND)


class TimeBase:
    """
    Re-zero raw device timestamps at the first sample of each session.

    Device clocks count nanoseconds since boot, which is meaningless on a
    chart axis. The first timestamp seen after construction or :meth:`reset`
    becomes the origin and every later one is reported relative to it. Input
    order is not checked: an earlier timestamp simply maps to a smaller (even
    negative) display time.
    """

    __slots__ = ("_origin",)

    def __init__(self) -> None:
        self._origin: Optional[float] = None

    @property
    def origin(self) -> Optional[float]:
        return self._origin

    @property
    def is_set(self) -> bool:
        return self._origin is not None

    def normalize(self, raw_seconds: float) -> float:
        raw = float(raw_seconds)
        if self._origin is None:
            self._origin = raw
            return 0.0
        return raw - self._origin

    def normalize_ns(self, timestamp_ns: int) -> float:
        return self.normalize(ns_to_seconds(timestamp_ns))

    def reset(self) -> None:
        self._origin = None


__all__ = ["NS_PER_SECOND", "TimeBase", "ns_to_seconds"]
