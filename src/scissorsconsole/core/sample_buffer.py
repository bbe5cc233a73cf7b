from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from .models import Sample

MAX_PTS = 100


class ChannelCountMismatch(ValueError):
    """Raised when a sample does not carry the buffer's configured channel count."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"expected {expected} channel(s), got {actual}")
        self.expected = expected
        self.actual = actual


class SampleBuffer:
    """
    Sliding window of the most recent samples for live plotting.

    Storage is a fixed-size ring: once ``capacity`` samples are held, each
    append overwrites the oldest slot, so the logical contents are always the
    last ``capacity`` samples in append order.
    """

    __slots__ = ("_capacity", "_channel_count", "_slots", "_start", "_size", "_snapshot")

    def __init__(self, capacity: int = MAX_PTS, channel_count: int = 1) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if channel_count <= 0:
            raise ValueError("channel_count must be positive")
        self._capacity = int(capacity)
        self._channel_count = int(channel_count)
        self._slots: list[Sample | None] = [None] * self._capacity
        self._start = 0
        self._size = 0
        self._snapshot: tuple[Sample, ...] | None = ()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def channel_count(self) -> int:
        return self._channel_count

    def append(self, sample: Sample) -> None:
        """Append ``sample`` at the tail, evicting the oldest sample when full."""
        actual = len(sample.channels)
        if actual != self._channel_count:
            raise ChannelCountMismatch(self._channel_count, actual)

        idx = (self._start + self._size) % self._capacity
        self._slots[idx] = sample
        if self._size < self._capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self._capacity
        self._snapshot = None

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self._start = 0
        self._size = 0
        self._snapshot = ()

    def snapshot(self) -> tuple[Sample, ...]:
        """
        Return the window as an immutable tuple, oldest first.

        The tuple is cached until the next mutation, so polling the buffer
        from a render timer does not copy it repeatedly.
        """
        if self._snapshot is None:
            self._snapshot = tuple(self)
        return self._snapshot

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Return ``(times, values)`` for a full redraw.

        ``times`` has shape ``(n,)`` and ``values`` has shape
        ``(n, channel_count)``, both ``float64``.
        """
        samples = self.snapshot()
        count = len(samples)
        if count == 0:
            return (
                np.empty(0, dtype=np.float64),
                np.empty((0, self._channel_count), dtype=np.float64),
            )
        times = np.fromiter((s.timestamp for s in samples), dtype=np.float64, count=count)
        values = np.asarray([s.channels for s in samples], dtype=np.float64)
        return times, values

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index: int) -> Sample:
        size = self._size
        if index < 0:
            index += size
        if index < 0 or index >= size:
            raise IndexError("SampleBuffer index out of range")
        item = self._slots[(self._start + index) % self._capacity]
        assert item is not None
        return item

    def __iter__(self) -> Iterator[Sample]:
        for i in range(self._size):
            item = self._slots[(self._start + i) % self._capacity]
            if item is not None:
                yield item


__all__ = ["MAX_PTS", "ChannelCountMismatch", "SampleBuffer"]
