"""Fixed-capacity multi-channel sample history."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Dict, List, Tuple

import numpy as np

from .channels import CHANNEL_NAMES
from .models import Sample

logger = logging.getLogger(__name__)

CAPACITY = 720


class SampleBuffer:
    """
    Ring buffer exposed as parallel, index-aligned channels.

    All channels share one ``(capacity, n_channels)`` array plus a timestamp
    column, so an append or eviction always touches every channel at once and
    index ``i`` refers to the same sample in each of them. Indices are
    logical: ``0`` is the oldest retained sample, ``len(buf) - 1`` the newest.
    """

    def __init__(self, capacity: int = CAPACITY, channels: Iterable[str] = CHANNEL_NAMES) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._names: Tuple[str, ...] = tuple(channels)
        self._columns: Dict[str, int] = {name: idx for idx, name in enumerate(self._names)}
        self._values = np.zeros((self._capacity, len(self._names)), dtype=np.float64)
        self._timestamps = np.zeros(self._capacity, dtype=np.int64)
        self._start = 0
        self._size = 0

    # ------------------------------------------------------------------ ingest
    def append(self, sample: Sample) -> bool:
        """
        Push ``sample`` onto every channel.

        Channels without a matching :class:`Sample` attribute (derived
        channels) start at ``0``. Returns ``True`` when the oldest sample was
        evicted to make room.
        """
        row = np.array(
            [float(getattr(sample, name, 0.0) or 0.0) for name in self._names],
            dtype=np.float64,
        )
        timestamp = int(sample.timestamp_ms)
        latest = self.latest_timestamp()
        if latest is not None and timestamp < latest:
            logger.debug("Clamping out-of-order timestamp %d to %d", timestamp, latest)
            timestamp = latest

        idx = (self._start + self._size) % self._capacity
        self._values[idx] = row
        self._timestamps[idx] = timestamp
        if self._size < self._capacity:
            self._size += 1
            return False
        self._start = (self._start + 1) % self._capacity
        return True

    def set_value(self, index: int, name: str, value: float) -> None:
        """Overwrite one channel value in place (used for derived channels)."""
        self._values[self._physical(index), self._column(name)] = float(value)

    def clear(self) -> None:
        self._values[:] = 0.0
        self._timestamps[:] = 0
        self._start = 0
        self._size = 0

    # ------------------------------------------------------------------- query
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def channel_names(self) -> Tuple[str, ...]:
        return self._names

    def __len__(self) -> int:
        return self._size

    def value(self, index: int, name: str) -> float:
        return float(self._values[self._physical(index), self._column(name)])

    def timestamp(self, index: int) -> int:
        return int(self._timestamps[self._physical(index)])

    def latest_timestamp(self) -> int | None:
        """Return the newest timestamp in milliseconds."""
        if self._size == 0:
            return None
        return self.timestamp(-1)

    def channel(self, name: str) -> np.ndarray:
        """Return a copy of channel ``name`` ordered oldest to newest."""
        return self._values[self._order(), self._column(name)]

    def timestamps(self) -> np.ndarray:
        return self._timestamps[self._order()]

    def window(self, name: str, start: int, stop: int) -> np.ndarray:
        """Return ``channel(name)[start:stop]`` without copying the whole channel."""
        start, stop, _ = slice(start, stop).indices(self._size)
        if stop <= start:
            return np.empty(0, dtype=np.float64)
        physical = (self._start + np.arange(start, stop)) % self._capacity
        return self._values[physical, self._column(name)]

    def as_dict(self) -> Dict[str, List[float]]:
        """Snapshot every channel as plain lists keyed by channel name."""
        order = self._order()
        return {name: self._values[order, col].tolist() for name, col in self._columns.items()}

    # ----------------------------------------------------------------- helpers
    def _order(self) -> np.ndarray:
        return (self._start + np.arange(self._size)) % self._capacity

    def _physical(self, index: int) -> int:
        size = self._size
        if size == 0:
            raise IndexError("SampleBuffer is empty")
        if index < 0:
            index += size
        if index < 0 or index >= size:
            raise IndexError("SampleBuffer index out of range")
        return (self._start + index) % self._capacity

    def _column(self, name: str) -> int:
        try:
            return self._columns[name]
        except KeyError:
            raise ValueError(f"Unknown channel {name!r}") from None


__all__ = ["CAPACITY", "SampleBuffer"]
