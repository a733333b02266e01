"""One dashboard session: history, derived metrics, viewport and device status."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple

import numpy as np

from ..config.runtime import DashboardConfig
from ..dataio.export import build_export, write_export
from ..tools.debug import time_block
from .channels import HASHRATE, POWER
from .derived import DerivedMetricsComputer
from .formatting import format_hashrate, format_number
from .models import (
    DeviceInfo,
    HistoricalStatistics,
    PoolInfo,
    Sample,
    device_info_from_mapping,
    sample_from_statistics_row,
)
from .sample_buffer import SampleBuffer
from .viewport import AxisBounds, ViewportController, ViewWindow, compute_axis_bounds

logger = logging.getLogger(__name__)

MIN_MAX_TEMP = 75.0
MIN_MAX_FREQUENCY = 800.0


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class DeviceStatus:
    """Side-channel state updated on every poll, faulted or not."""

    max_power: float = 0.0
    nominal_voltage: float = 0.0
    max_temp: float = MIN_MAX_TEMP
    max_frequency: float = MIN_MAX_FREQUENCY
    pool: PoolInfo = field(default_factory=PoolInfo)
    last_info: Optional[DeviceInfo] = None


class DashboardSession:
    """
    Owns the :class:`SampleBuffer`, derived metrics and viewport for one
    dashboard lifetime.

    Every mutation (append, gesture) runs to completion before returning and
    then notifies listeners, so a renderer subscribed via
    :meth:`add_listener` always sees a consistent buffer and window.
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.config = (config or DashboardConfig()).sanitized()
        self.buffer = SampleBuffer(self.config.capacity)
        self.derived = DerivedMetricsComputer()
        self.viewport = ViewportController(
            min_visible=self.config.min_visible,
            zoom_divisor=self.config.zoom_divisor,
            pan_hysteresis=self.config.pan_hysteresis,
        )
        self.status = DeviceStatus()
        self._clock = clock or _now_ms
        self._listeners: List[Callable[[], None]] = []

    # -------------------------------------------------------------- listeners
    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("Session listener failed")

    # ----------------------------------------------------------------- ingest
    def append(self, sample: Sample, *, notify: bool = True) -> bool:
        """Append one sample, update derived channels and the viewport."""
        evicted = self.buffer.append(sample)
        self.derived.on_append(self.buffer)
        self.viewport.on_append(len(self.buffer), evicted, self.buffer.timestamps())
        if notify:
            self._notify()
        return evicted

    def seed_from_statistics(
        self,
        stats: HistoricalStatistics | Mapping[str, Any],
        now_ms: int | None = None,
    ) -> int:
        """
        Bulk-load recorded history before live polling starts.

        Offsets are converted to absolute timestamps once, here. The viewport
        then shows the whole buffer. Returns the number of samples replayed.
        """
        if not isinstance(stats, HistoricalStatistics):
            stats = HistoricalStatistics.from_mapping(stats)
        now = self._clock() if now_ms is None else int(now_ms)
        with time_block("seed history", emitter=logger.debug):
            for row in stats.rows:
                sample = sample_from_statistics_row(row, current_timestamp=stats.current_timestamp, now_ms=now)
                self.append(sample, notify=False)
        self.viewport.reset_to(len(self.buffer), self.buffer.timestamps())
        logger.info("Seeded %d historical samples", len(stats.rows))
        self._notify()
        return len(stats.rows)

    def ingest_info(self, info: Mapping[str, Any] | DeviceInfo, now_ms: int | None = None) -> DeviceInfo:
        """
        Apply one live poll result.

        Samples flagged with ``power_fault`` are kept out of the history but
        still update the device status.
        """
        if not isinstance(info, DeviceInfo):
            now = self._clock() if now_ms is None else int(now_ms)
            info = device_info_from_mapping(info, now_ms=now)

        sample = info.sample
        status = self.status
        status.max_power = max(info.max_power, sample.power)
        status.nominal_voltage = info.nominal_voltage
        status.max_temp = max(MIN_MAX_TEMP, sample.temperature)
        status.max_frequency = max(MIN_MAX_FREQUENCY, sample.frequency)
        status.pool = info.pool
        status.last_info = info

        if info.power_fault:
            logger.info("Power fault reported; sample not recorded")
            self._notify()
        else:
            self.append(sample)
        return info

    # --------------------------------------------------------------- gestures
    def set_hover(self, hovering: bool) -> None:
        self.viewport.set_hover(hovering)

    def zoom(self, delta_y: float) -> Optional[ViewWindow]:
        window = self.viewport.zoom(delta_y, len(self.buffer), self.buffer.timestamps())
        self._notify()
        return window

    def press(self, x: float) -> bool:
        return self.viewport.press(x)

    def move(self, x: float) -> Optional[ViewWindow]:
        window = self.viewport.move(x, len(self.buffer), self.buffer.timestamps())
        if self.viewport.dragging:
            self._notify()
        return window

    def release(self) -> bool:
        return self.viewport.release()

    # ------------------------------------------------------------------ query
    def axis_bounds(self) -> AxisBounds:
        return compute_axis_bounds(self.buffer, self.viewport)

    def visible_window(self) -> Optional[ViewWindow]:
        return self.viewport.window(len(self.buffer), self.buffer.timestamps())

    def visible_slice(self, name: str) -> Tuple[np.ndarray, np.ndarray]:
        """Timestamps and values of channel ``name`` inside the current window."""
        window = self.visible_window()
        if window is None:
            return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64)
        times = self.buffer.timestamps()[window.min_index : window.max_index]
        return times, self.buffer.window(name, window.min_index, window.max_index)

    def efficiency(self) -> float:
        """Average J/TH over the whole buffer."""
        return float(self.derived.efficiency(self.buffer.channel(HASHRATE), self.buffer.channel(POWER)))

    def export(self, moment: datetime | None = None) -> dict:
        return build_export(self.buffer, moment)

    def write_export(self, directory: str | Path, moment: datetime | None = None) -> Path:
        return write_export(self.buffer, directory, moment)

    def window_title(self, default_title: str) -> str:
        """``default • host • hashrate • temp °C • power W • best diff``."""
        info = self.status.last_info
        if info is None:
            return default_title
        sample = info.sample
        parts: List[str] = [default_title, info.hostname]
        if sample.hashrate:
            parts.append(format_hashrate(sample.hashrate))
        if sample.temperature:
            temp = format_number(round(sample.temperature, 1))
            vr = f"/{format_number(round(info.vr_temp, 1))}" if info.vr_temp else ""
            parts.append(f"{temp}{vr} °C")
        if not info.power_fault:
            parts.append(f"{format_number(round(sample.power, 1))} W")
        parts.append(info.best_diff)
        return " • ".join(part for part in parts if part)


__all__ = ["DashboardSession", "DeviceStatus", "MIN_MAX_TEMP", "MIN_MAX_FREQUENCY"]
