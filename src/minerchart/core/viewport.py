"""Zoom/pan state machine mapping user gestures to a visible index window."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .channels import HASHRATE
from .sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)

MIN_VISIBLE = 5
ZOOM_DIVISOR = 40
PAN_HYSTERESIS = 3


@dataclass(frozen=True)
class ViewWindow:
    """
    Resolved visible range.

    ``min_index`` is inclusive. ``max_index`` may equal the buffer length,
    meaning the view runs up to the live edge; ``max_timestamp`` is then the
    newest timestamp.
    """

    min_index: int
    max_index: int
    min_timestamp: Optional[int] = None
    max_timestamp: Optional[int] = None

    @property
    def count(self) -> int:
        return self.max_index - self.min_index


@dataclass(frozen=True)
class AxisBounds:
    """Axis limits handed to the renderer for one redraw."""

    x_min: Optional[int] = None
    x_max: Optional[int] = None
    hashrate_min: Optional[float] = None
    hashrate_max: Optional[float] = None


class ViewportController:
    """
    Two integers, ``visible_count`` and ``position_offset``, driven by wheel,
    drag and append events.

    ``visible_count`` is how many of the newest samples are shown and
    ``position_offset`` (always ``<= 0``) how far the view is panned back from
    the live edge. Gestures are ignored unless the pointer hovers the chart.
    """

    def __init__(
        self,
        *,
        min_visible: int = MIN_VISIBLE,
        zoom_divisor: int = ZOOM_DIVISOR,
        pan_hysteresis: int = PAN_HYSTERESIS,
    ) -> None:
        if min_visible <= 0:
            raise ValueError("min_visible must be positive")
        if zoom_divisor <= 0:
            raise ValueError("zoom_divisor must be positive")
        if pan_hysteresis <= 0:
            raise ValueError("pan_hysteresis must be positive")
        self.min_visible = int(min_visible)
        self.zoom_divisor = int(zoom_divisor)
        self.pan_hysteresis = int(pan_hysteresis)

        self.visible_count = 0
        self.position_offset = 0
        self.last_window: Optional[ViewWindow] = None

        self._hovering = False
        self._dragging = False
        self._drag_x = 0.0
        self._step_count = 0

    # ----------------------------------------------------------------- state
    @property
    def factor(self) -> int:
        """Zoom/pan step size, growing with the number of visible samples."""
        return max(1, self.visible_count // self.zoom_divisor)

    @property
    def is_live(self) -> bool:
        return self.position_offset == 0

    @property
    def dragging(self) -> bool:
        return self._dragging

    def set_hover(self, hovering: bool) -> None:
        self._hovering = bool(hovering)
        if not self._hovering:
            self._dragging = False

    def reset_to(self, length: int, timestamps: Sequence[int] | None = None) -> Optional[ViewWindow]:
        """Show the whole buffer, tracking the live edge."""
        self.visible_count = int(length)
        self.position_offset = 0
        return self.resolve(length, timestamps)

    # -------------------------------------------------------------- gestures
    def zoom(self, delta_y: float, length: int, timestamps: Sequence[int] | None = None) -> Optional[ViewWindow]:
        """Wheel input: positive ``delta_y`` zooms out, negative zooms in."""
        if not self._hovering:
            return None
        step = self.factor
        if delta_y > 0:
            self.visible_count += step
        else:
            self.visible_count -= step
        self._clamp(length)
        return self.resolve(length, timestamps)

    def press(self, x: float) -> bool:
        """Begin a drag at pointer position ``x``; returns whether it was accepted."""
        if not self._hovering:
            return False
        self._dragging = True
        self._drag_x = float(x)
        self._step_count = 0
        return True

    def release(self) -> bool:
        if not self._hovering:
            return False
        self._dragging = False
        self._drag_x = 0.0
        self._step_count = 0
        return True

    def move(self, x: float, length: int, timestamps: Sequence[int] | None = None) -> Optional[ViewWindow]:
        """
        Pointer move. While dragging, every ``pan_hysteresis``-th event pans
        by ``factor`` samples: moving left looks toward the live edge, moving
        right looks further back.
        """
        if not self._hovering:
            return None
        if self._dragging:
            self._step_count += 1
            if self._step_count >= self.pan_hysteresis:
                step = self.factor
                if self._drag_x > x:
                    self.position_offset += step
                    self._drag_x = float(x)
                elif self._drag_x < x:
                    self.position_offset -= step
                    self._drag_x = float(x)
                self._step_count = 0
                if self.position_offset > 0:
                    self.position_offset = 0
        return self.resolve(length, timestamps)

    # ---------------------------------------------------------------- buffer
    def on_append(
        self,
        length: int,
        evicted: bool,
        timestamps: Sequence[int] | None = None,
    ) -> Optional[ViewWindow]:
        """
        Track a buffer append: a live view grows by one sample, a panned-back
        view shrinks by one, and an eviction removes one more.
        """
        if self.is_live:
            self.visible_count += 1
        else:
            self.visible_count -= 1
        if evicted:
            self.visible_count -= 1
        return self.resolve(length, timestamps)

    # ------------------------------------------------------------ resolution
    def window(self, length: int, timestamps: Sequence[int] | None = None) -> Optional[ViewWindow]:
        """Compute the visible window without touching controller state."""
        visible = max(self.min_visible, min(self.visible_count, length))
        offset = min(0, self.position_offset)
        min_index = length - visible + offset
        if min_index < 0:
            return None
        max_index = min(length + offset, length)
        if min_index >= length:
            min_index = max(0, length - self.min_visible)
        return _with_timestamps(min_index, max_index, timestamps)

    def resolve(self, length: int, timestamps: Sequence[int] | None = None) -> Optional[ViewWindow]:
        """
        Clamp state and compute the visible window for a buffer of ``length``.

        When the window would start before the buffer, the pan offset steps
        one sample back toward the live edge and ``None`` is returned; repeated
        calls converge on a valid window.
        """
        self._clamp(length)
        min_index = length - self.visible_count + self.position_offset
        if min_index < 0:
            self.position_offset = min(0, self.position_offset + 1)
            logger.debug(
                "Viewport start %d before buffer, offset now %d",
                min_index,
                self.position_offset,
            )
            return None
        self.last_window = self.window(length, timestamps)
        return self.last_window

    def _clamp(self, length: int) -> None:
        if self.visible_count > length:
            self.visible_count = length
        if self.visible_count < self.min_visible:
            self.visible_count = self.min_visible
        if self.position_offset > 0:
            self.position_offset = 0


def _with_timestamps(min_index: int, max_index: int, timestamps: Sequence[int] | None) -> ViewWindow:
    if timestamps is None or len(timestamps) == 0:
        return ViewWindow(min_index, max_index)
    last = len(timestamps) - 1
    return ViewWindow(
        min_index,
        max_index,
        min_timestamp=int(timestamps[min(min_index, last)]),
        max_timestamp=int(timestamps[min(max_index, last)]),
    )


def compute_axis_bounds(buffer: SampleBuffer, viewport: ViewportController) -> AxisBounds:
    """
    Axis limits for the current redraw.

    The x range comes from the viewport window in the timestamp domain; the
    hashrate range spans the whole buffer and is shared by the hashrate and
    average hashrate axes.
    """
    length = len(buffer)
    if length == 0:
        return AxisBounds()
    window = viewport.window(length, buffer.timestamps())
    hashrate = buffer.channel(HASHRATE)
    finite = hashrate[np.isfinite(hashrate)]
    hr_min = float(finite.min()) if finite.size else None
    hr_max = float(finite.max()) if finite.size else None
    if window is None:
        return AxisBounds(hashrate_min=hr_min, hashrate_max=hr_max)
    return AxisBounds(
        x_min=window.min_timestamp,
        x_max=window.max_timestamp,
        hashrate_min=hr_min,
        hashrate_max=hr_max,
    )


__all__ = [
    "MIN_VISIBLE",
    "ZOOM_DIVISOR",
    "PAN_HYSTERESIS",
    "ViewWindow",
    "AxisBounds",
    "ViewportController",
    "compute_axis_bounds",
]
