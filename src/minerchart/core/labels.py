"""Selection and collision-free placement of value labels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .channels import ChannelSpec
from .formatting import format_value
from .models import optional_float

Point = Tuple[float, float]

MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in screen coordinates (y grows downward)."""

    x: float
    y: float
    width: float
    height: float

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x < other.x + other.width
            and other.x < self.x + self.width
            and self.y < other.y + other.height
            and other.y < self.y + self.height
        )

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


@dataclass(frozen=True)
class Label:
    """One annotation: ``index`` is relative to the slice passed to the placer."""

    channel: str
    index: int
    value: float
    text: str
    rect: Rect


def select_indices(values: Sequence[Optional[float]]) -> List[int]:
    """
    Indices of the first, last, minimum and maximum valid value.

    ``None``/NaN entries are skipped. Duplicates are removed, keeping the
    order first, last, min, max.
    """
    first: Optional[int] = None
    last = min_idx = max_idx = 0
    min_val = max_val = 0.0
    for idx, raw in enumerate(values):
        value = optional_float(raw)
        if value is None:
            continue
        if first is None:
            first = min_idx = max_idx = idx
            min_val = max_val = value
        if value < min_val:
            min_val, min_idx = value, idx
        if value > max_val:
            max_val, max_idx = value, idx
        last = idx
    if first is None:
        return []
    return list(dict.fromkeys((first, last, min_idx, max_idx)))


class LabelPlacer:
    """
    Places labels for the visible slice of each channel.

    Call :meth:`begin_frame` once per redraw, then :meth:`place` for every
    visible channel; rectangles placed earlier in the frame are avoided by
    later labels.
    """

    def __init__(
        self,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        margin: float = 2.0,
        padding_x: float = 4.0,
        label_height: float = 14.0,
        y_offset: float = 15.0,
        char_width: float = 6.0,
        measure_text: Callable[[str], float] | None = None,
    ) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        self.max_attempts = int(max_attempts)
        self.margin = float(margin)
        self.padding_x = float(padding_x)
        self.label_height = float(label_height)
        self.y_offset = float(y_offset)
        self._measure = measure_text or (lambda text: len(text) * char_width)
        self._placed: List[Rect] = []

    @property
    def placed(self) -> List[Rect]:
        return list(self._placed)

    def begin_frame(self) -> None:
        self._placed.clear()

    def place(
        self,
        spec: ChannelSpec,
        values: Sequence[Optional[float]],
        points: Sequence[Point],
        x_extent: Tuple[float, float],
    ) -> List[Label]:
        """
        Label ``values`` whose screen positions are ``points``.

        ``x_extent`` is the ``(left, right)`` pixel range of the plot area;
        points in its left half get labels below them, the rest above.
        """
        if len(points) < len(values):
            raise ValueError("points must cover every value")
        indices = select_indices(values)
        if not indices:
            return []
        first, last = indices[0], indices[1] if len(indices) > 1 else indices[0]
        midpoint = (x_extent[0] + x_extent[1]) / 2.0

        labels: List[Label] = []
        for idx in indices:
            value = float(values[idx])  # type: ignore[arg-type]
            text = format_value(spec, value)
            rect, step = self._initial_rect(text, points[idx], midpoint, idx == first, idx == last)
            rect = self._avoid_collisions(rect, step)
            self._placed.append(rect)
            labels.append(Label(spec.name, idx, value, text, rect))
        return labels

    def _initial_rect(
        self,
        text: str,
        point: Point,
        midpoint: float,
        is_first: bool,
        is_last: bool,
    ) -> Tuple[Rect, float]:
        px, py = point
        width = self._measure(text) + self.padding_x * 2
        height = self.label_height
        x = px - width / 2.0
        if px < midpoint:
            y = py + self.y_offset - height / 2.0
            step = height + self.margin
        else:
            y = py - self.y_offset - height / 2.0
            step = -(height + self.margin)
        if is_first:
            x -= width / 2.0 + self.padding_x
        elif is_last:
            x += width / 2.0 + self.padding_x
        return Rect(x, y, width, height), step

    def _avoid_collisions(self, rect: Rect, step: float) -> Rect:
        attempts = 0
        while attempts < self.max_attempts and any(rect.intersects(other) for other in self._placed):
            rect = rect.shifted(dy=step)
            attempts += 1
        return rect


__all__ = ["Rect", "Label", "LabelPlacer", "select_indices", "MAX_ATTEMPTS"]
