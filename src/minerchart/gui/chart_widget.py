"""PyQtGraph chart that renders a :class:`DashboardSession`."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import QPointF
from PySide6.QtGui import QShowEvent
from PySide6.QtWidgets import QWidget

from ..core.channels import DISPLAY_CHANNELS, ChannelSpec
from ..core.labels import LabelPlacer
from ..core.session import DashboardSession
from ..core.viewport import AxisBounds
from ..tools.debug import time_block

logger = logging.getLogger(__name__)

# A redraw slower than this stalls wheel and drag handling noticeably.
SLOW_REDRAW_MS = 100.0

_PALETTE = (
    "#9e9e9e",
    "#e91e63",
    "#2e7d32",
    "#ef6c00",
    "#3949ab",
    "#f48fb1",
    "#e65100",
    "#00897b",
    "#ff9800",
    "#a259f7",
    "#3f51b5",
    "#36459a",
)


def _normalize(values: np.ndarray, lo: float, hi: float) -> np.ndarray:
    span = hi - lo
    if span <= 0:
        return np.full_like(values, 0.5)
    return (values - lo) / span


class TelemetryChartWidget(pg.PlotWidget):
    """
    One curve per displayable channel on a shared time axis.

    Channels are normalized to their own ranges so they fit one view. Wheel
    and drag input is forwarded to the session's viewport instead of
    pyqtgraph's own pan/zoom, and value labels are positioned by
    :class:`LabelPlacer` on every redraw.
    """

    def __init__(
        self,
        session: DashboardSession,
        *,
        placer: LabelPlacer | None = None,
        show_labels: bool = True,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent=parent, axisItems={"bottom": pg.DateAxisItem()})
        self._session = session
        self._placer = placer or LabelPlacer(
            max_attempts=session.config.label_max_attempts,
            margin=session.config.label_margin,
        )
        self._show_labels = show_labels
        self.ready: "Future[bool]" = Future()

        self.setMenuEnabled(False)
        self.hideButtons()
        self.setMouseEnabled(x=False, y=False)
        self.getPlotItem().hideAxis("left")
        self.showGrid(x=True, y=False, alpha=0.3)
        self.setYRange(-0.1, 1.1, padding=0.0)

        self._curves: Dict[str, pg.PlotDataItem] = {}
        self._visible: Dict[str, bool] = {}
        for idx, spec in enumerate(DISPLAY_CHANNELS):
            pen = pg.mkPen(_PALETTE[idx % len(_PALETTE)], width=1.0)
            self._curves[spec.name] = self.plot([], [], pen=pen, name=spec.label)
            self._visible[spec.name] = True
        self._label_items: List[pg.TextItem] = []

        session.add_listener(self.redraw)

    # ----------------------------------------------------------- visibility
    def apply_visibility(self, flags: Sequence[bool]) -> None:
        for spec, visible in zip(DISPLAY_CHANNELS, flags):
            self._visible[spec.name] = bool(visible)
            self._curves[spec.name].setVisible(bool(visible))
        self.redraw()

    # --------------------------------------------------------------- events
    def showEvent(self, event: QShowEvent) -> None:
        super().showEvent(event)
        if not self.ready.done():
            self.ready.set_result(True)
            self.redraw()

    def enterEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._session.set_hover(True)
        super().enterEvent(event)

    def leaveEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._session.set_hover(False)
        super().leaveEvent(event)

    def wheelEvent(self, event) -> None:  # noqa: N802 - Qt override
        # Qt reports "scroll up" as positive; the viewport treats positive as zoom out.
        self._session.zoom(-event.angleDelta().y())
        event.accept()

    def mousePressEvent(self, event) -> None:  # noqa: N802 - Qt override
        if self._session.press(event.position().x()):
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._session.move(event.position().x())
        event.accept()

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802 - Qt override
        self._session.release()
        event.accept()

    # ---------------------------------------------------------------- draw
    def redraw(self) -> None:
        with time_block("chart redraw", emitter=logger.debug, warn_above_ms=SLOW_REDRAW_MS):
            bounds = self._session.axis_bounds()
            if bounds.x_min is not None and bounds.x_max is not None and bounds.x_max > bounds.x_min:
                self.setXRange(bounds.x_min / 1000.0, bounds.x_max / 1000.0, padding=0.0)
            self._update_curves(bounds)
            self._update_labels(bounds)

    def _channel_range(self, spec: ChannelSpec, values: np.ndarray, bounds: AxisBounds) -> Tuple[float, float]:
        if spec.style == "hashrate" and bounds.hashrate_min is not None and bounds.hashrate_max is not None:
            return bounds.hashrate_min, bounds.hashrate_max
        finite = values[np.isfinite(values)]
        hi = float(finite.max()) if finite.size else 1.0
        if spec.suggested_max is not None:
            hi = max(hi, float(spec.suggested_max))
        return 0.0, hi

    def _update_curves(self, bounds: AxisBounds) -> None:
        buffer = self._session.buffer
        times = buffer.timestamps() / 1000.0
        for spec in DISPLAY_CHANNELS:
            curve = self._curves[spec.name]
            if not self._visible[spec.name] or len(buffer) == 0:
                curve.setData([], [])
                continue
            values = buffer.channel(spec.name)
            lo, hi = self._channel_range(spec, values, bounds)
            curve.setData(times, _normalize(values, lo, hi), connect="finite")

    def _update_labels(self, bounds: AxisBounds) -> None:
        for item in self._label_items:
            self.removeItem(item)
        self._label_items.clear()
        if not self._show_labels or not self.ready.done():
            return

        vb = self.getPlotItem().getViewBox()
        scene_rect = vb.sceneBoundingRect()
        x_extent = (scene_rect.left(), scene_rect.right())
        self._placer.begin_frame()
        for spec in DISPLAY_CHANNELS:
            if not self._visible[spec.name]:
                continue
            times, values = self._session.visible_slice(spec.name)
            if values.size == 0:
                continue
            lo, hi = self._channel_range(spec, self._session.buffer.channel(spec.name), bounds)
            ys = _normalize(np.nan_to_num(values, nan=lo), lo, hi)
            points = []
            for t, y in zip(times / 1000.0, ys):
                scene = vb.mapViewToScene(QPointF(float(t), float(y)))
                points.append((scene.x(), scene.y()))
            for label in self._placer.place(spec, values.tolist(), points, x_extent):
                cx, cy = label.rect.center
                view = vb.mapSceneToView(QPointF(cx, cy))
                item = pg.TextItem(label.text, anchor=(0.5, 0.5), fill=pg.mkBrush("#222c"))
                item.setPos(view)
                self.addItem(item)
                self._label_items.append(item)
