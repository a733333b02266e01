"""Main window: chart, channel toggles, export and status line."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional

from PySide6.QtCore import QObject, QTimer, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..config.app_config import AppConfig
from ..core.channels import DISPLAY_CHANNELS
from ..core.formatting import format_number
from ..core.polling import Fetcher, InfoPoller
from ..core.session import DashboardSession
from ..core.visibility import ChannelVisibility, VisibilityStore
from ..dataio.kv_store import KeyValueStore
from .chart_widget import TelemetryChartWidget
from .settings_store import QSettingsStore

DEFAULT_TITLE = "minerchart"


def qt_scheduler(parent: QObject) -> Callable[[int, Callable[[], None]], Callable[[], None]]:
    """Single-shot :class:`QTimer` scheduler for :class:`InfoPoller`."""

    def schedule(delay_ms: int, callback: Callable[[], None]) -> Callable[[], None]:
        timer = QTimer(parent)
        timer.setSingleShot(True)
        timer.timeout.connect(callback)
        timer.timeout.connect(timer.deleteLater)
        timer.start(int(delay_ms))

        def cancel() -> None:
            timer.stop()
            timer.deleteLater()

        return cancel

    return schedule


class MainWindow(QMainWindow):
    """Hosts the telemetry chart and drives polling for one session."""

    def __init__(
        self,
        fetch_info: Fetcher,
        *,
        app_config: AppConfig | None = None,
        session: DashboardSession | None = None,
        settings: KeyValueStore | None = None,
    ) -> None:
        super().__init__()
        self._app_config = app_config or AppConfig()
        self._logger = logging.getLogger(__name__)
        self.setWindowTitle(DEFAULT_TITLE)

        cfg = self._app_config.dashboard
        self.session = session or DashboardSession(cfg)
        store = VisibilityStore(
            settings if settings is not None else QSettingsStore(),
            len(DISPLAY_CHANNELS),
            key=cfg.visibility_key,
        )
        self.visibility = ChannelVisibility(store)

        self.chart = TelemetryChartWidget(self.session, show_labels=cfg.show_labels, parent=self)
        self._checkboxes: List[QCheckBox] = []
        self._status = QLabel(self)
        self._build_layout()

        self.poller = InfoPoller(
            fetch_info,
            qt_scheduler(self),
            self._on_info,
            interval_ms=cfg.poll_interval_ms,
            on_error=self._on_poll_error,
        )
        self.session.add_listener(self._refresh_status)
        self.visibility.restore_after_ready(self.chart.ready, self._apply_visibility)

    def _build_layout(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)

        toggles = QHBoxLayout()
        for idx, spec in enumerate(DISPLAY_CHANNELS):
            box = QCheckBox(spec.label, central)
            box.setChecked(True)
            box.clicked.connect(lambda _checked=False, i=idx: self._on_toggle(i))
            toggles.addWidget(box)
            self._checkboxes.append(box)
        toggles.addStretch(1)
        export_btn = QPushButton("Export JSON", central)
        export_btn.clicked.connect(self._on_export)
        toggles.addWidget(export_btn)

        layout.addLayout(toggles)
        layout.addWidget(self.chart, 1)
        layout.addWidget(self._status)
        self.setCentralWidget(central)

    # ------------------------------------------------------------- polling
    def start(self, statistics: Optional[Mapping[str, Any]] = None) -> None:
        """Seed history (if any) and start live polling."""
        if statistics:
            self.session.seed_from_statistics(statistics)
        self.poller.start()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.poller.stop()
        super().closeEvent(event)

    def _on_info(self, info: Mapping[str, Any]) -> None:
        self.session.ingest_info(info)
        self.setWindowTitle(self.session.window_title(DEFAULT_TITLE))

    def _on_poll_error(self, error: BaseException) -> None:
        self._logger.debug("Poll error shown in status line: %s", error)
        self._status.setText(f"Device unreachable: {error}")

    # ---------------------------------------------------------- visibility
    def _apply_visibility(self, flags: List[bool]) -> None:
        for box, visible in zip(self._checkboxes, flags):
            box.setChecked(visible)
        self.chart.apply_visibility(flags)

    def _on_toggle(self, index: int) -> None:
        self.visibility.toggle(index)
        self._apply_visibility(self.visibility.flags)

    # -------------------------------------------------------------- status
    @Slot()
    def _on_export(self) -> None:
        try:
            self._app_config.paths.ensure()
            path = self.session.write_export(self._app_config.paths.exports)
        except OSError as exc:
            self._logger.error("Export failed: %s", exc)
            self._status.setText(f"Export failed: {exc}")
            return
        self._status.setText(f"Exported to {path}")

    def _refresh_status(self) -> None:
        status = self.session.status
        pool = status.pool
        efficiency = self.session.efficiency()
        parts = [
            f"{len(self.session.buffer)} samples",
            f"efficiency {efficiency:.2f} J/TH",
            f"max power {format_number(round(status.max_power, 1))} W",
        ]
        if pool.url:
            parts.append(f"{pool.label} pool {pool.url}:{pool.port} ({pool.user})")
        self._status.setText(" | ".join(parts))
