"""Qt application entry point for the minerchart dashboard.

Parses arguments, loads :class:`~minerchart.config.app_config.AppConfig`,
builds the :class:`~minerchart.gui.main_window.MainWindow` and runs the Qt
event loop. ``--demo`` swaps the device API for a synthetic miner.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Mapping, Optional, Tuple

from PySide6.QtCore import QLoggingCategory
from PySide6.QtWidgets import QApplication

from ..config.app_config import AppConfig
from ..tools.synthetic import SyntheticMiner
from .device_client import DeviceClient
from .main_window import MainWindow

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mining device telemetry dashboard")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file (default: ~/.minerchart/dashboard.yaml)",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Device base URL, overrides device_url from the config",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use a synthetic device instead of the HTTP API",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Polling interval in milliseconds (default: 5000)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: INFO)",
    )
    return parser


def _parse_cli_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def create_app(
    argv: list[str] | None = None,
    *,
    app_config: AppConfig | None = None,
) -> Tuple[QApplication, MainWindow]:
    """
    Create the QApplication and main window.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window, not yet started.
    """
    qt_args = argv if argv is not None else sys.argv
    app = QApplication.instance() or QApplication(qt_args)
    QLoggingCategory.setFilterRules("qt.core.qobject.connect=false")

    app_config = app_config or AppConfig.load()
    cfg = app_config.dashboard
    if app_config.demo:
        miner = SyntheticMiner(interval_ms=cfg.poll_interval_ms)
        window = MainWindow(miner.fetch, app_config=app_config)
        window.start(miner.statistics())
        return app, window

    client = DeviceClient(cfg.device_url, timeout_ms=cfg.request_timeout_ms)
    window = MainWindow(client.fetch_info, app_config=app_config)
    client.setParent(window)

    def _on_statistics(stats: Optional[Mapping[str, Any]], error: Optional[BaseException]) -> None:
        if error is not None:
            logger.warning("Could not load history, starting empty: %s", error)
        window.start(stats)

    client.fetch_statistics(_on_statistics)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    app_config = AppConfig.load(args.config, demo=bool(args.demo))
    if args.url:
        app_config.dashboard.device_url = args.url.rstrip("/")
    if args.interval_ms is not None:
        app_config.dashboard.poll_interval_ms = max(100, int(args.interval_ms))

    app, win = create_app(qt_argv, app_config=app_config)
    win.show()
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
