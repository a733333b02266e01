"""Asynchronous HTTP fetches against the device API on the Qt event loop."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional

from PySide6.QtCore import QObject, QUrl
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

logger = logging.getLogger(__name__)

Done = Callable[[Optional[Mapping[str, Any]], Optional[BaseException]], None]

INFO_PATH = "/api/system/info"
STATISTICS_PATH = "/api/system/statistics"


class DeviceClient(QObject):
    """
    Issues GET requests through :class:`QNetworkAccessManager`.

    Replies are delivered on the GUI thread, each request reporting exactly
    one ``(payload, error)`` result; request timeouts are handled by Qt.
    """

    def __init__(self, base_url: str, *, timeout_ms: int = 4000, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._base_url = base_url.rstrip("/")
        self._timeout_ms = int(timeout_ms)
        self._manager = QNetworkAccessManager(self)

    def fetch_info(self, done: Done) -> None:
        self._get(INFO_PATH, done)

    def fetch_statistics(self, done: Done) -> None:
        self._get(STATISTICS_PATH, done)

    def _get(self, path: str, done: Done) -> None:
        request = QNetworkRequest(QUrl(f"{self._base_url}{path}"))
        request.setTransferTimeout(self._timeout_ms)
        reply = self._manager.get(request)

        def _finished() -> None:
            reply.deleteLater()
            if reply.error() != QNetworkReply.NetworkError.NoError:
                done(None, ConnectionError(f"{path}: {reply.errorString()}"))
                return
            try:
                payload = json.loads(reply.readAll().data().decode("utf-8"))
            except (UnicodeDecodeError, ValueError) as exc:
                done(None, exc)
                return
            if not isinstance(payload, dict):
                done(None, ValueError(f"{path}: expected a JSON object"))
                return
            done(payload, None)

        reply.finished.connect(_finished)
