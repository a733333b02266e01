"""``QSettings``-backed key-value store for persisted UI state."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

ORGANIZATION = "minerchart"
APPLICATION = "dashboard"


class QSettingsStore:
    """
    String values under plain keys in a :class:`QSettings` instance.

    Defaults to the per-user native settings for ``minerchart/dashboard``;
    pass an explicit ``QSettings`` (e.g. an INI file) to store elsewhere.
    Every ``set`` is synced to the backend immediately.
    """

    def __init__(self, settings: QSettings | None = None) -> None:
        self._settings = settings if settings is not None else QSettings(ORGANIZATION, APPLICATION)

    def get(self, key: str) -> Optional[str]:
        if not self._settings.contains(key):
            return None
        raw = self._settings.value(key)
        if raw is None:
            return None
        if isinstance(raw, (list, tuple)):
            # QSettings can split comma-separated INI values into a string list.
            return ", ".join(str(part) for part in raw)
        return str(raw)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, str(value))
        self._settings.sync()
        if self._settings.status() != QSettings.Status.NoError:
            logger.warning("Could not persist %s to %s", key, self._settings.fileName())


__all__ = ["QSettingsStore", "ORGANIZATION", "APPLICATION"]
