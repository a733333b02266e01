"""String key-value contract used for small pieces of persisted UI state."""

from __future__ import annotations

from typing import Dict, Optional, Protocol


class KeyValueStore(Protocol):
    """Minimal ``localStorage``-like contract: string keys to string values."""

    def get(self, key: str) -> Optional[str]:  # pragma: no cover - protocol
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - protocol
        ...


class MemoryStore:
    """Process-local store, handy for tests and headless runs."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)


__all__ = ["KeyValueStore", "MemoryStore"]
