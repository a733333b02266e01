"""Persisted per-channel show/hide flags."""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Sequence

from ..dataio.kv_store import KeyValueStore
from .channels import DISPLAY_CHANNELS

logger = logging.getLogger(__name__)

VISIBILITY_KEY = "datasetVisibility"


class VisibilityStore:
    """
    Reads and writes the visibility array under a fixed key.

    Anything that is not a JSON list of exactly ``channel_count`` booleans is
    treated as absent; stored data is never partially applied.
    """

    def __init__(
        self,
        store: KeyValueStore,
        channel_count: int = len(DISPLAY_CHANNELS),
        key: str = VISIBILITY_KEY,
    ) -> None:
        if channel_count <= 0:
            raise ValueError("channel_count must be positive")
        self._store = store
        self.channel_count = int(channel_count)
        self.key = key

    def save(self, flags: Sequence[bool]) -> None:
        if len(flags) != self.channel_count:
            raise ValueError(f"expected {self.channel_count} flags, got {len(flags)}")
        self._store.set(self.key, json.dumps([bool(flag) for flag in flags]))

    def load(self) -> Optional[List[bool]]:
        raw = self._store.get(self.key)
        if raw is None:
            return None
        try:
            data: Any = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("Discarding unparseable visibility state %r", raw)
            return None
        if not isinstance(data, list) or len(data) != self.channel_count:
            logger.debug("Discarding visibility state with wrong shape: %r", data)
            return None
        if not all(isinstance(item, bool) for item in data):
            logger.debug("Discarding visibility state with non-boolean entries: %r", data)
            return None
        return list(data)


class ChannelVisibility:
    """In-memory flags for each declared channel, re-persisted on every toggle."""

    def __init__(self, store: VisibilityStore) -> None:
        self._store = store
        self._flags: List[bool] = [True] * store.channel_count

    @classmethod
    def restore(cls, store: VisibilityStore) -> "ChannelVisibility":
        """Create from persisted state, defaulting to all-visible."""
        visibility = cls(store)
        visibility.reload()
        return visibility

    @property
    def flags(self) -> List[bool]:
        return list(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def is_visible(self, index: int) -> bool:
        return self._flags[index]

    def reload(self) -> List[bool]:
        loaded = self._store.load()
        self._flags = loaded if loaded is not None else [True] * self._store.channel_count
        return self.flags

    def toggle(self, index: int) -> bool:
        """Flip channel ``index``, persist immediately and return the new state."""
        if not 0 <= index < len(self._flags):
            raise IndexError(f"channel index {index} out of range")
        self._flags[index] = not self._flags[index]
        self._store.save(self._flags)
        return self._flags[index]

    def set_visible(self, index: int, visible: bool) -> None:
        if self._flags[index] != bool(visible):
            self.toggle(index)

    def restore_after_ready(self, ready: "Future[Any]", apply: Callable[[List[bool]], None]) -> None:
        """
        Load persisted flags now and hand them to ``apply`` once the renderer
        resolves ``ready``. A cancelled or failed future skips the apply.
        """
        self.reload()

        def _on_ready(fut: "Future[Any]") -> None:
            if fut.cancelled():
                logger.debug("Renderer readiness cancelled; visibility not applied")
                return
            exc = fut.exception()
            if exc is not None:
                logger.warning("Renderer failed to become ready: %s", exc)
                return
            try:
                apply(self.flags)
            except Exception:
                logger.exception("Failed to apply channel visibility")

        ready.add_done_callback(_on_ready)


__all__ = ["VISIBILITY_KEY", "VisibilityStore", "ChannelVisibility"]
