"""Fixed-interval, non-pipelined device polling."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 5000

FetchCallback = Callable[[Optional[Mapping[str, Any]], Optional[BaseException]], None]
Fetcher = Callable[[FetchCallback], None]
CancelFn = Callable[[], None]
Scheduler = Callable[[int, Callable[[], None]], CancelFn]


class InfoPoller:
    """
    Polls ``fetch`` every ``interval_ms``, one request at a time.

    The next timer is armed only after the current fetch has reported its
    single result, so slow requests stretch the cycle instead of piling up.
    ``fetch`` receives a completion callback ``(info, error)``; ``schedule``
    is ``(delay_ms, callback) -> cancel`` and is expected to run callbacks on
    the same thread as everything else (a Qt timer in the GUI).

    After :meth:`stop`, pending timers are cancelled and results of a fetch
    still in flight are discarded.
    """

    def __init__(
        self,
        fetch: Fetcher,
        schedule: Scheduler,
        on_result: Callable[[Mapping[str, Any]], None],
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._fetch = fetch
        self._schedule = schedule
        self._on_result = on_result
        self._on_error = on_error
        self.interval_ms = int(interval_ms)

        self._running = False
        self._generation = 0
        self._in_flight = False
        self._cancel_timer: Optional[CancelFn] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start(self) -> None:
        """Fetch immediately, then keep polling until :meth:`stop`."""
        if self._running:
            return
        self._running = True
        self._generation += 1
        self._tick()

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._generation += 1
        self._in_flight = False
        if self._cancel_timer is not None:
            self._cancel_timer()
            self._cancel_timer = None

    # ----------------------------------------------------------------- helpers
    def _tick(self) -> None:
        self._cancel_timer = None
        if not self._running or self._in_flight:
            return
        generation = self._generation
        self._in_flight = True

        def _done(info: Optional[Mapping[str, Any]], error: Optional[BaseException] = None) -> None:
            self._complete(generation, info, error)

        try:
            self._fetch(_done)
        except Exception as exc:
            self._complete(generation, None, exc)

    def _complete(
        self,
        generation: int,
        info: Optional[Mapping[str, Any]],
        error: Optional[BaseException],
    ) -> None:
        if generation != self._generation or not self._running:
            logger.debug("Discarding result of a cancelled poll")
            return
        if not self._in_flight:
            logger.debug("Ignoring duplicate completion for one poll")
            return
        self._in_flight = False

        if error is None and info is None:
            error = ValueError("fetch completed without a result")
        try:
            if error is not None:
                logger.warning("Device poll failed: %s", error)
                if self._on_error is not None:
                    self._on_error(error)
            elif info is not None:
                self._on_result(info)
        except Exception:
            logger.exception("Error while handling poll result")

        if self._running and generation == self._generation:
            self._cancel_timer = self._schedule(self.interval_ms, self._tick)


__all__ = ["DEFAULT_INTERVAL_MS", "InfoPoller", "Fetcher", "FetchCallback", "Scheduler"]
