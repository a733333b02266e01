"""Opt-in timing of the redraw and history-seeding paths.

Set ``MINERCHART_DEBUG=1`` to log the duration of every timed block at DEBUG
level. Blocks given ``warn_above_ms`` are always timed and log a warning when
they run long, debug flag or not.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping

DEBUG_ENV = "MINERCHART_DEBUG"

logger = logging.getLogger(__name__)


def debug_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when ``MINERCHART_DEBUG`` is set to a truthy value."""
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV, "").lower() in {"1", "true", "yes", "on"}


@contextmanager
def time_block(
    label: str,
    *,
    emitter: Callable[[str], None] | None = None,
    warn_above_ms: float | None = None,
) -> Iterator[None]:
    """Time the enclosed block; no clock is read when there is nothing to report."""
    verbose = debug_enabled()
    if not verbose and warn_above_ms is None:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if warn_above_ms is not None and elapsed_ms > warn_above_ms:
            logger.warning("%s took %.1f ms (limit %.0f ms)", label, elapsed_ms, warn_above_ms)
        elif verbose:
            (emitter or logger.debug)(f"{label} took {elapsed_ms:.3f} ms")
