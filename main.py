"""Run the dashboard from a source checkout: ``python main.py [--demo]``.

Set ``MINERCHART_PROFILE=1`` to run under cProfile and print the hottest
call paths on exit.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from minerchart.gui.application import main  # noqa: E402


def _profiled(argv: list[str]) -> None:
    import cProfile
    import pstats

    profiler = cProfile.Profile()
    try:
        profiler.runcall(main, argv)
    finally:
        pstats.Stats(profiler, stream=sys.stderr).sort_stats("cumulative").print_stats(40)


if __name__ == "__main__":
    if os.getenv("MINERCHART_PROFILE", ""):
        _profiled(sys.argv)
    else:
        main(sys.argv)
