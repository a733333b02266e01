from __future__ import annotations

import itertools
import logging

from minerchart.tools import debug
from minerchart.tools.debug import debug_enabled, time_block


def test_debug_flag_parsing() -> None:
    assert debug_enabled({"MINERCHART_DEBUG": "1"})
    assert debug_enabled({"MINERCHART_DEBUG": "Yes"})
    assert not debug_enabled({"MINERCHART_DEBUG": "0"})
    assert not debug_enabled({})


def test_time_block_silent_by_default(monkeypatch) -> None:
    monkeypatch.delenv("MINERCHART_DEBUG", raising=False)
    messages = []
    with time_block("redraw", emitter=messages.append):
        pass
    assert messages == []


def test_time_block_emits_when_enabled(monkeypatch) -> None:
    monkeypatch.setenv("MINERCHART_DEBUG", "on")
    messages = []
    with time_block("redraw", emitter=messages.append):
        pass
    assert len(messages) == 1
    assert messages[0].startswith("redraw took ")


def test_slow_block_warns_without_debug_flag(monkeypatch, caplog) -> None:
    monkeypatch.delenv("MINERCHART_DEBUG", raising=False)
    ticks = itertools.count(0.0, 0.5)
    monkeypatch.setattr(debug.time, "perf_counter", lambda: next(ticks))

    with caplog.at_level(logging.WARNING, logger="minerchart.tools.debug"):
        with time_block("chart redraw", warn_above_ms=100.0):
            pass

    assert "chart redraw took 500.0 ms" in caplog.text
