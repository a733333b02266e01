from __future__ import annotations

import pytest

from minerchart.core.polling import InfoPoller
from minerchart.tools.synthetic import SyntheticMiner


class FakeScheduler:
    """Collects timers instead of running them; ``fire`` runs the oldest."""

    def __init__(self) -> None:
        self.pending = []
        self.cancelled = 0

    def __call__(self, delay_ms, callback):
        entry = [delay_ms, callback, True]
        self.pending.append(entry)

        def cancel() -> None:
            if entry[2]:
                entry[2] = False
                self.cancelled += 1

        return cancel

    def fire(self) -> None:
        delay_ms, callback, active = self.pending.pop(0)
        if active:
            callback()


class ManualFetch:
    """Fetcher whose completions are delivered by the test."""

    def __init__(self) -> None:
        self.calls = []

    def __call__(self, done) -> None:
        self.calls.append(done)


def test_start_fetches_immediately_and_waits_for_completion() -> None:
    fetch, schedule, results = ManualFetch(), FakeScheduler(), []
    poller = InfoPoller(fetch, schedule, results.append, interval_ms=5000)

    poller.start()
    assert len(fetch.calls) == 1
    assert poller.in_flight
    assert schedule.pending == []

    fetch.calls[0]({"hashRate": 1.0}, None)
    assert results == [{"hashRate": 1.0}]
    assert not poller.in_flight
    assert [entry[0] for entry in schedule.pending] == [5000]

    schedule.fire()
    assert len(fetch.calls) == 2


def test_timer_during_slow_fetch_does_not_start_second_request() -> None:
    fetch, schedule = ManualFetch(), FakeScheduler()
    poller = InfoPoller(fetch, schedule, lambda info: None, interval_ms=100)
    poller.start()

    # Stray tick while the first request is outstanding.
    poller._tick()
    assert len(fetch.calls) == 1


def test_duplicate_completion_is_ignored() -> None:
    fetch, schedule, results = ManualFetch(), FakeScheduler(), []
    poller = InfoPoller(fetch, schedule, results.append, interval_ms=100)
    poller.start()

    fetch.calls[0]({"a": 1}, None)
    fetch.calls[0]({"a": 2}, None)

    assert results == [{"a": 1}]
    assert len(schedule.pending) == 1


def test_stop_discards_in_flight_result_and_cancels_timer() -> None:
    fetch, schedule, results = ManualFetch(), FakeScheduler(), []
    poller = InfoPoller(fetch, schedule, results.append, interval_ms=100)
    poller.start()
    fetch.calls[0]({"n": 1}, None)
    schedule.fire()

    poller.stop()
    fetch.calls[1]({"n": 2}, None)

    assert results == [{"n": 1}]
    assert not poller.running
    assert schedule.pending == []

    poller.start()
    fetch.calls[2]({"n": 3}, None)
    poller.stop()
    assert schedule.cancelled == 1
    assert results == [{"n": 1}, {"n": 3}]


def test_errors_are_reported_and_polling_continues() -> None:
    fetch, schedule, errors, results = ManualFetch(), FakeScheduler(), [], []
    poller = InfoPoller(fetch, schedule, results.append, interval_ms=100, on_error=errors.append)
    poller.start()

    fetch.calls[0](None, ConnectionError("timeout"))
    assert isinstance(errors[0], ConnectionError)
    assert len(schedule.pending) == 1

    schedule.fire()
    fetch.calls[1](None, None)
    assert isinstance(errors[1], ValueError)
    assert results == []
    assert len(schedule.pending) == 1


def test_fetch_that_raises_counts_as_failed_poll() -> None:
    schedule, errors = FakeScheduler(), []

    def fetch(done) -> None:
        raise OSError("network down")

    poller = InfoPoller(fetch, schedule, lambda info: None, interval_ms=100, on_error=errors.append)
    poller.start()

    assert isinstance(errors[0], OSError)
    assert not poller.in_flight
    assert len(schedule.pending) == 1


def test_handler_exception_does_not_stop_polling() -> None:
    fetch, schedule = ManualFetch(), FakeScheduler()

    def on_result(info) -> None:
        raise RuntimeError("bad payload")

    poller = InfoPoller(fetch, schedule, on_result, interval_ms=100)
    poller.start()
    fetch.calls[0]({"x": 1}, None)

    assert poller.running
    assert len(schedule.pending) == 1


def test_synchronous_fetcher_with_synthetic_miner() -> None:
    miner = SyntheticMiner(seed=1)
    schedule, results = FakeScheduler(), []
    poller = InfoPoller(miner.fetch, schedule, results.append, interval_ms=5000)

    poller.start()
    schedule.fire()
    schedule.fire()

    assert len(results) == 3
    assert all(info["hostname"] == "demo-miner" for info in results)


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InfoPoller(ManualFetch(), FakeScheduler(), lambda info: None, interval_ms=0)


def test_error_wins_over_payload_in_same_completion() -> None:
    fetch, schedule, errors, results = ManualFetch(), FakeScheduler(), [], []
    poller = InfoPoller(fetch, schedule, results.append, interval_ms=100, on_error=errors.append)
    poller.start()

    fetch.calls[0]({"partial": True}, TimeoutError("late"))

    assert results == []
    assert isinstance(errors[0], TimeoutError)
    assert len(schedule.pending) == 1
