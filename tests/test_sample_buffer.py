from __future__ import annotations

import math

import numpy as np
import pytest

from minerchart.core.channels import CHANNEL_NAMES, FREQUENCY, HASHRATE, TEMPERATURE
from minerchart.core.models import Sample
from minerchart.core.sample_buffer import CAPACITY, SampleBuffer


def _sample(i: int) -> Sample:
    return Sample(timestamp_ms=1000 + i, hashrate=float(i), temperature=50.0 + i, frequency=490.0)


def test_append_keeps_channels_aligned_and_bounded() -> None:
    buf = SampleBuffer()
    for i in range(CAPACITY + 50):
        buf.append(_sample(i))
        assert len(buf) <= CAPACITY
        lengths = {len(buf.channel(name)) for name in CHANNEL_NAMES}
        assert lengths == {len(buf)}
        assert len(buf.timestamps()) == len(buf)


def test_fifo_keeps_most_recent_samples_in_order() -> None:
    buf = SampleBuffer()
    total = CAPACITY + 30
    for i in range(total):
        buf.append(_sample(i))

    assert len(buf) == CAPACITY
    np.testing.assert_array_equal(buf.channel(HASHRATE), np.arange(30, total, dtype=float))
    np.testing.assert_array_equal(buf.timestamps(), np.arange(1030, 1000 + total))
    assert buf.value(0, TEMPERATURE) == 80.0


def test_append_reports_eviction_only_when_full() -> None:
    buf = SampleBuffer(capacity=3)
    assert [buf.append(_sample(i)) for i in range(5)] == [False, False, False, True, True]
    assert buf.channel(HASHRATE).tolist() == [2.0, 3.0, 4.0]


def test_missing_fields_default_to_zero_and_nan_keeps_its_slot() -> None:
    buf = SampleBuffer(capacity=4)
    buf.append(Sample(timestamp_ms=1))
    buf.append(Sample(timestamp_ms=2, temperature=math.nan, frequency=500.0))

    assert buf.value(0, FREQUENCY) == 0.0
    assert math.isnan(buf.value(1, TEMPERATURE))
    assert buf.value(1, FREQUENCY) == 500.0
    assert len(buf.channel(TEMPERATURE)) == 2


def test_out_of_order_timestamp_is_clamped() -> None:
    buf = SampleBuffer(capacity=4)
    buf.append(Sample(timestamp_ms=500))
    buf.append(Sample(timestamp_ms=400))
    assert buf.timestamps().tolist() == [500, 500]


def test_window_and_negative_index() -> None:
    buf = SampleBuffer(capacity=5)
    for i in range(8):
        buf.append(_sample(i))
    assert buf.window(HASHRATE, 1, 4).tolist() == [4.0, 5.0, 6.0]
    assert buf.window(HASHRATE, 4, 2).size == 0
    assert buf.value(-1, HASHRATE) == 7.0
    assert buf.latest_timestamp() == 1007


def test_invalid_access_raises() -> None:
    buf = SampleBuffer(capacity=2)
    with pytest.raises(IndexError):
        buf.value(0, HASHRATE)
    buf.append(_sample(0))
    with pytest.raises(IndexError):
        buf.value(1, HASHRATE)
    with pytest.raises(ValueError):
        buf.channel("nope")
    with pytest.raises(ValueError):
        SampleBuffer(capacity=0)


def test_clear_resets_everything() -> None:
    buf = SampleBuffer(capacity=2)
    buf.append(_sample(0))
    buf.clear()
    assert len(buf) == 0
    assert buf.latest_timestamp() is None
    assert buf.as_dict()[HASHRATE] == []
