from __future__ import annotations

import math

from minerchart.core.models import (
    HistoricalStatistics,
    device_info_from_mapping,
    optional_float,
    sample_from_info,
    sample_from_statistics_row,
)


def test_short_statistics_row_fills_missing_fields_with_zero() -> None:
    sample = sample_from_statistics_row([1.0, 50.0, 10.0, 500], current_timestamp=1000, now_ms=2000)

    assert sample.timestamp_ms == 1500
    assert sample.hashrate == 1e9
    assert sample.frequency == 0.0
    assert sample.hashrate_error == 0.0


def test_unparseable_values_become_nan() -> None:
    sample = sample_from_info({"hashRate": "n/a", "temp": None, "power": "12.346"}, now_ms=1)

    assert math.isnan(sample.hashrate)
    assert sample.temperature == 0.0
    assert sample.power == 12.35


def test_average_hashrate_accepts_legacy_key() -> None:
    assert sample_from_info({"avghashRate": 2.0}, now_ms=1).avg_hashrate == 2e9
    assert sample_from_info({"avgHashRate": 3.0, "avghashRate": 2.0}, now_ms=1).avg_hashrate == 3e9


def test_device_info_side_channel_fields() -> None:
    info = device_info_from_mapping(
        {"hostname": "axe", "power_fault": True, "bestDiff": 12345, "stratumPort": "3333"},
        now_ms=10,
    )

    assert info.power_fault is True
    assert info.hostname == "axe"
    assert info.best_diff == "12345"
    assert info.pool.label == "Primary"
    assert info.pool.port == 3333
    assert info.sample.timestamp_ms == 10


def test_historical_statistics_drops_malformed_rows() -> None:
    stats = HistoricalStatistics.from_mapping({"currentTimestamp": "7", "statistics": [[1, 2], "x", None, (3, 4)]})

    assert stats.current_timestamp == 7
    assert stats.rows == [[1, 2], (3, 4)]
    assert HistoricalStatistics.from_mapping(None).rows == []


def test_optional_float() -> None:
    assert optional_float("1.5") == 1.5
    assert optional_float(None) is None
    assert optional_float(True) is None
    assert optional_float(math.nan) is None
    assert optional_float("abc") is None
