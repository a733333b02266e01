from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone

from minerchart.core.models import Sample
from minerchart.core.sample_buffer import SampleBuffer
from minerchart.dataio.export import build_export, export_filename, iso_timestamp, write_export

MOMENT = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

EXPORT_KEYS = [
    "date",
    "labels",
    "hashrateData",
    "temperatureData",
    "mhzData",
    "coreVoltageData",
    "coreVoltageCurrentData",
    "powerData",
    "fanspeed",
    "avghashrateData",
    "espRam",
    "hashrate_no_error",
    "hashrate_error",
]


def _buffer() -> SampleBuffer:
    buf = SampleBuffer(capacity=4)
    buf.append(Sample(timestamp_ms=1000, hashrate=5e11, temperature=55.0, power=12.3, free_heap_bytes=190000))
    buf.append(Sample(timestamp_ms=6000, hashrate=5.1e11, temperature=math.nan, power=12.4, free_heap_bytes=189000))
    return buf


def test_iso_timestamp_is_utc_with_milliseconds() -> None:
    assert iso_timestamp(MOMENT) == "2025-01-02T03:04:05.678Z"
    local = MOMENT.astimezone(timezone(timedelta(hours=2)))
    assert iso_timestamp(local) == "2025-01-02T03:04:05.678Z"


def test_export_filename_replaces_separators() -> None:
    assert export_filename(MOMENT) == "esp32-miner-data-2025-01-02T03-04-05-678Z.json"


def test_build_export_layout() -> None:
    payload = build_export(_buffer(), MOMENT)

    assert list(payload) == EXPORT_KEYS
    assert payload["date"] == "2025-01-02T03:04:05.678Z"
    assert payload["labels"] == [1000, 6000]
    assert payload["hashrateData"] == [5e11, 5.1e11]
    assert payload["temperatureData"] == [55.0, None]
    assert payload["espRam"] == [190000.0, 189000.0]
    assert "vf_ratio" not in payload


def test_write_export_creates_directory(tmp_path) -> None:
    path = write_export(_buffer(), tmp_path / "exports", MOMENT)

    assert path.parent == tmp_path / "exports"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["powerData"] == [12.3, 12.4]
    assert data["temperatureData"][1] is None
