"""Shared dataclasses for dashboard samples and device payloads."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

# Hash rates arrive in GH/s; the buffer stores H/s.
HASHRATE_SCALE = 1e9


@dataclass
class Sample:
    """One timestamped observation of every telemetry channel."""

    timestamp_ms: int
    hashrate: float = 0.0
    avg_hashrate: float = 0.0
    hashrate_no_error: float = 0.0
    hashrate_error: float = 0.0
    temperature: float = 0.0
    frequency: float = 0.0
    core_voltage_set: float = 0.0
    core_voltage_actual: float = 0.0
    power: float = 0.0
    fan_speed_percent: float = 0.0
    free_heap_bytes: float = 0.0


@dataclass
class PoolInfo:
    """Which stratum pool the device is currently mining on."""

    label: str = "Primary"
    url: str = ""
    user: str = ""
    port: int = 0


@dataclass
class DeviceInfo:
    """
    Parsed ``/api/system/info`` payload.

    Only the fields the dashboard consumes are kept; ``raw`` holds the full
    mapping for callers that need anything else.
    """

    sample: Sample
    power_fault: bool = False
    max_power: float = 0.0
    nominal_voltage: float = 0.0
    hostname: str = ""
    vr_temp: float = 0.0
    best_diff: str = ""
    pool: PoolInfo = field(default_factory=PoolInfo)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class HistoricalStatistics:
    """
    Parsed ``/api/system/statistics`` payload.

    ``rows`` are fixed-position tuples: hashrate, temperature, power,
    timestamp offset, voltage, frequency, fan speed, average hashrate,
    current voltage, free heap, hashrate without errors, hashrate errors.
    """

    current_timestamp: int
    rows: List[Sequence[Any]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "HistoricalStatistics":
        if not data:
            return cls(current_timestamp=0)
        current = _coerce_number(data.get("currentTimestamp"))
        rows = data.get("statistics") or []
        if not isinstance(rows, (list, tuple)):
            rows = []
        return cls(
            current_timestamp=int(current) if math.isfinite(current) else 0,
            rows=[row for row in rows if isinstance(row, (list, tuple))],
        )


def _coerce_number(value: Any) -> float:
    """Missing values become ``0.0``; unparseable ones become NaN."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _round(value: float, digits: int) -> float:
    if not math.isfinite(value):
        return value
    return round(value, digits)


def _field(row: Sequence[Any], index: int) -> float:
    if index >= len(row):
        return 0.0
    return _coerce_number(row[index])


def sample_from_statistics_row(
    row: Sequence[Any],
    *,
    current_timestamp: int,
    now_ms: int,
) -> Sample:
    """
    Convert one historical statistics tuple into a :class:`Sample`.

    The record's relative offset becomes an absolute timestamp
    ``now_ms - current_timestamp + offset`` so the timeline is fixed at seed
    time.
    """
    offset = _field(row, 3)
    if not math.isfinite(offset):
        offset = 0.0
    return Sample(
        timestamp_ms=int(now_ms - current_timestamp + offset),
        hashrate=_field(row, 0) * HASHRATE_SCALE,
        temperature=_field(row, 1),
        power=_round(_field(row, 2), 2),
        core_voltage_set=_field(row, 4),
        frequency=_field(row, 5),
        fan_speed_percent=_field(row, 6),
        avg_hashrate=_field(row, 7) * HASHRATE_SCALE,
        core_voltage_actual=_field(row, 8),
        free_heap_bytes=_field(row, 9),
        hashrate_no_error=_field(row, 10) * HASHRATE_SCALE,
        hashrate_error=_field(row, 11) * HASHRATE_SCALE,
    )


def sample_from_info(info: Mapping[str, Any], *, now_ms: int) -> Sample:
    """Build a :class:`Sample` from a live info payload received at ``now_ms``."""
    avg = info.get("avgHashRate", info.get("avghashRate"))
    return Sample(
        timestamp_ms=int(now_ms),
        hashrate=_coerce_number(info.get("hashRate")) * HASHRATE_SCALE,
        avg_hashrate=_coerce_number(avg) * HASHRATE_SCALE,
        hashrate_no_error=_coerce_number(info.get("hashRate_no_error")) * HASHRATE_SCALE,
        hashrate_error=_coerce_number(info.get("hashRate_error")) * HASHRATE_SCALE,
        temperature=_coerce_number(info.get("temp")),
        frequency=_coerce_number(info.get("frequency")),
        core_voltage_set=_round(_coerce_number(info.get("coreVoltage")), 2),
        core_voltage_actual=_coerce_number(info.get("coreVoltageActual")),
        power=_round(_coerce_number(info.get("power")), 2),
        fan_speed_percent=_coerce_number(info.get("fanspeed")),
        free_heap_bytes=_coerce_number(info.get("freeHeap")),
    )


def device_info_from_mapping(info: Mapping[str, Any], *, now_ms: int) -> DeviceInfo:
    """Parse a live info payload including side-channel pool/power fields."""
    fallback = bool(info.get("isUsingFallbackStratum", False))
    prefix = "fallbackStratum" if fallback else "stratum"
    port = _coerce_number(info.get(f"{prefix}Port"))
    pool = PoolInfo(
        label="Fallback" if fallback else "Primary",
        url=str(info.get(f"{prefix}URL") or ""),
        user=str(info.get(f"{prefix}User") or ""),
        port=int(port) if math.isfinite(port) else 0,
    )
    best_diff = info.get("bestDiff")
    return DeviceInfo(
        sample=sample_from_info(info, now_ms=now_ms),
        power_fault=bool(info.get("power_fault", False)),
        max_power=_coerce_number(info.get("maxPower")),
        nominal_voltage=_coerce_number(info.get("nominalVoltage")),
        hostname=str(info.get("hostname") or ""),
        vr_temp=_coerce_number(info.get("vrTemp")),
        best_diff="" if best_diff in (None, "") else str(best_diff),
        pool=pool,
        raw=dict(info),
    )


def optional_float(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` for missing/NaN input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


__all__ = [
    "HASHRATE_SCALE",
    "Sample",
    "PoolInfo",
    "DeviceInfo",
    "HistoricalStatistics",
    "sample_from_statistics_row",
    "sample_from_info",
    "device_info_from_mapping",
    "optional_float",
]
