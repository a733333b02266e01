"""Declared telemetry channels and their display metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Tuple

LabelStyle = Literal["unit", "hashrate", "ratio"]


@dataclass(frozen=True)
class ChannelSpec:
    """
    One named telemetry series.

    ``label`` is the legend text, ``unit`` the suffix appended to formatted
    values and ``export_key`` the array name used in JSON exports (``None``
    for derived channels that are not exported).
    """

    name: str
    label: str
    unit: str = ""
    style: LabelStyle = "unit"
    export_key: str | None = None
    suggested_max: float | None = None


HASHRATE = "hashrate"
TEMPERATURE = "temperature"
FREQUENCY = "frequency"
CORE_VOLTAGE_SET = "core_voltage_set"
FAN_SPEED = "fan_speed_percent"
AVG_HASHRATE = "avg_hashrate"
CORE_VOLTAGE_ACTUAL = "core_voltage_actual"
FREE_HEAP = "free_heap_bytes"
POWER = "power"
VF_RATIO = "vf_ratio"
HASHRATE_NO_ERROR = "hashrate_no_error"
HASHRATE_ERROR = "hashrate_error"

# Declaration order is the chart dataset order; ChannelVisibility indexes
# into this tuple.
DISPLAY_CHANNELS: Tuple[ChannelSpec, ...] = (
    ChannelSpec(HASHRATE, "Hashrate", style="hashrate", export_key="hashrateData"),
    ChannelSpec(TEMPERATURE, "ASIC Temp", "°C", export_key="temperatureData", suggested_max=80),
    ChannelSpec(FREQUENCY, "ASIC Freq", "mHz", export_key="mhzData", suggested_max=1200),
    ChannelSpec(CORE_VOLTAGE_SET, "VoltSet", "mv", export_key="coreVoltageData", suggested_max=1200),
    ChannelSpec(FAN_SPEED, "Fan", "%", export_key="fanspeed", suggested_max=100),
    ChannelSpec(AVG_HASHRATE, "AvgHashrate", style="hashrate", export_key="avghashrateData"),
    ChannelSpec(
        CORE_VOLTAGE_ACTUAL, "VoltCurrent", "mv", export_key="coreVoltageCurrentData", suggested_max=1200
    ),
    ChannelSpec(FREE_HEAP, "EspRam", "B", export_key="espRam"),
    ChannelSpec(POWER, "Power", "W", export_key="powerData", suggested_max=40),
    ChannelSpec(VF_RATIO, "V/F Ratio", style="ratio", suggested_max=2.5),
    ChannelSpec(HASHRATE_NO_ERROR, "Hashrate no error", style="hashrate", export_key="hashrate_no_error"),
    ChannelSpec(HASHRATE_ERROR, "Hashrate error", style="hashrate", export_key="hashrate_error"),
)

CHANNELS_BY_NAME: Dict[str, ChannelSpec] = {spec.name: spec for spec in DISPLAY_CHANNELS}
CHANNEL_NAMES: Tuple[str, ...] = tuple(spec.name for spec in DISPLAY_CHANNELS)

# Array order of the JSON download.
EXPORT_ORDER: Tuple[str, ...] = (
    HASHRATE,
    TEMPERATURE,
    FREQUENCY,
    CORE_VOLTAGE_SET,
    CORE_VOLTAGE_ACTUAL,
    POWER,
    FAN_SPEED,
    AVG_HASHRATE,
    FREE_HEAP,
    HASHRATE_NO_ERROR,
    HASHRATE_ERROR,
)


def channel_spec(name: str) -> ChannelSpec:
    """Return the :class:`ChannelSpec` for ``name`` or raise ``ValueError``."""
    try:
        return CHANNELS_BY_NAME[name]
    except KeyError:
        raise ValueError(f"Unknown channel {name!r}") from None


__all__ = [
    "ChannelSpec",
    "LabelStyle",
    "DISPLAY_CHANNELS",
    "CHANNELS_BY_NAME",
    "CHANNEL_NAMES",
    "EXPORT_ORDER",
    "channel_spec",
    "HASHRATE",
    "TEMPERATURE",
    "FREQUENCY",
    "CORE_VOLTAGE_SET",
    "FAN_SPEED",
    "AVG_HASHRATE",
    "CORE_VOLTAGE_ACTUAL",
    "FREE_HEAP",
    "POWER",
    "VF_RATIO",
    "HASHRATE_NO_ERROR",
    "HASHRATE_ERROR",
]
