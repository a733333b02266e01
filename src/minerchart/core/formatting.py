"""Value formatting for labels, tooltips and window titles."""

from __future__ import annotations

import math

import numpy as np

from .channels import ChannelSpec

HASH_SUFFIXES = (" H/s", " KH/s", " MH/s", " GH/s", " TH/s", " PH/s", " EH/s", " ZH/s")


def format_hashrate(value: float | None) -> str:
    """Scale a hash rate in H/s to the largest suffix keeping it >= 1."""
    if value is None or not math.isfinite(value) or value <= 0:
        value = 0.0
    power = 0
    if value > 0:
        power = max(0, int(math.floor(math.log10(value) / 3)))
    power = min(power, len(HASH_SUFFIXES) - 1)
    scaled = value / (1000.0**power)
    return f"{scaled:.2f}{HASH_SUFFIXES[power]}"


def format_number(value: float) -> str:
    """Shortest round-tripping representation, without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return np.format_float_positional(float(value), trim="-")


def format_value(spec: ChannelSpec, value: float | None) -> str:
    """Render ``value`` the way labels for channel ``spec`` display it."""
    if value is None or not math.isfinite(value):
        value = 0.0
    if spec.style == "hashrate":
        return format_hashrate(value)
    if spec.style == "ratio":
        return f"{value:.4f}"
    return f"{format_number(value)}{spec.unit}"


__all__ = ["HASH_SUFFIXES", "format_hashrate", "format_number", "format_value"]
