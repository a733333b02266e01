"""Derived metrics computed from buffered telemetry."""

from __future__ import annotations

from typing import Union

import numpy as np
from numpy.typing import ArrayLike

from .channels import CORE_VOLTAGE_SET, FREQUENCY, VF_RATIO
from .sample_buffer import SampleBuffer

Number = Union[float, np.floating]

# J/TH: power divided by hashrate expressed in TH/s.
TERAHASH = 1e12


def vf_ratio(core_voltage_set: float, frequency: float) -> float:
    """Return ``core_voltage_set / frequency``, or ``0.0`` when frequency is zero."""
    if not frequency:
        return 0.0
    return float(core_voltage_set) / float(frequency)


def average(values: ArrayLike) -> Number:
    """Arithmetic mean; an empty input averages to ``0.0``."""
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))


class DerivedMetricsComputer:
    """Per-append and on-demand derived values for a :class:`SampleBuffer`."""

    def __init__(self, ratio_channel: str = VF_RATIO) -> None:
        self._ratio_channel = ratio_channel

    def on_append(self, buffer: SampleBuffer) -> float:
        """
        Fill the V/F ratio for the newest sample only.

        Returns the stored ratio.
        """
        if len(buffer) == 0:
            return 0.0
        ratio = vf_ratio(buffer.value(-1, CORE_VOLTAGE_SET), buffer.value(-1, FREQUENCY))
        buffer.set_value(-1, self._ratio_channel, ratio)
        return ratio

    @staticmethod
    def efficiency_series(hashrate: ArrayLike, power: ArrayLike) -> np.ndarray:
        """
        Per-sample efficiency in J/TH.

        Samples with a non-positive hashrate report their raw power instead,
        which is worse than any real efficiency but still finite.
        """
        rates = np.asarray(hashrate, dtype=float).reshape(-1)
        watts = np.asarray(power, dtype=float).reshape(-1)
        if rates.size == 0 or watts.size == 0:
            return np.empty(0, dtype=float)
        if watts.size < rates.size:
            watts = np.concatenate((watts, np.zeros(rates.size - watts.size)))
        watts = np.nan_to_num(watts[: rates.size], nan=0.0)
        positive = rates > 0
        out = watts.copy()
        out[positive] = watts[positive] / (rates[positive] / TERAHASH)
        return out

    def efficiency(self, hashrate: ArrayLike, power: ArrayLike) -> Number:
        """Mean of :meth:`efficiency_series`; ``0.0`` for empty input."""
        return average(self.efficiency_series(hashrate, power))


__all__ = ["DerivedMetricsComputer", "average", "vf_ratio", "TERAHASH"]
