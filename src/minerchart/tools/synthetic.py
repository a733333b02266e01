"""Synthetic device payloads for demo mode and tests."""

from __future__ import annotations

import math
from typing import Any, Dict, List

import numpy as np

from ..core.polling import FetchCallback


class SyntheticMiner:
    """
    Produces ``/api/system/info`` and ``/api/system/statistics``-shaped
    payloads following slow sine waves plus a little noise.
    """

    def __init__(
        self,
        *,
        hashrate_ghs: float = 500.0,
        frequency: float = 490.0,
        core_voltage: float = 1150.0,
        interval_ms: int = 5000,
        seed: int | None = None,
    ) -> None:
        self.hashrate_ghs = float(hashrate_ghs)
        self.frequency = float(frequency)
        self.core_voltage = float(core_voltage)
        self.interval_ms = int(interval_ms)
        self._rng = np.random.default_rng(seed)
        self._phase = 0.0
        self._phase_step = 2.0 * math.pi / 120.0
        self._uptime_ms = 0

    def _row(self) -> Dict[str, float]:
        phase = self._phase
        noise = self._rng.normal(0.0, 0.02)
        hashrate = self.hashrate_ghs * (1.0 + 0.05 * math.sin(phase) + noise)
        error_share = max(0.0, 0.01 + 0.005 * math.sin(phase * 3.0))
        temp = 55.0 + 5.0 * math.sin(phase + 0.5)
        power = 12.0 + 1.5 * math.sin(phase + 1.0)
        self._phase += self._phase_step
        self._uptime_ms += self.interval_ms
        return {
            "hashRate": hashrate,
            "avgHashRate": self.hashrate_ghs * (1.0 + 0.02 * math.sin(phase / 4.0)),
            "hashRate_no_error": hashrate * (1.0 - error_share),
            "hashRate_error": hashrate * error_share,
            "temp": round(temp, 1),
            "frequency": self.frequency,
            "coreVoltage": self.core_voltage,
            "coreVoltageActual": self.core_voltage - 10.0 + 5.0 * math.sin(phase * 2.0),
            "power": power,
            "fanspeed": round(60.0 + 10.0 * math.sin(phase + 0.5)),
            "freeHeap": 190000 + int(self._rng.integers(-2000, 2000)),
        }

    def info(self) -> Dict[str, Any]:
        row = self._row()
        row.update(
            {
                "power_fault": False,
                "maxPower": 25.0,
                "nominalVoltage": 5.0,
                "hostname": "demo-miner",
                "bestDiff": "1.2M",
                "isUsingFallbackStratum": False,
                "stratumURL": "pool.example.org",
                "stratumPort": 3333,
                "stratumUser": "demo.worker",
            }
        )
        return row

    def statistics(self, count: int = 120) -> Dict[str, Any]:
        """``count`` historical rows ending at the current uptime."""
        rows: List[List[float]] = []
        for _ in range(max(0, int(count))):
            row = self._row()
            rows.append(
                [
                    row["hashRate"],
                    row["temp"],
                    row["power"],
                    self._uptime_ms,
                    row["coreVoltage"],
                    row["frequency"],
                    row["fanspeed"],
                    row["avgHashRate"],
                    row["coreVoltageActual"],
                    row["freeHeap"],
                    row["hashRate_no_error"],
                    row["hashRate_error"],
                ]
            )
        return {"currentTimestamp": self._uptime_ms, "statistics": rows}

    def fetch(self, done: FetchCallback) -> None:
        """:class:`~minerchart.core.polling.InfoPoller` fetcher."""
        done(self.info(), None)
