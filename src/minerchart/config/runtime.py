"""Runtime configuration for the dashboard core and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml


@dataclass(slots=True)
class DashboardConfig:
    """
    Tuning knobs for buffering, polling, viewport gestures and labels.

    The defaults mirror the device web UI: 720 samples polled every 5 s
    (one hour of history), a minimum of 5 visible samples, and labels that
    give up after 5 collision shifts.
    """

    device_url: str = "http://192.168.4.1"
    capacity: int = 720
    poll_interval_ms: int = 5000
    request_timeout_ms: int = 4000

    min_visible: int = 5
    zoom_divisor: int = 40
    pan_hysteresis: int = 3

    label_max_attempts: int = 5
    label_margin: float = 2.0
    show_labels: bool = True

    visibility_key: str = "datasetVisibility"

    def sanitized(self) -> DashboardConfig:
        """Return a copy with derived limits applied."""
        return DashboardConfig(
            device_url=str(self.device_url).rstrip("/"),
            capacity=max(1, int(self.capacity)),
            poll_interval_ms=max(100, int(self.poll_interval_ms)),
            request_timeout_ms=max(100, int(self.request_timeout_ms)),
            min_visible=max(1, int(self.min_visible)),
            zoom_divisor=max(1, int(self.zoom_divisor)),
            pan_hysteresis=max(1, int(self.pan_hysteresis)),
            label_max_attempts=max(0, int(self.label_max_attempts)),
            label_margin=max(0.0, float(self.label_margin)),
            show_labels=bool(self.show_labels),
            visibility_key=str(self.visibility_key) or "datasetVisibility",
        )


_PLAIN_SECTIONS = ("dashboard", "polling", "viewport")


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`DashboardConfig`."""
    return {f.name for f in fields(DashboardConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """
    Flatten section blocks into field names.

    ``dashboard``, ``polling`` and ``viewport`` keys map straight onto fields;
    ``labels: {max_attempts, margin, show}`` map to the ``label_*`` fields and
    ``show_labels``. Top-level keys win over section keys.
    """
    merged: MutableMapping[str, Any] = {}
    for section in _PLAIN_SECTIONS:
        block = data.get(section)
        if isinstance(block, Mapping):
            merged.update(block)
    labels = data.get("labels")
    if isinstance(labels, Mapping):
        for key, value in labels.items():
            merged["show_labels" if key == "show" else f"label_{key}"] = value
    for key, value in data.items():
        if key not in _PLAIN_SECTIONS and key != "labels":
            merged[key] = value
    return merged


def config_from_mapping(data: Mapping[str, Any] | None) -> DashboardConfig:
    """Build :class:`DashboardConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return DashboardConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return DashboardConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> DashboardConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`DashboardConfig`.
    """
    if path is None:
        return DashboardConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return DashboardConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["DashboardConfig", "config_from_mapping", "load_config"]
