"""JSON export of the buffered chart history."""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from ..core.channels import CHANNELS_BY_NAME, EXPORT_ORDER
from ..core.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "esp32-miner-data-"


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 string with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def export_filename(moment: datetime | None = None) -> str:
    """
    Download name for an export taken at ``moment``.

    Example: ``esp32-miner-data-2025-01-02T03-04-05-678Z.json``
    """
    stamp = iso_timestamp(moment).replace(":", "-").replace(".", "-")
    return f"{EXPORT_PREFIX}{stamp}.json"


def build_export(buffer: SampleBuffer, moment: datetime | None = None) -> Dict[str, Any]:
    """Session label, the timestamp channel and every exported telemetry channel."""
    payload: Dict[str, Any] = {
        "date": iso_timestamp(moment),
        "labels": [int(ts) for ts in buffer.timestamps()],
    }
    for name in EXPORT_ORDER:
        key = CHANNELS_BY_NAME[name].export_key
        if key is None:
            continue
        # JSON has no NaN; malformed values export as null.
        payload[key] = [v if math.isfinite(v) else None for v in buffer.channel(name).tolist()]
    return payload


def write_export(buffer: SampleBuffer, directory: str | Path, moment: datetime | None = None) -> Path:
    """
    Write :func:`build_export` output into ``directory``.

    Directories are created as needed; returns the written path.
    """
    moment = moment or datetime.now(timezone.utc)
    target_dir = Path(directory).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(moment)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(build_export(buffer, moment), fh, indent=2)
    logger.info("Exported %d samples to %s", len(buffer), path)
    return path


__all__ = ["EXPORT_PREFIX", "iso_timestamp", "export_filename", "build_export", "write_export"]
