#!/usr/bin/env python3
"""
Sidecar parsing

Reads the JSON metadata file that accompanies each media file in an export.
Only the fields albumfix writes back are kept:

    {
        "title": "IMG_0001.HEIC",
        "description": "Beach day",
        "photoTakenTime": {"timestamp": "1609459200"},
        "geoDataExif": {"latitude": 25.03, "longitude": 121.56, "altitude": 9.0}
    }
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pipeline.exceptions import SidecarError

logger = logging.getLogger(__name__)

GeoTriple = Tuple[float, float, float]


@dataclass(frozen=True)
class SidecarRecord:
    """Parsed sidecar payload. Every field is optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[int] = None
    geo: Optional[GeoTriple] = None

    @property
    def clears_gps(self) -> bool:
        """True when the geo triple is the all-zero "no location" sentinel"""
        return self.geo is not None and all(value == 0 for value in self.geo)


def _parse_timestamp(taken: Any) -> Optional[int]:
    if not isinstance(taken, dict):
        return None
    raw = taken.get("timestamp")
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.debug(f"Ignoring unparsable timestamp: {raw!r}")
        return None

    try:
        datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise SidecarError(f"Timestamp out of range: {raw!r}") from e
    return value


def _parse_geo(geo: Any) -> Optional[GeoTriple]:
    if not isinstance(geo, dict):
        return None
    values = []
    for key in ("latitude", "longitude", "altitude"):
        value = geo.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    return (values[0], values[1], values[2])


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def record_from_dict(data: Dict[str, Any]) -> SidecarRecord:
    """Build a SidecarRecord from an already-decoded sidecar object."""
    return SidecarRecord(
        title=_optional_text(data.get("title")),
        description=_optional_text(data.get("description")),
        timestamp=_parse_timestamp(data.get("photoTakenTime")),
        geo=_parse_geo(data.get("geoDataExif")),
    )


def parse_sidecar(path: Path) -> SidecarRecord:
    """Read and parse one sidecar file.

    Args:
        path: Path to the JSON sidecar

    Returns:
        SidecarRecord with whatever fields were present

    Raises:
        SidecarError: If the file is unreadable or not a JSON object, or if
            its timestamp cannot be represented as a date
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SidecarError(f"Cannot read sidecar {path}: {e}") from e

    if not isinstance(data, dict):
        raise SidecarError(f"Sidecar {path} is not a JSON object")

    try:
        return record_from_dict(data)
    except SidecarError as e:
        raise SidecarError(f"Sidecar {path}: {e}") from e
