"""Normalization helpers.

Tolerant parsing of third-party feed values.
"""

from __future__ import annotations

import math
from typing import Any

from pygeotrack._constants import FEET_TO_METERS, KNOTS_TO_KMH, MPS_TO_KMH


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def knots_to_kmh(value: Any) -> float:
    return (safe_float(value) or 0.0) * KNOTS_TO_KMH


def mps_to_kmh(value: Any) -> float:
    return (safe_float(value) or 0.0) * MPS_TO_KMH


def feet_to_meters(value: Any) -> float | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return parsed * FEET_TO_METERS


def sanitize_speed(speed: float, *, maximum: float, fallback: float, minimum: float = 0.0) -> float:
    """Replace an implausible speed with *fallback*.

    Feeds occasionally report glitches far outside the physical envelope;
    those are swapped for a typical value instead of being dropped.
    """
    if math.isnan(speed) or speed > maximum or speed < minimum:
        return fallback
    return speed


def is_valid_position(lat: float | None, lng: float | None) -> bool:
    """Check that both coordinates exist and lie on the globe."""
    if lat is None or lng is None:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def prune_metadata(data: dict[str, Any]) -> dict[str, Any]:
    """Drop ``None`` and empty-string values from a metadata bag."""
    return {key: value for key, value in data.items() if value is not None and value != ""}
