"""Spherical and flat-plane geometry helpers.

Distances are great-circle (haversine) on a spherical Earth. Centroids,
midpoints and the simulation step stay on a flat lat/lng plane; that is an
accepted approximation, not a bug.
"""

from __future__ import annotations

import math

from pygeotrack._constants import EARTH_RADIUS_KM, SIM_LATITUDE_LIMIT

KM_PER_DEGREE_LAT = EARTH_RADIUS_KM * math.pi / 180.0
"""Great-circle length of one degree of latitude; lower bound for pruning."""


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def midpoint(lat1: float, lng1: float, lat2: float, lng2: float) -> tuple[float, float]:
    """Arithmetic midpoint of two coordinates."""
    return (lat1 + lat2) / 2, (lng1 + lng2) / 2


def wrap_longitude(lng: float) -> float:
    """Wrap a longitude into ``(-180, 180]``."""
    wrapped = (lng + 180.0) % 360.0 - 180.0
    if wrapped <= -180.0:
        return 180.0
    return wrapped


def clamp_latitude(lat: float, limit: float = SIM_LATITUDE_LIMIT) -> float:
    """Clamp a latitude into ``[-limit, limit]`` to stay clear of the poles."""
    return max(-limit, min(limit, lat))


def normalize_heading(heading: float) -> float:
    """Normalize a heading in degrees into ``[0, 360)``."""
    value = heading % 360.0
    # float modulo of a tiny negative number rounds up to exactly 360.0
    if value >= 360.0:
        return 0.0
    return value


def heading_delta(a: float, b: float) -> float:
    """Smallest angle between two headings, in ``[0, 180]``."""
    diff = abs(a - b) % 360.0
    return 360.0 - diff if diff > 180.0 else diff
