"""ADS-B flight feed parsing.

Two payload shapes are understood:

* OpenSky ``/states/all``: ``{"states": [[icao24, callsign, origin_country,
  time_position, last_contact, longitude, latitude, baro_altitude, on_ground,
  velocity, true_track, ...], ...]}``
* adsb.lol / readsb ``/v2/*``: ``{"ac": [{"hex": ..., "lat": ..., ...}, ...]}``
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pygeotrack._constants import AIRCRAFT_FALLBACK_SPEED_KMH, AIRCRAFT_MAX_SPEED_KMH
from pygeotrack.exceptions import SourceFormatError
from pygeotrack.ingestion.normalize import (
    feet_to_meters,
    is_valid_position,
    knots_to_kmh,
    mps_to_kmh,
    prune_metadata,
    safe_float,
    safe_str,
    sanitize_speed,
)
from pygeotrack.models import Entity, EntityType, Provenance

_logger = logging.getLogger(__name__)

# OpenSky state vector indices
_ICAO24 = 0
_CALLSIGN = 1
_ORIGIN_COUNTRY = 2
_LONGITUDE = 5
_LATITUDE = 6
_BARO_ALTITUDE = 7
_ON_GROUND = 8
_VELOCITY = 9
_TRUE_TRACK = 10
_MIN_STATE_LENGTH = 11


def _aircraft_speed(kmh: float) -> float:
    return sanitize_speed(kmh, maximum=AIRCRAFT_MAX_SPEED_KMH, fallback=AIRCRAFT_FALLBACK_SPEED_KMH)


def opensky_state_to_entity(state: Sequence[Any], *, source: str, now_ms: int) -> Entity | None:
    """Convert one OpenSky state vector; ``None`` when it has no usable position."""
    if len(state) < _MIN_STATE_LENGTH:
        return None
    lat = safe_float(state[_LATITUDE])
    lng = safe_float(state[_LONGITUDE])
    icao = safe_str(state[_ICAO24])
    if icao is None or not is_valid_position(lat, lng):
        return None
    assert lat is not None and lng is not None  # noqa: S101

    on_ground = bool(state[_ON_GROUND])
    altitude = safe_float(state[_BARO_ALTITUDE]) or 0.0
    return Entity(
        id=f"adsb-{icao}",
        type=EntityType.AIRCRAFT,
        lat=lat,
        lng=lng,
        altitude=0.0 if on_ground else altitude,
        speed=_aircraft_speed(mps_to_kmh(state[_VELOCITY])),
        heading=safe_float(state[_TRUE_TRACK]) or 0.0,
        observed_at=now_ms,
        metadata=prune_metadata(
            {
                "label": safe_str(state[_CALLSIGN]) or icao,
                "provenance": Provenance.LIVE.value,
                "source": source,
                "origin": safe_str(state[_ORIGIN_COUNTRY]),
                "status": "ground" if on_ground else "active",
                "category": "commercial",
                "military": False,
            }
        ),
    )


def adsb_aircraft_to_entity(aircraft: dict[str, Any], *, military: bool, source: str, now_ms: int) -> Entity | None:
    """Convert one readsb-style aircraft object; ``None`` when it has no usable position."""
    lat = safe_float(aircraft.get("lat"))
    lng = safe_float(aircraft.get("lon"))
    hex_id = safe_str(aircraft.get("hex"))
    if hex_id is None or not is_valid_position(lat, lng):
        return None
    assert lat is not None and lng is not None  # noqa: S101

    alt_baro = aircraft.get("alt_baro")
    on_ground = alt_baro == "ground"
    altitude = feet_to_meters(alt_baro)
    if altitude is None:
        altitude = feet_to_meters(aircraft.get("alt_geom")) or 0.0

    if on_ground:
        status = "ground"
    elif military:
        status = "military"
    else:
        status = "active"

    return Entity(
        id=f"adsb-{hex_id}",
        type=EntityType.AIRCRAFT,
        lat=lat,
        lng=lng,
        altitude=0.0 if on_ground else altitude,
        speed=_aircraft_speed(knots_to_kmh(aircraft.get("gs"))),
        heading=safe_float(aircraft.get("track")) or 0.0,
        observed_at=now_ms,
        metadata=prune_metadata(
            {
                "label": safe_str(aircraft.get("flight")) or hex_id.upper(),
                "provenance": Provenance.LIVE.value,
                "source": source,
                "origin": "MILITARY" if military else None,
                "status": status,
                "category": "military" if military else (safe_str(aircraft.get("category")) or "commercial"),
                "military": military,
                "registration": safe_str(aircraft.get("r")),
                "aircraft_type": safe_str(aircraft.get("t")),
                "squawk": safe_str(aircraft.get("squawk")),
            }
        ),
    )


def parse_flight_payload(
    payload: Any,
    *,
    source: str,
    now_ms: int,
    max_count: int | None = None,
    military: bool = False,
) -> list[Entity]:
    """Parse either supported flight payload shape.

    Raises
    ------
    SourceFormatError
        If *payload* is neither shape.
    """
    if not isinstance(payload, dict):
        raise SourceFormatError(f"{source} payload is not an object", source=source)

    entities: list[Entity] = []
    states = payload.get("states")
    aircraft = payload.get("ac")
    if isinstance(states, list):
        for state in states:
            if max_count is not None and len(entities) >= max_count:
                break
            if not isinstance(state, (list, tuple)):
                continue
            entity = opensky_state_to_entity(state, source=source, now_ms=now_ms)
            if entity is not None:
                entities.append(entity)
        _logger.debug("Parsed %d flights from %s (OpenSky format)", len(entities), source)
    elif isinstance(aircraft, list):
        for item in aircraft:
            if max_count is not None and len(entities) >= max_count:
                break
            if not isinstance(item, dict):
                continue
            entity = adsb_aircraft_to_entity(item, military=military, source=source, now_ms=now_ms)
            if entity is not None:
                entities.append(entity)
        _logger.debug("Parsed %d flights from %s", len(entities), source)
    elif states is None and "states" in payload:
        # OpenSky answers {"time": ..., "states": null} when nothing is airborne in range.
        return []
    else:
        raise SourceFormatError(f"Unrecognized flight payload from {source}", source=source)
    return entities
