"""AIS vessel feed parsing (Digitraffic GeoJSON locations)."""

from __future__ import annotations

import logging
from typing import Any

from pygeotrack.exceptions import SourceFormatError
from pygeotrack.ingestion.normalize import (
    is_valid_position,
    knots_to_kmh,
    prune_metadata,
    safe_float,
    safe_int,
)
from pygeotrack.models import Entity, EntityType, Provenance

_logger = logging.getLogger(__name__)

_NAV_STATUS = {0: "underway", 1: "anchored"}
# AIS reports 360 / 511 when course or heading is unavailable.
_UNAVAILABLE_HEADINGS = frozenset({360.0, 511.0})


def _heading(properties: dict[str, Any]) -> float:
    for key in ("cog", "heading"):
        value = safe_float(properties.get(key))
        if value is not None and value not in _UNAVAILABLE_HEADINGS:
            return value
    return 0.0


def feature_to_entity(feature: dict[str, Any], *, source: str, now_ms: int) -> Entity | None:
    """Convert one GeoJSON feature; ``None`` when it has no usable position."""
    geometry = feature.get("geometry")
    coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return None
    lng = safe_float(coordinates[0])
    lat = safe_float(coordinates[1])
    if not is_valid_position(lat, lng):
        return None
    assert lat is not None and lng is not None  # noqa: S101

    properties = feature.get("properties")
    props: dict[str, Any] = properties if isinstance(properties, dict) else {}
    mmsi = safe_int(feature.get("mmsi") or props.get("mmsi"))
    if mmsi is None:
        return None

    nav_stat = safe_int(props.get("navStat"))
    return Entity(
        id=f"ship-{mmsi}",
        type=EntityType.VESSEL,
        lat=lat,
        lng=lng,
        altitude=0.0,
        speed=knots_to_kmh(props.get("sog")),
        heading=_heading(props),
        observed_at=now_ms,
        metadata=prune_metadata(
            {
                "label": f"MMSI-{mmsi}",
                "provenance": Provenance.LIVE.value,
                "source": source,
                "status": _NAV_STATUS.get(nav_stat, "active") if nav_stat is not None else "active",
                "category": "vessel",
                "military": False,
                "mmsi": mmsi,
            }
        ),
    )


def parse_ais_payload(payload: Any, *, source: str, now_ms: int, max_count: int | None = None) -> list[Entity]:
    """Parse a GeoJSON ``FeatureCollection`` of vessel locations.

    Raises
    ------
    SourceFormatError
        If *payload* carries no ``features`` list.
    """
    features = payload.get("features") if isinstance(payload, dict) else None
    if not isinstance(features, list):
        raise SourceFormatError(f"Unrecognized AIS payload from {source}", source=source)

    if max_count is not None:
        features = features[:max_count]

    entities: list[Entity] = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        entity = feature_to_entity(feature, source=source, now_ms=now_ms)
        if entity is not None:
            entities.append(entity)
    _logger.debug("Parsed %d vessels from %s", len(entities), source)
    return entities
