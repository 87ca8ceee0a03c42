"""Anomaly model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pygeotrack.models._base import GeoBaseModel, now_ms


class AnomalyKind(StrEnum):
    SPEED_CHANGE = "speed-change"
    ROUTE_DEVIATION = "route-deviation"
    PROXIMITY_ALERT = "proximity-alert"
    ALTITUDE_ANOMALY = "altitude-anomaly"
    STATIONARY = "stationary"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Anomaly(GeoBaseModel):
    """A typed finding raised by the anomaly detector.

    ``lat``/``lng`` carry the entity location, or the midpoint of both
    entities for a proximity alert.
    """

    id: str
    entity_id: str
    kind: AnomalyKind
    severity: Severity
    message: str
    timestamp: int = Field(default_factory=now_ms)
    lat: float
    lng: float
