"""Tracked entity model."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from pygeotrack.geo import normalize_heading, wrap_longitude
from pygeotrack.models._base import GeoBaseModel, now_ms


class EntityType(StrEnum):
    AIRCRAFT = "aircraft"
    VESSEL = "vessel"
    SATELLITE = "satellite"
    GROUND_VEHICLE = "ground-vehicle"
    POINT_EVENT = "point-event"


class Provenance(StrEnum):
    """Where an entity's state came from."""

    LIVE = "live"
    SYNTHETIC = "synthetic"


class Entity(GeoBaseModel):
    """A moving (or stationary) object on the map.

    Parameters
    ----------
    id : str
        Globally unique id within the store (e.g. ``"adsb-4ca1fa"``).
    type : EntityType
        Entity category.
    lat : float
        Latitude in degrees.
    lng : float
        Longitude in degrees, wrapped into ``(-180, 180]``.
    altitude : float
        Altitude in metres.
    speed : float
        Ground speed in km/h.
    heading : float
        Heading in degrees, normalised into ``[0, 360)``.
    observed_at : int
        Epoch milliseconds of the observation.
    metadata : dict
        Open bag: ``label``, ``provenance``, ``source``, ``category``,
        ``military`` plus free-form source fields.
    """

    id: str = Field(min_length=1)
    type: EntityType
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float
    altitude: float = 0.0
    speed: float = 0.0
    heading: float = 0.0
    observed_at: int = Field(default_factory=now_ms)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("lng")
    @classmethod
    def _wrap_lng(cls, value: float) -> float:
        return wrap_longitude(value)

    @field_validator("heading")
    @classmethod
    def _normalize_heading(cls, value: float) -> float:
        return normalize_heading(value)

    @field_validator("altitude", "speed")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return max(0.0, value)

    @property
    def label(self) -> str:
        """Display label, falling back to the id."""
        label = self.metadata.get("label")
        return str(label) if label else self.id

    @property
    def is_live(self) -> bool:
        return self.metadata.get("provenance") == Provenance.LIVE
