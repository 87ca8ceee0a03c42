"""Subscriber-facing filter criteria."""

from __future__ import annotations

from pygeotrack.models._base import GeoBaseModel
from pygeotrack.models.entity import EntityType


class Region(GeoBaseModel):
    """Inclusive lat/lng bounding box."""

    north: float
    south: float
    east: float
    west: float


class TimeWindow(GeoBaseModel):
    """Inclusive observation window in epoch milliseconds."""

    start: int
    end: int


class FilterCriteria(GeoBaseModel):
    """Criteria applied to the entity dimension of outbound messages.

    Every unset field passes everything; set fields are ANDed.
    """

    types: tuple[EntityType, ...] | None = None
    speed_min: float | None = None
    speed_max: float | None = None
    region: Region | None = None
    time_window: TimeWindow | None = None
