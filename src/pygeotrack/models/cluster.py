"""Cluster model."""

from __future__ import annotations

from pygeotrack.models._base import GeoBaseModel


class Centroid(GeoBaseModel):
    lat: float
    lng: float


class Cluster(GeoBaseModel):
    """A spatial grouping of entities.

    Clusters are recomputed from scratch on every pass; ``id`` does not
    identify the same group across passes.
    """

    id: str
    centroid: Centroid
    entity_ids: tuple[str, ...]
    radius: float
    """Largest great-circle distance (km) from the centroid to a member."""
    density: float
    """Members per km², ``size / (pi * radius**2 + 1)``."""
