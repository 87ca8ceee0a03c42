"""Single-pass density grouping.

Entities are visited in input order. An unvisited entity with at least two
unvisited neighbours within 100 km seeds a cluster made of itself and those
neighbours; every member is then marked visited. This is not DBSCAN (no
core-point expansion) and the result depends on input order, but it is
deterministic for a given order.
"""

from __future__ import annotations

import bisect
import logging
import math
from collections.abc import Sequence

from pygeotrack._constants import CLUSTER_RADIUS_KM, MIN_CLUSTER_SIZE
from pygeotrack.geo import KM_PER_DEGREE_LAT, haversine_km
from pygeotrack.models import Centroid, Cluster, Entity, EntityType

_logger = logging.getLogger(__name__)


class _LatitudeIndex:
    """Entities sorted by latitude for band lookups.

    ``candidates`` returns input positions in input order, so scanning them
    visits neighbours exactly as a full scan would.
    """

    def __init__(self, entities: Sequence[Entity]) -> None:
        order = sorted(range(len(entities)), key=lambda i: entities[i].lat)
        self._positions = order
        self._lats = [entities[i].lat for i in order]

    def candidates(self, lat: float, band: float) -> list[int]:
        lo = bisect.bisect_left(self._lats, lat - band)
        hi = bisect.bisect_right(self._lats, lat + band)
        return sorted(self._positions[lo:hi])


def build_cluster(cluster_id: str, members: Sequence[Entity]) -> Cluster:
    """Centroid (arithmetic mean), radius (farthest member) and density of *members*."""
    centroid_lat = sum(entity.lat for entity in members) / len(members)
    centroid_lng = sum(entity.lng for entity in members) / len(members)
    radius = max(haversine_km(centroid_lat, centroid_lng, entity.lat, entity.lng) for entity in members)
    return Cluster(
        id=cluster_id,
        centroid=Centroid(lat=centroid_lat, lng=centroid_lng),
        entity_ids=tuple(entity.id for entity in members),
        radius=radius,
        density=len(members) / (math.pi * radius * radius + 1),
    )


class ClusterEngine:
    """Recomputes clusters over the full entity set on every call."""

    def __init__(self, *, radius_km: float = CLUSTER_RADIUS_KM, min_size: int = MIN_CLUSTER_SIZE) -> None:
        self._radius_km = radius_km
        self._min_size = min_size
        self._clusters: list[Cluster] = []

    @property
    def clusters(self) -> list[Cluster]:
        """Result of the last :meth:`compute` call."""
        return list(self._clusters)

    def compute(self, entities: Sequence[Entity]) -> list[Cluster]:
        """Group non-event *entities*; the previous result is replaced."""
        movable = [entity for entity in entities if entity.type is not EntityType.POINT_EVENT]
        index = _LatitudeIndex(movable)
        # Points farther apart in latitude alone cannot be within the radius.
        band = self._radius_km / KM_PER_DEGREE_LAT

        visited = [False] * len(movable)
        clusters: list[Cluster] = []
        for i, entity in enumerate(movable):
            if visited[i]:
                continue
            neighbours = [
                j
                for j in index.candidates(entity.lat, band)
                if j != i
                and not visited[j]
                and haversine_km(entity.lat, entity.lng, movable[j].lat, movable[j].lng) < self._radius_km
            ]
            if len(neighbours) < self._min_size - 1:
                continue
            members = [i, *neighbours]
            for j in members:
                visited[j] = True
            clusters.append(build_cluster(f"cluster-{len(clusters)}", [movable[j] for j in members]))

        self._clusters = clusters
        _logger.debug("Computed %d clusters over %d entities", len(clusters), len(movable))
        return list(clusters)
