"""Subscriber-facing entity filtering."""

from __future__ import annotations

from collections.abc import Iterable

from pygeotrack.models import Entity, FilterCriteria


def matches(entity: Entity, criteria: FilterCriteria) -> bool:
    """Whether *entity* passes every set criterion (bounds are inclusive)."""
    if criteria.types and entity.type not in criteria.types:
        return False
    if criteria.speed_min is not None and entity.speed < criteria.speed_min:
        return False
    if criteria.speed_max is not None and entity.speed > criteria.speed_max:
        return False
    region = criteria.region
    if region is not None and not (
        region.south <= entity.lat <= region.north and region.west <= entity.lng <= region.east
    ):
        return False
    window = criteria.time_window
    if window is not None and not window.start <= entity.observed_at <= window.end:
        return False
    return True


def apply_filter(entities: Iterable[Entity], criteria: FilterCriteria | None) -> list[Entity]:
    """Return the entities matching *criteria*, preserving order.

    ``None`` or an empty criteria object passes everything. The input is
    never modified.
    """
    if criteria is None:
        return list(entities)
    return [entity for entity in entities if matches(entity, criteria)]
