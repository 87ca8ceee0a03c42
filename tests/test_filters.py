from __future__ import annotations

import pytest

from pygeotrack.filters import apply_filter, matches
from pygeotrack.models import Entity, EntityType, FilterCriteria, Region, TimeWindow


def _entity(entity_id: str, **overrides: object) -> Entity:
    fields: dict[str, object] = {
        "id": entity_id,
        "type": EntityType.VESSEL,
        "lat": 60.0,
        "lng": 25.0,
        "speed": 20.0,
        "observed_at": 1_000,
    }
    fields.update(overrides)
    return Entity.model_validate(fields)


def test_speed_min_keeps_faster_entity() -> None:
    entities = [_entity("slow", speed=40.0), _entity("fast", speed=60.0)]

    filtered = apply_filter(entities, FilterCriteria(speed_min=50.0))

    assert [entity.id for entity in filtered] == ["fast"]
    assert len(entities) == 2


def test_none_and_empty_criteria_pass_everything() -> None:
    entities = [_entity("a"), _entity("b", type=EntityType.AIRCRAFT)]

    assert apply_filter(entities, None) == entities
    assert apply_filter(entities, FilterCriteria()) == entities
    assert apply_filter(entities, FilterCriteria(types=())) == entities


def test_types_filter() -> None:
    entities = [_entity("ship"), _entity("plane", type=EntityType.AIRCRAFT), _entity("sat", type=EntityType.SATELLITE)]

    filtered = apply_filter(entities, FilterCriteria(types=(EntityType.AIRCRAFT, EntityType.SATELLITE)))

    assert [entity.id for entity in filtered] == ["plane", "sat"]


@pytest.mark.parametrize(
    ("speed", "expected"),
    [(9.9, False), (10.0, True), (30.0, True), (30.1, False)],
)
def test_speed_bounds_are_inclusive(speed: float, expected: bool) -> None:
    assert matches(_entity("a", speed=speed), FilterCriteria(speed_min=10.0, speed_max=30.0)) is expected


@pytest.mark.parametrize(
    ("lat", "lng", "expected"),
    [(60.0, 25.0, True), (65.0, 20.0, True), (55.0, 30.0, True), (65.1, 25.0, False), (60.0, 19.9, False)],
)
def test_region_bounds_are_inclusive(lat: float, lng: float, expected: bool) -> None:
    region = Region(north=65.0, south=55.0, east=30.0, west=20.0)
    assert matches(_entity("a", lat=lat, lng=lng), FilterCriteria(region=region)) is expected


def test_time_window() -> None:
    window = FilterCriteria(time_window=TimeWindow(start=1_000, end=2_000))

    assert matches(_entity("a", observed_at=1_000), window)
    assert matches(_entity("a", observed_at=2_000), window)
    assert not matches(_entity("a", observed_at=999), window)
    assert not matches(_entity("a", observed_at=2_001), window)


def test_criteria_combine_with_and() -> None:
    criteria = FilterCriteria(types=(EntityType.VESSEL,), speed_max=25.0)
    entities = [
        _entity("slow-ship", speed=10.0),
        _entity("fast-ship", speed=40.0),
        _entity("slow-plane", type=EntityType.AIRCRAFT, speed=10.0),
    ]

    assert [entity.id for entity in apply_filter(entities, criteria)] == ["slow-ship"]


def test_criteria_parse_from_wire_keys() -> None:
    criteria = FilterCriteria.model_validate(
        {"types": ["vessel"], "speedMin": 50, "region": {"north": 1, "south": 0, "east": 1, "west": 0}}
    )

    assert criteria.types == (EntityType.VESSEL,)
    assert criteria.speed_min == 50.0
    assert criteria.region is not None and criteria.region.north == 1.0


def test_filtering_is_repeatable_and_leaves_input_alone() -> None:
    entities = [
        _entity("slow-ship", speed=10.0),
        _entity("fast-ship", speed=40.0),
        _entity("plane", type=EntityType.AIRCRAFT, speed=800.0, lat=48.0),
    ]
    before = list(entities)
    vessels = FilterCriteria(types=(EntityType.VESSEL,), speed_min=20.0)
    northern = FilterCriteria(region=Region(north=50.0, south=45.0, east=30.0, west=20.0))

    first = apply_filter(entities, vessels)
    other = apply_filter(entities, northern)
    again = apply_filter(entities, vessels)

    assert first == again == [entities[1]]
    assert other == [entities[2]]
    assert entities == before
