from __future__ import annotations

import random

import pytest

from pygeotrack.ingestion.synthetic import (
    EVENT_CATEGORIES,
    NAVAL_FLEET_SIZE,
    SHIPPING_FLEET_SIZE,
    generate_city_vehicles,
    generate_events,
    generate_flights,
    generate_naval_vessels,
    generate_satellites,
    generate_shipping_vessels,
)
from pygeotrack.models import EntityType

NOW = 1_700_000_000_000

GENERATORS = [
    (generate_flights, 50, EntityType.AIRCRAFT, "sim-flight-"),
    (generate_satellites, 40, EntityType.SATELLITE, "sim-sat-"),
    (generate_shipping_vessels, SHIPPING_FLEET_SIZE, EntityType.VESSEL, "ship-sim-"),
    (generate_naval_vessels, NAVAL_FLEET_SIZE, EntityType.VESSEL, "ship-mil-"),
    (generate_events, 30, EntityType.POINT_EVENT, "event-"),
]


@pytest.mark.parametrize(("generator", "count", "entity_type", "prefix"), GENERATORS)
def test_generators_produce_requested_count(generator, count, entity_type, prefix) -> None:  # type: ignore[no-untyped-def]
    entities = generator(count, random.Random(1), NOW)

    assert len(entities) == count
    assert len({entity.id for entity in entities}) == count
    for entity in entities:
        assert entity.type is entity_type
        assert entity.id.startswith(prefix)
        assert entity.observed_at == NOW
        assert entity.metadata["provenance"] == "synthetic"
        assert -90.0 <= entity.lat <= 90.0
        assert -180.0 < entity.lng <= 180.0
        assert 0.0 <= entity.heading < 360.0


@pytest.mark.parametrize(("generator", "count", "entity_type", "prefix"), GENERATORS)
def test_generators_are_deterministic_for_a_seed(generator, count, entity_type, prefix) -> None:  # type: ignore[no-untyped-def]
    first = generator(count, random.Random(7), NOW)
    second = generator(count, random.Random(7), NOW)
    assert first == second


def test_flight_envelope() -> None:
    for flight in generate_flights(100, random.Random(3), NOW):
        assert 9000.0 <= flight.altitude <= 12500.0
        assert 750.0 <= flight.speed <= 920.0
        assert flight.metadata["category"] == "commercial"


def test_satellite_envelope() -> None:
    for sat in generate_satellites(100, random.Random(3), NOW):
        assert 200_000.0 <= sat.altitude <= 500_000.0
        assert 25_000.0 <= sat.speed <= 28_000.0
        assert -70.0 <= sat.lat <= 70.0


def test_naval_vessels_are_military() -> None:
    vessels = generate_naval_vessels(NAVAL_FLEET_SIZE, random.Random(3), NOW)
    assert all(vessel.metadata["military"] is True for vessel in vessels)
    assert {vessel.metadata["status"] for vessel in vessels} == {"in_port", "patrol"}


def test_shipping_vessels_scale_with_count() -> None:
    assert len(generate_shipping_vessels(11, random.Random(3), NOW)) == 11


def test_city_vehicles_are_bound_to_cities() -> None:
    vehicles = generate_city_vehicles(10, random.Random(3), NOW)

    assert vehicles
    for vehicle in vehicles:
        assert vehicle.type is EntityType.GROUND_VEHICLE
        assert vehicle.id.startswith("vehicle-")
        assert vehicle.metadata["city"]
        assert vehicle.metadata["plate"]
    # Every city gets at least half the base count.
    per_city: dict[str, int] = {}
    for vehicle in vehicles:
        per_city[vehicle.metadata["city"]] = per_city.get(vehicle.metadata["city"], 0) + 1
    assert min(per_city.values()) >= 5


def test_events_are_stationary_and_categorized() -> None:
    events = generate_events(10, random.Random(3), NOW)
    assert all(event.speed == 0.0 for event in events)
    assert [event.metadata["category"] for event in events[:5]] == list(EVENT_CATEGORIES)
