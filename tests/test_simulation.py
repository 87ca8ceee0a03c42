from __future__ import annotations

import random

import pytest

from pygeotrack.models import Entity, EntityType
from pygeotrack.state.policy import admit, should_simulate
from pygeotrack.state.simulation import CITY_DRIFT_LIMIT_DEGREES, move_entity

NOW = 1_700_000_000_000


def _entity(**overrides: object) -> Entity:
    fields: dict[str, object] = {
        "id": "e1",
        "type": EntityType.AIRCRAFT,
        "lat": 0.0,
        "lng": 0.0,
        "speed": 111.0,
        "heading": 0.0,
        "altitude": 1000.0,
        "observed_at": 0,
    }
    fields.update(overrides)
    return Entity.model_validate(fields)


def test_dead_reckoning_moves_along_heading() -> None:
    entity = _entity()

    moved = move_entity(entity, random.Random(1), dt_seconds=3600.0, anomaly_probability=0.0, now_ms=NOW)

    # 111 km/h for an hour is about one degree north
    assert 0.97 < moved.lat < 1.02
    assert abs(moved.lng) < 0.06
    assert 109.0 <= moved.speed <= 113.0
    assert moved.altitude == 1000.0
    assert moved.observed_at == NOW
    assert entity.lat == 0.0


def test_point_events_only_refresh_timestamp() -> None:
    event = _entity(type=EntityType.POINT_EVENT, speed=0.0, lat=12.0, lng=34.0)

    moved = move_entity(event, random.Random(1), dt_seconds=1.5, anomaly_probability=1.0, now_ms=NOW)

    assert (moved.lat, moved.lng, moved.speed, moved.heading) == (12.0, 34.0, 0.0, 0.0)
    assert moved.observed_at == NOW


def test_latitude_is_clamped() -> None:
    moved = move_entity(_entity(lat=84.9, speed=1000.0), random.Random(1), dt_seconds=3600.0, anomaly_probability=0.0, now_ms=NOW)
    assert moved.lat == 85.0


def test_longitude_wraps_across_antimeridian() -> None:
    moved = move_entity(
        _entity(lng=179.9, heading=90.0, speed=1000.0),
        random.Random(1),
        dt_seconds=3600.0,
        anomaly_probability=0.0,
        now_ms=NOW,
    )
    assert -180.0 < moved.lng < 0.0


def test_city_vehicle_drift_is_capped() -> None:
    rng = random.Random(5)
    vehicle = _entity(type=EntityType.GROUND_VEHICLE, lat=51.5, lng=-0.12, speed=500.0, metadata={"city": "London"})

    for _ in range(20):
        moved = move_entity(vehicle, rng, dt_seconds=3600.0, anomaly_probability=0.0, now_ms=NOW)
        assert abs(moved.lat - vehicle.lat) <= CITY_DRIFT_LIMIT_DEGREES
        assert abs(moved.lng - vehicle.lng) <= CITY_DRIFT_LIMIT_DEGREES


def test_anomalous_steps_apply_one_large_perturbation() -> None:
    rng = random.Random(11)
    entity = _entity(speed=100.0, altitude=5000.0, heading=180.0)
    seen = set()

    for _ in range(200):
        moved = move_entity(entity, rng, dt_seconds=1.5, anomaly_probability=1.0, now_ms=NOW)
        if moved.speed != entity.speed:
            assert 200.0 <= moved.speed <= 500.0
            assert moved.altitude == entity.altitude
            seen.add("speed")
        elif moved.altitude != entity.altitude:
            assert 1500.0 <= moved.altitude <= 3000.0
            assert moved.heading == pytest.approx(entity.heading)
            seen.add("altitude")
        else:
            assert moved.heading != entity.heading
            seen.add("heading")

    assert seen == {"speed", "altitude", "heading"}


def test_invariants_hold_over_many_steps() -> None:
    rng = random.Random(2)
    entity = _entity(lat=80.0, lng=170.0, heading=45.0, speed=2000.0)

    for _ in range(500):
        entity = move_entity(entity, rng, dt_seconds=60.0, anomaly_probability=0.2, now_ms=NOW)
        assert -85.0 <= entity.lat <= 85.0
        assert -180.0 < entity.lng <= 180.0
        assert 0.0 <= entity.heading < 360.0
        assert entity.speed >= 0.0
        assert entity.altitude >= 0.0


def test_admit_clamps_latitude() -> None:
    assert admit(_entity(lat=89.0)).lat == 85.0
    entity = _entity(lat=10.0)
    assert admit(entity) is entity


def test_should_simulate_nudges_live_entities_rarely() -> None:
    rng = random.Random(4)
    live = _entity(metadata={"provenance": "live"})
    synthetic = _entity(metadata={"provenance": "synthetic"})

    assert all(should_simulate(synthetic, rng) for _ in range(100))
    moved = sum(should_simulate(live, rng) for _ in range(2000))
    assert 100 < moved < 320
