"""Kinematic simulation step.

Dead reckoning on a flat lat/lng plane: one degree is taken as 111 km in
both axes, so a step of ``speed / 111 * dt / 3600`` degrees is split along
the heading.
"""

from __future__ import annotations

import math
import random

from pygeotrack._constants import KM_PER_DEGREE, SIM_LATITUDE_LIMIT
from pygeotrack.geo import clamp_latitude, normalize_heading, wrap_longitude
from pygeotrack.models import Entity, EntityType

CITY_DRIFT_LIMIT_DEGREES = 0.15

# Large perturbation mix: speed surge, sharp turn, otherwise altitude drop.
_SPEED_SURGE_SHARE = 0.3
_SHARP_TURN_SHARE = 0.3


def move_entity(
    entity: Entity,
    rng: random.Random,
    *,
    dt_seconds: float,
    anomaly_probability: float,
    now_ms: int,
) -> Entity:
    """Advance *entity* by one simulation step and return the new state.

    Parameters
    ----------
    entity : Entity
        Current state; never modified.
    rng : random.Random
        Source of all randomness in the step.
    dt_seconds : float
        Simulated time elapsed since the previous step.
    anomaly_probability : float
        Chance that the step applies one large perturbation instead of the
        usual small heading and speed jitter.
    now_ms : int
        Timestamp stamped on the result.
    """
    if entity.type is EntityType.POINT_EVENT:
        return entity.model_copy(update={"observed_at": now_ms})

    step_deg = entity.speed / KM_PER_DEGREE * (dt_seconds / 3600.0)
    heading_rad = math.radians(entity.heading)
    speed = entity.speed
    altitude = entity.altitude

    if rng.random() < anomaly_probability:
        roll = rng.random()
        if roll < _SPEED_SURGE_SHARE:
            speed *= rng.uniform(2.0, 5.0)
        elif roll < _SPEED_SURGE_SHARE + _SHARP_TURN_SHARE:
            heading_rad += rng.uniform(-math.pi / 2, math.pi / 2)
        else:
            altitude *= rng.uniform(0.3, 0.6)
    else:
        heading_rad += rng.uniform(-0.05, 0.05)
        speed += rng.uniform(-2.0, 2.0)

    new_lat = entity.lat + math.cos(heading_rad) * step_deg
    new_lng = entity.lng + math.sin(heading_rad) * step_deg

    if entity.type is EntityType.GROUND_VEHICLE and entity.metadata.get("city"):
        # city-bound traffic: an axis that jumps too far stays put
        if abs(new_lat - entity.lat) > CITY_DRIFT_LIMIT_DEGREES:
            new_lat = entity.lat
        if abs(new_lng - entity.lng) > CITY_DRIFT_LIMIT_DEGREES:
            new_lng = entity.lng

    return entity.model_copy(
        update={
            "lat": clamp_latitude(new_lat, SIM_LATITUDE_LIMIT),
            "lng": wrap_longitude(new_lng),
            "speed": max(0.0, speed),
            "altitude": max(0.0, altitude),
            "heading": normalize_heading(math.degrees(heading_rad)),
            "observed_at": now_ms,
        }
    )
