"""Admission and simulation policy.

Pure functions; the store calls them but never the other way round.
"""

from __future__ import annotations

import random

from pygeotrack._constants import SIM_LATITUDE_LIMIT
from pygeotrack.geo import clamp_latitude
from pygeotrack.models import Entity

LIVE_SIMULATION_PROBABILITY = 0.1


def admit(entity: Entity) -> Entity:
    """Normalize an entity entering the store.

    Longitude wrapping, heading normalization and non-negative speed and
    altitude are already enforced by the model; the store additionally keeps
    latitudes inside the simulation band.
    """
    lat = clamp_latitude(entity.lat, SIM_LATITUDE_LIMIT)
    if lat == entity.lat:
        return entity
    return entity.model_copy(update={"lat": lat})


def should_simulate(entity: Entity, rng: random.Random) -> bool:
    """Whether a sampled entity is advanced by the simulation tick.

    Live entities are refreshed by resync; they are only nudged occasionally
    so they do not sit frozen between resyncs.
    """
    if not entity.is_live:
        return True
    return rng.random() < LIVE_SIMULATION_PROBABILITY
