"""Live entity sources.

Each source wraps one HTTP endpoint and one parser. Sources raise
:class:`~pygeotrack.exceptions.SourceUnavailableError` (or its
``SourceFormatError`` subclass) on any failure; deciding what to do about
it is the store's job.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from pygeotrack._transport import Transport
from pygeotrack.ingestion.adsb import parse_flight_payload
from pygeotrack.ingestion.ais import parse_ais_payload
from pygeotrack.ingestion.satellites import tle_to_entities
from pygeotrack.models import Entity, now_ms


@runtime_checkable
class EntitySource(Protocol):
    """Anything the store can fetch entities from."""

    @property
    def name(self) -> str: ...

    @property
    def timeout(self) -> float: ...

    async def fetch(self) -> list[Entity]: ...


@dataclasses.dataclass(frozen=True)
class FlightFeedSource:
    """OpenSky or readsb-compatible (adsb.lol) flight feed."""

    name: str
    url: str
    transport: Transport
    timeout: float
    max_count: int | None = None
    military: bool = False
    clock: Callable[[], int] = now_ms

    async def fetch(self) -> list[Entity]:
        payload = await self.transport.get_json(self.url, source=self.name, timeout=self.timeout)
        return parse_flight_payload(
            payload,
            source=self.name,
            now_ms=self.clock(),
            max_count=self.max_count,
            military=self.military,
        )


@dataclasses.dataclass(frozen=True)
class AisSource:
    """Digitraffic AIS vessel locations."""

    name: str
    url: str
    transport: Transport
    timeout: float
    max_count: int | None = None
    clock: Callable[[], int] = now_ms

    async def fetch(self) -> list[Entity]:
        payload = await self.transport.get_json(self.url, source=self.name, timeout=self.timeout)
        return parse_ais_payload(payload, source=self.name, now_ms=self.clock(), max_count=self.max_count)


@dataclasses.dataclass(frozen=True)
class CelestrakSource:
    """CelesTrak TLE group, propagated to the fetch time."""

    name: str
    url: str
    transport: Transport
    timeout: float
    max_count: int | None = None
    clock: Callable[[], int] = now_ms

    async def fetch(self) -> list[Entity]:
        text = await self.transport.get_text(self.url, source=self.name, timeout=self.timeout)
        return tle_to_entities(text, source=self.name, now_ms=self.clock(), max_count=self.max_count)
