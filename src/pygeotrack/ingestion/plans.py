"""Category plans: which live sources feed a category and how gaps are filled."""

from __future__ import annotations

import dataclasses
from enum import StrEnum

from pygeotrack._constants import (
    ADSB_LOL_ALL_URL,
    ADSB_LOL_MILITARY_URL,
    CELESTRAK_TLE_URL,
    DIGITRAFFIC_AIS_URL,
    OPENSKY_STATES_URL,
)
from pygeotrack._transport import Transport
from pygeotrack.config import GeoTrackConfig
from pygeotrack.ingestion.sources import AisSource, CelestrakSource, EntitySource, FlightFeedSource
from pygeotrack.ingestion.synthetic import (
    NAVAL_FLEET_SIZE,
    SHIPPING_FLEET_SIZE,
    SyntheticGenerator,
    generate_city_vehicles,
    generate_events,
    generate_flights,
    generate_naval_vessels,
    generate_satellites,
    generate_shipping_vessels,
)


class SourceCategory(StrEnum):
    COMMERCIAL_FLIGHTS = "commercial-flights"
    MILITARY_FLIGHTS = "military-flights"
    SATELLITES = "satellites"
    VESSELS = "vessels"
    GROUND_VEHICLES = "ground-vehicles"
    POINT_EVENTS = "point-events"


@dataclasses.dataclass(frozen=True)
class CategoryPlan:
    """How one category is populated.

    Parameters
    ----------
    category : SourceCategory
        Category key; also the key of the store's live-capable flags.
    sources : tuple of EntitySource
        Live sources, tried in order until one returns entities.
    fallback : SyntheticGenerator or None
        Fills the category when every live source comes back empty.
    fallback_count : int
        ``count`` passed to *fallback*.
    top_up_to : int
        When the live result is non-empty but smaller than this, *fallback*
        adds the difference. ``0`` disables topping up.
    extras : tuple of (SyntheticGenerator, int)
        Generators that always contribute at bootstrap, live or not.
    """

    category: SourceCategory
    sources: tuple[EntitySource, ...] = ()
    fallback: SyntheticGenerator | None = None
    fallback_count: int = 0
    top_up_to: int = 0
    extras: tuple[tuple[SyntheticGenerator, int], ...] = ()

    @property
    def has_live_sources(self) -> bool:
        return bool(self.sources)


def build_default_plans(config: GeoTrackConfig, transport: Transport | None) -> list[CategoryPlan]:
    """Standard plan set.

    With ``transport=None`` or ``config.live_sources_enabled`` off, no live
    source is configured and every category is synthetic.
    """
    live = transport is not None and config.live_sources_enabled

    commercial: tuple[EntitySource, ...] = ()
    military: tuple[EntitySource, ...] = ()
    satellites: tuple[EntitySource, ...] = ()
    vessels: tuple[EntitySource, ...] = ()
    if live:
        assert transport is not None  # noqa: S101
        commercial = (
            FlightFeedSource(
                name="opensky",
                url=OPENSKY_STATES_URL,
                transport=transport,
                timeout=config.fetch_timeout,
                max_count=config.max_flights,
            ),
            FlightFeedSource(
                name="adsb.lol",
                url=ADSB_LOL_ALL_URL,
                transport=transport,
                timeout=config.fetch_timeout,
                max_count=config.max_flights,
            ),
        )
        military = (
            FlightFeedSource(
                name="adsb.lol/mil",
                url=ADSB_LOL_MILITARY_URL,
                transport=transport,
                timeout=config.fetch_timeout,
                military=True,
            ),
        )
        satellites = (
            CelestrakSource(
                name="celestrak",
                url=CELESTRAK_TLE_URL,
                transport=transport,
                timeout=config.slow_fetch_timeout,
                max_count=config.max_satellites,
            ),
        )
        vessels = (
            AisSource(
                name="digitraffic",
                url=DIGITRAFFIC_AIS_URL,
                transport=transport,
                timeout=config.slow_fetch_timeout,
                max_count=config.max_ships,
            ),
        )

    return [
        CategoryPlan(
            category=SourceCategory.COMMERCIAL_FLIGHTS,
            sources=commercial,
            fallback=generate_flights,
            fallback_count=500,
        ),
        CategoryPlan(category=SourceCategory.MILITARY_FLIGHTS, sources=military),
        CategoryPlan(
            category=SourceCategory.SATELLITES,
            sources=satellites,
            fallback=generate_satellites,
            fallback_count=80,
            top_up_to=80,
        ),
        CategoryPlan(
            category=SourceCategory.VESSELS,
            sources=vessels,
            extras=(
                (generate_shipping_vessels, SHIPPING_FLEET_SIZE),
                (generate_naval_vessels, NAVAL_FLEET_SIZE),
            ),
        ),
        CategoryPlan(
            category=SourceCategory.GROUND_VEHICLES,
            fallback=generate_city_vehicles,
            fallback_count=100,
        ),
        CategoryPlan(
            category=SourceCategory.POINT_EVENTS,
            fallback=generate_events,
            fallback_count=30,
        ),
    ]
