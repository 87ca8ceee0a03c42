"""Synthetic entity generators.

Every generator has the signature ``(count, rng, now_ms) -> list[Entity]``
so the store can treat them interchangeably as fallbacks or extras. All
randomness comes from the supplied ``random.Random``; a seeded instance
yields the same entities every time.
"""

from __future__ import annotations

import dataclasses
import math
import random
import string
from collections.abc import Callable, Sequence

from pygeotrack._constants import KNOTS_TO_KMH
from pygeotrack.models import Entity, EntityType, Provenance

SyntheticGenerator = Callable[[int, random.Random, int], list[Entity]]


@dataclasses.dataclass(frozen=True)
class _Place:
    name: str
    lat: float
    lng: float
    weight: float = 1.0
    spread: float = 0.0
    code: str = ""


_AIRPORTS: tuple[_Place, ...] = (
    _Place("New York JFK", 40.64, -73.78, code="JFK"),
    _Place("Los Angeles", 33.94, -118.41, code="LAX"),
    _Place("London Heathrow", 51.47, -0.46, code="LHR"),
    _Place("Paris CDG", 49.01, 2.55, code="CDG"),
    _Place("Frankfurt", 50.03, 8.57, code="FRA"),
    _Place("Dubai", 25.25, 55.36, code="DXB"),
    _Place("Tokyo Haneda", 35.55, 139.78, code="HND"),
    _Place("Beijing Capital", 40.08, 116.58, code="PEK"),
    _Place("Singapore Changi", 1.36, 103.99, code="SIN"),
    _Place("Sydney", -33.95, 151.18, code="SYD"),
    _Place("Chicago O'Hare", 41.97, -87.91, code="ORD"),
    _Place("Atlanta", 33.64, -84.43, code="ATL"),
    _Place("Amsterdam", 52.31, 4.77, code="AMS"),
    _Place("Istanbul", 41.28, 28.73, code="IST"),
    _Place("Delhi", 28.56, 77.10, code="DEL"),
    _Place("Sao Paulo", -23.43, -46.47, code="GRU"),
    _Place("Seoul Incheon", 37.46, 126.44, code="ICN"),
    _Place("Bangkok", 13.69, 100.75, code="BKK"),
    _Place("San Francisco", 37.62, -122.38, code="SFO"),
    _Place("Miami", 25.79, -80.29, code="MIA"),
    _Place("Mexico City", 19.44, -99.07, code="MEX"),
    _Place("Johannesburg", -26.13, 28.24, code="JNB"),
    _Place("Doha", 25.26, 51.57, code="DOH"),
    _Place("Munich", 48.35, 11.79, code="MUC"),
)

_AIRLINES = (
    "UAL", "DAL", "AAL", "SWA", "BAW", "AFR", "DLH", "QFA", "ANA",
    "SIA", "CPA", "UAE", "THY", "KLM", "QTR", "ETH", "RYR", "EZY",
)  # fmt: skip

_SATELLITE_NAMES = ("STARLINK", "GPS-IIR", "GOES", "SENTINEL", "LANDSAT", "NOAA", "ISS", "TIANHE", "COSMOS")

# weight = share of the generated fleet, spread = box size in degrees
_SHIPPING_ROUTES: tuple[_Place, ...] = (
    _Place("Strait of Malacca", 1.5, 103.5, weight=30, spread=2),
    _Place("English Channel", 50.5, 0.5, weight=25, spread=1.5),
    _Place("Suez Canal approach", 30.0, 32.5, weight=15, spread=1),
    _Place("Panama Canal approach", 9.0, -79.5, weight=12, spread=1),
    _Place("South China Sea", 14.0, 114.0, weight=35, spread=4),
    _Place("Mediterranean", 36.0, 15.0, weight=25, spread=5),
    _Place("North Atlantic", 45.0, -40.0, weight=20, spread=8),
    _Place("Persian Gulf", 26.0, 52.0, weight=20, spread=2),
    _Place("US East Coast", 35.0, -74.0, weight=20, spread=4),
    _Place("North Sea", 56.0, 3.0, weight=20, spread=3),
)
SHIPPING_FLEET_SIZE = 222

# knots
_CARGO_SPEEDS = {
    "container": (18.0, 26.0),
    "tanker": (10.0, 16.0),
    "cargo": (12.0, 22.0),
    "bulk_carrier": (12.0, 22.0),
    "roro": (12.0, 22.0),
    "lng_carrier": (12.0, 22.0),
}

_NAVAL_BASES: tuple[_Place, ...] = (
    _Place("Norfolk", 36.95, -76.33, weight=8),
    _Place("San Diego", 32.68, -117.23, weight=7),
    _Place("Pearl Harbor", 21.35, -157.97, weight=5),
    _Place("Yokosuka", 35.28, 139.67, weight=6),
    _Place("Portsmouth", 50.80, -1.10, weight=4),
    _Place("Toulon", 43.12, 5.93, weight=4),
    _Place("Sevastopol", 44.62, 33.53, weight=3),
    _Place("Tartus", 34.89, 35.89, weight=2),
    _Place("Changi", 1.32, 104.0, weight=3),
    _Place("Bahrain", 26.23, 50.58, weight=4),
)
NAVAL_FLEET_SIZE = 46

_NAVAL_SPEEDS = {
    "carrier": (25.0, 35.0),
    "submarine": (15.0, 30.0),
    "destroyer": (18.0, 30.0),
    "frigate": (18.0, 30.0),
    "cruiser": (18.0, 30.0),
    "patrol": (18.0, 30.0),
}

# weight = population in millions, spread = city radius in degrees
_CITIES: tuple[_Place, ...] = (
    _Place("New York", 40.7580, -73.9855, weight=8.3, spread=0.10),
    _Place("Los Angeles", 34.0522, -118.2437, weight=3.9, spread=0.12),
    _Place("Chicago", 41.8781, -87.6298, weight=2.7, spread=0.08),
    _Place("Houston", 29.7604, -95.3698, weight=2.3, spread=0.08),
    _Place("San Francisco", 37.7749, -122.4194, weight=0.87, spread=0.05),
    _Place("Washington DC", 38.9072, -77.0369, weight=0.7, spread=0.05),
    _Place("Toronto", 43.6532, -79.3832, weight=2.9, spread=0.06),
    _Place("Mexico City", 19.4326, -99.1332, weight=9.2, spread=0.10),
    _Place("London", 51.5074, -0.1278, weight=8.9, spread=0.09),
    _Place("Paris", 48.8566, 2.3522, weight=2.2, spread=0.06),
    _Place("Berlin", 52.5200, 13.4050, weight=3.6, spread=0.07),
    _Place("Madrid", 40.4168, -3.7038, weight=3.3, spread=0.06),
    _Place("Rome", 41.9028, 12.4964, weight=2.8, spread=0.05),
    _Place("Amsterdam", 52.3676, 4.9041, weight=0.87, spread=0.04),
    _Place("Moscow", 55.7558, 37.6173, weight=12.5, spread=0.10),
    _Place("Istanbul", 41.0082, 28.9784, weight=15.5, spread=0.10),
    _Place("Tokyo", 35.6762, 139.6503, weight=13.9, spread=0.08),
    _Place("Beijing", 39.9042, 116.4074, weight=21.5, spread=0.12),
    _Place("Shanghai", 31.2304, 121.4737, weight=24.8, spread=0.12),
    _Place("Mumbai", 19.0760, 72.8777, weight=12.4, spread=0.06),
    _Place("Delhi", 28.7041, 77.1025, weight=11.0, spread=0.08),
    _Place("Seoul", 37.5665, 126.9780, weight=9.7, spread=0.07),
    _Place("Bangkok", 13.7563, 100.5018, weight=8.3, spread=0.06),
    _Place("Singapore", 1.3521, 103.8198, weight=5.6, spread=0.04),
    _Place("Dubai", 25.2048, 55.2708, weight=3.3, spread=0.06),
    _Place("Sao Paulo", -23.5505, -46.6333, weight=12.3, spread=0.10),
    _Place("Buenos Aires", -34.6037, -58.3816, weight=3.0, spread=0.06),
    _Place("Sydney", -33.8688, 151.2093, weight=5.3, spread=0.07),
    _Place("Cairo", 30.0444, 31.2357, weight=9.5, spread=0.08),
    _Place("Lagos", 6.5244, 3.3792, weight=15.4, spread=0.08),
    _Place("Johannesburg", -26.2041, 28.0473, weight=5.6, spread=0.06),
)

_VEHICLE_MODELS: dict[str, tuple[str, ...]] = {
    "sedan": ("Toyota Camry", "Honda Civic", "BMW 3-Series", "Mercedes C-Class", "VW Golf", "Hyundai Sonata"),
    "suv": ("Toyota RAV4", "Ford Explorer", "BMW X5", "Range Rover", "Jeep Cherokee", "Tesla Model Y"),
    "truck": ("Ford F-150", "Chevy Silverado", "RAM 1500", "Toyota Hilux", "Isuzu NPR"),
    "bus": ("City Transit", "Express Route", "School Bus", "Double Decker", "Shuttle"),
    "taxi": ("Yellow Cab", "Uber", "Lyft", "Bolt", "Grab", "Ola"),
    "motorcycle": ("Honda CBR", "Yamaha R1", "Kawasaki Ninja", "BMW GS", "Ducati"),
    "emergency": ("Ambulance", "Fire Engine", "Police Cruiser", "SWAT", "Rescue"),
    "delivery": ("Amazon Van", "FedEx", "UPS", "DHL", "Royal Mail", "Food Delivery"),
}

# km/h
_VEHICLE_SPEEDS = {
    "emergency": (60.0, 140.0),
    "bus": (15.0, 45.0),
    "motorcycle": (30.0, 100.0),
    "taxi": (20.0, 70.0),
    "delivery": (15.0, 55.0),
}
_DEFAULT_VEHICLE_SPEED = (20.0, 80.0)

EVENT_CATEGORIES = ("seismic", "weather", "signal", "thermal", "rf_emission")


def _synthetic_metadata(label: str, category: str, **extra: object) -> dict[str, object]:
    metadata: dict[str, object] = {
        "label": label,
        "provenance": Provenance.SYNTHETIC.value,
        "source": "synthetic",
        "status": "active",
        "category": category,
        "military": False,
    }
    metadata.update(extra)
    return metadata


def _apportion(total: int, places: Sequence[_Place]) -> list[int]:
    """Split *total* over *places* proportionally to their weight.

    Largest-remainder rounding, so the parts always sum to *total*.
    """
    weight_sum = sum(place.weight for place in places)
    exact = [total * place.weight / weight_sum for place in places]
    counts = [math.floor(value) for value in exact]
    remainder = total - sum(counts)
    by_fraction = sorted(range(len(places)), key=lambda i: exact[i] - counts[i], reverse=True)
    for i in by_fraction[:remainder]:
        counts[i] += 1
    return counts


# ------------------------------------------------------------------
# Aircraft and satellites
# ------------------------------------------------------------------


def generate_flights(count: int, rng: random.Random, now_ms: int) -> list[Entity]:
    """Commercial flights placed along great-circle-ish legs between major airports."""
    entities: list[Entity] = []
    for i in range(count):
        origin, destination = rng.sample(_AIRPORTS, 2)
        progress = rng.random()
        lat = origin.lat + (destination.lat - origin.lat) * progress + rng.uniform(-2.0, 2.0)
        lng = origin.lng + (destination.lng - origin.lng) * progress + rng.uniform(-2.0, 2.0)
        heading = math.degrees(math.atan2(destination.lng - lng, destination.lat - lat))
        callsign = f"{rng.choice(_AIRLINES)}{rng.randint(100, 9099)}"
        entities.append(
            Entity(
                id=f"sim-flight-{i}",
                type=EntityType.AIRCRAFT,
                lat=lat,
                lng=lng,
                altitude=rng.uniform(9000.0, 12500.0),
                speed=rng.uniform(750.0, 920.0),
                heading=heading,
                observed_at=now_ms,
                metadata=_synthetic_metadata(
                    callsign,
                    "commercial",
                    origin=f"{origin.code} {origin.name}",
                    destination=f"{destination.code} {destination.name}",
                ),
            )
        )
    return entities


def generate_satellites(count: int, rng: random.Random, now_ms: int) -> list[Entity]:
    """Low-earth-orbit satellites scattered between 70S and 70N."""
    return [
        Entity(
            id=f"sim-sat-{i}",
            type=EntityType.SATELLITE,
            lat=rng.uniform(-70.0, 70.0),
            lng=rng.uniform(-180.0, 180.0),
            altitude=rng.uniform(200_000.0, 500_000.0),
            speed=rng.uniform(25_000.0, 28_000.0),
            heading=rng.uniform(0.0, 360.0),
            observed_at=now_ms,
            metadata=_synthetic_metadata(
                f"{_SATELLITE_NAMES[i % len(_SATELLITE_NAMES)]}-{rng.randint(1000, 9999)}",
                "satellite",
            ),
        )
        for i in range(count)
    ]


# ------------------------------------------------------------------
# Vessels
# ------------------------------------------------------------------


def generate_shipping_vessels(count: int, rng: random.Random, now_ms: int) -> list[Entity]:
    """Merchant ships spread over the busiest shipping lanes."""
    entities: list[Entity] = []
    for route, route_count in zip(_SHIPPING_ROUTES, _apportion(count, _SHIPPING_ROUTES), strict=True):
        for _ in range(route_count):
            ship_type = rng.choice(tuple(_CARGO_SPEEDS))
            index = len(entities)
            entities.append(
                Entity(
                    id=f"ship-sim-{index}",
                    type=EntityType.VESSEL,
                    lat=route.lat + (rng.random() - 0.5) * route.spread,
                    lng=route.lng + (rng.random() - 0.5) * route.spread,
                    altitude=0.0,
                    speed=rng.uniform(*_CARGO_SPEEDS[ship_type]) * KNOTS_TO_KMH,
                    heading=rng.uniform(0.0, 360.0),
                    observed_at=now_ms,
                    metadata=_synthetic_metadata(
                        f"{ship_type.upper().replace('_', '')}-{1001 + index}",
                        ship_type,
                        status="underway",
                        route=route.name,
                    ),
                )
            )
    return entities


def generate_naval_vessels(count: int, rng: random.Random, now_ms: int) -> list[Entity]:
    """Warships around major fleet bases; half in port, half out on patrol."""
    entities: list[Entity] = []
    for base, base_count in zip(_NAVAL_BASES, _apportion(count, _NAVAL_BASES), strict=True):
        for i in range(base_count):
            in_port = i < base_count / 2
            distance = 0.5 if in_port else rng.uniform(3.0, 8.0)
            angle = rng.uniform(0.0, 2.0 * math.pi)
            ship_type = rng.choice(tuple(_NAVAL_SPEEDS))
            index = len(entities)
            entities.append(
                Entity(
                    id=f"ship-mil-{index}",
                    type=EntityType.VESSEL,
                    lat=base.lat + math.sin(angle) * distance,
                    lng=base.lng + math.cos(angle) * distance,
                    altitude=0.0,
                    speed=rng.uniform(*_NAVAL_SPEEDS[ship_type]) * KNOTS_TO_KMH,
                    heading=rng.uniform(0.0, 360.0),
                    observed_at=now_ms,
                    metadata=_synthetic_metadata(
                        f"{base.name.upper()[:4]}-{ship_type.upper()[:3]}-{index + 1}",
                        ship_type,
                        status="in_port" if in_port else "patrol",
                        origin=base.name,
                        military=True,
                    ),
                )
            )
    return entities


# ------------------------------------------------------------------
# Ground vehicles and point events
# ------------------------------------------------------------------


def _random_plate(rng: random.Random) -> str:
    letters = string.ascii_uppercase
    return (
        f"{rng.choice(letters)}{rng.choice(letters)}{rng.randint(0, 9)}{rng.randint(0, 9)} "
        f"{rng.choice(letters)}{rng.choice(letters)}{rng.choice(letters)}"
    )


def generate_city_vehicles(count: int, rng: random.Random, now_ms: int) -> list[Entity]:
    """Road traffic in major cities.

    Parameters
    ----------
    count : int
        Vehicles for a city of eight million people; smaller cities get
        proportionally fewer, never below half of *count*.
    """
    entities: list[Entity] = []
    for city in _CITIES:
        city_count = math.floor(count * max(city.weight / 8.0, 0.5))
        for _ in range(city_count):
            vehicle_type = rng.choice(tuple(_VEHICLE_MODELS))
            model = rng.choice(_VEHICLE_MODELS[vehicle_type])
            angle = rng.uniform(0.0, 2.0 * math.pi)
            distance = rng.uniform(0.0, city.spread)
            # road grid: mostly N/S/E/W
            heading = rng.choice((0.0, 90.0, 180.0, 270.0)) + rng.uniform(-7.5, 7.5)
            if vehicle_type == "emergency":
                status = "responding"
            else:
                status = "stopped" if rng.random() > 0.85 else "active"
            entities.append(
                Entity(
                    id=f"vehicle-{len(entities)}",
                    type=EntityType.GROUND_VEHICLE,
                    lat=city.lat + math.sin(angle) * distance,
                    lng=city.lng + math.cos(angle) * distance,
                    altitude=0.0,
                    speed=rng.uniform(*_VEHICLE_SPEEDS.get(vehicle_type, _DEFAULT_VEHICLE_SPEED)),
                    heading=heading,
                    observed_at=now_ms,
                    metadata=_synthetic_metadata(
                        model,
                        vehicle_type,
                        status=status,
                        origin=city.name,
                        city=city.name,
                        plate=_random_plate(rng),
                        model=model,
                    ),
                )
            )
    return entities


def generate_events(count: int, rng: random.Random, now_ms: int) -> list[Entity]:
    """Stationary point events (seismic, weather, signal ...) between 60S and 60N."""
    return [
        Entity(
            id=f"event-{i}",
            type=EntityType.POINT_EVENT,
            lat=rng.uniform(-60.0, 60.0),
            lng=rng.uniform(-180.0, 180.0),
            altitude=0.0,
            speed=0.0,
            heading=0.0,
            observed_at=now_ms,
            metadata=_synthetic_metadata(f"EVT-{i}", EVENT_CATEGORIES[i % len(EVENT_CATEGORIES)]),
        )
        for i in range(count)
    ]
