"""CelesTrak TLE parsing and SGP4 propagation."""

from __future__ import annotations

import dataclasses
import logging
import math
from datetime import UTC, datetime

from sgp4.api import Satrec
from sgp4.conveniences import jday_datetime
from sgp4.propagation import gstime

from pygeotrack._constants import SATELLITE_FALLBACK_SPEED_KMH, SATELLITE_MAX_SPEED_KMH, SATELLITE_MIN_SPEED_KMH
from pygeotrack.ingestion.normalize import sanitize_speed
from pygeotrack.models import Entity, EntityType, Provenance

_logger = logging.getLogger(__name__)

# WGS84 ellipsoid
_WGS84_A = 6378137.0
_WGS84_F = 1.0 / 298.257223563
_WGS84_B = _WGS84_A * (1.0 - _WGS84_F)
_WGS84_E2 = 1.0 - (_WGS84_B * _WGS84_B) / (_WGS84_A * _WGS84_A)
_WGS84_EP2 = (_WGS84_A * _WGS84_A - _WGS84_B * _WGS84_B) / (_WGS84_B * _WGS84_B)


@dataclasses.dataclass(frozen=True)
class TleRecord:
    name: str
    line1: str
    line2: str

    @property
    def norad_id(self) -> str:
        return self.line1[2:7].strip()


@dataclasses.dataclass(frozen=True)
class GeodeticPosition:
    lat: float
    lng: float
    altitude_km: float
    speed_kmh: float


def parse_tle_text(text: str) -> list[TleRecord]:
    """Split three-line TLE text into records.

    Triplets whose second and third lines do not start with ``1`` and ``2``
    are skipped.
    """
    lines = [line.strip() for line in text.strip().splitlines()]
    lines = [line for line in lines if line]
    records: list[TleRecord] = []
    for i in range(0, len(lines) - 2, 3):
        name, line1, line2 = lines[i], lines[i + 1], lines[i + 2]
        if line1.startswith("1") and line2.startswith("2"):
            records.append(TleRecord(name=name, line1=line1, line2=line2))
    return records


def _ecef_to_geodetic(x_m: float, y_m: float, z_m: float) -> tuple[float, float, float]:
    """Bowring's method; returns (lat rad, lng rad, altitude m)."""
    lng = math.atan2(y_m, x_m)
    p = math.hypot(x_m, y_m)
    theta = math.atan2(z_m * _WGS84_A, p * _WGS84_B)
    st = math.sin(theta)
    ct = math.cos(theta)
    lat = math.atan2(z_m + _WGS84_EP2 * _WGS84_B * st**3, p - _WGS84_E2 * _WGS84_A * ct**3)
    sl = math.sin(lat)
    n = _WGS84_A / math.sqrt(1.0 - _WGS84_E2 * sl * sl)
    return lat, lng, p / math.cos(lat) - n


def propagate(record: TleRecord, when: datetime) -> GeodeticPosition | None:
    """Propagate *record* to *when*; ``None`` on an SGP4 error or a non-finite result.

    TEME is rotated to ECEF by GMST only (no polar motion), which is plenty
    for map display.
    """
    sat = Satrec.twoline2rv(record.line1, record.line2)
    jd, fr = jday_datetime(when)
    err, r_km, v_km_s = sat.sgp4(jd, fr)
    if err != 0:
        _logger.debug("SGP4 error %d for %s", err, record.name)
        return None

    theta = gstime(jd + fr)
    c = math.cos(theta)
    s = math.sin(theta)
    x_km = r_km[0] * c + r_km[1] * s
    y_km = -r_km[0] * s + r_km[1] * c
    z_km = r_km[2]

    lat_rad, lng_rad, alt_m = _ecef_to_geodetic(x_km * 1000.0, y_km * 1000.0, z_km * 1000.0)
    lat = math.degrees(lat_rad)
    lng = math.degrees(lng_rad)
    altitude_km = alt_m / 1000.0
    if not all(math.isfinite(value) for value in (lat, lng, altitude_km)):
        return None

    speed = math.sqrt(sum(component * component for component in v_km_s)) * 3600.0
    return GeodeticPosition(
        lat=lat,
        lng=lng,
        altitude_km=altitude_km,
        speed_kmh=sanitize_speed(
            speed,
            maximum=SATELLITE_MAX_SPEED_KMH,
            minimum=SATELLITE_MIN_SPEED_KMH,
            fallback=SATELLITE_FALLBACK_SPEED_KMH,
        ),
    )


def tle_to_entities(text: str, *, source: str, now_ms: int, max_count: int | None = None) -> list[Entity]:
    """Parse TLE *text* and propagate every record to *now_ms*.

    Records that fail to parse or propagate are skipped.
    """
    records = parse_tle_text(text)
    if max_count is not None:
        records = records[:max_count]
    when = datetime.fromtimestamp(now_ms / 1000.0, tz=UTC)

    entities: list[Entity] = []
    for record in records:
        try:
            position = propagate(record, when)
        except (ValueError, IndexError) as exc:
            _logger.debug("Skipping unparseable TLE %s: %s", record.name, exc)
            continue
        if position is None:
            continue
        norad_id = record.norad_id
        entities.append(
            Entity(
                id=f"sat-{norad_id}",
                type=EntityType.SATELLITE,
                lat=position.lat,
                lng=position.lng,
                altitude=position.altitude_km * 1000.0,
                speed=position.speed_kmh,
                heading=0.0,
                observed_at=now_ms,
                metadata={
                    "label": record.name,
                    "provenance": Provenance.LIVE.value,
                    "source": source,
                    "status": "active",
                    "category": "satellite",
                    "military": False,
                    "norad_id": norad_id,
                    "altitude_km": round(position.altitude_km, 3),
                },
            )
        )
    _logger.debug("Propagated %d of %d satellites from %s", len(entities), len(records), source)
    return entities
