from __future__ import annotations

import math

import pytest

from pygeotrack.geo import (
    KM_PER_DEGREE_LAT,
    clamp_latitude,
    haversine_km,
    heading_delta,
    midpoint,
    normalize_heading,
    wrap_longitude,
)


def test_haversine_zero_for_same_point() -> None:
    assert haversine_km(51.5, -0.12, 51.5, -0.12) == 0.0


def test_haversine_one_degree_of_latitude() -> None:
    assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(KM_PER_DEGREE_LAT)
    assert KM_PER_DEGREE_LAT == pytest.approx(111.19, abs=0.01)


def test_haversine_is_symmetric_across_antimeridian() -> None:
    d1 = haversine_km(10.0, 179.9, 10.0, -179.9)
    d2 = haversine_km(10.0, -179.9, 10.0, 179.9)
    assert d1 == pytest.approx(d2)
    assert d1 < 25.0


def test_midpoint_is_arithmetic() -> None:
    assert midpoint(10.0, 20.0, 12.0, 24.0) == (11.0, 22.0)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.0, 0.0),
        (180.0, 180.0),
        (-180.0, 180.0),
        (181.0, -179.0),
        (-181.0, 179.0),
        (540.0, 180.0),
        (359.5, -0.5),
    ],
)
def test_wrap_longitude(value: float, expected: float) -> None:
    assert wrap_longitude(value) == pytest.approx(expected)


def test_wrap_longitude_range() -> None:
    for step in range(-1000, 1000, 7):
        wrapped = wrap_longitude(step * 0.731)
        assert -180.0 < wrapped <= 180.0


def test_clamp_latitude() -> None:
    assert clamp_latitude(89.0) == 85.0
    assert clamp_latitude(-90.0) == -85.0
    assert clamp_latitude(12.5) == 12.5
    assert clamp_latitude(70.0, limit=60.0) == 60.0


def test_normalize_heading() -> None:
    assert normalize_heading(360.0) == 0.0
    assert normalize_heading(-90.0) == 270.0
    assert normalize_heading(725.0) == pytest.approx(5.0)
    assert normalize_heading(-1e-15) < 360.0


def test_heading_delta_is_circular() -> None:
    assert heading_delta(350.0, 10.0) == pytest.approx(20.0)
    assert heading_delta(10.0, 350.0) == pytest.approx(20.0)
    assert heading_delta(0.0, 180.0) == pytest.approx(180.0)
    assert heading_delta(90.0, 90.0) == 0.0
    assert math.isclose(heading_delta(0.0, 46.0), 46.0)
