"""Tests for solar position calculations (real pvlib, no mocks)."""
from datetime import datetime, timezone

import pytest

from core.errors import InvalidInput
from core.models import GeoCoordinate, SunSample
from core.solar import sun_position


def test_sun_position_returns_sun_sample():
    dt = datetime(2024, 6, 21, 12, 0, 0, tzinfo=timezone.utc)
    result = sun_position(GeoCoordinate(37.7749, -122.4194), dt)
    assert isinstance(result, SunSample)
    assert 0.0 <= result.azimuth_degrees < 360.0
    assert -90.0 <= result.altitude_degrees <= 90.0


def test_solar_elevation_midday_summer():
    # Midday in summer at equator should have high elevation (~66.5°)
    dt = datetime(2024, 6, 21, 12, 0, 0, tzinfo=timezone.utc)
    result = sun_position(GeoCoordinate(0.0, 0.0), dt)
    assert result.altitude_degrees == pytest.approx(66.5, abs=1.0)
    assert result.visible is True


def test_sun_below_horizon_at_midnight():
    dt = datetime(2024, 6, 21, 0, 0, 0, tzinfo=timezone.utc)
    result = sun_position(GeoCoordinate(0.0, 0.0), dt)
    assert result.altitude_degrees < 0
    assert result.visible is False


def test_delhi_equinox_solar_noon():
    # Delhi is at 77.2°E → solar noon in UTC ≈ 12:00 - 77.2/15h ≈ 06:51 UTC.
    # On the vernal equinox the sun transits due south, so azimuth ≈ 180°.
    dt = datetime(2024, 3, 21, 6, 51, 0, tzinfo=timezone.utc)
    result = sun_position(GeoCoordinate(28.6, 77.2), dt)
    assert abs(result.azimuth_degrees - 180) < 10, (
        f"Expected azimuth ~180°, got {result.azimuth_degrees}°"
    )
    assert result.altitude_degrees > 50


def test_morning_sun_in_the_east():
    # London, summer solstice, 05:00 UTC: low sun in the north-east.
    dt = datetime(2024, 6, 21, 5, 0, 0, tzinfo=timezone.utc)
    result = sun_position(GeoCoordinate(51.47, -0.45), dt)
    assert 45 < result.azimuth_degrees < 90
    assert 0 < result.altitude_degrees < 15


def test_values_rounded_to_two_decimals():
    dt = datetime(2024, 6, 21, 15, 37, 12, tzinfo=timezone.utc)
    result = sun_position(GeoCoordinate(40.6413, -73.7781), dt)
    assert round(result.azimuth_degrees, 2) == result.azimuth_degrees
    assert round(result.altitude_degrees, 2) == result.altitude_degrees


def test_naive_datetime_treated_as_utc():
    coord = GeoCoordinate(48.85, 2.35)
    naive = sun_position(coord, datetime(2024, 6, 21, 9, 30))
    aware = sun_position(coord, datetime(2024, 6, 21, 9, 30, tzinfo=timezone.utc))
    assert naive == aware


def test_deterministic_for_same_inputs():
    coord = GeoCoordinate(-33.94, 151.18)
    dt = datetime(2024, 12, 21, 20, 0, 0, tzinfo=timezone.utc)
    assert sun_position(coord, dt) == sun_position(coord, dt)


def test_rejects_non_datetime():
    with pytest.raises(InvalidInput):
        sun_position(GeoCoordinate(0.0, 0.0), 1_700_000_000.0)
