"""Unit tests for core.routing.sample_route.

Most tests patch the solar provider so they exercise only the sampling
logic; pvlib itself is covered by test_solar.py.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from core.errors import DegenerateInput, InvalidInput
from core.models import FlightSpec, GeoCoordinate, SunSample
from core.routing import sample_route

_DEPARTURE = datetime(2024, 6, 21, 8, 0, 0, tzinfo=timezone.utc)

JFK = GeoCoordinate(40.6413, -73.7781)
LHR = GeoCoordinate(51.4700, -0.4543)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fixed_sun(azimuth: float = 90.0, altitude: float = 30.0):
    """Return a sun_position stand-in that always yields the same sample."""
    return lambda coordinate, instant: SunSample(azimuth, altitude, altitude > 0)


def _sample(origin, destination, count=10, departure=_DEPARTURE, **kwargs):
    flight = FlightSpec(origin=origin, destination=destination, departure=departure)
    with patch("core.routing.sun_position", side_effect=_fixed_sun()):
        return sample_route(flight, count, **kwargs)


# ---------------------------------------------------------------------------
# Shape and ordering
# ---------------------------------------------------------------------------

def test_sample_count_respected():
    assert len(_sample(JFK, LHR, 10)) == 10
    assert len(_sample(JFK, LHR, 2)) == 2


def test_indices_and_progress():
    points = _sample(JFK, LHR, 5)
    assert [p.index for p in points] == [0, 1, 2, 3, 4]
    assert [p.progress_fraction for p in points] == [0.0, 0.25, 0.5, 0.75, 1.0]


def test_progress_and_timestamps_strictly_increasing():
    points = _sample(JFK, LHR, 50)
    for a, b in zip(points, points[1:]):
        assert a.progress_fraction < b.progress_fraction
        assert a.timestamp < b.timestamp


def test_endpoints_match_flight():
    points = _sample(JFK, LHR, 7)
    assert points[0].coordinate == JFK
    assert points[-1].coordinate == LHR


def test_timestamps_span_estimated_duration():
    # 10° of longitude on the equator ≈ 1111.95 km → 74 min at 900 km/h
    points = _sample(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.0, 10.0), 3)
    assert points[0].timestamp == _DEPARTURE
    assert points[1].timestamp == _DEPARTURE + timedelta(minutes=37)
    assert points[-1].timestamp == _DEPARTURE + timedelta(minutes=74)


def test_slower_aircraft_takes_longer():
    fast = _sample(JFK, LHR, 3)
    slow = _sample(JFK, LHR, 3, avg_speed_kmh=450)
    assert slow[-1].timestamp - _DEPARTURE > fast[-1].timestamp - _DEPARTURE


def test_naive_departure_is_utc():
    points = _sample(JFK, LHR, 3, departure=datetime(2024, 6, 21, 8, 0, 0))
    assert points[0].timestamp == _DEPARTURE


# ---------------------------------------------------------------------------
# Bearings
# ---------------------------------------------------------------------------

def test_eastbound_equator_bearing():
    points = _sample(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.0, 10.0), 5)
    for p in points:
        assert p.flight_bearing_degrees == pytest.approx(90.0, abs=0.01)


def test_final_point_reuses_previous_bearing():
    points = _sample(JFK, LHR, 10)
    assert points[-1].flight_bearing_degrees == points[-2].flight_bearing_degrees


def test_bearing_swings_along_great_circle():
    # Westbound transatlantic great circles start north-west and end south-west.
    points = _sample(LHR, JFK, 20)
    assert points[0].flight_bearing_degrees > points[-1].flight_bearing_degrees
    for p in points:
        assert 0.0 <= p.flight_bearing_degrees < 360.0


# ---------------------------------------------------------------------------
# Sun sampling
# ---------------------------------------------------------------------------

def test_sun_sampled_at_each_point_and_time():
    flight = FlightSpec(origin=JFK, destination=LHR, departure=_DEPARTURE)
    with patch("core.routing.sun_position", side_effect=_fixed_sun()) as mocked:
        points = sample_route(flight, 4)

    assert mocked.call_count == 4
    for call, point in zip(mocked.call_args_list, points):
        coordinate, instant = call.args
        assert coordinate == point.coordinate
        assert instant == point.timestamp


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("count", [1, 0, -5])
def test_sample_count_below_two_rejected(count):
    with pytest.raises(InvalidInput):
        _sample(JFK, LHR, count)


def test_coincident_endpoints_degenerate():
    with pytest.raises(DegenerateInput):
        _sample(JFK, JFK, 10)


def test_antipodal_endpoints_degenerate():
    with pytest.raises(DegenerateInput):
        _sample(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.0, 180.0), 10)


def test_zero_minute_route_degenerate():
    # ~5.6 km rounds to a 0-minute flight: timestamps could not increase.
    with pytest.raises(DegenerateInput):
        _sample(GeoCoordinate(0.0, 0.0), GeoCoordinate(0.0, 0.05), 10)


def test_real_sun_positions_vary_over_time():
    flight = FlightSpec(origin=JFK, destination=LHR, departure=_DEPARTURE)
    points = sample_route(flight, 5)
    altitudes = [p.sun.altitude_degrees for p in points]
    assert len(set(altitudes)) > 1
