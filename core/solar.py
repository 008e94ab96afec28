"""Solar position calculations using pvlib."""
from datetime import datetime, timezone

import pandas as pd
import pvlib

from core.errors import InvalidInput
from core.models import GeoCoordinate, SunSample


def sun_position(coordinate: GeoCoordinate, instant: datetime) -> SunSample:
    """
    Return solar azimuth and altitude for a location and instant.

    Uses pvlib's NREL SPA implementation and reports the geometric
    (refraction-free) elevation.

    Args:
        coordinate: Observer position.
        instant:    Moment of observation (naive → assumed UTC).

    Returns:
        SunSample with
            azimuth_degrees  – degrees clockwise from north, [0, 360)
            altitude_degrees – degrees above horizon (negative when below)
            visible          – altitude > 0
        Angles are rounded to 2 decimals.
    """
    if not isinstance(coordinate, GeoCoordinate):
        raise InvalidInput(f"expected a GeoCoordinate, got {coordinate!r}")
    if not isinstance(instant, datetime):
        raise InvalidInput(f"expected a datetime, got {instant!r}")
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    times = pd.DatetimeIndex([pd.Timestamp(instant).tz_convert("UTC")])
    location = pvlib.location.Location(
        latitude=coordinate.latitude, longitude=coordinate.longitude
    )
    solar_pos = location.get_solarposition(times)

    azimuth = round(float(solar_pos["azimuth"].iloc[0]), 2) % 360.0
    altitude = round(float(solar_pos["elevation"].iloc[0]), 2)
    return SunSample(
        azimuth_degrees=azimuth,
        altitude_degrees=altitude,
        visible=altitude > 0,
    )
