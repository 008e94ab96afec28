"""Routing: sample a great-circle flight into timestamped, sun-annotated points."""
import logging
from datetime import timedelta

from core.errors import DegenerateInput, InvalidInput
from core.geo import (
    DEFAULT_AVG_SPEED_KMH,
    bearing_degrees,
    distance_km,
    estimate_duration,
    interpolate_great_circle,
)
from core.models import FlightSpec, RoutePoint
from core.solar import sun_position

DEFAULT_SAMPLE_COUNT = 100

_log = logging.getLogger(__name__)


def sample_route(
    flight: FlightSpec,
    sample_count: int = DEFAULT_SAMPLE_COUNT,
    avg_speed_kmh: float = DEFAULT_AVG_SPEED_KMH,
) -> list[RoutePoint]:
    """
    Build ``sample_count`` equally spaced points along the flight's great circle.

    Each returned RoutePoint carries:
        progress_fraction      – i / (sample_count - 1)
        timestamp              – departure + progress × estimated duration
        flight_bearing_degrees – bearing from the point towards the destination;
                                 the last point reuses the previous bearing
        sun                    – solar azimuth/altitude at that place and time

    Args:
        flight:        Origin, destination and departure instant.
        sample_count:  Number of points, endpoints included (>= 2).
        avg_speed_kmh: Cruise speed used for the duration estimate.

    Raises:
        InvalidInput:    If sample_count < 2.
        DegenerateInput: If origin and destination coincide or are antipodal,
                         or the route is too short to last a whole minute.
    """
    if isinstance(sample_count, bool) or not isinstance(sample_count, int) or sample_count < 2:
        raise InvalidInput(f"sample_count must be an integer >= 2, got {sample_count!r}")

    origin, destination = flight.origin, flight.destination
    distance = distance_km(origin, destination)
    duration = estimate_duration(distance, avg_speed_kmh)
    coordinates = interpolate_great_circle(origin, destination, sample_count)

    # Coincident endpoints survive interpolation; fail on the bearing instead.
    first_bearing = bearing_degrees(coordinates[0], destination)

    if duration.total_minutes <= 0:
        raise DegenerateInput(
            f"route of {distance:.2f} km is too short to sample "
            f"(estimated duration rounds to 0 minutes)",
            points=(origin, destination),
        )

    points: list[RoutePoint] = []
    bearing = first_bearing
    last = sample_count - 1

    for i, coordinate in enumerate(coordinates):
        progress = i / last
        timestamp = flight.departure + timedelta(minutes=progress * duration.total_minutes)
        if 0 < i < last:
            bearing = bearing_degrees(coordinate, destination)
        # i == last: the point sits on the destination, keep the previous bearing.

        points.append(RoutePoint(
            index=i,
            progress_fraction=progress,
            coordinate=coordinate,
            timestamp=timestamp,
            flight_bearing_degrees=round(bearing, 2) % 360.0,
            sun=sun_position(coordinate, timestamp),
        ))

    _log.debug(
        "Sampled %d points over %.1f km (%d min) departing %s",
        sample_count, distance, duration.total_minutes, flight.departure.isoformat(),
    )
    return points
