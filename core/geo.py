"""Spherical geometry: distance, bearing and great-circle interpolation."""
import math

from core.errors import DegenerateInput, InvalidInput
from core.models import FlightDuration, GeoCoordinate

EARTH_RADIUS_KM = 6371.0
DEFAULT_AVG_SPEED_KMH = 900.0

# Central angles (radians) below which two points count as the same place,
# and within which of pi two points count as antipodal.
_COINCIDENT_RAD = 1e-12
_ANTIPODAL_RAD = 1e-6


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _check(*coords: GeoCoordinate) -> None:
    for c in coords:
        if not isinstance(c, GeoCoordinate):
            raise InvalidInput(f"expected a GeoCoordinate, got {c!r}")


def _to_vector(c: GeoCoordinate) -> tuple[float, float, float]:
    """Unit vector on the sphere for a (lat, lng) pair."""
    lat = math.radians(c.latitude)
    lng = math.radians(c.longitude)
    return (
        math.cos(lat) * math.cos(lng),
        math.cos(lat) * math.sin(lng),
        math.sin(lat),
    )


def _from_vector(x: float, y: float, z: float) -> GeoCoordinate:
    lat = math.degrees(math.atan2(z, math.hypot(x, y)))
    lng = math.degrees(math.atan2(y, x))
    return GeoCoordinate(latitude=lat, longitude=lng)


def _central_angle(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Angle between a and b seen from the Earth's centre (radians, 0–pi)."""
    va, vb = _to_vector(a), _to_vector(b)
    cross = (
        va[1] * vb[2] - va[2] * vb[1],
        va[2] * vb[0] - va[0] * vb[2],
        va[0] * vb[1] - va[1] * vb[0],
    )
    dot = va[0] * vb[0] + va[1] * vb[1] + va[2] * vb[2]
    # atan2 stays accurate near 0 and pi, where acos(dot) does not.
    return math.atan2(math.sqrt(sum(v * v for v in cross)), dot)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def distance_km(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Great-circle distance between two points using the haversine formula."""
    _check(a, b)
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def bearing_degrees(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """
    Compute the initial great-circle bearing (0–360°, clockwise from north)
    from a to b.

    Raises:
        DegenerateInput: If a and b are the same point.
    """
    _check(a, b)
    if _central_angle(a, b) < _COINCIDENT_RAD:
        raise DegenerateInput(
            f"bearing undefined between coincident points "
            f"({a.latitude}, {a.longitude}) and ({b.latitude}, {b.longitude})",
            points=(a, b),
        )

    lat1_r = math.radians(a.latitude)
    lat2_r = math.radians(b.latitude)
    dlng_r = math.radians(b.longitude - a.longitude)

    x = math.sin(dlng_r) * math.cos(lat2_r)
    y = (math.cos(lat1_r) * math.sin(lat2_r)
         - math.sin(lat1_r) * math.cos(lat2_r) * math.cos(dlng_r))

    return (math.degrees(math.atan2(x, y)) + 360) % 360


def interpolate_great_circle(
    a: GeoCoordinate, b: GeoCoordinate, count: int
) -> list[GeoCoordinate]:
    """
    Return ``count`` points evenly spaced along the great circle from a to b.

    Uses spherical linear interpolation (slerp) between the unit vectors of
    the endpoints. The first and last points are ``a`` and ``b`` themselves.
    Coincident endpoints produce ``count`` copies of ``a``.

    Raises:
        InvalidInput:    If count < 2.
        DegenerateInput: If a and b are (nearly) antipodal, so the path is
                         ambiguous.
    """
    _check(a, b)
    if isinstance(count, bool) or not isinstance(count, int) or count < 2:
        raise InvalidInput(f"count must be an integer >= 2, got {count!r}")

    omega = _central_angle(a, b)
    if omega < _COINCIDENT_RAD:
        return [a] * count
    if math.pi - omega < _ANTIPODAL_RAD:
        raise DegenerateInput(
            f"great circle undefined between antipodal points "
            f"({a.latitude}, {a.longitude}) and ({b.latitude}, {b.longitude})",
            points=(a, b),
        )

    va, vb = _to_vector(a), _to_vector(b)
    sin_omega = math.sin(omega)
    points = [a]
    for i in range(1, count - 1):
        f = i / (count - 1)
        wa = math.sin((1 - f) * omega) / sin_omega
        wb = math.sin(f * omega) / sin_omega
        points.append(_from_vector(
            wa * va[0] + wb * vb[0],
            wa * va[1] + wb * vb[1],
            wa * va[2] + wb * vb[2],
        ))
    points.append(b)
    return points


def estimate_duration(
    distance_km: float, avg_speed_kmh: float = DEFAULT_AVG_SPEED_KMH
) -> FlightDuration:
    """
    Estimate flight time at a constant cruise speed.

    ``hours`` is floored and ``minutes`` is the rounded remainder, while
    ``total_minutes`` is rounded on its own; the two can disagree by one
    minute. Callers that need a single number should use ``total_minutes``.
    """
    if not math.isfinite(distance_km) or distance_km < 0:
        raise InvalidInput(f"distance must be a non-negative number, got {distance_km!r}")
    if not math.isfinite(avg_speed_kmh) or avg_speed_kmh <= 0:
        raise InvalidInput(f"average speed must be positive, got {avg_speed_kmh!r}")

    hours = distance_km / avg_speed_kmh
    return FlightDuration(
        hours=math.floor(hours),
        minutes=round((hours % 1) * 60),
        total_minutes=round(hours * 60),
    )
