"""Seat scoring: decide which side of the aircraft sees the sun at one route point."""
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from core.errors import InvalidInput
from core.models import PointVerdict, RoutePoint, SeatSide, SpecialCondition

# Sun within this many degrees of the nose or the tail is "ahead/behind" and
# does not favour either window. Tunable calibration, not a physical constant.
AHEAD_LIMIT_DEG = 30.0
BEHIND_LIMIT_DEG = 150.0

# Altitude bands (degrees)
TWILIGHT_LIMIT = -6.0
SUNRISE_SUNSET_MAX = 6.0
GOLDEN_HOUR_MIN = 5.0
GOLDEN_HOUR_MAX = 25.0
OVERHEAD_MIN = 60.0

_LOW_SUN = ("golden hour", "sunrise/sunset")


def relative_angle(sun_azimuth: float, flight_bearing: float) -> float:
    """
    Sun direction relative to the aircraft's nose, normalised into (-180, 180].

    Positive values are to the right (clockwise from the nose), negative to
    the left.
    """
    angle = round((sun_azimuth - flight_bearing) % 360, 2)
    if angle > 180:
        angle = round(angle - 360, 2)
    return angle


def special_condition(altitude: float) -> SpecialCondition:
    if altitude <= 0:
        return "not visible"
    if TWILIGHT_LIMIT <= altitude <= SUNRISE_SUNSET_MAX:
        return "sunrise/sunset"
    if altitude > OVERHEAD_MIN:
        return "overhead sun"
    if GOLDEN_HOUR_MIN <= altitude <= GOLDEN_HOUR_MAX:
        return "golden hour"
    return "normal daylight"


def _seat_side(altitude: float, angle: float) -> SeatSide:
    if altitude <= 0:
        return "none"
    if abs(angle) <= AHEAD_LIMIT_DEG or abs(angle) >= BEHIND_LIMIT_DEG:
        return "none"
    return "right" if angle > 0 else "left"


def _view_score(
    altitude: float, angle: float, side: SeatSide, condition: SpecialCondition
) -> int:
    if condition == "not visible":
        if altitude <= TWILIGHT_LIMIT:
            return 1
        return 2 if altitude <= TWILIGHT_LIMIT / 2 else 3
    if condition == "overhead sun":
        return 4
    if side == "none":
        return 6 if condition in _LOW_SUN else 5
    if condition in _LOW_SUN:
        # Low sun square to the window is the best view on offer.
        return 10 if 60 <= abs(angle) <= 120 else 9
    return 8 if altitude <= 40 else 7


def classify_point(point: RoutePoint) -> PointVerdict:
    """
    Classify a single route point.

    Given the sun's azimuth/altitude and the aircraft's bearing, decide which
    window (if any) faces the sun, label the lighting condition and give the
    view a 1-10 score.

    Raises:
        InvalidInput: If the bearing or either sun angle is not a finite number.
    """
    for name, value in (
        ("flight bearing", point.flight_bearing_degrees),
        ("sun azimuth", point.sun.azimuth_degrees),
        ("sun altitude", point.sun.altitude_degrees),
    ):
        if not math.isfinite(value):
            raise InvalidInput(f"{name} must be finite, got {value!r}")

    altitude = point.sun.altitude_degrees
    angle = relative_angle(point.sun.azimuth_degrees, point.flight_bearing_degrees)
    side = _seat_side(altitude, angle)
    condition = special_condition(altitude)

    return PointVerdict(
        seat_side=side,
        view_score=_view_score(altitude, angle, side, condition),
        special_condition=condition,
        relative_angle_degrees=angle,
    )


def classify_points(
    points: Sequence[RoutePoint],
    max_workers: Optional[int] = None,
) -> list[PointVerdict]:
    """
    Classify every point, in order.

    With ``max_workers`` > 1 the points are spread over a thread pool; the
    call returns only once all of them are done and the result order always
    matches ``points``.
    """
    if max_workers is None or max_workers <= 1 or len(points) < 2:
        return [classify_point(p) for p in points]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(classify_point, points))
