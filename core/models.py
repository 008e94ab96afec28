"""Immutable records passed between the geometry, solar and scoring layers."""
import dataclasses
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from core.errors import InvalidInput

SeatSide = Literal["left", "right", "none"]
Confidence = Literal["low", "medium", "high"]
SpecialCondition = Literal[
    "not visible",
    "sunrise/sunset",
    "overhead sun",
    "golden hour",
    "normal daylight",
]


@dataclass(frozen=True)
class GeoCoordinate:
    """A point on the Earth's surface in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        for name, value, limit in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInput(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidInput(f"{name} must be finite, got {value!r}")
            if not -limit <= value <= limit:
                raise InvalidInput(f"{name} {value} outside [-{limit:g}, {limit:g}]")


@dataclass(frozen=True)
class FlightSpec:
    """Origin, destination and departure instant of a single flight."""

    origin: GeoCoordinate
    destination: GeoCoordinate
    departure: datetime

    def __post_init__(self):
        if not isinstance(self.origin, GeoCoordinate) or not isinstance(
            self.destination, GeoCoordinate
        ):
            raise InvalidInput("origin and destination must be GeoCoordinate values")
        if not isinstance(self.departure, datetime):
            raise InvalidInput(f"departure must be a datetime, got {self.departure!r}")
        # Naive → assumed UTC
        if self.departure.tzinfo is None:
            object.__setattr__(
                self, "departure", self.departure.replace(tzinfo=timezone.utc)
            )


@dataclass(frozen=True)
class FlightDuration:
    """
    Estimated flight time.

    ``hours``/``minutes`` and ``total_minutes`` are rounded independently, so
    ``hours * 60 + minutes`` can differ from ``total_minutes`` by a minute and
    ``minutes`` can read 60.
    """

    hours: int
    minutes: int
    total_minutes: int


@dataclass(frozen=True)
class SunSample:
    azimuth_degrees: float    # clockwise from north, [0, 360)
    altitude_degrees: float   # above (+) / below (-) the horizon
    visible: bool


@dataclass(frozen=True)
class RoutePoint:
    index: int
    progress_fraction: float
    coordinate: GeoCoordinate
    timestamp: datetime
    flight_bearing_degrees: float
    sun: SunSample


@dataclass(frozen=True)
class PointVerdict:
    seat_side: SeatSide
    view_score: int
    special_condition: SpecialCondition
    relative_angle_degrees: float   # sun relative to the nose, (-180, 180]


@dataclass(frozen=True)
class ViewingPeriod:
    start_fraction: float
    end_fraction: float


@dataclass(frozen=True)
class RouteVerdict:
    final_seat_side: SeatSide
    confidence: Confidence
    overall_score: int
    best_viewing_periods: tuple[ViewingPeriod, ...]
    weighted_minutes_left: float
    weighted_minutes_right: float
    side_flip_count: int


@dataclass(frozen=True)
class FlightPoint:
    """A sampled route point together with its seat-side classification."""

    point: RoutePoint
    verdict: PointVerdict


@dataclass(frozen=True)
class FlightAnalysis:
    """Everything the presentation layer needs for one recommendation."""

    flight: FlightSpec
    distance_km: float
    duration: FlightDuration
    points: tuple[FlightPoint, ...]
    verdict: RouteVerdict


def to_record(obj: Any) -> Any:
    """
    Convert a record (or a list/tuple of records) into plain JSON-ready data.

    Datetimes become ISO 8601 strings; tuples become lists.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            field.name: to_record(getattr(obj, field.name))
            for field in dataclasses.fields(obj)
        }
    if isinstance(obj, (list, tuple)):
        return [to_record(item) for item in obj]
    if isinstance(obj, dict):
        return {key: to_record(value) for key, value in obj.items()}
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj
