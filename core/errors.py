"""Error types raised by the flight-geometry core."""
from typing import Sequence


class SeatSideError(ValueError):
    """Base class for every error the core raises on bad input."""


class InvalidInput(SeatSideError):
    """Malformed coordinates, too few samples, empty sequences, bad config."""


class DegenerateInput(SeatSideError):
    """
    Geometry for which a bearing or great circle is undefined.

    ``points`` holds the coordinate pair that triggered the failure so the
    caller can decide on a fallback (skip the bearing, reject the route, ...).
    """

    def __init__(self, message: str, points: Sequence = ()):
        super().__init__(message)
        self.points = tuple(points)
