"""End-to-end recommendation: sample the route, classify points, aggregate."""
import logging
from datetime import datetime
from typing import Optional

from core.config import Settings
from core.geo import distance_km, estimate_duration
from core.models import FlightAnalysis, FlightPoint, FlightSpec, GeoCoordinate, RouteVerdict
from core.routing import sample_route
from core.scorer import evaluate_route
from core.scoring import classify_points

_log = logging.getLogger(__name__)


def analyze_flight(
    origin: GeoCoordinate,
    destination: GeoCoordinate,
    departure: datetime,
    sample_count: Optional[int] = None,
    *,
    settings: Optional[Settings] = None,
) -> FlightAnalysis:
    """
    Full seat-recommendation pipeline:
      1. Sample the great-circle route with sun positions
      2. Classify every point (optionally across a thread pool)
      3. Aggregate the per-point verdicts once all of them are in

    Returns the sampled points paired with their verdicts plus the route
    verdict, ready for serialisation with ``core.models.to_record``.

    Raises:
        InvalidInput:    On malformed coordinates or sample_count < 2.
        DegenerateInput: On coincident, antipodal or too-short routes.
    """
    settings = settings or Settings()
    if sample_count is None:
        sample_count = settings.sample_count

    flight = FlightSpec(origin=origin, destination=destination, departure=departure)
    distance = distance_km(origin, destination)
    duration = estimate_duration(distance, settings.avg_speed_kmh)

    points = sample_route(flight, sample_count, settings.avg_speed_kmh)
    verdicts = classify_points(points, max_workers=settings.max_workers)
    verdict = evaluate_route(points, verdicts, duration.total_minutes)

    _log.info(
        "Recommendation for %.0f km flight: %s (%s confidence, score %d)",
        distance, verdict.final_seat_side, verdict.confidence, verdict.overall_score,
    )

    return FlightAnalysis(
        flight=flight,
        distance_km=round(distance, 2),
        duration=duration,
        points=tuple(FlightPoint(point=p, verdict=v) for p, v in zip(points, verdicts)),
        verdict=verdict,
    )


def compute_recommendation(
    origin: GeoCoordinate,
    destination: GeoCoordinate,
    departure: datetime,
    sample_count: Optional[int] = None,
    *,
    settings: Optional[Settings] = None,
) -> RouteVerdict:
    """Return only the route verdict for a flight (see ``analyze_flight``)."""
    return analyze_flight(
        origin, destination, departure, sample_count, settings=settings
    ).verdict
