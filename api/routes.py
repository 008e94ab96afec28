"""API route definitions."""
import logging
import math
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from core.airports import AirportDirectory
from core.annotator import (
    Annotation,
    annotate_safely,
    annotation_deadline,
    build_annotator,
)
from core.config import Settings
from core.errors import DegenerateInput, InvalidInput
from core.models import (
    FlightDuration,
    FlightPoint,
    GeoCoordinate,
    PointVerdict,
    RoutePoint,
    RouteVerdict,
    SunSample,
    to_record,
)
from core.pipeline import analyze_flight
from core.scoring import classify_point
from core.solar import sun_position

router = APIRouter()

_log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class CoordinatesIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class RecommendRequest(BaseModel):
    origin: Union[CoordinatesIn, str] = Field(
        ..., description="IATA/ICAO code or {latitude, longitude}"
    )
    destination: Union[CoordinatesIn, str] = Field(
        ..., description="IATA/ICAO code or {latitude, longitude}"
    )
    departure_time: datetime = Field(
        ..., description="Departure time in ISO 8601 format; naive timestamps assumed UTC"
    )
    sample_count: Optional[int] = Field(
        None, ge=2, le=1000, description="Route samples; defaults to the server setting"
    )
    annotate: bool = Field(True, description="Attach a free-text explanation")


class RecommendResponse(BaseModel):
    verdict: RouteVerdict
    distance_km: float
    duration: FlightDuration
    points: list[FlightPoint]
    annotation: Optional[Annotation] = None


# ---------------------------------------------------------------------------
# Dependencies / internal helpers
# ---------------------------------------------------------------------------

def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not initialised; start the app through its lifespan")
    return settings


def get_airports(request: Request) -> AirportDirectory:
    airports = getattr(request.app.state, "airports", None)
    if airports is None:
        raise RuntimeError("Airport directory not initialised")
    return airports


def _resolve(
    endpoint: Union[CoordinatesIn, str], airports: AirportDirectory
) -> GeoCoordinate:
    """Turn an airport code or explicit coordinates into a GeoCoordinate."""
    if isinstance(endpoint, CoordinatesIn):
        return GeoCoordinate(latitude=endpoint.latitude, longitude=endpoint.longitude)
    airport = airports.get(endpoint)
    if airport is None:
        raise HTTPException(status_code=404, detail=f"Unknown airport code: {endpoint!r}")
    return airport.coordinate


def _coordinate(lat: float, lon: float) -> GeoCoordinate:
    try:
        return GeoCoordinate(latitude=lat, longitude=lon)
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _utc(dt: Optional[datetime]) -> datetime:
    if dt is None:
        return datetime.now(timezone.utc)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/sun-position", response_model=SunSample)
def get_sun_position(
    lat: float = Query(..., description="Latitude"),
    lon: float = Query(..., description="Longitude"),
    dt: datetime = Query(default=None, description="ISO datetime (UTC); defaults to now"),
):
    return sun_position(_coordinate(lat, lon), _utc(dt))


@router.get("/seat-side", response_model=PointVerdict)
def seat_side(
    lat: float = Query(..., description="Latitude"),
    lon: float = Query(..., description="Longitude"),
    heading: float = Query(..., description="Aircraft heading in degrees (0=North, clockwise)"),
    dt: datetime = Query(default=None, description="ISO datetime (UTC); defaults to now"),
):
    coordinate = _coordinate(lat, lon)
    instant = _utc(dt)
    if not math.isfinite(heading):
        raise HTTPException(status_code=400, detail=f"heading must be finite, got {heading!r}")
    point = RoutePoint(
        index=0,
        progress_fraction=0.0,
        coordinate=coordinate,
        timestamp=instant,
        flight_bearing_degrees=heading % 360,
        sun=sun_position(coordinate, instant),
    )
    try:
        return classify_point(point)
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/airports/search")
def search_airports(
    query: str = Query("", description="Name, city, country or code fragment"),
    airports: AirportDirectory = Depends(get_airports),
):
    return {"results": [to_record(a) for a in airports.search(query)]}


# ---------------------------------------------------------------------------
# POST /recommendation
# ---------------------------------------------------------------------------

@router.post("/recommendation", response_model=RecommendResponse)
async def recommendation(
    body: RecommendRequest,
    settings: Settings = Depends(get_settings),
    airports: AirportDirectory = Depends(get_airports),
) -> RecommendResponse:
    """
    Full seat-recommendation pipeline:
      1. Resolve origin/destination (airport code or coordinates)
      2. Sample the great-circle route and classify every point
      3. Aggregate into the final side, confidence and viewing periods
      4. Optionally attach a free-text annotation (never affects the verdict)
    """
    origin = _resolve(body.origin, airports)
    destination = _resolve(body.destination, airports)

    try:
        # Sampling and pvlib calls are CPU-bound; keep them off the event loop.
        analysis = await run_in_threadpool(
            analyze_flight,
            origin,
            destination,
            _utc(body.departure_time),
            body.sample_count,
            settings=settings,
        )
    except DegenerateInput as exc:
        _log.info("Rejected degenerate route: %s", exc)
        raise HTTPException(
            status_code=422,
            detail={"message": str(exc), "points": to_record(list(exc.points))},
        )
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    annotation = None
    if body.annotate:
        annotation = await annotate_safely(
            build_annotator(settings), analysis, timeout=annotation_deadline(settings)
        )

    return RecommendResponse(
        verdict=analysis.verdict,
        distance_km=analysis.distance_km,
        duration=analysis.duration,
        points=list(analysis.points),
        annotation=annotation,
    )
