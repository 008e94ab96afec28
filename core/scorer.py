"""Route-level aggregation of per-point verdicts into one seat recommendation."""
import logging
import math
from typing import Sequence

from core.errors import InvalidInput
from core.models import (
    Confidence,
    PointVerdict,
    RoutePoint,
    RouteVerdict,
    SeatSide,
    ViewingPeriod,
)

# Stronger side must beat the weaker one by this factor to win outright.
SIDE_RATIO_THRESHOLD = 1.3
HIGH_BLOCK_MINUTES = 20.0
MEDIUM_BLOCK_MINUTES = 10.0
MEDIUM_DIFFERENCE_SHARE = 0.10
MIN_VISIBLE_MINUTES = 10.0
MAX_SIDE_FLIPS = 3
MAX_VIEWING_PERIODS = 3

_EPSILON = 1e-9
_VIEWING_CONDITIONS = ("golden hour", "sunrise/sunset")

_log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _point_weights(points: Sequence[RoutePoint], total_minutes: float) -> list[float]:
    """Minutes each point stands for (trapezoidal, half intervals at the ends)."""
    n = len(points)
    if n == 1:
        return [float(total_minutes)]
    fractions = [p.progress_fraction for p in points]
    weights = []
    for i in range(n):
        lo = fractions[max(i - 1, 0)]
        hi = fractions[min(i + 1, n - 1)]
        weights.append((hi - lo) / 2 * total_minutes)
    return weights


def _count_side_flips(verdicts: Sequence[PointVerdict]) -> int:
    sides = [v.seat_side for v in verdicts if v.seat_side != "none"]
    return sum(1 for a, b in zip(sides, sides[1:]) if a != b)


def _longest_blocks(
    verdicts: Sequence[PointVerdict], weights: Sequence[float]
) -> dict[str, float]:
    """Longest run of consecutive same-side points, in minutes, per side."""
    longest = {"left": 0.0, "right": 0.0}
    current_side = None
    current = 0.0
    for verdict, weight in zip(verdicts, weights):
        side = verdict.seat_side
        if side == "none":
            current_side, current = None, 0.0
            continue
        if side == current_side:
            current += weight
        else:
            current_side, current = side, weight
        longest[side] = max(longest[side], current)
    return longest


def _midpoint_side(points: Sequence[RoutePoint], verdicts: Sequence[PointVerdict]) -> SeatSide:
    nearest = min(
        range(len(points)),
        key=lambda i: (abs(points[i].progress_fraction - 0.5), i),
    )
    return verdicts[nearest].seat_side


def _final_side(
    left: float,
    right: float,
    points: Sequence[RoutePoint],
    verdicts: Sequence[PointVerdict],
) -> SeatSide:
    stronger, weaker = max(left, right), min(left, right)
    ratio = stronger / max(weaker, _EPSILON)
    if ratio >= SIDE_RATIO_THRESHOLD:
        return "left" if left > right else "right"
    # Too close to call on minutes alone: let mid-flight decide.
    return _midpoint_side(points, verdicts)


def _confidence(
    final_side: SeatSide,
    left: float,
    right: float,
    visible_minutes: float,
    flips: int,
    blocks: dict[str, float],
    total_minutes: float,
) -> Confidence:
    if final_side == "none" or visible_minutes < MIN_VISIBLE_MINUTES or flips >= MAX_SIDE_FLIPS:
        return "low"

    stronger_side = "left" if left > right else "right"
    stronger, weaker = max(left, right), min(left, right)
    if (stronger > 0
            and stronger >= SIDE_RATIO_THRESHOLD * weaker
            and blocks[stronger_side] >= HIGH_BLOCK_MINUTES):
        return "high"

    if (abs(left - right) >= MEDIUM_DIFFERENCE_SHARE * total_minutes
            or max(blocks.values()) >= MEDIUM_BLOCK_MINUTES):
        return "medium"
    return "low"


def _viewing_periods(
    points: Sequence[RoutePoint],
    verdicts: Sequence[PointVerdict],
    weights: Sequence[float],
) -> tuple[ViewingPeriod, ...]:
    """Up to three longest golden-hour / sunrise-sunset runs, sorted by start."""
    runs: list[tuple[int, int, float]] = []   # (first index, last index, minutes)
    start = None
    minutes = 0.0
    for i, verdict in enumerate(verdicts):
        if verdict.special_condition in _VIEWING_CONDITIONS:
            if start is None:
                start, minutes = i, 0.0
            minutes += weights[i]
        elif start is not None:
            runs.append((start, i - 1, minutes))
            start = None
    if start is not None:
        runs.append((start, len(verdicts) - 1, minutes))

    longest = sorted(runs, key=lambda r: (-r[2], r[0]))[:MAX_VIEWING_PERIODS]
    return tuple(
        ViewingPeriod(
            start_fraction=points[first].progress_fraction,
            end_fraction=points[last].progress_fraction,
        )
        for first, last, _ in sorted(longest)
    )


def _overall_score(verdicts: Sequence[PointVerdict], final_side: SeatSide) -> int:
    if final_side == "none":
        scored = list(verdicts)
    else:
        scored = [v for v in verdicts if v.seat_side == final_side] or list(verdicts)
    mean = sum(v.view_score for v in scored) / len(scored)
    return max(1, min(10, math.floor(mean + 0.5)))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def evaluate_route(
    points: Sequence[RoutePoint],
    verdicts: Sequence[PointVerdict],
    total_duration_minutes: float,
) -> RouteVerdict:
    """
    Aggregate per-point verdicts into a single seat-side recommendation.

    Each point contributes the minutes it represents on the route
    (trapezoidal weighting over progress_fraction). The side collecting
    clearly more sun minutes wins; a close call falls back to the side seen
    at mid-flight, or "none".

    Args:
        points:                 Ordered route points (progress ascending).
        verdicts:               One PointVerdict per point, same order.
        total_duration_minutes: Estimated flight duration.

    Returns:
        RouteVerdict with the final side, a low/medium/high confidence,
        a 1-10 overall score, up to three best viewing periods and the
        per-side weighted minutes.

    Raises:
        InvalidInput: If the sequence is empty, points and verdicts differ in
                      length, or the duration is negative.
    """
    if not points:
        raise InvalidInput("cannot evaluate an empty route")
    if len(points) != len(verdicts):
        raise InvalidInput(
            f"got {len(points)} route points but {len(verdicts)} verdicts"
        )
    if not math.isfinite(total_duration_minutes) or total_duration_minutes < 0:
        raise InvalidInput(
            f"total duration must be non-negative, got {total_duration_minutes!r}"
        )

    weights = _point_weights(points, total_duration_minutes)

    left = sum(w for v, w in zip(verdicts, weights) if v.seat_side == "left")
    right = sum(w for v, w in zip(verdicts, weights) if v.seat_side == "right")
    visible = sum(w for p, w in zip(points, weights) if p.sun.visible)
    flips = _count_side_flips(verdicts)
    blocks = _longest_blocks(verdicts, weights)

    final_side = _final_side(left, right, points, verdicts)
    confidence = _confidence(
        final_side, left, right, visible, flips, blocks, total_duration_minutes
    )

    _log.debug(
        "Route verdict: side=%s confidence=%s left=%.1f right=%.1f flips=%d",
        final_side, confidence, left, right, flips,
    )

    return RouteVerdict(
        final_seat_side=final_side,
        confidence=confidence,
        overall_score=_overall_score(verdicts, final_side),
        best_viewing_periods=_viewing_periods(points, verdicts, weights),
        weighted_minutes_left=round(left, 2),
        weighted_minutes_right=round(right, 2),
        side_flip_count=flips,
    )
