"""Optional free-text annotation of a finished recommendation.

Annotations are decoration only: they are produced after the verdict is
computed and nothing numeric ever reads them back.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from core.config import Settings
from core.models import FlightAnalysis, to_record

_log = logging.getLogger(__name__)

_SIDE_NAMES = {"left": "Left side", "right": "Right side"}


@dataclass(frozen=True)
class Annotation:
    reasoning: str
    highlights: tuple[str, ...] = ()


def _percent(fraction: float) -> int:
    return round(fraction * 100)


class SummaryAnnotator:
    """Builds a plain-English explanation from the verdict's own numbers."""

    async def annotate(self, analysis: FlightAnalysis) -> Annotation:
        return self.summarize(analysis)

    def summarize(self, analysis: FlightAnalysis) -> Annotation:
        verdict = analysis.verdict
        left = verdict.weighted_minutes_left
        right = verdict.weighted_minutes_right

        if verdict.final_seat_side == "none":
            if left + right == 0:
                reasoning = (
                    "No seat side stands out; the sun is never clearly "
                    "off either wing during this flight."
                )
            else:
                reasoning = (
                    "No significant difference between sides; "
                    f"~{round(left)} min of side sun on the left vs "
                    f"~{round(right)} min on the right."
                )
        else:
            side = verdict.final_seat_side
            own, other = (left, right) if side == "left" else (right, left)
            reasoning = (
                f"{_SIDE_NAMES[side]} recommended ({verdict.confidence} confidence). "
                f"The sun is off that side for ~{round(own)} min "
                f"vs ~{round(other)} min on the other."
            )
        if verdict.side_flip_count:
            reasoning += f" The sun changes sides {verdict.side_flip_count} time(s)."

        highlights = [
            f"Low-sun views from {_percent(p.start_fraction)}% "
            f"to {_percent(p.end_fraction)}% of the flight"
            for p in verdict.best_viewing_periods
        ]
        conditions = {fp.verdict.special_condition for fp in analysis.points}
        if "sunrise/sunset" in conditions:
            highlights.append("Sunrise or sunset along the route")
        if "overhead sun" in conditions:
            highlights.append("High overhead sun for part of the flight")
        if conditions == {"not visible"}:
            highlights.append("Flight is entirely in darkness")

        return Annotation(reasoning=reasoning, highlights=tuple(highlights))


class HttpAnnotator:
    """
    Delegates annotation to an external HTTP service.

    The service receives the serialised FlightAnalysis as JSON and must reply
    with ``{"reasoning": str, "highlights": [str, ...]}``.
    """

    def __init__(self, url: str, timeout: float = 10.0, retries: int = 1):
        self.url = url
        self.timeout = timeout
        self.retries = retries

    async def annotate(self, analysis: FlightAnalysis) -> Annotation:
        """
        Raises:
            httpx.HTTPError: When every attempt fails at the transport or HTTP level.
            ValueError:      When the reply is not the expected JSON shape.
        """
        payload = to_record(analysis)
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                try:
                    response = await client.post(self.url, json=payload)
                    response.raise_for_status()
                    break
                except httpx.TransportError as exc:
                    if attempt >= self.retries:
                        raise
                    attempt += 1
                    _log.warning(
                        "Annotator request failed (%s); retry %d of %d",
                        exc, attempt, self.retries,
                    )
        return _parse_annotation(response.json())


def _parse_annotation(data: object) -> Annotation:
    if not isinstance(data, dict) or not isinstance(data.get("reasoning"), str):
        raise ValueError("annotator reply must be an object with a 'reasoning' string")
    highlights = data.get("highlights") or []
    if not isinstance(highlights, list) or not all(isinstance(h, str) for h in highlights):
        raise ValueError("annotator 'highlights' must be a list of strings")
    return Annotation(reasoning=data["reasoning"], highlights=tuple(highlights))


def build_annotator(settings: Settings) -> Union[SummaryAnnotator, HttpAnnotator]:
    if settings.annotator_url:
        return HttpAnnotator(
            settings.annotator_url,
            timeout=settings.annotator_timeout,
            retries=settings.annotator_retries,
        )
    return SummaryAnnotator()


def annotation_deadline(settings: Settings) -> float:
    """Overall time allowed for annotation: one request timeout per attempt."""
    return settings.annotator_timeout * (settings.annotator_retries + 1)


async def annotate_safely(
    annotator: Union[SummaryAnnotator, HttpAnnotator],
    analysis: FlightAnalysis,
    timeout: float,
) -> Optional[Annotation]:
    """
    Run an annotator under an overall timeout.

    Returns None (and logs a warning) if it times out or fails, so a
    recommendation is always delivered with or without its annotation.
    """
    try:
        return await asyncio.wait_for(annotator.annotate(analysis), timeout)
    except asyncio.TimeoutError:
        _log.warning("Annotator timed out after %.1fs; returning verdict without it.", timeout)
    except (httpx.HTTPError, ValueError) as exc:
        _log.warning("Annotator failed (%s); returning verdict without it.", exc)
    return None
