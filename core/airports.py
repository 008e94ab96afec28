"""Airport directory: resolve IATA/ICAO codes and free-text searches to coordinates."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from core.models import GeoCoordinate

_COLUMNS = ["iata", "icao", "name", "city", "country", "latitude", "longitude"]
_SEARCH_COLUMNS = ["name", "city", "country", "iata", "icao"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Airport:
    iata: str
    icao: str
    name: str
    city: str
    country: str
    coordinate: GeoCoordinate


class AirportDirectory:
    """
    In-memory airport table backed by a CSV file.

    The directory is loaded once by whoever owns it (the API lifespan, a CLI
    run, a test fixture); ``load()`` is safe to call repeatedly.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._frame: Optional[pd.DataFrame] = None

    @property
    def loaded(self) -> bool:
        return self._frame is not None

    def load(self) -> "AirportDirectory":
        if self._frame is not None:
            return self

        frame = pd.read_csv(self.path, dtype={"iata": str, "icao": str}, keep_default_na=False)
        missing = set(_COLUMNS) - set(frame.columns)
        if missing:
            raise ValueError(f"{self.path} is missing columns: {sorted(missing)}")

        frame["iata"] = frame["iata"].str.strip().str.upper()
        frame["icao"] = frame["icao"].str.strip().str.upper()
        frame["search_text"] = (
            frame[_SEARCH_COLUMNS].astype(str).agg(" ".join, axis=1).str.lower()
        )
        self._frame = frame
        _log.info("Loaded %d airports from %s", len(frame), self.path)
        return self

    def _require(self) -> pd.DataFrame:
        if self._frame is None:
            raise RuntimeError("Airport directory not loaded")
        return self._frame

    def __len__(self) -> int:
        return len(self._require())

    def get(self, code: str) -> Optional[Airport]:
        """Exact IATA or ICAO lookup; None when the code is unknown."""
        frame = self._require()
        code = (code or "").strip().upper()
        if not code:
            return None
        matches = frame[(frame["iata"] == code) | (frame["icao"] == code)]
        if matches.empty:
            return None
        return _to_airport(matches.iloc[0])

    def search(self, query: str, limit: int = 10) -> list[Airport]:
        """Case-insensitive substring match on name, city, country and codes."""
        frame = self._require()
        query = (query or "").strip().lower()
        if not query:
            return []
        hits = frame[frame["search_text"].str.contains(query, regex=False)]
        return [_to_airport(row) for _, row in hits.head(limit).iterrows()]


def _to_airport(row: pd.Series) -> Airport:
    return Airport(
        iata=row["iata"],
        icao=row["icao"],
        name=row["name"],
        city=row["city"],
        country=row["country"],
        coordinate=GeoCoordinate(
            latitude=float(row["latitude"]), longitude=float(row["longitude"])
        ),
    )
