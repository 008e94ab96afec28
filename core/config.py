"""Runtime settings read from the environment (and a local .env file)."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.errors import InvalidInput
from core.geo import DEFAULT_AVG_SPEED_KMH
from core.routing import DEFAULT_SAMPLE_COUNT

load_dotenv()

DEFAULT_AIRPORTS_PATH = Path(__file__).resolve().parent / "data" / "airports.csv"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """
    Tunables for the recommendation pipeline and its collaborators.

    Build one with ``Settings.from_env()`` at start-up and pass it along;
    nothing in the core reads the environment on its own.
    """

    sample_count: int = DEFAULT_SAMPLE_COUNT
    avg_speed_kmh: float = DEFAULT_AVG_SPEED_KMH
    max_workers: Optional[int] = None
    airports_path: Path = DEFAULT_AIRPORTS_PATH
    annotator_url: Optional[str] = None
    annotator_timeout: float = 10.0
    annotator_retries: int = 1

    def __post_init__(self):
        if self.sample_count < 2:
            raise InvalidInput(f"sample_count must be >= 2, got {self.sample_count}")
        if self.avg_speed_kmh <= 0:
            raise InvalidInput(f"avg_speed_kmh must be positive, got {self.avg_speed_kmh}")
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidInput(f"max_workers must be >= 1, got {self.max_workers}")
        if self.annotator_timeout <= 0:
            raise InvalidInput(
                f"annotator_timeout must be positive, got {self.annotator_timeout}"
            )
        if self.annotator_retries < 0:
            raise InvalidInput(
                f"annotator_retries must be >= 0, got {self.annotator_retries}"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read SEATSIDE_* variables, falling back to the defaults above.

        Raises:
            InvalidInput: If a variable is set but malformed or out of range.
        """
        airports = os.getenv("SEATSIDE_AIRPORTS_PATH")
        return cls(
            sample_count=_env_int("SEATSIDE_SAMPLE_COUNT", DEFAULT_SAMPLE_COUNT),
            avg_speed_kmh=_env_float("SEATSIDE_AVG_SPEED_KMH", DEFAULT_AVG_SPEED_KMH),
            max_workers=_env_int("SEATSIDE_MAX_WORKERS", None),
            airports_path=Path(airports) if airports else DEFAULT_AIRPORTS_PATH,
            annotator_url=os.getenv("SEATSIDE_ANNOTATOR_URL") or None,
            annotator_timeout=_env_float("SEATSIDE_ANNOTATOR_TIMEOUT", 10.0),
            annotator_retries=_env_int("SEATSIDE_ANNOTATOR_RETRIES", 1),
        )
