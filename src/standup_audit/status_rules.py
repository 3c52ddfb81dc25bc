from __future__ import annotations

from dataclasses import dataclass
import logging


@dataclass(frozen=True)
class StandupStatus:
    EARLY: str = "EARLY"
    LATE: str = "LATE"
    MISSING: str = "MISSING"


# Log level each status is reported at.
STATUS_LOG_LEVELS = {
    StandupStatus.EARLY: logging.INFO,
    StandupStatus.LATE: logging.WARNING,
    StandupStatus.MISSING: logging.ERROR,
}


def classify_delta(delta_ns: int) -> str:
    """Positive means the stand-up landed before the deadline; zero counts as late."""
    return StandupStatus.EARLY if delta_ns > 0 else StandupStatus.LATE
