from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from .status_rules import STATUS_LOG_LEVELS, StandupStatus

if TYPE_CHECKING:
    from .auditor import StandupResult

logger = logging.getLogger(__name__)

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000


def _with_fraction(whole: int, frac: int, digits: int) -> str:
    if not frac:
        return str(whole)
    return f"{whole}.{str(frac).rjust(digits, '0').rstrip('0')}"


def format_duration(ns: int) -> str:
    """Render nanoseconds the way Go prints a time.Duration, e.g. "2h1m0s", "1.5s", "250ms"."""

    if ns == 0:
        return "0s"

    sign = "-" if ns < 0 else ""
    ns = abs(ns)

    if ns < _NANOS_PER_SECOND:
        if ns < _NANOS_PER_MICRO:
            return f"{sign}{ns}ns"
        if ns < _NANOS_PER_MILLI:
            return sign + _with_fraction(*divmod(ns, _NANOS_PER_MICRO), 3) + "µs"
        return sign + _with_fraction(*divmod(ns, _NANOS_PER_MILLI), 6) + "ms"

    total_seconds, frac = divmod(ns, _NANOS_PER_SECOND)
    hours, rem = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rem, 60)

    parts = [sign]
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(_with_fraction(seconds, frac, 9) + "s")
    return "".join(parts)


def describe_result(result: "StandupResult") -> str:
    """One-line message for a StandupResult, without the user prefix."""

    if result.status == StandupStatus.MISSING:
        return "no stand-up"
    if result.status == StandupStatus.EARLY:
        return f"stand-up {format_duration(result.delta_ns)} early"
    return f"stand-up {format_duration(abs(result.delta_ns))} late"


def log_results(results: Iterable["StandupResult"]) -> None:
    for result in results:
        logger.log(
            STATUS_LOG_LEVELS[result.status],
            "%s: %s",
            result.user_name,
            describe_result(result),
            extra={"user": result.user_name},
        )
