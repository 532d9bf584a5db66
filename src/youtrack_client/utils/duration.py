from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# Pattern captures compact or spaced tokens, e.g., "1d 2h30m", "1.5h"
DAYS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*d")
HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*h")
MINUTES_RE = re.compile(r"(\d+(?:\.\d+)?)\s*m")
BARE_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
DURATION_RE = re.compile(r"(?:\d+(?:\.\d+)?\s*[dhm]\s*)+")

# YouTrack's default time-tracking settings
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 8


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed into minutes."""


def parse_duration_minutes(duration: Union[str, int]) -> int:
    """
    Parse human-friendly durations like "2h", "30m", "2h 30m", "1d", "1.5h" into minutes.

    Rules:
    - Accept day/hour/minute tokens (d/h/m), compact or spaced; a day is 8 hours.
    - A bare number ("45") means minutes; an int is taken as minutes as-is.
    - Decimals allowed; rounding is HALF_UP to the nearest minute.
    - Reject negatives, zero, and inputs with no valid tokens.
    """
    if isinstance(duration, bool):
        raise DurationParseError("Duration must be a string or a number of minutes.")
    if isinstance(duration, int):
        if duration <= 0:
            raise DurationParseError("Duration must be greater than zero.")
        return duration
    if duration is None:
        raise DurationParseError("Duration is required.")

    normalized = " ".join(duration.lower().strip().split())
    if not normalized:
        raise DurationParseError("Duration is required.")
    if "-" in normalized:
        raise DurationParseError("Negative durations are not allowed.")

    # Every character must belong to a number+unit token; nothing is skipped.
    if BARE_NUMBER_RE.fullmatch(normalized):
        days, hours, minutes = Decimal("0"), Decimal("0"), Decimal(normalized)
    elif DURATION_RE.fullmatch(normalized):
        days = _sum_matches(DAYS_RE, normalized)
        hours = _sum_matches(HOURS_RE, normalized)
        minutes = _sum_matches(MINUTES_RE, normalized)
    else:
        raise DurationParseError(
            f"Invalid duration {duration!r}. Accepted examples: '2h', '30m', '1d 2h', '45'."
        )

    total = (days * HOURS_PER_DAY + hours) * MINUTES_PER_HOUR + minutes
    total = total.quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    if total <= 0:
        raise DurationParseError("Duration must be greater than zero (e.g., '2h', '30m').")
    return int(total)


def format_minutes(minutes: int) -> str:
    """Render minutes the way YouTrack presents durations, e.g. 630 -> '1d 2h 30m'."""
    if minutes <= 0:
        return "0m"
    day_minutes = HOURS_PER_DAY * MINUTES_PER_HOUR
    days, rest = divmod(minutes, day_minutes)
    hours, mins = divmod(rest, MINUTES_PER_HOUR)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if mins:
        parts.append(f"{mins}m")
    return " ".join(parts)


def _sum_matches(pattern: re.Pattern[str], text: str) -> Decimal:
    total = Decimal("0")
    for match in pattern.finditer(text):
        total += Decimal(match.group(1))
    return total
