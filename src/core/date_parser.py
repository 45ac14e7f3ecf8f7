"""Natural-language date parsing for quick task entry.

Recognizes a fixed set of English scheduling phrases ("tomorrow at 2pm",
"next friday", "in 3 days in the evening") anywhere in a line of text.

Resolution is first-match-wins: the day patterns are tried in list order and
the first one that matches anywhere in the text decides the day, regardless of
where other phrases sit in the text. A time of day is then looked up the same
way. Text without a day phrase never parses, even if it contains a time.
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from src.core.config import Constants


logger = logging.getLogger(__name__)

WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

PARTS_OF_DAY: dict[str, int] = {
    "morning": 9,
    "afternoon": 14,
    "evening": 18,
    "night": 20,
}

_WEEKDAY_NAMES = "|".join(WEEKDAYS)

DayResolver = Callable[[re.Match[str], datetime], datetime]
TimeResolver = Callable[[re.Match[str]], tuple[int, int] | None]


class ParsedDate(BaseModel):
    """A recognized scheduling phrase and the timestamp it resolves to."""

    matched_text: str
    date: datetime
    phrases: list[str] = Field(default_factory=list, description="Day and time substrings as they appear in the input")


def next_weekday(now: datetime, weekday: int) -> datetime:
    """Return the next occurrence of `weekday` strictly after `now`'s day (Monday=0)."""
    days_ahead = weekday - now.weekday()
    if days_ahead <= 0:  # Target day is today or already passed this week
        days_ahead += 7
    return now + timedelta(days=days_ahead)


def _tomorrow(_match: re.Match[str], now: datetime) -> datetime:
    return now + timedelta(days=1)


def _today(_match: re.Match[str], now: datetime) -> datetime:
    return now


def _in_days(match: re.Match[str], now: datetime) -> datetime:
    return now + timedelta(days=int(match.group("count")))


def _bare_weekday(weekday: int) -> DayResolver:
    def resolve(_match: re.Match[str], now: datetime) -> datetime:
        return next_weekday(now, weekday)

    return resolve


def _this_weekday(match: re.Match[str], now: datetime) -> datetime:
    return next_weekday(now, WEEKDAYS[match.group("weekday").lower()])


def _next_weekday_plus_week(match: re.Match[str], now: datetime) -> datetime:
    return next_weekday(now, WEEKDAYS[match.group("weekday").lower()]) + timedelta(days=7)


def _next_week(_match: re.Match[str], now: datetime) -> datetime:
    return now + timedelta(days=7)


# Order is the tie-break policy. A weekday qualified by "this"/"next" is left to
# the qualified patterns further down.
DAY_PATTERNS: list[tuple[re.Pattern[str], DayResolver]] = [
    (re.compile(r"\btomorrow\b", re.IGNORECASE), _tomorrow),
    (re.compile(r"\btoday\b", re.IGNORECASE), _today),
    (re.compile(r"\bin (?P<count>[0-9]+) days?\b", re.IGNORECASE), _in_days),
    *[
        (re.compile(rf"(?<!this )(?<!next )\b{name}\b", re.IGNORECASE), _bare_weekday(weekday))
        for name, weekday in WEEKDAYS.items()
    ],
    (re.compile(rf"\bthis (?P<weekday>{_WEEKDAY_NAMES})\b", re.IGNORECASE), _this_weekday),
    (re.compile(rf"\bnext (?P<weekday>{_WEEKDAY_NAMES})\b", re.IGNORECASE), _next_weekday_plus_week),
    (re.compile(r"\bnext week\b", re.IGNORECASE), _next_week),
]


def to_24_hour(hour: int, meridiem: str | None) -> int:
    """Normalize a 12-hour clock value (am 12 -> 0, pm 1-11 -> 13-23)."""
    if meridiem is None:
        return hour
    meridiem = meridiem.lower()
    if meridiem == "pm" and hour != 12:  # noqa: PLR2004
        return hour + 12
    if meridiem == "am" and hour == 12:  # noqa: PLR2004
        return 0
    return hour


def _clock_time(match: re.Match[str]) -> tuple[int, int] | None:
    groups = match.groupdict()
    hour = int(groups["hour"])
    minute = int(groups.get("minute") or 0)
    meridiem = groups.get("meridiem")

    max_hour = 12 if meridiem else 23
    min_hour = 1 if meridiem else 0
    if not min_hour <= hour <= max_hour or not 0 <= minute <= 59:  # noqa: PLR2004
        return None

    return to_24_hour(hour, meridiem), minute


def _part_of_day(match: re.Match[str]) -> tuple[int, int] | None:
    return PARTS_OF_DAY[match.group("part").lower()], 0


TIME_PATTERNS: list[tuple[re.Pattern[str], TimeResolver]] = [
    (
        re.compile(r"\bat (?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{2})\s*(?P<meridiem>am|pm)?\b", re.IGNORECASE),
        _clock_time,
    ),
    (re.compile(r"\bat (?P<hour>[0-9]{1,2})\s*(?P<meridiem>am|pm)\b", re.IGNORECASE), _clock_time),
    (re.compile(r"\b(?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{2})\s*(?P<meridiem>am|pm)\b", re.IGNORECASE), _clock_time),
    (re.compile(r"\b(?P<hour>[0-9]{1,2})\s*(?P<meridiem>am|pm)\b", re.IGNORECASE), _clock_time),
    (re.compile(r"\bin the (?P<part>morning|afternoon|evening|night)\b", re.IGNORECASE), _part_of_day),
]


def _match_day(text: str, now: datetime) -> tuple[str, datetime] | None:
    for pattern, resolve in DAY_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            return match.group(0), resolve(match, now)
        except (OverflowError, ValueError):
            # "in 99999999 days" lands outside the datetime range; counts past the int digit limit fail to parse
            logger.debug("Day phrase '%s' out of range, trying next pattern", match.group(0))
    return None


def _match_time(text: str) -> tuple[str, int, int] | None:
    for pattern, resolve in TIME_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        resolved = resolve(match)
        if resolved is not None:
            hour, minute = resolved
            return match.group(0), hour, minute
    return None


def parse_natural_language_date(text: str, now: datetime) -> ParsedDate | None:
    """Find a scheduling phrase in free text and resolve it against `now`.

    Args:
        text: Raw user input (e.g., "Call mom tomorrow at 2pm")
        now: Reference time the phrase is relative to

    Returns:
        ParsedDate with the matched phrase (original case, day and time parts
        space-joined) and the resolved timestamp, or None when no day phrase is
        present. A missing time of day defaults to 09:00:00.
    """
    day = _match_day(text, now)
    if day is None:
        return None

    matched_text, date = day
    phrases = [matched_text]
    time = _match_time(text)
    if time is not None:
        time_text, hour, minute = time
        matched_text = f"{matched_text} {time_text}"
        phrases.append(time_text)
    else:
        hour, minute = Constants.DEFAULT_DUE_HOUR, 0

    return ParsedDate(
        matched_text=matched_text.strip(),
        date=date.replace(hour=hour, minute=minute, second=0, microsecond=0),
        phrases=[phrase.strip() for phrase in phrases],
    )


def remove_phrase(text: str, phrase: str) -> str:
    """Remove the first case-insensitive occurrence of `phrase` and collapse whitespace."""
    cleaned = re.sub(re.escape(phrase), "", text, count=1, flags=re.IGNORECASE)
    return " ".join(cleaned.split())
