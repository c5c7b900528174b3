"""
Date Extraction
===============
Date ranges and bare months from chat messages

Range patterns, most specific first:
1. "<Month> <d1> - <d2>"          April 10 - 20, Apr 10-20
2. "<Month> <d1> to <d2>"         April 10 to 20
3. "<Month> <d1> to <Month> <d2>" April 28 to May 3
4. "<d1>-<d2> <Month>"            10-20 April

Year rule: the current year, unless the month is strictly before the
current month, in which case next year. A cross-month range whose end
month precedes its start month ends in the following year. Impossible
dates (Feb 30) and reversed ranges are rejected and the next pattern is
tried.
"""

import re
from datetime import date
from functools import partial

from tripzz_agent.extraction.common import MONTH_LOOKUP, MONTHS, first_match
from tripzz_agent.state import TravelDates

_MONTH = "|".join(sorted(MONTH_LOOKUP, key=len, reverse=True))
_DAY = r"(?:the\s+)?(\d{1,2})(?:st|nd|rd|th)?"
_DASH = r"\s*[-–—]\s*"
_UNTIL = r"\s+(?:to|until|till|through|thru)\s+"


def _day(name: str) -> str:
    return _DAY.replace("(\\d", f"(?P<{name}>\\d")


RANGE_PATTERNS = (
    re.compile(rf"\b(?P<month>{_MONTH})\.?\s+{_day('start')}{_DASH}{_day('end')}\b", re.IGNORECASE),
    re.compile(rf"\b(?P<month>{_MONTH})\.?\s+{_day('start')}{_UNTIL}{_day('end')}\b(?!\s*(?:{_MONTH})\b)", re.IGNORECASE),
    re.compile(
        rf"\b(?P<month>{_MONTH})\.?\s+{_day('start')}(?:{_UNTIL}|{_DASH})(?P<end_month>{_MONTH})\.?\s+{_day('end')}\b",
        re.IGNORECASE,
    ),
    re.compile(
        rf"\b{_day('start')}(?:{_DASH}|{_UNTIL}){_day('end')}\s+(?:of\s+)?(?P<month>{_MONTH})\b",
        re.IGNORECASE,
    ),
)

_DAY_RANGE = re.compile(
    rf"^(?:from\s+)?{_day('start')}(?:{_DASH}|{_UNTIL}){_day('end')}$",
    re.IGNORECASE,
)
_BARE_MONTH = re.compile(rf"\b({'|'.join(MONTHS)})\b", re.IGNORECASE)


def resolve_year(month: int, today: date) -> int:
    """Current year, or next year if the month has already passed"""
    return today.year + 1 if month < today.month else today.year


def build_range(
    start_month: int,
    start_day: int,
    end_month: int,
    end_day: int,
    today: date,
) -> TravelDates | None:
    """Two month/day pairs to a complete range, or None if impossible"""
    year = resolve_year(start_month, today)
    end_year = year + 1 if end_month < start_month else year
    try:
        start = date(year, start_month, start_day)
        end = date(end_year, end_month, end_day)
    except ValueError:
        return None
    if end < start:
        return None
    return TravelDates(start=start, end=end)


def _match_range(pattern: re.Pattern[str], message: str, today: date) -> TravelDates | None:
    match = pattern.search(message)
    if not match:
        return None
    groups = match.groupdict()
    start_month = MONTH_LOOKUP[groups["month"].lower()]
    end_month = MONTH_LOOKUP[groups["end_month"].lower()] if groups.get("end_month") else start_month
    return build_range(start_month, int(groups["start"]), end_month, int(groups["end"]), today)


def extract_date_range(message: str | None, today: date | None = None) -> TravelDates | None:
    """
    Extract a complete travel date range

    Example:
        >>> extract_date_range("April 10 - 20", today=date(2026, 3, 1))
        TravelDates(start=datetime.date(2026, 4, 10), end=datetime.date(2026, 4, 20))
    """
    if not message:
        return None
    today = today or date.today()
    strategies = [partial(_match_range, pattern, today=today) for pattern in RANGE_PATTERNS]
    return first_match(strategies, message)


def extract_month(message: str | None) -> str | None:
    """First full month name in the message, capitalized ('april' -> 'April')"""
    match = _BARE_MONTH.search(message or "")
    return match.group(1).capitalize() if match else None


def extract_day_range(message: str | None, month: str | None, today: date | None = None) -> TravelDates | None:
    """
    Combine a bare day range ("10-20", "from 10 to 20") with a previously staged month
    """
    if not message or not month or month.lower() not in MONTH_LOOKUP:
        return None
    match = _DAY_RANGE.search(message.strip().rstrip(".!?"))
    if not match:
        return None
    month_index = MONTH_LOOKUP[month.lower()]
    return build_range(
        month_index, int(match.group("start")), month_index, int(match.group("end")), today or date.today()
    )
