"""Timestamp-text parsing for schedule table cells.

Turns the informal UTC timestamp strings found in schedule tables into
``ParsedTime`` values.  Four formats are recognised, tried in a fixed order
because they overlap in prefix:

  1. ``2025-10-04 (08:00 UTC) / 2025-10-05 (18:00 UTC)``  -> Range
  2. ``2025-10-04 (08:00 UTC)``                            -> Instant
  3. ``2025-10-04 / 2025-10-12``                           -> Range (midnight UTC)
  4. ``Nov 01 (Sat) 08:00 UTC``                            -> Instant, year inferred

Parsing never raises: text that matches no pattern, or that names an impossible
calendar date or time, yields ``None``.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime, timezone

from schedtz.tables.patterns import (
    DATE_RANGE_RE,
    MATCH_TIME_RE,
    MONTHS,
    TIMED_INSTANT_RE,
    TIMED_RANGE_RE,
    YEAR_RE,
    normalize,
)
from schedtz.tables.schema import Instant, ParsedTime, Range

logger = logging.getLogger(__name__)


def _utc(year: str | int, month: str | int, day: str | int, hour: str | int = 0, minute: str | int = 0) -> datetime:
    """Build a UTC datetime from string or int components (raises ValueError if impossible)."""
    return datetime(int(year), int(month), int(day), int(hour), int(minute), tzinfo=timezone.utc)


# ─── Year Inference ──────────────────────────────────────────────────────────


def infer_year(section_texts: Iterable[str] | None, today: date | None = None) -> int:
    """Return the first 20xx year found in *section_texts*, else the current UTC year.

    *section_texts* yields the text of the elements surrounding a cell, nearest
    first (see ``document.section_texts``).  It is consumed lazily and the walk
    stops at the first hit, so a heading far up the document is only read when
    nothing closer carries a year.
    """
    for text in section_texts or ():
        match = YEAR_RE.search(text or "")
        if match:
            return int(match.group(1))
    if today is None:
        today = datetime.now(timezone.utc).date()
    return today.year


# ─── Individual Strategies ───────────────────────────────────────────────────


def parse_timestamp_cell(text: str) -> ParsedTime | None:
    """Parse the ISO-dated formats (1-3).  Returns None if none match."""
    normalized = normalize(text)
    try:
        match = TIMED_RANGE_RE.search(normalized)
        if match:
            g = match.groups()
            return Range(start=_utc(*g[0:5]), end=_utc(*g[5:10]))

        match = TIMED_INSTANT_RE.search(normalized)
        if match:
            return Instant(at=_utc(*match.groups()))

        match = DATE_RANGE_RE.search(normalized)
        if match:
            g = match.groups()
            return Range(start=_utc(*g[0:3]), end=_utc(*g[3:6]))
    except ValueError:
        # Pattern matched but the date/time is impossible (e.g. 2025-02-30, 25:00)
        logger.debug("Rejected out-of-range timestamp: %r", normalized)
    return None


def parse_match_time(text: str, context: Iterable[str] | None = None, today: date | None = None) -> ParsedTime | None:
    """Parse a year-less match time like ``Nov 01 (Sat) 08:00 UTC`` (format 4).

    The year comes from the nearest section heading in *context*; see
    ``infer_year``.
    """
    match = MATCH_TIME_RE.match(normalize(text))
    if not match:
        return None
    month_str, day, hour, minute = match.groups()

    month = MONTHS.get(month_str.lower())
    if month is None:
        return None

    year = infer_year(context, today=today)
    try:
        return Instant(at=_utc(year, month, day, hour, minute))
    except ValueError:
        logger.debug("Rejected out-of-range match time: %r (year %d)", text, year)
        return None


def parse_timestamp(text: str, context: Iterable[str] | None = None, today: date | None = None) -> ParsedTime | None:
    """Parse any supported format, trying the four patterns in precedence order."""
    return parse_timestamp_cell(text) or parse_match_time(text, context, today=today)
