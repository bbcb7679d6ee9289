"""Timezone-aware rendering of parsed schedule times.

Produces the text written into the injected "Local time" column:

  instant:          ``Sat, Nov 01, 2025, 08:00 AM UTC``
  same-day range:   ``Jun 01, 2025, 08:00 AM – 10:00 AM``
  multi-day range:  ``Jun 01, 2025 – Jun 02, 2025``

Whether a range is "same-day" is decided on the calendar of the target
timezone, not on the UTC calendar.  Unknown timezone identifiers raise
``InvalidTimezoneError`` instead of silently falling back to a default.
"""

import logging
from datetime import datetime, timedelta

from schedtz.tables.schema import Instant, ParsedTime, Range, resolve_timezone

logger = logging.getLogger(__name__)

# Written into a derived cell when the source text could not be parsed
PLACEHOLDER = "—"

# Separator between the two ends of a range
RANGE_SEPARATOR = " – "

_DATE_FORMAT = "%b %d, %Y"
_TIME_FORMAT = "%I:%M %p"


# ─── Zone Names ──────────────────────────────────────────────────────────────


def _gmt_offset_name(offset: timedelta) -> str:
    """Render a UTC offset as ``GMT+4`` / ``GMT-3:30`` (``GMT`` for zero)."""
    total_minutes = int(offset.total_seconds() // 60)
    if total_minutes == 0:
        return "GMT"
    sign = "+" if total_minutes > 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"GMT{sign}{hours}:{minutes:02d}" if minutes else f"GMT{sign}{hours}"


def short_zone_name(local: datetime) -> str:
    """Return the short zone name for an aware datetime.

    The zoneinfo database has no abbreviation for many zones and reports a bare
    offset (``+04``) instead; those are rewritten in the ``GMT+4`` form.
    """
    name = local.tzname() or ""
    if name and name[0] not in "+-":
        return name
    return _gmt_offset_name(local.utcoffset() or timedelta(0))


# ─── Public Formatters ───────────────────────────────────────────────────────


def format_instant(at: datetime, tz_name: str) -> str:
    """Format a UTC instant in *tz_name*: weekday, date, 12-hour time and zone."""
    local = at.astimezone(resolve_timezone(tz_name))
    return f"{local:%a}, {local.strftime(_DATE_FORMAT)}, {local.strftime(_TIME_FORMAT)} {short_zone_name(local)}"


def format_range(start: datetime, end: datetime, tz_name: str) -> str:
    """Format a UTC interval in *tz_name*, collapsing to one date when both ends share a local day."""
    zone = resolve_timezone(tz_name)
    local_start = start.astimezone(zone)
    local_end = end.astimezone(zone)

    start_day = local_start.strftime(_DATE_FORMAT)
    end_day = local_end.strftime(_DATE_FORMAT)
    if start_day == end_day:
        return f"{start_day}, {local_start.strftime(_TIME_FORMAT)}{RANGE_SEPARATOR}{local_end.strftime(_TIME_FORMAT)}"
    return f"{start_day}{RANGE_SEPARATOR}{end_day}"


def format_parsed(parsed: ParsedTime | None, tz_name: str) -> str:
    """Render a parser result for a derived cell; None becomes the placeholder."""
    if isinstance(parsed, Instant):
        return format_instant(parsed.at, tz_name)
    if isinstance(parsed, Range):
        return format_range(parsed.start, parsed.end, tz_name)
    return PLACEHOLDER
