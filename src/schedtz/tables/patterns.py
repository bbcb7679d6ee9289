"""Compiled regex patterns and constant tuples for schedule-table handling.

These patterns recognise the timestamp text formats found in tournament
schedule tables, the header keywords that mark a table as a schedule, and the
year tokens used to recover a missing year from surrounding headings.  Used by
parsing.py and classifiers.py.
"""

import re

# ─── Timestamp Patterns ───────────────────────────────────────────────────────

# "2025-10-04 (08:00 UTC) / 2025-10-05 (18:00 UTC)" -- a timed range.
# Text may sit between a date and its parenthesised time, e.g. a weekday.
TIMED_RANGE_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2}).*?\((\d{2}):(\d{2})\s*UTC\)\s*/\s*"
    r"(\d{4})-(\d{2})-(\d{2}).*?\((\d{2}):(\d{2})\s*UTC\)",
    re.IGNORECASE,
)

# "2025-10-04 (08:00 UTC)" -- a single instant
TIMED_INSTANT_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2}).*?\((\d{2}):(\d{2})\s*UTC\)", re.IGNORECASE)

# "2025-10-04 / 2025-10-12" -- a date range with no times (midnight UTC)
DATE_RANGE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})\s*/\s*(\d{4})-(\d{2})-(\d{2})")

# "Nov 01 (Sat) 08:00 UTC" -- match-time cell with no year; anchored to the whole cell
MATCH_TIME_RE = re.compile(r"^([A-Za-z]{3})\s+(\d{2})\s*\(.*?\)\s+(\d{2}):(\d{2})\s*UTC$", re.IGNORECASE)


# ─── Classification Patterns ──────────────────────────────────────────────────

# Bare or compound ISO date anywhere in a cell, used to sniff unlabeled tables
ISO_DATE_SNIFF_RE = re.compile(r"(\d{4}-\d{2}-\d{2})(\s*/\s*\d{4}-\d{2}-\d{2})?")

# Four-digit year beginning with "20" inside a section heading
YEAR_RE = re.compile(r"(20\d{2})")

# Whitespace runs collapsed during normalisation
WHITESPACE_RE = re.compile(r"\s+")


# ─── String-Match Constants ───────────────────────────────────────────────────

# Header keywords (lower-case) that mark a table as a schedule
SCHEDULE_HEADER_KEYWORDS = ("timestamp", "event")

# Header keyword that marks a match schedule (and names its timestamp column)
MATCH_TIME_KEYWORD = "match time"

# Header keyword naming the timestamp column of a general schedule
TIMESTAMP_KEYWORD = "timestamp"

# Only the first few data cells are sniffed for ISO dates
SNIFF_CELL_LIMIT = 8

# Three-letter month abbreviations (lower-case) -> month number
MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def normalize(text: str | None) -> str:
    """Collapse whitespace runs to a single space and trim both ends."""
    return WHITESPACE_RE.sub(" ", text or "").strip()
