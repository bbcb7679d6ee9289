"""Schedule-table classification helpers.

Decides which tables in a document are schedules and which column carries the
timestamp.  Two tiers: a header row naming a timestamp, event or match-time
column is trusted directly; a table with no such header is sniffed for ISO
dates in its first few data cells.

Classification facts are recomputed on every scan because other actors can
reshape tables between passes.
"""

from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import Tag

from schedtz.tables.patterns import (
    ISO_DATE_SNIFF_RE,
    MATCH_TIME_KEYWORD,
    SCHEDULE_HEADER_KEYWORDS,
    SNIFF_CELL_LIMIT,
    TIMESTAMP_KEYWORD,
    normalize,
)


@dataclass(frozen=True)
class ScheduleTable:
    """A table reference plus the facts derived from its current shape."""

    table: Tag
    is_match_schedule: bool
    timestamp_column_index: int


# ─── Row / Cell Access ───────────────────────────────────────────────────────


def row_cells(row: Tag) -> list[Tag]:
    """Return the direct td/th children of a row."""
    return row.find_all(["td", "th"], recursive=False)


def header_row(table: Tag) -> Tag | None:
    """Return the first row of the table's thead, else its first row, else None."""
    return table.select_one("thead tr") or table.find("tr")


def header_texts(table: Tag) -> list[str]:
    """Return the normalised, lower-cased text of each header-row cell."""
    row = header_row(table)
    if row is None:
        return []
    return [normalize(cell.get_text()).lower() for cell in row_cells(row)]


def _find_column(headers: list[str], keyword: str) -> int:
    """Index of the first header containing *keyword*, else the last column (never negative)."""
    for idx, text in enumerate(headers):
        if keyword in text:
            return idx
    return max(0, len(headers) - 1)


# ─── Predicates ──────────────────────────────────────────────────────────────


def has_schedule_header(table: Tag) -> bool:
    """Return True if the header row mentions a timestamp, event or match time."""
    row = header_row(table)
    if row is None:
        return False
    text = normalize(row.get_text(" ")).lower()
    return any(keyword in text for keyword in SCHEDULE_HEADER_KEYWORDS) or MATCH_TIME_KEYWORD in text


def has_iso_dates(table: Tag) -> bool:
    """Return True if one of the first few data cells holds an ISO date or date pair."""
    cells = table.find_all("td", limit=SNIFF_CELL_LIMIT)
    return any(ISO_DATE_SNIFF_RE.search(cell.get_text()) for cell in cells)


def is_match_schedule(table: Tag) -> bool:
    """Return True if a header cell names a match-time column."""
    return any(MATCH_TIME_KEYWORD in text for text in header_texts(table))


def timestamp_column_index(table: Tag) -> int:
    """Return the 0-based index of the column holding the timestamp.

    Match schedules use their "match time" column, other schedules their
    "timestamp" column; either falls back to the last header column.
    """
    headers = header_texts(table)
    keyword = MATCH_TIME_KEYWORD if is_match_schedule(table) else TIMESTAMP_KEYWORD
    return _find_column(headers, keyword)


def classify(table: Tag) -> ScheduleTable:
    """Compute the classification facts for *table* as it is right now."""
    return ScheduleTable(
        table=table,
        is_match_schedule=is_match_schedule(table),
        timestamp_column_index=timestamp_column_index(table),
    )


# ─── Document Scan ───────────────────────────────────────────────────────────


def find_candidates(document: BeautifulSoup | Tag) -> list[Tag]:
    """Return every schedule-like table in document order.

    Already augmented tables are included; skipping them is the augmentor's
    job.
    """
    return [table for table in document.find_all("table") if has_schedule_header(table) or has_iso_dates(table)]
