"""Injection and removal of the derived "Local time" column.

``process`` adds one marked header cell right after a schedule table's
timestamp column and one derived cell per data row, holding the row's
timestamp rendered in the chosen timezone.

``injected_elements`` is the single record of what was added, and both the
idempotency guard and the teardown work from it.  A table holding the marker
header cell is left alone; a table holding only orphaned injected cells is
cleared before the column is added again, so a table never carries two.
"""

import logging

from bs4 import BeautifulSoup
from bs4.element import Tag

from schedtz.tables.classifiers import classify, header_row, row_cells
from schedtz.tables.document import MutationFeed, section_texts
from schedtz.tables.formatting import format_parsed
from schedtz.tables.parsing import parse_match_time, parse_timestamp
from schedtz.tables.schema import resolve_timezone

logger = logging.getLogger(__name__)

# Class carried by the injected header cell
MARKER_CLASS = "schedtz-local-time"

# Attribute carried by every injected data cell
DERIVED_CELL_ATTR = "data-schedtz-local-time"

HEADER_LABEL = "Local time"


# ─── Ownership Helpers ───────────────────────────────────────────────────────


def _owned(table: Tag, tags: list[Tag]) -> list[Tag]:
    """Keep only tags whose nearest enclosing table is *table* (drops nested tables)."""
    return [tag for tag in tags if tag.find_parent("table") is table]


def _is_header_row(row: Tag) -> bool:
    """A header row sits in a thead or holds a th cell."""
    in_thead = row.parent is not None and row.parent.name == "thead"
    return in_thead or row.find("th", recursive=False) is not None


def _data_rows(table: Tag) -> list[Tag]:
    """Snapshot of the table's own non-header rows, in document order."""
    return [row for row in _owned(table, table.find_all("tr")) if not _is_header_row(row)]


# ─── Marker Predicate ────────────────────────────────────────────────────────


def marker_cells(table: Tag) -> list[Tag]:
    """Return the table's own marker header cells."""
    return _owned(table, table.select(f"th.{MARKER_CLASS}"))


def injected_elements(table: Tag) -> list[Tag]:
    """Return the table's marker header cells followed by every other element it owns that was injected."""
    return marker_cells(table) + _owned(table, table.find_all(attrs={DERIVED_CELL_ATTR: True}))


def has_derived_column(table: Tag) -> bool:
    """Return True if *table* carries any part of an injected local-time column."""
    return bool(injected_elements(table))


# ─── Insertion ───────────────────────────────────────────────────────────────


def _ensure_header_row(table: Tag, feed: MutationFeed) -> Tag:
    """Return the row that receives the marker header cell, creating a thead row if needed.

    An existing header row is used when it lives in a thead or holds th cells.
    Otherwise (a table of bare data rows) a thead with an empty row is added
    at the top of the table.  Created elements carry the derived-cell
    attribute so teardown restores the table's original shape.
    """
    row = header_row(table)
    if row is not None and row.find_parent("table") is table and _is_header_row(row):
        return row

    thead = table.find("thead", recursive=False)
    if thead is None:
        thead = feed.new_tag("thead", attrs={DERIVED_CELL_ATTR: ""})
        # A thead must follow any caption/colgroup elements
        leading = [child for child in table.children if isinstance(child, Tag) and child.name in ("caption", "colgroup")]
        index = next(i for i, child in enumerate(table.contents) if child is leading[-1]) + 1 if leading else 0
        feed.insert(table, index, thead)
    return feed.append(thead, feed.new_tag("tr", attrs={DERIVED_CELL_ATTR: ""}))


def _insert_cell_after(feed: MutationFeed, row: Tag, position: int, cell: Tag) -> None:
    """Insert *cell* after the row's cell at *position*, or append when there is none."""
    cells = row_cells(row)
    if 0 <= position < len(cells):
        feed.insert_after(cells[position], cell)
    else:
        feed.append(row, cell)


def process(table: Tag, tz_name: str, feed: MutationFeed) -> bool:
    """Inject the local-time column into *table*.  Returns False if it was already there.

    Raises InvalidTimezoneError before touching the table if *tz_name* is not a
    known zone.
    """
    if marker_cells(table):
        return False
    resolve_timezone(tz_name)

    # Derived cells without their marker header are the remains of a column another actor cut down
    if has_derived_column(table):
        removed = remove_derived_column(table)
        logger.debug("Cleared %d orphaned injected elements before re-augmenting", removed)

    facts = classify(table)
    idx = facts.timestamp_column_index
    parse = parse_match_time if facts.is_match_schedule else parse_timestamp

    # Snapshot rows before writing so a freshly created header row is not visited
    rows = _data_rows(table)

    header_cell = feed.new_tag("th", attrs={"class": MARKER_CLASS}, string=HEADER_LABEL)
    _insert_cell_after(feed, _ensure_header_row(table, feed), idx, header_cell)

    parsed_count = 0
    for row in rows:
        cells = row_cells(row)
        if not cells:
            continue
        position = min(idx, len(cells) - 1)
        source = cells[position]

        parsed = parse(source.get_text(), section_texts(source))
        if parsed is not None:
            parsed_count += 1
        derived = feed.new_tag("td", attrs={DERIVED_CELL_ATTR: ""}, string=format_parsed(parsed, tz_name))
        feed.insert_after(source, derived)

    logger.debug(
        "Augmented %s table (column %d): %d/%d rows parsed",
        "match" if facts.is_match_schedule else "timestamp",
        idx,
        parsed_count,
        len(rows),
    )
    return True


# ─── Teardown ────────────────────────────────────────────────────────────────


def remove_derived_column(table: Tag) -> int:
    """Remove the table's marker header cell and every injected element.  Returns elements removed."""
    injected = injected_elements(table)
    for cell in injected:
        cell.extract()
    return len(injected)


def remove_all_derived_columns(document: BeautifulSoup | Tag) -> int:
    """Strip the derived column from every table that has one.  Returns tables cleaned."""
    tables: list[Tag] = []
    for element in document.select(f"th.{MARKER_CLASS}, [{DERIVED_CELL_ATTR}]"):
        table = element.find_parent("table")
        if table is not None and all(table is not seen for seen in tables):
            tables.append(table)

    for table in tables:
        removed = remove_derived_column(table)
        logger.debug("Removed %d injected cells from a table", removed)
    return len(tables)
