"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from schedtz.settings import MemorySettingsStore

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")


SCHEDULE_PAGE = """\
<html><body>
<h1>Championship 2025</h1>
<section>
  <h2>Tournament phases</h2>
  <table id="phases">
    <thead><tr><th>Event</th><th>Timestamp</th><th>Notes</th></tr></thead>
    <tbody>
      <tr><td>Qualifiers</td><td>2025-10-04 / 2025-10-12</td><td>Online</td></tr>
      <tr><td>Opening</td><td>2025-11-01 (08:00 UTC)</td><td>Stage</td></tr>
      <tr><td>Finals</td><td>2025-12-06 (08:00 UTC) / 2025-12-06 (10:00 UTC)</td><td>Arena</td></tr>
      <tr><td>Party</td><td>TBD</td><td>-</td></tr>
    </tbody>
  </table>
</section>
<section>
  <h2>Group stage</h2>
  <table id="matches">
    <thead><tr><th>Match</th><th>Match Time</th><th>Teams</th></tr></thead>
    <tbody>
      <tr><td>1</td><td>Nov 01 (Sat) 08:00 UTC</td><td>A vs B</td></tr>
      <tr><td>2</td><td>Nov 01 (Sat) 23:30 UTC</td><td>C vs D</td></tr>
    </tbody>
  </table>
</section>
<table id="unrelated"><tr><th>Name</th><th>Score</th></tr><tr><td>A</td><td>3</td></tr></table>
</body></html>
"""


@pytest.fixture
def schedule_soup() -> BeautifulSoup:
    """A page with a timestamp table, a match table and a non-schedule table."""
    return BeautifulSoup(SCHEDULE_PAGE, "html.parser")


@pytest.fixture
def utc_store() -> MemorySettingsStore:
    """In-memory settings pinned to UTC with the panel visible."""
    return MemorySettingsStore({"timezone": "UTC"}, default_timezone="UTC")


@pytest.fixture
def schedule_html() -> str:
    """The raw markup behind ``schedule_soup``."""
    return SCHEDULE_PAGE
