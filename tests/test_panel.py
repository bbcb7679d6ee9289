"""Unit tests for the injected toggle button and timezone panel."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import asyncio

import pytest
from bs4 import BeautifulSoup

from schedtz.config import CANDIDATE_TIMEZONES
from schedtz.panel import HINT_TEXT, MENU_ID, TOGGLE_ID, TimezonePanel, candidate_zones
from schedtz.tables.document import MutationFeed
from schedtz.tables.schema import InvalidTimezoneError, Settings


def render_panel(soup, store, settings: Settings, **kwargs) -> TimezonePanel:
    panel = TimezonePanel(store, default_timezone="UTC", **kwargs)
    panel.ensure(MutationFeed(soup), settings)
    return panel


def menu_display(soup) -> str:
    return soup.find(id=MENU_ID)["style"].rsplit("display:", 1)[1]


class TestCandidateZones:

    def test_default_listed_first(self):
        zones = candidate_zones("Pacific/Auckland")
        assert zones[0] == "Pacific/Auckland"
        assert zones[1:] == list(CANDIDATE_TIMEZONES)

    def test_default_not_duplicated(self):
        zones = candidate_zones("Asia/Tokyo")
        assert zones.count("Asia/Tokyo") == 1
        assert zones[0] == "Asia/Tokyo"


class TestEnsure:

    def test_builds_widget(self, schedule_soup, utc_store):
        panel = render_panel(schedule_soup, utc_store, Settings(timezone="UTC"))
        assert schedule_soup.find(id=TOGGLE_ID).get_text() == "TZ"
        menu = schedule_soup.find(id=MENU_ID)
        assert menu.find("option", value="UTC").get_text() == "UTC (device)"
        assert HINT_TEXT in menu.get_text()
        assert panel.selected_timezone == "UTC"
        assert menu_display(schedule_soup) == "block"

    def test_hidden_panel(self, schedule_soup, utc_store):
        render_panel(schedule_soup, utc_store, Settings(timezone="UTC", panel_visible=False))
        assert menu_display(schedule_soup) == "none"
        assert schedule_soup.find(id=TOGGLE_ID) is not None

    def test_unlisted_zone_gets_an_option(self, schedule_soup, utc_store):
        panel = render_panel(schedule_soup, utc_store, Settings(timezone="America/Sao_Paulo"))
        assert panel.selected_timezone == "America/Sao_Paulo"
        assert len(schedule_soup.find(id=MENU_ID).find_all("option", selected=True)) == 1

    def test_refresh_moves_selection(self, schedule_soup, utc_store):
        feed = MutationFeed(schedule_soup)
        panel = TimezonePanel(utc_store, default_timezone="UTC")
        panel.ensure(feed, Settings(timezone="UTC"))
        panel.ensure(feed, Settings(timezone="Asia/Tokyo", panel_visible=False))
        assert len(schedule_soup.find_all(id=MENU_ID)) == 1
        assert panel.selected_timezone == "Asia/Tokyo"
        assert menu_display(schedule_soup) == "none"

    def test_fragment_without_body(self, utc_store):
        soup = BeautifulSoup("<table><tr><th>Timestamp</th></tr></table>", "html.parser")
        render_panel(soup, utc_store, Settings(timezone="UTC"))
        assert soup.body.find(id=TOGGLE_ID) is not None


class TestSelect:

    def test_persists_and_notifies(self, schedule_soup, utc_store):
        changes = []

        async def on_change(zone):
            changes.append(zone)

        panel = render_panel(schedule_soup, utc_store, Settings(timezone="UTC"), on_change=on_change)
        assert asyncio.run(panel.select("Europe/London")) == "Europe/London"
        assert utc_store.data["timezone"] == "Europe/London"
        assert changes == ["Europe/London"]
        assert panel.selected_timezone == "Europe/London"

    def test_invalid_zone_reverts_selection(self, schedule_soup, utc_store):
        changes = []

        async def on_change(zone):
            changes.append(zone)

        panel = render_panel(schedule_soup, utc_store, Settings(timezone="UTC"), on_change=on_change)
        with pytest.raises(InvalidTimezoneError):
            asyncio.run(panel.select("Atlantis/Capital"))
        assert utc_store.data["timezone"] == "UTC"
        assert panel.selected_timezone == "UTC"
        assert changes == []


class TestToggle:

    def test_hides_then_shows(self, schedule_soup, utc_store):
        panel = render_panel(schedule_soup, utc_store, Settings(timezone="UTC"))

        assert asyncio.run(panel.toggle()) is False
        assert menu_display(schedule_soup) == "none"
        assert utc_store.data["panelVisible"] is False

        assert asyncio.run(panel.toggle()) is True
        assert menu_display(schedule_soup) == "block"
        assert utc_store.data["panelVisible"] is True
