"""Toggle button and timezone-selection panel injected into the document.

The panel is a floating ``div`` holding a label, a ``select`` of candidate
zones and a hint line; a round "TZ" button next to it shows or hides the panel.
Both are injected once per document and refreshed on every render pass so the
selected option and visibility mirror the current settings.

Selecting a zone validates it, persists it, then calls the change callback
(the coordinator's re-render).  An invalid zone leaves the stored value alone,
puts the selection back on the previous zone and raises
``InvalidTimezoneError`` for the caller to report.
"""

import logging
from collections.abc import Awaitable, Callable

from bs4.element import Tag

from schedtz.config import CANDIDATE_TIMEZONES, DEFAULT_TIMEZONE
from schedtz.settings import SettingsStore
from schedtz.tables.document import MutationFeed
from schedtz.tables.schema import InvalidTimezoneError, Settings

logger = logging.getLogger(__name__)

TOGGLE_ID = "schedtz-local-time-toggle"
MENU_ID = "schedtz-local-time-menu"

TOGGLE_STYLE = (
    "position:fixed;right:16px;bottom:16px;width:40px;height:40px;border-radius:20px;"
    "border:1px solid #888;background:#fff;color:#000;font-weight:700;cursor:pointer;z-index:100000"
)
MENU_STYLE = (
    "position:fixed;right:64px;bottom:16px;padding:10px 12px;border-radius:8px;"
    "background:rgba(0,0,0,0.75);color:#fff;font-size:12px;z-index:99999"
)
SELECT_STYLE = "min-width:260px;padding:6px;border-radius:6px;background:#fff;color:#000;border:1px solid #888"

HINT_TEXT = "Saved to the schedtz settings file."


def candidate_zones(default_timezone: str = DEFAULT_TIMEZONE) -> list[str]:
    """Return the selectable zones: the default zone first, duplicates removed."""
    return list(dict.fromkeys((default_timezone, *CANDIDATE_TIMEZONES)))


def _display_style(visible: bool) -> str:
    return f"{MENU_STYLE};display:{'block' if visible else 'none'}"


class TimezonePanel:
    """Injects and drives the toggle/panel widget for one document."""

    def __init__(
        self,
        store: SettingsStore,
        on_change: Callable[[str], Awaitable[object]] | None = None,
        default_timezone: str = DEFAULT_TIMEZONE,
    ):
        self.store = store
        self.on_change = on_change
        self.default_timezone = default_timezone
        self.current_timezone = default_timezone
        self.visible = True
        self.feed: MutationFeed | None = None

    # ── Document access ──────────────────────────────────────────────────

    def _find(self, element_id: str) -> Tag | None:
        if self.feed is None:
            return None
        return self.feed.soup.find(id=element_id)

    def _select_tag(self) -> Tag | None:
        menu = self._find(MENU_ID)
        return menu.find("select") if menu is not None else None

    def _body(self) -> Tag:
        """Return <body>, creating it when the document is a bare fragment."""
        soup = self.feed.soup
        if soup.body is not None:
            return soup.body
        return self.feed.append(soup, self.feed.new_tag("body"))

    # ── Rendering ────────────────────────────────────────────────────────

    def _build(self) -> None:
        """Create the toggle and the menu (called once per document)."""
        feed = self.feed
        body = self._body()

        feed.append(body, feed.new_tag("button", attrs={"id": TOGGLE_ID, "type": "button", "style": TOGGLE_STYLE}, string="TZ"))

        menu = feed.new_tag("div", attrs={"id": MENU_ID, "style": _display_style(self.visible)})
        menu.append(feed.new_tag("div", attrs={"style": "margin-bottom:6px;font-weight:600"}, string="Local time zone:"))

        select = feed.new_tag("select", attrs={"name": "timezone", "style": SELECT_STYLE})
        for zone in candidate_zones(self.default_timezone):
            label = f"{zone} (device)" if zone == self.default_timezone else zone
            select.append(feed.new_tag("option", attrs={"value": zone}, string=label))
        menu.append(select)

        menu.append(feed.new_tag("div", attrs={"style": "margin-top:6px;opacity:0.8"}, string=HINT_TEXT))
        feed.append(body, menu)

    def _mark_selected(self, zone: str) -> None:
        """Select the option for *zone*, adding one if the zone is not listed."""
        select = self._select_tag()
        if select is None:
            return
        found = False
        for option in select.find_all("option"):
            if option.get("value") == zone:
                option["selected"] = "selected"
                found = True
            elif option.has_attr("selected"):
                del option["selected"]
        if not found:
            select.append(self.feed.new_tag("option", attrs={"value": zone, "selected": "selected"}, string=zone))

    def _apply_visibility(self) -> None:
        menu = self._find(MENU_ID)
        if menu is not None:
            menu["style"] = _display_style(self.visible)

    def ensure(self, feed: MutationFeed, settings: Settings) -> None:
        """Make sure the widget exists in the document and reflects *settings*."""
        self.feed = feed
        self.current_timezone = settings.timezone
        self.visible = settings.panel_visible

        if self._find(TOGGLE_ID) is None:
            self._build()
            logger.debug("Injected timezone panel (visible=%s)", self.visible)
        self._mark_selected(self.current_timezone)
        self._apply_visibility()

    # ── User actions ─────────────────────────────────────────────────────

    @property
    def selected_timezone(self) -> str | None:
        """Value of the currently selected option, as the document shows it."""
        select = self._select_tag()
        if select is None:
            return None
        option = select.find("option", selected=True)
        return option.get("value") if option is not None else None

    async def select(self, zone: str) -> str:
        """Apply a zone picked in the panel.

        Raises InvalidTimezoneError after reverting the selection when *zone* is
        not a valid identifier; nothing is persisted in that case.
        """
        prior = self.current_timezone
        try:
            zone = await self.store.set_timezone(zone)
        except InvalidTimezoneError:
            logger.warning("Rejected timezone selection %r; keeping %s", zone, prior)
            self._mark_selected(prior)
            raise

        self.current_timezone = zone
        self._mark_selected(zone)
        if self.on_change is not None:
            await self.on_change(zone)
        return zone

    async def toggle(self) -> bool:
        """Show or hide the panel and persist the new state.  Returns the new visibility."""
        self.visible = not self.visible
        self._apply_visibility()
        await self.store.set_panel_visible(self.visible)
        return self.visible
