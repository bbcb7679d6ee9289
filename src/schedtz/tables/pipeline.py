"""Render coordination: full-document scans, reconciliation and change handling.

Orchestrates one augmentation pass over a document:

    settings read -> find_candidates -> process (per table) -> panel refresh

and the reconciliation pass used after a timezone change, which strips every
derived column before anything new is written.

The coordinator's own cell insertions are themselves document mutations.  Two
mechanisms keep them from feeding back into another pass:

  - while a pass is writing, the coordinator is in the ``rendering`` state and
    ignores every insertion it is notified of;
  - insertions made by other actors are coalesced, so a burst of them
    schedules at most one follow-up pass on the event loop.

Passes never overlap: they are serialised by an ``asyncio.Lock``.
"""

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from bs4 import BeautifulSoup
from bs4.element import PageElement, Tag

from schedtz.panel import TimezonePanel
from schedtz.settings import SettingsStore
from schedtz.tables.augment import process, remove_all_derived_columns
from schedtz.tables.classifiers import find_candidates
from schedtz.tables.document import MutationFeed

logger = logging.getLogger(__name__)

IDLE = "idle"
RENDERING = "rendering"


def _log_pass_failure(task: asyncio.Task) -> None:
    """Done-callback for scheduled passes: nobody awaits them, so report their errors here."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Scheduled render pass failed: %s", exc, exc_info=exc)


class RenderCoordinator:  # pylint: disable=too-many-instance-attributes
    """Keeps one document's schedule tables augmented for the current settings."""

    def __init__(self, document: BeautifulSoup | MutationFeed, store: SettingsStore, panel: TimezonePanel | None = None):
        self.feed = document if isinstance(document, MutationFeed) else MutationFeed(document)
        self.soup = self.feed.soup
        self.store = store
        self.panel = panel
        if panel is not None and panel.on_change is None:
            panel.on_change = self._on_timezone_selected

        self.state = IDLE
        self.passes = 0  # completed render passes, for diagnostics
        self._lock = asyncio.Lock()
        self._scheduled = False  # a coalesced pass is queued or pending
        self._task: asyncio.Task | None = None

        self.feed.subscribe(self.on_nodes_added)

    # ── State ────────────────────────────────────────────────────────────

    @property
    def rendering(self) -> bool:
        """True while the coordinator is writing to the document."""
        return self.state == RENDERING

    @property
    def pending(self) -> bool:
        """True if a coalesced pass has been requested but not run yet."""
        return self._scheduled

    @contextmanager
    def _writing(self) -> Iterator[None]:
        """Enter the rendering state for the duration of a write phase."""
        self.state = RENDERING
        try:
            yield
        finally:
            self.state = IDLE

    # ── Passes ───────────────────────────────────────────────────────────

    async def _render_pass(self) -> int:
        """Augment every candidate table; the caller holds the lock."""
        # A full pass covers any insertion that requested one so far
        self._scheduled = False
        settings = await self.store.get_settings()

        with self._writing():
            tables = find_candidates(self.soup)
            augmented = sum(1 for table in tables if process(table, settings.timezone, self.feed))
            if self.panel is not None:
                self.panel.ensure(self.feed, settings)

        self.passes += 1
        logger.info("Augmented %d/%d schedule tables (timezone=%s)", augmented, len(tables), settings.timezone)
        return augmented

    async def render_all(self) -> int:
        """Run one augmentation pass.  Returns the number of tables newly augmented."""
        async with self._lock:
            return await self._render_pass()

    async def rerender(self) -> int:
        """Strip every derived column, then run a fresh pass.  Returns tables augmented."""
        async with self._lock:
            with self._writing():
                removed = remove_all_derived_columns(self.soup)
            logger.info("Removed derived columns from %d tables", removed)
            return await self._render_pass()

    async def change_timezone(self, tz_name: str) -> str:
        """Persist a new timezone and reconcile the document.

        Goes through the panel when there is one so its selection follows.
        Raises InvalidTimezoneError with settings and document untouched.
        """
        if self.panel is not None:
            return await self.panel.select(tz_name)
        tz_name = await self.store.set_timezone(tz_name)
        await self.rerender()
        return tz_name

    async def _on_timezone_selected(self, _tz_name: str) -> None:
        await self.rerender()

    # ── Change notifications ─────────────────────────────────────────────

    def on_nodes_added(self, nodes: list[PageElement]) -> None:
        """Mutation-feed callback: schedule one coalesced pass for foreign insertions."""
        if self.rendering:
            return
        if not any(isinstance(node, Tag) for node in nodes):
            return
        if self._scheduled and self._task is not None and not self._task.done():
            return
        self._scheduled = True

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; render pass left pending until flush()")
            return
        self._task = loop.create_task(self._scheduled_pass())
        self._task.add_done_callback(_log_pass_failure)

    async def _scheduled_pass(self) -> None:
        # Clear the flag first so insertions made while this pass waits on settings queue another
        self._scheduled = False
        await self.render_all()

    async def flush(self) -> bool:
        """Run (or wait for) any coalesced pass.  Returns True if one ran."""
        task, self._task = self._task, None
        if task is not None:
            await task
            return True
        if self._scheduled:
            await self._scheduled_pass()
            return True
        return False

    def close(self) -> None:
        """Stop listening to document changes."""
        self.feed.unsubscribe(self.on_nodes_added)
