"""Settings persistence: the user's timezone and panel-visibility preference.

The render pipeline only ever reads a ``Settings`` snapshot through
``SettingsStore.get_settings``.  Two stores are provided: an in-memory one for
embedding and tests, and a JSON-file one used by the CLI and web service.

On disk the settings file holds two keys::

    {"timezone": "Europe/Berlin", "panelVisible": true}

Absent keys fall back to defaults.  A stored timezone the zoneinfo database
does not know is treated as absent.  Writes validate first, so an invalid zone
never replaces a valid one (last valid write wins).
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from schedtz.config import DEFAULT_TIMEZONE
from schedtz.tables.schema import InvalidTimezoneError, Settings, resolve_timezone

logger = logging.getLogger(__name__)

TIMEZONE_KEY = "timezone"
PANEL_VISIBLE_KEY = "panelVisible"


class SettingsStore(ABC):
    """Asynchronous read/write access to the user's settings."""

    def __init__(self, default_timezone: str = DEFAULT_TIMEZONE):
        self.default_timezone = default_timezone

    @abstractmethod
    async def _read(self) -> dict:
        """Return the raw stored mapping (may be empty)."""

    @abstractmethod
    async def _write(self, updates: dict) -> None:
        """Merge *updates* into the stored mapping."""

    async def get_settings(self) -> Settings:
        """Return the current settings with defaults substituted for absent or invalid values."""
        raw = await self._read()

        tz_name = raw.get(TIMEZONE_KEY) or self.default_timezone
        try:
            resolve_timezone(tz_name)
        except InvalidTimezoneError:
            logger.warning("Stored timezone %r is not valid; using %s", tz_name, self.default_timezone)
            tz_name = self.default_timezone

        return Settings(timezone=tz_name, panel_visible=raw.get(PANEL_VISIBLE_KEY) is not False)

    async def set_timezone(self, tz_name: str) -> str:
        """Persist *tz_name* after validating it.  Raises InvalidTimezoneError, leaving the store unchanged."""
        resolve_timezone(tz_name)
        tz_name = tz_name.strip()
        await self._write({TIMEZONE_KEY: tz_name})
        logger.info("Timezone set to %s", tz_name)
        return tz_name

    async def set_panel_visible(self, visible: bool) -> None:
        """Persist the panel-visibility flag."""
        await self._write({PANEL_VISIBLE_KEY: bool(visible)})


class MemorySettingsStore(SettingsStore):
    """Settings held in a dict for the lifetime of the process."""

    def __init__(self, initial: dict | None = None, default_timezone: str = DEFAULT_TIMEZONE):
        super().__init__(default_timezone)
        self.data: dict = dict(initial or {})

    async def _read(self) -> dict:
        return dict(self.data)

    async def _write(self, updates: dict) -> None:
        self.data.update(updates)


class JsonSettingsStore(SettingsStore):
    """Settings persisted as a small JSON object on disk."""

    def __init__(self, path: Path, default_timezone: str = DEFAULT_TIMEZONE):
        super().__init__(default_timezone)
        self.path = Path(path)

    def _load(self) -> dict:
        """Read the settings file (empty mapping if it is missing or unreadable)."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fopen:
                data = json.load(fopen)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read settings from %s (%s); using defaults", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Settings file %s does not hold an object; using defaults", self.path)
            return {}
        return data

    def _save(self, updates: dict) -> None:
        data = self._load()
        data.update(updates)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fopen:
            json.dump(data, fopen, indent=2)

    async def _read(self) -> dict:
        return await asyncio.to_thread(self._load)

    async def _write(self, updates: dict) -> None:
        await asyncio.to_thread(self._save, updates)
