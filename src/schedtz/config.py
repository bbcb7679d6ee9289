"""Shared configuration for schedtz: project paths, environment, default timezone."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from schedtz.tables.schema import InvalidTimezoneError, resolve_timezone

logger = logging.getLogger(__name__)

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# JSON file backing the persistent settings store
SETTINGS_FILE = Path(os.getenv("SCHEDTZ_SETTINGS_FILE", str(ROOT / "data" / "settings.json")))

# Web server bind address
HOST = os.getenv("SCHEDTZ_HOST", "127.0.0.1")
PORT = int(os.getenv("SCHEDTZ_PORT", "8000"))

# The zoneinfo database lives under a directory named "zoneinfo" on every common platform
_LOCALTIME_LINK = Path("/etc/localtime")
_ZONEINFO_MARKER = "zoneinfo/"


def _zone_from_path(path: str) -> str:
    """Drop everything up to and including the zoneinfo directory from a zone file path."""
    return path.split(_ZONEINFO_MARKER, 1)[1] if _ZONEINFO_MARKER in path else path


def _tz_variable() -> str | None:
    """Zone named by TZ, as ``Europe/Berlin`` or ``:/usr/share/zoneinfo/Europe/Berlin``."""
    tz_env = os.getenv("TZ", "").lstrip(":")
    return _zone_from_path(tz_env) if tz_env else None


def _localtime_zone() -> str | None:
    """Zone the /etc/localtime symlink points at, if it points into a zoneinfo tree."""
    try:
        target = str(_LOCALTIME_LINK.resolve())
    except OSError:
        return None
    return _zone_from_path(target) if _ZONEINFO_MARKER in target else None


def resolve_default_timezone() -> str:
    """Resolve the default timezone: SCHEDTZ_TIMEZONE, then TZ, then /etc/localtime, then UTC.

    Candidates that the zoneinfo database does not know are skipped with a
    warning.
    """
    sources = (
        ("SCHEDTZ_TIMEZONE", os.getenv("SCHEDTZ_TIMEZONE")),
        ("TZ", _tz_variable()),
        ("/etc/localtime", _localtime_zone()),
    )
    for source, candidate in sources:
        if not candidate:
            continue
        try:
            resolve_timezone(candidate)
        except InvalidTimezoneError:
            logger.warning("Ignoring unknown %s timezone %r", source, candidate)
            continue
        return candidate.strip()
    return "UTC"


# Resolved once at import and passed around explicitly from here on
DEFAULT_TIMEZONE = resolve_default_timezone()

# Zones offered by the selection panel (the default zone is listed first at render time)
CANDIDATE_TIMEZONES = (
    "UTC",
    "America/Los_Angeles",
    "America/Denver",
    "America/Chicago",
    "America/New_York",
    "Europe/London",
    "Europe/Berlin",
    "Europe/Paris",
    "Europe/Moscow",
    "Asia/Dubai",
    "Asia/Kolkata",
    "Asia/Singapore",
    "Asia/Tokyo",
    "Australia/Sydney",
)
