"""Pydantic models for parsed schedule times and user settings.

``ParsedTime`` is the tagged union produced by the timestamp parser and
consumed by the formatter: either an ``Instant`` or a ``Range``, both holding
timezone-aware UTC datetimes.  ``Settings`` is the per-pass snapshot read from
the settings store; its timezone is validated on construction so an unknown
zone can never reach the formatter.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidTimezoneError(ValueError):
    """Raised when a timezone identifier is unknown or malformed."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Invalid timezone identifier: {name!r}")


def resolve_timezone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA identifier, or raise InvalidTimezoneError."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidTimezoneError(name)
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(name) from exc


def _as_utc(value: datetime) -> datetime:
    """Reject naive datetimes and normalise aware ones to UTC."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")
    return value.astimezone(timezone.utc)


class Instant(BaseModel):
    """A single point in UTC time."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["instant"] = "instant"
    at: datetime

    @field_validator("at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """Store the instant in UTC."""
        return _as_utc(value)


class Range(BaseModel):
    """A pair of UTC instants, start and end.

    Ordering is not enforced: the source tables occasionally list an end date
    before the start, and the formatter renders what the table says.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """Store both endpoints in UTC."""
        return _as_utc(value)


ParsedTime = Annotated[Union[Instant, Range], Field(discriminator="kind")]


class Settings(BaseModel):
    """Timezone and panel-visibility preference, immutable for one render pass."""

    model_config = ConfigDict(frozen=True)

    timezone: str
    panel_visible: bool = True

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Only accept identifiers the zoneinfo database knows about."""
        resolve_timezone(value)
        return value.strip()
