"""Unit tests for timezone-aware formatting of parsed times."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from datetime import datetime, timedelta, timezone

import pytest

from schedtz.tables.formatting import PLACEHOLDER, _gmt_offset_name, format_instant, format_parsed, format_range
from schedtz.tables.schema import Instant, InvalidTimezoneError, Range, resolve_timezone


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestFormatInstant:

    def test_utc(self):
        assert format_instant(utc(2025, 11, 1, 8, 0), "UTC") == "Sat, Nov 01, 2025, 08:00 AM UTC"

    def test_dst_zone_abbreviation(self):
        """New York is still on daylight time on 2025-11-01."""
        assert format_instant(utc(2025, 11, 1, 8, 0), "America/New_York") == "Sat, Nov 01, 2025, 04:00 AM EDT"

    def test_afternoon(self):
        assert format_instant(utc(2025, 6, 1, 15, 5), "UTC") == "Sun, Jun 01, 2025, 03:05 PM UTC"

    def test_numeric_abbreviation_rendered_as_gmt_offset(self):
        assert format_instant(utc(2025, 11, 1, 8, 0), "Asia/Dubai") == "Sat, Nov 01, 2025, 12:00 PM GMT+4"

    def test_local_day_can_differ_from_utc_day(self):
        assert format_instant(utc(2025, 11, 1, 23, 30), "Asia/Tokyo") == "Sun, Nov 02, 2025, 08:30 AM JST"

    def test_invalid_timezone_rejected(self):
        with pytest.raises(InvalidTimezoneError):
            format_instant(utc(2025, 11, 1, 8, 0), "Not/AZone")


class TestFormatRange:

    def test_same_day_collapses_to_time_span(self):
        assert format_range(utc(2025, 6, 1, 8, 0), utc(2025, 6, 1, 10, 0), "UTC") == "Jun 01, 2025, 08:00 AM – 10:00 AM"

    def test_different_days_show_dates_only(self):
        assert format_range(utc(2025, 6, 1, 23, 0), utc(2025, 6, 2, 1, 0), "UTC") == "Jun 01, 2025 – Jun 02, 2025"

    def test_same_day_decided_in_target_zone(self):
        """Different UTC days, same Tokyo day."""
        assert format_range(utc(2025, 6, 1, 23, 0), utc(2025, 6, 2, 1, 0), "Asia/Tokyo") == "Jun 02, 2025, 08:00 AM – 10:00 AM"

    def test_same_utc_day_split_in_target_zone(self):
        """Same UTC day, but the range crosses midnight in Auckland."""
        assert format_range(utc(2025, 6, 1, 10, 0), utc(2025, 6, 1, 14, 0), "Pacific/Auckland") == "Jun 01, 2025 – Jun 02, 2025"

    def test_invalid_timezone_rejected(self):
        with pytest.raises(InvalidTimezoneError):
            format_range(utc(2025, 6, 1), utc(2025, 6, 2), "Mars/Olympus")


class TestFormatParsed:

    def test_none_is_placeholder(self):
        assert format_parsed(None, "UTC") == PLACEHOLDER == "—"

    def test_dispatches_instant(self):
        assert format_parsed(Instant(at=utc(2025, 11, 1, 8, 0)), "UTC").startswith("Sat, Nov 01, 2025")

    def test_dispatches_range(self):
        assert format_parsed(Range(start=utc(2025, 10, 4), end=utc(2025, 10, 12)), "UTC") == "Oct 04, 2025 – Oct 12, 2025"


class TestGmtOffsetName:

    def test_zero(self):
        assert _gmt_offset_name(timedelta(0)) == "GMT"

    def test_whole_hours(self):
        assert _gmt_offset_name(timedelta(hours=4)) == "GMT+4"

    def test_half_hour_negative(self):
        assert _gmt_offset_name(-timedelta(hours=3, minutes=30)) == "GMT-3:30"


class TestResolveTimezone:

    def test_known_zone(self):
        assert str(resolve_timezone("Europe/Berlin")) == "Europe/Berlin"

    @pytest.mark.parametrize("name", ["Not/AZone", "", "   ", "../etc/passwd", None])
    def test_rejected(self, name):
        with pytest.raises(InvalidTimezoneError):
            resolve_timezone(name)
