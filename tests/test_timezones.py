from datetime import datetime, timezone

import pytest

from errors import InvalidDateTime, InvalidTimezone
from timezones import (
    civil_to_instant,
    normalize_to_minute,
    parse_instant,
    to_iso,
    to_zoned_display,
    validate_timezone,
)


def test_civil_time_is_read_in_named_zone():
    instant = civil_to_instant("2024-01-01T09:00", "America/New_York")
    assert instant == datetime(2024, 1, 1, 14, 0, tzinfo=timezone.utc)


def test_civil_time_respects_daylight_saving():
    instant = civil_to_instant("2024-07-01T09:00", "America/New_York")
    assert instant == datetime(2024, 7, 1, 13, 0, tzinfo=timezone.utc)


def test_explicit_offset_wins_over_zone():
    instant = civil_to_instant("2024-01-01T09:00:00Z", "Asia/Tokyo")
    assert instant == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["", "tomorrow", "2024-13-01T09:00"])
def test_unparseable_civil_time(value):
    with pytest.raises(InvalidDateTime):
        civil_to_instant(value, "UTC")


@pytest.mark.parametrize("zone_name", ["Mars/Olympus_Mons", "America", "", "../etc/passwd"])
def test_unknown_zone(zone_name):
    with pytest.raises(InvalidTimezone):
        validate_timezone(zone_name)
    with pytest.raises(InvalidTimezone):
        civil_to_instant("2024-01-01T09:00", zone_name)


def test_normalize_to_minute_drops_seconds():
    instant = datetime(2024, 1, 1, 9, 0, 59, 999000, tzinfo=timezone.utc)
    assert normalize_to_minute(instant) == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def test_display_format():
    instant = datetime(2024, 1, 1, 14, 30, tzinfo=timezone.utc)
    assert to_zoned_display(instant, "America/New_York") == "Jan 01, 2024 at 09:30 AM"
    assert to_zoned_display(instant, "Asia/Tokyo") == "Jan 01, 2024 at 11:30 PM"


def test_iso_round_trip_is_utc():
    stored = to_iso(civil_to_instant("2024-01-01T09:00", "Europe/Paris"))
    assert stored == "2024-01-01T08:00:00+00:00"
    assert parse_instant(stored) == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
