"""Tests for shared utility functions."""

from datetime import date, datetime

import pytest

from salon_admin.utils import (
    format_date,
    minutes_to_time,
    normalize_time,
    optional_int,
    parse_date,
    parse_or_default,
    time_to_minutes,
)


class TestNormalizeTime:
    def test_truncates_seconds(self):
        assert normalize_time("09:30:00") == "09:30"

    def test_pads_hour(self):
        assert normalize_time("9:05") == "09:05"

    def test_already_normalized(self):
        assert normalize_time("14:00") == "14:00"

    def test_fractional_seconds(self):
        assert normalize_time("14:00:00.000") == "14:00"

    @pytest.mark.parametrize("value", ["", "24:00", "12:60", "noon", "1400"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            normalize_time(value)


class TestMinutes:
    def test_round_trip_boundaries(self):
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("23:59") == 23 * 60 + 59
        assert minutes_to_time(18 * 60) == "18:00"

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            minutes_to_time(24 * 60)


class TestDates:
    def test_iso_timestamp_prefix(self):
        assert parse_date("2025-03-12T00:00:00.000000Z") == date(2025, 3, 12)

    def test_datetime_and_date(self):
        assert parse_date(datetime(2025, 3, 12, 8, 0)) == date(2025, 3, 12)
        assert format_date(date(2025, 3, 2)) == "2025-03-02"

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("12/03/2025")


class TestParseOrDefault:
    @pytest.mark.parametrize("value,expected", [
        ("12.50", 12.5),
        (30, 30.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        ("-5", 0.0),
        ("nan", 0.0),
        (True, 0.0),
    ])
    def test_lenient(self, value, expected):
        assert parse_or_default(value) == expected

    def test_custom_default(self):
        assert parse_or_default("x", default=1.0) == 1.0


class TestOptionalInt:
    def test_empty_is_none(self):
        assert optional_int("") is None
        assert optional_int(None) is None

    def test_parses(self):
        assert optional_int("3") == 3
        assert optional_int(4) == 4
