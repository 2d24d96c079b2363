"""Tests for the branch working-hours policy."""

from datetime import date

import pytest

from salon_admin.scheduling.working_hours import DAYS, WorkingHoursPolicy, weekday_name
from tests.conftest import SUNDAY, TODAY, WEDNESDAY


class TestWeekdays:
    def test_days_start_on_monday(self):
        assert DAYS[0] == "Monday"
        assert DAYS[6] == "Sunday"

    def test_weekday_name(self):
        assert weekday_name("2025-03-10") == "Monday"
        assert weekday_name(date(2025, 3, 16)) == "Sunday"


class TestCheckDay:
    def test_open_day_passes(self, policy):
        assert policy.check_day(WEDNESDAY)

    def test_closed_day(self, policy):
        result = policy.check_day(SUNDAY)
        assert not result
        assert result.rule == "closed_day"
        assert "Sunday" in result.message

    def test_missing_entry_counts_as_closed(self):
        policy = WorkingHoursPolicy([{"day": "Monday", "open": "09:00", "close": "18:00"}])
        result = policy.check_day(WEDNESDAY)
        assert not result
        assert result.rule == "no_working_hours"
        assert "Wednesday" in result.message

    def test_accepts_raw_dicts_with_seconds(self):
        policy = WorkingHoursPolicy([
            {"day": "wednesday", "open": "10:00:00", "close": "16:30:00", "is_closed": False},
        ])
        assert policy.time_bounds(WEDNESDAY) == ("10:00", "16:30")

    @pytest.mark.parametrize("blank", [None, ""])
    def test_closed_day_without_times(self, blank):
        policy = WorkingHoursPolicy([
            {"day": "Wednesday", "open": "09:00", "close": "18:00", "is_closed": False},
            {"day": "Sunday", "open": blank, "close": blank, "is_closed": True},
        ])
        assert policy.check_day(SUNDAY).rule == "closed_day"
        assert policy.time_bounds(SUNDAY) is None
        assert policy.is_bookable(WEDNESDAY, "10:00")

    def test_open_day_without_times_rejected(self):
        with pytest.raises(ValueError):
            WorkingHoursPolicy([{"day": "Monday", "open": None, "close": None}])


class TestIsBookable:
    @pytest.mark.parametrize("time", ["09:00", "12:15", "18:00", "09:00:00"])
    def test_inside_hours_inclusive(self, policy, time):
        assert policy.is_bookable(WEDNESDAY, time)

    @pytest.mark.parametrize("time", ["08:59", "18:01", "23:30"])
    def test_outside_hours(self, policy, time):
        result = policy.is_bookable(WEDNESDAY, time)
        assert not result
        assert result.rule == "outside_hours"
        assert "09:00" in result.message and "18:00" in result.message

    def test_closed_day_is_never_bookable(self, policy):
        result = policy.is_bookable(SUNDAY, "12:00")
        assert not result
        assert result.rule == "closed_day"

    def test_invalid_time_raises(self, policy):
        with pytest.raises(ValueError):
            policy.is_bookable(WEDNESDAY, "25:00")

    def test_time_bounds_none_when_closed(self, policy):
        assert policy.time_bounds(SUNDAY) is None


class TestFutureOrToday:
    def test_today_is_allowed(self):
        assert WorkingHoursPolicy.is_future_or_today(TODAY, today=TODAY)

    def test_future_is_allowed(self):
        assert WorkingHoursPolicy.is_future_or_today(WEDNESDAY, today=TODAY)

    def test_past_is_rejected(self):
        result = WorkingHoursPolicy.is_future_or_today("2025-03-09", today=TODAY)
        assert not result
        assert result.message == "Appointment date must be today or later"

    def test_defaults_to_service_today(self):
        assert WorkingHoursPolicy.is_future_or_today("2999-01-01")
        assert not WorkingHoursPolicy.is_future_or_today("2000-01-01")
