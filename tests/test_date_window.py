"""Tests for day/month query windows and calendar date keys."""

from datetime import date, datetime, timedelta, timezone

import pytest

from tasktracker.errors import ValidationError
from tasktracker.utils.date_window import (
    date_key,
    day_bounds,
    month_bounds,
    parse_date_key,
    parse_month,
)


class TestDayBounds:

    @pytest.mark.parametrize(
        "value",
        [
            date(2024, 3, 15),
            datetime(2024, 3, 15, 0, 0),
            datetime(2024, 3, 15, 13, 47, 12, 345000),
            datetime(2024, 3, 15, 23, 59, 59, 999000),
        ],
    )
    def test_spans_the_same_calendar_day(self, value):
        start, end = day_bounds(value)
        assert start == datetime(2024, 3, 15, 0, 0, 0, 0)
        assert end == datetime(2024, 3, 15, 23, 59, 59, 999000)
        assert start <= end
        assert start.date() == end.date() == date(2024, 3, 15)

    def test_length_is_one_day_minus_one_millisecond(self):
        start, end = day_bounds(date(2024, 2, 29))
        assert end - start == timedelta(days=1) - timedelta(milliseconds=1)

    def test_aware_datetime_keeps_its_timezone(self):
        tz = timezone(timedelta(hours=5, minutes=30))
        start, end = day_bounds(datetime(2024, 3, 15, 8, 0, tzinfo=tz))
        assert start.tzinfo is tz
        assert end.tzinfo is tz
        assert start == datetime(2024, 3, 15, tzinfo=tz)


class TestMonthBounds:

    @pytest.mark.parametrize(
        "value,last_day",
        [
            (date(2024, 2, 10), 29),  # leap year
            (date(2023, 2, 10), 28),
            (date(2024, 4, 30), 30),
            (date(2024, 12, 1), 31),
            (date(2024, 1, 31), 31),
        ],
    )
    def test_end_is_last_day_of_month(self, value, last_day):
        start, end = month_bounds(value)
        assert start == datetime(value.year, value.month, 1)
        assert end == datetime(value.year, value.month, last_day, 23, 59, 59, 999000)

    def test_december_does_not_spill_into_next_year(self):
        start, end = month_bounds(datetime(2024, 12, 31, 18, 0))
        assert start.year == end.year == 2024
        assert end.month == 12

    def test_month_contains_its_days(self):
        start, end = month_bounds(date(2024, 4, 15))
        for day in (1, 15, 30):
            day_start, day_end = day_bounds(date(2024, 4, day))
            assert start <= day_start and day_end <= end


class TestDateKey:

    def test_zero_pads(self):
        assert date_key(date(2024, 3, 5)) == "2024-03-05"

    def test_time_of_day_does_not_change_key(self):
        morning = datetime(2024, 3, 15, 0, 0, 1)
        night = datetime(2024, 3, 15, 23, 59, 59, 999000)
        assert date_key(morning) == date_key(night) == "2024-03-15"

    def test_uses_local_calendar_fields(self):
        # 23:30 at UTC-5 is already the next day in UTC; the key stays local
        value = datetime(2024, 3, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert date_key(value) == "2024-03-15"


class TestParsing:

    def test_parse_date_key(self):
        assert parse_date_key("2024-03-15") == date(2024, 3, 15)

    def test_parse_date_key_accepts_timestamp_prefix(self):
        assert parse_date_key("2024-03-15T10:00:00") == date(2024, 3, 15)

    @pytest.mark.parametrize("value", ["", None])
    def test_parse_date_key_requires_value(self, value):
        with pytest.raises(ValidationError):
            parse_date_key(value)

    @pytest.mark.parametrize("value", ["15/03/2024", "2024-13-01", "nope"])
    def test_parse_date_key_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            parse_date_key(value)

    def test_parse_month(self):
        assert parse_month("2024-02") == date(2024, 2, 1)

    @pytest.mark.parametrize("value", ["2024", "2024-00", "2024-02-01", "feb"])
    def test_parse_month_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            parse_month(value)
