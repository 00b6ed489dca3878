"""Tests for shared utility functions."""

from datetime import datetime, time, timedelta, timezone

import pytest

from trainer_core.utils import distance_m, ensure_utc, parse_clock_time


class TestDistance:
    def test_same_point_is_zero(self):
        assert distance_m(42.3601, -71.0589, 42.3601, -71.0589) == 0.0

    def test_one_thousandth_degree_latitude(self):
        assert distance_m(42.3601, -71.0589, 42.3611, -71.0589) == pytest.approx(111.2, abs=0.5)

    def test_symmetric(self):
        a = distance_m(42.36, -71.05, 40.71, -74.00)
        b = distance_m(40.71, -74.00, 42.36, -71.05)
        assert a == pytest.approx(b)

    def test_boston_to_new_york(self):
        assert distance_m(42.3601, -71.0589, 40.7128, -74.0060) == pytest.approx(306_000, rel=0.01)


class TestParseClockTime:
    def test_24_hour(self):
        assert parse_clock_time("18:30") == time(18, 30)

    def test_morning(self):
        assert parse_clock_time("7:00 AM") == time(7, 0)

    def test_afternoon(self):
        assert parse_clock_time("2:15 pm") == time(14, 15)

    def test_noon_and_midnight(self):
        assert parse_clock_time("12:00 PM") == time(12, 0)
        assert parse_clock_time("12:00 AM") == time(0, 0)

    def test_strips_whitespace(self):
        assert parse_clock_time("  10:00 AM ") == time(10, 0)

    @pytest.mark.parametrize("value", ["13:00 PM", "25:00", "noon", "", "10"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_clock_time(value)


class TestEnsureUtc:
    def test_naive_becomes_utc(self):
        assert ensure_utc(datetime(2025, 7, 13, 8, 0)).tzinfo is timezone.utc

    def test_aware_is_unchanged(self):
        eastern = timezone(timedelta(hours=-4))
        value = datetime(2025, 7, 13, 4, 0, tzinfo=eastern)
        assert ensure_utc(value) is value
