from datetime import date, datetime, timedelta

import pytest
import pytz

from salahtimes.nextprayer import (
    due_prayers,
    format_12_hour,
    format_countdown,
    next_prayer,
    prayer_times,
)
from salahtimes.validator import parse_timings

TZ = pytz.FixedOffset(180)
DAY = date(2024, 3, 20)
TIMINGS = {
    "Fajr": "05:08",
    "Sunrise": "06:25",
    "Dhuhr": "12:28",
    "Asr": "15:52",
    "Maghrib": "18:31",
    "Isha": "20:01",
}


def _at(hour, minute, second=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=TZ)


@pytest.fixture
def today():
    return parse_timings(DAY, TIMINGS, 180)


@pytest.fixture
def tomorrow():
    return parse_timings(DAY + timedelta(days=1), dict(TIMINGS, Fajr="05:07"), 180)


class TestFormatting:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(hours=3, minutes=12, seconds=5), "3h 12m 5s"),
            (timedelta(hours=1), "1h 0m 0s"),
            (timedelta(minutes=12, seconds=5), "12m 5s"),
            (timedelta(seconds=59), "59s"),
            (timedelta(0), "0s"),
            (timedelta(seconds=-30), "0s"),
            (timedelta(seconds=5, microseconds=900000), "5s"),
        ],
    )
    def test_countdown(self, delta, expected):
        assert format_countdown(delta) == expected

    @pytest.mark.parametrize(
        "hour, minute, expected",
        [(0, 5, "12:05 AM"), (5, 8, "5:08 AM"), (12, 28, "12:28 PM"), (14, 14, "2:14 PM"), (23, 59, "11:59 PM")],
    )
    def test_12_hour(self, hour, minute, expected):
        assert format_12_hour(_at(hour, minute)) == expected


class TestNextPrayer:
    def test_sunrise_is_not_a_prayer(self, today):
        assert [name for name, _ in prayer_times(today)] == ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]

    def test_before_fajr(self, today):
        result = next_prayer(today, _at(3, 0))
        assert result.name == "Fajr"
        assert not result.is_tomorrow
        assert result.time_until == timedelta(hours=2, minutes=8)
        assert result.countdown == "2h 8m 0s"

    def test_between_sunrise_and_dhuhr(self, today):
        assert next_prayer(today, _at(7, 0)).name == "Dhuhr"

    def test_strictly_after_now(self, today):
        """At exactly Asr time the next prayer is Maghrib."""
        assert next_prayer(today, _at(15, 52)).name == "Maghrib"
        assert next_prayer(today, _at(15, 51, 59)).name == "Asr"

    def test_now_in_another_timezone(self, today):
        now = _at(13, 0).astimezone(pytz.utc)
        result = next_prayer(today, now)
        assert result.name == "Asr"
        assert result.time_until == timedelta(hours=2, minutes=52)

    def test_after_isha_uses_tomorrow(self, today, tomorrow):
        result = next_prayer(today, _at(22, 0), tomorrow)
        assert result.name == "Fajr"
        assert result.is_tomorrow
        assert result.time == tomorrow.fajr
        assert result.countdown == "7h 7m 0s"

    def test_after_isha_without_tomorrow(self, today):
        result = next_prayer(today, _at(22, 0))
        assert result.is_tomorrow
        assert result.time == today.fajr + timedelta(days=1)
        assert result.time_until == timedelta(hours=7, minutes=8)


class TestDuePrayers:
    def test_at_prayer_time(self, today):
        assert due_prayers(today, _at(15, 52)) == [("Asr", today.asr)]

    def test_inside_window(self, today):
        assert due_prayers(today, _at(15, 55)) == [("Asr", today.asr)]
        assert due_prayers(today, _at(15, 57)) == [("Asr", today.asr)]

    def test_never_early(self, today):
        assert due_prayers(today, _at(15, 51, 59)) == []

    def test_outside_window(self, today):
        assert due_prayers(today, _at(15, 57, 1)) == []
        assert due_prayers(today, _at(16, 7), window_minutes=15) == [("Asr", today.asr)]
        assert due_prayers(today, _at(16, 8), window_minutes=15) == []

    def test_sunrise_never_due(self, today):
        assert due_prayers(today, _at(6, 26)) == []
