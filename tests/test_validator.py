from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest
import pytz

from salahtimes.errors import ScheduleInvalid
from salahtimes.models import Madhab, Source
from salahtimes.validator import check_schedule, is_valid, parse_clock, parse_timings

DAY = date(2024, 3, 20)
TIMINGS = {
    "Fajr": "05:08",
    "Sunrise": "06:25",
    "Dhuhr": "12:28",
    "Asr": "15:52",
    "Maghrib": "18:31",
    "Isha": "20:01",
}


@pytest.fixture
def schedule():
    return parse_timings(DAY, TIMINGS, 180, source=Source.LOCAL, method_id=4)


class TestParseTimings:
    def test_builds_aware_schedule(self, schedule):
        assert schedule.fajr == datetime(2024, 3, 20, 5, 8, tzinfo=pytz.FixedOffset(180))
        assert schedule.isha.utcoffset() == timedelta(hours=3)
        assert schedule.source is Source.LOCAL
        assert schedule.madhab is Madhab.STANDARD
        assert schedule.timings() == TIMINGS

    def test_extra_keys_ignored(self):
        timings = dict(TIMINGS, Imsak="04:58", Midnight="00:16", Sunset="18:31")
        assert parse_timings(DAY, timings, 180).timings() == TIMINGS

    @pytest.mark.parametrize("missing", list(TIMINGS))
    def test_missing_key(self, missing):
        timings = {k: v for k, v in TIMINGS.items() if k != missing}
        with pytest.raises(ScheduleInvalid, match=missing):
            parse_timings(DAY, timings, 180)

    def test_lowercase_keys_rejected(self):
        with pytest.raises(ScheduleInvalid):
            parse_timings(DAY, {k.lower(): v for k, v in TIMINGS.items()}, 180)

    def test_not_a_mapping(self):
        with pytest.raises(ScheduleInvalid):
            parse_timings(DAY, ["05:08"], 180)


class TestParseClock:
    @pytest.mark.parametrize("value", ["00:00", "09:05", "23:59"])
    def test_accepts(self, value):
        assert parse_clock(value, "Fajr").strftime("%H:%M") == value

    @pytest.mark.parametrize(
        "value", ["5:08", "24:00", "12:60", "05:08 (+03)", "05:08:00", "", "ab:cd", 508, None]
    )
    def test_rejects(self, value):
        with pytest.raises(ScheduleInvalid):
            parse_clock(value, "Fajr")


class TestCheckSchedule:
    def test_accepts_ordered_schedule(self, schedule):
        check_schedule(schedule)
        assert is_valid(schedule)

    def test_rejects_out_of_order(self, schedule):
        bad = replace(schedule, asr=schedule.dhuhr - timedelta(minutes=1))
        with pytest.raises(ScheduleInvalid, match="asr"):
            check_schedule(bad)
        assert not is_valid(bad)

    def test_rejects_equal_times(self, schedule):
        assert not is_valid(replace(schedule, isha=schedule.maghrib))

    def test_rejects_naive_time(self, schedule):
        bad = replace(schedule, dhuhr=schedule.dhuhr.replace(tzinfo=None))
        with pytest.raises(ScheduleInvalid, match="offset"):
            check_schedule(bad)

    def test_rejects_non_datetime(self, schedule):
        assert not is_valid(replace(schedule, asr="15:52"))

    def test_isha_after_midnight_needs_flag(self, schedule):
        late = replace(
            schedule,
            maghrib=schedule.maghrib + timedelta(hours=4),
            isha=schedule.isha + timedelta(hours=4, minutes=30),
        )
        assert late.isha.date() == DAY + timedelta(days=1)
        assert not is_valid(late)
        assert is_valid(replace(late, rolled_over_events=("isha",)))

    def test_fajr_before_midnight_needs_flag(self, schedule):
        early = replace(schedule, fajr=schedule.fajr - timedelta(hours=6))
        assert early.fajr.date() == DAY - timedelta(days=1)
        assert not is_valid(early)
        assert is_valid(replace(early, rolled_over_events=("fajr",)))

    def test_maghrib_and_isha_may_roll_over_together(self, schedule):
        late = replace(
            schedule,
            maghrib=schedule.maghrib + timedelta(hours=6),
            isha=schedule.isha + timedelta(hours=6),
            rolled_over_events=("maghrib", "isha"),
        )
        assert late.maghrib.date() == DAY + timedelta(days=1)
        check_schedule(late)
        with pytest.raises(ScheduleInvalid, match="maghrib"):
            check_schedule(replace(late, rolled_over_events=("isha",)))

    def test_leading_run_may_roll_over(self, schedule):
        early = replace(
            schedule,
            fajr=schedule.fajr - timedelta(hours=6),
            sunrise=schedule.sunrise - timedelta(hours=7),
            rolled_over_events=("fajr", "sunrise"),
        )
        assert early.sunrise.date() == DAY - timedelta(days=1)
        check_schedule(early)

    def test_dhuhr_never_leaves_the_date(self, schedule):
        shifted = {name: value + timedelta(hours=20) for name, value in schedule.events()}
        moved = replace(schedule, rolled_over_events=tuple(shifted), **shifted)
        with pytest.raises(ScheduleInvalid, match="dhuhr"):
            check_schedule(moved)

    def test_remote_isha_after_midnight_rejected(self):
        """A provider schedule wrapping past midnight parses but is out of order."""
        timings = dict(TIMINGS, Maghrib="23:10", Isha="00:30")
        with pytest.raises(ScheduleInvalid):
            check_schedule(parse_timings(DAY, timings, 180))
