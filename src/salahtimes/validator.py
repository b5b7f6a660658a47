"""Schedule validator: gates every schedule before it reaches a caller.

The validator only ever passes or rejects. It never repairs a schedule.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta

import pytz

from salahtimes.errors import ScheduleInvalid
from salahtimes.models import PRAYER_EVENTS, Madhab, PrayerSchedule, Source

_HHMM = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


def check_schedule(schedule: PrayerSchedule) -> None:
    """Raise ScheduleInvalid describing the first problem found."""
    events = schedule.events()
    for name, value in events:
        if not isinstance(value, datetime):
            raise ScheduleInvalid(f"{name} is not a time: {value!r}")
        if value.tzinfo is None or value.utcoffset() is None:
            raise ScheduleInvalid(f"{name} has no UTC offset")

    for (prev_name, prev), (name, current) in zip(events, events[1:]):
        if not prev < current:
            raise ScheduleInvalid(
                f"{name} ({current:%H:%M}) is not after {prev_name} ({prev:%H:%M})"
            )

    # With the order above, off-date events can only form a leading run before
    # Dhuhr or a trailing run after it. Each must be flagged by the solver.
    for name, value in events:
        local_day = value.date()
        if local_day == schedule.date:
            continue
        if name != "dhuhr" and name in schedule.rolled_over_events:
            continue
        raise ScheduleInvalid(
            f"{name} falls on {local_day.isoformat()}, outside {schedule.date.isoformat()}"
        )

    if schedule.isha - schedule.fajr >= timedelta(hours=24):
        raise ScheduleInvalid("schedule spans 24 hours or more")


def is_valid(schedule: PrayerSchedule) -> bool:
    try:
        check_schedule(schedule)
    except ScheduleInvalid:
        return False
    return True


def parse_clock(value: object, name: str) -> time:
    if not isinstance(value, str):
        raise ScheduleInvalid(f"{name} is not a string: {value!r}")
    match = _HHMM.match(value)
    if match is None:
        raise ScheduleInvalid(f"{name} is not HH:MM: {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def parse_timings(
    day: date,
    timings: Mapping[str, object],
    utc_offset_minutes: int,
    *,
    source: Source = Source.API,
    method_id: int | None = None,
    madhab: Madhab = Madhab.STANDARD,
    hijri_date: str | None = None,
) -> PrayerSchedule:
    """Build a schedule from {"Fajr": "HH:MM", ...}. All six keys are required.

    Raises:
        ScheduleInvalid: Missing key or malformed value.
    """
    if not isinstance(timings, Mapping):
        raise ScheduleInvalid(f"timings is not an object: {type(timings).__name__}")
    tz = pytz.FixedOffset(utc_offset_minutes)
    times: dict[str, datetime] = {}
    for name in PRAYER_EVENTS:
        key = name.capitalize()
        if key not in timings:
            raise ScheduleInvalid(f"missing {key}")
        times[name] = datetime.combine(day, parse_clock(timings[key], key), tzinfo=tz)
    return PrayerSchedule(
        date=day,
        source=source,
        method_id=method_id,
        madhab=madhab,
        hijri_date=hijri_date,
        **times,
    )
