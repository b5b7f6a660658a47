"""Next-prayer derivation for the countdown and the notification window."""

from __future__ import annotations

from datetime import datetime, timedelta

from salahtimes.models import PRAYER_NAMES, NextPrayer, PrayerSchedule


def format_countdown(delta: timedelta) -> str:
    """Countdown text: 3h 12m 5s, 12m 5s or 5s. Negative deltas clamp to 0s."""
    total = max(0, int(delta.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_12_hour(value: datetime) -> str:
    """24-hour clock to 12-hour text, e.g. 14:14 -> 2:14 PM."""
    period = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {period}"


def prayer_times(schedule: PrayerSchedule) -> list[tuple[str, datetime]]:
    return [(name, getattr(schedule, name.lower())) for name in PRAYER_NAMES]


def next_prayer(
    today: PrayerSchedule,
    now: datetime,
    tomorrow: PrayerSchedule | None = None,
) -> NextPrayer:
    """First prayer strictly after `now` (an aware datetime).

    After Isha the answer is tomorrow's Fajr: taken from `tomorrow` when
    available, otherwise estimated as today's Fajr plus one day.
    """
    for name, when in prayer_times(today):
        if when > now:
            delta = when - now
            return NextPrayer(name, when, delta, format_countdown(delta))

    if tomorrow is not None:
        when = tomorrow.fajr
    else:
        when = today.fajr + timedelta(days=1)
    delta = when - now
    return NextPrayer("Fajr", when, delta, format_countdown(delta), is_tomorrow=True)


def due_prayers(
    schedule: PrayerSchedule,
    now: datetime,
    window_minutes: int = 5,
) -> list[tuple[str, datetime]]:
    """Prayers whose time has arrived and is at most `window_minutes` old.

    Never reports a prayer before its time. The window should equal the cron
    interval so no prayer falls between two runs.
    """
    window = timedelta(minutes=window_minutes)
    return [(name, when) for name, when in prayer_times(schedule) if when <= now <= when + window]
