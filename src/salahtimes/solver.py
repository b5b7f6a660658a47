"""Prayer time solver: closed-form hour-angle solution with a high-latitude fallback.

All intermediate times are fractional hours after local midnight of the
requested civil date, in the caller's fixed UTC offset. Values outside
[0, 24) are legitimate and mean the event falls on an adjacent date.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

import pytz

from salahtimes.errors import DegenerateSolution, ScheduleInvalid
from salahtimes.models import (
    CalculationMethod,
    GeoCoordinate,
    Madhab,
    PrayerSchedule,
    Source,
)
from salahtimes.solar import solar_position

# Standard horizon dip plus atmospheric refraction at sea level.
SUNRISE_DEPRESSION = 0.833
NIGHT_PORTION = 1.0 / 7.0


def hour_angle(depression_deg: float, latitude: float, declination: float) -> float | None:
    """Hours between solar noon and the sun reaching `depression_deg` below the horizon.

    Negative depressions are altitudes above the horizon (used for Asr).
    Returns None when the sun never reaches that depression on this day.
    """
    lat = math.radians(latitude)
    dec = math.radians(declination)
    denominator = math.cos(lat) * math.cos(dec)
    if abs(denominator) < 1e-12:
        return None
    cos_h = (-math.sin(math.radians(depression_deg)) - math.sin(lat) * math.sin(dec)) / denominator
    if not -1.0 <= cos_h <= 1.0:
        return None
    return math.degrees(math.acos(cos_h)) / 15.0


def asr_altitude(latitude: float, declination: float, shadow_factor: int) -> float | None:
    """Solar altitude at which an object's shadow is `shadow_factor` times its length plus the noon shadow."""
    zenith_at_noon = abs(latitude - declination)
    if zenith_at_noon >= 90.0:
        return None
    return math.degrees(math.atan(1.0 / (shadow_factor + math.tan(math.radians(zenith_at_noon)))))


def minutes_from_hours(hours: float) -> int:
    """Round fractional hours to whole minutes, half-up, so repeated calls agree."""
    if not math.isfinite(hours):
        raise ScheduleInvalid(f"Non-finite event time: {hours}")
    return math.floor(hours * 60.0 + 0.5)


def solve_hours(
    location: GeoCoordinate,
    day: date,
    method: CalculationMethod,
    madhab: Madhab,
    utc_offset_minutes: int,
) -> tuple[dict[str, float], tuple[str, ...]]:
    """Fractional local hours for the six events plus the events the one-seventh rule placed.

    Raises:
        DegenerateSolution: Sunrise/sunset or Asr has no solution (polar day or night).
    """
    sun = solar_position(day)
    lat, dec = location.latitude, sun.declination_deg

    dhuhr = (
        12.0
        + utc_offset_minutes / 60.0
        - location.longitude / 15.0
        - sun.equation_of_time_minutes / 60.0
    )

    horizon = hour_angle(SUNRISE_DEPRESSION, lat, dec)
    if horizon is None:
        raise DegenerateSolution("sunrise", "sun does not rise or set on this date")
    sunrise = dhuhr - horizon
    sunset = dhuhr + horizon

    altitude = asr_altitude(lat, dec, madhab.shadow_factor)
    asr_offset = None if altitude is None else hour_angle(-altitude, lat, dec)
    if asr_offset is None:
        raise DegenerateSolution("asr")
    asr = dhuhr + asr_offset

    # One-seventh of the night replaces only angles the sun never reaches today.
    night = 24.0 - (sunset - sunrise)
    portion = night * NIGHT_PORTION
    adjusted: list[str] = []

    fajr_offset = hour_angle(method.fajr_angle, lat, dec)
    fajr = None if fajr_offset is None else dhuhr - fajr_offset
    if fajr is None:
        fajr = sunrise - portion
        adjusted.append("fajr")

    if method.maghrib_angle is not None:
        maghrib_offset = hour_angle(method.maghrib_angle, lat, dec)
        maghrib = None if maghrib_offset is None else dhuhr + maghrib_offset
        if maghrib is None:
            maghrib = sunset + portion
            adjusted.append("maghrib")
    else:
        maghrib = sunset + method.maghrib_offset_minutes / 60.0

    if method.isha_angle is not None:
        isha_offset = hour_angle(method.isha_angle, lat, dec)
        isha = None if isha_offset is None else dhuhr + isha_offset
        if isha is None:
            isha = sunset + portion
            adjusted.append("isha")
    else:
        isha = maghrib + (method.isha_offset_minutes or 0.0) / 60.0

    hours = {
        "fajr": fajr,
        "sunrise": sunrise,
        "dhuhr": dhuhr,
        "asr": asr,
        "maghrib": maghrib,
        "isha": isha,
    }
    return hours, tuple(adjusted)


def solve(
    location: GeoCoordinate,
    day: date,
    method: CalculationMethod,
    madhab: Madhab,
    utc_offset_minutes: int,
) -> PrayerSchedule:
    """Compute the day's schedule locally. Never touches the network or the clock."""
    hours, adjusted = solve_hours(location, day, method, madhab, utc_offset_minutes)

    tz = pytz.FixedOffset(utc_offset_minutes)
    midnight = datetime.combine(day, time(0), tzinfo=tz)
    times: dict[str, datetime] = {}
    rolled_over: list[str] = []
    for name, value in hours.items():
        minutes = minutes_from_hours(value)
        if not 0 <= minutes < 24 * 60:
            rolled_over.append(name)
        times[name] = midnight + timedelta(minutes=minutes)

    return PrayerSchedule(
        date=day,
        source=Source.LOCAL,
        method_id=method.id,
        madhab=madhab,
        adjusted_events=adjusted,
        rolled_over_events=tuple(rolled_over),
        **times,
    )
