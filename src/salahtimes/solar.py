"""Low-precision solar ephemeris: declination and equation of time per civil date.

Polynomial terms follow the NOAA solar calculator (Meeus, Astronomical
Algorithms, ch. 25). Accuracy is well below a minute of time for dates within a
few centuries of J2000, which is all minute-rounded prayer times need.
"""

import math
from datetime import date

from salahtimes.models import SolarPosition

_J2000 = 2451545.0
# date.toordinal() of 2000-01-01 is 730120; JD of that date at 00:00 UTC is 2451544.5.
_ORDINAL_TO_JD = 1721424.5


def julian_day(day: date) -> float:
    """Julian Day for the civil date at 12:00 UTC."""
    return day.toordinal() + _ORDINAL_TO_JD + 0.5


def julian_century(jd: float) -> float:
    return (jd - _J2000) / 36525.0


def solar_position(day: date) -> SolarPosition:
    """Sun declination (degrees) and equation of time (minutes) for a date.

    Pure function of the date: identical input always yields identical output,
    so client and server computations agree.
    """
    t = julian_century(julian_day(day))

    mean_longitude = (280.46646 + t * (36000.76983 + t * 0.0003032)) % 360.0
    mean_anomaly = 357.52911 + t * (35999.05029 - 0.0001537 * t)
    eccentricity = 0.016708634 - t * (0.000042037 + 0.0000001267 * t)

    m = math.radians(mean_anomaly)
    centre = (
        math.sin(m) * (1.914602 - t * (0.004817 + 0.000014 * t))
        + math.sin(2 * m) * (0.019993 - 0.000101 * t)
        + math.sin(3 * m) * 0.000289
    )
    true_longitude = mean_longitude + centre

    omega = math.radians(125.04 - 1934.136 * t)
    apparent_longitude = true_longitude - 0.00569 - 0.00478 * math.sin(omega)

    mean_obliquity = 23.0 + (
        26.0 + (21.448 - t * (46.815 + t * (0.00059 - t * 0.001813))) / 60.0
    ) / 60.0
    obliquity = math.radians(mean_obliquity + 0.00256 * math.cos(omega))

    declination = math.degrees(
        math.asin(math.sin(obliquity) * math.sin(math.radians(apparent_longitude)))
    )

    y = math.tan(obliquity / 2) ** 2
    l0 = math.radians(mean_longitude)
    eot_radians = (
        y * math.sin(2 * l0)
        - 2 * eccentricity * math.sin(m)
        + 4 * eccentricity * y * math.sin(m) * math.cos(2 * l0)
        - 0.5 * y * y * math.sin(4 * l0)
        - 1.25 * eccentricity * eccentricity * math.sin(2 * m)
    )
    # 1 degree of hour angle is 4 minutes of time.
    eot_minutes = 4.0 * math.degrees(eot_radians)

    return SolarPosition(
        declination_deg=declination, equation_of_time_minutes=eot_minutes
    )
