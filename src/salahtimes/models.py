"""Data model definitions: explicit boundaries between input, solver, arbiter and adapters."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

from salahtimes.errors import InvalidCoordinate

PRAYER_EVENTS: tuple[str, ...] = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")
# Sunrise is an event but not a prayer.
PRAYER_NAMES: tuple[str, ...] = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")


@dataclass(frozen=True)
class GeoCoordinate:
    """Observer position. Rejected at construction, never clamped."""

    latitude: float  # Decimal degrees, [-90, 90]
    longitude: float  # Decimal degrees, [-180, 180]

    def __post_init__(self) -> None:
        lat, lng = self.latitude, self.longitude
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            raise InvalidCoordinate(f"Coordinates must be numbers: ({lat!r}, {lng!r})")
        if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
            raise InvalidCoordinate(f"Invalid latitude {lat}. Must be between -90 and 90")
        if not (math.isfinite(lng) and -180.0 <= lng <= 180.0):
            raise InvalidCoordinate(f"Invalid longitude {lng}. Must be between -180 and 180")


@dataclass(frozen=True)
class CalculationMethod:
    """Twilight convention. Exactly one of isha_angle / isha_offset_minutes is set."""

    id: int
    name: str
    fajr_angle: float  # Solar depression below horizon (degrees)
    isha_angle: float | None = None
    isha_offset_minutes: float | None = None  # Minutes after Maghrib
    maghrib_offset_minutes: float = 0.0  # Minutes after sunset
    maghrib_angle: float | None = None  # Overrides the sunset offset when set
    api_method: int | None = None  # Remote provider's code for the same convention
    description: str = ""

    def __post_init__(self) -> None:
        if (self.isha_angle is None) == (self.isha_offset_minutes is None):
            raise ValueError(
                f"Method {self.id} must define exactly one of isha_angle/isha_offset_minutes"
            )


class Madhab(enum.Enum):
    """Jurisprudential school. Only changes the Asr shadow factor."""

    STANDARD = 0  # Shafi'i, Maliki, Hanbali
    HANAFI = 1

    @property
    def shadow_factor(self) -> int:
        return 2 if self is Madhab.HANAFI else 1

    @classmethod
    def parse(cls, value: Madhab | int | str) -> Madhab:
        """Accept a Madhab, a school id (0/1, "0"/"1") or a profile name."""
        if isinstance(value, Madhab):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in ("standard", "shafi", "shafii", "maliki", "hanbali"):
                return cls.STANDARD
            if key == "hanafi":
                return cls.HANAFI
            if key.isdigit():
                value = int(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise ValueError(f"Unknown madhab: {value!r}")


class Source(enum.Enum):
    """Provenance of an accepted schedule."""

    API = "api"
    LOCAL = "local"


@dataclass(frozen=True)
class ScheduleRequest:
    """Everything the arbiter needs for one schedule. Supplied by the caller."""

    location: GeoCoordinate
    date: date  # Civil date at the location
    method_id: int | str  # Registry id; validated on use, not here
    madhab: Madhab
    utc_offset_minutes: int  # Offset in effect at the location on `date`
    timezone_name: str | None = None  # IANA name, forwarded to the remote provider


@dataclass(frozen=True)
class SolarPosition:
    """Per-day solar quantities. Independent of observer location."""

    declination_deg: float
    equation_of_time_minutes: float


@dataclass(frozen=True)
class PrayerSchedule:
    """Six daily events as timezone-aware datetimes in the caller's UTC offset.

    Events may fall on an adjacent civil date (high-latitude rollover); the
    validator decides whether that is acceptable.
    """

    date: date
    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime
    source: Source
    method_id: int | None = None
    madhab: Madhab = Madhab.STANDARD
    adjusted_events: tuple[str, ...] = ()  # Events placed by the one-seventh rule
    rolled_over_events: tuple[str, ...] = ()  # Events on the previous/next civil date
    hijri_date: str | None = None  # "DD-MM-YYYY", remote provider only

    @property
    def degraded_accuracy(self) -> bool:
        return bool(self.adjusted_events or self.rolled_over_events)

    def events(self) -> tuple[tuple[str, datetime], ...]:
        return tuple((name, getattr(self, name)) for name in PRAYER_EVENTS)

    def timings(self) -> dict[str, str]:
        """{"Fajr": "HH:MM", ...}, same shape as the remote provider's timings."""
        return {name.capitalize(): t.strftime("%H:%M") for name, t in self.events()}

    def with_source(self, source: Source) -> PrayerSchedule:
        return replace(self, source=source)


@dataclass(frozen=True)
class QiblaResult:
    """Direction to the Kaaba. bearing_deg is None only for degenerate positions."""

    bearing_deg: float | None  # [0, 360), clockwise from true north
    compass_direction: str | None  # One of N, NE, E, SE, S, SW, W, NW
    distance_km: float  # Great-circle distance to the Kaaba
    degenerate: str | None = None  # "kaaba" or "antipode"


@dataclass(frozen=True)
class NextPrayer:
    """Upcoming prayer relative to a given instant."""

    name: str  # "Fajr" .. "Isha"
    time: datetime
    time_until: timedelta
    countdown: str  # "3h 12m 5s"
    is_tomorrow: bool = False
