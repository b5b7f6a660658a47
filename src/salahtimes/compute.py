"""Entry points: schedule and Qibla computation, plus the geocoding/timezone collaborators."""

from datetime import date, datetime, time

import httpx
import pytz
from timezonefinder import TimezoneFinder

from salahtimes import qibla
from salahtimes.arbiter import SourceArbiter
from salahtimes.models import (
    GeoCoordinate,
    Madhab,
    PrayerSchedule,
    QiblaResult,
    ScheduleRequest,
)
from salahtimes.settings import Settings

_tf = TimezoneFinder()


class GeocodingError(Exception):
    """Geocoder or timezone lookup failure."""


def geocode_address(address: str, settings: Settings | None = None) -> tuple[GeoCoordinate, str]:
    """Nominatim (OpenStreetMap) geocoder. Returns (coordinate, display_name).

    Raises:
        GeocodingError: Transport failure or no match.
    """
    settings = settings or Settings()
    params = {"q": address, "format": "json", "limit": 1}
    headers = {"User-Agent": settings.nominatim_user_agent}
    try:
        resp = httpx.get(
            "https://nominatim.openstreetmap.org/search",
            params=params,
            headers=headers,
            timeout=settings.api_timeout,
        )
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise GeocodingError(f"Geocoder unavailable: {exc}") from exc
    results = resp.json()
    if not results:
        raise GeocodingError(f"Address not found: {address}")
    r = results[0]
    return GeoCoordinate(float(r["lat"]), float(r["lon"])), r["display_name"]


def location_from_browser(answer: object) -> GeoCoordinate | None:
    """Coordinate from a browser geolocation answer ({"coords": {...}} or {"error": ...}).

    Returns None while the browser has not answered yet.

    Raises:
        GeocodingError: The browser answered without a usable position.
    """
    if not answer:
        return None
    coords = answer.get("coords") if isinstance(answer, dict) else None
    if not isinstance(coords, dict):
        error = answer.get("error") if isinstance(answer, dict) else answer
        raise GeocodingError(f"Browser geolocation unavailable: {error}")
    try:
        return GeoCoordinate(float(coords["latitude"]), float(coords["longitude"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise GeocodingError(f"Browser geolocation unusable: {exc}") from exc


def resolve_timezone(location: GeoCoordinate) -> str:
    """IANA timezone name for a coordinate.

    Raises:
        GeocodingError: Coordinate has no timezone (open ocean far from land).
    """
    tz_str = _tf.timezone_at(lat=location.latitude, lng=location.longitude)
    if tz_str is None:
        raise GeocodingError(
            f"Timezone not found: lat={location.latitude}, lng={location.longitude}"
        )
    return tz_str


def utc_offset_minutes(tz_name: str, day: date) -> int:
    """UTC offset in effect at local noon of `day`, in whole minutes."""
    tz = pytz.timezone(tz_name)
    local_noon = tz.localize(datetime.combine(day, time(12)))
    return int(local_noon.utcoffset().total_seconds() // 60)


def local_today(tz_name: str, now: datetime | None = None) -> date:
    """Civil date at the location. `now` must be timezone-aware when given."""
    tz = pytz.timezone(tz_name)
    instant = now if now is not None else datetime.now(pytz.utc)
    return instant.astimezone(tz).date()


def compute_schedule(
    location: GeoCoordinate,
    day: date,
    method: int | str,
    madhab: Madhab | int | str,
    utc_offset: int,
    *,
    timezone_name: str | None = None,
    arbiter: SourceArbiter | None = None,
) -> PrayerSchedule:
    """Validated schedule for one location and civil date.

    Args:
        location: Observer coordinate (already range-checked on construction).
        day: Civil date at the location.
        method: Calculation method registry id.
        madhab: Madhab, school id or profile name.
        utc_offset: Minutes east of UTC in effect at the location on `day`.
        timezone_name: IANA name forwarded to the remote provider, if known.
        arbiter: Shared arbiter (batch callers pass one with a pooled client).

    Returns:
        PrayerSchedule annotated with its source ("api" or "local").

    Raises:
        AllSourcesFailed: Neither source produced a valid schedule. An unknown
            method id surfaces as its __cause__.
        ValueError: `madhab` is not a recognised school. Raised before either
            source is tried, so callers holding free-form profile values should
            catch it alongside AllSourcesFailed.
    """
    request = ScheduleRequest(
        location=location,
        date=day,
        method_id=method,
        madhab=Madhab.parse(madhab),
        utc_offset_minutes=int(utc_offset),
        timezone_name=timezone_name,
    )
    return (arbiter or SourceArbiter()).resolve(request)


def compute_schedule_for_zone(
    location: GeoCoordinate,
    day: date,
    method: int | str,
    madhab: Madhab | int | str,
    tz_name: str | None = None,
    *,
    arbiter: SourceArbiter | None = None,
) -> PrayerSchedule:
    """compute_schedule() with the timezone resolved from the coordinate when not given."""
    tz_name = tz_name or resolve_timezone(location)
    return compute_schedule(
        location,
        day,
        method,
        madhab,
        utc_offset_minutes(tz_name, day),
        timezone_name=tz_name,
        arbiter=arbiter,
    )


def compute_qibla(location: GeoCoordinate) -> QiblaResult:
    """Bearing to the Kaaba. Pure; no date or network dependency."""
    return qibla.compute_qibla(location)
