"""Batch adapter: prayer notifications due now, for every subscribed user.

Each user is independent: the work fans out over a bounded thread pool and a
hard failure for one user is logged and counted without touching the others.
Delivering the notifications (web push, FCM) is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime

import httpx
import pytz

from salahtimes.arbiter import SourceArbiter
from salahtimes.compute import (
    GeocodingError,
    compute_schedule,
    resolve_timezone,
    utc_offset_minutes,
)
from salahtimes.errors import (
    AllSourcesFailed,
    InvalidCoordinate,
    PrayerEngineError,
    UnknownCalculationMethod,
)
from salahtimes.methods import method_for_api_code
from salahtimes.models import PRAYER_NAMES, GeoCoordinate, Madhab, PrayerSchedule
from salahtimes.nextprayer import due_prayers, format_12_hour
from salahtimes.settings import Settings

logger = logging.getLogger(__name__)

# Users without a stored method get ISNA, as the original cron job did.
BATCH_DEFAULT_METHOD_ID = 2


@dataclass(frozen=True)
class Subscriber:
    """A user's stored preferences, as read from the profile store."""

    user_id: str
    latitude: float | None
    longitude: float | None
    method_id: int | str | None = None
    madhab: str | int | None = None
    enabled: bool = False
    prayers: Mapping[str, bool] = field(default_factory=dict)  # {"Fajr": True, ...}

    @classmethod
    def from_profile(cls, profile: Mapping, *, api_method_codes: bool = False) -> Subscriber:
        """Build from a profiles row ({"id", "location_lat", "location_lng", ...}).

        `calculation_method` is read as a registry id. Rows written by older
        clients hold the remote provider's method number instead (1 is Karachi
        there, 3 is MWL); pass `api_method_codes=True` to translate those. A
        number with no registered counterpart is kept as-is and fails that
        user's computation.
        """
        prefs = profile.get("notification_preferences") or {}
        method_id = profile.get("calculation_method")
        if api_method_codes and method_id is not None:
            try:
                method_id = method_for_api_code(method_id).id
            except UnknownCalculationMethod:
                logger.warning("Profile %s has unknown provider method %r", profile.get("id"), method_id)
        return cls(
            user_id=str(profile["id"]),
            latitude=profile.get("location_lat"),
            longitude=profile.get("location_lng"),
            method_id=method_id,
            madhab=profile.get("madhab"),
            enabled=bool(prefs.get("enabled")),
            prayers=prefs.get("prayers") or {},
        )


@dataclass(frozen=True)
class Notification:
    user_id: str
    prayer: str
    time: datetime
    title: str
    body: str
    source: str  # "api" or "local"


@dataclass(frozen=True)
class UserOutcome:
    user_id: str
    status: str  # "success", "skipped" or "failed"
    notifications: tuple[Notification, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class BatchReport:
    total: int
    success: int
    failed: int
    skipped: int
    notifications: tuple[Notification, ...]
    outcomes: tuple[UserOutcome, ...]


def build_notification(user_id: str, prayer: str, when: datetime, schedule: PrayerSchedule) -> Notification:
    return Notification(
        user_id=user_id,
        prayer=prayer,
        time=when,
        title=f"Time for {prayer} - {format_12_hour(when)}",
        body=f"It is time for {prayer} prayer.",
        source=schedule.source.value,
    )


def process_subscriber(
    subscriber: Subscriber,
    now: datetime,
    arbiter: SourceArbiter,
    window_minutes: int,
    timezone_for: Callable[[GeoCoordinate], str] = resolve_timezone,
) -> UserOutcome:
    """Compute one user's schedule and the notifications due at `now` (aware)."""
    if not subscriber.enabled:
        return UserOutcome(subscriber.user_id, "skipped", error="notifications disabled")
    if subscriber.latitude is None or subscriber.longitude is None:
        return UserOutcome(subscriber.user_id, "skipped", error="no location")
    wanted = [name for name in PRAYER_NAMES if subscriber.prayers.get(name)]
    if not wanted:
        return UserOutcome(subscriber.user_id, "skipped", error="no prayers selected")

    location = GeoCoordinate(float(subscriber.latitude), float(subscriber.longitude))
    tz_name = timezone_for(location)
    day = now.astimezone(pytz.timezone(tz_name)).date()
    schedule = compute_schedule(
        location,
        day,
        subscriber.method_id if subscriber.method_id is not None else BATCH_DEFAULT_METHOD_ID,
        subscriber.madhab if subscriber.madhab is not None else Madhab.STANDARD,
        utc_offset_minutes(tz_name, day),
        timezone_name=tz_name,
        arbiter=arbiter,
    )
    notifications = tuple(
        build_notification(subscriber.user_id, name, when, schedule)
        for name, when in due_prayers(schedule, now, window_minutes)
        if name in wanted
    )
    return UserOutcome(subscriber.user_id, "success", notifications)


def _guarded(
    subscriber: Subscriber,
    now: datetime,
    arbiter: SourceArbiter,
    window_minutes: int,
    timezone_for: Callable[[GeoCoordinate], str],
) -> UserOutcome:
    try:
        return process_subscriber(subscriber, now, arbiter, window_minutes, timezone_for)
    except (InvalidCoordinate, AllSourcesFailed, GeocodingError) as exc:
        logger.warning("Skipping user %s: %s", subscriber.user_id, exc)
        return UserOutcome(subscriber.user_id, "failed", error=str(exc))
    except (PrayerEngineError, ValueError, LookupError) as exc:
        logger.exception("Unexpected failure for user %s", subscriber.user_id)
        return UserOutcome(subscriber.user_id, "failed", error=str(exc))


def run_batch(
    subscribers: Iterable[Subscriber],
    now: datetime,
    *,
    settings: Settings | None = None,
    arbiter: SourceArbiter | None = None,
    timezone_for: Callable[[GeoCoordinate], str] = resolve_timezone,
) -> BatchReport:
    """Fan out over subscribers and collect the notifications due at `now`.

    Args:
        subscribers: Users to process. Order is not significant.
        now: Current instant, timezone-aware.
        settings: Pool size, notification window and remote provider settings.
        arbiter: Shared arbiter. When omitted one is created around a pooled
            httpx client that lives for the duration of the batch.
        timezone_for: Coordinate to IANA timezone resolver.

    Returns:
        BatchReport with per-status counts and every due notification.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    settings = settings or Settings()
    subscribers = list(subscribers)

    client: httpx.Client | None = None
    if arbiter is None:
        client = httpx.Client()
        arbiter = SourceArbiter(settings, client=client)
    try:
        with ThreadPoolExecutor(max_workers=settings.batch_max_workers) as pool:
            outcomes = tuple(
                pool.map(
                    lambda s: _guarded(
                        s, now, arbiter, settings.notification_window_minutes, timezone_for
                    ),
                    subscribers,
                )
            )
    finally:
        if client is not None:
            client.close()

    report = BatchReport(
        total=len(outcomes),
        success=sum(1 for o in outcomes if o.status == "success"),
        failed=sum(1 for o in outcomes if o.status == "failed"),
        skipped=sum(1 for o in outcomes if o.status == "skipped"),
        notifications=tuple(n for o in outcomes for n in o.notifications),
        outcomes=outcomes,
    )
    logger.info(
        "Batch done: total=%d success=%d failed=%d skipped=%d notifications=%d",
        report.total,
        report.success,
        report.failed,
        report.skipped,
        len(report.notifications),
    )
    return report
