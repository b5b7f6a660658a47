"""Source arbiter: remote provider first, local solver second, never unvalidated output.

States: REMOTE -> (accepted) | LOCAL_FALLBACK -> (accepted) | FAILED.
One bounded remote attempt, no retries: the local solver is always available.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any

import httpx
import pytz

from salahtimes.errors import (
    AllSourcesFailed,
    DegenerateSolution,
    RemoteUnavailable,
    ScheduleInvalid,
    UnknownCalculationMethod,
)
from salahtimes.methods import get_method
from salahtimes.models import PrayerSchedule, ScheduleRequest, Source
from salahtimes.settings import Settings
from salahtimes.solver import solve
from salahtimes.validator import check_schedule, parse_timings

logger = logging.getLogger(__name__)


class ArbiterState(enum.Enum):
    REMOTE = "remote"
    LOCAL_FALLBACK = "local_fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class Resolution:
    """Accepted schedule plus the states visited to obtain it."""

    schedule: PrayerSchedule
    states: tuple[ArbiterState, ...]
    remote_error: Exception | None = None


class SourceArbiter:
    """Chooses between the remote timings provider and the local solver.

    Holds no per-request state, so one instance (and its httpx client) can be
    shared by a worker pool.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._client = client

    def _get(self, url: str, params: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self.settings.api_timeout)
        return httpx.get(url, params=params, timeout=self.settings.api_timeout)

    def fetch_remote(self, request: ScheduleRequest) -> PrayerSchedule:
        """Single remote attempt, validated.

        Raises:
            RemoteUnavailable: Timeout, transport error or non-2xx status.
            ScheduleInvalid: Payload deviates from the expected schema or fails validation.
            UnknownCalculationMethod: No provider code for the requested method.
        """
        method = get_method(request.method_id)
        if method.api_method is None:
            raise RemoteUnavailable(f"{method.name} has no remote provider equivalent")

        params: dict[str, Any] = {
            "latitude": request.location.latitude,
            "longitude": request.location.longitude,
            "method": method.api_method,
            "school": request.madhab.value,
        }
        if request.timezone_name:
            params["timezonestring"] = request.timezone_name
        url = f"{self.settings.api_base_url}/timings/{request.date:%d-%m-%Y}"

        try:
            resp = self._get(url, params)
        except httpx.TimeoutException as exc:
            raise RemoteUnavailable(
                f"timed out after {self.settings.api_timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteUnavailable(f"request failed: {exc}") from exc
        if not resp.is_success:
            raise RemoteUnavailable(f"provider returned HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ScheduleInvalid("provider response is not JSON") from exc

        schedule = schedule_from_payload(request, payload)
        check_schedule(schedule)
        return schedule

    def compute_local(self, request: ScheduleRequest) -> PrayerSchedule:
        """Local solver, validated.

        Raises:
            UnknownCalculationMethod, DegenerateSolution, ScheduleInvalid.
        """
        method = get_method(request.method_id)
        schedule = solve(
            request.location,
            request.date,
            method,
            request.madhab,
            request.utc_offset_minutes,
        )
        check_schedule(schedule)
        return schedule

    def run(self, request: ScheduleRequest) -> Resolution:
        """Walk the state machine for one request.

        Raises:
            AllSourcesFailed: Both sources failed; chained from the local error.
        """
        states = [ArbiterState.REMOTE]
        try:
            return Resolution(self.fetch_remote(request), tuple(states))
        except (RemoteUnavailable, ScheduleInvalid, UnknownCalculationMethod) as exc:
            remote_error: Exception = exc
            logger.warning(
                "Remote prayer times unavailable for %s, falling back to local calculation: %s",
                request.date,
                exc,
            )

        states.append(ArbiterState.LOCAL_FALLBACK)
        try:
            schedule = self.compute_local(request)
        except (UnknownCalculationMethod, DegenerateSolution, ScheduleInvalid) as exc:
            states.append(ArbiterState.FAILED)
            logger.error("Local calculation also failed for %s: %s", request.date, exc)
            raise AllSourcesFailed(remote_error, exc) from exc

        if schedule.degraded_accuracy:
            logger.info(
                "High-latitude adjustment applied to %s",
                ", ".join(schedule.adjusted_events + schedule.rolled_over_events),
            )
        return Resolution(schedule, tuple(states), remote_error)

    def resolve(self, request: ScheduleRequest) -> PrayerSchedule:
        return self.run(request).schedule


def _section(parent: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = parent.get(key)
    if not isinstance(value, Mapping):
        raise ScheduleInvalid(f"provider response has no '{key}' object")
    return value


def schedule_from_payload(request: ScheduleRequest, payload: object) -> PrayerSchedule:
    """Translate the provider's JSON into a schedule. Any deviation is a failure."""
    if not isinstance(payload, Mapping):
        raise ScheduleInvalid("provider response is not an object")
    if payload.get("code") != 200:
        raise ScheduleInvalid(f"provider status code {payload.get('code')!r}")
    data = _section(payload, "data")
    timings = _section(data, "timings")

    meta = data.get("meta")
    if isinstance(meta, Mapping) and meta.get("timezone"):
        _check_timezone(request, meta["timezone"])

    hijri_date = None
    date_info = data.get("date")
    if isinstance(date_info, Mapping) and isinstance(date_info.get("hijri"), Mapping):
        value = date_info["hijri"].get("date")
        hijri_date = value if isinstance(value, str) else None

    return parse_timings(
        request.date,
        timings,
        request.utc_offset_minutes,
        source=Source.API,
        method_id=get_method(request.method_id).id,
        madhab=request.madhab,
        hijri_date=hijri_date,
    )


def _check_timezone(request: ScheduleRequest, name: object) -> None:
    """The provider's timezone must imply the caller's UTC offset on that date."""
    if not isinstance(name, str):
        raise ScheduleInvalid(f"provider timezone is not a string: {name!r}")
    try:
        tz = pytz.timezone(name)
    except pytz.UnknownTimeZoneError as exc:
        raise ScheduleInvalid(f"provider timezone unknown: {name}") from exc
    offset = tz.utcoffset(datetime.combine(request.date, time(12)))
    minutes = int(offset.total_seconds() // 60)
    if minutes != request.utc_offset_minutes:
        raise ScheduleInvalid(
            f"provider timezone {name} is UTC{minutes:+d}min, "
            f"expected UTC{request.utc_offset_minutes:+d}min"
        )
