"""Error taxonomy for the prayer time engine.

Only InvalidCoordinate, UnknownCalculationMethod and AllSourcesFailed escape
compute_schedule(). The rest are recovered internally by falling back to the
next source or to the high-latitude substitution rule.
"""

from __future__ import annotations


class PrayerEngineError(Exception):
    """Base class for every error raised by salahtimes."""


class InvalidCoordinate(PrayerEngineError, ValueError):
    """Latitude/longitude outside [-90, 90] / [-180, 180] or not finite."""


class UnknownCalculationMethod(PrayerEngineError, LookupError):
    """Method id not present in the calculation method registry."""

    def __init__(self, method_id: object) -> None:
        super().__init__(f"Unknown calculation method: {method_id!r}")
        self.method_id = method_id


class DegenerateSolution(PrayerEngineError):
    """The hour-angle equation has no solution for an event that cannot be substituted."""

    def __init__(self, event: str, reason: str = "sun never reaches the required angle") -> None:
        super().__init__(f"{event}: {reason}")
        self.event = event


class ScheduleInvalid(PrayerEngineError):
    """A schedule (computed or received) failed validation."""


class RemoteUnavailable(PrayerEngineError):
    """Remote timings provider timed out, errored, or answered non-2xx."""


class AllSourcesFailed(PrayerEngineError):
    """Neither the remote provider nor the local solver produced a valid schedule."""

    def __init__(
        self,
        remote_error: Exception | None,
        local_error: Exception | None,
    ) -> None:
        super().__init__(
            f"No valid prayer schedule: remote={remote_error!s}; local={local_error!s}"
        )
        self.remote_error = remote_error
        self.local_error = local_error
