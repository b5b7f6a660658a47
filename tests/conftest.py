"""Shared pytest fixtures: locations, a mock remote provider and arbiters around it."""

from collections.abc import Callable
from datetime import date

import httpx
import pytest

from salahtimes.arbiter import SourceArbiter
from salahtimes.models import GeoCoordinate
from salahtimes.settings import Settings

MECCA = GeoCoordinate(21.4225, 39.8262)
EQUINOX = date(2024, 3, 20)


def _aladhan_payload(
    timings: dict[str, str] | None = None,
    timezone: str = "Asia/Riyadh",
    hijri: str = "10-09-1445",
) -> dict:
    """Minimal provider response in the shape the arbiter accepts."""
    return {
        "code": 200,
        "status": "OK",
        "data": {
            "timings": timings
            or {
                "Fajr": "05:08",
                "Sunrise": "06:25",
                "Dhuhr": "12:28",
                "Asr": "15:52",
                "Sunset": "18:31",
                "Maghrib": "18:31",
                "Isha": "20:01",
                "Imsak": "04:58",
                "Midnight": "00:28",
            },
            "date": {
                "readable": "20 Mar 2024",
                "gregorian": {"date": "20-03-2024"},
                "hijri": {"date": hijri},
            },
            "meta": {
                "latitude": 21.4225,
                "longitude": 39.8262,
                "timezone": timezone,
                "method": {"id": 4, "name": "Umm Al-Qura University, Makkah"},
                "school": "STANDARD",
            },
        },
    }


class RecordingTransport:
    """httpx handler that records requests and answers with a fixed behaviour."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def _timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url="https://provider.test/v1", api_timeout=2.0, batch_max_workers=4)


@pytest.fixture
def make_arbiter(settings: Settings):
    """Build (arbiter, transport) around a handler returning an httpx.Response."""
    clients: list[httpx.Client] = []

    def factory(respond: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(respond)
        client = httpx.Client(transport=httpx.MockTransport(transport))
        clients.append(client)
        return SourceArbiter(settings, client=client), transport

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def timeout_arbiter(make_arbiter) -> SourceArbiter:
    arbiter, _ = make_arbiter(_timeout)
    return arbiter


@pytest.fixture
def offline_arbiter(make_arbiter) -> SourceArbiter:
    arbiter, _ = make_arbiter(_unreachable)
    return arbiter


@pytest.fixture
def aladhan_payload():
    """Factory for provider payloads; keyword arguments override timings, timezone or hijri date."""
    return _aladhan_payload


@pytest.fixture
def mecca() -> GeoCoordinate:
    return MECCA


@pytest.fixture
def equinox() -> date:
    return EQUINOX
