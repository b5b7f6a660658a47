"""Qibla bearing: initial great-circle course from the observer to the Kaaba."""

import math

from salahtimes.models import GeoCoordinate, QiblaResult

KAABA = GeoCoordinate(latitude=21.4225, longitude=39.8262)
EARTH_RADIUS_KM = 6371.0088
# Inside this radius of the Kaaba (or of its antipode) every direction is equally valid.
DEGENERATE_RADIUS_KM = 1.0

COMPASS_POINTS: tuple[str, ...] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def qibla_bearing(location: GeoCoordinate) -> float:
    """Bearing in degrees clockwise from true north, normalized into [0, 360)."""
    lat1 = math.radians(location.latitude)
    lat2 = math.radians(KAABA.latitude)
    delta_long = math.radians(KAABA.longitude - location.longitude)
    theta = math.atan2(
        math.sin(delta_long) * math.cos(lat2),
        math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(delta_long),
    )
    bearing = math.degrees(theta) % 360.0
    # -1e-15 % 360.0 == 360.0 in floating point.
    return 0.0 if bearing >= 360.0 else bearing


def distance_to_kaaba_km(location: GeoCoordinate) -> float:
    """Haversine great-circle distance."""
    lat1 = math.radians(location.latitude)
    lat2 = math.radians(KAABA.latitude)
    d_lat = lat2 - lat1
    d_long = math.radians(KAABA.longitude - location.longitude)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_long / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def compass_direction(bearing: float) -> str:
    """One of eight 45°-wide sectors centred on the label (N is 337.5° to 22.5°)."""
    return COMPASS_POINTS[math.floor(bearing / 45.0 + 0.5) % 8]


def compute_qibla(location: GeoCoordinate) -> QiblaResult:
    distance = distance_to_kaaba_km(location)
    if distance < DEGENERATE_RADIUS_KM:
        return QiblaResult(None, None, distance, degenerate="kaaba")
    if math.pi * EARTH_RADIUS_KM - distance < DEGENERATE_RADIUS_KM:
        return QiblaResult(None, None, distance, degenerate="antipode")
    bearing = qibla_bearing(location)
    return QiblaResult(
        bearing_deg=bearing,
        compass_direction=compass_direction(bearing),
        distance_km=distance,
    )
