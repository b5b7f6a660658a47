import pytest

from salahtimes.models import GeoCoordinate
from salahtimes.qibla import (
    COMPASS_POINTS,
    KAABA,
    compass_direction,
    compute_qibla,
    distance_to_kaaba_km,
    qibla_bearing,
)


class TestQiblaBearing:
    @pytest.mark.parametrize(
        "location, expected, direction",
        [
            (GeoCoordinate(40.7128, -74.0060), 58.48, "NE"),  # New York
            (GeoCoordinate(51.5074, -0.1278), 118.99, "SE"),  # London
            (GeoCoordinate(-6.2088, 106.8456), 295.15, "NW"),  # Jakarta
        ],
    )
    def test_known_cities(self, location, expected, direction):
        result = compute_qibla(location)
        assert result.bearing_deg == pytest.approx(expected, abs=0.2)
        assert result.compass_direction == direction
        assert result.degenerate is None

    def test_due_north_of_kaaba_faces_south(self):
        assert qibla_bearing(GeoCoordinate(50.0, KAABA.longitude)) == pytest.approx(180.0)

    def test_due_south_of_kaaba_faces_north(self):
        assert qibla_bearing(GeoCoordinate(-10.0, KAABA.longitude)) == pytest.approx(0.0)

    def test_continuous_across_date_line(self):
        east = qibla_bearing(GeoCoordinate(10.0, 179.9999))
        west = qibla_bearing(GeoCoordinate(10.0, -179.9999))
        assert abs(east - west) < 0.01

    def test_always_in_range(self):
        for lat in range(-89, 90, 7):
            for lng in range(-180, 181, 15):
                location = GeoCoordinate(float(lat), float(lng))
                assert 0.0 <= qibla_bearing(location) < 360.0

    def test_deterministic(self):
        location = GeoCoordinate(33.5138, 36.2765)
        assert compute_qibla(location) == compute_qibla(location)


class TestDegenerate:
    def test_at_the_kaaba(self):
        result = compute_qibla(KAABA)
        assert result.degenerate == "kaaba"
        assert result.bearing_deg is None
        assert result.compass_direction is None
        assert result.distance_km == pytest.approx(0.0)

    def test_within_a_kilometre_of_the_kaaba(self):
        result = compute_qibla(GeoCoordinate(21.4265, 39.8262))
        assert result.degenerate == "kaaba"

    def test_just_outside_the_kaaba_radius(self):
        result = compute_qibla(GeoCoordinate(21.4425, 39.8262))
        assert result.degenerate is None
        assert result.bearing_deg == pytest.approx(180.0)

    def test_antipode(self):
        result = compute_qibla(GeoCoordinate(-KAABA.latitude, KAABA.longitude - 180.0))
        assert result.degenerate == "antipode"
        assert result.bearing_deg is None


class TestDistance:
    def test_new_york(self):
        assert 10_200 < distance_to_kaaba_km(GeoCoordinate(40.7128, -74.0060)) < 10_400

    def test_ten_degrees_of_latitude(self):
        north = distance_to_kaaba_km(GeoCoordinate(31.4225, KAABA.longitude))
        assert north == pytest.approx(10 * 111.195, rel=1e-3)


class TestCompassDirection:
    @pytest.mark.parametrize(
        "bearing, expected",
        [
            (0.0, "N"),
            (22.4, "N"),
            (22.5, "NE"),
            (90.0, "E"),
            (180.0, "S"),
            (202.4, "S"),
            (270.0, "W"),
            (337.4, "NW"),
            (337.5, "N"),
            (359.99, "N"),
        ],
    )
    def test_sectors(self, bearing, expected):
        assert compass_direction(bearing) == expected

    def test_sector_centres(self):
        for i, label in enumerate(COMPASS_POINTS):
            assert compass_direction(i * 45.0) == label
