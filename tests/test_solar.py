from datetime import date

import pytest

from salahtimes.solar import julian_century, julian_day, solar_position


class TestJulianDay:
    def test_j2000_epoch(self):
        """2000-01-01 at noon UTC is the J2000.0 epoch."""
        assert julian_day(date(2000, 1, 1)) == 2451545.0
        assert julian_century(julian_day(date(2000, 1, 1))) == 0.0

    def test_consecutive_days_differ_by_one(self):
        assert julian_day(date(2024, 3, 1)) - julian_day(date(2024, 2, 29)) == 1.0


class TestSolarPosition:
    def test_deterministic(self):
        day = date(2024, 7, 4)
        assert solar_position(day) == solar_position(day)

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2024, 6, 20), 23.44),
            (date(2024, 12, 21), -23.44),
        ],
    )
    def test_solstice_declination(self, day, expected):
        """Declination peaks at the obliquity of the ecliptic."""
        assert solar_position(day).declination_deg == pytest.approx(expected, abs=0.05)

    @pytest.mark.parametrize("day", [date(2024, 3, 20), date(2024, 9, 22)])
    def test_equinox_declination_near_zero(self, day):
        assert abs(solar_position(day).declination_deg) < 0.5

    def test_equation_of_time_extremes(self):
        """Sundial runs ~16 min fast in early November and ~14 min slow in mid February."""
        assert 16.0 < solar_position(date(2024, 11, 3)).equation_of_time_minutes < 16.7
        assert -14.6 < solar_position(date(2024, 2, 11)).equation_of_time_minutes < -13.8

    def test_equation_of_time_bounded_all_year(self):
        for month in range(1, 13):
            for day in (1, 15):
                eot = solar_position(date(2025, month, day)).equation_of_time_minutes
                assert -17.0 < eot < 17.0
