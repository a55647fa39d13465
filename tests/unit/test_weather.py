"""
Unit tests for weather lookup and weather risk scoring.

The synthetic provider must be deterministic per location so routes and
optimisations are reproducible.
"""

import pytest

from gulfnav.data.weather import (
    COMPASS_POINTS,
    CONDITIONS,
    DEFAULT_ZONE,
    LocalWeather,
    SyntheticWeatherProvider,
    assess_weather_risk,
    compass_to_degrees,
    find_zone,
    map_condition,
    operational_risk,
)


def _weather(risk: str, wind: float = 10.0, wave: float = 1.0) -> LocalWeather:
    return LocalWeather(
        temperature_c=30.0,
        wind_speed_kn=wind,
        wind_direction="N",
        wave_height_m=wave,
        visibility_nm=10.0,
        condition="clear",
        zone="Open Gulf",
        operational_risk=risk,
    )


@pytest.fixture
def provider():
    return SyntheticWeatherProvider()


# ---------------------------------------------------------------------------
# §1 – Risk scoring
# ---------------------------------------------------------------------------
class TestRiskScoring:

    @pytest.mark.parametrize("wind,wave,expected", [
        (21.0, 1.0, "high"),
        (10.0, 2.1, "high"),
        (16.0, 1.0, "medium"),
        (10.0, 1.6, "medium"),
        (15.0, 1.5, "low"),
        (5.0, 0.3, "low"),
    ])
    def test_operational_risk_bands(self, wind, wave, expected):
        assert operational_risk(wind, wave) == expected

    @pytest.mark.parametrize("weather,expected", [
        (_weather("high", wind=22.0), 80.0),
        (_weather("high", wind=26.0), 100.0),
        (_weather("medium", wave=1.4), 40.0),
        (_weather("medium", wave=1.8), 60.0),
        (_weather("low", wind=8.0), 10.0),
        (_weather("low", wind=12.0), 20.0),
    ])
    def test_assess_weather_risk(self, weather, expected):
        assert assess_weather_risk(weather) == expected


# ---------------------------------------------------------------------------
# §2 – Lookups
# ---------------------------------------------------------------------------
class TestLookups:

    def test_compass_points(self):
        assert compass_to_degrees("N") == 0.0
        assert compass_to_degrees("SE") == 135.0
        assert compass_to_degrees("NW") == 315.0
        assert compass_to_degrees("???") == 0.0

    @pytest.mark.parametrize("condition,expected", [
        ("clear", "clear"),
        ("partly_cloudy", "cloudy"),
        ("hazy", "cloudy"),
        ("rough", "storm"),
        ("windy", "clear"),
    ])
    def test_map_condition(self, condition, expected):
        assert map_condition(condition) == expected

    def test_find_zone(self):
        assert find_zone(24.5, 54.0).name == "Abu Dhabi Offshore"
        assert find_zone(27.5, 50.0) is DEFAULT_ZONE


# ---------------------------------------------------------------------------
# §3 – Synthetic provider
# ---------------------------------------------------------------------------
class TestSyntheticProvider:

    def test_deterministic(self, provider):
        assert provider.get_weather(25.1, 54.3) == provider.get_weather(25.1, 54.3)
        assert provider.get_conditions(25.1, 54.3) == provider.get_conditions(25.1, 54.3)

    @pytest.mark.parametrize("lat,lon", [(24.5, 54.0), (25.2, 55.1), (26.0, 56.5), (22.0, 60.0)])
    def test_value_ranges(self, provider, lat, lon):
        w = provider.get_weather(lat, lon)
        assert 5 <= w.wind_speed_kn <= 25
        assert 0.3 <= w.wave_height_m <= 2.8
        assert 28 <= w.temperature_c <= 40
        assert 5 <= w.visibility_nm <= 20
        assert w.wind_direction in COMPASS_POINTS
        assert w.condition in CONDITIONS
        assert w.operational_risk in ("low", "medium", "high")

    def test_conditions(self, provider):
        c = provider.get_conditions(25.0, 55.0)
        w = provider.get_weather(25.0, 55.0)
        assert c.wind_direction_deg == w.wind_direction_deg
        assert c.wave_direction_deg == c.wind_direction_deg
        assert 6.0 <= c.wave_period_s <= 10.0
        assert 0.5 <= c.current_speed_kn <= 1.5

    def test_current_direction_by_longitude(self, provider):
        assert provider.get_conditions(25.0, 55.0).current_direction_deg == 315.0
        assert provider.get_conditions(25.0, 53.0).current_direction_deg == 135.0
