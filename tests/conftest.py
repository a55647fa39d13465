"""
Shared pytest fixtures for GulfNav tests.

No test performs network I/O: engines are built with the external
sea-route provider unconfigured unless a test injects a fake client.
"""

import os
from datetime import datetime

import pytest

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY gulfnav imports)
# ---------------------------------------------------------------------------
os.environ.pop("SEA_ROUTE_API_KEY", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from gulfnav.config import Settings  # noqa: E402
from gulfnav.data.land_mask import LandCrossing  # noqa: E402
from gulfnav.data.weather import (  # noqa: E402
    EnvironmentalConditions,
    LocalWeather,
    operational_risk,
)
from gulfnav.metrics import metrics  # noqa: E402
from gulfnav.optimization.route_engine import RouteEngine  # noqa: E402


# ---------------------------------------------------------------------------
# Section 2: Stubs
# ---------------------------------------------------------------------------
class FixedWeatherProvider:
    """Same weather everywhere; currents flow towards ``current_direction_deg``."""

    def __init__(
        self,
        wind_speed_kn: float = 10.0,
        wind_direction: str = "N",
        wave_height_m: float = 1.0,
        current_speed_kn: float = 0.0,
        current_direction_deg: float = 0.0,
    ):
        self.wind_speed_kn = wind_speed_kn
        self.wind_direction = wind_direction
        self.wave_height_m = wave_height_m
        self.current_speed_kn = current_speed_kn
        self.current_direction_deg = current_direction_deg

    def get_weather(self, lat, lon):
        return LocalWeather(
            temperature_c=32.0,
            wind_speed_kn=self.wind_speed_kn,
            wind_direction=self.wind_direction,
            wave_height_m=self.wave_height_m,
            visibility_nm=10.0,
            condition="clear",
            zone="Open Gulf",
            operational_risk=operational_risk(self.wind_speed_kn, self.wave_height_m),
        )

    def get_conditions(self, lat, lon):
        weather = self.get_weather(lat, lon)
        return EnvironmentalConditions(
            wind_speed_kn=self.wind_speed_kn,
            wind_direction_deg=weather.wind_direction_deg,
            wave_height_m=self.wave_height_m,
            wave_direction_deg=weather.wind_direction_deg,
            wave_period_s=8.0,
            current_speed_kn=self.current_speed_kn,
            current_direction_deg=self.current_direction_deg,
        )


def never_crosses(lat1, lon1, lat2, lon2):
    return LandCrossing(crosses=False)


def always_crosses(lat1, lon1, lat2, lon2):
    return LandCrossing(crosses=True, land_area="UAE Mainland", cross_point=((lat1 + lat2) / 2, (lon1 + lon2) / 2))


# ---------------------------------------------------------------------------
# Section 3: Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def reset_metrics():
    """Each test starts with empty counters and timings."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def offline_settings():
    """Settings with the external sea-route provider disabled."""
    return Settings(sea_route_api_key=None, two_opt_time_budget_s=5.0)


@pytest.fixture
def engine(offline_settings):
    """Route engine using the real coastline heuristic and synthetic weather."""
    return RouteEngine(settings=offline_settings)


@pytest.fixture
def weather_factory():
    """Build a FixedWeatherProvider with the given overrides."""
    return FixedWeatherProvider


@pytest.fixture
def calm_weather():
    return FixedWeatherProvider(wind_speed_kn=10.0, wave_height_m=1.0)


@pytest.fixture
def calm_engine(offline_settings, calm_weather):
    """Engine with open water everywhere and fixed calm weather."""
    return RouteEngine(
        settings=offline_settings,
        weather_provider=calm_weather,
        land_checker=never_crosses,
    )


@pytest.fixture
def clear_land_checker():
    return never_crosses


@pytest.fixture
def crossing_land_checker():
    return always_crosses


@pytest.fixture
def departure():
    return datetime(2025, 3, 1, 6, 0, 0)
