"""
Weather inputs for route planning.

The route engine consumes weather as typed samples at a lat/lon. This
module defines those sample types, the weather-risk scoring used for
segment fuel penalties, and a deterministic synthetic provider for the
Gulf weather zones. Any object exposing ``get_weather(lat, lon)`` and
``get_conditions(lat, lon)`` can replace the synthetic provider.

Synthetic values are derived from a sine hash of the position, so the
same point always yields the same weather. This includes the ocean
current and wave period, which makes optimizer output reproducible.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeatherZone:
    """Named circular weather zone (radius in degrees)."""
    name: str
    lat: float
    lon: float
    radius_deg: float


WEATHER_ZONES: List[WeatherZone] = [
    WeatherZone("Abu Dhabi Offshore", 24.5, 54.0, 0.5),
    WeatherZone("Dubai Channel", 25.2, 55.1, 0.3),
    WeatherZone("Fujairah Waters", 25.1, 56.3, 0.4),
    WeatherZone("Das Island", 25.15, 52.87, 0.3),
    WeatherZone("Ruwais Terminal", 24.1, 52.7, 0.3),
    WeatherZone("Khalifa Port", 24.8, 54.6, 0.2),
    WeatherZone("Open Gulf", 24.8, 53.5, 1.0),
]
DEFAULT_ZONE = WEATHER_ZONES[-1]

COMPASS_POINTS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
COMPASS_DEGREES: Dict[str, float] = {p: i * 45.0 for i, p in enumerate(COMPASS_POINTS)}

CONDITIONS = ["clear", "partly_cloudy", "cloudy", "hazy", "windy", "rough"]

# Condition → forecast category
CONDITION_CATEGORIES: Dict[str, str] = {
    "clear": "clear",
    "cloudy": "cloudy",
    "partly_cloudy": "cloudy",
    "hazy": "cloudy",
    "rough": "storm",
    "storm": "storm",
}


@dataclass
class LocalWeather:
    """Weather observation at a point, as reported by a provider."""
    temperature_c: float
    wind_speed_kn: float
    wind_direction: str  # compass point the wind blows FROM
    wave_height_m: float
    visibility_nm: float
    condition: str
    zone: str
    operational_risk: str  # low | medium | high

    @property
    def wind_direction_deg(self) -> float:
        return compass_to_degrees(self.wind_direction)


@dataclass
class WeatherPoint:
    """Forecast sample along a route."""
    lat: float
    lon: float
    time: datetime
    wind_speed_kn: float
    wind_direction_deg: float
    wave_height_m: float
    visibility_nm: float
    condition: str  # clear | cloudy | rain | storm
    risk_level: str


@dataclass
class EnvironmentalConditions:
    """Wind, sea and current state used for speed optimisation."""
    wind_speed_kn: float
    wind_direction_deg: float  # from
    wave_height_m: float
    wave_direction_deg: float  # from
    wave_period_s: float
    current_speed_kn: float
    current_direction_deg: float  # towards


def compass_to_degrees(direction: str) -> float:
    """Compass point → degrees; unknown points map to 0 (north)."""
    return COMPASS_DEGREES.get(direction, 0.0)


def map_condition(condition: str) -> str:
    """Collapse a provider condition into clear/cloudy/rain/storm."""
    return CONDITION_CATEGORIES.get(condition, "clear")


def operational_risk(wind_speed_kn: float, wave_height_m: float) -> str:
    """Operational risk band from wind and sea state."""
    if wind_speed_kn > 20 or wave_height_m > 2.0:
        return "high"
    if wind_speed_kn > 15 or wave_height_m > 1.5:
        return "medium"
    return "low"


def assess_weather_risk(weather: LocalWeather) -> float:
    """
    Numeric weather risk (0-100) for a weather sample.

    high   → 80, +20 if wind > 25 kn
    medium → 40, +20 if waves > 1.5 m
    low    → 10, +10 if wind > 10 kn
    """
    if weather.operational_risk == "high":
        return 80.0 + (20.0 if weather.wind_speed_kn > 25 else 0.0)
    if weather.operational_risk == "medium":
        return 40.0 + (20.0 if weather.wave_height_m > 1.5 else 0.0)
    return 10.0 + (10.0 if weather.wind_speed_kn > 10 else 0.0)


def _round_half_up(value: float, ndigits: int = 0) -> float:
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def find_zone(lat: float, lon: float) -> WeatherZone:
    """Closest weather zone containing the point, else the open-Gulf zone."""
    closest = DEFAULT_ZONE
    min_distance = float('inf')
    for zone in WEATHER_ZONES:
        distance = math.hypot(lat - zone.lat, lon - zone.lon)
        if distance < min_distance and distance < zone.radius_deg:
            min_distance = distance
            closest = zone
    return closest


class SyntheticWeatherProvider:
    """
    Deterministic pseudo-random weather for the Gulf region.

    Use this when no live weather source is wired in.
    """

    def _random(self, lat: float, lon: float, offset: int) -> float:
        """Hash of (lat, lon, offset) in [0, 1)."""
        seed = math.sin(lat * 12.9898 + lon * 78.233) * 43758.5453
        value = math.sin(seed + offset) * 43758.5453
        return value - math.floor(value)

    def _raw(self, lat: float, lon: float) -> Tuple[float, float, float, float, str, str]:
        wind_speed = 5 + self._random(lat, lon, 1) * 20  # 5-25 kn
        wave_height = 0.3 + self._random(lat, lon, 2) * 2.5  # 0.3-2.8 m
        temperature = 28 + self._random(lat, lon, 3) * 12  # 28-40 °C
        visibility = 5 + self._random(lat, lon, 4) * 15  # 5-20 nm
        direction = COMPASS_POINTS[int(self._random(lat, lon, 5) * 8) % 8]
        condition = CONDITIONS[int(self._random(lat, lon, 6) * len(CONDITIONS)) % len(CONDITIONS)]
        return wind_speed, wave_height, temperature, visibility, direction, condition

    def get_weather(self, lat: float, lon: float) -> LocalWeather:
        """Weather observation at (lat, lon)."""
        wind_speed, wave_height, temperature, visibility, direction, condition = self._raw(lat, lon)

        return LocalWeather(
            temperature_c=_round_half_up(temperature),
            wind_speed_kn=_round_half_up(wind_speed),
            wind_direction=direction,
            wave_height_m=_round_half_up(wave_height, 1),
            visibility_nm=_round_half_up(visibility),
            condition=condition,
            zone=find_zone(lat, lon).name,
            # Risk is banded on the unrounded values
            operational_risk=operational_risk(wind_speed, wave_height),
        )

    def get_conditions(self, lat: float, lon: float) -> EnvironmentalConditions:
        """
        Wind, sea and current at (lat, lon).

        The Gulf circulation is modelled crudely as counter-clockwise:
        currents set north-west east of 54°E and south-east elsewhere.
        """
        weather = self.get_weather(lat, lon)
        wind_dir = weather.wind_direction_deg

        return EnvironmentalConditions(
            wind_speed_kn=weather.wind_speed_kn,
            wind_direction_deg=wind_dir,
            wave_height_m=weather.wave_height_m,
            wave_direction_deg=wind_dir,  # wind sea
            wave_period_s=6 + self._random(lat, lon, 8) * 4,  # 6-10 s
            current_speed_kn=0.5 + self._random(lat, lon, 7),  # 0.5-1.5 kn
            current_direction_deg=315.0 if lon > 54 else 135.0,
        )


_default_provider = SyntheticWeatherProvider()


def get_default_weather_provider() -> SyntheticWeatherProvider:
    return _default_provider
