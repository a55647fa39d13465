"""Static navigation data and external data sources."""

from .land_mask import LandCrossing, is_ocean, segment_crosses_land
from .maritime_network import MaritimeNetwork, NetworkNode, get_default_network
from .sea_route_client import SeaRouteClient, SeaRouteError
from .vessel_profiles import VESSEL_PROFILES, VesselProfile, get_vessel_profile
from .weather import EnvironmentalConditions, LocalWeather, SyntheticWeatherProvider

__all__ = [
    "LandCrossing",
    "is_ocean",
    "segment_crosses_land",
    "MaritimeNetwork",
    "NetworkNode",
    "get_default_network",
    "SeaRouteClient",
    "SeaRouteError",
    "VESSEL_PROFILES",
    "VesselProfile",
    "get_vessel_profile",
    "EnvironmentalConditions",
    "LocalWeather",
    "SyntheticWeatherProvider",
]
