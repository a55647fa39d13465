"""Route geometry and data model."""

from .geometry import (
    InvalidCoordinateError,
    calculate_bearing,
    haversine_distance,
    validate_coordinates,
)
from .models import (
    Emissions,
    GeoPoint,
    Place,
    Route,
    RouteComparison,
    RouteSegment,
    RouteSource,
    RouteStatus,
    SeaRoute,
    SeaRouteWaypoint,
    Waypoint,
)

__all__ = [
    "InvalidCoordinateError",
    "calculate_bearing",
    "haversine_distance",
    "validate_coordinates",
    "Emissions",
    "GeoPoint",
    "Place",
    "Route",
    "RouteComparison",
    "RouteSegment",
    "RouteSource",
    "RouteStatus",
    "SeaRoute",
    "SeaRouteWaypoint",
    "Waypoint",
]
