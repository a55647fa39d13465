"""
Great-circle geometry helpers.

All functions are pure. Inputs are decimal degrees; distances are
nautical miles. Malformed input (NaN, out-of-range) is not rejected
here: NaN propagates to the result. Route computations validate their
inputs with validate_coordinates() before calling into this module.
"""

import math
from typing import List, Sequence, Tuple

EARTH_RADIUS_NM = 3440.065


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is not a valid position."""


def validate_coordinates(lat: float, lon: float) -> None:
    """
    Check that (lat, lon) is a finite, in-range position.

    Raises:
        InvalidCoordinateError: on NaN/Inf or out-of-range values
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinateError(f"Non-finite coordinate ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinateError(f"Latitude {lat} outside [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidCoordinateError(f"Longitude {lon} outside [-180, 180]")


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate great circle distance between two points.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Distance in nautical miles
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))

    return EARTH_RADIUS_NM * c


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate initial bearing from point 1 to point 2.

    Returns:
        Bearing in degrees [0, 360)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    x = math.sin(dlon) * math.cos(lat2_rad)
    y = (math.cos(lat1_rad) * math.sin(lat2_rad) -
         math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon))

    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360) % 360


def destination_point(
    lat: float, lon: float,
    distance_nm: float,
    bearing_deg: float,
) -> Tuple[float, float]:
    """
    Point reached by travelling distance_nm along an initial bearing.

    Returns:
        (lat, lon) in degrees, longitude normalised to [-180, 180)
    """
    lat_rad = math.radians(lat)
    lon_rad = math.radians(lon)
    bearing_rad = math.radians(bearing_deg)
    angular = distance_nm / EARTH_RADIUS_NM

    lat2 = math.asin(
        math.sin(lat_rad) * math.cos(angular)
        + math.cos(lat_rad) * math.sin(angular) * math.cos(bearing_rad)
    )
    lon2 = lon_rad + math.atan2(
        math.sin(bearing_rad) * math.sin(angular) * math.cos(lat_rad),
        math.cos(angular) - math.sin(lat_rad) * math.sin(lat2),
    )

    return math.degrees(lat2), (math.degrees(lon2) + 540) % 360 - 180


def interpolate_point(
    lat1: float, lon1: float,
    lat2: float, lon2: float,
    fraction: float,
) -> Tuple[float, float]:
    """Linear lat/lon interpolation; fraction 0 → start, 1 → end."""
    return (
        lat1 + (lat2 - lat1) * fraction,
        lon1 + (lon2 - lon1) * fraction,
    )


def path_distance(points: Sequence) -> float:
    """Sum of consecutive great-circle distances over points with .lat/.lon."""
    total = 0.0
    for i in range(len(points) - 1):
        total += haversine_distance(
            points[i].lat, points[i].lon,
            points[i + 1].lat, points[i + 1].lon,
        )
    return total


def relative_angle(heading_deg: float, direction_deg: float) -> float:
    """Smallest absolute angle between two directions, in [0, 180]."""
    angle = abs(heading_deg - direction_deg) % 360
    return 360 - angle if angle > 180 else angle


def normalize_turn(bearing_in: float, bearing_out: float) -> float:
    """Signed course change in (-180, 180]; positive is to starboard."""
    turn = bearing_out - bearing_in
    if turn > 180:
        turn -= 360
    elif turn < -180:
        turn += 360
    return turn


def interpolation_fractions(num_segments: int) -> List[float]:
    """Evenly spaced fractions 0..1 inclusive for num_segments segments."""
    return [i / num_segments for i in range(num_segments + 1)]
