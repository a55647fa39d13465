"""
Land mask for Gulf route planning.

Provides is_on_land(lat, lon) -> land area name or None.

The mask is an approximate, piecewise-linear heuristic tuned for the
Persian Gulf: a few named bounding boxes (Qatar, Bahrain, Musandam), a
piecewise-linear UAE coastline where land lies SOUTH of the coast, and
an Iranian coast threshold where land lies NORTH. It is not a charted
coastline. segment_crosses_land() samples three interior points of a
segment, so a segment that dips into land only between samples is
missed. A polygon test against real coastline data can replace
is_on_land() without changing any signature.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LandCrossing:
    """Result of a segment land check."""
    crosses: bool
    land_area: Optional[str] = None
    cross_point: Optional[Tuple[float, float]] = None  # (lat, lon)


# ---------------------------------------------------------------------------
# Region data
# ---------------------------------------------------------------------------
# (lat_min, lat_max, lon_min, lon_max, name), checked in order
LAND_BOXES: List[Tuple[float, float, float, float, str]] = [
    (24.5, 26.2, 50.75, 51.6, "Qatar"),
    (25.9, 26.3, 50.45, 50.65, "Bahrain"),
    (25.8, 26.4, 56.0, 56.45, "Musandam"),
]

# UAE coastline as (lon_start, lon_end, coast_lat_at_start, slope per degree lon).
# Land is south of the coast line and north of UAE_SOUTHERN_LIMIT.
UAE_COASTLINE: List[Tuple[float, float, float, float]] = [
    (51.5, 52.5, 24.00, 0.10),   # Western UAE (Ruwais)
    (52.5, 53.5, 24.10, 0.15),   # Jebel Dhanna to western Abu Dhabi
    (53.5, 54.5, 24.25, 0.20),   # Abu Dhabi coast
    (54.5, 55.3, 24.45, 0.90),   # Abu Dhabi to Dubai
    (55.3, 56.0, 25.17, 0.40),   # Dubai to Northern Emirates
    (56.0, 56.5, 25.45, 0.00),   # East coast
]
UAE_LON_RANGE = (51.5, 56.5)
UAE_SOUTHERN_LIMIT = 22.5

# Iranian coast: land north of IRAN_COAST_LAT within the longitude band
IRAN_LON_RANGE = (51.0, 56.5)
IRAN_COAST_LAT = 26.8

SAMPLE_FRACTIONS = (0.25, 0.5, 0.75)


def uae_coast_lat(lon: float) -> Optional[float]:
    """Latitude of the modelled UAE coastline at lon, or None outside the UAE band."""
    lon_min, lon_max = UAE_LON_RANGE
    if not lon_min <= lon <= lon_max:
        return None
    for start, end, base_lat, slope in UAE_COASTLINE:
        if lon < end or end == lon_max:
            return base_lat + (lon - start) * slope
    return None


@lru_cache(maxsize=50_000)
def is_on_land(lat: float, lon: float) -> Optional[str]:
    """
    Classify a point as water (None) or a named landmass.

    Regions are evaluated in a fixed order and the first match wins;
    callers must not assume the regions are mutually exclusive.
    """
    for lat_min, lat_max, lon_min, lon_max, name in LAND_BOXES:
        if lon_min <= lon <= lon_max and lat_min <= lat <= lat_max:
            return name

    coast_lat = uae_coast_lat(lon)
    if coast_lat is not None and UAE_SOUTHERN_LIMIT < lat < coast_lat:
        return "UAE Mainland"

    if IRAN_LON_RANGE[0] <= lon <= IRAN_LON_RANGE[1] and lat >= IRAN_COAST_LAT:
        return "Iran Coast"

    return None


def is_ocean(lat: float, lon: float) -> bool:
    """True if the point is classified as navigable water."""
    return is_on_land(lat, lon) is None


def segment_crosses_land(
    lat1: float, lon1: float,
    lat2: float, lon2: float,
) -> LandCrossing:
    """
    Check whether the straight segment between two points crosses land.

    Samples the interior points at 25%, 50% and 75% and reports the first
    land hit. Endpoints are not sampled.
    """
    for t in SAMPLE_FRACTIONS:
        lat = lat1 + (lat2 - lat1) * t
        lon = lon1 + (lon2 - lon1) * t
        land_area = is_on_land(lat, lon)
        if land_area:
            return LandCrossing(crosses=True, land_area=land_area, cross_point=(lat, lon))

    return LandCrossing(crosses=False)


def is_path_clear(lat1: float, lon1: float, lat2: float, lon2: float) -> bool:
    """True if segment_crosses_land() finds no land on the segment."""
    return not segment_crosses_land(lat1, lon1, lat2, lon2).crosses


def get_land_mask_status() -> dict:
    """Describe the land mask in use."""
    return {
        "method": "piecewise coastline heuristic",
        "regions": [box[4] for box in LAND_BOXES] + ["UAE Mainland", "Iran Coast"],
        "sample_fractions": list(SAMPLE_FRACTIONS),
        "cache_size": is_on_land.cache_info().currsize,
    }
