"""
Weather hazard zone avoidance.

A hazard zone (storm cell, shamal wind, fog bank, high seas, sandstorm)
is a circle of radius_nm around a centre. A route leg that passes through
an active zone gets one extra waypoint abeam the zone, 1.25 radii from its
centre on the side of the track away from the centre. Zones whose
avoidance is OPTIONAL never alter a route.

Interior waypoints that lie inside an active zone are dropped before the
legs are checked, so a zone is passed once rather than once per leg.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from gulfnav.data.land_mask import LandCrossing
from gulfnav.routes.geometry import (
    calculate_bearing,
    destination_point,
    haversine_distance,
    interpolation_fractions,
)
from gulfnav.routes.models import SeaRouteWaypoint

logger = logging.getLogger(__name__)

# Avoidance waypoint distance from the zone centre, in zone radii
ZONE_BUFFER = 1.25

# A leg is sampled at this many equal steps when testing a zone
ZONE_SAMPLE_SEGMENTS = 10


class ZoneType(str, Enum):
    STORM = "storm"
    HIGH_WIND = "high_wind"
    FOG = "fog"
    HIGH_SEAS = "high_seas"
    SANDSTORM = "sandstorm"


class ZoneSeverity(str, Enum):
    SEVERE = "severe"
    MODERATE = "moderate"
    ADVISORY = "advisory"


class AvoidanceLevel(str, Enum):
    MANDATORY = "mandatory"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class HazardZone:
    """A circular weather hazard."""
    id: str
    type: ZoneType
    severity: ZoneSeverity
    center_lat: float
    center_lon: float
    radius_nm: float
    avoidance: AvoidanceLevel = AvoidanceLevel.RECOMMENDED
    name: Optional[str] = None
    wind_speed_kn: Optional[float] = None
    wave_height_m: Optional[float] = None

    @property
    def label(self) -> str:
        return self.name or self.type.value.replace("_", " ")

    @property
    def active(self) -> bool:
        """True if routes must be diverted around this zone."""
        return self.avoidance != AvoidanceLevel.OPTIONAL

    def contains(self, lat: float, lon: float) -> bool:
        return haversine_distance(lat, lon, self.center_lat, self.center_lon) <= self.radius_nm


@dataclass
class ZoneDeviation:
    """One avoidance waypoint and the distance it adds."""
    zone: HazardZone
    waypoint: SeaRouteWaypoint
    extra_distance_nm: float


@dataclass
class AvoidanceResult:
    waypoints: List[SeaRouteWaypoint]
    deviations: List[ZoneDeviation] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return bool(self.deviations)

    @property
    def deviation_distance_nm(self) -> float:
        return sum(d.extra_distance_nm for d in self.deviations)

    @property
    def avoided_zones(self) -> List[HazardZone]:
        """Avoided zones in route order, each listed once."""
        zones: List[HazardZone] = []
        for d in self.deviations:
            if d.zone not in zones:
                zones.append(d.zone)
        return zones

    @property
    def safety_improvement(self) -> str:
        """significant | moderate | minor | none, from the worst zone avoided."""
        severities = {z.severity for z in self.avoided_zones}
        if ZoneSeverity.SEVERE in severities:
            return "significant"
        if ZoneSeverity.MODERATE in severities:
            return "moderate"
        return "minor" if severities else "none"


def segment_intersects_zone(
    lat1: float, lon1: float,
    lat2: float, lon2: float,
    zone: HazardZone,
) -> bool:
    """
    True if the leg touches the zone.

    Either endpoint inside counts; otherwise the interior is sampled at
    ZONE_SAMPLE_SEGMENTS - 1 points along the initial bearing.
    """
    if zone.contains(lat1, lon1) or zone.contains(lat2, lon2):
        return True

    distance = haversine_distance(lat1, lon1, lat2, lon2)
    bearing = calculate_bearing(lat1, lon1, lat2, lon2)
    for fraction in interpolation_fractions(ZONE_SAMPLE_SEGMENTS)[1:-1]:
        lat, lon = destination_point(lat1, lon1, distance * fraction, bearing)
        if zone.contains(lat, lon):
            return True
    return False


def avoidance_point(
    from_lat: float, from_lon: float,
    to_lat: float, to_lon: float,
    zone: HazardZone,
) -> Tuple[float, float]:
    """Point abeam the zone centre, ZONE_BUFFER radii out, away from the track."""
    direct = calculate_bearing(from_lat, from_lon, to_lat, to_lon)
    to_zone = calculate_bearing(from_lat, from_lon, zone.center_lat, zone.center_lon)

    zone_on_starboard = 0 < (to_zone - direct + 360) % 360 < 180
    offset = direct - 90 if zone_on_starboard else direct + 90

    return destination_point(
        zone.center_lat, zone.center_lon, zone.radius_nm * ZONE_BUFFER, (offset + 360) % 360
    )


def avoid_zones(
    waypoints: Sequence[SeaRouteWaypoint],
    zones: Sequence[HazardZone],
    land_checker: Optional[Callable[[float, float, float, float], LandCrossing]] = None,
) -> AvoidanceResult:
    """
    Divert a waypoint sequence around the active zones.

    Zones crossed by a leg are handled nearest-first from the leg start;
    after each diversion the remaining leg is re-tested from the new
    waypoint. With a land_checker, a diversion whose legs would cross land
    is skipped and the zone is left on the route.
    """
    active = [z for z in zones if z.active]
    if len(waypoints) < 2 or not active:
        return AvoidanceResult(list(waypoints))

    points = _drop_points_inside(waypoints, active, land_checker)
    result = [points[0]]
    deviations: List[ZoneDeviation] = []

    for leg_start, leg_end in zip(points, points[1:]):
        hits = [
            z for z in active
            if segment_intersects_zone(leg_start.lat, leg_start.lon, leg_end.lat, leg_end.lon, z)
        ]
        hits.sort(key=lambda z: haversine_distance(leg_start.lat, leg_start.lon, z.center_lat, z.center_lon))

        current = leg_start
        for zone in hits:
            if not segment_intersects_zone(current.lat, current.lon, leg_end.lat, leg_end.lon, zone):
                continue

            lat, lon = avoidance_point(current.lat, current.lon, leg_end.lat, leg_end.lon, zone)
            if land_checker is not None and (
                land_checker(current.lat, current.lon, lat, lon).crosses
                or land_checker(lat, lon, leg_end.lat, leg_end.lon).crosses
            ):
                logger.warning(f"Diversion around {zone.label} crosses land, zone left on route")
                continue

            waypoint = SeaRouteWaypoint(
                lat, lon,
                name=f"Avoid {zone.label}",
                note=f"Routing around {zone.type.value}: {zone.severity.value} severity",
            )
            extra = (
                haversine_distance(current.lat, current.lon, lat, lon)
                + haversine_distance(lat, lon, leg_end.lat, leg_end.lon)
                - haversine_distance(current.lat, current.lon, leg_end.lat, leg_end.lon)
            )
            deviations.append(ZoneDeviation(zone=zone, waypoint=waypoint, extra_distance_nm=extra))
            result.append(waypoint)
            current = waypoint

        result.append(leg_end)

    if deviations:
        logger.info(
            f"Diverted around {len(deviations)} weather zone(s), "
            f"+{sum(d.extra_distance_nm for d in deviations):.1f} nm"
        )
    return AvoidanceResult(result, deviations)


def _drop_points_inside(waypoints, zones, land_checker) -> List[SeaRouteWaypoint]:
    kept = [waypoints[0]]
    for i in range(1, len(waypoints) - 1):
        wp = waypoints[i]
        if any(z.contains(wp.lat, wp.lon) for z in zones):
            prev, nxt = kept[-1], waypoints[i + 1]
            if land_checker is None or not land_checker(prev.lat, prev.lon, nxt.lat, nxt.lon).crosses:
                continue
        kept.append(wp)
    kept.append(waypoints[-1])
    return kept
