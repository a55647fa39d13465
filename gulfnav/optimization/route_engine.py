"""
Route engine for the Persian Gulf, Gulf of Oman and Arabian Sea.

Computes a land-avoiding sea route between two coordinates. Strategies,
in priority order:

1. Short route (< short_route_threshold_nm): the direct segment if clear,
   otherwise one detour node taken from the middle of the network path.
2. In-region route (both ends inside the Gulf box): great-circle
   interpolation if the direct segment is clear, otherwise the shipping
   lane network.
3. Out-of-region route: the external provider with a land-correction
   pass, degrading to the network on any provider failure.

Route totals are always recomputed from the final waypoints. Identical
origin and destination give a single-waypoint route of length 0.
"""

import logging
import math
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from gulfnav.config import Settings, get_settings
from gulfnav.data.land_mask import LandCrossing, segment_crosses_land
from gulfnav.data.maritime_network import (
    GULF_REGION,
    MaritimeNetwork,
    NetworkNode,
    get_default_network,
)
from gulfnav.data.sea_route_client import SeaRouteClient, SeaRouteError
from gulfnav.data.vessel_profiles import VesselProfile, get_vessel_profile
from gulfnav.data.weather import (
    SyntheticWeatherProvider,
    WeatherPoint,
    assess_weather_risk,
    get_default_weather_provider,
    map_condition,
)
from gulfnav.metrics import metrics
from gulfnav.optimization.fuel_model import FuelModel
from gulfnav.optimization.weather_avoidance import AvoidanceResult, HazardZone, avoid_zones
from gulfnav.routes.geometry import (
    calculate_bearing,
    haversine_distance,
    interpolate_point,
    interpolation_fractions,
    normalize_turn,
    path_distance,
    relative_angle,
    validate_coordinates,
)
from gulfnav.routes.models import (
    Emissions,
    FuelCalculation,
    Route,
    RouteComparison,
    RouteSegment,
    RouteSource,
    SeaRoute,
    SeaRouteWaypoint,
    Waypoint,
    utc_now,
)

logger = logging.getLogger(__name__)

LandChecker = Callable[[float, float, float, float], LandCrossing]

# Origin/destination closer than this are the same point (nm)
DEGENERATE_DISTANCE_NM = 0.01

# Great-circle routes shorter than this are not subdivided (nm)
GREAT_CIRCLE_DIRECT_NM = 50.0

# Spacing rules when splicing points into a route (nm)
NETWORK_NODE_MIN_SPACING_NM = 2.0
LAND_CORRECTION_MIN_SPACING_NM = 3.0
DESTINATION_MERGE_NM = 1.0

# Course change that earns a turn note (degrees)
COURSE_CHANGE_NOTE_DEG = 30.0

# Waypoint thinning: keep turns above this or points farther than the spacing
THIN_TURN_DEG = 10.0
THIN_SPACING_NM = 5.0

# Weather adds up to this fraction of fuel at risk 100
WEATHER_FUEL_PENALTY = 0.3


# ---------------------------------------------------------------------------
# Segment metrics
# ---------------------------------------------------------------------------

def calculate_segment_fuel(
    distance_nm: float,
    profile: VesselProfile,
    weather_risk: float,
    fuel_rate_l_per_nm: Optional[float] = None,
) -> FuelCalculation:
    """
    Fuel for one segment at the profile's cruising speed.

    fuel = rate × distance × (1 + risk/100 × 0.3). Hourly figures are
    rate × speed, which stays defined for zero-length segments.
    """
    rate = profile.fuel_rate_l_per_nm if fuel_rate_l_per_nm is None else fuel_rate_l_per_nm
    weather_factor = 1 + (weather_risk / 100) * WEATHER_FUEL_PENALTY

    base_lph = rate * profile.cruising_speed_kn
    total_fuel = rate * distance_nm * weather_factor

    return FuelCalculation(
        base_consumption_lph=base_lph,
        adjusted_consumption_lph=base_lph * weather_factor,
        total_fuel_l=total_fuel,
        cost_per_liter=profile.fuel_cost_per_l,
        total_cost=total_fuel * profile.fuel_cost_per_l,
    )


def calculate_emissions(fuel_l: float, profile: VesselProfile) -> Emissions:
    """Exhaust emissions (kg) for a fuel volume."""
    factors = profile.emission_factors
    return Emissions(
        co2=fuel_l * factors.co2_per_l,
        nox=fuel_l * factors.nox_per_l,
        sox=fuel_l * factors.sox_per_l,
    )


def compare_routes(route_a: Route, route_b: Route) -> RouteComparison:
    """How route A differs from route B."""
    return RouteComparison(
        distance_diff_nm=route_a.total_distance_nm - route_b.total_distance_nm,
        time_diff_hrs=route_a.estimated_time_hrs - route_b.estimated_time_hrs,
        fuel_savings_l=route_b.fuel_consumption_l - route_a.fuel_consumption_l,
        emissions_savings_kg=route_b.emissions.co2 - route_a.emissions.co2,
    )


# ---------------------------------------------------------------------------
# Waypoint helpers
# ---------------------------------------------------------------------------

def thin_waypoints(waypoints: Sequence[SeaRouteWaypoint]) -> List[SeaRouteWaypoint]:
    """
    Drop redundant points from a dense route.

    First and last points are always kept; an interior point is kept if the
    course turns there by more than 10° or it lies more than 5 nm from the
    last kept point.
    """
    if len(waypoints) <= 3:
        return list(waypoints)

    kept = [waypoints[0]]
    for i in range(1, len(waypoints) - 1):
        prev = kept[-1]
        curr = waypoints[i]
        nxt = waypoints[i + 1]

        bearing_in = calculate_bearing(prev.lat, prev.lon, curr.lat, curr.lon)
        bearing_out = calculate_bearing(curr.lat, curr.lon, nxt.lat, nxt.lon)
        turn = relative_angle(bearing_in, bearing_out)
        spacing = haversine_distance(prev.lat, prev.lon, curr.lat, curr.lon)

        if turn > THIN_TURN_DEG or spacing > THIN_SPACING_NM:
            kept.append(curr)

    kept.append(waypoints[-1])
    return kept


def interpolate_waypoints(
    from_lat: float, from_lon: float,
    to_lat: float, to_lon: float,
    spacing_nm: float,
    note: Optional[str] = None,
) -> List[SeaRouteWaypoint]:
    """
    Straight-line fill between two points for waters the network does not cover.

    Returns both endpoints; intermediate points are named "Transit Point i".
    """
    distance = haversine_distance(from_lat, from_lon, to_lat, to_lon)
    if distance < spacing_nm:
        return [
            SeaRouteWaypoint(from_lat, from_lon),
            SeaRouteWaypoint(to_lat, to_lon, note=note),
        ]

    num_segments = math.ceil(distance / spacing_nm)
    waypoints = []
    for i, fraction in enumerate(interpolation_fractions(num_segments)):
        lat, lon = interpolate_point(from_lat, from_lon, to_lat, to_lon, fraction)
        waypoints.append(SeaRouteWaypoint(
            lat=lat,
            lon=lon,
            name=f"Transit Point {i}" if 0 < i < num_segments else None,
            note=note if i > 0 else None,
        ))
    return waypoints


def route_note(
    node: NetworkNode,
    prev_node: Optional[NetworkNode],
    next_node: Optional[NetworkNode],
) -> Optional[str]:
    """Advisory note for a network waypoint, from its name or the turn it makes."""
    if "Channel" in node.name:
        return "Navigate through protected channel"
    if "Offshore" in node.name:
        return "Enter offshore shipping lane"
    if "Approach" in node.name:
        return "Final approach to destination"
    if "Central Gulf" in node.name:
        return "Main shipping lane - deep water"

    if prev_node is not None and next_node is not None:
        bearing_in = calculate_bearing(prev_node.lat, prev_node.lon, node.lat, node.lon)
        bearing_out = calculate_bearing(node.lat, node.lon, next_node.lat, next_node.lon)
        turn = normalize_turn(bearing_in, bearing_out)
        if abs(turn) > COURSE_CHANGE_NOTE_DEG:
            return "Course change to starboard" if turn > 0 else "Course change to port"
    return None


def _same_position(a: SeaRouteWaypoint, b: SeaRouteWaypoint) -> bool:
    return a.lat == b.lat and a.lon == b.lon


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class RouteEngine:
    """
    Computes sea routes and turns them into priced voyage plans.

    The engine holds no per-request state: the network is shared read-only
    and every call builds its own waypoint lists, so one instance can serve
    concurrent callers.
    """

    def __init__(
        self,
        network: Optional[MaritimeNetwork] = None,
        settings: Optional[Settings] = None,
        sea_route_client: Optional[SeaRouteClient] = None,
        weather_provider: Optional[SyntheticWeatherProvider] = None,
        land_checker: Optional[LandChecker] = None,
    ):
        """
        Initialize route engine.

        Args:
            network: Shipping-lane graph (shared default if None)
            settings: Engine settings (global settings if None)
            sea_route_client: External provider client; built from settings
                when the provider is configured
            weather_provider: Source of weather samples (synthetic if None)
            land_checker: Segment land test (the coastline heuristic if None)
        """
        self.network = network or get_default_network()
        self.settings = settings or get_settings()
        self.weather = weather_provider or get_default_weather_provider()
        self.land_checker = land_checker or segment_crosses_land

        if sea_route_client is None and self.settings.sea_route_configured:
            sea_route_client = SeaRouteClient(self.settings)
        self.sea_route_client = sea_route_client

    # -- routing --------------------------------------------------------------

    def compute_route(self, from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> SeaRoute:
        """
        Compute a land-avoiding route between two coordinates.

        Raises:
            InvalidCoordinateError: if either endpoint is not a valid position
        """
        validate_coordinates(from_lat, from_lon)
        validate_coordinates(to_lat, to_lon)

        with metrics.timer("route_engine.compute_route"):
            route = self._compute_route(from_lat, from_lon, to_lat, to_lon)

        metrics.increment(f"route_engine.strategy.{route.source.value}")
        logger.info(
            f"Route computed: {len(route.waypoints)} waypoints, "
            f"{route.total_distance_nm:.1f} nm, source={route.source.value}"
        )
        return route

    def _compute_route(self, from_lat, from_lon, to_lat, to_lon) -> SeaRoute:
        direct = haversine_distance(from_lat, from_lon, to_lat, to_lon)

        if direct < DEGENERATE_DISTANCE_NM:
            logger.info("Origin and destination coincide, returning zero-length route")
            return SeaRoute([SeaRouteWaypoint(from_lat, from_lon)], 0.0, RouteSource.NETWORK)

        if direct < self.settings.short_route_threshold_nm:
            logger.info(f"Short route detected ({direct:.1f} nm), using simplified routing")
            return self._finish(self._short_route(from_lat, from_lon, to_lat, to_lon), RouteSource.NETWORK)

        if GULF_REGION.contains(from_lat, from_lon) and GULF_REGION.contains(to_lat, to_lon):
            crossing = self.land_checker(from_lat, from_lon, to_lat, to_lon)
            if not crossing.crosses:
                logger.info("Direct path is clear, using great circle route")
                waypoints = self.great_circle_route(from_lat, from_lon, to_lat, to_lon)
            else:
                logger.info(f"Direct path crosses {crossing.land_area}, using maritime network")
                waypoints = self.network_route(from_lat, from_lon, to_lat, to_lon)
            return self._finish(waypoints, RouteSource.NETWORK)

        provider_route = self._provider_route(from_lat, from_lon, to_lat, to_lon)
        if provider_route is not None:
            return provider_route

        logger.info("Using maritime network fallback")
        return self._finish(self.network_route(from_lat, from_lon, to_lat, to_lon), RouteSource.NETWORK)

    def _finish(self, waypoints: List[SeaRouteWaypoint], source: RouteSource) -> SeaRoute:
        return SeaRoute(waypoints=waypoints, total_distance_nm=path_distance(waypoints), source=source)

    def _short_route(self, from_lat, from_lon, to_lat, to_lon) -> List[SeaRouteWaypoint]:
        direct = [SeaRouteWaypoint(from_lat, from_lon), SeaRouteWaypoint(to_lat, to_lon)]

        crossing = self.land_checker(from_lat, from_lon, to_lat, to_lon)
        if not crossing.crosses:
            return direct

        logger.info(f"Direct path crosses {crossing.land_area}, finding minimal detour")
        start = self.network.nearest_node(from_lat, from_lon).node
        end = self.network.nearest_node(to_lat, to_lon).node

        if start.id != end.id:
            path = self.network.shortest_path(start.id, end.id)
            if path:
                mid = path[len(path) // 2]
                return [
                    SeaRouteWaypoint(from_lat, from_lon),
                    SeaRouteWaypoint(mid.lat, mid.lon, name=mid.name, note="Avoiding land"),
                    SeaRouteWaypoint(to_lat, to_lon),
                ]

        logger.warning("No network detour found for short route, using direct path")
        return direct

    def _provider_route(self, from_lat, from_lon, to_lat, to_lon) -> Optional[SeaRoute]:
        client = self.sea_route_client
        if client is None or not client.available:
            return None

        try:
            provider = client.get_sea_route_by_coordinates(from_lat, from_lon, to_lat, to_lon)
        except SeaRouteError as e:
            metrics.increment("sea_route.api_errors")
            logger.warning(f"Sea route provider failed, falling back to network: {e}")
            return None

        metrics.increment("sea_route.api_success")
        if not provider.waypoints:
            logger.warning("Sea route provider returned no waypoints")
            return None

        thinned = thin_waypoints(provider.waypoints)
        corrected, was_corrected = self.correct_land_crossings(thinned)
        route = self._finish(corrected, RouteSource.HYBRID if was_corrected else RouteSource.API)

        logger.info(
            f"Provider route processed: {len(provider.waypoints)} points, "
            f"{len(corrected)} after correction, provider distance {provider.distance_nm:.1f} nm, "
            f"recomputed {route.total_distance_nm:.1f} nm"
        )
        return route

    def correct_land_crossings(
        self, waypoints: Sequence[SeaRouteWaypoint]
    ) -> Tuple[List[SeaRouteWaypoint], bool]:
        """
        Splice network detours into any segment that crosses land.

        Returns the corrected waypoints and whether any detour was inserted.
        Detour nodes within 3 nm of the last accumulated point are skipped.
        """
        if len(waypoints) < 2:
            return list(waypoints), False

        corrected = [waypoints[0]]
        inserted = False

        for current, nxt in zip(waypoints, waypoints[1:]):
            crossing = self.land_checker(current.lat, current.lon, nxt.lat, nxt.lon)

            if crossing.crosses:
                logger.info(f"Segment crosses {crossing.land_area}, inserting network waypoints")
                start = self.network.nearest_node(current.lat, current.lon).node
                end = self.network.nearest_node(nxt.lat, nxt.lon).node

                if start.id != end.id:
                    for node in self.network.shortest_path(start.id, end.id):
                        last = corrected[-1]
                        if haversine_distance(last.lat, last.lon, node.lat, node.lon) > LAND_CORRECTION_MIN_SPACING_NM:
                            corrected.append(SeaRouteWaypoint(node.lat, node.lon, name=node.name))
                            inserted = True

            last = corrected[-1]
            if haversine_distance(last.lat, last.lon, nxt.lat, nxt.lon) > DESTINATION_MERGE_NM:
                corrected.append(nxt)

        if not _same_position(corrected[-1], waypoints[-1]):
            corrected.append(waypoints[-1])

        return corrected, inserted

    def avoid_weather_zones(
        self, sea_route: SeaRoute, zones: Sequence[HazardZone]
    ) -> Tuple[SeaRoute, AvoidanceResult]:
        """
        Divert a computed route around weather hazard zones.

        The route keeps its source; its distance is recomputed from the
        diverted waypoints. Diversions that would cross land are skipped.
        """
        avoidance = avoid_zones(sea_route.waypoints, zones, self.land_checker)
        if not avoidance.applied:
            return sea_route, avoidance

        metrics.increment("route_engine.weather_diversions", len(avoidance.deviations))
        return self._finish(avoidance.waypoints, sea_route.source), avoidance

    def great_circle_route(self, from_lat, from_lon, to_lat, to_lon) -> List[SeaRouteWaypoint]:
        """Direct route, subdivided every great_circle_spacing_nm when ≥ 50 nm."""
        distance = haversine_distance(from_lat, from_lon, to_lat, to_lon)
        if distance < GREAT_CIRCLE_DIRECT_NM:
            return [SeaRouteWaypoint(from_lat, from_lon), SeaRouteWaypoint(to_lat, to_lon)]

        num_segments = math.ceil(distance / self.settings.great_circle_spacing_nm)
        waypoints = []
        for i, fraction in enumerate(interpolation_fractions(num_segments)):
            lat, lon = interpolate_point(from_lat, from_lon, to_lat, to_lon, fraction)
            interior = 0 < i < num_segments
            waypoints.append(SeaRouteWaypoint(
                lat=lat,
                lon=lon,
                name=f"Waypoint {i}" if interior else None,
                note="Open water transit" if interior else None,
            ))

        logger.debug(f"Great circle route: {distance:.1f} nm, {len(waypoints)} waypoints")
        return waypoints

    def network_route(self, from_lat, from_lon, to_lat, to_lon) -> List[SeaRouteWaypoint]:
        """
        Route through the shipping-lane network.

        Ends farther than max_network_snap_nm from any node are joined to
        the network by straight-line interpolation; if both ends are that
        far out the great-circle route is used instead.
        """
        start_hit = self.network.nearest_node(from_lat, from_lon)
        end_hit = self.network.nearest_node(to_lat, to_lon)
        start, end = start_hit.node, end_hit.node

        logger.info(
            f"Using maritime network: {start.name} -> {end.name} "
            f"(snap {start_hit.distance_nm:.1f} nm / {end_hit.distance_nm:.1f} nm)"
        )

        snap_limit = self.settings.max_network_snap_nm
        spacing = self.settings.interpolation_spacing_nm
        start_outside = start_hit.distance_nm > snap_limit
        end_outside = end_hit.distance_nm > snap_limit

        if start_outside and end_outside:
            logger.info("Both points outside network coverage, using great circle route")
            return self.great_circle_route(from_lat, from_lon, to_lat, to_lon)

        waypoints = [SeaRouteWaypoint(from_lat, from_lon)]

        if start_outside:
            logger.info("Origin outside coverage, adding approach waypoints")
            waypoints.extend(interpolate_waypoints(
                from_lat, from_lon, start.lat, start.lon, spacing, "Approach to shipping lanes"
            )[1:])

        if start.id != end.id:
            path = self.network.shortest_path(start.id, end.id)
            for i, node in enumerate(path):
                last = waypoints[-1]
                if haversine_distance(last.lat, last.lon, node.lat, node.lon) <= NETWORK_NODE_MIN_SPACING_NM:
                    continue
                prev_node = path[i - 1] if i > 0 else None
                next_node = path[i + 1] if i < len(path) - 1 else None
                waypoints.append(SeaRouteWaypoint(
                    node.lat, node.lon, name=node.name, note=route_note(node, prev_node, next_node)
                ))
        elif haversine_distance(from_lat, from_lon, start.lat, start.lon) > NETWORK_NODE_MIN_SPACING_NM:
            waypoints.append(SeaRouteWaypoint(start.lat, start.lon, name=start.name))

        if end_outside:
            logger.info("Destination outside coverage, adding departure waypoints")
            last = waypoints[-1]
            waypoints.extend(interpolate_waypoints(
                last.lat, last.lon, to_lat, to_lon, spacing, "Open water transit"
            )[1:])
        else:
            last = waypoints[-1]
            destination = SeaRouteWaypoint(to_lat, to_lon)
            if haversine_distance(last.lat, last.lon, to_lat, to_lon) > DESTINATION_MERGE_NM:
                waypoints.append(destination)
            elif len(waypoints) > 1:
                waypoints[-1] = destination
            else:
                waypoints.append(destination)

        return waypoints

    # -- route generation -----------------------------------------------------

    def generate_route(
        self,
        vessel_id: str,
        vessel_name: str,
        vessel_type: str,
        origin,
        destination,
        speed_kn: Optional[float] = None,
        route_id: Optional[str] = None,
        route_name: Optional[str] = None,
    ) -> Route:
        """
        Compute a route and price it for a vessel.

        Args:
            origin, destination: objects with ``lat``, ``lon`` and optional ``name``
            speed_kn: Override of the profile's cruising speed, clamped to
                [min_speed_kn, max_speed_kn]; fuel per nm then follows the
                cubic speed law

        Returns:
            Route in ``planned`` status
        """
        sea_route = self.compute_route(origin.lat, origin.lon, destination.lat, destination.lon)
        return self.route_from_sea_route(
            sea_route, vessel_id, vessel_name, vessel_type, origin, destination,
            speed_kn=speed_kn, route_id=route_id, route_name=route_name,
        )

    def route_from_sea_route(
        self,
        sea_route: SeaRoute,
        vessel_id: str,
        vessel_name: str,
        vessel_type: str,
        origin,
        destination,
        speed_kn: Optional[float] = None,
        route_id: Optional[str] = None,
        route_name: Optional[str] = None,
    ) -> Route:
        """Price an already computed SeaRoute (see generate_route)."""
        base_profile = get_vessel_profile(vessel_type)
        profile = base_profile
        fuel_rate = base_profile.fuel_rate_l_per_nm
        if speed_kn:
            speed_kn = FuelModel.from_profile(base_profile).clamp(speed_kn)
            profile = base_profile.with_speed(speed_kn)
            fuel_rate = FuelModel.from_profile(base_profile).fuel_rate_at_speed(speed_kn)

        origin_name = getattr(origin, "name", None) or "Origin"
        destination_name = getattr(destination, "name", None) or "Destination"
        waypoints = self._to_waypoints(sea_route.waypoints, origin_name, destination_name)
        segments = self._build_segments(waypoints, profile, fuel_rate)

        total_fuel = sum(s.fuel_consumption_l for s in segments)
        total_time = sum(s.estimated_time_hrs for s in segments)
        mean_risk = sum(s.weather_risk for s in segments) / len(segments) if segments else 0.0

        if len(waypoints) == 1:
            route_origin = route_destination = waypoints[0]
        else:
            route_origin, route_destination = waypoints[0], waypoints[-1]

        return Route(
            id=route_id or f"route-{uuid.uuid4().hex[:12]}",
            name=route_name or f"{origin_name} to {destination_name}",
            vessel_id=vessel_id,
            vessel_name=vessel_name,
            vessel_type=base_profile.type,
            origin=route_origin,
            destination=route_destination,
            waypoints=waypoints[1:-1],
            segments=segments,
            total_distance_nm=sea_route.total_distance_nm,
            estimated_time_hrs=total_time,
            fuel_consumption_l=total_fuel,
            emissions=calculate_emissions(total_fuel, profile),
            average_speed_kn=profile.cruising_speed_kn,
            weather_risk=mean_risk,
            cost=total_fuel * profile.fuel_cost_per_l,
            source=sea_route.source,
        )

    def _to_waypoints(
        self,
        sea_waypoints: Sequence[SeaRouteWaypoint],
        origin_name: str,
        destination_name: str,
    ) -> List[Waypoint]:
        last = len(sea_waypoints) - 1
        waypoints = []
        for i, wp in enumerate(sea_waypoints):
            if i == 0:
                name, wp_type = origin_name, "origin"
            elif i == last:
                name, wp_type = destination_name, "destination"
            else:
                name, wp_type = wp.name or f"Waypoint {i + 1}", "waypoint"
            waypoints.append(Waypoint(id=f"wp-{i}", name=name, lat=wp.lat, lon=wp.lon, type=wp_type))
        return waypoints

    def _build_segments(
        self,
        waypoints: List[Waypoint],
        profile: VesselProfile,
        fuel_rate_l_per_nm: float,
    ) -> List[RouteSegment]:
        segments = []
        for from_wp, to_wp in zip(waypoints, waypoints[1:]):
            distance = haversine_distance(from_wp.lat, from_wp.lon, to_wp.lat, to_wp.lon)
            risk = self.segment_weather_risk(from_wp, to_wp)
            fuel = calculate_segment_fuel(distance, profile, risk, fuel_rate_l_per_nm)

            segments.append(RouteSegment(
                from_wp=from_wp,
                to_wp=to_wp,
                distance_nm=distance,
                bearing_deg=calculate_bearing(from_wp.lat, from_wp.lon, to_wp.lat, to_wp.lon),
                estimated_time_hrs=distance / profile.cruising_speed_kn,
                fuel_consumption_l=fuel.total_fuel_l,
                weather_risk=risk,
            ))
        return segments

    def segment_weather_risk(self, from_wp, to_wp) -> float:
        """Weather risk (0-100) sampled at the segment midpoint."""
        mid_lat = (from_wp.lat + to_wp.lat) / 2
        mid_lon = (from_wp.lon + to_wp.lon) / 2
        return assess_weather_risk(self.weather.get_weather(mid_lat, mid_lon))

    def route_weather_forecast(
        self,
        waypoints: Iterable,
        departure_time: Optional[datetime] = None,
    ) -> List[WeatherPoint]:
        """Weather at each waypoint, assuming one hour between consecutive points."""
        departure_time = departure_time or utc_now()
        forecast = []
        for i, wp in enumerate(waypoints):
            weather = self.weather.get_weather(wp.lat, wp.lon)
            forecast.append(WeatherPoint(
                lat=wp.lat,
                lon=wp.lon,
                time=departure_time + timedelta(hours=i),
                wind_speed_kn=weather.wind_speed_kn,
                wind_direction_deg=weather.wind_direction_deg,
                wave_height_m=weather.wave_height_m,
                visibility_nm=weather.visibility_nm,
                condition=map_condition(weather.condition),
                risk_level=weather.operational_risk,
            ))
        return forecast

    def generate_alternative_routes(
        self,
        vessel_id: str,
        vessel_name: str,
        vessel_type: str,
        origin,
        destination,
    ) -> Dict[str, Route]:
        """
        Same geometry priced at three speeds.

        fastest = max speed, economical = 70 % of cruising, balanced = cruising.
        """
        profile = get_vessel_profile(vessel_type)
        sea_route = self.compute_route(origin.lat, origin.lon, destination.lat, destination.lon)

        def _priced(speed_kn: Optional[float], name: str) -> Route:
            return self.route_from_sea_route(
                sea_route, vessel_id, vessel_name, vessel_type, origin, destination,
                speed_kn=speed_kn, route_name=name,
            )

        return {
            "fastest": _priced(profile.max_speed_kn, "Fastest Route"),
            "economical": _priced(profile.cruising_speed_kn * 0.7, "Most Economical Route"),
            "balanced": _priced(None, "Balanced Route"),
        }


_default_engine: Optional[RouteEngine] = None


def get_default_engine() -> RouteEngine:
    """Shared engine built from the global settings on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = RouteEngine()
    return _default_engine


def compute_route(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> SeaRoute:
    """Compute a route with the shared default engine."""
    return get_default_engine().compute_route(from_lat, from_lon, to_lat, to_lon)
