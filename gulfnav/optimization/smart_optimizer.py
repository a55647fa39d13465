"""
Smart per-segment speed optimization.

Takes an already priced Route and recommends a cruising speed for every
segment from the vessel's fuel model, the sea state at the segment
midpoint, the fuel/time priorities and an optional arrival window. The
re-priced route comes back with metrics, timing analysis (arrival window,
virtual arrival), a weather-routing summary, advisory recommendations and
two alternatives on the same geometry.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from gulfnav.data.vessel_profiles import VesselProfile, get_vessel_profile
from gulfnav.data.weather import EnvironmentalConditions, SyntheticWeatherProvider
from gulfnav.metrics import metrics
from gulfnav.optimization.fuel_model import (
    ArrivalWindow,
    FuelModel,
    SpeedRecommendation,
    VirtualArrivalResult,
    calculate_virtual_arrival,
    clamp_priority,
    current_effect,
    optimize_for_arrival_window,
    wave_resistance,
    wind_effect,
)
from gulfnav.optimization.route_engine import RouteEngine, calculate_emissions, get_default_engine
from gulfnav.optimization.weather_avoidance import AvoidanceResult, HazardZone, ZoneSeverity
from gulfnav.routes.models import Emissions, Route, RouteSegment, SeaRoute, SeaRouteWaypoint, utc_now

logger = logging.getLogger(__name__)

# Speed-selection rules, as fractions of cruising speed
ECONOMICAL_CRUISE_FRACTION = 0.85
HEAVY_SEA_FRACTION = 0.8
HEAVY_SEA_WAVE_M = 2.5
SCHEDULE_MARGIN = 1.05
HIGH_PRIORITY = 70.0
SLOW_STEAM_FACTOR = 0.9
HURRY_FACTOR = 1.1

# Alternatives
ECONOMICAL_ALTERNATIVE_FRACTION = 0.65

# Recommendation thresholds
SLOW_STEAMING_HINT_FRACTION = 0.8
WEATHER_ADVISORY_RISK = 50.0
CURRENT_HINT_KN = 0.5

# Effective speed never drops below this when a current opposes the vessel (kn)
MIN_EFFECTIVE_SPEED_KN = 0.5


@dataclass
class Priorities:
    """Optimization priorities, each clamped to [0, 100]."""
    fuel: float = 50.0
    time: float = 50.0
    emissions: float = 50.0
    cost: float = 50.0
    safety: float = 50.0
    comfort: float = 50.0

    def __post_init__(self):
        for name in ("fuel", "time", "emissions", "cost", "safety", "comfort"):
            setattr(self, name, clamp_priority(getattr(self, name)))

    @classmethod
    def coerce(cls, value: Union["Priorities", Mapping, None]) -> "Priorities":
        """Accept a Priorities, a mapping, a pydantic model or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if hasattr(value, "model_dump"):
            value = value.model_dump()
        known = {k: v for k, v in dict(value).items() if k in cls.__dataclass_fields__ and v is not None}
        return cls(**known)


@dataclass
class PortConditions:
    """Berth situation at the destination port."""
    berth_available: bool = True
    expected_berth_time: Optional[datetime] = None
    congestion_level: str = "low"  # low | medium | high


@dataclass
class SpeedProfile:
    """Recommended speed for one segment."""
    segment_index: int
    recommended_speed_kn: float
    min_speed_kn: float
    max_speed_kn: float
    reason: str
    fuel_rate_l_per_nm: float
    adjusted_fuel_rate_l_per_nm: float  # with wave resistance


@dataclass
class OptimizationMetrics:
    total_fuel_l: float
    fuel_saved_l: float
    total_emissions: Emissions
    emissions_saved: Emissions
    estimated_cost: float
    cost_saved: float
    weather_risk_score: float
    comfort_score: float


@dataclass
class TimingAnalysis:
    departure_time: datetime
    estimated_arrival: datetime
    within_window: bool
    slack_time_hrs: float
    virtual_arrival_recommended: bool
    virtual_arrival: Optional[VirtualArrivalResult] = None
    window_recommendation: Optional[SpeedRecommendation] = None


@dataclass
class WeatherRoutingSummary:
    """Environmental influence on the optimized route (per-segment means)."""
    current_assist_kn: float
    wind_effect_kn: float
    mean_wave_height_m: float
    deviation_applied: bool = False
    deviation_distance_nm: float = 0.0
    weather_avoided: List[str] = field(default_factory=list)  # zone labels
    safety_improvement: str = "none"  # significant | moderate | minor | none


@dataclass
class Recommendation:
    type: str  # speed | timing | safety | route
    priority: str  # high | medium | low
    title: str
    description: str
    fuel_savings_l: Optional[float] = None
    cost_savings: Optional[float] = None


@dataclass
class Alternative:
    """Same geometry at another speed, relative to the optimized route."""
    name: str
    description: str
    route: Route
    fuel_diff_l: float
    time_diff_hrs: float
    cost_diff: float
    risk_diff: float


@dataclass
class SmartOptimizationResult:
    recommended_route: Route
    speed_profile: List[SpeedProfile]
    metrics: OptimizationMetrics
    timing: TimingAnalysis
    weather_routing: WeatherRoutingSummary
    recommendations: List[Recommendation]
    alternatives: List[Alternative]


def optimize_segment_speed(
    segment_index: int,
    segment: RouteSegment,
    model: FuelModel,
    conditions: EnvironmentalConditions,
    priorities: Priorities,
    available_time_hrs: Optional[float] = None,
) -> SpeedProfile:
    """
    Pick a speed for one segment.

    Rules are applied in order: economical default at 85 % of cruising,
    speed-up when the time budget requires it, cap at 80 % of cruising in
    waves above 2.5 m, then the fuel or time priority multiplier, and a
    final clamp to the vessel envelope.
    """
    speed = model.base_speed_kn * ECONOMICAL_CRUISE_FRACTION
    reason = "Economical cruising"

    if available_time_hrs is not None:
        required = segment.distance_nm / available_time_hrs if available_time_hrs > 0 else float('inf')
        if required > speed:
            speed = min(required * SCHEDULE_MARGIN, model.max_speed_kn)
            reason = "Speed increased for schedule"

    if conditions.wave_height_m > HEAVY_SEA_WAVE_M:
        speed = min(speed, model.base_speed_kn * HEAVY_SEA_FRACTION)
        reason = "Speed reduced for sea conditions"

    if priorities.fuel > HIGH_PRIORITY:
        speed *= SLOW_STEAM_FACTOR
        reason = "Slow steaming for fuel efficiency"
    elif priorities.time > HIGH_PRIORITY:
        speed *= HURRY_FACTOR
        reason = "Increased speed for time priority"

    speed = model.clamp(speed)
    fuel_rate = model.fuel_rate_at_speed(speed)
    resistance = wave_resistance(conditions.wave_height_m, segment.bearing_deg, conditions.wave_direction_deg)

    return SpeedProfile(
        segment_index=segment_index,
        recommended_speed_kn=speed,
        min_speed_kn=model.min_speed_kn,
        max_speed_kn=model.max_speed_kn,
        reason=reason,
        fuel_rate_l_per_nm=fuel_rate,
        adjusted_fuel_rate_l_per_nm=fuel_rate * resistance,
    )


def _hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def _as_sea_route(route: Route) -> SeaRoute:
    return SeaRoute(
        waypoints=[SeaRouteWaypoint(wp.lat, wp.lon, name=wp.name) for wp in route.all_waypoints],
        total_distance_nm=route.total_distance_nm,
        source=route.source,
    )


class SmartSegmentOptimizer:
    """Per-segment speed optimization for a priced route."""

    def __init__(
        self,
        engine: Optional[RouteEngine] = None,
        weather_provider: Optional[SyntheticWeatherProvider] = None,
    ):
        self.engine = engine or get_default_engine()
        self.weather = weather_provider or self.engine.weather

    def optimize_speeds(
        self,
        base_route: Route,
        vessel_type: Optional[str] = None,
        priorities: Union[Priorities, Mapping, None] = None,
        arrival_window: Optional[ArrivalWindow] = None,
        port_conditions: Optional[PortConditions] = None,
        departure_time: Optional[datetime] = None,
        weather_zones: Optional[Sequence[HazardZone]] = None,
    ) -> SmartOptimizationResult:
        """
        Recommend speeds per segment and re-price the route.

        Args:
            base_route: Route priced at cruising speed (from RouteEngine)
            vessel_type: Profile to use; defaults to the route's vessel type
            priorities: Fuel/time/... weights in [0, 100]; out-of-range values are clamped
            arrival_window: Optional earliest/latest arrival constraint
            port_conditions: Optional berth information for virtual arrival
            departure_time: Defaults to now (UTC)
            weather_zones: Hazard zones to divert around before speeds are
                chosen; savings are still measured against base_route
        """
        with metrics.timer("smart_optimizer.optimize_speeds"):
            return self._optimize(
                base_route,
                vessel_type or base_route.vessel_type,
                Priorities.coerce(priorities),
                arrival_window,
                port_conditions,
                departure_time or utc_now(),
                weather_zones or [],
            )

    def _divert(self, base_route: Route, zones: Sequence[HazardZone]) -> Tuple[Route, Optional[AvoidanceResult]]:
        if not zones or len(base_route.all_waypoints) < 2:
            return base_route, None

        sea_route, avoidance = self.engine.avoid_weather_zones(_as_sea_route(base_route), zones)
        if not avoidance.applied:
            return base_route, avoidance

        diverted = self.engine.route_from_sea_route(
            sea_route,
            base_route.vessel_id,
            base_route.vessel_name,
            base_route.vessel_type,
            base_route.origin,
            base_route.destination,
            speed_kn=base_route.average_speed_kn,
            route_id=base_route.id,
            route_name=base_route.name,
        )
        return replace(diverted, created_at=base_route.created_at, status=base_route.status), avoidance

    def _optimize(self, base_route, vessel_type, priorities, window, port, departure,
                  zones) -> SmartOptimizationResult:
        profile = get_vessel_profile(vessel_type)
        model = FuelModel.from_profile(profile)
        route, avoidance = self._divert(base_route, zones)
        segments = route.segments
        total_distance = sum(s.distance_nm for s in segments)

        total_available = _hours(departure, window.latest) if window is not None else None

        speed_profile: List[SpeedProfile] = []
        optimized_segments: List[RouteSegment] = []
        total_time = total_fuel = 0.0
        total_current = total_wind = total_wave = 0.0

        for i, segment in enumerate(segments):
            mid_lat = (segment.from_wp.lat + segment.to_wp.lat) / 2
            mid_lon = (segment.from_wp.lon + segment.to_wp.lon) / 2
            conditions = self.weather.get_conditions(mid_lat, mid_lon)

            available = None
            if total_available is not None and total_distance > 0:
                available = total_available * segment.distance_nm / total_distance

            optimized = optimize_segment_speed(i, segment, model, conditions, priorities, available)
            speed_profile.append(optimized)

            current = current_effect(segment.bearing_deg, conditions.current_speed_kn, conditions.current_direction_deg)
            wind = wind_effect(segment.bearing_deg, conditions.wind_speed_kn, conditions.wind_direction_deg)
            total_current += current
            total_wind += wind
            total_wave += conditions.wave_height_m

            effective = max(optimized.recommended_speed_kn + current, MIN_EFFECTIVE_SPEED_KN)
            seg_time = segment.distance_nm / effective
            seg_fuel = optimized.adjusted_fuel_rate_l_per_nm * segment.distance_nm
            total_time += seg_time
            total_fuel += seg_fuel

            logger.debug(
                f"Segment {i}: {optimized.recommended_speed_kn:.1f} kn ({optimized.reason}), "
                f"current {current:+.2f} kn, {seg_fuel:.1f} L"
            )
            optimized_segments.append(RouteSegment(
                from_wp=segment.from_wp,
                to_wp=segment.to_wp,
                distance_nm=segment.distance_nm,
                bearing_deg=segment.bearing_deg,
                estimated_time_hrs=seg_time,
                fuel_consumption_l=seg_fuel,
                weather_risk=segment.weather_risk,
            ))

        n = len(segments)
        mean_risk = sum(s.weather_risk for s in segments) / n if n else 0.0
        mean_wave = total_wave / n if n else 0.0
        mean_speed = sum(p.recommended_speed_kn for p in speed_profile) / n if n else model.base_speed_kn

        emissions = calculate_emissions(total_fuel, profile)
        cost = total_fuel * profile.fuel_cost_per_l
        naive_fuel = base_route.fuel_consumption_l
        fuel_saved = max(0.0, naive_fuel - total_fuel)

        opt_metrics = OptimizationMetrics(
            total_fuel_l=total_fuel,
            fuel_saved_l=fuel_saved,
            total_emissions=emissions,
            emissions_saved=Emissions(
                co2=max(0.0, base_route.emissions.co2 - emissions.co2),
                nox=max(0.0, base_route.emissions.nox - emissions.nox),
                sox=max(0.0, base_route.emissions.sox - emissions.sox),
            ),
            estimated_cost=cost,
            cost_saved=max(0.0, base_route.cost - cost),
            weather_risk_score=mean_risk,
            comfort_score=max(0.0, 100 - mean_wave * 20 - mean_risk * 0.5),
        )

        timing = self._timing(route, profile, model, priorities, window, port, departure, total_time, total_distance)

        recommended = route.with_segments(
            optimized_segments,
            name=f"{route.name} (Optimized)",
            estimated_time_hrs=total_time,
            fuel_consumption_l=total_fuel,
            emissions=emissions,
            average_speed_kn=mean_speed,
            weather_risk=mean_risk,
            cost=cost,
        )

        weather_routing = WeatherRoutingSummary(
            current_assist_kn=total_current / n if n else 0.0,
            wind_effect_kn=total_wind / n if n else 0.0,
            mean_wave_height_m=mean_wave,
        )
        if avoidance is not None and avoidance.applied:
            weather_routing.deviation_applied = True
            weather_routing.deviation_distance_nm = avoidance.deviation_distance_nm
            weather_routing.weather_avoided = [z.label for z in avoidance.avoided_zones]
            weather_routing.safety_improvement = avoidance.safety_improvement

        logger.info(
            f"Optimized {base_route.name}: {total_fuel:.0f} L ({fuel_saved:.0f} L saved), "
            f"{total_time:.1f} h, mean {mean_speed:.1f} kn"
        )

        return SmartOptimizationResult(
            recommended_route=recommended,
            speed_profile=speed_profile,
            metrics=opt_metrics,
            timing=timing,
            weather_routing=weather_routing,
            recommendations=self._recommendations(
                profile, mean_speed, opt_metrics, timing, mean_risk, total_current, n, avoidance
            ),
            alternatives=self._alternatives(route, profile, recommended),
        )

    def _timing(self, base_route, profile, model, priorities, window, port, departure,
                total_time, total_distance) -> TimingAnalysis:
        eta = departure + timedelta(hours=total_time)

        within_window = True
        slack = 0.0
        window_recommendation = None
        if window is not None:
            within_window = window.earliest <= eta <= window.latest
            slack = _hours(eta, window.latest)
            if total_distance > 0:
                window_recommendation = optimize_for_arrival_window(
                    total_distance, departure, window, model, priorities.fuel, priorities.time
                )

        virtual_arrival = None
        if port is not None and port.expected_berth_time is not None and base_route.total_distance_nm > 0:
            virtual_arrival = calculate_virtual_arrival(
                base_route.total_distance_nm,
                profile.cruising_speed_kn,
                departure,
                port.expected_berth_time,
                model,
                profile,
            )

        return TimingAnalysis(
            departure_time=departure,
            estimated_arrival=eta,
            within_window=within_window,
            slack_time_hrs=slack,
            virtual_arrival_recommended=bool(virtual_arrival and virtual_arrival.recommended),
            virtual_arrival=virtual_arrival,
            window_recommendation=window_recommendation,
        )

    def _recommendations(self, profile, mean_speed, opt_metrics, timing, mean_risk,
                         total_current, n, avoidance=None) -> List[Recommendation]:
        recommendations = []

        if avoidance is not None:
            for deviation in avoidance.deviations:
                zone = deviation.zone
                recommendations.append(Recommendation(
                    type="route",
                    priority="high" if zone.severity == ZoneSeverity.SEVERE else "medium",
                    title=f"Weather Avoidance: {zone.label}",
                    description=(
                        f"Route deviates {deviation.extra_distance_nm:.1f} nm to avoid "
                        f"{zone.type.value.replace('_', ' ')} ({zone.severity.value} severity)"
                    ),
                ))

        if n and mean_speed < profile.cruising_speed_kn * SLOW_STEAMING_HINT_FRACTION:
            recommendations.append(Recommendation(
                type="speed",
                priority="medium",
                title="Slow Steaming Recommended",
                description=f"Average speed of {mean_speed:.1f} knots optimizes fuel consumption",
                fuel_savings_l=opt_metrics.fuel_saved_l,
                cost_savings=opt_metrics.cost_saved,
            ))

        va = timing.virtual_arrival
        if va is not None and va.recommended:
            recommendations.append(Recommendation(
                type="timing",
                priority="high",
                title="Virtual Arrival Opportunity",
                description=va.reason,
                fuel_savings_l=va.fuel_saved_l,
                cost_savings=va.fuel_saved_l * profile.fuel_cost_per_l,
            ))

        window_rec = timing.window_recommendation
        if window_rec is not None and not window_rec.feasible:
            recommendations.append(Recommendation(
                type="timing",
                priority="high",
                title="Arrival Window Cannot Be Met",
                description=f"{window_rec.reason} ({window_rec.speed_kn:.1f} knots)",
            ))

        if mean_risk > WEATHER_ADVISORY_RISK:
            recommendations.append(Recommendation(
                type="safety",
                priority="high",
                title="Weather Advisory",
                description=f"Route passes through areas with elevated weather risk ({mean_risk:.0f}% average)",
            ))

        if n and abs(total_current) > n * CURRENT_HINT_KN:
            favorable = total_current > 0
            recommendations.append(Recommendation(
                type="route",
                priority="low",
                title="Favorable Currents" if favorable else "Unfavorable Currents",
                description=(
                    f"Ocean currents provide {abs(total_current / n):.1f} knot "
                    f"{'boost' if favorable else 'resistance'} on average"
                ),
            ))

        return recommendations

    def _alternatives(self, base_route: Route, profile: VesselProfile, optimized: Route) -> List[Alternative]:
        points = base_route.all_waypoints
        if len(points) < 2:
            return []

        sea_route = _as_sea_route(base_route)
        options = [
            ("Fastest Route", "Maximum speed for earliest arrival", profile.max_speed_kn),
            ("Most Economical", "Minimum fuel consumption with slower speed",
             profile.cruising_speed_kn * ECONOMICAL_ALTERNATIVE_FRACTION),
        ]

        alternatives = []
        for name, description, speed in options:
            route = self.engine.route_from_sea_route(
                sea_route,
                base_route.vessel_id,
                base_route.vessel_name,
                profile.type,
                base_route.origin,
                base_route.destination,
                speed_kn=speed,
                route_name=name,
            )
            alternatives.append(Alternative(
                name=name,
                description=description,
                route=route,
                fuel_diff_l=route.fuel_consumption_l - optimized.fuel_consumption_l,
                time_diff_hrs=route.estimated_time_hrs - optimized.estimated_time_hrs,
                cost_diff=route.cost - optimized.cost,
                risk_diff=route.weather_risk - optimized.weather_risk,
            ))
        return alternatives


def optimize_speeds(
    base_route: Route,
    vessel_type: Optional[str] = None,
    priorities: Union[Priorities, Mapping, None] = None,
    arrival_window: Optional[ArrivalWindow] = None,
    port_conditions: Optional[PortConditions] = None,
    departure_time: Optional[datetime] = None,
    weather_zones: Optional[Sequence[HazardZone]] = None,
) -> SmartOptimizationResult:
    """Optimize with a default optimizer over the shared route engine."""
    return SmartSegmentOptimizer().optimize_speeds(
        base_route, vessel_type, priorities,
        arrival_window=arrival_window,
        port_conditions=port_conditions,
        departure_time=departure_time,
        weather_zones=weather_zones,
    )
