"""
Single-route optimization: price the fastest, economical and balanced
variants of one voyage, score them against the caller's priorities and
return the best one with a forecast, a comparison and a risk assessment.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Optional, Union

from gulfnav.data.weather import WeatherPoint
from gulfnav.optimization.route_engine import RouteEngine, compare_routes
from gulfnav.optimization.smart_optimizer import Priorities
from gulfnav.routes.models import Place, Route, RouteComparison

logger = logging.getLogger(__name__)

SEVERITY_SCORES = {"high": 30, "medium": 20, "low": 10}


@dataclass
class RouteRequest:
    vessel_id: str
    vessel_name: str
    vessel_type: str
    origin: Place
    destination: Place
    priorities: Union[Priorities, Mapping, None] = None
    departure_time: Optional[datetime] = None


@dataclass
class RiskFactor:
    type: str  # weather | fuel | duration
    severity: str  # low | medium | high
    description: str


@dataclass
class RiskAssessment:
    overall_risk: int  # 0-100
    factors: List[RiskFactor] = field(default_factory=list)


@dataclass
class RouteSelectionResult:
    recommended_route: Route
    alternatives: List[Route]
    weather_forecast: List[WeatherPoint]
    comparison: RouteComparison  # recommended vs balanced
    risk_assessment: RiskAssessment


def score_route(route: Route, priorities: Priorities) -> float:
    """Higher is better: each metric contributes priority / (metric + 1)."""
    return (
        priorities.time * (1 / (route.estimated_time_hrs + 1))
        + priorities.fuel * (1 / (route.fuel_consumption_l + 1))
        + priorities.emissions * (1 / (route.emissions.co2 + 1))
        + priorities.cost * (1 / (route.cost + 1))
        + priorities.safety * (1 / (route.weather_risk + 1))
    )


def assess_route_risk(route: Route) -> RiskAssessment:
    factors = []

    risky = [s for s in route.segments if s.weather_risk > 60]
    if risky:
        factors.append(RiskFactor(
            type="weather",
            severity="high" if any(s.weather_risk > 80 for s in risky) else "medium",
            description=f"{len(risky)} segment(s) with elevated weather risk",
        ))

    if route.fuel_consumption_l > 5000:
        factors.append(RiskFactor(
            type="fuel",
            severity="high" if route.fuel_consumption_l > 10000 else "medium",
            description=f"High fuel consumption: {route.fuel_consumption_l:.0f} liters required",
        ))

    if route.estimated_time_hrs > 48:
        factors.append(RiskFactor(
            type="duration",
            severity="high" if route.estimated_time_hrs > 72 else "medium",
            description=f"Long voyage: {route.estimated_time_hrs:.1f} hours",
        ))

    total = sum(SEVERITY_SCORES[f.severity] for f in factors)
    overall = min(100, round(total / max(len(factors), 1)))
    return RiskAssessment(overall_risk=overall, factors=factors)


def optimize_single_route(engine: RouteEngine, request: RouteRequest) -> RouteSelectionResult:
    """Pick the best of the three speed variants for the request's priorities."""
    priorities = Priorities.coerce(request.priorities)
    variants = engine.generate_alternative_routes(
        request.vessel_id,
        request.vessel_name,
        request.vessel_type,
        request.origin,
        request.destination,
    )

    ranked = sorted(variants.values(), key=lambda r: score_route(r, priorities), reverse=True)
    best = ranked[0]
    logger.info(f"Selected {best.name} out of {len(ranked)} variants")

    forecast = engine.route_weather_forecast(
        [p for s in best.segments for p in (s.from_wp, s.to_wp)],
        request.departure_time,
    )

    return RouteSelectionResult(
        recommended_route=best,
        alternatives=ranked[1:],
        weather_forecast=forecast,
        comparison=compare_routes(best, variants["balanced"]),
        risk_assessment=assess_route_risk(best),
    )
