"""
Unit tests for single-route selection: scoring, risk assessment and
choosing among the fastest, economical and balanced variants.
"""

from dataclasses import replace

import pytest

from gulfnav.optimization.route_selection import (
    RouteRequest,
    assess_route_risk,
    optimize_single_route,
    score_route,
)
from gulfnav.optimization.smart_optimizer import Priorities
from gulfnav.routes.models import Place


@pytest.fixture
def request_factory():
    def _make(priorities=None):
        return RouteRequest(
            vessel_id="v1",
            vessel_name="Falcon",
            vessel_type="tugboat",
            origin=Place(25.0, 52.0, "Das"),
            destination=Place(26.0, 55.0, "Khasab"),
            priorities=priorities,
        )
    return _make


@pytest.fixture
def balanced_route(calm_engine):
    return calm_engine.generate_route("v1", "Falcon", "tugboat", Place(25.0, 52.0), Place(26.0, 55.0))


ONLY = {"fuel": 0, "time": 0, "emissions": 0, "cost": 0, "safety": 0, "comfort": 0}


# ---------------------------------------------------------------------------
# §1 – Scoring
# ---------------------------------------------------------------------------
class TestScoreRoute:

    def test_time_only(self, balanced_route):
        priorities = Priorities(**{**ONLY, "time": 100})
        assert score_route(balanced_route, priorities) == pytest.approx(
            100 / (balanced_route.estimated_time_hrs + 1)
        )

    def test_all_zero(self, balanced_route):
        assert score_route(balanced_route, Priorities(**ONLY)) == 0.0

    def test_cheaper_route_scores_higher_on_fuel(self, calm_engine, balanced_route):
        slow = calm_engine.generate_route(
            "v1", "Falcon", "tugboat", Place(25.0, 52.0), Place(26.0, 55.0), speed_kn=8.0
        )
        priorities = Priorities(**{**ONLY, "fuel": 100})
        assert score_route(slow, priorities) > score_route(balanced_route, priorities)


# ---------------------------------------------------------------------------
# §2 – Risk assessment
# ---------------------------------------------------------------------------
class TestAssessRouteRisk:

    def test_no_factors(self, balanced_route):
        assessment = assess_route_risk(balanced_route)
        assert assessment.factors == []
        assert assessment.overall_risk == 0

    def test_all_factors(self, balanced_route):
        risky = balanced_route.with_segments(
            [replace(s, weather_risk=90.0) for s in balanced_route.segments],
            fuel_consumption_l=12000.0,
            estimated_time_hrs=50.0,
        )
        assessment = assess_route_risk(risky)
        by_type = {f.type: f for f in assessment.factors}

        assert by_type["weather"].severity == "high"
        assert by_type["weather"].description == f"{len(risky.segments)} segment(s) with elevated weather risk"
        assert by_type["fuel"].severity == "high"
        assert by_type["fuel"].description == "High fuel consumption: 12000 liters required"
        assert by_type["duration"].severity == "medium"
        assert assessment.overall_risk == round((30 + 30 + 20) / 3)

    def test_medium_weather(self, balanced_route):
        risky = balanced_route.with_segments([replace(s, weather_risk=70.0) for s in balanced_route.segments])
        assessment = assess_route_risk(risky)
        assert [f.severity for f in assessment.factors] == ["medium"]
        assert assessment.overall_risk == 20

    def test_long_voyage_is_high(self, balanced_route):
        assessment = assess_route_risk(balanced_route.with_segments(balanced_route.segments, estimated_time_hrs=80.0))
        assert assessment.factors[0].severity == "high"
        assert assessment.factors[0].description == "Long voyage: 80.0 hours"


# ---------------------------------------------------------------------------
# §3 – Selection
# ---------------------------------------------------------------------------
class TestOptimizeSingleRoute:

    def test_time_priority_picks_fastest(self, calm_engine, request_factory):
        result = optimize_single_route(calm_engine, request_factory({**ONLY, "time": 100}))

        assert result.recommended_route.name == "Fastest Route"
        assert {r.name for r in result.alternatives} == {"Most Economical Route", "Balanced Route"}
        assert result.comparison.time_diff_hrs < 0
        assert result.comparison.fuel_savings_l < 0

    def test_fuel_priority_picks_economical(self, calm_engine, request_factory):
        result = optimize_single_route(calm_engine, request_factory({**ONLY, "fuel": 100}))

        assert result.recommended_route.name == "Most Economical Route"
        assert result.comparison.fuel_savings_l > 0
        assert result.risk_assessment.factors == []

    def test_forecast_covers_segment_ends(self, calm_engine, request_factory, departure):
        request = request_factory()
        request.departure_time = departure
        result = optimize_single_route(calm_engine, request)

        assert len(result.weather_forecast) == 2 * len(result.recommended_route.segments)
        assert result.weather_forecast[0].time == departure
        assert result.weather_forecast[0].condition == "clear"

    def test_fastest_fuel_flagged(self, calm_engine, request_factory):
        result = optimize_single_route(calm_engine, request_factory({**ONLY, "time": 100}))
        factors = result.risk_assessment.factors
        assert [(f.type, f.severity) for f in factors] == [("fuel", "medium")]
        assert result.risk_assessment.overall_risk == 20
