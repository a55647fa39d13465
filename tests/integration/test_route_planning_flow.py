"""
End-to-end planning flow: validated request → routed and priced voyage →
per-segment speed optimization → multi-stop sequencing, plus a storm
diversion on an open-water voyage.

Uses the real coastline heuristic, the shipping-lane network and the
synthetic weather provider. The external sea-route provider stays off.
"""

from datetime import timedelta

import pytest

from gulfnav.optimization.multi_stop import MultiStopOptimizer
from gulfnav.optimization.route_selection import optimize_single_route
from gulfnav.optimization.smart_optimizer import SmartSegmentOptimizer
from gulfnav.routes.geometry import haversine_distance
from gulfnav.routes.models import Place, RouteSource
from gulfnav.schemas import HazardZoneModel, MultiStopRequest, RouteRequestModel


@pytest.fixture
def route_request(departure):
    return RouteRequestModel(
        vessel_id="v-101",
        vessel_name="Gulf Runner",
        vessel_type="supply_vessel",
        origin={"lat": 25.15, "lon": 52.87, "name": "Das Island"},
        destination={"lat": 25.6, "lon": 55.8, "name": "Offshore Block"},
        priorities={"fuel": 80, "time": 40},
        departure_time=departure,
        arrival_window={
            "earliest": departure + timedelta(hours=12),
            "latest": departure + timedelta(hours=36),
        },
    )


def _assert_chained(route):
    points = route.all_waypoints
    for segment, (a, b) in zip(route.segments, zip(points, points[1:])):
        assert segment.from_wp is a
        assert segment.to_wp is b
    assert len(route.segments) == len(points) - 1


class TestSingleVoyage:

    def test_request_to_optimized_speeds(self, engine, route_request):
        request = route_request.to_request()
        selection = optimize_single_route(engine, request)
        route = selection.recommended_route

        assert route.source == RouteSource.NETWORK
        assert route.origin.name == "Das Island"
        assert route.destination.name == "Offshore Block"
        assert route.total_distance_nm >= haversine_distance(25.15, 52.87, 25.6, 55.8) - 1e-6
        _assert_chained(route)

        optimizer = SmartSegmentOptimizer(engine=engine)
        result = optimizer.optimize_speeds(
            route,
            priorities=route_request.priorities,
            arrival_window=route_request.arrival_window.to_window(),
            departure_time=request.departure_time,
        )

        assert len(result.speed_profile) == len(route.segments)
        for p in result.speed_profile:
            assert p.min_speed_kn <= p.recommended_speed_kn <= p.max_speed_kn
            assert p.adjusted_fuel_rate_l_per_nm >= p.fuel_rate_l_per_nm
        assert result.metrics.total_fuel_l > 0
        assert 0 <= result.metrics.comfort_score <= 100
        assert result.timing.departure_time == request.departure_time
        assert result.timing.window_recommendation is not None
        assert len(result.alternatives) == 2

    def test_optimization_is_deterministic(self, engine, route_request, departure):
        route = engine.generate_route(
            "v-101", "Gulf Runner", "supply_vessel",
            route_request.origin.to_place(), route_request.destination.to_place(),
            route_id="fixed",
        )
        optimizer = SmartSegmentOptimizer(engine=engine)
        first = optimizer.optimize_speeds(route, departure_time=departure)
        second = optimizer.optimize_speeds(route, departure_time=departure)

        assert [p.recommended_speed_kn for p in first.speed_profile] == \
            [p.recommended_speed_kn for p in second.speed_profile]
        assert first.metrics.total_fuel_l == second.metrics.total_fuel_l
        assert first.weather_routing.current_assist_kn == second.weather_routing.current_assist_kn


class TestMultiStopVoyage:

    def test_request_to_legs(self, engine, offline_settings):
        request = MultiStopRequest(
            origin={"id": "base", "name": "Das Island", "lat": 25.15, "lon": 52.87},
            stops=[
                {"id": "p3", "name": "Platform 3", "lat": 25.9, "lon": 54.9},
                {"id": "p1", "name": "Platform 1", "lat": 25.0, "lon": 53.6},
                {"id": "p2", "name": "Platform 2", "lat": 25.4, "lon": 54.2},
            ],
            return_to_origin=True,
            vessel_type="supply_vessel",
            vessel_id="v-101",
        )
        optimizer = MultiStopOptimizer(engine=engine, settings=offline_settings)
        result = optimizer.optimize(
            request.origin.to_stop(),
            [s.to_stop() for s in request.stops],
            return_to_origin=request.return_to_origin,
            vessel_type=request.vessel_type,
            vessel_id=request.vessel_id,
        )

        assert result.order[0].id == "base"
        assert sorted(s.id for s in result.order[1:]) == ["p1", "p2", "p3"]
        assert len(result.routes) == 4
        assert result.routes[-1].destination.name == "Das Island"
        for leg, (a, b) in zip(result.routes, zip(result.order, result.order[1:])):
            assert leg.origin.name == a.name
            assert leg.destination.name == b.name
            _assert_chained(leg)
        assert result.total_fuel_l == pytest.approx(result.total_distance_nm * 30.0)


class TestStormDiversion:

    def test_open_water_voyage_diverted_around_storm(self, engine, departure):
        storm = HazardZoneModel(
            id="lp-1",
            type="storm",
            severity="severe",
            center={"lat": 25.5, "lon": 53.5, "name": "Low Pressure System"},
            radius_nm=15,
            avoidance="mandatory",
        ).to_zone()
        route = engine.generate_route("v-101", "Gulf Runner", "tugboat", Place(25.0, 52.0), Place(26.0, 55.0))

        result = SmartSegmentOptimizer(engine=engine).optimize_speeds(
            route, departure_time=departure, weather_zones=[storm]
        )
        diverted = result.recommended_route

        assert result.weather_routing.deviation_applied
        assert result.weather_routing.weather_avoided == ["Low Pressure System"]
        assert result.weather_routing.safety_improvement == "significant"
        assert "Avoid Low Pressure System" in [w.name for w in diverted.waypoints]
        assert not any(storm.contains(w.lat, w.lon) for w in diverted.all_waypoints)
        assert diverted.total_distance_nm > route.total_distance_nm
        _assert_chained(diverted)
