"""
Unit tests for request validation models.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from gulfnav.optimization.smart_optimizer import Priorities
from gulfnav.routes.models import Place
from gulfnav.schemas import (
    ArrivalWindowModel,
    MultiStopRequest,
    OptimizationPriorities,
    PortConditionsModel,
    Position,
    RouteRequestModel,
    StopModel,
)


def _stop(stop_id, lat=25.0, lon=54.0, **kw):
    return {"id": stop_id, "name": stop_id.upper(), "lat": lat, "lon": lon, **kw}


class TestPosition:

    @pytest.mark.parametrize("lat,lon", [(91, 54), (-90.5, 54), (25, 181), (25, -180.1)])
    def test_out_of_range(self, lat, lon):
        with pytest.raises(ValidationError):
            Position(lat=lat, lon=lon)

    def test_to_place(self):
        assert Position(lat=25.0, lon=54.0, name="Mina Zayed").to_place() == Place(25.0, 54.0, "Mina Zayed")


class TestMultiStopRequest:

    def test_valid(self):
        req = MultiStopRequest(origin=_stop("o"), stops=[_stop("a", priority=80)], vessel_type="tugboat")
        stop = req.stops[0].to_stop()
        assert stop.id == "a"
        assert stop.priority == 80

    def test_unknown_vessel_type(self):
        with pytest.raises(ValidationError, match="Unknown vessel type"):
            MultiStopRequest(origin=_stop("o"), stops=[_stop("a")], vessel_type="submarine")

    def test_duplicate_ids(self):
        with pytest.raises(ValidationError, match="unique"):
            MultiStopRequest(origin=_stop("o"), stops=[_stop("a"), _stop("a", lon=55.0)])

    def test_origin_id_reused(self):
        with pytest.raises(ValidationError):
            MultiStopRequest(origin=_stop("o"), stops=[_stop("o", lon=55.0)])

    @pytest.mark.parametrize("count", [0, 51])
    def test_stop_count_bounds(self, count):
        with pytest.raises(ValidationError):
            MultiStopRequest(origin=_stop("o"), stops=[_stop(f"s{i}") for i in range(count)])

    def test_priority_range(self):
        with pytest.raises(ValidationError):
            StopModel(**_stop("a", priority=120))


class TestOptimizationPriorities:

    def test_clamped(self):
        p = OptimizationPriorities(fuel=150, time=-5)
        assert p.fuel == 100.0
        assert p.time == 0.0

    def test_to_priorities(self):
        assert OptimizationPriorities(safety=90).to_priorities() == Priorities(safety=90)


class TestArrivalWindowModel:

    def test_order_enforced(self):
        with pytest.raises(ValidationError):
            ArrivalWindowModel(earliest=datetime(2025, 3, 2), latest=datetime(2025, 3, 1))

    def test_to_window(self):
        window = ArrivalWindowModel(earliest=datetime(2025, 3, 1), latest=datetime(2025, 3, 2)).to_window()
        assert window.latest == datetime(2025, 3, 2)
        assert window.preferred is None


class TestPortConditionsModel:

    def test_congestion_level(self):
        with pytest.raises(ValidationError):
            PortConditionsModel(congestion_level="gridlock")

    def test_to_conditions(self):
        conditions = PortConditionsModel(berth_available=False, congestion_level="high").to_conditions()
        assert not conditions.berth_available
        assert conditions.congestion_level == "high"


class TestRouteRequestModel:

    def test_to_request(self):
        model = RouteRequestModel(
            vessel_id="v1",
            vessel_type="supply_vessel",
            origin={"lat": 24.5, "lon": 54.4, "name": "Abu Dhabi"},
            destination={"lat": 25.3, "lon": 55.3},
            priorities={"fuel": 80},
        )
        request = model.to_request()

        assert request.origin == Place(24.5, 54.4, "Abu Dhabi")
        assert request.destination.name is None
        assert request.priorities.fuel == 80.0
        assert request.priorities.time == 50.0

    def test_unknown_vessel_type(self):
        with pytest.raises(ValidationError):
            RouteRequestModel(vessel_type="yacht", origin={"lat": 25, "lon": 54}, destination={"lat": 26, "lon": 55})
