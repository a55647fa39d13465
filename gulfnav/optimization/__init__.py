"""Routing, sequencing and speed optimization."""

from .fuel_model import ArrivalWindow, FuelModel, SpeedRecommendation
from .route_engine import RouteEngine, compute_route
from .multi_stop import MultiStopOptimizer, MultiStopResult, Stop, optimize_multi_stop
from .smart_optimizer import (
    PortConditions,
    Priorities,
    SmartOptimizationResult,
    SmartSegmentOptimizer,
    optimize_speeds,
)
from .route_selection import RouteRequest, RouteSelectionResult, optimize_single_route
from .weather_avoidance import HazardZone, avoid_zones

__all__ = [
    "ArrivalWindow",
    "FuelModel",
    "SpeedRecommendation",
    "RouteEngine",
    "compute_route",
    "MultiStopOptimizer",
    "MultiStopResult",
    "Stop",
    "optimize_multi_stop",
    "PortConditions",
    "Priorities",
    "SmartOptimizationResult",
    "SmartSegmentOptimizer",
    "optimize_speeds",
    "RouteRequest",
    "RouteSelectionResult",
    "optimize_single_route",
    "HazardZone",
    "avoid_zones",
]
