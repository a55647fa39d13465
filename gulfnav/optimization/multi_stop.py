"""
Multi-stop voyage sequencing.

Finds a short visiting order for an origin and a set of stops:
- distance matrix from route-engine distances (request-scoped)
- nearest-neighbour construction from the origin
- 2-opt improvement, bounded by a pass cap and a wall-clock budget
- optional priority reordering (higher priority first)

The result carries one priced Route per leg plus the savings against
visiting the stops in the order given.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from gulfnav.config import Settings, get_settings
from gulfnav.data.vessel_profiles import get_vessel_profile
from gulfnav.metrics import metrics
from gulfnav.optimization.route_engine import RouteEngine, get_default_engine
from gulfnav.routes.geometry import haversine_distance, validate_coordinates
from gulfnav.routes.models import Route

logger = logging.getLogger(__name__)

DistanceMatrix = Dict[str, Dict[str, float]]


@dataclass(frozen=True)
class Stop:
    """A place to visit. Higher priority means visit earlier."""
    id: str
    name: str
    lat: float
    lon: float
    priority: Optional[float] = None
    time_window_start: Optional[datetime] = None
    time_window_end: Optional[datetime] = None


@dataclass
class Savings:
    """Improvement of the optimised tour over the as-given order."""
    distance_saved_nm: float = 0.0
    time_saved_hrs: float = 0.0
    fuel_saved_l: float = 0.0
    percent_improvement: float = 0.0


@dataclass
class MultiStopResult:
    """Optimised visiting order and the legs that realise it."""
    order: List[Stop]
    total_distance_nm: float
    total_time_hrs: float
    total_fuel_l: float
    routes: List[Route]
    savings: Savings = field(default_factory=Savings)
    two_opt_passes: int = 0


# ---------------------------------------------------------------------------
# Tour helpers
# ---------------------------------------------------------------------------

def get_distance(matrix: DistanceMatrix, from_id: str, to_id: str) -> float:
    return matrix.get(from_id, {}).get(to_id, float('inf'))


def tour_distance(order: Sequence[Stop], matrix: DistanceMatrix, return_to_origin: bool = False) -> float:
    """Length of a tour through ``order``, optionally closing back to order[0]."""
    total = 0.0
    for a, b in zip(order, order[1:]):
        total += get_distance(matrix, a.id, b.id)
    if return_to_origin and len(order) > 1:
        total += get_distance(matrix, order[-1].id, order[0].id)
    return total


def nearest_neighbor(origin: Stop, stops: Sequence[Stop], matrix: DistanceMatrix) -> List[Stop]:
    """Greedy tour: from the origin, always go to the closest unvisited stop."""
    tour = [origin]
    unvisited = list(stops)
    current = origin

    while unvisited:
        nearest = min(unvisited, key=lambda s: get_distance(matrix, current.id, s.id))
        unvisited.remove(nearest)
        tour.append(nearest)
        current = nearest

    return tour


def two_opt(
    tour: Sequence[Stop],
    matrix: DistanceMatrix,
    return_to_origin: bool = False,
    max_passes: int = 100,
    time_budget_s: float = 2.0,
) -> Tuple[List[Stop], int]:
    """
    Improve a tour by reversing sub-sequences while that strictly shortens it.

    The origin at position 0 never moves. Stops at a local optimum, after
    ``max_passes`` full passes, or once ``time_budget_s`` has elapsed.
    Returns the improved tour and the number of passes run.
    """
    best = list(tour)
    best_distance = tour_distance(best, matrix, return_to_origin)
    deadline = time.monotonic() + time_budget_s
    passes = 0
    improved = True

    while improved and passes < max_passes:
        improved = False
        passes += 1

        for i in range(1, len(best) - 1):
            for j in range(i + 1, len(best)):
                candidate = best[:i] + best[i:j + 1][::-1] + best[j + 1:]
                candidate_distance = tour_distance(candidate, matrix, return_to_origin)
                if candidate_distance < best_distance:
                    best = candidate
                    best_distance = candidate_distance
                    improved = True

        if time.monotonic() > deadline:
            if improved:
                logger.warning(f"2-opt stopped by time budget after {passes} passes")
            break
    else:
        if improved:
            logger.warning(f"2-opt stopped at pass cap ({max_passes})")

    return best, passes


def apply_priority_order(tour: Sequence[Stop], matrix: DistanceMatrix) -> List[Stop]:
    """
    Reorder stops by descending priority, ties by distance from the origin.

    A missing priority counts as 0. The sort is stable.
    """
    origin = tour[0]
    ranked = sorted(
        tour[1:],
        key=lambda s: (-(s.priority or 0), get_distance(matrix, origin.id, s.id)),
    )
    return [origin] + ranked


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------

class MultiStopOptimizer:
    """Sequence multiple stops and generate the legs between them."""

    def __init__(
        self,
        engine: Optional[RouteEngine] = None,
        settings: Optional[Settings] = None,
        use_sea_routes: bool = True,
    ):
        """
        Args:
            engine: Route engine for distances and legs (shared default if None)
            settings: Optimizer bounds and worker count
            use_sea_routes: Matrix from routed distances; False uses great-circle
        """
        self.engine = engine or get_default_engine()
        self.settings = settings or get_settings()
        self.use_sea_routes = use_sea_routes

    def _pair_distance(self, a: Stop, b: Stop) -> float:
        if self.use_sea_routes:
            return self.engine.compute_route(a.lat, a.lon, b.lat, b.lon).total_distance_nm
        return haversine_distance(a.lat, a.lon, b.lat, b.lon)

    def build_distance_matrix(self, stops: Sequence[Stop]) -> DistanceMatrix:
        """Symmetric stop-to-stop distances with a zero diagonal."""
        matrix: DistanceMatrix = {s.id: {s.id: 0.0} for s in stops}
        pairs = list(combinations(stops, 2))

        workers = self.settings.distance_matrix_workers
        if workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                distances = list(pool.map(lambda p: self._pair_distance(*p), pairs))
        else:
            distances = [self._pair_distance(a, b) for a, b in pairs]

        for (a, b), distance in zip(pairs, distances):
            matrix[a.id][b.id] = distance
            matrix[b.id][a.id] = distance

        logger.info(f"Distance matrix built for {len(stops)} stops ({len(pairs)} pairs)")
        return matrix

    def optimize(
        self,
        origin: Stop,
        stops: Sequence[Stop],
        return_to_origin: bool = False,
        vessel_type: str = "default",
        vessel_id: str = "",
        vessel_name: str = "",
    ) -> MultiStopResult:
        """
        Optimise the visiting order and build a route for every leg.

        Raises:
            InvalidCoordinateError: if any stop has an invalid position
            ValueError: if stop ids are not unique
        """
        all_stops = [origin, *stops]
        for stop in all_stops:
            validate_coordinates(stop.lat, stop.lon)
        ids = [s.id for s in all_stops]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Stop ids must be unique: {ids}")

        with metrics.timer("multi_stop.optimize"):
            return self._optimize(origin, list(stops), return_to_origin, vessel_type, vessel_id, vessel_name)

    def _optimize(self, origin, stops, return_to_origin, vessel_type, vessel_id, vessel_name) -> MultiStopResult:
        profile = get_vessel_profile(vessel_type)
        matrix = self.build_distance_matrix([origin, *stops])

        original_distance = tour_distance([origin, *stops], matrix, return_to_origin)

        tour = nearest_neighbor(origin, stops, matrix)
        tour, passes = two_opt(
            tour, matrix, return_to_origin,
            max_passes=self.settings.two_opt_max_passes,
            time_budget_s=self.settings.two_opt_time_budget_s,
        )
        metrics.increment("multi_stop.two_opt_passes", passes)

        if any(s.priority is not None for s in stops):
            tour = apply_priority_order(tour, matrix)

        optimized_distance = tour_distance(tour, matrix, return_to_origin)
        logger.info(
            f"Multi-stop order: {' -> '.join(s.name for s in tour)} "
            f"({optimized_distance:.1f} nm vs {original_distance:.1f} nm as given)"
        )

        routes = []
        for i, (a, b) in enumerate(zip(tour, tour[1:])):
            routes.append(self.engine.generate_route(
                vessel_id, vessel_name, vessel_type, a, b,
                route_name=f"Leg {i + 1}: {a.name} → {b.name}",
            ))
        if return_to_origin and len(tour) > 1:
            last = tour[-1]
            routes.append(self.engine.generate_route(
                vessel_id, vessel_name, vessel_type, last, origin,
                route_name=f"Return: {last.name} → {origin.name}",
            ))

        speed = profile.cruising_speed_kn
        rate = profile.fuel_rate_l_per_nm
        distance_saved = original_distance - optimized_distance
        savings = Savings(
            distance_saved_nm=distance_saved,
            time_saved_hrs=distance_saved / speed,
            fuel_saved_l=distance_saved * rate,
            percent_improvement=(distance_saved / original_distance * 100) if original_distance > 0 else 0.0,
        )

        return MultiStopResult(
            order=tour,
            total_distance_nm=optimized_distance,
            total_time_hrs=optimized_distance / speed,
            total_fuel_l=optimized_distance * rate,
            routes=routes,
            savings=savings,
            two_opt_passes=passes,
        )


def optimize_multi_stop(
    origin: Stop,
    stops: Sequence[Stop],
    return_to_origin: bool = False,
    vessel_type: str = "default",
    vessel_id: str = "",
    vessel_name: str = "",
) -> MultiStopResult:
    """Optimise with a default optimizer over the shared route engine."""
    return MultiStopOptimizer().optimize(
        origin, stops, return_to_origin=return_to_origin,
        vessel_type=vessel_type, vessel_id=vessel_id, vessel_name=vessel_name,
    )
