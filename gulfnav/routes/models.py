"""
Route data model.

Value objects for computed sea routes. Everything here is request-scoped:
routes and segments are derived from waypoints and recomputed whenever
geometry or speed changes.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    All gulfnav timestamps are naive UTC, so defaults produced here compare
    directly with caller-supplied departure and arrival-window times.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RouteSource(str, Enum):
    """Which routing strategy produced a route."""
    NETWORK = "network"
    HYBRID = "hybrid"
    API = "api"


class RouteStatus(str, Enum):
    """Route lifecycle: planned → active → completed."""
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class GeoPoint:
    """A position in decimal degrees."""
    lat: float
    lon: float


@dataclass(frozen=True)
class Place:
    """A named position used as a route origin or destination."""
    lat: float
    lon: float
    name: Optional[str] = None


@dataclass
class SeaRouteWaypoint:
    """An ordered point in a computed route. name/note are advisory only."""
    lat: float
    lon: float
    name: Optional[str] = None
    note: Optional[str] = None


@dataclass
class SeaRoute:
    """Raw routing result: ordered waypoints plus which strategy produced them."""
    waypoints: List[SeaRouteWaypoint]
    total_distance_nm: float
    source: RouteSource

    @property
    def is_degenerate(self) -> bool:
        """True for the zero-length, single-waypoint route (origin == destination)."""
        return len(self.waypoints) < 2


@dataclass
class Waypoint:
    """A named point of a generated Route."""
    id: str
    name: str
    lat: float
    lon: float
    type: str = "waypoint"  # origin | destination | waypoint | port | avoid


@dataclass
class RouteSegment:
    """A leg between two consecutive route waypoints."""
    from_wp: Waypoint
    to_wp: Waypoint
    distance_nm: float
    bearing_deg: float
    estimated_time_hrs: float
    fuel_consumption_l: float
    weather_risk: float  # 0-100


@dataclass
class Emissions:
    """Exhaust emissions in kg."""
    co2: float = 0.0
    nox: float = 0.0
    sox: float = 0.0


@dataclass
class FuelCalculation:
    """Fuel figures for one segment."""
    base_consumption_lph: float  # L/hr at cruising speed
    adjusted_consumption_lph: float  # L/hr with weather factor
    total_fuel_l: float
    cost_per_liter: float
    total_cost: float


@dataclass
class Route:
    """
    A planned voyage between an origin and a destination.

    ``waypoints`` holds only the intermediate points; ``all_waypoints``
    gives the full ordered sequence including origin and destination.
    """
    id: str
    name: str
    vessel_id: str
    vessel_name: str
    vessel_type: str
    origin: Waypoint
    destination: Waypoint
    waypoints: List[Waypoint]
    segments: List[RouteSegment]
    total_distance_nm: float
    estimated_time_hrs: float
    fuel_consumption_l: float
    emissions: Emissions
    average_speed_kn: float
    weather_risk: float
    cost: float
    source: RouteSource = RouteSource.NETWORK
    created_at: datetime = field(default_factory=utc_now)
    status: RouteStatus = RouteStatus.PLANNED

    @property
    def all_waypoints(self) -> List[Waypoint]:
        if self.origin is self.destination:
            return [self.origin]
        return [self.origin, *self.waypoints, self.destination]

    def activate(self) -> None:
        """Move a planned route to active."""
        if self.status != RouteStatus.PLANNED:
            raise ValueError(f"Cannot activate route in status {self.status.value!r}")
        self.status = RouteStatus.ACTIVE

    def complete(self) -> None:
        """Move an active route to completed."""
        if self.status != RouteStatus.ACTIVE:
            raise ValueError(f"Cannot complete route in status {self.status.value!r}")
        self.status = RouteStatus.COMPLETED

    def with_segments(self, segments: List[RouteSegment], **changes) -> "Route":
        """Copy of this route with new segments and any other field overrides."""
        return replace(self, segments=list(segments), **changes)


@dataclass
class RouteComparison:
    """Differences of route A relative to route B (positive savings favour A)."""
    distance_diff_nm: float
    time_diff_hrs: float
    fuel_savings_l: float
    emissions_savings_kg: float
