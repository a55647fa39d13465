"""Request validation models for the route-planning entry points."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from gulfnav.data.vessel_profiles import VESSEL_PROFILES
from gulfnav.optimization.fuel_model import ArrivalWindow
from gulfnav.optimization.multi_stop import Stop
from gulfnav.optimization.route_selection import RouteRequest
from gulfnav.optimization.smart_optimizer import PortConditions, Priorities
from gulfnav.optimization.weather_avoidance import AvoidanceLevel, HazardZone, ZoneSeverity, ZoneType
from gulfnav.routes.models import Place


class Position(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    name: Optional[str] = Field(None, max_length=100)

    def to_place(self) -> Place:
        return Place(lat=self.lat, lon=self.lon, name=self.name)


class StopModel(Position):
    """A stop of a multi-stop voyage."""
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., max_length=100)
    priority: Optional[float] = Field(None, ge=0, le=100)
    time_window_start: Optional[datetime] = None
    time_window_end: Optional[datetime] = None

    def to_stop(self) -> Stop:
        return Stop(
            id=self.id,
            name=self.name,
            lat=self.lat,
            lon=self.lon,
            priority=self.priority,
            time_window_start=self.time_window_start,
            time_window_end=self.time_window_end,
        )


def _validate_vessel_type(v: str) -> str:
    if v not in VESSEL_PROFILES:
        raise ValueError(f"Unknown vessel type '{v}'. Must be one of: {sorted(VESSEL_PROFILES)}")
    return v


class MultiStopRequest(BaseModel):
    """Request for multi-stop sequencing."""
    origin: StopModel
    stops: List[StopModel] = Field(..., min_length=1, max_length=50)
    return_to_origin: bool = False
    vessel_type: str = "default"
    vessel_id: str = ""
    vessel_name: str = ""

    @field_validator("vessel_type")
    @classmethod
    def validate_vessel_type(cls, v: str) -> str:
        return _validate_vessel_type(v)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "MultiStopRequest":
        ids = [self.origin.id] + [s.id for s in self.stops]
        if len(ids) != len(set(ids)):
            raise ValueError("Stop ids must be unique")
        return self


class OptimizationPriorities(BaseModel):
    """
    Priority weights in [0, 100].

    Out-of-range numbers are clamped rather than rejected.
    """
    fuel: float = 50
    time: float = 50
    emissions: float = 50
    cost: float = 50
    safety: float = 50
    comfort: float = 50

    @field_validator("fuel", "time", "emissions", "cost", "safety", "comfort")
    @classmethod
    def clamp(cls, v: float) -> float:
        return max(0.0, min(100.0, float(v)))

    def to_priorities(self) -> Priorities:
        return Priorities(**self.model_dump())


class ArrivalWindowModel(BaseModel):
    earliest: datetime
    latest: datetime
    preferred: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_order(self) -> "ArrivalWindowModel":
        if self.latest < self.earliest:
            raise ValueError("latest must not be before earliest")
        return self

    def to_window(self) -> ArrivalWindow:
        return ArrivalWindow(earliest=self.earliest, latest=self.latest, preferred=self.preferred)


class PortConditionsModel(BaseModel):
    berth_available: bool = True
    expected_berth_time: Optional[datetime] = None
    congestion_level: str = Field("low", pattern="^(low|medium|high)$")

    def to_conditions(self) -> PortConditions:
        return PortConditions(
            berth_available=self.berth_available,
            expected_berth_time=self.expected_berth_time,
            congestion_level=self.congestion_level,
        )


class RouteRequestModel(BaseModel):
    """Request for a single optimized route."""
    vessel_id: str = ""
    vessel_name: str = ""
    vessel_type: str = "default"
    origin: Position
    destination: Position
    priorities: OptimizationPriorities = Field(default_factory=OptimizationPriorities)
    departure_time: Optional[datetime] = None
    arrival_window: Optional[ArrivalWindowModel] = None
    port_conditions: Optional[PortConditionsModel] = None

    @field_validator("vessel_type")
    @classmethod
    def validate_vessel_type(cls, v: str) -> str:
        return _validate_vessel_type(v)

    def to_request(self) -> RouteRequest:
        return RouteRequest(
            vessel_id=self.vessel_id,
            vessel_name=self.vessel_name,
            vessel_type=self.vessel_type,
            origin=self.origin.to_place(),
            destination=self.destination.to_place(),
            priorities=self.priorities.to_priorities(),
            departure_time=self.departure_time,
        )


class HazardZoneModel(BaseModel):
    """A circular weather hazard to route around."""
    id: str = Field(..., min_length=1, max_length=64)
    type: ZoneType
    severity: ZoneSeverity
    center: Position
    radius_nm: float = Field(..., gt=0, le=500)
    avoidance: AvoidanceLevel = AvoidanceLevel.RECOMMENDED
    name: Optional[str] = Field(None, max_length=100)
    wind_speed_kn: Optional[float] = Field(None, ge=0)
    wave_height_m: Optional[float] = Field(None, ge=0)

    def to_zone(self) -> HazardZone:
        return HazardZone(
            id=self.id,
            type=self.type,
            severity=self.severity,
            center_lat=self.center.lat,
            center_lon=self.center.lon,
            radius_nm=self.radius_nm,
            avoidance=self.avoidance,
            name=self.name or self.center.name,
            wind_speed_kn=self.wind_speed_kn,
            wave_height_m=self.wave_height_m,
        )
