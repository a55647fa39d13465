"""
Speed/fuel model for small marine vessels.

Implements:
- Cubic power law: P ∝ V³ and time ∝ D/V, so fuel per nm ∝ V²
- Wind, current and wave corrections to effective speed and fuel rate
- Speed choice for a time budget and for an arrival window
- Virtual arrival: slow down instead of waiting at anchor for a berth

Direction conventions: wind and waves are given as the direction they
come FROM, currents as the direction they flow TOWARDS. The environmental
functions accept scalars or numpy arrays.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

import numpy as np

from gulfnav.data.vessel_profiles import VesselProfile

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

# Fraction of cruising speed considered most economical when blending
ECONOMICAL_SPEED_FRACTION = 0.7

# Wind effect factors (kn of speed per kn of wind)
HEADWIND_FACTOR = 0.1
TAILWIND_FACTOR = 0.03

# Wave resistance: 1 + Hs^1.5 × WAVE_COEFF × (1 − cos(rel) × WAVE_ANGLE_WEIGHT)
WAVE_COEFF = 0.08
WAVE_ANGLE_WEIGHT = 0.3


@dataclass(frozen=True)
class FuelModel:
    """Reference point and speed envelope for the cubic fuel law."""
    base_speed_kn: float
    base_fuel_rate_l_per_nm: float
    min_speed_kn: float
    max_speed_kn: float

    @classmethod
    def from_profile(cls, profile: VesselProfile) -> "FuelModel":
        return cls(
            base_speed_kn=profile.cruising_speed_kn,
            base_fuel_rate_l_per_nm=profile.fuel_rate_l_per_nm,
            min_speed_kn=profile.min_speed_kn,
            max_speed_kn=profile.max_speed_kn,
        )

    def clamp(self, speed_kn: float) -> float:
        return max(self.min_speed_kn, min(self.max_speed_kn, speed_kn))

    def fuel_rate_at_speed(self, speed_kn: float) -> float:
        """
        Fuel rate (L/nm) at a speed.

        Speed is clamped to the envelope first, so the rate at the base
        speed equals the base rate exactly.
        """
        speed_ratio = self.clamp(speed_kn) / self.base_speed_kn
        return self.base_fuel_rate_l_per_nm * speed_ratio ** 2


@dataclass
class SpeedRecommendation:
    """A chosen speed with its fuel rate and the reason it was chosen."""
    speed_kn: float
    fuel_rate_l_per_nm: float
    reason: str
    arrival_time: Optional[datetime] = None
    feasible: bool = True  # False when the constraint cannot be met


@dataclass
class ArrivalWindow:
    """Acceptable arrival interval, with an optional preferred time."""
    earliest: datetime
    latest: datetime
    preferred: Optional[datetime] = None


@dataclass
class VirtualArrivalResult:
    """Outcome of a just-in-time arrival check."""
    recommended: bool
    original_arrival: datetime
    adjusted_arrival: datetime
    original_speed_kn: float
    recommended_speed_kn: float
    fuel_saved_l: float
    emissions_saved_kg: float  # CO2
    waiting_time_reduced_hrs: float
    reason: str


def clamp_priority(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def fuel_weight(fuel_priority: float, time_priority: float) -> float:
    """Share of the fuel priority in fuel+time, after clamping both to [0, 100]."""
    fuel = clamp_priority(fuel_priority)
    time = clamp_priority(time_priority)
    total = fuel + time
    if total == 0:
        return 0.5
    return fuel / total


def _hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def _speed_for(distance_nm: float, hours: float) -> float:
    """Speed needed to cover distance in hours; inf when no time is left."""
    if hours <= 0:
        return float('inf')
    return distance_nm / hours


def _relative_angle(a: ArrayLike, b: ArrayLike) -> ArrayLike:
    angle = np.abs(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)) % 360.0
    return np.where(angle > 180.0, 360.0 - angle, angle)


# ---------------------------------------------------------------------------
# Environmental effects
# ---------------------------------------------------------------------------

def wind_effect(heading_deg: ArrayLike, wind_speed_kn: ArrayLike, wind_from_deg: ArrayLike) -> ArrayLike:
    """
    Speed change (kn) from wind.

    Asymmetric: a headwind costs up to 0.1 kn per kn of wind, a tailwind
    helps by at most 0.03 kn per kn.
    """
    wind_towards = (np.asarray(wind_from_deg, dtype=float) + 180.0) % 360.0
    projection = np.cos(np.radians(_relative_angle(heading_deg, wind_towards)))
    factor = np.where(projection < 0, HEADWIND_FACTOR, TAILWIND_FACTOR)
    result = projection * np.asarray(wind_speed_kn, dtype=float) * factor
    return float(result) if np.ndim(result) == 0 else result


def current_effect(heading_deg: ArrayLike, current_speed_kn: ArrayLike, current_towards_deg: ArrayLike) -> ArrayLike:
    """Speed change (kn) from current: its projection on the heading."""
    projection = np.cos(np.radians(_relative_angle(heading_deg, current_towards_deg)))
    result = projection * np.asarray(current_speed_kn, dtype=float)
    return float(result) if np.ndim(result) == 0 else result


def wave_resistance(wave_height_m: ArrayLike, heading_deg: ArrayLike, wave_from_deg: ArrayLike) -> ArrayLike:
    """
    Fuel multiplier (≥ 1) for sea state.

    Head seas give an angle effect of 1.3, following seas 0.7.
    """
    wave_towards = (np.asarray(wave_from_deg, dtype=float) + 180.0) % 360.0
    relative = _relative_angle(heading_deg, wave_towards)
    angle_effect = 1.0 - np.cos(np.radians(relative)) * WAVE_ANGLE_WEIGHT
    height = np.maximum(np.asarray(wave_height_m, dtype=float), 0.0)
    result = 1.0 + height ** 1.5 * WAVE_COEFF * angle_effect
    return float(result) if np.ndim(result) == 0 else result


# ---------------------------------------------------------------------------
# Speed selection
# ---------------------------------------------------------------------------

def find_optimal_speed(
    distance_nm: float,
    available_time_hrs: float,
    model: FuelModel,
    fuel_priority: float = 50.0,
    time_priority: float = 50.0,
) -> SpeedRecommendation:
    """
    Cheapest speed that still meets a time budget, weighted by priorities.

    Standalone utility for callers that plan a single leg against a time
    budget; the route and segment optimizers choose speeds by their own
    rules and do not call it.
    """
    required = _speed_for(distance_nm, available_time_hrs)

    if required <= model.min_speed_kn:
        return SpeedRecommendation(
            speed_kn=model.min_speed_kn,
            fuel_rate_l_per_nm=model.fuel_rate_at_speed(model.min_speed_kn),
            reason="Slow steaming - maximum fuel efficiency",
        )

    if required >= model.max_speed_kn:
        return SpeedRecommendation(
            speed_kn=model.max_speed_kn,
            fuel_rate_l_per_nm=model.fuel_rate_at_speed(model.max_speed_kn),
            reason="Maximum speed - tight deadline",
        )

    weight = fuel_weight(fuel_priority, time_priority)
    economical = model.base_speed_kn * ECONOMICAL_SPEED_FRACTION
    blended = required * (1 - weight) + economical * weight
    speed = max(model.min_speed_kn, min(required, blended))

    return SpeedRecommendation(
        speed_kn=speed,
        fuel_rate_l_per_nm=model.fuel_rate_at_speed(speed),
        reason="Optimized slow steaming" if speed < model.base_speed_kn else "Balanced speed optimization",
    )


def optimize_for_arrival_window(
    distance_nm: float,
    departure_time: datetime,
    window: ArrivalWindow,
    model: FuelModel,
    fuel_priority: float = 50.0,
    time_priority: float = 50.0,
) -> SpeedRecommendation:
    """
    Speed that lands inside [earliest, latest] for the least fuel.

    Infeasible windows never raise: the nearest envelope speed is returned
    with a reason naming the shortfall.
    """
    slowest = _speed_for(distance_nm, _hours_between(departure_time, window.latest))
    fastest = _speed_for(distance_nm, _hours_between(departure_time, window.earliest))

    min_viable = max(model.min_speed_kn, slowest)
    max_viable = min(model.max_speed_kn, fastest)

    def _recommend(speed: float, reason: str, feasible: bool = True) -> SpeedRecommendation:
        return SpeedRecommendation(
            speed_kn=speed,
            fuel_rate_l_per_nm=model.fuel_rate_at_speed(speed),
            reason=reason,
            arrival_time=departure_time + timedelta(hours=distance_nm / speed),
            feasible=feasible,
        )

    if min_viable > model.max_speed_kn:
        logger.info(f"Arrival window infeasible: needs {slowest:.1f} kn, max is {model.max_speed_kn} kn")
        return _recommend(model.max_speed_kn, "Maximum speed - cannot meet earliest arrival window", feasible=False)

    if max_viable < model.min_speed_kn:
        logger.info(f"Arrival window opens late: {fastest:.1f} kn is below min {model.min_speed_kn} kn")
        return _recommend(model.min_speed_kn, "Minimum speed - will arrive before window opens", feasible=False)

    weight = fuel_weight(fuel_priority, time_priority)
    optimal = min_viable + (max_viable - min_viable) * (1 - weight * 0.8)

    if window.preferred is not None:
        preferred_speed = _speed_for(distance_nm, _hours_between(departure_time, window.preferred))
        blended = optimal * 0.6 + preferred_speed * 0.4
        speed = max(min_viable, min(max_viable, blended))
        return _recommend(speed, "Optimized for preferred arrival time with fuel efficiency")

    focus = "fuel economy" if weight > 0.6 else "time efficiency"
    return _recommend(optimal, f"Speed optimized for {focus} within window")


def calculate_virtual_arrival(
    distance_nm: float,
    normal_speed_kn: float,
    current_time: datetime,
    berth_available_time: datetime,
    model: FuelModel,
    profile: VesselProfile,
) -> VirtualArrivalResult:
    """
    Just-in-time arrival check for a berth that is not ready yet.

    The recommended speed is never below the model minimum and never
    above the normal speed.
    """
    normal_arrival = current_time + timedelta(hours=distance_nm / normal_speed_kn)
    hours_until_berth = _hours_between(current_time, berth_available_time)

    if normal_arrival < berth_available_time and hours_until_berth > 0:
        adjusted_speed = max(model.min_speed_kn, distance_nm / hours_until_berth)

        if adjusted_speed < normal_speed_kn:
            normal_fuel = model.fuel_rate_at_speed(normal_speed_kn) * distance_nm
            slow_fuel = model.fuel_rate_at_speed(adjusted_speed) * distance_nm
            fuel_saved = normal_fuel - slow_fuel
            waiting = _hours_between(normal_arrival, berth_available_time)

            return VirtualArrivalResult(
                recommended=True,
                original_arrival=normal_arrival,
                adjusted_arrival=berth_available_time,
                original_speed_kn=normal_speed_kn,
                recommended_speed_kn=adjusted_speed,
                fuel_saved_l=fuel_saved,
                emissions_saved_kg=fuel_saved * profile.emission_factors.co2_per_l,
                waiting_time_reduced_hrs=max(0.0, waiting),
                reason=(
                    f"Reduce speed from {normal_speed_kn:.1f} to {adjusted_speed:.1f} "
                    f"knots to arrive just-in-time"
                ),
            )

    return VirtualArrivalResult(
        recommended=False,
        original_arrival=normal_arrival,
        adjusted_arrival=normal_arrival,
        original_speed_kn=normal_speed_kn,
        recommended_speed_kn=normal_speed_kn,
        fuel_saved_l=0.0,
        emissions_saved_kg=0.0,
        waiting_time_reduced_hrs=0.0,
        reason="Standard speed recommended - berth will be available on arrival",
    )
