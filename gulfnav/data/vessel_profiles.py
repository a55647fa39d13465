"""
Fuel and emissions profiles for the marine fleet types we plan for.

Profiles are immutable lookup values keyed by vessel type string; unknown
types fall back to the ``default`` profile.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmissionFactors:
    """Exhaust emissions per litre of marine diesel burned (kg/L)."""
    co2_per_l: float = 2.68
    nox_per_l: float = 0.046
    sox_per_l: float = 0.004


@dataclass(frozen=True)
class VesselProfile:
    """Speed envelope and fuel characteristics of a vessel type."""
    type: str
    cruising_speed_kn: float
    max_speed_kn: float
    fuel_rate_l_per_nm: float  # at cruising speed
    fuel_cost_per_l: float = 0.75  # USD
    emission_factors: EmissionFactors = field(default_factory=EmissionFactors)

    @property
    def min_speed_kn(self) -> float:
        """Lowest sustainable speed: half of cruising."""
        return self.cruising_speed_kn * 0.5

    def with_speed(self, speed_kn: float) -> "VesselProfile":
        """Copy of this profile cruising at a different speed."""
        return replace(self, cruising_speed_kn=speed_kn)


VESSEL_PROFILES: Dict[str, VesselProfile] = {
    p.type: p for p in [
        VesselProfile("dredger", 8, 12, 45),  # heavy
        VesselProfile("tugboat", 12, 16, 25),
        VesselProfile("supply_vessel", 14, 18, 30),
        VesselProfile("crane_barge", 6, 8, 35),
        VesselProfile("survey_vessel", 10, 14, 18),
        VesselProfile("pipelay_barge", 5, 7, 50),
        VesselProfile("jack_up_barge", 4, 6, 40),
        VesselProfile("accommodation_barge", 6, 8, 28),
        VesselProfile("work_barge", 7, 10, 32),
        VesselProfile("default", 10, 14, 25),
    ]
}

DEFAULT_VESSEL_TYPE = "default"


def get_vessel_profile(vessel_type: str) -> VesselProfile:
    """Look up a profile by type, falling back to the default profile."""
    profile = VESSEL_PROFILES.get(vessel_type)
    if profile is None:
        logger.debug(f"Unknown vessel type {vessel_type!r}, using default profile")
        return VESSEL_PROFILES[DEFAULT_VESSEL_TYPE]
    return profile
