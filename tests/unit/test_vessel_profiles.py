"""Unit tests for vessel profile lookup."""

import pytest

from gulfnav.data.vessel_profiles import (
    DEFAULT_VESSEL_TYPE,
    VESSEL_PROFILES,
    get_vessel_profile,
)


class TestVesselProfiles:

    def test_all_fleet_types_present(self):
        assert set(VESSEL_PROFILES) == {
            "dredger", "tugboat", "supply_vessel", "crane_barge", "survey_vessel",
            "pipelay_barge", "jack_up_barge", "accommodation_barge", "work_barge", "default",
        }

    def test_tugboat_envelope(self):
        tug = get_vessel_profile("tugboat")
        assert tug.cruising_speed_kn == 12
        assert tug.max_speed_kn == 16
        assert tug.fuel_rate_l_per_nm == 25
        assert tug.min_speed_kn == 6

    def test_unknown_type_falls_back(self):
        assert get_vessel_profile("submarine") is VESSEL_PROFILES[DEFAULT_VESSEL_TYPE]

    @pytest.mark.parametrize("vessel_type", sorted(VESSEL_PROFILES))
    def test_envelope_is_ordered(self, vessel_type):
        p = get_vessel_profile(vessel_type)
        assert 0 < p.min_speed_kn < p.cruising_speed_kn <= p.max_speed_kn

    def test_emission_factors(self):
        factors = get_vessel_profile("default").emission_factors
        assert factors.co2_per_l == 2.68
        assert factors.nox_per_l == 0.046
        assert factors.sox_per_l == 0.004

    def test_with_speed_copies(self):
        p = get_vessel_profile("default")
        faster = p.with_speed(13.0)
        assert faster.cruising_speed_kn == 13.0
        assert p.cruising_speed_kn == 10
        assert faster.fuel_rate_l_per_nm == p.fuel_rate_l_per_nm
