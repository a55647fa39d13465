"""
Unit tests for the cubic speed/fuel model.

Covers:
- fuel rate identity at the reference speed and clamping
- asymmetric wind, additive current and directional wave resistance
- speed choice for a time budget and for arrival windows
- virtual arrival bounds
"""

from datetime import datetime, timedelta

import numpy as np
import pytest

from gulfnav.data.vessel_profiles import get_vessel_profile
from gulfnav.optimization.fuel_model import (
    ArrivalWindow,
    FuelModel,
    calculate_virtual_arrival,
    current_effect,
    find_optimal_speed,
    fuel_weight,
    optimize_for_arrival_window,
    wave_resistance,
    wind_effect,
)

NOW = datetime(2025, 3, 1, 6, 0, 0)


@pytest.fixture
def tug():
    return get_vessel_profile("tugboat")


@pytest.fixture
def tug_model(tug):
    return FuelModel.from_profile(tug)


@pytest.fixture
def default_model():
    return FuelModel.from_profile(get_vessel_profile("default"))


# ---------------------------------------------------------------------------
# §1 – Fuel rate
# ---------------------------------------------------------------------------
class TestFuelRate:

    @pytest.mark.parametrize("vessel_type", ["default", "tugboat", "dredger", "jack_up_barge"])
    def test_identity_at_base_speed(self, vessel_type):
        profile = get_vessel_profile(vessel_type)
        model = FuelModel.from_profile(profile)
        assert model.fuel_rate_at_speed(profile.cruising_speed_kn) == profile.fuel_rate_l_per_nm

    def test_quadratic_per_nm(self, tug_model):
        assert tug_model.fuel_rate_at_speed(15.0) == pytest.approx(25 * (15 / 12) ** 2)

    def test_clamped_to_envelope(self, tug_model):
        assert tug_model.fuel_rate_at_speed(30.0) == tug_model.fuel_rate_at_speed(16.0)
        assert tug_model.fuel_rate_at_speed(1.0) == tug_model.fuel_rate_at_speed(6.0)

    @pytest.mark.parametrize("fuel,time,expected", [
        (50, 50, 0.5),
        (0, 0, 0.5),
        (100, 0, 1.0),
        (150, -20, 1.0),
        (25, 75, 0.25),
    ])
    def test_fuel_weight(self, fuel, time, expected):
        assert fuel_weight(fuel, time) == pytest.approx(expected)


# ---------------------------------------------------------------------------
# §2 – Environmental effects
# ---------------------------------------------------------------------------
class TestEnvironmentalEffects:

    def test_headwind_costs_more_than_tailwind_helps(self):
        head = wind_effect(0.0, 20.0, 0.0)
        tail = wind_effect(0.0, 20.0, 180.0)
        assert head == pytest.approx(-2.0)
        assert tail == pytest.approx(0.6)

    def test_beam_wind_negligible(self):
        assert wind_effect(0.0, 20.0, 90.0) == pytest.approx(0.0, abs=1e-9)

    def test_current_projection(self):
        assert current_effect(90.0, 1.5, 90.0) == pytest.approx(1.5)
        assert current_effect(90.0, 1.5, 270.0) == pytest.approx(-1.5)
        assert current_effect(0.0, 1.0, 60.0) == pytest.approx(0.5)

    def test_wave_resistance_head_vs_following(self):
        head = wave_resistance(2.0, 0.0, 0.0)
        following = wave_resistance(2.0, 0.0, 180.0)
        assert head == pytest.approx(1 + 2.0 ** 1.5 * 0.08 * 1.3)
        assert following == pytest.approx(1 + 2.0 ** 1.5 * 0.08 * 0.7)
        assert head > following > 1.0

    def test_calm_sea_has_no_resistance(self):
        assert wave_resistance(0.0, 45.0, 200.0) == 1.0

    def test_tugboat_head_sea_penalty(self, tug_model):
        """3 m head seas add more than 15 % to the fuel rate."""
        rate = tug_model.fuel_rate_at_speed(12.0)
        adjusted = rate * wave_resistance(3.0, 0.0, 0.0)
        assert adjusted > rate * 1.15

    def test_vectorised(self):
        heights = np.array([0.0, 1.0, 2.0])
        result = wave_resistance(heights, 0.0, 0.0)
        assert result.shape == (3,)
        assert result[0] == 1.0
        assert np.all(np.diff(result) > 0)

    def test_scalars_return_float(self):
        assert isinstance(wind_effect(0.0, 10.0, 0.0), float)
        assert isinstance(current_effect(0.0, 1.0, 0.0), float)


# ---------------------------------------------------------------------------
# §3 – Speed for a time budget
# ---------------------------------------------------------------------------
class TestFindOptimalSpeed:

    def test_plenty_of_time_gives_min_speed(self, tug_model):
        rec = find_optimal_speed(60.0, 20.0, tug_model)
        assert rec.speed_kn == tug_model.min_speed_kn

    def test_tight_deadline_gives_max_speed(self, tug_model):
        rec = find_optimal_speed(100.0, 5.0, tug_model)
        assert rec.speed_kn == tug_model.max_speed_kn
        assert rec.reason == "Maximum speed - tight deadline"

    def test_no_time_left(self, tug_model):
        assert find_optimal_speed(100.0, 0.0, tug_model).speed_kn == tug_model.max_speed_kn

    def test_blend_never_exceeds_required(self, tug_model):
        rec = find_optimal_speed(100.0, 10.0, tug_model, fuel_priority=100, time_priority=0)
        assert tug_model.min_speed_kn <= rec.speed_kn <= 10.0
        assert rec.fuel_rate_l_per_nm == pytest.approx(tug_model.fuel_rate_at_speed(rec.speed_kn))


# ---------------------------------------------------------------------------
# §4 – Arrival window
# ---------------------------------------------------------------------------
class TestArrivalWindow:

    @pytest.mark.parametrize("fuel,time", [(50, 50), (100, 0), (0, 100), (0, 0), (150, -20)])
    def test_recommended_speed_within_window_bounds(self, tug_model, fuel, time):
        window = ArrivalWindow(earliest=NOW + timedelta(hours=10), latest=NOW + timedelta(hours=20))
        rec = optimize_for_arrival_window(150.0, NOW, window, tug_model, fuel, time)
        assert 7.5 <= rec.speed_kn <= 15.0
        assert rec.feasible
        assert window.earliest <= rec.arrival_time <= window.latest

    def test_balanced_priorities(self, tug_model):
        window = ArrivalWindow(earliest=NOW + timedelta(hours=10), latest=NOW + timedelta(hours=20))
        rec = optimize_for_arrival_window(150.0, NOW, window, tug_model)
        assert rec.speed_kn == pytest.approx(12.0)
        assert rec.reason == "Speed optimized for time efficiency within window"

    def test_preferred_time_blends(self, tug_model):
        window = ArrivalWindow(
            earliest=NOW + timedelta(hours=10),
            latest=NOW + timedelta(hours=20),
            preferred=NOW + timedelta(hours=15),
        )
        rec = optimize_for_arrival_window(150.0, NOW, window, tug_model)
        assert rec.speed_kn == pytest.approx(12.0 * 0.6 + 10.0 * 0.4)
        assert "preferred" in rec.reason

    def test_window_too_soon(self, tug_model):
        window = ArrivalWindow(earliest=NOW + timedelta(hours=2), latest=NOW + timedelta(hours=5))
        rec = optimize_for_arrival_window(150.0, NOW, window, tug_model)
        assert rec.speed_kn == tug_model.max_speed_kn
        assert not rec.feasible
        assert "cannot meet" in rec.reason

    def test_window_too_late(self, tug_model):
        window = ArrivalWindow(earliest=NOW + timedelta(hours=100), latest=NOW + timedelta(hours=120))
        rec = optimize_for_arrival_window(150.0, NOW, window, tug_model)
        assert rec.speed_kn == tug_model.min_speed_kn
        assert not rec.feasible
        assert "before window opens" in rec.reason

    def test_latest_already_passed(self, tug_model):
        window = ArrivalWindow(earliest=NOW - timedelta(hours=5), latest=NOW - timedelta(hours=1))
        rec = optimize_for_arrival_window(150.0, NOW, window, tug_model)
        assert rec.speed_kn == tug_model.max_speed_kn
        assert not rec.feasible


# ---------------------------------------------------------------------------
# §5 – Virtual arrival
# ---------------------------------------------------------------------------
class TestVirtualArrival:

    def test_slows_down_for_late_berth(self, default_model):
        profile = get_vessel_profile("default")
        result = calculate_virtual_arrival(100.0, 10.0, NOW, NOW + timedelta(hours=20), default_model, profile)

        assert result.recommended
        assert result.recommended_speed_kn == pytest.approx(5.0)
        assert result.waiting_time_reduced_hrs == pytest.approx(10.0)
        assert result.fuel_saved_l == pytest.approx(25 * 100 - 25 * 0.25 * 100)
        assert result.emissions_saved_kg == pytest.approx(result.fuel_saved_l * 2.68)
        assert result.adjusted_arrival == NOW + timedelta(hours=20)

    def test_never_below_min_speed(self, default_model):
        profile = get_vessel_profile("default")
        result = calculate_virtual_arrival(100.0, 10.0, NOW, NOW + timedelta(hours=200), default_model, profile)
        assert result.recommended_speed_kn == default_model.min_speed_kn

    def test_berth_ready_on_arrival(self, default_model):
        profile = get_vessel_profile("default")
        result = calculate_virtual_arrival(100.0, 10.0, NOW, NOW + timedelta(hours=5), default_model, profile)
        assert not result.recommended
        assert result.recommended_speed_kn == 10.0
        assert result.fuel_saved_l == 0.0

    @pytest.mark.parametrize("berth_hours", [1, 9, 10.5, 12, 15, 40, 500])
    def test_speed_bounds(self, default_model, berth_hours):
        profile = get_vessel_profile("default")
        result = calculate_virtual_arrival(
            100.0, 10.0, NOW, NOW + timedelta(hours=berth_hours), default_model, profile
        )
        assert default_model.min_speed_kn <= result.recommended_speed_kn <= 10.0
