"""
Cost scheme tests — closed-form level pricing and the cost value type.

Covers:
  - Geometric-series closed form against brute-force summation
  - Building / technology / colony / unit scheme variants
  - Empty ranges and invalid configuration
  - UpgradeCost arithmetic, metal value and points
"""

import math

import pytest
from pydantic import ValidationError

from constants import MAX_LEVEL, PointCategory
from cost_service import (
    ZERO_COST,
    CostScheme,
    RuleSetConfigError,
    SchemeKind,
    UpgradeCost,
    building_scheme,
    colony_scheme,
    compute_cost,
    level_factor,
    technology_scheme,
    unit_scheme,
)
from models import TradeRatios


METAL_MINE = building_scheme(60, 15, 0, 1.5)


# ── Closed form ──────────────────────────────────────────────────────────────

class TestGeometricSeries:
    @pytest.mark.parametrize("n", range(1, 21))
    def test_matches_brute_force_sum(self, n):
        cost = compute_cost(METAL_MINE, 0, n)
        brute_metal = math.ceil(sum(60 * 1.5 ** level for level in range(n)))
        brute_crystal = math.ceil(sum(15 * 1.5 ** level for level in range(n)))
        assert cost.metal == pytest.approx(brute_metal, abs=1)
        assert cost.crystal == pytest.approx(brute_crystal, abs=1)
        assert cost.deuterium == 0

    @pytest.mark.parametrize("level", [0, 1, 5, 40, 300])
    def test_same_level_costs_nothing(self, level):
        assert compute_cost(METAL_MINE, level, level).is_zero

    def test_post_level_zero_costs_nothing(self):
        assert compute_cost(METAL_MINE, 0, 0) == ZERO_COST

    def test_downgrade_costs_nothing(self):
        assert compute_cost(METAL_MINE, 12, 8).is_zero

    def test_single_level_metal_mine(self):
        cost = compute_cost(METAL_MINE, 10, 11)
        assert cost.metal == math.ceil(60 * 1.5 ** 10)
        assert cost.crystal == math.ceil(15 * 1.5 ** 10)
        assert cost.deuterium == 0

    def test_large_levels_are_finite(self):
        cost = compute_cost(technology_scheme(0, 800, 400, 2), 0, 300)
        assert math.isfinite(cost.crystal)
        assert cost.crystal > 0

    def test_highest_supported_level_is_finite(self):
        for scheme in (technology_scheme(0, 800, 400, 2), technology_scheme(0, 8000, 0, 3), colony_scheme(4000, 8000, 4000, 1.75)):
            cost = compute_cost(scheme, 0, MAX_LEVEL)
            assert math.isfinite(cost.total)

    def test_levels_above_maximum_are_rejected(self):
        with pytest.raises(ValueError):
            compute_cost(technology_scheme(0, 800, 400, 2), 0, 1100)

    def test_level_factor_is_range_sum(self):
        assert level_factor(2, 3, 6) == pytest.approx(2 ** 3 + 2 ** 4 + 2 ** 5)


# ── Variants ─────────────────────────────────────────────────────────────────

class TestSchemeVariants:
    def test_building_cost_scales_with_planets(self):
        single = compute_cost(METAL_MINE, 4, 7)
        triple = compute_cost(METAL_MINE, 4, 7, planets=3)
        factor = level_factor(1.5, 4, 7)
        assert single.metal == math.ceil(60 * factor)
        assert triple.metal == 3 * math.ceil(60 * factor)
        assert triple.crystal == 3 * math.ceil(15 * factor)

    def test_building_cost_is_economy(self):
        cost = compute_cost(METAL_MINE, 0, 1)
        assert cost.points_value(PointCategory.ECONOMY) == pytest.approx(0.075)
        assert cost.points_value(PointCategory.RESEARCH) == 0

    def test_technology_ignores_planets(self):
        plasma = technology_scheme(2000, 4000, 1000, 2)
        assert compute_cost(plasma, 0, 3, planets=5) == compute_cost(plasma, 0, 3)

    def test_technology_cost_is_research(self):
        cost = compute_cost(technology_scheme(2000, 4000, 1000, 2), 0, 1)
        assert cost.research == (2000.0, 4000.0, 1000.0)
        assert cost.economy == (0.0, 0.0, 0.0)

    def test_colony_remaps_levels_and_adds_building_value(self):
        scheme = colony_scheme(4000, 8000, 4000, 1.75)
        building_value = UpgradeCost.of(PointCategory.ECONOMY, 1000, 500, 0)
        cost = compute_cost(scheme, 1, 2, building_value=building_value)
        # Levels 1 -> 2 become research levels -1 -> 1
        assert cost.metal == 6286 + 1000
        assert cost.crystal == math.ceil(8000 * (1 / 1.75 + 1)) + 500
        assert cost.economy == (1000.0, 500.0, 0.0)

    def test_unit_cost_is_linear(self):
        scheme = unit_scheme(0, 2000, 500, PointCategory.ECONOMY)
        cost = compute_cost(scheme, 10, 15)
        assert (cost.metal, cost.crystal, cost.deuterium) == (0, 10000, 2500)

    def test_unit_defaults_to_military(self):
        cost = compute_cost(unit_scheme(3000, 1000, 0), 0, 2)
        assert cost.points_value(PointCategory.MILITARY) == pytest.approx(8.0)

    def test_exponent_one_is_rejected(self):
        with pytest.raises(RuleSetConfigError):
            building_scheme(10, 10, 10, 1)

    def test_unit_scheme_allows_flat_exponent(self):
        scheme = CostScheme(SchemeKind.UNIT, 1, 1, 1)
        assert scheme.exponent == 1


# ── Cost value ───────────────────────────────────────────────────────────────

class TestUpgradeCost:
    def test_addition_keeps_categories_apart(self):
        a = UpgradeCost.of(PointCategory.ECONOMY, 100, 50, 0)
        b = UpgradeCost.of(PointCategory.RESEARCH, 10, 20, 30)
        total = a + b
        assert (total.metal, total.crystal, total.deuterium) == (110, 70, 30)
        assert total.economy == (100.0, 50.0, 0.0)
        assert total.research == (10.0, 20.0, 30.0)

    def test_scalar_multiply_and_divide(self):
        cost = UpgradeCost.of(PointCategory.ECONOMY, 300, 150, 90)
        assert (cost * 2).metal == 600
        assert (2 * cost).crystal == 300
        assert (cost / 3).deuterium == pytest.approx(30)

    def test_metal_value_default_ratios(self):
        cost = UpgradeCost.of(PointCategory.ECONOMY, 100, 150, 100)
        assert cost.metal_value() == pytest.approx(600)

    def test_metal_value_custom_ratios(self):
        cost = UpgradeCost.of(PointCategory.ECONOMY, 0, 100, 100)
        ratios = TradeRatios(metal=3, crystal=2, deuterium=1)
        assert cost.metal_value(ratios) == pytest.approx(150 + 300)

    @pytest.mark.parametrize("field", ["metal", "crystal", "deuterium"])
    def test_trade_ratios_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            TradeRatios(**{field: 0})

    def test_to_dict(self):
        data = UpgradeCost.of(PointCategory.RESEARCH, 1000, 2000, 0).to_dict()
        assert data["metal"] == 1000
        assert data["points"]["research"] == pytest.approx(3.0)
        assert data["points"]["economy"] == 0
