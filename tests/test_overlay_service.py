"""
Upgrade overlay tests — stacked level deltas, paid-for detection,
non-destructive evaluation and the per-planet production cache.
"""

import pytest

from constants import BuildingType, ResearchType, UpgradeType
from cost_service import ZERO_COST
from overlay_service import UpgradeOverlay


# ── Levels ─────────────────────────────────────────────────────────────────

class TestOverlayLevels:
    def test_stacked_upgrades_on_same_target(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10})
        upgrades = [
            helpers.planned(1, "metal_mine", quantity=2),
            helpers.planned(2, "metal_mine", quantity=3),
            helpers.planned(3, "metal_mine", quantity=1),
        ]
        account = helpers.make_account(planet, planned_upgrades=upgrades)
        overlay = UpgradeOverlay(account)
        assert overlay.from_level(upgrades[0]) == 10
        assert overlay.to_level(upgrades[0]) == 12
        assert overlay.from_level(upgrades[2]) == 15
        assert overlay.to_level(upgrades[2]) == 16
        assert overlay.level(UpgradeType.METAL_MINE, 1) == 16

    def test_other_targets_do_not_stack(self, helpers):
        planets = [helpers.make_planet(1, buildings={"metal_mine": 10}), helpers.make_planet(2)]
        upgrades = [
            helpers.planned(1, "metal_mine", planet=2, quantity=4),
            helpers.planned(2, "crystal_mine", quantity=3),
            helpers.planned(3, "metal_mine", quantity=1, moon=True),
            helpers.planned(4, "metal_mine", quantity=1),
        ]
        account = helpers.make_account(*planets, planned_upgrades=upgrades)
        overlay = UpgradeOverlay(account)
        assert overlay.from_level(upgrades[3]) == 10
        assert overlay.level(UpgradeType.METAL_MINE, 2) == 4
        assert overlay.level(UpgradeType.METAL_MINE, 1, moon=True) == 1

    def test_research_is_account_wide(self, helpers):
        upgrades = [
            helpers.planned(1, "plasma", planet=1),
            helpers.planned(2, "plasma", planet=2, quantity=2),
        ]
        account = helpers.make_account(
            helpers.make_planet(1), helpers.make_planet(2), research={"plasma": 6}, planned_upgrades=upgrades,
        )
        overlay = UpgradeOverlay(account)
        assert overlay.from_level(upgrades[1]) == 7
        assert overlay.level(UpgradeType.PLASMA) == 9
        assert overlay.level(UpgradeType.PLASMA, 2) == 9

    def test_account_is_not_modified(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10})
        account = helpers.make_account(
            planet, research={"plasma": 2},
            planned_upgrades=[helpers.planned(1, "metal_mine", quantity=5), helpers.planned(2, "plasma")],
        )
        before = account.model_dump()
        overlay = UpgradeOverlay(account)
        overlay.level(UpgradeType.METAL_MINE, 1)
        overlay.full_production(_rules(), planet)
        assert account.model_dump() == before
        assert planet.building_level(BuildingType.METAL_MINE) == 10

    def test_with_and_without_upgrade(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10})
        account = helpers.make_account(planet)
        overlay = UpgradeOverlay(account)
        upgrade = helpers.planned(7, "metal_mine", quantity=3)
        overlay.with_upgrade(upgrade)
        assert overlay.level(UpgradeType.METAL_MINE, 1) == 13
        overlay.without_upgrade(upgrade)
        assert overlay.level(UpgradeType.METAL_MINE, 1) == 10
        assert overlay.delta(UpgradeType.METAL_MINE, 1) == 0

    def test_explicit_upgrade_list(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10})
        queued = [helpers.planned(1, "metal_mine", quantity=2), helpers.planned(2, "metal_mine", quantity=2)]
        account = helpers.make_account(planet, planned_upgrades=queued)
        single = UpgradeOverlay(account, [queued[1]])
        assert single.level(UpgradeType.METAL_MINE, 1) == 12

    def test_real_levels_come_from_the_account(self, helpers):
        planet = helpers.make_planet(
            1, buildings={"metal_mine": 7}, stationed={"crawler": 4}, moon={"buildings": {"lunar_base": 2}},
        )
        account = helpers.make_account(planet, helpers.make_planet(2), research={"plasma": 3})
        assert account.level(UpgradeType.METAL_MINE, planet) == 7
        assert account.level(UpgradeType.LUNAR_BASE, planet, moon=True) == 2
        assert account.level(UpgradeType.CRAWLER, planet) == 4
        assert account.level(UpgradeType.PLASMA) == 3
        assert account.level(UpgradeType.COLONY) == 2
        assert account.level(UpgradeType.METAL_MINE) == 0

    def test_colonies_add_planets(self, helpers):
        account = helpers.make_account(
            helpers.make_planet(1), helpers.make_planet(2),
            planned_upgrades=[helpers.planned(1, "colony", planet=None, quantity=2)],
        )
        overlay = UpgradeOverlay(account)
        assert overlay.level(UpgradeType.COLONY) == 4
        assert overlay.from_level(account.planned_upgrades[0]) == 2


# ── Paid-for detection & cost ──────────────────────────────────────────────

def _rules():
    import ruleset_service
    return ruleset_service.rule_set("7.1.0")


class TestPaidUpgrades:
    def test_building_under_construction_is_paid(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10}, current_upgrade="metal_mine")
        upgrades = [helpers.planned(1, "metal_mine"), helpers.planned(2, "metal_mine")]
        account = helpers.make_account(planet, planned_upgrades=upgrades)
        overlay = UpgradeOverlay(account)
        assert overlay.is_paid(upgrades[0])
        assert not overlay.is_paid(upgrades[1])
        assert overlay.upgrade_cost(_rules(), upgrades[0]) == ZERO_COST
        second = overlay.upgrade_cost(_rules(), upgrades[1])
        assert second == _rules().economy.upgrade_cost(account, planet, UpgradeType.METAL_MINE, 11, 12)

    def test_other_building_in_progress_is_not_paid(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10}, current_upgrade="solar_plant")
        upgrade = helpers.planned(1, "metal_mine")
        account = helpers.make_account(planet, planned_upgrades=[upgrade])
        assert not UpgradeOverlay(account).is_paid(upgrade)

    def test_research_in_progress_is_paid(self, helpers):
        upgrade = helpers.planned(1, "astrophysics", planet=None)
        account = helpers.make_account(helpers.make_planet(1), research={"astrophysics": 3}, planned_upgrades=[upgrade])
        account.research.current_upgrade = ResearchType.ASTROPHYSICS
        assert UpgradeOverlay(account).is_paid(upgrade)

    def test_moon_building_in_progress(self, helpers):
        planet = helpers.make_planet(1, moon={"buildings": {"lunar_base": 2}, "current_upgrade": "lunar_base"})
        moon_upgrade = helpers.planned(1, "lunar_base", moon=True)
        account = helpers.make_account(planet, planned_upgrades=[moon_upgrade])
        overlay = UpgradeOverlay(account)
        assert overlay.from_level(moon_upgrade) == 2
        assert overlay.is_paid(moon_upgrade)

    def test_cost_uses_stacked_level_range(self, helpers):
        planet = helpers.make_planet(1, buildings={"metal_mine": 10})
        upgrades = [helpers.planned(1, "metal_mine", quantity=2), helpers.planned(2, "metal_mine", quantity=3)]
        account = helpers.make_account(planet, planned_upgrades=upgrades)
        cost = UpgradeOverlay(account).upgrade_cost(_rules(), upgrades[1])
        assert cost == _rules().economy.upgrade_cost(account, planet, UpgradeType.METAL_MINE, 12, 15)

    def test_unknown_planet_costs_nothing(self, helpers):
        upgrade = helpers.planned(1, "metal_mine", planet=99)
        account = helpers.make_account(helpers.make_planet(1), planned_upgrades=[upgrade])
        assert UpgradeOverlay(account).upgrade_cost(_rules(), upgrade).is_zero


# ── Production cache ───────────────────────────────────────────────────────

class TestProductionCache:
    def _account(self, helpers, **fields):
        return helpers.make_account(helpers.developed_planet(1), helpers.developed_planet(2), **fields)

    def test_projected_production_includes_upgrade(self, rules, helpers):
        account = self._account(helpers, planned_upgrades=[helpers.planned(1, "metal_mine", quantity=1)])
        planet = account.planets[0]
        overlay = UpgradeOverlay(account)
        current = rules.economy.full_production(account, planet)
        projected = overlay.full_production(rules, planet)
        assert projected.metal.net > current.metal.net
        untouched = overlay.full_production(rules, account.planets[1])
        assert untouched.metal.net == pytest.approx(rules.economy.full_production(account, account.planets[1]).metal.net)

    def test_results_are_memoized(self, rules, helpers):
        account = self._account(helpers)
        overlay = UpgradeOverlay(account)
        first = overlay.full_production(rules, account.planets[0])
        assert overlay.full_production(rules, account.planets[0]) is first
        assert overlay.cache_info()["entries"] == 1

    def test_rule_sets_are_cached_apart(self, rules, latest_rules, helpers):
        account = self._account(helpers)
        overlay = UpgradeOverlay(account)
        overlay.full_production(rules, account.planets[0])
        overlay.full_production(latest_rules, account.planets[0])
        assert overlay.cache_info()["entries"] == 2

    def test_building_upgrade_invalidates_only_its_planet(self, rules, helpers):
        account = self._account(helpers)
        overlay = UpgradeOverlay(account)
        first = overlay.full_production(rules, account.planets[0])
        second = overlay.full_production(rules, account.planets[1])
        overlay.with_upgrade(helpers.planned(1, "metal_mine", planet=2))
        assert overlay.full_production(rules, account.planets[0]) is first
        assert overlay.full_production(rules, account.planets[1]) is not second

    def test_research_upgrade_invalidates_every_planet(self, rules, helpers):
        account = self._account(helpers)
        overlay = UpgradeOverlay(account)
        for planet in account.planets:
            overlay.full_production(rules, planet)
        overlay.with_upgrade(helpers.planned(1, "plasma", planet=None))
        assert overlay.cache_info()["entries"] == 0

    def test_explicit_invalidation(self, rules, helpers):
        account = self._account(helpers)
        overlay = UpgradeOverlay(account)
        for planet in account.planets:
            overlay.full_production(rules, planet)
        overlay.invalidate(1)
        assert overlay.cache_info()["entries"] == 1
        overlay.invalidate()
        assert overlay.cache_info()["entries"] == 0

    def test_caching_can_be_disabled(self, rules, helpers):
        account = self._account(helpers)
        overlay = UpgradeOverlay(account, cache_production=False)
        overlay.full_production(rules, account.planets[0])
        assert overlay.cache_info()["entries"] == 0
