"""
Rule-set registry — every game version's complete economy scheme bundle.

Versions are listed oldest first.  Each one starts from a copy of the previous
version's cost map and production list and replaces only the schemes whose
formulas changed in that release, so every version resolves every upgrade
type on its own and can be inspected or tested in isolation.

Select a default with the ECONOMY_RULE_SET environment variable; the newest
version is used otherwise.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from constants import BuildingType, PointCategory, ResourceType, UpgradeType
from cost_service import (
    CostScheme,
    RuleSetConfigError,
    building_scheme,
    colony_scheme,
    technology_scheme,
    unit_scheme,
)
from economy_service import EconomyRuleSet
from production_service import (
    CrawlerScheme,
    FusionScheme,
    MineScheme,
    ProductionScheme,
    SolarPlantScheme,
    SolarSatelliteScheme,
)

logger = logging.getLogger(__name__)

DEFAULT_RULE_SET_NAME = os.environ.get("ECONOMY_RULE_SET", "").strip()


class UnknownRuleSetError(KeyError):
    pass


@dataclass(frozen=True)
class RuleSet:
    name: str
    economy: EconomyRuleSet


# ── 7.1.0 (base) ─────────────────────────────────────────────────────────────

_ECONOMY = PointCategory.ECONOMY

_BASE_COSTS: Dict[UpgradeType, CostScheme] = {
    UpgradeType.METAL_MINE: building_scheme(60, 15, 0, 1.5),
    UpgradeType.CRYSTAL_MINE: building_scheme(48, 24, 0, 1.6),
    UpgradeType.DEUTERIUM_SYNTHESIZER: building_scheme(225, 75, 0, 1.5),
    UpgradeType.SOLAR_PLANT: building_scheme(75, 30, 0, 1.5),
    UpgradeType.FUSION_REACTOR: building_scheme(900, 360, 180, 1.8),
    UpgradeType.METAL_STORAGE: building_scheme(1000, 0, 0, 2),
    UpgradeType.CRYSTAL_STORAGE: building_scheme(1000, 500, 0, 2),
    UpgradeType.DEUTERIUM_STORAGE: building_scheme(1000, 1000, 0, 2),
    UpgradeType.ROBOTICS_FACTORY: building_scheme(400, 120, 200, 2),
    UpgradeType.SHIPYARD: building_scheme(400, 200, 100, 2),
    UpgradeType.RESEARCH_LAB: building_scheme(200, 400, 200, 2),
    UpgradeType.ALLIANCE_DEPOT: building_scheme(20000, 40000, 0, 2),
    UpgradeType.MISSILE_SILO: building_scheme(20000, 20000, 1000, 2),
    UpgradeType.NANITE_FACTORY: building_scheme(1000000, 500000, 100000, 2),
    UpgradeType.TERRAFORMER: building_scheme(0, 50000, 100000, 2),
    UpgradeType.SPACE_DOCK: building_scheme(200, 0, 50, 5),
    UpgradeType.LUNAR_BASE: building_scheme(20000, 40000, 20000, 2),
    UpgradeType.SENSOR_PHALANX: building_scheme(20000, 40000, 20000, 2),
    UpgradeType.JUMP_GATE: building_scheme(2000000, 4000000, 2000000, 2),

    UpgradeType.ENERGY: technology_scheme(0, 800, 400, 2),
    UpgradeType.LASER: technology_scheme(200, 100, 0, 2),
    UpgradeType.ION: technology_scheme(1000, 300, 100, 2),
    UpgradeType.HYPERSPACE: technology_scheme(0, 4000, 2000, 2),
    UpgradeType.PLASMA: technology_scheme(2000, 4000, 1000, 2),
    UpgradeType.COMBUSTION_DRIVE: technology_scheme(400, 0, 600, 2),
    UpgradeType.IMPULSE_DRIVE: technology_scheme(2000, 4000, 600, 2),
    UpgradeType.HYPERSPACE_DRIVE: technology_scheme(10000, 20000, 6000, 2),
    UpgradeType.ESPIONAGE: technology_scheme(200, 1000, 200, 2),
    UpgradeType.COMPUTER: technology_scheme(0, 400, 600, 2),
    UpgradeType.ASTROPHYSICS: technology_scheme(4000, 8000, 4000, 1.75),
    UpgradeType.INTERGALACTIC_RESEARCH_NETWORK: technology_scheme(240000, 400000, 160000, 2),
    UpgradeType.GRAVITON: technology_scheme(0, 0, 0, 3),
    UpgradeType.WEAPONS: technology_scheme(800, 200, 0, 2),
    UpgradeType.SHIELDING: technology_scheme(200, 600, 0, 2),
    UpgradeType.ARMOR: technology_scheme(1000, 0, 0, 2),
    UpgradeType.COLONY: colony_scheme(4000, 8000, 4000, 1.75),

    UpgradeType.SMALL_CARGO: unit_scheme(2000, 2000, 0),
    UpgradeType.LARGE_CARGO: unit_scheme(6000, 6000, 0),
    UpgradeType.LIGHT_FIGHTER: unit_scheme(3000, 1000, 0),
    UpgradeType.HEAVY_FIGHTER: unit_scheme(6000, 4000, 0),
    UpgradeType.CRUISER: unit_scheme(20000, 7000, 2000),
    UpgradeType.BATTLESHIP: unit_scheme(45000, 15000, 0),
    UpgradeType.BATTLECRUISER: unit_scheme(30000, 40000, 15000),
    UpgradeType.BOMBER: unit_scheme(50000, 25000, 15000),
    UpgradeType.DESTROYER: unit_scheme(60000, 50000, 15000),
    UpgradeType.DEATHSTAR: unit_scheme(5000000, 4000000, 1000000),
    UpgradeType.REAPER: unit_scheme(85000, 55000, 20000),
    UpgradeType.PATHFINDER: unit_scheme(8000, 15000, 8000),
    UpgradeType.COLONY_SHIP: unit_scheme(10000, 20000, 10000),
    UpgradeType.RECYCLER: unit_scheme(10000, 6000, 2000),
    UpgradeType.ESPIONAGE_PROBE: unit_scheme(0, 1000, 0),
    UpgradeType.SOLAR_SATELLITE: unit_scheme(0, 2000, 500, _ECONOMY),
    UpgradeType.CRAWLER: unit_scheme(2000, 2000, 1000, _ECONOMY),
    UpgradeType.ROCKET_LAUNCHER: unit_scheme(2000, 0, 0),
    UpgradeType.LIGHT_LASER: unit_scheme(1500, 500, 0),
    UpgradeType.HEAVY_LASER: unit_scheme(6000, 2000, 0),
    UpgradeType.GAUSS_CANNON: unit_scheme(20000, 15000, 2000),
    UpgradeType.ION_CANNON: unit_scheme(5000, 3000, 0),
    UpgradeType.PLASMA_TURRET: unit_scheme(50000, 50000, 30000),
    UpgradeType.SMALL_SHIELD_DOME: unit_scheme(10000, 10000, 0),
    UpgradeType.LARGE_SHIELD_DOME: unit_scheme(50000, 50000, 0),
    UpgradeType.ANTI_BALLISTIC_MISSILE: unit_scheme(8000, 0, 2000),
    UpgradeType.INTERPLANETARY_MISSILE: unit_scheme(12500, 2500, 10000),
}

_BASE_PRODUCTION: List[ProductionScheme] = [
    MineScheme(
        key=BuildingType.METAL_MINE.value,
        resource=ResourceType.METAL,
        building=BuildingType.METAL_MINE,
        base_production=30,
        production_factor=30,
        plasma_bonus=1.0,
        energy_mult=10,
    ),
    MineScheme(
        key=BuildingType.CRYSTAL_MINE.value,
        resource=ResourceType.CRYSTAL,
        building=BuildingType.CRYSTAL_MINE,
        base_production=15,
        production_factor=20,
        plasma_bonus=0.66,
        energy_mult=10,
    ),
    MineScheme(
        key=BuildingType.DEUTERIUM_SYNTHESIZER.value,
        resource=ResourceType.DEUTERIUM,
        building=BuildingType.DEUTERIUM_SYNTHESIZER,
        base_production=0,
        production_factor=10,
        plasma_bonus=0.33,
        energy_mult=20,
        temp_offset=1.36,
        temp_mult=0.004,
    ),
    # Crawlers scale the mine terms above, so they must come after them
    CrawlerScheme(),
    SolarPlantScheme(),
    FusionScheme(),
    SolarSatelliteScheme(),
]


# ── Version deltas ───────────────────────────────────────────────────────────
# (name, replaced cost schemes, replaced/added production schemes by key)

VersionDelta = Tuple[str, Dict[UpgradeType, CostScheme], Dict[str, ProductionScheme]]

_VERSION_DELTAS: List[VersionDelta] = [
    ("7.1.0", {}, {}),
    (
        "7.5.0",
        {},
        {
            # Synthesizer yield follows the hottest point of the planet
            BuildingType.DEUTERIUM_SYNTHESIZER.value: MineScheme(
                key=BuildingType.DEUTERIUM_SYNTHESIZER.value,
                resource=ResourceType.DEUTERIUM,
                building=BuildingType.DEUTERIUM_SYNTHESIZER,
                base_production=0,
                production_factor=10,
                plasma_bonus=0.33,
                energy_mult=20,
                temp_offset=1.44,
                temp_mult=0.004,
                use_max_temperature=True,
            ),
            # Geologist raises the crawler limit by 10%
            "crawler": CrawlerScheme(geologist_cap_bonus=0.1),
        },
    ),
]


def _apply_delta(
    costs: Dict[UpgradeType, CostScheme],
    production: Sequence[ProductionScheme],
    delta: VersionDelta,
) -> Tuple[Dict[UpgradeType, CostScheme], List[ProductionScheme]]:
    _, cost_overrides, production_overrides = delta
    new_costs = dict(costs)
    new_costs.update(cost_overrides)
    keys = {s.key for s in production}
    new_production = [production_overrides.get(s.key, s) for s in production]
    new_production.extend(s for k, s in production_overrides.items() if k not in keys)
    return new_costs, new_production


def build_rule_sets(deltas: Sequence[VersionDelta] = tuple(_VERSION_DELTAS)) -> Tuple[RuleSet, ...]:
    """Fold version deltas over the base bundle, oldest first."""
    costs: Dict[UpgradeType, CostScheme] = dict(_BASE_COSTS)
    production: List[ProductionScheme] = list(_BASE_PRODUCTION)
    result: List[RuleSet] = []
    seen = set()
    for delta in deltas:
        name = delta[0]
        if name in seen:
            raise RuleSetConfigError(f"Duplicate rule set version: {name}")
        seen.add(name)
        costs, production = _apply_delta(costs, production, delta)
        result.append(RuleSet(name=name, economy=EconomyRuleSet(costs, production)))
        logger.debug(
            "Built rule set %s (%d cost overrides, %d production overrides)",
            name, len(delta[1]), len(delta[2]),
        )
    return tuple(result)


@lru_cache(maxsize=1)
def rule_sets() -> Tuple[RuleSet, ...]:
    return build_rule_sets()


def rule_set_names() -> List[str]:
    return [rs.name for rs in rule_sets()]


def rule_set(name: str) -> RuleSet:
    for rs in rule_sets():
        if rs.name == name:
            return rs
    raise UnknownRuleSetError(f"Unknown rule set: {name}")


def latest_rule_set() -> RuleSet:
    return rule_sets()[-1]


def default_rule_set() -> RuleSet:
    if DEFAULT_RULE_SET_NAME:
        return rule_set(DEFAULT_RULE_SET_NAME)
    return latest_rule_set()


def resolve_rule_set(name: Optional[str]) -> RuleSet:
    """Rule set by name, or the default when no name is given."""
    return rule_set(name) if name else default_rule_set()
