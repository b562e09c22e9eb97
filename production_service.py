"""
Production schemes — hourly resource output and energy draw of a planet.

Each scheme is a small frozen record tagged with its ProductionKind.  Two
dispatch functions evaluate any scheme:

  - add_production(scheme, state, ledger, energy_factor) adds signed resource
    terms to a ledger, so several schemes compose on one planet
  - energy_delta(scheme, state) returns the scheme's signed energy balance
    (positive = produces, negative = consumes)

Energy is evaluated first and never throttled; the resulting energy factor is
then fed identically into every resource scheme.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from constants import (
    COMMANDING_STAFF_BONUS,
    ENGINEER_ENERGY_BONUS,
    GEOLOGIST_PRODUCTION_BONUS,
    MINES,
    AccountClass,
    BuildingType,
    PointCategory,
    ResearchType,
    ResourceType,
    ShipyardItemType,
    UpgradeType,
)
from cost_service import UpgradeCost
from models import Account, Planet


# ── Planet state accessor ────────────────────────────────────────────────────


class EconomyState:
    """
    Read-only view of one planet of an account.

    When an overlay is given, its level deltas are folded into every level
    read; the account itself is never touched.
    """

    def __init__(self, account: Account, planet: Planet, overlay: Any = None):
        self.account = account
        self.planet = planet
        self.overlay = overlay

    def _delta(self, upgrade_type: UpgradeType, planet_id: Optional[int]) -> int:
        if self.overlay is None:
            return 0
        return self.overlay.delta(upgrade_type, planet_id)

    def building_level(self, building: BuildingType) -> int:
        return self.planet.building_level(building) + self._delta(UpgradeType.of(building), self.planet.id)

    def stationed(self, item: ShipyardItemType) -> int:
        return self.planet.stationed_count(item) + self._delta(UpgradeType.of(item), self.planet.id)

    def research_level(self, research: ResearchType) -> int:
        return self.account.research.level(research) + self._delta(UpgradeType.of(research), None)

    def utilization(self, facility: str) -> float:
        return getattr(self.planet, f"{facility}_utilization") / 100.0

    def item_bonus(self, resource: ResourceType) -> float:
        return getattr(self.planet, f"{resource.value}_bonus") / 100.0

    @property
    def economy_speed(self) -> int:
        return self.account.universe.economy_speed

    @property
    def is_collector(self) -> bool:
        return self.account.account_class is AccountClass.COLLECTOR

    @property
    def average_temperature(self) -> float:
        return self.planet.average_temperature

    @property
    def max_temperature(self) -> int:
        return self.planet.max_temperature


# ── Results ──────────────────────────────────────────────────────────────────


@dataclass
class Production:
    """One resource's hourly balance, broken down by contributing source."""

    by_source: Dict[str, float] = field(default_factory=dict)
    total_production: float = 0.0
    total_consumption: float = 0.0

    @property
    def net(self) -> float:
        return self.total_production - self.total_consumption

    def to_dict(self) -> Dict[str, Any]:
        return {
            "by_source": dict(self.by_source),
            "total_production": self.total_production,
            "total_consumption": self.total_consumption,
            "net": self.net,
        }


@dataclass
class FullProduction:
    energy: Production
    metal: Production
    crystal: Production
    deuterium: Production
    energy_factor: float

    def get(self, resource: ResourceType) -> Production:
        return getattr(self, resource.value)

    def as_cost(self) -> UpgradeCost:
        """Hourly net output expressed as a resource amount."""
        return UpgradeCost.of(PointCategory.ECONOMY, self.metal.net, self.crystal.net, self.deuterium.net)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "energy_factor": self.energy_factor,
            **{r.value: self.get(r).to_dict() for r in ResourceType},
        }


class ProductionLedger:
    """Accumulates signed per-source terms for every resource."""

    def __init__(self) -> None:
        self._terms: Dict[ResourceType, Dict[str, float]] = {r: {} for r in ResourceType}

    def add(self, resource: ResourceType, source: str, amount: float) -> None:
        terms = self._terms[resource]
        terms[source] = terms.get(source, 0.0) + amount

    def term(self, resource: ResourceType, source: str) -> float:
        return self._terms[resource].get(source, 0.0)

    def production(self, resource: ResourceType) -> Production:
        terms = self._terms[resource]
        return Production(
            by_source=dict(terms),
            total_production=sum(v for v in terms.values() if v > 0),
            total_consumption=-sum(v for v in terms.values() if v < 0),
        )


def energy_factor(total_production: float, total_consumption: float) -> float:
    """Share of the energy demand that is met, in [0, 1].  A powerless planet gets 0."""
    if total_production <= 0:
        return 0.0
    if total_consumption <= 0:
        return 1.0
    return min(1.0, total_production / total_consumption)


# ── Schemes ──────────────────────────────────────────────────────────────────


class ProductionKind(str, Enum):
    MINE = "mine"
    SOLAR_PLANT = "solar_plant"
    FUSION = "fusion"
    SOLAR_SATELLITE = "solar_satellite"
    CRAWLER = "crawler"


@dataclass(frozen=True)
class MineScheme:
    key: str
    resource: ResourceType
    building: BuildingType
    base_production: float
    production_factor: float
    plasma_bonus: float
    energy_mult: float
    temp_offset: float = 0.0
    temp_mult: float = 0.0
    use_max_temperature: bool = False
    kind: ProductionKind = field(default=ProductionKind.MINE, init=False)

    @property
    def facility(self) -> str:
        return self.resource.value


@dataclass(frozen=True)
class SolarPlantScheme:
    key: str = BuildingType.SOLAR_PLANT.value
    energy_factor: float = 20.0
    kind: ProductionKind = field(default=ProductionKind.SOLAR_PLANT, init=False)


@dataclass(frozen=True)
class FusionScheme:
    key: str = BuildingType.FUSION_REACTOR.value
    deuterium_factor: float = 10.0
    energy_factor: float = 30.0
    energy_base: float = 1.05
    energy_tech_step: float = 0.01
    kind: ProductionKind = field(default=ProductionKind.FUSION, init=False)


@dataclass(frozen=True)
class SolarSatelliteScheme:
    key: str = ShipyardItemType.SOLAR_SATELLITE.value
    temp_offset: float = 140.0
    temp_divisor: float = 6.0
    kind: ProductionKind = field(default=ProductionKind.SOLAR_SATELLITE, init=False)


@dataclass(frozen=True)
class CrawlerScheme:
    key: str = ShipyardItemType.CRAWLER.value
    bonus_per_unit: float = 0.0002
    collector_multiplier: float = 1.5
    max_bonus: float = 0.5
    energy_per_unit: float = 50.0
    geologist_cap_bonus: float = 0.0
    kind: ProductionKind = field(default=ProductionKind.CRAWLER, init=False)


ProductionScheme = Union[MineScheme, SolarPlantScheme, FusionScheme, SolarSatelliteScheme, CrawlerScheme]


def _growth(level: int) -> float:
    return level * 1.1 ** level


def _mine_output(scheme: MineScheme, state: EconomyState, level: int) -> float:
    output = scheme.production_factor * _growth(level)
    if scheme.temp_mult:
        temp = state.max_temperature if scheme.use_max_temperature else state.average_temperature
        output *= scheme.temp_offset - scheme.temp_mult * temp
    return output


def _add_mine(scheme: MineScheme, state: EconomyState, ledger: ProductionLedger, factor: float) -> None:
    level = state.building_level(scheme.building)
    scale = state.utilization(scheme.facility) * min(1.0, factor) * state.economy_speed
    basic = scheme.base_production * scale
    mined = _mine_output(scheme, state, level) * scale
    resource = scheme.resource

    ledger.add(resource, "basic_income", basic)
    ledger.add(resource, scheme.key, mined)
    plasma = state.research_level(ResearchType.PLASMA)
    if plasma:
        ledger.add(resource, "plasma", (basic + mined) * scheme.plasma_bonus / 100.0 * plasma)

    officers = state.account.officers
    if officers.geologist:
        ledger.add(resource, "geologist", mined * GEOLOGIST_PRODUCTION_BONUS)
    if officers.commanding_staff:
        ledger.add(resource, "commanding_staff", mined * COMMANDING_STAFF_BONUS)
    if state.is_collector:
        ledger.add(resource, "collector", mined * state.account.universe.collector_production_bonus / 100.0)
    item_bonus = state.item_bonus(resource)
    if item_bonus:
        ledger.add(resource, "items", mined * item_bonus)


def _crawler_count(scheme: CrawlerScheme, state: EconomyState) -> int:
    mine_levels = sum(state.building_level(b) for b in MINES)
    cap = state.account.universe.crawler_cap * mine_levels
    if state.account.officers.geologist:
        cap *= 1 + scheme.geologist_cap_bonus
    return min(state.stationed(ShipyardItemType.CRAWLER), int(cap))


def _crawler_utilization(state: EconomyState) -> float:
    return min(state.utilization("crawler"), 1.5 if state.is_collector else 1.0)


def _add_crawler(scheme: CrawlerScheme, state: EconomyState, ledger: ProductionLedger) -> None:
    count = _crawler_count(scheme, state)
    if count <= 0:
        return
    bonus = count * scheme.bonus_per_unit * _crawler_utilization(state)
    if state.is_collector:
        bonus *= scheme.collector_multiplier
    bonus = min(bonus, scheme.max_bonus)
    # Crawlers boost what the mines already put into the ledger
    for building in MINES:
        resource = _MINE_RESOURCES[building]
        ledger.add(resource, scheme.key, ledger.term(resource, building.value) * bonus)


def _add_fusion(scheme: FusionScheme, state: EconomyState, ledger: ProductionLedger) -> None:
    level = state.building_level(BuildingType.FUSION_REACTOR)
    if level <= 0:
        return
    burn = scheme.deuterium_factor * state.economy_speed * _growth(level) * state.utilization("fusion_reactor")
    ledger.add(ResourceType.DEUTERIUM, scheme.key, -burn)


def add_production(scheme: ProductionScheme, state: EconomyState, ledger: ProductionLedger, factor: float) -> None:
    """Add the scheme's metal/crystal/deuterium terms to the ledger."""
    if scheme.kind is ProductionKind.MINE:
        _add_mine(scheme, state, ledger, factor)
    elif scheme.kind is ProductionKind.FUSION:
        _add_fusion(scheme, state, ledger)
    elif scheme.kind is ProductionKind.CRAWLER:
        _add_crawler(scheme, state, ledger)


def energy_delta(scheme: ProductionScheme, state: EconomyState) -> float:
    """Signed energy balance of a scheme: positive produces, negative consumes."""
    if scheme.kind is ProductionKind.MINE:
        level = state.building_level(scheme.building)
        return -scheme.energy_mult * _growth(level) * state.utilization(scheme.facility)
    if scheme.kind is ProductionKind.SOLAR_PLANT:
        level = state.building_level(BuildingType.SOLAR_PLANT)
        return scheme.energy_factor * _growth(level) * state.utilization("solar_plant")
    if scheme.kind is ProductionKind.FUSION:
        level = state.building_level(BuildingType.FUSION_REACTOR)
        base = scheme.energy_base + scheme.energy_tech_step * state.research_level(ResearchType.ENERGY)
        return scheme.energy_factor * level * state.utilization("fusion_reactor") * base ** level
    if scheme.kind is ProductionKind.SOLAR_SATELLITE:
        per_satellite = max(0, math.floor((state.max_temperature + scheme.temp_offset) / scheme.temp_divisor))
        count = state.stationed(ShipyardItemType.SOLAR_SATELLITE)
        return count * per_satellite * state.utilization("solar_satellite")
    if scheme.kind is ProductionKind.CRAWLER:
        return -scheme.energy_per_unit * _crawler_count(scheme, state) * _crawler_utilization(state)
    return 0.0


_MINE_RESOURCES = {
    BuildingType.METAL_MINE: ResourceType.METAL,
    BuildingType.CRYSTAL_MINE: ResourceType.CRYSTAL,
    BuildingType.DEUTERIUM_SYNTHESIZER: ResourceType.DEUTERIUM,
}


# ── Planet passes ────────────────────────────────────────────────────────────


def _add_energy_bonuses(state: EconomyState, ledger: ProductionLedger, produced: float) -> None:
    if produced <= 0:
        return
    officers = state.account.officers
    if officers.engineer:
        ledger.add(ResourceType.ENERGY, "engineer", produced * ENGINEER_ENERGY_BONUS)
    if officers.commanding_staff:
        ledger.add(ResourceType.ENERGY, "commanding_staff", produced * COMMANDING_STAFF_BONUS)
    if state.is_collector:
        ledger.add(ResourceType.ENERGY, "collector", produced * state.account.universe.collector_energy_bonus / 100.0)
    item_bonus = state.item_bonus(ResourceType.ENERGY)
    if item_bonus:
        ledger.add(ResourceType.ENERGY, "items", produced * item_bonus)


def energy_balance(schemes: Iterable[ProductionScheme], state: EconomyState) -> Production:
    """Unthrottled energy production and consumption of a planet."""
    ledger = ProductionLedger()
    for scheme in schemes:
        delta = energy_delta(scheme, state)
        if delta:
            ledger.add(ResourceType.ENERGY, scheme.key, delta)
    _add_energy_bonuses(state, ledger, ledger.production(ResourceType.ENERGY).total_production)
    return ledger.production(ResourceType.ENERGY)


def resource_production(
    schemes: Iterable[ProductionScheme], state: EconomyState, resource: ResourceType, factor: float,
) -> Production:
    """Hourly balance of one mined resource at the given energy factor."""
    ledger = ProductionLedger()
    for scheme in schemes:
        add_production(scheme, state, ledger, factor)
    return ledger.production(resource)
