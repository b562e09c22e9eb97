"""
Economy facade — the single entry point for cost and production queries.

An EconomyRuleSet owns one complete scheme bundle (a cost scheme for every
upgrade type plus the ordered production schemes).  Callers ask it for:

  - upgrade_cost(account, planet, upgrade_type, from_level, to_level)
  - production(account, planet, resource, energy_factor=None)
  - full_production(account, planet), which resolves the energy factor once
    and shares it across metal, crystal and deuterium
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from constants import MOON_ONLY_BUILDINGS, BuildingType, ResourceType, UpgradeKind, UpgradeType
from cost_service import ZERO_COST, CostScheme, RuleSetConfigError, UpgradeCost, compute_cost
from models import Account, Planet
from production_service import (
    EconomyState,
    FullProduction,
    Production,
    ProductionScheme,
    energy_balance,
    energy_factor,
    resource_production,
)


class EconomyRuleSet:
    def __init__(self, cost_schemes: Mapping[UpgradeType, CostScheme], production_schemes: Sequence[ProductionScheme]):
        missing = [t.value for t in UpgradeType if t not in cost_schemes]
        if missing:
            raise RuleSetConfigError(f"No cost scheme for: {', '.join(missing)}")
        self._cost_schemes: Dict[UpgradeType, CostScheme] = dict(cost_schemes)
        self._production_schemes: List[ProductionScheme] = list(production_schemes)

    @property
    def cost_schemes(self) -> Dict[UpgradeType, CostScheme]:
        return dict(self._cost_schemes)

    @property
    def production_schemes(self) -> List[ProductionScheme]:
        return list(self._production_schemes)

    def cost_scheme(self, upgrade_type: UpgradeType) -> CostScheme:
        return self._cost_schemes[upgrade_type]

    # ── Costs ────────────────────────────────────────────────────────────────

    def upgrade_cost(
        self,
        account: Account,
        planet: Optional[Planet],
        upgrade_type: UpgradeType,
        from_level: int,
        to_level: int,
    ) -> UpgradeCost:
        """
        Cost of raising upgrade_type from from_level to to_level.

        A building priced without a planet is an empire-wide upgrade and is
        paid once per planet the account owns.
        """
        scheme = self._cost_schemes[upgrade_type]
        planets = 1
        if upgrade_type.kind is UpgradeKind.BUILDING and planet is None:
            planets = max(1, len(account.planets))
        building_value = ZERO_COST
        if upgrade_type is UpgradeType.COLONY and account.planets and to_level > from_level:
            building_value = self.buildings_value(account) / len(account.planets)
        return compute_cost(scheme, from_level, to_level, planets=planets, building_value=building_value)

    def buildings_value(self, account: Account) -> UpgradeCost:
        """Everything ever spent on buildings across the account, moons included."""
        total = ZERO_COST
        for planet in account.planets:
            for building in BuildingType:
                upgrade_type = UpgradeType.of(building)
                scheme = self._cost_schemes[upgrade_type]
                if building not in MOON_ONLY_BUILDINGS:
                    total = total + compute_cost(scheme, 0, planet.building_level(building))
                total = total + compute_cost(scheme, 0, planet.moon.building_level(building))
        return total

    # ── Production ───────────────────────────────────────────────────────────

    def _state(self, account: Account, planet: Planet, overlay: Any) -> EconomyState:
        return EconomyState(account, planet, overlay)

    def energy(self, account: Account, planet: Planet, overlay: Any = None) -> Production:
        return energy_balance(self._production_schemes, self._state(account, planet, overlay))

    def energy_factor(self, account: Account, planet: Planet, overlay: Any = None) -> float:
        energy = self.energy(account, planet, overlay)
        return energy_factor(energy.total_production, energy.total_consumption)

    def production(
        self,
        account: Account,
        planet: Planet,
        resource: ResourceType,
        factor: Optional[float] = None,
        overlay: Any = None,
    ) -> Production:
        """
        Hourly production of one resource on a planet.

        Energy is always evaluated unthrottled.  For mined resources, a missing
        ``factor`` is resolved from the planet's energy balance first.
        """
        state = self._state(account, planet, overlay)
        if resource is ResourceType.ENERGY:
            return energy_balance(self._production_schemes, state)
        if factor is None:
            energy = energy_balance(self._production_schemes, state)
            factor = energy_factor(energy.total_production, energy.total_consumption)
        return resource_production(self._production_schemes, state, resource, factor)

    def full_production(self, account: Account, planet: Planet, overlay: Any = None) -> FullProduction:
        state = self._state(account, planet, overlay)
        energy = energy_balance(self._production_schemes, state)
        factor = energy_factor(energy.total_production, energy.total_consumption)
        return FullProduction(
            energy=energy,
            metal=resource_production(self._production_schemes, state, ResourceType.METAL, factor),
            crystal=resource_production(self._production_schemes, state, ResourceType.CRYSTAL, factor),
            deuterium=resource_production(self._production_schemes, state, ResourceType.DEUTERIUM, factor),
            energy_factor=factor,
        )
