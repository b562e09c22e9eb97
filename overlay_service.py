"""
Upgrade overlay — the account "as if" planned upgrades were already done.

The overlay never copies or mutates the account.  It keeps a small map

    (planet id | None, upgrade type, moon flag) -> level delta

which the economy facade adds to every level it reads.  Research keys use
``None`` for the planet because research is account-wide.

Full production per planet is memoized here, keyed by planet id and rule-set
name.  Adding or removing an upgrade drops only the entries it can affect: the
target planet for buildings and shipyard items, every planet for research.
Callers that mutate the underlying account must call ``invalidate()``
themselves; nothing is observed automatically.
"""

import logging
import os
from typing import Dict, Iterable, List, Optional, Tuple

from constants import UpgradeKind, UpgradeType
from cost_service import ZERO_COST, UpgradeCost
from models import Account, Planet, PlannedUpgrade
from production_service import FullProduction

logger = logging.getLogger(__name__)

CACHE_PRODUCTION = os.environ.get("ECONOMY_CACHE_PRODUCTION", "1").strip().lower() not in ("0", "false", "no")

OverlayKey = Tuple[Optional[int], UpgradeType, bool]


def overlay_key(upgrade: PlannedUpgrade) -> OverlayKey:
    return (upgrade.target_planet, upgrade.type, upgrade.on_moon)


class UpgradeOverlay:
    def __init__(
        self,
        account: Account,
        upgrades: Optional[Iterable[PlannedUpgrade]] = None,
        cache_production: Optional[bool] = None,
    ):
        self.account = account
        self._upgrades: List[PlannedUpgrade] = []
        self._deltas: Dict[OverlayKey, int] = {}
        self._production: Dict[Tuple[int, str], FullProduction] = {}
        self._cache_production = CACHE_PRODUCTION if cache_production is None else cache_production
        for upgrade in account.planned_upgrades if upgrades is None else upgrades:
            self.with_upgrade(upgrade)

    # ── Upgrade list ─────────────────────────────────────────────────────────

    @property
    def upgrades(self) -> List[PlannedUpgrade]:
        return list(self._upgrades)

    def with_upgrade(self, upgrade: PlannedUpgrade) -> "UpgradeOverlay":
        self._upgrades.append(upgrade)
        self._shift(upgrade, upgrade.quantity)
        return self

    def without_upgrade(self, upgrade: PlannedUpgrade) -> "UpgradeOverlay":
        for idx, existing in enumerate(self._upgrades):
            if existing is upgrade or existing.id == upgrade.id:
                del self._upgrades[idx]
                self._shift(existing, -existing.quantity)
                break
        return self

    def _shift(self, upgrade: PlannedUpgrade, quantity: int) -> None:
        if not quantity:
            return
        key = overlay_key(upgrade)
        level = self._deltas.get(key, 0) + quantity
        if level:
            self._deltas[key] = level
        else:
            self._deltas.pop(key, None)
        self.invalidate(upgrade.target_planet)

    # ── Levels ───────────────────────────────────────────────────────────────

    def delta(self, upgrade_type: UpgradeType, planet_id: Optional[int] = None, moon: bool = False) -> int:
        if upgrade_type.kind is UpgradeKind.RESEARCH:
            planet_id, moon = None, False
        return self._deltas.get((planet_id, upgrade_type, moon), 0)

    def level(self, upgrade_type: UpgradeType, planet_id: Optional[int] = None, moon: bool = False) -> int:
        """Level after every upgrade in the overlay has been applied."""
        planet = self.account.planet(planet_id)
        return self.account.level(upgrade_type, planet, moon) + self.delta(upgrade_type, planet_id, moon)

    def _preceding_quantity(self, upgrade: PlannedUpgrade) -> int:
        key = overlay_key(upgrade)
        total = 0
        for existing in self._upgrades:
            if existing is upgrade or existing.id == upgrade.id:
                return total
            if overlay_key(existing) == key:
                total += existing.quantity
        # Not part of the overlay: it stacks on top of everything queued
        return total

    def from_level(self, upgrade: PlannedUpgrade) -> int:
        planet = self.account.planet(upgrade.target_planet)
        return self.account.level(upgrade.type, planet, upgrade.on_moon) + self._preceding_quantity(upgrade)

    def to_level(self, upgrade: PlannedUpgrade) -> int:
        return self.from_level(upgrade) + upgrade.quantity

    def is_paid(self, upgrade: PlannedUpgrade) -> bool:
        """True when the upgrade is the one already under construction."""
        planet = self.account.planet(upgrade.target_planet)
        if self.from_level(upgrade) != self.account.level(upgrade.type, planet, upgrade.on_moon):
            return False
        if upgrade.type.kind is UpgradeKind.RESEARCH:
            return upgrade.type.research is not None and self.account.research.current_upgrade == upgrade.type.research
        if upgrade.type.kind is UpgradeKind.BUILDING and planet is not None:
            holder = planet.moon if upgrade.on_moon else planet
            return holder.current_upgrade == upgrade.type.building
        return False

    def upgrade_cost(self, rules, upgrade: PlannedUpgrade) -> UpgradeCost:
        """What the upgrade still costs; zero once it has been paid for."""
        if upgrade.quantity <= 0 or self.is_paid(upgrade):
            return ZERO_COST
        planet = self.account.planet(upgrade.target_planet)
        if planet is None and upgrade.type.kind is not UpgradeKind.RESEARCH:
            return ZERO_COST
        from_level = self.from_level(upgrade)
        return rules.economy.upgrade_cost(self.account, planet, upgrade.type, from_level, from_level + upgrade.quantity)

    # ── Production cache ─────────────────────────────────────────────────────

    def full_production(self, rules, planet: Planet) -> FullProduction:
        key = (planet.id, rules.name)
        cached = self._production.get(key)
        if cached is not None:
            return cached
        production = rules.economy.full_production(self.account, planet, overlay=self)
        if self._cache_production:
            self._production[key] = production
        return production

    def invalidate(self, planet_id: Optional[int] = None) -> None:
        """Forget cached production for one planet, or for all when planet_id is None."""
        if planet_id is None:
            self._production.clear()
        else:
            for key in [k for k in self._production if k[0] == planet_id]:
                del self._production[key]
        logger.debug("Overlay production cache invalidated (planet=%s)", planet_id)

    def cache_info(self) -> Dict[str, int]:
        return {
            "entries": len(self._production),
            "upgrades": len(self._upgrades),
            "deltas": len(self._deltas),
        }
