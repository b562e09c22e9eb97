"""
Return on investment of planned upgrades, plus account value and points.

ROI is how long the extra hourly output of an upgrade, valued in metal via the
universe's trade ratios, takes to pay back the upgrade's cost.  Only upgrades
whose value is a direct production change are rated; everything else gets
``None`` ("not applicable").
"""

from datetime import timedelta
from typing import Any, Dict, FrozenSet, List, Optional

from constants import PSEUDO_RESEARCH, PointCategory, UpgradeKind, UpgradeType, is_mobile
from cost_service import ZERO_COST, UpgradeCost
from models import Account, Planet, PlannedUpgrade
from overlay_service import UpgradeOverlay

ROI_UPGRADE_TYPES: FrozenSet[UpgradeType] = frozenset({
    UpgradeType.METAL_MINE,
    UpgradeType.CRYSTAL_MINE,
    UpgradeType.DEUTERIUM_SYNTHESIZER,
    UpgradeType.SOLAR_PLANT,
    UpgradeType.FUSION_REACTOR,
    UpgradeType.CRAWLER,
    UpgradeType.SOLAR_SATELLITE,
    UpgradeType.ASTROPHYSICS,
    UpgradeType.PLASMA,
})


# ── Account value ────────────────────────────────────────────────────────────


def planet_value(rules, account: Account, planet: Planet, stationary_only: bool = False) -> UpgradeCost:
    """Everything built or stationed on a planet and its moon."""
    economy = rules.economy
    total = ZERO_COST
    for upgrade_type in UpgradeType:
        kind = upgrade_type.kind
        if kind is UpgradeKind.RESEARCH:
            continue
        if kind is UpgradeKind.SHIPYARD_ITEM and stationary_only and is_mobile(upgrade_type.shipyard_item):
            continue
        for moon in (False, True):
            level = account.level(upgrade_type, planet, moon)
            if level > 0:
                total = total + economy.upgrade_cost(account, planet, upgrade_type, 0, level)
    return total


def account_value(rules, account: Account) -> UpgradeCost:
    """Everything the account owns: buildings, stationed items and research."""
    total = ZERO_COST
    for planet in account.planets:
        total = total + planet_value(rules, account, planet)
    for upgrade_type in UpgradeType:
        if upgrade_type.kind is not UpgradeKind.RESEARCH or upgrade_type.research in PSEUDO_RESEARCH:
            continue
        level = account.research.level(upgrade_type.research)
        if level > 0:
            total = total + rules.economy.upgrade_cost(account, None, upgrade_type, 0, level)
    return total


def points(rules, account: Account) -> Dict[str, float]:
    value = account_value(rules, account)
    result = {c.value: value.points_value(c) for c in PointCategory}
    result["total"] = sum(result.values())
    return result


# ── ROI ──────────────────────────────────────────────────────────────────────


def _production_value(rules, account: Account, planet: Planet, overlay: Optional[UpgradeOverlay] = None) -> float:
    tr = account.universe.trade_ratios
    if overlay is None:
        production = rules.economy.full_production(account, planet)
    else:
        production = overlay.full_production(rules, planet)
    return production.as_cost().metal_value(tr)


def roi(
    rules, account: Account, upgrade: PlannedUpgrade, plan: Optional[UpgradeOverlay] = None,
) -> Optional[timedelta]:
    """
    Payback time of a planned upgrade, or None when it cannot be rated.

    ``plan`` is the overlay holding the full upgrade queue; it fixes the
    upgrade's level range and so its cost.  The production gain is measured
    against an overlay holding only this upgrade.
    """
    if upgrade.quantity <= 0 or upgrade.type not in ROI_UPGRADE_TYPES or not account.planets:
        return None
    plan = plan if plan is not None else UpgradeOverlay(account)
    if plan.is_paid(upgrade):
        return None

    tr = account.universe.trade_ratios
    cost = plan.upgrade_cost(rules, upgrade).metal_value(tr)
    current = {p.id: _production_value(rules, account, p) for p in account.planets}
    current_total = sum(current.values())

    if upgrade.type is UpgradeType.ASTROPHYSICS:
        # Rough: every new colony is assumed to match the current average planet
        new_planets = (plan.to_level(upgrade) + 1) // 2 + 1
        new_total = current_total * new_planets / len(account.planets)
        stationary = sum(planet_value(rules, account, p, stationary_only=True).metal_value(tr) for p in account.planets)
        cost += stationary / len(account.planets)
    elif upgrade.type is UpgradeType.PLASMA:
        single = UpgradeOverlay(account, [upgrade])
        new_total = sum(_production_value(rules, account, p, single) for p in account.planets)
    else:
        planet = account.planet(upgrade.target_planet)
        if planet is None:
            return None
        single = UpgradeOverlay(account, [upgrade])
        new_total = current_total - current[planet.id] + _production_value(rules, account, planet, single)

    if new_total <= current_total:
        return None
    seconds = cost / (new_total - current_total) * 3600
    return timedelta(seconds=int(seconds))


# ── Planned upgrade table ────────────────────────────────────────────────────


def planned_upgrade_summaries(rules, account: Account, plan: Optional[UpgradeOverlay] = None) -> List[Dict[str, Any]]:
    """One row per queued upgrade: level range, paid flag, remaining cost and ROI."""
    plan = plan if plan is not None else UpgradeOverlay(account)
    rows: List[Dict[str, Any]] = []
    for upgrade in account.planned_upgrades:
        payback = roi(rules, account, upgrade, plan)
        rows.append({
            "id": upgrade.id,
            "type": upgrade.type.value,
            "kind": upgrade.type.kind.value,
            "planet": upgrade.target_planet,
            "moon": upgrade.on_moon,
            "from": plan.from_level(upgrade),
            "to": plan.to_level(upgrade),
            "paid": plan.is_paid(upgrade),
            "cost": plan.upgrade_cost(rules, upgrade).to_dict(),
            "roi_seconds": None if payback is None else int(payback.total_seconds()),
        })
    return rows
