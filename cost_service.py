"""
Cost schemes — resource cost of raising a building, research or shipyard count.

Levelled upgrades follow a geometric series: level n costs
``initial * exponent**n``.  The cost of a whole level range is taken from the
closed form of that series, so pricing level 0 -> 300 is as cheap as 0 -> 1.

Pure math — no account, rule-set or framework dependencies.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from constants import MAX_LEVEL, PointCategory
from models import TradeRatios

Triple = Tuple[float, float, float]

_NOTHING: Triple = (0.0, 0.0, 0.0)


class RuleSetConfigError(ValueError):
    pass


# ── Cost value ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UpgradeCost:
    """Metal/crystal/deuterium amounts, kept apart per point category."""

    economy: Triple = _NOTHING
    research: Triple = _NOTHING
    military: Triple = _NOTHING

    @classmethod
    def of(cls, category: PointCategory, metal: float, crystal: float, deuterium: float) -> "UpgradeCost":
        return cls(**{category.value: (float(metal), float(crystal), float(deuterium))})

    def _map(self, fn) -> "UpgradeCost":
        return UpgradeCost(
            economy=tuple(fn(v) for v in self.economy),
            research=tuple(fn(v) for v in self.research),
            military=tuple(fn(v) for v in self.military),
        )

    def __add__(self, other: "UpgradeCost") -> "UpgradeCost":
        if not isinstance(other, UpgradeCost):
            return NotImplemented
        return UpgradeCost(
            economy=tuple(a + b for a, b in zip(self.economy, other.economy)),
            research=tuple(a + b for a, b in zip(self.research, other.research)),
            military=tuple(a + b for a, b in zip(self.military, other.military)),
        )

    def __mul__(self, factor: float) -> "UpgradeCost":
        return self._map(lambda v: v * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "UpgradeCost":
        return self._map(lambda v: v / divisor)

    def _column(self, idx: int) -> float:
        return self.economy[idx] + self.research[idx] + self.military[idx]

    @property
    def metal(self) -> float:
        return self._column(0)

    @property
    def crystal(self) -> float:
        return self._column(1)

    @property
    def deuterium(self) -> float:
        return self._column(2)

    @property
    def total(self) -> float:
        return self.metal + self.crystal + self.deuterium

    @property
    def is_zero(self) -> bool:
        return self.metal == 0 and self.crystal == 0 and self.deuterium == 0

    def category(self, category: PointCategory) -> Triple:
        return getattr(self, category.value)

    def metal_value(self, trade_ratios: Optional[TradeRatios] = None) -> float:
        tr = trade_ratios or TradeRatios()
        return tr.metal_value(self.metal, self.crystal, self.deuterium)

    def points_value(self, category: PointCategory) -> float:
        """Points earned by this spend: one point per thousand resources."""
        return sum(self.category(category)) / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metal": self.metal,
            "crystal": self.crystal,
            "deuterium": self.deuterium,
            "points": {c.value: self.points_value(c) for c in PointCategory},
        }


ZERO_COST = UpgradeCost()


# ── Schemes ──────────────────────────────────────────────────────────────────


class SchemeKind(str, Enum):
    BUILDING = "building"
    TECHNOLOGY = "technology"
    COLONY = "colony"
    UNIT = "unit"


_DEFAULT_CATEGORY = {
    SchemeKind.BUILDING: PointCategory.ECONOMY,
    SchemeKind.TECHNOLOGY: PointCategory.RESEARCH,
    SchemeKind.COLONY: PointCategory.RESEARCH,
    SchemeKind.UNIT: PointCategory.MILITARY,
}


@dataclass(frozen=True)
class CostScheme:
    kind: SchemeKind
    metal: float
    crystal: float
    deuterium: float
    exponent: float = 1.0
    category: Optional[PointCategory] = field(default=None)

    def __post_init__(self) -> None:
        if self.kind is not SchemeKind.UNIT and self.exponent == 1:
            raise RuleSetConfigError(f"{self.kind.value} scheme cannot use a level exponent of 1")
        if self.category is None:
            object.__setattr__(self, "category", _DEFAULT_CATEGORY[self.kind])


def building_scheme(metal: float, crystal: float, deuterium: float, exponent: float) -> CostScheme:
    return CostScheme(SchemeKind.BUILDING, metal, crystal, deuterium, exponent)


def technology_scheme(metal: float, crystal: float, deuterium: float, exponent: float) -> CostScheme:
    return CostScheme(SchemeKind.TECHNOLOGY, metal, crystal, deuterium, exponent)


def colony_scheme(metal: float, crystal: float, deuterium: float, exponent: float) -> CostScheme:
    return CostScheme(SchemeKind.COLONY, metal, crystal, deuterium, exponent)


def unit_scheme(
    metal: float, crystal: float, deuterium: float, category: PointCategory = PointCategory.MILITARY,
) -> CostScheme:
    return CostScheme(SchemeKind.UNIT, metal, crystal, deuterium, category=category)


# ── Formulas ─────────────────────────────────────────────────────────────────


def level_factor(exponent: float, pre_level: int, post_level: int) -> float:
    """Sum of ``exponent**level`` for level in [pre_level, post_level)."""
    return exponent ** pre_level * ((1 - exponent ** (post_level - pre_level)) / (1 - exponent))


def _geometric_cost(scheme: CostScheme, pre_level: int, post_level: int) -> UpgradeCost:
    factor = level_factor(scheme.exponent, pre_level, post_level)
    return UpgradeCost.of(
        scheme.category,
        math.ceil(scheme.metal * factor),
        math.ceil(scheme.crystal * factor),
        math.ceil(scheme.deuterium * factor),
    )


def compute_cost(
    scheme: CostScheme,
    pre_level: int,
    post_level: int,
    *,
    planets: int = 1,
    building_value: UpgradeCost = ZERO_COST,
) -> UpgradeCost:
    """
    Cost of going from pre_level to post_level under a scheme.

    ``planets`` multiplies building costs (an empire-wide upgrade is built once
    per planet).  ``building_value`` is the account's total building value per
    planet, added once to colony upgrades.

    Raises ValueError above MAX_LEVEL.
    """
    if post_level <= 0 or post_level <= pre_level:
        return ZERO_COST
    if post_level > MAX_LEVEL:
        raise ValueError(f"Level {post_level} is above the supported maximum of {MAX_LEVEL}")

    if scheme.kind is SchemeKind.UNIT:
        count = post_level - pre_level
        return UpgradeCost.of(scheme.category, scheme.metal * count, scheme.crystal * count, scheme.deuterium * count)
    if scheme.kind is SchemeKind.BUILDING:
        return _geometric_cost(scheme, pre_level, post_level) * planets
    if scheme.kind is SchemeKind.TECHNOLOGY:
        return _geometric_cost(scheme, pre_level, post_level)
    if scheme.kind is SchemeKind.COLONY:
        # Planet n needs research level 2n - 3
        return _geometric_cost(scheme, 2 * pre_level - 3, 2 * post_level - 3) + building_value
    raise RuleSetConfigError(f"Unknown cost scheme kind: {scheme.kind!r}")
