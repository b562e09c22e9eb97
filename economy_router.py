"""
Economy API routes.

Handles:
  /api/health                  — liveness
  /api/rulesets                — known rule-set versions and the default
  /api/economy/cost            — upgrade cost for a level range
  /api/economy/production      — current and projected production of a planet
  /api/economy/upgrades        — planned upgrade table (levels, paid, cost, ROI)
  /api/economy/points          — account points per category

Every request carries the full account; nothing is stored server-side.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from constants import MAX_LEVEL, UpgradeKind, UpgradeType
from models import Account
from overlay_service import UpgradeOverlay
import roi_service
import ruleset_service

router = APIRouter(tags=["economy"])


# ── Request Models ─────────────────────────────────────────────────────────────


class AccountReq(BaseModel):
    account: Account
    rule_set: Optional[str] = None


class CostReq(AccountReq):
    upgrade_type: UpgradeType
    planet_id: Optional[int] = None
    from_level: int = Field(ge=0, le=MAX_LEVEL)
    to_level: int = Field(ge=0, le=MAX_LEVEL)


class ProductionReq(AccountReq):
    planet_id: int


# ── Helpers ────────────────────────────────────────────────────────────────────


def _rules(name: Optional[str]) -> ruleset_service.RuleSet:
    try:
        return ruleset_service.resolve_rule_set(name)
    except ruleset_service.UnknownRuleSetError as e:
        raise HTTPException(status_code=404, detail=e.args[0])


def _planet(account: Account, planet_id: Optional[int]):
    planet = account.planet(planet_id)
    if planet is None:
        raise HTTPException(status_code=404, detail=f"Planet {planet_id} not found")
    return planet


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("/api/health")
def api_health() -> Dict[str, Any]:
    return {
        "ok": True,
        "service": "empire-economy",
    }


@router.get("/api/rulesets")
def api_rulesets() -> Dict[str, Any]:
    return {
        "rule_sets": ruleset_service.rule_set_names(),
        "default": ruleset_service.default_rule_set().name,
    }


@router.post("/api/economy/cost")
def api_upgrade_cost(body: CostReq) -> Dict[str, Any]:
    rules = _rules(body.rule_set)
    planet = None
    if body.upgrade_type.kind is not UpgradeKind.RESEARCH and body.planet_id is not None:
        planet = _planet(body.account, body.planet_id)
    cost = rules.economy.upgrade_cost(body.account, planet, body.upgrade_type, body.from_level, body.to_level)
    return {
        "rule_set": rules.name,
        "upgrade_type": body.upgrade_type.value,
        "from_level": body.from_level,
        "to_level": body.to_level,
        "cost": cost.to_dict(),
        "metal_value": cost.metal_value(body.account.universe.trade_ratios),
    }


@router.post("/api/economy/production")
def api_production(body: ProductionReq) -> Dict[str, Any]:
    rules = _rules(body.rule_set)
    planet = _planet(body.account, body.planet_id)
    plan = UpgradeOverlay(body.account)
    current = rules.economy.full_production(body.account, planet)
    projected = plan.full_production(rules, planet)
    return {
        "rule_set": rules.name,
        "planet_id": planet.id,
        "current": current.to_dict(),
        "projected": projected.to_dict(),
    }


@router.post("/api/economy/upgrades")
def api_planned_upgrades(body: AccountReq) -> Dict[str, Any]:
    rules = _rules(body.rule_set)
    try:
        rows = roi_service.planned_upgrade_summaries(rules, body.account)
    except ValueError as e:
        logging.exception("Failed to evaluate planned upgrades for account %s", body.account.id)
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "rule_set": rules.name,
        "upgrades": rows,
    }


@router.post("/api/economy/points")
def api_points(body: AccountReq) -> Dict[str, Any]:
    rules = _rules(body.rule_set)
    return {
        "rule_set": rules.name,
        "points": roi_service.points(rules, body.account),
    }
