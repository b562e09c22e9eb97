"""
Shared pytest fixtures for the economy engine tests.

Provides:
  - Rule-set accessors (base and newest version)
  - Helper functions for building accounts, planets and planned upgrades
  - FastAPI TestClient
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so we can import app modules
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def rules():
    import ruleset_service
    return ruleset_service.rule_set("7.1.0")


@pytest.fixture(scope="session")
def latest_rules():
    import ruleset_service
    return ruleset_service.latest_rule_set()


# ---------------------------------------------------------------------------
# FastAPI TestClient
# ---------------------------------------------------------------------------

@pytest.fixture()
def client():
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Test data helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    """Stateless helper methods for building account data."""

    @staticmethod
    def make_planet(planet_id: int = 1, *, buildings: Optional[Dict[str, int]] = None,
                    stationed: Optional[Dict[str, int]] = None, **fields: Any):
        from models import Planet
        return Planet(
            id=planet_id,
            name=f"Planet {planet_id}",
            buildings=buildings or {},
            stationed=stationed or {},
            **fields,
        )

    @staticmethod
    def make_account(*planets, research: Optional[Dict[str, int]] = None, **fields: Any):
        from models import Account, Research
        return Account(
            id=1,
            name="tester",
            planets=list(planets),
            research=Research(levels=research or {}),
            **fields,
        )

    @staticmethod
    def planned(upgrade_id: int, upgrade_type: str, planet: Optional[int] = 1, quantity: int = 1, moon: bool = False):
        from models import PlannedUpgrade
        return PlannedUpgrade(id=upgrade_id, type=upgrade_type, planet=planet, quantity=quantity, moon=moon)

    @staticmethod
    def developed_planet(planet_id: int = 1, **fields: Any):
        """A mid-game planet whose solar plant covers all mine consumption."""
        return TestHelpers.make_planet(
            planet_id,
            buildings={
                "metal_mine": 20,
                "crystal_mine": 15,
                "deuterium_synthesizer": 10,
                "solar_plant": 22,
            },
            min_temperature=-20,
            max_temperature=20,
            **fields,
        )


@pytest.fixture()
def helpers() -> TestHelpers:
    return TestHelpers()
