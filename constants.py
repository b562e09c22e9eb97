"""
Canonical shared constants for the empire economy engine.

Every upgrade the account model knows about is enumerated here, split into
three kinds (buildings, research, shipyard items).  Rule sets, the overlay and
the HTTP layer all key their tables on these enums.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional


# ---------------------------------------------------------------------------
# Resources & point categories
# ---------------------------------------------------------------------------

class ResourceType(str, Enum):
    METAL = "metal"
    CRYSTAL = "crystal"
    DEUTERIUM = "deuterium"
    ENERGY = "energy"


MINED_RESOURCES: List[ResourceType] = [ResourceType.METAL, ResourceType.CRYSTAL, ResourceType.DEUTERIUM]


class PointCategory(str, Enum):
    ECONOMY = "economy"
    RESEARCH = "research"
    MILITARY = "military"


# ---------------------------------------------------------------------------
# Account class & officers
# ---------------------------------------------------------------------------

class AccountClass(str, Enum):
    UNSELECTED = "unselected"
    COLLECTOR = "collector"
    GENERAL = "general"
    DISCOVERER = "discoverer"


OFFICERS: List[str] = ["commander", "admiral", "engineer", "geologist", "technocrat"]

GEOLOGIST_PRODUCTION_BONUS = 0.10
ENGINEER_ENERGY_BONUS = 0.10
COMMANDING_STAFF_BONUS = 0.02


# ---------------------------------------------------------------------------
# Upgrade targets
# ---------------------------------------------------------------------------

class BuildingType(str, Enum):
    METAL_MINE = "metal_mine"
    CRYSTAL_MINE = "crystal_mine"
    DEUTERIUM_SYNTHESIZER = "deuterium_synthesizer"
    SOLAR_PLANT = "solar_plant"
    FUSION_REACTOR = "fusion_reactor"
    METAL_STORAGE = "metal_storage"
    CRYSTAL_STORAGE = "crystal_storage"
    DEUTERIUM_STORAGE = "deuterium_storage"
    ROBOTICS_FACTORY = "robotics_factory"
    SHIPYARD = "shipyard"
    RESEARCH_LAB = "research_lab"
    ALLIANCE_DEPOT = "alliance_depot"
    MISSILE_SILO = "missile_silo"
    NANITE_FACTORY = "nanite_factory"
    TERRAFORMER = "terraformer"
    SPACE_DOCK = "space_dock"
    LUNAR_BASE = "lunar_base"
    SENSOR_PHALANX = "sensor_phalanx"
    JUMP_GATE = "jump_gate"


MINES: List[BuildingType] = [
    BuildingType.METAL_MINE,
    BuildingType.CRYSTAL_MINE,
    BuildingType.DEUTERIUM_SYNTHESIZER,
]

MOON_ONLY_BUILDINGS: FrozenSet[BuildingType] = frozenset({
    BuildingType.LUNAR_BASE,
    BuildingType.SENSOR_PHALANX,
    BuildingType.JUMP_GATE,
})


class ResearchType(str, Enum):
    ENERGY = "energy"
    LASER = "laser"
    ION = "ion"
    HYPERSPACE = "hyperspace"
    PLASMA = "plasma"
    COMBUSTION_DRIVE = "combustion_drive"
    IMPULSE_DRIVE = "impulse_drive"
    HYPERSPACE_DRIVE = "hyperspace_drive"
    ESPIONAGE = "espionage"
    COMPUTER = "computer"
    ASTROPHYSICS = "astrophysics"
    INTERGALACTIC_RESEARCH_NETWORK = "intergalactic_research_network"
    GRAVITON = "graviton"
    WEAPONS = "weapons"
    SHIELDING = "shielding"
    ARMOR = "armor"
    # Not a real research: the "level" is the number of planets owned.
    COLONY = "colony"


PSEUDO_RESEARCH: FrozenSet[ResearchType] = frozenset({ResearchType.COLONY})


class ShipyardItemType(str, Enum):
    SMALL_CARGO = "small_cargo"
    LARGE_CARGO = "large_cargo"
    LIGHT_FIGHTER = "light_fighter"
    HEAVY_FIGHTER = "heavy_fighter"
    CRUISER = "cruiser"
    BATTLESHIP = "battleship"
    BATTLECRUISER = "battlecruiser"
    BOMBER = "bomber"
    DESTROYER = "destroyer"
    DEATHSTAR = "deathstar"
    REAPER = "reaper"
    PATHFINDER = "pathfinder"
    COLONY_SHIP = "colony_ship"
    RECYCLER = "recycler"
    ESPIONAGE_PROBE = "espionage_probe"
    SOLAR_SATELLITE = "solar_satellite"
    CRAWLER = "crawler"
    ROCKET_LAUNCHER = "rocket_launcher"
    LIGHT_LASER = "light_laser"
    HEAVY_LASER = "heavy_laser"
    GAUSS_CANNON = "gauss_cannon"
    ION_CANNON = "ion_cannon"
    PLASMA_TURRET = "plasma_turret"
    SMALL_SHIELD_DOME = "small_shield_dome"
    LARGE_SHIELD_DOME = "large_shield_dome"
    ANTI_BALLISTIC_MISSILE = "anti_ballistic_missile"
    INTERPLANETARY_MISSILE = "interplanetary_missile"


STATIONARY_SHIPS: FrozenSet[ShipyardItemType] = frozenset({
    ShipyardItemType.SOLAR_SATELLITE,
    ShipyardItemType.CRAWLER,
})

DEFENSES: FrozenSet[ShipyardItemType] = frozenset({
    ShipyardItemType.ROCKET_LAUNCHER,
    ShipyardItemType.LIGHT_LASER,
    ShipyardItemType.HEAVY_LASER,
    ShipyardItemType.GAUSS_CANNON,
    ShipyardItemType.ION_CANNON,
    ShipyardItemType.PLASMA_TURRET,
    ShipyardItemType.SMALL_SHIELD_DOME,
    ShipyardItemType.LARGE_SHIELD_DOME,
    ShipyardItemType.ANTI_BALLISTIC_MISSILE,
    ShipyardItemType.INTERPLANETARY_MISSILE,
})


def is_mobile(item: ShipyardItemType) -> bool:
    """Ships that can leave the planet (satellites, crawlers and defences cannot)."""
    return item not in STATIONARY_SHIPS and item not in DEFENSES


class UpgradeKind(str, Enum):
    BUILDING = "building"
    RESEARCH = "research"
    SHIPYARD_ITEM = "shipyard_item"


class UpgradeType(str, Enum):
    """Every upgradeable thing.  Values are shared with the kind-specific enums."""

    METAL_MINE = "metal_mine"
    CRYSTAL_MINE = "crystal_mine"
    DEUTERIUM_SYNTHESIZER = "deuterium_synthesizer"
    SOLAR_PLANT = "solar_plant"
    FUSION_REACTOR = "fusion_reactor"
    METAL_STORAGE = "metal_storage"
    CRYSTAL_STORAGE = "crystal_storage"
    DEUTERIUM_STORAGE = "deuterium_storage"
    ROBOTICS_FACTORY = "robotics_factory"
    SHIPYARD = "shipyard"
    RESEARCH_LAB = "research_lab"
    ALLIANCE_DEPOT = "alliance_depot"
    MISSILE_SILO = "missile_silo"
    NANITE_FACTORY = "nanite_factory"
    TERRAFORMER = "terraformer"
    SPACE_DOCK = "space_dock"
    LUNAR_BASE = "lunar_base"
    SENSOR_PHALANX = "sensor_phalanx"
    JUMP_GATE = "jump_gate"

    ENERGY = "energy"
    LASER = "laser"
    ION = "ion"
    HYPERSPACE = "hyperspace"
    PLASMA = "plasma"
    COMBUSTION_DRIVE = "combustion_drive"
    IMPULSE_DRIVE = "impulse_drive"
    HYPERSPACE_DRIVE = "hyperspace_drive"
    ESPIONAGE = "espionage"
    COMPUTER = "computer"
    ASTROPHYSICS = "astrophysics"
    INTERGALACTIC_RESEARCH_NETWORK = "intergalactic_research_network"
    GRAVITON = "graviton"
    WEAPONS = "weapons"
    SHIELDING = "shielding"
    ARMOR = "armor"
    COLONY = "colony"

    SMALL_CARGO = "small_cargo"
    LARGE_CARGO = "large_cargo"
    LIGHT_FIGHTER = "light_fighter"
    HEAVY_FIGHTER = "heavy_fighter"
    CRUISER = "cruiser"
    BATTLESHIP = "battleship"
    BATTLECRUISER = "battlecruiser"
    BOMBER = "bomber"
    DESTROYER = "destroyer"
    DEATHSTAR = "deathstar"
    REAPER = "reaper"
    PATHFINDER = "pathfinder"
    COLONY_SHIP = "colony_ship"
    RECYCLER = "recycler"
    ESPIONAGE_PROBE = "espionage_probe"
    SOLAR_SATELLITE = "solar_satellite"
    CRAWLER = "crawler"
    ROCKET_LAUNCHER = "rocket_launcher"
    LIGHT_LASER = "light_laser"
    HEAVY_LASER = "heavy_laser"
    GAUSS_CANNON = "gauss_cannon"
    ION_CANNON = "ion_cannon"
    PLASMA_TURRET = "plasma_turret"
    SMALL_SHIELD_DOME = "small_shield_dome"
    LARGE_SHIELD_DOME = "large_shield_dome"
    ANTI_BALLISTIC_MISSILE = "anti_ballistic_missile"
    INTERPLANETARY_MISSILE = "interplanetary_missile"

    @property
    def kind(self) -> UpgradeKind:
        return _UPGRADE_KINDS[self.value]

    @property
    def building(self) -> Optional[BuildingType]:
        return BuildingType(self.value) if self.kind is UpgradeKind.BUILDING else None

    @property
    def research(self) -> Optional[ResearchType]:
        return ResearchType(self.value) if self.kind is UpgradeKind.RESEARCH else None

    @property
    def shipyard_item(self) -> Optional[ShipyardItemType]:
        return ShipyardItemType(self.value) if self.kind is UpgradeKind.SHIPYARD_ITEM else None

    @property
    def account_wide(self) -> bool:
        return self.kind is UpgradeKind.RESEARCH

    @classmethod
    def of(cls, target: Enum) -> "UpgradeType":
        """Map a BuildingType / ResearchType / ShipyardItemType to its upgrade type."""
        return cls(target.value)


_UPGRADE_KINDS: Dict[str, UpgradeKind] = {
    **{b.value: UpgradeKind.BUILDING for b in BuildingType},
    **{r.value: UpgradeKind.RESEARCH for r in ResearchType},
    **{s.value: UpgradeKind.SHIPYARD_ITEM for s in ShipyardItemType},
}


# ---------------------------------------------------------------------------
# Universe defaults
# ---------------------------------------------------------------------------

DEFAULT_UNIVERSE: Dict[str, Any] = {
    "name": "",
    "economy_speed": 1,
    "research_speed": 1,
    "fleet_speed": 1,
    "galaxies": 9,
    "circular_galaxies": True,
    "circular_universe": True,
    "collector_production_bonus": 25.0,
    "collector_energy_bonus": 10.0,
    "crawler_cap": 8,
    "hyperspace_cargo_bonus": 5.0,
}

DEFAULT_TRADE_RATIOS: Dict[str, float] = {
    "metal": 2.5,
    "crystal": 1.5,
    "deuterium": 1.0,
}

# Highest level or count a cost is computed for; the closed-form series
# leaves float range somewhere above this for the steepest schemes.
MAX_LEVEL = 300
