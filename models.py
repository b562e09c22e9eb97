"""
Account data model handed to the engine by the UI and import collaborators.

The engine only reads these objects.  Applying a paid-for upgrade (bumping a
level, clearing a planned upgrade) is the caller's job.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from constants import (
    DEFAULT_TRADE_RATIOS,
    DEFAULT_UNIVERSE,
    OFFICERS,
    AccountClass,
    BuildingType,
    ResearchType,
    ShipyardItemType,
    UpgradeKind,
    UpgradeType,
)


class TradeRatios(BaseModel):
    metal: float = Field(default=DEFAULT_TRADE_RATIOS["metal"], gt=0)
    crystal: float = Field(default=DEFAULT_TRADE_RATIOS["crystal"], gt=0)
    deuterium: float = Field(default=DEFAULT_TRADE_RATIOS["deuterium"], gt=0)

    def metal_value(self, metal: float, crystal: float, deuterium: float) -> float:
        """Express an amount of resources in metal-equivalent units."""
        return metal + crystal * self.metal / self.crystal + deuterium * self.metal / self.deuterium


class Universe(BaseModel):
    name: str = DEFAULT_UNIVERSE["name"]
    economy_speed: int = Field(default=DEFAULT_UNIVERSE["economy_speed"], ge=1)
    research_speed: int = Field(default=DEFAULT_UNIVERSE["research_speed"], ge=1)
    fleet_speed: int = Field(default=DEFAULT_UNIVERSE["fleet_speed"], ge=1)
    galaxies: int = DEFAULT_UNIVERSE["galaxies"]
    circular_galaxies: bool = DEFAULT_UNIVERSE["circular_galaxies"]
    circular_universe: bool = DEFAULT_UNIVERSE["circular_universe"]
    collector_production_bonus: float = DEFAULT_UNIVERSE["collector_production_bonus"]
    collector_energy_bonus: float = DEFAULT_UNIVERSE["collector_energy_bonus"]
    crawler_cap: int = DEFAULT_UNIVERSE["crawler_cap"]
    hyperspace_cargo_bonus: float = DEFAULT_UNIVERSE["hyperspace_cargo_bonus"]
    trade_ratios: TradeRatios = Field(default_factory=TradeRatios)


class Officers(BaseModel):
    commander: bool = False
    admiral: bool = False
    engineer: bool = False
    geologist: bool = False
    technocrat: bool = False

    @property
    def commanding_staff(self) -> bool:
        return all(getattr(self, name) for name in OFFICERS)


class Research(BaseModel):
    levels: Dict[ResearchType, int] = Field(default_factory=dict)
    current_upgrade: Optional[ResearchType] = None

    def level(self, research: ResearchType) -> int:
        return int(self.levels.get(research, 0))


class Moon(BaseModel):
    buildings: Dict[BuildingType, int] = Field(default_factory=dict)
    stationed: Dict[ShipyardItemType, int] = Field(default_factory=dict)
    current_upgrade: Optional[BuildingType] = None

    def building_level(self, building: BuildingType) -> int:
        return int(self.buildings.get(building, 0))

    def stationed_count(self, item: ShipyardItemType) -> int:
        return int(self.stationed.get(item, 0))


class Planet(BaseModel):
    id: int
    name: str = ""
    coordinates: str = ""
    min_temperature: int = 0
    max_temperature: int = 40
    buildings: Dict[BuildingType, int] = Field(default_factory=dict)
    stationed: Dict[ShipyardItemType, int] = Field(default_factory=dict)

    # Utilization percentages (0-100, crawlers up to 150 for collectors)
    metal_utilization: int = 100
    crystal_utilization: int = 100
    deuterium_utilization: int = 100
    solar_plant_utilization: int = 100
    fusion_reactor_utilization: int = 100
    solar_satellite_utilization: int = 100
    crawler_utilization: int = 100

    # Item bonuses, percent
    metal_bonus: float = 0.0
    crystal_bonus: float = 0.0
    deuterium_bonus: float = 0.0
    energy_bonus: float = 0.0

    current_upgrade: Optional[BuildingType] = None
    moon: Moon = Field(default_factory=Moon)

    @property
    def average_temperature(self) -> float:
        return (self.min_temperature + self.max_temperature) / 2.0

    def building_level(self, building: BuildingType) -> int:
        return int(self.buildings.get(building, 0))

    def stationed_count(self, item: ShipyardItemType) -> int:
        return int(self.stationed.get(item, 0))


class PlannedUpgrade(BaseModel):
    id: int
    type: UpgradeType
    planet: Optional[int] = None
    moon: bool = False
    quantity: int = 1

    @property
    def target_planet(self) -> Optional[int]:
        """Planet the upgrade lands on; research is account-wide."""
        return None if self.type.account_wide else self.planet

    @property
    def on_moon(self) -> bool:
        return self.moon and not self.type.account_wide


class Account(BaseModel):
    id: int = 0
    name: str = ""
    account_class: AccountClass = AccountClass.UNSELECTED
    universe: Universe = Field(default_factory=Universe)
    officers: Officers = Field(default_factory=Officers)
    research: Research = Field(default_factory=Research)
    planets: List[Planet] = Field(default_factory=list)
    planned_upgrades: List[PlannedUpgrade] = Field(default_factory=list)

    def planet(self, planet_id: Optional[int]) -> Optional[Planet]:
        if planet_id is None:
            return None
        for planet in self.planets:
            if planet.id == planet_id:
                return planet
        return None

    def level(self, upgrade_type: UpgradeType, planet: Optional[Planet] = None, moon: bool = False) -> int:
        """Current (real) level or count of an upgrade target."""
        kind = upgrade_type.kind
        if kind is UpgradeKind.RESEARCH:
            if upgrade_type is UpgradeType.COLONY:
                return len(self.planets)
            return self.research.level(upgrade_type.research)
        if planet is None:
            return 0
        holder = planet.moon if moon else planet
        if kind is UpgradeKind.BUILDING:
            return holder.building_level(upgrade_type.building)
        return holder.stationed_count(upgrade_type.shipyard_item)
