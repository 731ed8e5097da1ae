"""
schemas.py – Pydantic models for pathway inputs and scenario records.

Field names are snake_case; every model also accepts the camelCase keys the
calculator forms and the scenario JSON use (``wastePerMonth``,
``treatmentAllocation``, ...).

Defaults apply only when a field is absent. An explicit ``0`` is kept as 0.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wasteghg.emission_factors import DEFAULT_MCF


class _CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─────────────────────────────────────────────────────────────
# Shared / sub-models
# ─────────────────────────────────────────────────────────────

class FuelUse(_CamelModel):
    """Auxiliary fuel burned on site (L/month, kg/month for natural gas)."""

    type: str = Field("diesel", description="Fuel name, e.g. diesel, lpg, naturalGas")
    amount: float = Field(0.0, description="Quantity used per month")


class _Composition(_CamelModel):
    """
    Material percentages. Unknown material keys are kept as extras and
    validated as floats like the declared buckets.
    """

    model_config = ConfigDict(extra="allow")

    __pydantic_extra__: dict[str, float]

    def percentages(self) -> dict[str, float]:
        """Return every material (declared and extra) mapped to its percentage."""
        return self.model_dump()


class PathwayComposition(_Composition):
    """
    Twelve-bucket composition used by landfill, incineration and open burning.

    Missing buckets are 0. Pathway inputs that omit the composition entirely
    get the form defaults from ``form_defaults()``.
    """

    food_waste: float = 0.0
    garden_waste: float = 0.0
    plastics: float = 0.0
    paper: float = 0.0
    textile: float = 0.0
    leather: float = 0.0
    glass: float = 0.0
    metal: float = 0.0
    wood: float = 0.0
    nappies: float = 0.0
    hazardous: float = 0.0
    others: float = 0.0

    @classmethod
    def form_defaults(cls) -> PathwayComposition:
        return cls(
            food_waste=40, garden_waste=10, plastics=7, paper=6, textile=6,
            leather=5, glass=5, metal=6, wood=7, nappies=2, hazardous=3, others=3,
        )


class RecyclableComposition(_Composition):
    """Share of each recyclable stream (%)."""

    paper: float = 0.0
    plastic: float = 0.0
    aluminium: float = Field(
        0.0, validation_alias=AliasChoices("aluminium", "aluminum"),
    )
    steel: float = 0.0
    glass: float = 0.0

    @classmethod
    def form_defaults(cls) -> RecyclableComposition:
        return cls(paper=30, plastic=20, aluminium=5, steel=10, glass=35)


class ScenarioComposition(_CamelModel):
    """
    Seven-bucket composition used by scenarios (%).

    Unknown keys are rejected so a 12-bucket pathway composition cannot be
    read as a scenario one.
    """

    model_config = ConfigDict(extra="forbid")

    food: float = 0.0
    paper: float = 0.0
    plastic: float = 0.0
    metal: float = 0.0
    glass: float = 0.0
    textile: float = 0.0
    others: float = 0.0

    def percentages(self) -> dict[str, float]:
        return self.model_dump()


class TreatmentAllocation(_CamelModel):
    """Share of the scenario's waste sent to each pathway (%)."""

    landfill: float = 0.0
    composting: float = 0.0
    anaerobic_digestion: float = 0.0
    mbt: float = 0.0
    recycling: float = 0.0
    incineration: float = 0.0
    open_burning: float = 0.0


class Fleet(_CamelModel):
    """Collection fleet for one scenario."""

    diesel_trucks: int = Field(0, description="Number of diesel trucks")
    electric_trucks: int = Field(0, description="Number of electric trucks")
    total_distance: float = Field(0.0, description="Fleet km per month")
    fuel_efficiency: float = Field(0.25, description="Diesel L per km")


# ─────────────────────────────────────────────────────────────
# Pathway inputs
# ─────────────────────────────────────────────────────────────

class TransportationInput(_CamelModel):
    """Collection / haulage activity for one month."""

    distance: float = Field(0.0, description="km per trip")
    trips_per_month: float = 0.0
    fuel_consumption: Optional[float] = Field(None, description="L per km")
    fuel_type: str = Field("diesel", description="diesel | gasoline | lpg | naturalGas | electric")
    total_fuel: float = Field(0.0, description="L per month when no rate is given")
    waste_transported: float = Field(0.0, description="tonnes per month")
    electricity: float = Field(0.0, description="kWh per month for electric trucks")


class LandfillInput(_CamelModel):
    waste_per_month: float = Field(
        0.0,
        validation_alias=AliasChoices("wastePerMonth", "waste_per_month", "wasteAmount"),
        description="tonnes per month",
    )
    composition: PathwayComposition = Field(default_factory=PathwayComposition.form_defaults)
    mcf: float = Field(DEFAULT_MCF, description="Methane correction factor")
    oxidation: float = Field(0.0, description="Oxidation factor (fraction)")
    gas_recovery: float = Field(0.0, description="Gas recovery efficiency (%)")
    fuel_use: Optional[FuelUse] = None


class CompostingInput(_CamelModel):
    food_waste: float = 0.0
    garden_waste: float = 0.0
    fuel_use: Optional[FuelUse] = None
    compost_production: float = Field(0.0, description="tonnes compost per month")
    compost_use_percentage: float = Field(100.0, description="% used as fertiliser")


class AnaerobicDigestionInput(_CamelModel):
    food_waste: float = 0.0
    garden_waste: float = 0.0
    fuel_use: Optional[FuelUse] = None
    electricity_use: float = Field(0.0, description="kWh per month")
    biogas_utilization: Literal["thermal", "electricity", "both"] = "thermal"


class MBTInput(_CamelModel):
    mixed_waste: float = Field(0.0, description="tonnes per month")
    biodegradable_percentage: float = 50.0
    fuel_use: Optional[FuelUse] = None
    electricity_use: float = 0.0
    compost_production: float = 0.0
    compost_use_percentage: float = 50.0
    plastic_utilization: Literal["none", "rdf", "crudeOil"] = "none"
    plastic_amount: float = Field(0.0, description="tonnes plastic to RDF per month")
    crude_oil_production: float = Field(0.0, description="L per month")
    crude_oil_use_percentage: float = 0.0


class RecyclingInput(_CamelModel):
    total_recyclables: float = Field(0.0, description="tonnes per month")
    composition: RecyclableComposition = Field(default_factory=RecyclableComposition.form_defaults)
    fuel_use: Optional[FuelUse] = None
    electricity_use: float = 0.0
    recyclability: float = Field(100.0, description="% of collected material recycled")


class EnergyRecovery(_CamelModel):
    electricity_efficiency: float = 25.0
    electricity_onsite_percentage: float = 10.0
    heat_efficiency: float = 60.0
    heat_onsite_percentage: float = 20.0
    replaced_fuel_type: str = "diesel"


class IncinerationInput(_CamelModel):
    incineration_type: Literal["no-energy", "electricity", "heat", "both"] = "no-energy"
    waste_amount: float = Field(0.0, description="tonnes per month")
    fuel_use: Optional[FuelUse] = None
    electricity_use: float = 0.0
    composition: PathwayComposition = Field(default_factory=PathwayComposition.form_defaults)
    energy_recovery: EnergyRecovery = Field(default_factory=EnergyRecovery)


class OpenBurningInput(_CamelModel):
    waste_amount: float = Field(0.0, description="tonnes per month")
    fuel_use: Optional[FuelUse] = None
    composition: PathwayComposition = Field(default_factory=PathwayComposition.form_defaults)


# ─────────────────────────────────────────────────────────────
# Scenarios
# ─────────────────────────────────────────────────────────────

class ScenarioEmissions(_CamelModel):
    """Absolute kg CO₂e per category for one scenario."""

    transportation: float = 0.0
    landfill: float = 0.0
    composting: float = 0.0
    anaerobic_digestion: float = 0.0
    mbt: float = 0.0
    recycling: float = 0.0
    incineration: float = 0.0
    open_burning: float = 0.0
    total: float = 0.0


class ScenarioDraft(_CamelModel):
    """A scenario that has not been stored yet (no id or timestamps)."""

    name: str
    description: str = ""
    is_baseline: bool = False
    waste_composition: ScenarioComposition = Field(default_factory=ScenarioComposition)
    treatment_allocation: TreatmentAllocation = Field(default_factory=TreatmentAllocation)
    fleet: Fleet = Field(default_factory=Fleet)


class Scenario(ScenarioDraft):
    """A stored scenario record."""

    id: str
    created_at: datetime
    updated_at: datetime
    emissions: Optional[ScenarioEmissions] = None
    tags: list[str] = Field(default_factory=list)
    notes: Optional[str] = None

    def to_record(self) -> dict:
        """Return the camelCase JSON-ready mapping (ISO-8601 timestamps)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
