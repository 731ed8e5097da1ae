"""
scenario_calculations.py – Scenario-level emission aggregation and comparison.

A scenario is a waste composition (7 buckets), a treatment allocation (7
pathways) and a collection fleet. Treatment emissions use the coarse
``SCENARIO_EMISSION_FACTORS`` table, not the detailed pathway calculators:

    pathway kg CO₂e = Σ_bucket (bucket% / 100) × (alloc% / 100) × factor × tonnes

Transportation comes from the fleet alone and does not scale with tonnage.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from wasteghg.constants import (
    CATEGORY_TRANSPORTATION,
    DEFAULT_TOTAL_WASTE_TONNES,
    SCENARIO_CATEGORIES,
    TREATMENT_PATHWAYS,
)
from wasteghg.emission_factors import (
    ELECTRIC_TRUCK_KWH_PER_KM,
    GRID_ELECTRICITY_EF,
    SCENARIO_EMISSION_FACTORS,
    get_fuel_factor,
)
from wasteghg.schemas import (
    Fleet,
    PathwayComposition,
    ScenarioComposition,
    ScenarioEmissions,
    TreatmentAllocation,
)

logger = logging.getLogger(__name__)


@dataclass
class ScenarioComparison:
    """Baseline minus intervention. Positive values are improvements."""
    absolute_reduction: float
    percentage_reduction: float
    by_category: dict[str, float] = field(default_factory=dict)


def _as_composition(
    composition: ScenarioComposition | Mapping[str, Any],
) -> ScenarioComposition:
    if isinstance(composition, PathwayComposition):
        raise TypeError(
            "calc_scenario_emissions expects a ScenarioComposition "
            "(food, paper, plastic, metal, glass, textile, others), "
            "not a 12-bucket PathwayComposition"
        )
    if isinstance(composition, ScenarioComposition):
        return composition
    unknown = sorted(set(composition) - set(ScenarioComposition.model_fields))
    if unknown:
        raise TypeError(
            "calc_scenario_emissions expects a ScenarioComposition; "
            f"unknown bucket(s): {', '.join(unknown)}"
        )
    return ScenarioComposition.model_validate(dict(composition))


# ─────────────────────────────────────────────────────────────────────────────
# Transportation
# Formula: diesel km × L/km × energy × (CO₂ + CH₄·25 + N₂O·298)
#          + electric km × 1.2 kWh/km × grid_factor
# ─────────────────────────────────────────────────────────────────────────────

def calc_fleet_emissions(
    fleet: Fleet | Mapping[str, Any],
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> float:
    """
    Monthly kg CO₂e for a collection fleet.

    The total distance is split between diesel and electric trucks in
    proportion to their counts. An empty fleet emits nothing.
    """
    if not isinstance(fleet, Fleet):
        fleet = Fleet.model_validate(dict(fleet))

    trucks = fleet.diesel_trucks + fleet.electric_trucks
    share_base = trucks or 1

    diesel_km = fleet.diesel_trucks / share_base * fleet.total_distance
    litres = diesel_km * fleet.fuel_efficiency
    diesel = get_fuel_factor("diesel")
    diesel_kg = litres * diesel.energy_content * diesel.co2e_per_mj

    electric_km = fleet.electric_trucks / share_base * fleet.total_distance
    electric_kg = electric_km * ELECTRIC_TRUCK_KWH_PER_KM * grid_factor

    logger.debug(
        "Fleet | %.1f diesel km (%.1f L) = %.2f kg, %.1f electric km = %.2f kg",
        diesel_km, litres, diesel_kg, electric_km, electric_kg,
    )
    return diesel_kg + electric_kg


# ─────────────────────────────────────────────────────────────────────────────
# Treatment pathways
# ─────────────────────────────────────────────────────────────────────────────

def calc_treatment_emissions(
    composition: ScenarioComposition | Mapping[str, Any],
    allocation_pct: float,
    pathway: str,
) -> float:
    """
    kg CO₂e per tonne of *total* scenario waste sent through *pathway*.

    Buckets missing from the factor table contribute 0.
    """
    comp = _as_composition(composition)
    try:
        factors = SCENARIO_EMISSION_FACTORS[pathway]
    except KeyError:
        raise ValueError(f"Unknown treatment pathway: {pathway!r}") from None
    return sum(
        (pct / 100.0) * (allocation_pct / 100.0) * factors.get(bucket, 0.0)
        for bucket, pct in comp.percentages().items()
    )


def calc_scenario_emissions(
    composition: ScenarioComposition | Mapping[str, Any],
    allocation: TreatmentAllocation | Mapping[str, Any],
    fleet: Fleet | Mapping[str, Any],
    total_waste_tonnes: float = DEFAULT_TOTAL_WASTE_TONNES,
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> ScenarioEmissions:
    """
    Absolute monthly kg CO₂e per category for one scenario.

    Parameters
    ──────────
    composition        : 7-bucket ScenarioComposition (a PathwayComposition
                         raises TypeError)
    allocation         : share of waste per treatment pathway (%)
    fleet              : collection fleet
    total_waste_tonnes : monthly tonnage the treatment intensities scale to
    grid_factor        : kg CO₂e/kWh for electric trucks

    Returns
    ───────
    ScenarioEmissions whose ``total`` is the sum of the eight categories.
    """
    comp = _as_composition(composition)
    if not isinstance(allocation, TreatmentAllocation):
        allocation = TreatmentAllocation.model_validate(dict(allocation))

    values: dict[str, float] = {
        CATEGORY_TRANSPORTATION: calc_fleet_emissions(fleet, grid_factor),
    }
    for pathway in TREATMENT_PATHWAYS:
        intensity = calc_treatment_emissions(comp, getattr(allocation, pathway), pathway)
        values[pathway] = intensity * total_waste_tonnes

    total = math.fsum(values[c] for c in SCENARIO_CATEGORIES)
    logger.debug("Scenario emissions | %.1f t → total %.2f kg CO₂e", total_waste_tonnes, total)
    return ScenarioEmissions(**values, total=total)


# ─────────────────────────────────────────────────────────────────────────────
# Comparison
# ─────────────────────────────────────────────────────────────────────────────

def compare_scenarios(
    baseline: ScenarioEmissions,
    intervention: ScenarioEmissions,
) -> ScenarioComparison:
    """Return baseline − intervention overall and per category."""
    reduction = baseline.total - intervention.total
    percentage = reduction / baseline.total * 100 if baseline.total != 0 else 0.0
    by_category = {
        category: getattr(baseline, category) - getattr(intervention, category)
        for category in SCENARIO_CATEGORIES
    }
    return ScenarioComparison(
        absolute_reduction=reduction,
        percentage_reduction=percentage,
        by_category=by_category,
    )
