"""
module_to_scenario.py – Turn a single calculator run into a scenario draft.

Each ``create_scenario_from_*`` function takes the pathway input that was
just calculated (model or mapping) and, optionally, its ``EmissionResult``,
and returns a ``ScenarioDraft`` the user can refine before saving.

Only transportation and landfill read the input to shape the draft. The
other pathways use a fixed composition / allocation / fleet typical of a
system built around that pathway.
"""
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Callable, Mapping

from wasteghg.calculations import EmissionResult, coerce_input
from wasteghg.constants import (
    DEFAULT_FUEL_EFFICIENCY,
    DEFAULT_LANDFILL_TONNES,
    MODULE_ANAEROBIC_DIGESTION,
    MODULE_COMPOSTING,
    MODULE_INCINERATION,
    MODULE_LANDFILL,
    MODULE_MBT,
    MODULE_OPEN_BURNING,
    MODULE_RECYCLING,
    MODULE_TRANSPORTATION,
    OPEN_BURNING_SCENARIO_DESCRIPTION,
    TONNES_PER_LANDFILL_TRUCK,
    TRUCK_KM_PER_MONTH,
)
from wasteghg.emission_factors import normalize_key
from wasteghg.schemas import (
    AnaerobicDigestionInput,
    CompostingInput,
    Fleet,
    IncinerationInput,
    LandfillInput,
    MBTInput,
    OpenBurningInput,
    RecyclingInput,
    ScenarioComposition,
    ScenarioDraft,
    TransportationInput,
    TreatmentAllocation,
)

logger = logging.getLogger(__name__)

Data = Mapping[str, Any]


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _default_name(label: str, today: date | None) -> str:
    return f"{label} Scenario - {(today or date.today()).isoformat()}"


def _describe(text: str, result: EmissionResult | None) -> str:
    if result is None:
        return text
    return f"{text} ({result.total_emission:.2f} {result.unit})"


def _only(pathway: str) -> TreatmentAllocation:
    """Allocation sending 100 % of the waste to *pathway*."""
    return TreatmentAllocation(**{pathway: 100.0})


def _fixed_draft(
    label: str,
    description: str,
    composition: dict[str, float],
    pathway: str,
    fleet: tuple[int, int, float, float],
    result: EmissionResult | None,
    name: str | None,
    today: date | None,
) -> ScenarioDraft:
    diesel, electric, distance, efficiency = fleet
    return ScenarioDraft(
        name=name or _default_name(label, today),
        description=_describe(description, result),
        is_baseline=False,
        waste_composition=ScenarioComposition(**composition),
        treatment_allocation=_only(pathway),
        fleet=Fleet(
            diesel_trucks=diesel,
            electric_trucks=electric,
            total_distance=distance,
            fuel_efficiency=efficiency,
        ),
    )


# ─────────────────────────────────────────────────────────────
# Input-driven drafts
# ─────────────────────────────────────────────────────────────

def create_scenario_from_transportation(
    data: TransportationInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    """
    Draft a scenario around a transport run.

    The fleet is sized at one truck per 500 km of monthly driving (at least
    one), all electric or all combustion depending on the fuel type.
    """
    inp = coerce_input(TransportationInput, data)
    total_distance = inp.distance * inp.trips_per_month
    trucks = max(1, math.ceil(total_distance / TRUCK_KM_PER_MONTH))
    electric = normalize_key(inp.fuel_type) == "electric"
    efficiency = (
        inp.fuel_consumption if inp.fuel_consumption is not None else DEFAULT_FUEL_EFFICIENCY
    )

    return ScenarioDraft(
        name=name or _default_name("Transportation", today),
        description=_describe(
            f"Based on {inp.fuel_type} transport: "
            f"{inp.distance:g} km × {inp.trips_per_month:g} trips/month",
            result,
        ),
        is_baseline=False,
        waste_composition=ScenarioComposition(
            food=35, paper=20, plastic=15, metal=10, glass=5, textile=5, others=10,
        ),
        treatment_allocation=TreatmentAllocation(
            landfill=60, composting=10, recycling=15, incineration=10, open_burning=5,
        ),
        fleet=Fleet(
            diesel_trucks=0 if electric else trucks,
            electric_trucks=trucks if electric else 0,
            total_distance=total_distance,
            fuel_efficiency=efficiency,
        ),
    )


def create_scenario_from_landfill(
    data: LandfillInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    """
    Draft a 100 % landfill scenario from a landfill run.

    The 12-bucket composition is normalised against its own total and folded
    into the 7 scenario buckets. Leather, wood, nappies, hazardous and others
    become ``others``. Garden waste has no scenario bucket, so the folded
    composition sums to less than 100 whenever garden waste is present.
    """
    inp = coerce_input(LandfillInput, data)
    pct = inp.composition.percentages()
    total = sum(pct.values())

    def share(*keys: str) -> float:
        if total <= 0:
            return 0.0
        return sum(pct.get(k, 0.0) for k in keys) / total * 100.0

    composition = ScenarioComposition(
        food=share("food_waste"),
        paper=share("paper"),
        plastic=share("plastics"),
        metal=share("metal"),
        glass=share("glass"),
        textile=share("textile"),
        others=share("leather", "wood", "nappies", "hazardous", "others"),
    )
    tonnes = inp.waste_per_month or DEFAULT_LANDFILL_TONNES

    return ScenarioDraft(
        name=name or _default_name("Landfill", today),
        description=_describe(
            f"Based on {inp.waste_per_month:g} tonnes/month "
            f"with {inp.gas_recovery:g}% gas recovery",
            result,
        ),
        is_baseline=False,
        waste_composition=composition,
        treatment_allocation=_only("landfill"),
        fleet=Fleet(
            diesel_trucks=max(1, math.ceil(tonnes / TONNES_PER_LANDFILL_TRUCK)),
            electric_trucks=0,
            total_distance=500,
            fuel_efficiency=DEFAULT_FUEL_EFFICIENCY,
        ),
    )


# ─────────────────────────────────────────────────────────────
# Fixed-profile drafts
# ─────────────────────────────────────────────────────────────

def create_scenario_from_composting(
    data: CompostingInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    inp = coerce_input(CompostingInput, data)
    return _fixed_draft(
        "Composting",
        f"Based on {inp.food_waste + inp.garden_waste:g} tonnes composting",
        dict(food=50, paper=20, textile=10, others=20),
        "composting",
        (5, 0, 300, 0.22),
        result, name, today,
    )


def create_scenario_from_anaerobic_digestion(
    data: AnaerobicDigestionInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    inp = coerce_input(AnaerobicDigestionInput, data)
    return _fixed_draft(
        "Anaerobic Digestion",
        f"Based on {inp.food_waste + inp.garden_waste:g} tonnes anaerobic digestion",
        dict(food=60, paper=15, textile=5, others=20),
        "anaerobic_digestion",
        (5, 0, 300, 0.22),
        result, name, today,
    )


def create_scenario_from_recycling(
    data: RecyclingInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    coerce_input(RecyclingInput, data)
    return _fixed_draft(
        "Recycling",
        "Based on recycling operations",
        dict(paper=30, plastic=25, metal=20, glass=15, textile=5, others=5),
        "recycling",
        (8, 2, 400, 0.23),
        result, name, today,
    )


def create_scenario_from_incineration(
    data: IncinerationInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    coerce_input(IncinerationInput, data)
    return _fixed_draft(
        "Incineration",
        "Based on incineration with energy recovery",
        dict(food=20, paper=25, plastic=30, metal=5, glass=5, textile=10, others=5),
        "incineration",
        (6, 0, 350, 0.24),
        result, name, today,
    )


def create_scenario_from_mbt(
    data: MBTInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    coerce_input(MBTInput, data)
    return _fixed_draft(
        "MBT",
        "Based on Mechanical Biological Treatment",
        dict(food=30, paper=20, plastic=20, metal=10, glass=5, textile=10, others=5),
        "mbt",
        (7, 0, 400, 0.25),
        result, name, today,
    )


def create_scenario_from_open_burning(
    data: OpenBurningInput | Data,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    coerce_input(OpenBurningInput, data)
    return _fixed_draft(
        "Open Burning",
        OPEN_BURNING_SCENARIO_DESCRIPTION,
        dict(food=25, paper=25, plastic=25, metal=5, glass=5, textile=10, others=5),
        "open_burning",
        (3, 0, 200, 0.25),
        result, name, today,
    )


# ─────────────────────────────────────────────────────────────
# Dispatcher
# ─────────────────────────────────────────────────────────────

SCENARIO_BUILDERS: dict[str, Callable[..., ScenarioDraft]] = {
    MODULE_TRANSPORTATION: create_scenario_from_transportation,
    MODULE_LANDFILL: create_scenario_from_landfill,
    MODULE_COMPOSTING: create_scenario_from_composting,
    MODULE_ANAEROBIC_DIGESTION: create_scenario_from_anaerobic_digestion,
    MODULE_RECYCLING: create_scenario_from_recycling,
    MODULE_INCINERATION: create_scenario_from_incineration,
    MODULE_MBT: create_scenario_from_mbt,
    MODULE_OPEN_BURNING: create_scenario_from_open_burning,
}


def create_scenario_from_module(
    module_type: str,
    data: Data | Any,
    result: EmissionResult | None = None,
    name: str | None = None,
    *,
    today: date | None = None,
) -> ScenarioDraft:
    """
    Route a calculator run to its scenario builder.

    Raises
    ------
    ValueError
        If *module_type* is not one of the eight calculator modules.
    """
    builder = SCENARIO_BUILDERS.get(module_type)
    if builder is None:
        raise ValueError(f"Unknown module type: {module_type}")
    draft = builder(data, result, name, today=today)
    logger.debug("Drafted scenario %r from %s module", draft.name, module_type)
    return draft
