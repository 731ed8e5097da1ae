"""
calculations.py – Pathway emission calculation engine.

Each ``calc_*`` function takes one pathway's monthly activity data (a
pydantic input model from ``schemas.py`` or a plain mapping with the same
camelCase / snake_case keys), applies the IPCC-style formula for that
pathway and returns an ``EmissionResult`` normalised per tonne of waste.

Emission formula references
────────────────────────────
 Pathway              Direct                                   Avoided
 ─────────────────────────────────────────────────────────────────────────
 Transportation       fuel × energy × (CO₂ + CH₄·25 + N₂O·298)  –
 Landfill             DOC × DOCf × MCF × 16/12 × F × (1−R)(1−OX)  –
 Composting           4 g CH₄ + 0.3 g N₂O per kg organics      fertiliser
 Anaerobic digestion  0.8 g CH₄ leakage per kg                  biogas energy
 MBT                  mechanical energy + composting of bio     compost, RDF / oil
 Recycling            operational energy                        virgin material
 Incineration         Σ kg × DM × TC × FCF × 1.00 × 44/12       energy recovery
 Open burning         Σ kg × DM × TC × FCF × 0.58 × 44/12       –

Operational energy (auxiliary fuel and grid electricity) is added to ``co2``
as CO₂e so that ``co2 + 25·ch4 + 298·n2o`` always equals the direct total.

Every calculator returns an all-zero result when its primary waste quantity
is zero or negative. None of them raise on degenerate input.

All eight take a keyword ``grid_factor`` so ``PATHWAY_CALCULATORS`` can be
called uniformly. Landfill, composting and open burning collect auxiliary
fuel only, so for them it has no effect.

Usage
──────
    from wasteghg.calculations import calc_landfill

    result = calc_landfill({"wastePerMonth": 100})
    result.total_emission        # kg CO₂e per tonne
    result.to_dict()             # camelCase mapping for the UI / export
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel

from wasteghg.constants import OPEN_BURNING_WARNING, UNIT_PER_TONNE
from wasteghg.emission_factors import (
    AD_CH4_LEAKAGE_G_PER_KG,
    BIOGAS_BOTH_SPLIT,
    BIOGAS_CH4_CONTENT,
    BIOGAS_ELECTRIC_EFFICIENCY,
    BIOGAS_M3_PER_TONNE,
    CH4_C_RATIO,
    CH4_HEATING_VALUE_MJ_PER_M3,
    CO2_C_RATIO,
    COMPOST_CH4_G_PER_KG,
    COMPOST_N2O_G_PER_KG,
    DOCF,
    FERTILIZER_OFFSETS,
    GRID_ELECTRICITY_EF,
    GWP_CH4,
    GWP_N2O,
    INCINERATION_N2O_KG_PER_TONNE,
    INCINERATION_OXIDATION,
    KG_PER_GG,
    KG_PER_TONNE,
    METHANE_FRACTION,
    MJ_PER_KWH,
    MONTHS_PER_YEAR,
    OPEN_BURNING_CH4_KG_PER_TONNE,
    OPEN_BURNING_N2O_KG_PER_TONNE,
    OPEN_BURNING_OXIDATION,
    RDF_ELECTRIC_EFFICIENCY,
    RDF_ENERGY_MJ_PER_KG,
    TONNES_PER_GG,
    WASTE_ENERGY_MJ_PER_TONNE,
    get_combustion_params,
    get_doc_value,
    get_fuel_factor,
    get_recycling_factor,
    normalize_key,
)
from wasteghg.schemas import (
    AnaerobicDigestionInput,
    CompostingInput,
    FuelUse,
    IncinerationInput,
    LandfillInput,
    MBTInput,
    OpenBurningInput,
    PathwayComposition,
    RecyclingInput,
    TransportationInput,
)

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


# ─────────────────────────────────────────────────────────────────────────────
# Result dataclass
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class EmissionResult:
    """Per-tonne emission result for one pathway."""
    co2: float = 0.0                # kg CO₂ (incl. operational CO₂e) / tonne
    ch4: float = 0.0                # kg CH₄ / tonne
    n2o: float = 0.0                # kg N₂O / tonne
    total_emission: float = 0.0     # kg CO₂e / tonne, negative = net avoidance
    total_co2e: float = 0.0         # t CO₂e / tonne
    unit: str = UNIT_PER_TONNE
    direct_emissions: float | None = None
    avoided_emissions: float | None = None
    warning: str | None = None

    @classmethod
    def zero(cls) -> EmissionResult:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase mapping used by the UI and report exports."""
        out: dict[str, Any] = {
            "co2": self.co2,
            "ch4": self.ch4,
            "n2o": self.n2o,
            "totalEmission": self.total_emission,
            "totalCO2e": self.total_co2e,
            "unit": self.unit,
        }
        if self.direct_emissions is not None:
            out["directEmissions"] = self.direct_emissions
        if self.avoided_emissions is not None:
            out["avoidedEmissions"] = self.avoided_emissions
        if self.warning is not None:
            out["warning"] = self.warning
        return out


def _result(
    co2: float,
    ch4: float,
    n2o: float,
    total: float,
    *,
    direct: float | None = None,
    avoided: float | None = None,
    warning: str | None = None,
) -> EmissionResult:
    return EmissionResult(
        co2=co2,
        ch4=ch4,
        n2o=n2o,
        total_emission=total,
        total_co2e=total / KG_PER_TONNE,
        direct_emissions=direct,
        avoided_emissions=avoided,
        warning=warning,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Internal helpers
# ─────────────────────────────────────────────────────────────────────────────

def coerce_input(model: type[_M], data: _M | Mapping[str, Any] | None) -> _M:
    """Return *data* as an instance of *model*, validating plain mappings."""
    if isinstance(data, model):
        return data
    return model.model_validate(dict(data or {}))


def _fuel_co2e(fuel_use: FuelUse | None) -> float:
    """GWP-weighted kg CO₂e from burning an auxiliary fuel record."""
    if fuel_use is None or not fuel_use.amount or not fuel_use.type:
        return 0.0
    ef = get_fuel_factor(fuel_use.type)
    return fuel_use.amount * ef.energy_content * ef.co2e_per_mj


def _operational_emissions(
    fuel_use: FuelUse | None,
    electricity_kwh: float = 0.0,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> float:
    """Total kg CO₂e per month from auxiliary fuel plus grid electricity."""
    return _fuel_co2e(fuel_use) + (electricity_kwh or 0.0) * grid_factor


def _fertilizer_offset(compost_used_tonnes: float) -> float:
    """kg CO₂e of chemical fertiliser replaced by *compost_used_tonnes*."""
    if compost_used_tonnes <= 0:
        return 0.0
    per_tonne = sum(rate * factor for rate, factor in FERTILIZER_OFFSETS.values())
    return per_tonne * compost_used_tonnes


def _fossil_co2(
    composition: PathwayComposition,
    waste_tonnes: float,
    oxidation: float,
) -> float:
    """
    Fossil CO₂ (kg) from combusting *waste_tonnes* of the given composition.

    CO₂ = Σ amount_kg × DM × TC × FCF × OF × 44/12
    """
    total = 0.0
    for material, pct in composition.percentages().items():
        params = get_combustion_params(material)
        amount_kg = (pct / 100.0) * waste_tonnes * KG_PER_TONNE
        total += amount_kg * params.dm * params.tc * params.fcf * oxidation * CO2_C_RATIO
    return total


# ─────────────────────────────────────────────────────────────────────────────
# 1. Transportation
# Formula: fuel (L) × energy content (MJ/L) × per-MJ factors, GWP-weighted
# ─────────────────────────────────────────────────────────────────────────────

def calc_transportation(
    data: TransportationInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """
    Collection and haulage emissions per tonne transported.

    Fuel is ``distance × trips × rate`` when all three are given, otherwise
    ``total_fuel``. Electric fleets report grid emissions entirely as ``co2``.
    """
    inp = coerce_input(TransportationInput, data)
    waste = inp.waste_transported
    if waste <= 0:
        return EmissionResult.zero()

    if normalize_key(inp.fuel_type) == "electric":
        per_tonne = inp.electricity * grid_factor / waste
        logger.debug(
            "Transportation electric | %.2f kWh × %.4f / %.2f t = %.4f kg CO₂e/t",
            inp.electricity, grid_factor, waste, per_tonne,
        )
        return _result(per_tonne, 0.0, 0.0, per_tonne)

    fuel = inp.total_fuel
    if inp.distance and inp.trips_per_month and inp.fuel_consumption:
        fuel = inp.distance * inp.trips_per_month * inp.fuel_consumption

    ef = get_fuel_factor(inp.fuel_type)
    energy = fuel * ef.energy_content
    co2 = energy * ef.co2
    ch4 = energy * ef.ch4
    n2o = energy * ef.n2o
    total = co2 + ch4 * GWP_CH4 + n2o * GWP_N2O

    logger.debug(
        "Transportation %s | %.2f fuel → %.2f MJ → %.4f kg CO₂e over %.2f t",
        inp.fuel_type, fuel, energy, total, waste,
    )
    return _result(co2 / waste, ch4 / waste, n2o / waste, total / waste)


# ─────────────────────────────────────────────────────────────────────────────
# 2. Landfill – steady-state single-period FOD approximation
# Formula: CH₄ = W × DOC × DOCf × MCF × 16/12 × F × (1 − R)(1 − OX)
# ─────────────────────────────────────────────────────────────────────────────

def calc_landfill(
    data: LandfillInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """
    Landfill methane per tonne deposited.

    The monthly tonnage is annualised to Gg for the DDOCm term and scaled
    back to kg per month, so the per-tonne result depends only on the
    composition and site parameters. N₂O is always 0.
    """
    inp = coerce_input(LandfillInput, data)
    waste = inp.waste_per_month
    if waste <= 0:
        return EmissionResult.zero()

    weighted_doc = sum(
        (pct / 100.0) * get_doc_value(material)
        for material, pct in inp.composition.percentages().items()
    )

    waste_gg_per_year = waste * MONTHS_PER_YEAR / TONNES_PER_GG
    ddocm = waste_gg_per_year * weighted_doc * DOCF * inp.mcf
    ch4_generated_gg = ddocm * CH4_C_RATIO * METHANE_FRACTION
    ch4_generated_kg_month = ch4_generated_gg * KG_PER_GG / MONTHS_PER_YEAR

    recovery = inp.gas_recovery / 100.0
    ch4_emitted = ch4_generated_kg_month * (1 - recovery) * (1 - inp.oxidation)
    ch4_per_tonne = ch4_emitted / waste

    # Landfill forms collect auxiliary fuel only, no electricity.
    operational = _operational_emissions(inp.fuel_use) / waste
    total = ch4_per_tonne * GWP_CH4 + operational

    logger.debug(
        "Landfill | %.2f t, DOC=%.4f, MCF=%.2f, R=%.2f, OX=%.2f → %.4f kg CH₄/t",
        waste, weighted_doc, inp.mcf, recovery, inp.oxidation, ch4_per_tonne,
    )
    return _result(operational, ch4_per_tonne, 0.0, total)


# ─────────────────────────────────────────────────────────────────────────────
# 3. Composting
# Formula: 4 g CH₄ + 0.3 g N₂O per kg food + garden waste; fertiliser credit
# ─────────────────────────────────────────────────────────────────────────────

def calc_composting(
    data: CompostingInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """Composting process emissions net of replaced chemical fertiliser."""
    inp = coerce_input(CompostingInput, data)
    waste = inp.food_waste + inp.garden_waste
    if waste <= 0:
        return EmissionResult.zero()

    ch4 = waste * COMPOST_CH4_G_PER_KG      # t × 1000 kg/t × g/kg ÷ 1000 g/kg
    n2o = waste * COMPOST_N2O_G_PER_KG
    operational = _operational_emissions(inp.fuel_use) / waste

    direct = (ch4 * GWP_CH4 + n2o * GWP_N2O) / waste + operational
    compost_used = inp.compost_production * inp.compost_use_percentage / 100.0
    avoided = _fertilizer_offset(compost_used) / waste
    net = direct - avoided

    logger.debug(
        "Composting | %.2f t organics, %.2f t compost used → direct=%.4f avoided=%.4f",
        waste, compost_used, direct, avoided,
    )
    return _result(
        operational, ch4 / waste, n2o / waste, net,
        direct=direct, avoided=avoided,
    )


# ─────────────────────────────────────────────────────────────────────────────
# 4. Anaerobic digestion
# Formula: 0.8 g CH₄ leakage per kg; biogas 150 m³/t × 60 % CH₄ × 37 MJ/m³
# ─────────────────────────────────────────────────────────────────────────────

def calc_anaerobic_digestion(
    data: AnaerobicDigestionInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """
    Digester leakage plus operational energy, net of biogas use.

    ``thermal`` biogas replaces LPG combustion CO₂, ``electricity`` replaces
    grid power at 35 % conversion efficiency, ``both`` splits the energy 50/50.
    """
    inp = coerce_input(AnaerobicDigestionInput, data)
    waste = inp.food_waste + inp.garden_waste
    if waste <= 0:
        return EmissionResult.zero()

    ch4 = waste * AD_CH4_LEAKAGE_G_PER_KG
    operational = _operational_emissions(inp.fuel_use, inp.electricity_use, grid_factor)
    direct = (ch4 * GWP_CH4 + operational) / waste

    biogas_m3 = waste * BIOGAS_M3_PER_TONNE
    energy_mj = biogas_m3 * BIOGAS_CH4_CONTENT * CH4_HEATING_VALUE_MJ_PER_M3

    lpg = get_fuel_factor("lpg")
    mode = inp.biogas_utilization
    if mode == "thermal":
        thermal_mj, electric_mj = energy_mj, 0.0
    elif mode == "electricity":
        thermal_mj, electric_mj = 0.0, energy_mj
    else:
        thermal_mj = energy_mj * BIOGAS_BOTH_SPLIT
        electric_mj = energy_mj * (1 - BIOGAS_BOTH_SPLIT)

    kwh = electric_mj / MJ_PER_KWH * BIOGAS_ELECTRIC_EFFICIENCY
    avoided = (thermal_mj * lpg.co2 + kwh * grid_factor) / waste
    net = direct - avoided

    logger.debug(
        "Anaerobic digestion | %.2f t, %s, %.0f MJ biogas → direct=%.4f avoided=%.4f",
        waste, mode, energy_mj, direct, avoided,
    )
    return _result(
        operational / waste, ch4 / waste, 0.0, net,
        direct=direct, avoided=avoided,
    )


# ─────────────────────────────────────────────────────────────────────────────
# 5. Mechanical-biological treatment
# Formula: mechanical energy + composting factors on the biodegradable share
# ─────────────────────────────────────────────────────────────────────────────

def calc_mbt(
    data: MBTInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """
    MBT emissions per tonne of mixed waste.

    Avoided emissions combine the compost fertiliser credit with the plastic
    route: RDF (15 MJ/kg at 30 % electric efficiency) or pyrolysis crude oil
    replacing diesel combustion CO₂.
    """
    inp = coerce_input(MBTInput, data)
    waste = inp.mixed_waste
    if waste <= 0:
        return EmissionResult.zero()

    mechanical = _operational_emissions(inp.fuel_use, inp.electricity_use, grid_factor)

    bio_tonnes = waste * inp.biodegradable_percentage / 100.0
    ch4 = bio_tonnes * COMPOST_CH4_G_PER_KG
    n2o = bio_tonnes * COMPOST_N2O_G_PER_KG
    direct = (mechanical + ch4 * GWP_CH4 + n2o * GWP_N2O) / waste

    compost_used = inp.compost_production * inp.compost_use_percentage / 100.0
    avoided_kg = _fertilizer_offset(compost_used)

    if inp.plastic_utilization == "rdf" and inp.plastic_amount > 0:
        rdf_mj = inp.plastic_amount * KG_PER_TONNE * RDF_ENERGY_MJ_PER_KG
        avoided_kg += rdf_mj / MJ_PER_KWH * RDF_ELECTRIC_EFFICIENCY * grid_factor
    elif inp.plastic_utilization == "crudeOil" and inp.crude_oil_production > 0:
        diesel = get_fuel_factor("diesel")
        oil_used = inp.crude_oil_production * inp.crude_oil_use_percentage / 100.0
        avoided_kg += oil_used * diesel.energy_content * diesel.co2

    avoided = avoided_kg / waste
    net = direct - avoided

    logger.debug(
        "MBT | %.2f t mixed, %.2f t bio, plastic=%s → direct=%.4f avoided=%.4f",
        waste, bio_tonnes, inp.plastic_utilization, direct, avoided,
    )
    return _result(
        mechanical / waste, ch4 / waste, n2o / waste, net,
        direct=direct, avoided=avoided,
    )


# ─────────────────────────────────────────────────────────────────────────────
# 6. Recycling
# Formula: avoided = Σ tonnes × share × recyclability × factor (kg CO₂e/kg)
# ─────────────────────────────────────────────────────────────────────────────

def calc_recycling(
    data: RecyclingInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """Recycling operations net of avoided virgin-material production."""
    inp = coerce_input(RecyclingInput, data)
    waste = inp.total_recyclables
    if waste <= 0:
        return EmissionResult.zero()

    operational = _operational_emissions(
        inp.fuel_use, inp.electricity_use, grid_factor,
    ) / waste

    avoided_kg = 0.0
    for material, pct in inp.composition.percentages().items():
        recycled_t = (pct / 100.0) * waste * (inp.recyclability / 100.0)
        avoided_kg += recycled_t * KG_PER_TONNE * get_recycling_factor(material)
    avoided = avoided_kg / waste
    net = operational - avoided

    logger.debug(
        "Recycling | %.2f t at %.1f%% → operational=%.4f avoided=%.4f",
        waste, inp.recyclability, operational, avoided,
    )
    return _result(
        operational, 0.0, 0.0, net,
        direct=operational, avoided=avoided,
    )


# ─────────────────────────────────────────────────────────────────────────────
# 7. Incineration
# Formula: fossil CO₂ (OF = 1.00) + 0.05 kg N₂O/t; energy recovery credit
# ─────────────────────────────────────────────────────────────────────────────

def calc_incineration(
    data: IncinerationInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """
    Incineration emissions per tonne, net of recovered energy.

    Parameters
    ──────────
    data        : IncinerationInput or mapping; ``incinerationType`` selects
                  the recovery mode (no-energy, electricity, heat, both)
    grid_factor : kg CO₂e/kWh used for plant electricity and exported power

    Returns
    ───────
    EmissionResult with direct and avoided decomposition.
    """
    inp = coerce_input(IncinerationInput, data)
    waste = inp.waste_amount
    if waste <= 0:
        return EmissionResult.zero()

    fossil = _fossil_co2(inp.composition, waste, INCINERATION_OXIDATION)
    n2o = waste * INCINERATION_N2O_KG_PER_TONNE
    operational = _operational_emissions(inp.fuel_use, inp.electricity_use, grid_factor)

    co2 = (fossil + operational) / waste
    direct = co2 + (n2o / waste) * GWP_N2O

    recovery = inp.energy_recovery
    mode = inp.incineration_type
    avoided = 0.0
    if mode in ("electricity", "both"):
        kwh = WASTE_ENERGY_MJ_PER_TONNE * recovery.electricity_efficiency / 100.0 / MJ_PER_KWH
        exported = kwh * (1 - recovery.electricity_onsite_percentage / 100.0)
        avoided += exported * grid_factor
    if mode in ("heat", "both"):
        heat_mj = WASTE_ENERGY_MJ_PER_TONNE * recovery.heat_efficiency / 100.0
        exported_mj = heat_mj * (1 - recovery.heat_onsite_percentage / 100.0)
        avoided += exported_mj * get_fuel_factor(recovery.replaced_fuel_type).co2
    net = direct - avoided

    logger.debug(
        "Incineration | %.2f t, mode=%s, fossil CO₂=%.2f kg → direct=%.4f avoided=%.4f",
        waste, mode, fossil, direct, avoided,
    )
    return _result(
        co2, 0.0, n2o / waste, net,
        direct=direct, avoided=avoided,
    )


# ─────────────────────────────────────────────────────────────────────────────
# 8. Open burning
# Formula: fossil CO₂ (OF = 0.58) + 6.5 kg CH₄/t + 0.1 kg N₂O/t
# ─────────────────────────────────────────────────────────────────────────────

def calc_open_burning(
    data: OpenBurningInput | Mapping[str, Any],
    *,
    grid_factor: float = GRID_ELECTRICITY_EF,
) -> EmissionResult:
    """Open burning emissions per tonne, plus auxiliary fuel. Always carries a toxicity warning."""
    inp = coerce_input(OpenBurningInput, data)
    waste = inp.waste_amount
    if waste <= 0:
        return EmissionResult.zero()

    fossil = _fossil_co2(inp.composition, waste, OPEN_BURNING_OXIDATION)
    operational = _operational_emissions(inp.fuel_use)
    co2 = (fossil + operational) / waste
    ch4 = OPEN_BURNING_CH4_KG_PER_TONNE
    n2o = OPEN_BURNING_N2O_KG_PER_TONNE
    total = co2 + ch4 * GWP_CH4 + n2o * GWP_N2O

    logger.debug("Open burning | %.2f t → %.4f kg CO₂e/t", waste, total)
    return _result(co2, ch4, n2o, total, warning=OPEN_BURNING_WARNING)


PATHWAY_CALCULATORS = {
    "transportation": calc_transportation,
    "landfill": calc_landfill,
    "composting": calc_composting,
    "anaerobic_digestion": calc_anaerobic_digestion,
    "mbt": calc_mbt,
    "recycling": calc_recycling,
    "incineration": calc_incineration,
    "open_burning": calc_open_burning,
}
