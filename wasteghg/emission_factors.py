"""
emission_factors.py – Emission factor constants used in waste GHG calculations.

All factors are in kg per unit unless noted.
Sources: IPCC 2006 Guidelines Vol. 5 (Waste), IPCC AR4 GWPs, IGES Waste
Calculator vIII defaults, China Climate Change Info-Net grid factor.

Two independent families live here:

* pathway-level factors (fuel, DOC, combustion carbon, fertiliser, recycling)
  used by the detailed calculators in ``calculations.py``;
* scenario-level factors (single kg CO₂e/tonne numbers per material and
  pathway) used by ``scenario_calculations.py``.

The scenario-level numbers are coarse calibrations, not derived from the
pathway-level formulas. Do not recompute one family from the other.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Global warming potentials (IPCC AR4, 100-year horizon)
# ─────────────────────────────────────────────────────────────
GWP_CO2: float = 1.0
GWP_CH4: float = 25.0
GWP_N2O: float = 298.0

# ─────────────────────────────────────────────────────────────
# Grid electricity (kg CO₂e / kWh)
# Single-region constant; callers may pass their own factor.
# ─────────────────────────────────────────────────────────────
GRID_ELECTRICITY_EF: float = 0.855


# ─────────────────────────────────────────────────────────────
# Fuel combustion factors
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FuelFactor:
    """Energy content and per-MJ pollutant factors for one fuel."""
    energy_content: float   # MJ/L (MJ/kg for natural gas, see below)
    density: float          # kg/L
    co2: float              # kg CO₂ / MJ
    ch4: float              # kg CH₄ / MJ
    n2o: float              # kg N₂O / MJ

    @property
    def co2e_per_mj(self) -> float:
        """GWP-weighted kg CO₂e per MJ burned."""
        return self.co2 * GWP_CO2 + self.ch4 * GWP_CH4 + self.n2o * GWP_N2O


FUEL_FACTORS: dict[str, FuelFactor] = {
    "diesel":   FuelFactor(36.3972, 0.84, 0.0741, 0.000003, 0.0000006),
    "gasoline": FuelFactor(35.84,   0.80, 0.0693, 0.000003, 0.0000006),
    "lpg":      FuelFactor(25.0743, 0.53, 0.0631, 0.000003, 0.0000006),
    "kerosene": FuelFactor(35.8,    0.80, 0.0716, 0.000003, 0.0000006),
    # Natural gas is metered in kg/month, but this energy content is the
    # source table's MJ/L-labelled figure. It is applied as a flat multiplier
    # against the collected amount; correcting the unit would change every
    # natural-gas result.
    "natural_gas": FuelFactor(0.038931, 0.00074, 0.056, 0.0000003, 0.0000000001),
}

DEFAULT_FUEL: str = "diesel"

_FUEL_ALIASES: dict[str, str] = {
    "naturalgas": "natural_gas",
    "cng": "natural_gas",
    "petrol": "gasoline",
}


def normalize_key(name: str | None) -> str:
    """
    Return the snake_case table key for a material or fuel name.

    ``foodWaste`` → ``food_waste``, ``natural-gas`` → ``natural_gas``.
    """
    if not name:
        return ""
    key = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", str(name).strip())
    return re.sub(r"[\s\-]+", "_", key).lower()


def get_fuel_factor(fuel_type: str | None) -> FuelFactor:
    """Return the combustion factors for *fuel_type*, falling back to diesel."""
    key = normalize_key(fuel_type) or DEFAULT_FUEL
    key = _FUEL_ALIASES.get(key.replace("_", ""), key)
    factor = FUEL_FACTORS.get(key)
    if factor is None:
        logger.debug("Unknown fuel type %r; using %s factors", fuel_type, DEFAULT_FUEL)
        return FUEL_FACTORS[DEFAULT_FUEL]
    return factor


# ─────────────────────────────────────────────────────────────
# Landfill – degradable organic carbon (fraction, wet weight)
# IPCC 2006 Vol. 5 Table 2.4. Materials not listed carry no DOC.
# ─────────────────────────────────────────────────────────────
DOC_VALUES: dict[str, float] = {
    "food_waste": 0.15,
    "food": 0.15,
    "garden_waste": 0.20,
    "garden": 0.20,
    "paper": 0.41,
    "wood": 0.43,
    "textile": 0.24,
    "nappies": 0.24,
    "disposable_nappies": 0.24,
    "rubber": 0.45,
    "leather": 0.45,
}

DOCF: float = 0.5            # fraction of DOC that decomposes
METHANE_FRACTION: float = 0.5  # F, CH₄ share of landfill gas
CH4_C_RATIO: float = 16.0 / 12.0
DEFAULT_MCF: float = 0.8     # deep unmanaged site


def get_doc_value(material: str) -> float:
    """Return the DOC fraction for *material*; unknown materials give 0."""
    return DOC_VALUES.get(normalize_key(material), 0.0)


# ─────────────────────────────────────────────────────────────
# Biological treatment process factors (per kg wet waste)
# ─────────────────────────────────────────────────────────────
COMPOST_CH4_G_PER_KG: float = 4.0
COMPOST_N2O_G_PER_KG: float = 0.3
AD_CH4_LEAKAGE_G_PER_KG: float = 0.8

# Fertiliser substitution by compost:
#   nutrient → (kg nutrient replaced per tonne compost, kg CO₂e per kg nutrient)
FERTILIZER_OFFSETS: dict[str, tuple[float, float]] = {
    "N":    (7.1, 2.404),
    "P2O5": (4.1, 0.448),
    "K2O":  (5.4, 0.443),
}

# Anaerobic digestion biogas yield
BIOGAS_M3_PER_TONNE: float = 150.0
BIOGAS_CH4_CONTENT: float = 0.6
CH4_HEATING_VALUE_MJ_PER_M3: float = 37.0
BIOGAS_ELECTRIC_EFFICIENCY: float = 0.35
BIOGAS_BOTH_SPLIT: float = 0.5

# MBT plastic utilisation
RDF_ENERGY_MJ_PER_KG: float = 15.0
RDF_ELECTRIC_EFFICIENCY: float = 0.30


# ─────────────────────────────────────────────────────────────
# Combustion carbon parameters (IPCC 2006 Vol. 5 Table 2.4 / 5.2)
# dm = dry matter, tc = total carbon (of dm), fcf = fossil carbon fraction,
# all as fractions. Oxidation is applied per pathway.
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CarbonParams:
    dm: float
    tc: float
    fcf: float


COMBUSTION_PARAMS: dict[str, CarbonParams] = {
    "food_waste":   CarbonParams(0.40, 0.38, 0.00),
    "food":         CarbonParams(0.40, 0.38, 0.00),
    "garden_waste": CarbonParams(0.40, 0.49, 0.00),
    "garden":       CarbonParams(0.40, 0.49, 0.00),
    "paper":        CarbonParams(0.90, 0.46, 0.01),
    "cardboard":    CarbonParams(0.90, 0.46, 0.01),
    "textile":      CarbonParams(0.80, 0.50, 0.20),
    "wood":         CarbonParams(0.85, 0.50, 0.00),
    "nappies":      CarbonParams(0.40, 0.70, 0.10),
    "disposable_nappies": CarbonParams(0.40, 0.70, 0.10),
    "rubber":       CarbonParams(0.84, 0.67, 0.20),
    "leather":      CarbonParams(0.84, 0.67, 0.20),
    "plastics":     CarbonParams(1.00, 0.75, 1.00),
    "glass":        CarbonParams(1.00, 0.00, 0.00),
    "metal":        CarbonParams(1.00, 0.00, 0.00),
    "hazardous":    CarbonParams(0.90, 0.50, 0.50),
    "others":       CarbonParams(0.90, 0.03, 1.00),
}

INCINERATION_OXIDATION: float = 1.00
OPEN_BURNING_OXIDATION: float = 0.58
CO2_C_RATIO: float = 44.0 / 12.0

INCINERATION_N2O_KG_PER_TONNE: float = 0.05
OPEN_BURNING_N2O_KG_PER_TONNE: float = 0.1
OPEN_BURNING_CH4_KG_PER_TONNE: float = 6.5

# Average waste energy content for incineration energy recovery
WASTE_ENERGY_MJ_PER_TONNE: float = 10_000.0


def get_combustion_params(material: str) -> CarbonParams:
    """Return carbon parameters for *material*, falling back to ``others``."""
    params = COMBUSTION_PARAMS.get(normalize_key(material))
    if params is None:
        logger.debug("Unknown combustion material %r; using 'others'", material)
        return COMBUSTION_PARAMS["others"]
    return params


# ─────────────────────────────────────────────────────────────
# Recycling – avoided emissions (kg CO₂e per kg recycled)
# BIR 2016, APR 2018, IAI 2020, worldsteel 2020, US EPA 2019
# ─────────────────────────────────────────────────────────────
RECYCLING_AVOIDED_FACTORS: dict[str, float] = {
    "paper": 1.74,
    "plastic": 1.745,
    "aluminium": 0.59,
    "aluminum": 0.59,
    "steel": 1.53,
    "glass": 0.353,
}


def get_recycling_factor(material: str) -> float:
    """Return kg CO₂e avoided per kg of *material*; unknown materials give 0."""
    return RECYCLING_AVOIDED_FACTORS.get(normalize_key(material), 0.0)


# ─────────────────────────────────────────────────────────────
# Scenario-level factors (kg CO₂e per tonne of material treated)
# Negative recycling entries are net avoided emissions.
# ─────────────────────────────────────────────────────────────
SCENARIO_EMISSION_FACTORS: dict[str, dict[str, float]] = {
    "landfill": {
        "food": 250, "paper": 180, "plastic": 10, "metal": 5,
        "glass": 5, "textile": 120, "others": 80,
    },
    "composting": {
        "food": 25, "paper": 20, "plastic": 0, "metal": 0,
        "glass": 0, "textile": 15, "others": 10,
    },
    "anaerobic_digestion": {
        "food": 15, "paper": 12, "plastic": 0, "metal": 0,
        "glass": 0, "textile": 10, "others": 8,
    },
    "mbt": {
        "food": 80, "paper": 60, "plastic": 40, "metal": 20,
        "glass": 15, "textile": 50, "others": 35,
    },
    "recycling": {
        "food": 0, "paper": -850, "plastic": -1800, "metal": -5000,
        "glass": -300, "textile": -900, "others": -100,
    },
    "incineration": {
        "food": 30, "paper": 40, "plastic": 2500, "metal": 10,
        "glass": 5, "textile": 150, "others": 100,
    },
    "open_burning": {
        "food": 150, "paper": 200, "plastic": 3500, "metal": 50,
        "glass": 20, "textile": 250, "others": 180,
    },
}

# Electric collection trucks
ELECTRIC_TRUCK_KWH_PER_KM: float = 1.2


# ─────────────────────────────────────────────────────────────
# Unit conversion helpers
# ─────────────────────────────────────────────────────────────
MJ_PER_KWH: float = 3.6
KG_PER_TONNE: float = 1_000.0
KG_PER_GG: float = 1_000_000.0
TONNES_PER_GG: float = 1_000.0
MONTHS_PER_YEAR: int = 12

_MASS_IN_KG: dict[str, float] = {
    "g": 0.001,
    "kg": 1.0,
    "tonne": 1_000.0,
}


def convert_mass(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert *value* between g, kg and tonne.

    Unknown units leave the value unchanged.
    """
    if from_unit == to_unit:
        return value
    src = _MASS_IN_KG.get(from_unit.lower().rstrip("s"))
    dst = _MASS_IN_KG.get(to_unit.lower().rstrip("s"))
    if src is None or dst is None:
        return value
    return value * src / dst
