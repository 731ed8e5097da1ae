"""
Unit tests for wasteghg/calculations.py

Every calculator is pure, so the tests feed plain camelCase dicts (as the
calculator forms send them) and compare against values worked out by hand
from the factor tables.
"""
import logging

import pytest
from pydantic import ValidationError

from wasteghg.calculations import (
    PATHWAY_CALCULATORS,
    EmissionResult,
    calc_anaerobic_digestion,
    calc_composting,
    calc_incineration,
    calc_landfill,
    calc_mbt,
    calc_open_burning,
    calc_recycling,
    calc_transportation,
)
from wasteghg.constants import OPEN_BURNING_WARNING
from wasteghg.schemas import LandfillInput, PathwayComposition

# Diesel: 36.3972 MJ/L × (0.0741 + 3e-6·25 + 6e-7·298) kg CO₂e/MJ
DIESEL_CO2E_PER_MJ = 0.0741 + 0.000003 * 25 + 0.0000006 * 298
DIESEL_CO2E_PER_L = 36.3972 * DIESEL_CO2E_PER_MJ

# Fossil CO₂ per tonne of the default 12-bucket composition at OF = 1.0
#   plastics 70 kg, paper 60, textile 60, leather 50, nappies 20, hazardous 30, others 30
DEFAULT_FOSSIL_CO2 = (44 / 12) * (
    70 * 1.00 * 0.75 * 1.00
    + 60 * 0.90 * 0.46 * 0.01
    + 60 * 0.80 * 0.50 * 0.20
    + 50 * 0.84 * 0.67 * 0.20
    + 20 * 0.40 * 0.70 * 0.10
    + 30 * 0.90 * 0.50 * 0.50
    + 30 * 0.90 * 0.03 * 1.00
)


def gwp_sum(result: EmissionResult) -> float:
    return result.co2 + 25 * result.ch4 + 298 * result.n2o


# ─────────────────────────────────────────────────────────────────────────────
# Shared properties across all eight calculators
# ─────────────────────────────────────────────────────────────────────────────

class TestZeroInput:

    @pytest.mark.parametrize("name", sorted(PATHWAY_CALCULATORS))
    def test_empty_input_gives_zero_result(self, name):
        result = PATHWAY_CALCULATORS[name]({})
        assert result == EmissionResult()
        assert result.direct_emissions is None
        assert result.avoided_emissions is None
        assert result.warning is None

    def test_zero_waste_ignores_other_inputs(self):
        result = calc_incineration({
            "wasteAmount": 0,
            "electricityUse": 5000,
            "incinerationType": "both",
        })
        assert result.total_emission == 0
        assert result.avoided_emissions is None

    def test_unit_is_per_tonne(self):
        assert calc_landfill({"wastePerMonth": 10}).unit == "kg CO2-eq/tonne"


class TestNetEmission:

    @pytest.mark.parametrize("name, data", [
        ("composting", {"foodWaste": 30, "gardenWaste": 20, "compostProduction": 15}),
        ("anaerobic_digestion", {
            "foodWaste": 100, "electricityUse": 1000, "biogasUtilization": "both",
        }),
        ("mbt", {
            "mixedWaste": 100, "compostProduction": 20,
            "plasticUtilization": "rdf", "plasticAmount": 10,
        }),
        ("recycling", {"totalRecyclables": 30, "electricityUse": 500}),
        ("incineration", {
            "wasteAmount": 100, "incinerationType": "both", "electricityUse": 1000,
            "fuelUse": {"type": "diesel", "amount": 50},
        }),
    ])
    def test_net_is_direct_minus_avoided(self, name, data):
        result = PATHWAY_CALCULATORS[name](data)
        assert result.avoided_emissions > 0
        assert result.total_emission == pytest.approx(
            result.direct_emissions - result.avoided_emissions
        )


class TestGridFactorWithoutElectricity:

    @pytest.mark.parametrize("name, data", [
        ("landfill", {"wastePerMonth": 100, "fuelUse": {"type": "diesel", "amount": 100}}),
        ("composting", {"foodWaste": 50, "fuelUse": {"type": "diesel", "amount": 50}}),
        ("open_burning", {"wasteAmount": 10, "fuelUse": {"type": "diesel", "amount": 100}}),
    ])
    def test_fuel_only_pathways_ignore_grid_factor(self, name, data):
        calc = PATHWAY_CALCULATORS[name]
        assert calc(data, grid_factor=0.5) == calc(data)


class TestEmissionResultToDict:

    def test_optional_keys_omitted_when_absent(self):
        d = EmissionResult(co2=1.0, total_emission=1.0, total_co2e=0.001).to_dict()
        assert d == {
            "co2": 1.0, "ch4": 0.0, "n2o": 0.0,
            "totalEmission": 1.0, "totalCO2e": 0.001, "unit": "kg CO2-eq/tonne",
        }

    def test_includes_decomposition_and_warning(self):
        d = calc_open_burning({"wasteAmount": 1}).to_dict()
        assert d["warning"] == OPEN_BURNING_WARNING
        d = calc_recycling({"totalRecyclables": 1}).to_dict()
        assert "directEmissions" in d and "avoidedEmissions" in d


# ─────────────────────────────────────────────────────────────────────────────
# 1. calc_transportation
# Formula: fuel × energy content × (CO₂ + CH₄·25 + N₂O·298) ÷ tonnes
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcTransportation:

    def test_diesel_total_fuel(self):
        # 500 L × 36.3972 MJ/L = 18 198.6 MJ over 100 t
        result = calc_transportation({
            "fuelType": "diesel", "totalFuel": 500, "wasteTransported": 100,
        })
        assert result.co2 == pytest.approx(18198.6 * 0.0741 / 100)
        assert result.ch4 == pytest.approx(18198.6 * 0.000003 / 100)
        assert result.n2o == pytest.approx(18198.6 * 0.0000006 / 100)
        assert result.total_emission == pytest.approx(500 * DIESEL_CO2E_PER_L / 100)
        # ≈ 1.353 t CO₂e for the whole month
        assert result.total_co2e * 100 == pytest.approx(1.353, abs=1e-3)

    def test_rate_based_fuel_overrides_total(self):
        # 50 km × 20 trips × 0.5 L/km = 500 L
        by_rate = calc_transportation({
            "distance": 50, "tripsPerMonth": 20, "fuelConsumption": 0.5,
            "totalFuel": 9999, "wasteTransported": 100,
        })
        by_total = calc_transportation({"totalFuel": 500, "wasteTransported": 100})
        assert by_rate.total_emission == pytest.approx(by_total.total_emission)

    def test_incomplete_rate_falls_back_to_total_fuel(self):
        result = calc_transportation({
            "distance": 50, "tripsPerMonth": 20, "totalFuel": 100, "wasteTransported": 10,
        })
        assert result.total_emission == pytest.approx(100 * DIESEL_CO2E_PER_L / 10)

    def test_electric_uses_grid_factor(self):
        # 1000 kWh × 0.855 / 50 t = 17.1
        result = calc_transportation({
            "fuelType": "electric", "electricity": 1000, "wasteTransported": 50,
        })
        assert result.co2 == pytest.approx(17.1)
        assert result.ch4 == 0 and result.n2o == 0
        assert result.total_emission == pytest.approx(result.co2)

    def test_electric_grid_factor_override(self):
        result = calc_transportation(
            {"fuelType": "electric", "electricity": 1000, "wasteTransported": 50},
            grid_factor=0.5,
        )
        assert result.total_emission == pytest.approx(10.0)

    @pytest.mark.parametrize("fuel_type", ["naturalGas", "natural-gas", "natural_gas"])
    def test_natural_gas_spellings_use_natural_gas_factors(self, fuel_type):
        # 1000 kg × 0.038931 MJ = 38.931 MJ
        result = calc_transportation({
            "fuelType": fuel_type, "totalFuel": 1000, "wasteTransported": 10,
        })
        expected = 38.931 * (0.056 + 0.0000003 * 25 + 0.0000000001 * 298) / 10
        assert result.total_emission == pytest.approx(expected)

    def test_unknown_fuel_falls_back_to_diesel(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="wasteghg.emission_factors"):
            unknown = calc_transportation({
                "fuelType": "hydrogen", "totalFuel": 100, "wasteTransported": 10,
            })
        diesel = calc_transportation({"totalFuel": 100, "wasteTransported": 10})
        assert unknown.total_emission == pytest.approx(diesel.total_emission)
        assert "hydrogen" in caplog.text

    def test_gwp_consistency(self):
        result = calc_transportation({"fuelType": "lpg", "totalFuel": 300, "wasteTransported": 40})
        assert gwp_sum(result) == pytest.approx(result.total_emission)


# ─────────────────────────────────────────────────────────────────────────────
# 2. calc_landfill
# Formula: DOC × 0.5 × MCF × 16/12 × 0.5 × 1000 × (1 − R)(1 − OX) kg CH₄/t
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcLandfill:

    def test_default_composition(self):
        # weighted DOC 0.1764 → 0.1764 × 0.5 × 0.8 × 16/12 × 0.5 × 1000 = 47.04 kg CH₄/t
        result = calc_landfill({"wastePerMonth": 100})
        assert result.ch4 == pytest.approx(47.04)
        assert result.total_emission == pytest.approx(1176.0)
        assert result.total_co2e == pytest.approx(1.176)
        assert result.n2o == 0
        assert result.co2 == 0

    def test_per_tonne_independent_of_tonnage(self):
        small = calc_landfill({"wastePerMonth": 10})
        large = calc_landfill({"wastePerMonth": 10_000})
        assert small.total_emission == pytest.approx(large.total_emission)

    def test_gas_recovery_and_oxidation(self):
        result = calc_landfill({"wastePerMonth": 100, "gasRecovery": 50, "oxidation": 0.1})
        assert result.ch4 == pytest.approx(47.04 * 0.5 * 0.9)

    def test_explicit_zero_mcf_is_honoured(self):
        result = calc_landfill({"wastePerMonth": 100, "mcf": 0})
        assert result.ch4 == 0
        assert result.total_emission == 0

    def test_partial_composition_does_not_add_defaults(self):
        # 100 % food: DOC 0.15 → 40 kg CH₄/t
        result = calc_landfill({"wastePerMonth": 100, "composition": {"foodWaste": 100}})
        assert result.ch4 == pytest.approx(40.0)

    def test_extra_material_uses_its_doc(self):
        # 50 % rubber (DOC 0.45) + 50 % plastics (no DOC) → weighted 0.225
        result = calc_landfill({
            "wastePerMonth": 100,
            "composition": {"plastics": 50, "rubber": 50},
        })
        assert result.ch4 == pytest.approx(0.225 * 0.5 * 0.8 * (16 / 12) * 0.5 * 1000)

    def test_extra_material_string_is_coerced(self):
        result = calc_landfill({
            "wastePerMonth": 100,
            "composition": {"plastics": 50, "rubber": "50"},
        })
        assert result.ch4 == pytest.approx(60.0)

    def test_extra_material_must_be_numeric(self):
        with pytest.raises(ValidationError):
            calc_landfill({"wastePerMonth": 100, "composition": {"rubber": None}})
        with pytest.raises(ValidationError):
            PathwayComposition.model_validate({"rubber": "lots"})

    def test_unknown_material_has_no_doc(self):
        result = calc_landfill({"wastePerMonth": 100, "composition": {"concrete": 100}})
        assert result.ch4 == 0

    def test_fuel_use_adds_operational_co2(self):
        result = calc_landfill({
            "wastePerMonth": 100,
            "fuelUse": {"type": "diesel", "amount": 100},
        })
        assert result.co2 == pytest.approx(100 * DIESEL_CO2E_PER_L / 100)
        assert gwp_sum(result) == pytest.approx(result.total_emission)

    def test_accepts_model_instance(self):
        inp = LandfillInput(waste_per_month=100, composition=PathwayComposition.form_defaults())
        assert calc_landfill(inp).total_emission == pytest.approx(1176.0)


# ─────────────────────────────────────────────────────────────────────────────
# 3. calc_composting
# Formula: (4 g CH₄ × 25 + 0.3 g N₂O × 298) per kg − fertiliser credit
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcComposting:

    def test_worked_example(self):
        # 50 t organics, 15 t compost fully used
        # direct = 4 × 25 + 0.3 × 298 = 189.4
        # avoided = 15 × (7.1·2.404 + 4.1·0.448 + 5.4·0.443) / 50 = 6.38922
        result = calc_composting({
            "foodWaste": 30, "gardenWaste": 20, "compostProduction": 15,
        })
        assert result.direct_emissions == pytest.approx(189.4)
        assert result.avoided_emissions == pytest.approx(6.38922)
        assert result.total_emission == pytest.approx(183.01078)
        assert result.total_co2e == pytest.approx(0.183, abs=1e-3)

    def test_explicit_zero_use_gives_no_credit(self):
        result = calc_composting({
            "foodWaste": 50, "compostProduction": 15, "compostUsePercentage": 0,
        })
        assert result.avoided_emissions == 0
        assert result.total_emission == pytest.approx(189.4)

    def test_co2_is_operational_per_tonne(self):
        result = calc_composting({
            "foodWaste": 50, "fuelUse": {"type": "diesel", "amount": 50},
        })
        assert result.co2 == pytest.approx(50 * DIESEL_CO2E_PER_L / 50)
        assert gwp_sum(result) == pytest.approx(result.direct_emissions)

    def test_net_is_direct_minus_avoided(self):
        result = calc_composting({"gardenWaste": 12, "compostProduction": 4})
        assert result.total_emission == pytest.approx(
            result.direct_emissions - result.avoided_emissions
        )


# ─────────────────────────────────────────────────────────────────────────────
# 4. calc_anaerobic_digestion
# Biogas: 100 t × 150 m³ × 0.6 × 37 MJ = 333 000 MJ
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcAnaerobicDigestion:

    BASE = {"foodWaste": 100, "electricityUse": 1000}

    def test_direct_emissions(self):
        # 0.8 kg CH₄/t × 25 = 20, plus 1000 kWh × 0.855 / 100 t = 8.55
        result = calc_anaerobic_digestion(self.BASE)
        assert result.direct_emissions == pytest.approx(28.55)
        assert result.ch4 == pytest.approx(0.8)
        assert gwp_sum(result) == pytest.approx(result.direct_emissions)

    def test_thermal_replaces_lpg(self):
        # 333 000 MJ × 0.0631 / 100 t
        result = calc_anaerobic_digestion({**self.BASE, "biogasUtilization": "thermal"})
        assert result.avoided_emissions == pytest.approx(210.123)

    def test_electricity_replaces_grid(self):
        # 333 000 / 3.6 × 0.35 = 32 375 kWh × 0.855 / 100 t
        result = calc_anaerobic_digestion({**self.BASE, "biogasUtilization": "electricity"})
        assert result.avoided_emissions == pytest.approx(276.80625)

    def test_both_splits_energy(self):
        result = calc_anaerobic_digestion({**self.BASE, "biogasUtilization": "both"})
        assert result.avoided_emissions == pytest.approx((210.123 + 276.80625) / 2)
        assert result.total_emission == pytest.approx(28.55 - 243.464625)

    def test_grid_factor_override(self):
        result = calc_anaerobic_digestion(self.BASE, grid_factor=0.5)
        assert result.direct_emissions == pytest.approx(25.0)


# ─────────────────────────────────────────────────────────────────────────────
# 5. calc_mbt
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcMBT:

    def test_biological_fraction_and_compost(self):
        # 60 t bio → 240 kg CH₄ × 25 + 18 kg N₂O × 298 = 11 364 kg over 100 t
        # compost 20 t × 80 % × 21.2974 = 340.7584 kg
        result = calc_mbt({
            "mixedWaste": 100, "biodegradablePercentage": 60,
            "compostProduction": 20, "compostUsePercentage": 80,
        })
        assert result.direct_emissions == pytest.approx(113.64)
        assert result.avoided_emissions == pytest.approx(3.407584)
        assert result.total_emission == pytest.approx(110.232416)

    def test_rdf_credit(self):
        # 10 t × 15 MJ/kg = 150 000 MJ → 12 500 kWh × 0.855 = 10 687.5 kg over 100 t
        result = calc_mbt({"mixedWaste": 100, "plasticUtilization": "rdf", "plasticAmount": 10})
        assert result.avoided_emissions == pytest.approx(106.875)

    def test_crude_oil_credit(self):
        # 1000 L × 36.3972 MJ × 0.0741 = 2697.03 kg over 100 t
        result = calc_mbt({
            "mixedWaste": 100, "plasticUtilization": "crudeOil",
            "crudeOilProduction": 1000, "crudeOilUsePercentage": 100,
        })
        assert result.avoided_emissions == pytest.approx(26.9703252)

    def test_default_biodegradable_share_is_half(self):
        result = calc_mbt({"mixedWaste": 10})
        assert result.ch4 == pytest.approx(2.0)
        assert result.n2o == pytest.approx(0.15)

    def test_gwp_consistency_with_electricity(self):
        result = calc_mbt({"mixedWaste": 40, "electricityUse": 2000})
        assert gwp_sum(result) == pytest.approx(result.direct_emissions)


# ─────────────────────────────────────────────────────────────────────────────
# 6. calc_recycling
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcRecycling:

    def test_default_composition(self):
        # (0.3·1.74 + 0.2·1.745 + 0.05·0.59 + 0.1·1.53 + 0.35·0.353) × 1000 × 0.8 = 941.64
        result = calc_recycling({"totalRecyclables": 30, "recyclability": 80})
        assert result.avoided_emissions == pytest.approx(941.64)
        assert result.total_emission == pytest.approx(-941.64)
        assert result.total_co2e == pytest.approx(-0.942, abs=1e-3)

    def test_aluminum_spelling(self):
        result = calc_recycling({"totalRecyclables": 10, "composition": {"aluminum": 100}})
        assert result.avoided_emissions == pytest.approx(590.0)

    def test_unknown_material_avoids_nothing(self):
        result = calc_recycling({"totalRecyclables": 10, "composition": {"wood": 100}})
        assert result.avoided_emissions == 0

    def test_operational_is_direct(self):
        result = calc_recycling({
            "totalRecyclables": 10, "electricityUse": 100, "composition": {},
        })
        assert result.direct_emissions == pytest.approx(8.55)
        assert result.co2 == pytest.approx(8.55)
        assert result.total_emission == pytest.approx(8.55)


# ─────────────────────────────────────────────────────────────────────────────
# 7. calc_incineration
# Formula: Σ kg × DM × TC × FCF × 1.0 × 44/12 + 0.05 kg N₂O/t × 298
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcIncineration:

    def test_no_energy_recovery(self):
        result = calc_incineration({"wasteAmount": 100})
        assert result.co2 == pytest.approx(DEFAULT_FOSSIL_CO2)
        assert result.n2o == pytest.approx(0.05)
        assert result.direct_emissions == pytest.approx(DEFAULT_FOSSIL_CO2 + 14.9)
        assert result.avoided_emissions == 0

    def test_electricity_recovery_defaults(self):
        # 10 000 MJ × 25 % / 3.6 = 694.4 kWh, 90 % exported × 0.855 = 534.375
        result = calc_incineration({"wasteAmount": 100, "incinerationType": "electricity"})
        assert result.avoided_emissions == pytest.approx(534.375)

    def test_heat_recovery_replacing_diesel(self):
        # 10 000 MJ × 60 % × 80 % exported × 0.0741 = 355.68
        result = calc_incineration({"wasteAmount": 100, "incinerationType": "heat"})
        assert result.avoided_emissions == pytest.approx(355.68)

    def test_heat_recovery_replacing_natural_gas(self):
        result = calc_incineration({
            "wasteAmount": 100, "incinerationType": "heat",
            "energyRecovery": {"replacedFuelType": "naturalGas"},
        })
        assert result.avoided_emissions == pytest.approx(4800 * 0.056)

    def test_both_recovery_modes_add_up(self):
        result = calc_incineration({"wasteAmount": 100, "incinerationType": "both"})
        assert result.avoided_emissions == pytest.approx(534.375 + 355.68)

    def test_both_recovery_with_operational_energy(self):
        result = calc_incineration({
            "wasteAmount": 100, "incinerationType": "both", "electricityUse": 1000,
        })
        direct = DEFAULT_FOSSIL_CO2 + 8.55 + 14.9
        avoided = 534.375 + 355.68
        assert result.direct_emissions == pytest.approx(direct)
        assert result.avoided_emissions == pytest.approx(avoided)
        assert result.total_emission == pytest.approx(direct - avoided)

    def test_operational_energy_in_co2(self):
        result = calc_incineration({"wasteAmount": 100, "electricityUse": 1000})
        assert result.co2 == pytest.approx(DEFAULT_FOSSIL_CO2 + 8.55)
        assert gwp_sum(result) == pytest.approx(result.direct_emissions)

    def test_unknown_material_uses_others(self):
        unknown = calc_incineration({"wasteAmount": 1, "composition": {"styrofoam": 100}})
        others = calc_incineration({"wasteAmount": 1, "composition": {"others": 100}})
        assert unknown.co2 == pytest.approx(others.co2)
        assert others.co2 == pytest.approx(1000 * 0.9 * 0.03 * 1.0 * 44 / 12)


# ─────────────────────────────────────────────────────────────────────────────
# 8. calc_open_burning
# ─────────────────────────────────────────────────────────────────────────────

class TestCalcOpenBurning:

    def test_fossil_co2_is_58_percent_of_incineration(self):
        burning = calc_open_burning({"wasteAmount": 100})
        incineration = calc_incineration({"wasteAmount": 100})
        assert burning.co2 == pytest.approx(incineration.co2 * 0.58)

    def test_totals(self):
        result = calc_open_burning({"wasteAmount": 100})
        assert result.ch4 == pytest.approx(6.5)
        assert result.n2o == pytest.approx(0.1)
        assert result.total_emission == pytest.approx(DEFAULT_FOSSIL_CO2 * 0.58 + 162.5 + 29.8)
        assert gwp_sum(result) == pytest.approx(result.total_emission)

    def test_always_warns(self):
        result = calc_open_burning({"wasteAmount": 1, "composition": {"foodWaste": 100}})
        assert result.warning == OPEN_BURNING_WARNING
        assert result.direct_emissions is None

    def test_fuel_use_adds_operational_co2(self):
        plain = calc_open_burning({"wasteAmount": 10})
        fuelled = calc_open_burning({
            "wasteAmount": 10, "fuelUse": {"type": "diesel", "amount": 1000},
        })
        extra = 1000 * DIESEL_CO2E_PER_L / 10
        assert fuelled.co2 == pytest.approx(plain.co2 + extra)
        assert fuelled.total_emission == pytest.approx(plain.total_emission + extra)
        assert gwp_sum(fuelled) == pytest.approx(fuelled.total_emission)
