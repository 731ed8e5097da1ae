"""
Unit tests for wasteghg/emission_factors.py
"""
import pytest

from wasteghg.emission_factors import (
    FUEL_FACTORS,
    SCENARIO_EMISSION_FACTORS,
    convert_mass,
    get_combustion_params,
    get_doc_value,
    get_fuel_factor,
    get_recycling_factor,
    normalize_key,
)


class TestNormalizeKey:

    @pytest.mark.parametrize("raw, expected", [
        ("foodWaste", "food_waste"),
        ("natural-gas", "natural_gas"),
        ("naturalGas", "natural_gas"),
        ("Garden Waste", "garden_waste"),
        ("open_burning", "open_burning"),
        (None, ""),
    ])
    def test_forms(self, raw, expected):
        assert normalize_key(raw) == expected


class TestLookups:

    def test_fuel_aliases(self):
        assert get_fuel_factor("CNG") is FUEL_FACTORS["natural_gas"]
        assert get_fuel_factor("petrol") is FUEL_FACTORS["gasoline"]
        assert get_fuel_factor(None) is FUEL_FACTORS["diesel"]

    def test_diesel_co2e_per_mj(self):
        # 0.0741 + 3e-6 × 25 + 6e-7 × 298
        assert FUEL_FACTORS["diesel"].co2e_per_mj == pytest.approx(0.0743538)

    def test_doc_values(self):
        assert get_doc_value("foodWaste") == 0.15
        assert get_doc_value("plastics") == 0.0

    def test_combustion_alias(self):
        assert get_combustion_params("disposableNappies") == get_combustion_params("nappies")

    def test_recycling_factor_spellings(self):
        assert get_recycling_factor("aluminum") == get_recycling_factor("aluminium") == 0.59
        assert get_recycling_factor("wood") == 0.0

    def test_scenario_table_covers_every_bucket(self):
        buckets = {"food", "paper", "plastic", "metal", "glass", "textile", "others"}
        for pathway, factors in SCENARIO_EMISSION_FACTORS.items():
            assert set(factors) == buckets, pathway


class TestConvertMass:

    def test_tonnes_to_kg(self):
        assert convert_mass(2.5, "tonnes", "kg") == pytest.approx(2500)

    def test_g_to_tonne(self):
        assert convert_mass(1_000_000, "g", "tonne") == pytest.approx(1)

    def test_unknown_unit_is_identity(self):
        assert convert_mass(3, "lb", "kg") == 3
