"""
constants.py – Shared labels, category keys, and thresholds.
"""

# ── Units ─────────────────────────────────────────────────────
UNIT_PER_TONNE = "kg CO2-eq/tonne"

# ── Scenario categories (emission keys, in display order) ─────
CATEGORY_TRANSPORTATION = "transportation"
CATEGORY_LANDFILL = "landfill"
CATEGORY_COMPOSTING = "composting"
CATEGORY_ANAEROBIC_DIGESTION = "anaerobic_digestion"
CATEGORY_MBT = "mbt"
CATEGORY_RECYCLING = "recycling"
CATEGORY_INCINERATION = "incineration"
CATEGORY_OPEN_BURNING = "open_burning"

TREATMENT_PATHWAYS = [
    CATEGORY_LANDFILL,
    CATEGORY_COMPOSTING,
    CATEGORY_ANAEROBIC_DIGESTION,
    CATEGORY_MBT,
    CATEGORY_RECYCLING,
    CATEGORY_INCINERATION,
    CATEGORY_OPEN_BURNING,
]
SCENARIO_CATEGORIES = [CATEGORY_TRANSPORTATION, *TREATMENT_PATHWAYS]

CATEGORY_LABELS = {
    CATEGORY_TRANSPORTATION: "Transportation",
    CATEGORY_LANDFILL: "Landfill",
    CATEGORY_COMPOSTING: "Composting",
    CATEGORY_ANAEROBIC_DIGESTION: "Anaerobic Digestion",
    CATEGORY_MBT: "MBT",
    CATEGORY_RECYCLING: "Recycling",
    CATEGORY_INCINERATION: "Incineration",
    CATEGORY_OPEN_BURNING: "Open Burning",
}

# ── Calculator module identifiers (as sent by the UI) ─────────
MODULE_TRANSPORTATION = "transportation"
MODULE_LANDFILL = "landfill"
MODULE_COMPOSTING = "composting"
MODULE_ANAEROBIC_DIGESTION = "anaerobic-digestion"
MODULE_RECYCLING = "recycling"
MODULE_INCINERATION = "incineration"
MODULE_MBT = "mbt"
MODULE_OPEN_BURNING = "open-burning"


# ── Scenario defaults ─────────────────────────────────────────
DEFAULT_TOTAL_WASTE_TONNES = 1000.0
TRUCK_KM_PER_MONTH = 500.0           # workload per truck for fleet estimates
DEFAULT_LANDFILL_TONNES = 1000.0
TONNES_PER_LANDFILL_TRUCK = 100.0
DEFAULT_FUEL_EFFICIENCY = 0.25       # L/km

# ── Validation thresholds ─────────────────────────────────────
PERCENT_SUM_TOLERANCE = 0.5          # composition / allocation totals, in %

# ── Messages ──────────────────────────────────────────────────
OPEN_BURNING_WARNING = (
    "⚠️ Open burning produces extremely high emissions and toxic air "
    "pollutants! Strongly discouraged!"
)
OPEN_BURNING_SCENARIO_DESCRIPTION = "⚠️ Current open burning practice (high emissions)"

RECOMMENDATION_LANDFILL = (
    "Landfill diversion is effective. Consider increasing organic waste composting."
)
RECOMMENDATION_RECYCLING = (
    "Enhanced recycling shows strong emission reduction. Expand material recovery program."
)
RECOMMENDATION_TRANSPORTATION = (
    "Fleet optimization is working. Consider further electrification of vehicles."
)
RECOMMENDATION_OPEN_BURNING = (
    "⚠️ Open burning still present. Eliminating this practice would significantly "
    "reduce emissions and air pollution."
)
