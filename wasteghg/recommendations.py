"""
recommendations.py – Rule-based insights for a baseline vs intervention pair.

Pipeline
--------
1. Compare the two scenarios category by category (``compare_scenarios``).
2. Keep the categories with a positive reduction, rank them descending and
   take the top three.
3. Walk the fixed rule table in order and collect the recommendation text
   of every rule that fires.

The output is deterministic: the same pair of scenarios always yields the
same summary, key reductions and recommendations.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from wasteghg.constants import (
    CATEGORY_LABELS,
    RECOMMENDATION_LANDFILL,
    RECOMMENDATION_OPEN_BURNING,
    RECOMMENDATION_RECYCLING,
    RECOMMENDATION_TRANSPORTATION,
)
from wasteghg.scenario_calculations import ScenarioComparison, compare_scenarios
from wasteghg.schemas import Scenario, ScenarioEmissions

logger = logging.getLogger(__name__)

TOP_REDUCTIONS = 3


@dataclass
class KeyReduction:
    category: str       # emission key, e.g. "anaerobic_digestion"
    label: str          # display label, e.g. "Anaerobic Digestion"
    reduction: float    # kg CO₂e


@dataclass
class ScenarioInsights:
    summary: str
    key_reductions: list[KeyReduction] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


_Rule = Callable[[ScenarioEmissions, ScenarioEmissions, ScenarioComparison], bool]

# Evaluated in order; each rule that fires contributes its text once.
RULES: list[tuple[_Rule, str]] = [
    (lambda b, i, c: c.by_category["landfill"] > 0, RECOMMENDATION_LANDFILL),
    (lambda b, i, c: c.by_category["recycling"] > 0, RECOMMENDATION_RECYCLING),
    (lambda b, i, c: c.by_category["transportation"] > 0, RECOMMENDATION_TRANSPORTATION),
    (lambda b, i, c: i.open_burning > 0, RECOMMENDATION_OPEN_BURNING),
]


def _summary(comparison: ScenarioComparison) -> str:
    tonnes = comparison.absolute_reduction / 1_000.0
    pct = comparison.percentage_reduction
    if tonnes < 0:
        return (
            f"Scenario results in {abs(tonnes):.1f} tonnes CO₂-eq increase "
            f"({abs(pct):.1f}% increase)"
        )
    return f"Scenario achieves {tonnes:.1f} tonnes CO₂-eq reduction ({pct:.1f}% decrease)"


def generate_insights(
    baseline: ScenarioEmissions,
    intervention: ScenarioEmissions,
) -> ScenarioInsights:
    """Summarise how *intervention* performs against *baseline*."""
    comparison = compare_scenarios(baseline, intervention)

    ranked = sorted(
        ((cat, value) for cat, value in comparison.by_category.items() if value > 0),
        key=lambda item: item[1],
        reverse=True,
    )[:TOP_REDUCTIONS]
    key_reductions = [
        KeyReduction(category=cat, label=CATEGORY_LABELS.get(cat, cat), reduction=value)
        for cat, value in ranked
    ]

    recommendations = [
        text for rule, text in RULES if rule(baseline, intervention, comparison)
    ]

    insights = ScenarioInsights(
        summary=_summary(comparison),
        key_reductions=key_reductions,
        recommendations=recommendations,
    )
    logger.info(
        "Insights: %s | %d key reductions, %d recommendations",
        insights.summary, len(key_reductions), len(recommendations),
    )
    return insights


def select_comparison_pair(
    scenarios: Sequence[Scenario],
) -> tuple[Scenario, Scenario] | None:
    """
    Pick the baseline and the intervention to compare by default.

    The baseline is the first scenario flagged ``is_baseline`` (or the first
    scenario when none is flagged). The intervention is the first unflagged
    scenario that is not the baseline, falling back to the scenario after the
    baseline. Returns None when fewer than two scenarios exist.
    """
    if len(scenarios) < 2:
        return None

    baseline = next((s for s in scenarios if s.is_baseline), scenarios[0])
    intervention = next(
        (s for s in scenarios if not s.is_baseline and s is not baseline),
        None,
    )
    if intervention is None:
        idx = next(i for i, s in enumerate(scenarios) if s is baseline)
        intervention = scenarios[(idx + 1) % len(scenarios)]
    return baseline, intervention
