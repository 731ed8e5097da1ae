"""
run_scenarios.py – Standalone runner that loads a scenario library, recomputes
every scenario's emissions and compares the baseline with an intervention.

Usage
──────
# Built-in defaults (baseline + two interventions)
python run_scenarios.py

# Scenarios exported from the UI
python run_scenarios.py --file scenarios.json

# Compare two specific scenarios at 2 500 t/month
python run_scenarios.py --baseline baseline --intervention intervention-2 --tonnes 2500

# Write the recomputed library back out
python run_scenarios.py --file scenarios.json --export out/scenarios.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wasteghg.config import get_config
from wasteghg.constants import CATEGORY_LABELS, SCENARIO_CATEGORIES
from wasteghg.recommendations import generate_insights, select_comparison_pair
from wasteghg.scenario_calculations import compare_scenarios
from wasteghg.scenario_storage import ScenarioLibrary
from wasteghg.schemas import Scenario

log = logging.getLogger(__name__)
console = Console()


def _print_emissions_table(scenarios: list[Scenario]) -> None:
    table = Table(title="Scenario emissions (kg CO₂e / month)", show_lines=True)
    table.add_column("Category", style="cyan")
    for s in scenarios:
        label = f"{s.name}{' ★' if s.is_baseline else ''}"
        table.add_column(label, justify="right")
    for category in [*SCENARIO_CATEGORIES, "total"]:
        label = CATEGORY_LABELS.get(category, "TOTAL")
        row = [f"{getattr(s.emissions, category):,.1f}" for s in scenarios]
        style = "bold" if category == "total" else None
        table.add_row(label, *row, style=style)
    console.print(table)


def _print_comparison(baseline: Scenario, intervention: Scenario) -> None:
    comparison = compare_scenarios(baseline.emissions, intervention.emissions)
    insights = generate_insights(baseline.emissions, intervention.emissions)

    table = Table(title=f"{baseline.name}  →  {intervention.name}")
    table.add_column("Category", style="cyan")
    table.add_column("Reduction (kg CO₂e)", justify="right")
    for category, delta in comparison.by_category.items():
        colour = "green" if delta > 0 else "red" if delta < 0 else "dim"
        table.add_row(CATEGORY_LABELS[category], f"[{colour}]{delta:,.1f}[/]")
    table.add_row(
        "TOTAL",
        f"{comparison.absolute_reduction:,.1f} ({comparison.percentage_reduction:.1f}%)",
        style="bold",
    )
    console.print(table)

    lines = [f"[bold]{insights.summary}[/]", ""]
    if insights.key_reductions:
        lines.append("Key reductions:")
        for kr in insights.key_reductions:
            lines.append(f"  • {kr.label}: {kr.reduction / 1000:,.1f} t CO₂e")
        lines.append("")
    if insights.recommendations:
        lines.append("Recommendations:")
        lines.extend(f"  • {text}" for text in insights.recommendations)
    console.print(Panel("\n".join(lines), title="Insights", style="blue"))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Recompute scenario emissions and compare baseline vs intervention."
    )
    parser.add_argument(
        "--file", default=None, type=Path,
        help="Scenario JSON file. Defaults to WASTE_GHG_SCENARIOS_FILE, "
             "then to the built-in scenarios.",
    )
    parser.add_argument(
        "--tonnes", type=float, default=None,
        help="Monthly waste tonnage (default: WASTE_GHG_TOTAL_WASTE_TONNES or 1000).",
    )
    parser.add_argument("--baseline", default=None, help="Baseline scenario id.")
    parser.add_argument("--intervention", default=None, help="Intervention scenario id.")
    parser.add_argument(
        "--export", default=None, type=Path,
        help="Write the recomputed scenarios to this JSON file.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging.")
    args = parser.parse_args(argv)

    try:
        cfg = get_config()
    except EnvironmentError as exc:
        console.print(f"[red]Config error:[/] {exc}")
        return 1

    # ── Logging: level from config unless --verbose
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, cfg.log_level),
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
    )

    source = args.file or cfg.scenarios_file
    if source is not None:
        if not source.exists():
            console.print(f"[red]Error:[/] File not found: {source}")
            return 1
        log.info("Loading scenarios from %s", source)
        library = ScenarioLibrary.from_json(source.read_text(encoding="utf-8"))
    else:
        log.info("No scenario file given; using built-in scenarios")
        library = ScenarioLibrary()

    tonnes = args.tonnes if args.tonnes is not None else cfg.total_waste_tonnes
    scenarios = library.recalculate(tonnes, grid_factor=cfg.grid_electricity_factor)
    if not scenarios:
        console.print("[yellow]Warning:[/] No valid scenarios to compare.")
        return 1

    console.print(
        Panel(
            f"[bold]{len(scenarios)}[/] scenario(s) at [bold]{tonnes:,.0f}[/] t/month, "
            f"grid factor {cfg.grid_electricity_factor} kg CO₂e/kWh",
            style="blue",
        )
    )
    _print_emissions_table(scenarios)

    if args.baseline or args.intervention:
        baseline = library.get_by_id(args.baseline) if args.baseline else None
        intervention = library.get_by_id(args.intervention) if args.intervention else None
        if baseline is None or intervention is None:
            console.print("[red]Error:[/] --baseline and --intervention must both name known ids")
            return 1
        pair = (baseline, intervention)
    else:
        pair = select_comparison_pair(scenarios)

    if pair is None:
        console.print("[yellow]Only one scenario; nothing to compare.[/]")
    else:
        _print_comparison(*pair)

    if args.export:
        args.export.parent.mkdir(parents=True, exist_ok=True)
        args.export.write_text(library.export_json(), encoding="utf-8")
        log.info("Wrote %d scenario(s) to %s", len(library), args.export)

    return 0


if __name__ == "__main__":
    sys.exit(main())
