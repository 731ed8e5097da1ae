"""
scenario_storage.py – In-memory scenario library and its JSON wire format.

The library owns a list of ``Scenario`` records and the operations the
scenario screens need (add, update, delete, duplicate, reset, import and
export). Where the JSON ends up (a file, a browser store) is the caller's
concern: ``export_json`` returns a string and ``from_json`` /
``import_json`` accept one.

Wire format: a JSON array of camelCase scenario records with ISO-8601
``createdAt`` / ``updatedAt`` timestamps.

Ids and timestamps come from injectable factories so tests can pin them.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Sequence
from uuid import uuid4

from pydantic import ValidationError

from wasteghg.constants import DEFAULT_TOTAL_WASTE_TONNES
from wasteghg.emission_factors import GRID_ELECTRICITY_EF
from wasteghg.scenario_calculations import calc_scenario_emissions
from wasteghg.schemas import (
    Fleet,
    Scenario,
    ScenarioComposition,
    ScenarioDraft,
    TreatmentAllocation,
)
from wasteghg.validators import validate_scenario_payload

logger = logging.getLogger(__name__)

# Fields whose change invalidates cached emissions
_INPUT_FIELDS = ("waste_composition", "treatment_allocation", "fleet")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_scenario_id() -> str:
    return f"scenario-{uuid4().hex[:12]}"


# ─────────────────────────────────────────────────────────────
# Defaults
# ─────────────────────────────────────────────────────────────

def _default_composition() -> ScenarioComposition:
    return ScenarioComposition(
        food=35, paper=20, plastic=15, metal=10, glass=5, textile=5, others=10,
    )


def default_scenarios(now: datetime) -> list[Scenario]:
    """Return the baseline and the two example interventions."""
    return [
        Scenario(
            id="baseline",
            name="Baseline Scenario",
            description="Current waste management practices",
            is_baseline=True,
            created_at=now,
            updated_at=now,
            waste_composition=_default_composition(),
            treatment_allocation=TreatmentAllocation(
                landfill=60, composting=10, recycling=15, incineration=10, open_burning=5,
            ),
            fleet=Fleet(
                diesel_trucks=10, electric_trucks=0, total_distance=500, fuel_efficiency=0.25,
            ),
        ),
        Scenario(
            id="intervention-1",
            name="Intervention A - Enhanced Recycling",
            description="Increased recycling and composting, reduced landfill",
            is_baseline=False,
            created_at=now,
            updated_at=now,
            waste_composition=_default_composition(),
            treatment_allocation=TreatmentAllocation(
                landfill=40, composting=20, anaerobic_digestion=10,
                recycling=25, incineration=5,
            ),
            fleet=Fleet(
                diesel_trucks=8, electric_trucks=2, total_distance=450, fuel_efficiency=0.22,
            ),
        ),
        Scenario(
            id="intervention-2",
            name="Intervention B - Zero Waste Target",
            description="Maximum recycling and energy recovery, minimal landfill",
            is_baseline=False,
            created_at=now,
            updated_at=now,
            waste_composition=_default_composition(),
            treatment_allocation=TreatmentAllocation(
                landfill=20, composting=25, anaerobic_digestion=20, mbt=10,
                recycling=20, incineration=5,
            ),
            fleet=Fleet(
                diesel_trucks=5, electric_trucks=5, total_distance=400, fuel_efficiency=0.20,
            ),
        ),
    ]


# ─────────────────────────────────────────────────────────────
# Library
# ─────────────────────────────────────────────────────────────

class ScenarioLibrary:
    """Ordered, in-memory collection of scenarios."""

    def __init__(
        self,
        scenarios: Sequence[Scenario] | None = None,
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._id_factory = id_factory or _new_scenario_id
        self._clock = clock or _utcnow
        if scenarios is None:
            self._scenarios = default_scenarios(self._clock())
        else:
            self._scenarios = list(scenarios)

    def __len__(self) -> int:
        return len(self._scenarios)

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self._scenarios)

    # -- Queries --

    def list_all(self) -> list[Scenario]:
        """Return a copy of the scenario list, in insertion order."""
        return list(self._scenarios)

    def get_by_id(self, scenario_id: str) -> Scenario | None:
        return next((s for s in self._scenarios if s.id == scenario_id), None)

    # -- Mutations --

    def add(self, scenario: Scenario) -> list[Scenario]:
        self._scenarios.append(scenario)
        return self.list_all()

    def create(self, draft: ScenarioDraft) -> Scenario:
        """Stamp *draft* with a fresh id and timestamps and append it."""
        now = self._clock()
        scenario = Scenario(
            **draft.model_dump(),
            id=self._id_factory(),
            created_at=now,
            updated_at=now,
        )
        self._scenarios.append(scenario)
        logger.info("Created scenario %s (%s)", scenario.id, scenario.name)
        return scenario

    def update(self, scenario_id: str, **changes: Any) -> Scenario | None:
        """
        Merge *changes* into the scenario and bump ``updated_at``.

        Cached emissions are cleared when the composition, allocation or
        fleet changes. Returns None for an unknown id.
        """
        for idx, current in enumerate(self._scenarios):
            if current.id != scenario_id:
                continue
            merged = current.model_dump()
            merged.update(changes)
            merged["id"] = current.id
            merged["updated_at"] = self._clock()
            if any(key in changes for key in _INPUT_FIELDS) and "emissions" not in changes:
                merged["emissions"] = None
            updated = Scenario.model_validate(merged)
            self._scenarios[idx] = updated
            return updated
        return None

    def delete(self, scenario_id: str) -> bool:
        """Remove a scenario. Baseline scenarios are kept and give False."""
        target = self.get_by_id(scenario_id)
        if target is not None and target.is_baseline:
            logger.warning("Cannot delete baseline scenario %s", scenario_id)
            return False
        before = len(self._scenarios)
        self._scenarios = [s for s in self._scenarios if s.id != scenario_id]
        return len(self._scenarios) != before

    def duplicate(self, scenario_id: str, new_name: str) -> Scenario | None:
        """Copy a scenario under a new id and name. The copy is never the baseline."""
        source = self.get_by_id(scenario_id)
        if source is None:
            return None
        now = self._clock()
        copy = source.model_copy(
            deep=True,
            update={
                "id": self._id_factory(),
                "name": new_name,
                "is_baseline": False,
                "created_at": now,
                "updated_at": now,
            },
        )
        self._scenarios.append(copy)
        return copy

    def reset_to_defaults(self) -> list[Scenario]:
        self._scenarios = default_scenarios(self._clock())
        return self.list_all()

    def recalculate(
        self,
        total_waste_tonnes: float = DEFAULT_TOTAL_WASTE_TONNES,
        *,
        grid_factor: float = GRID_ELECTRICITY_EF,
    ) -> list[Scenario]:
        """Recompute and cache emissions for every scenario."""
        refreshed = []
        for scenario in self._scenarios:
            emissions = calc_scenario_emissions(
                scenario.waste_composition,
                scenario.treatment_allocation,
                scenario.fleet,
                total_waste_tonnes,
                grid_factor=grid_factor,
            )
            refreshed.append(scenario.model_copy(update={"emissions": emissions}))
        self._scenarios = refreshed
        return self.list_all()

    # -- JSON --

    def export_json(self, indent: int = 2) -> str:
        return json.dumps(
            [s.to_record() for s in self._scenarios],
            indent=indent,
            ensure_ascii=False,
        )

    def _parse_records(
        self,
        records: list[Any],
        *,
        stamp_updated: bool,
    ) -> list[Scenario]:
        parsed: list[Scenario] = []
        now = self._clock()
        for idx, record in enumerate(records):
            if not isinstance(record, dict) or not record.get("id") or not record.get("name"):
                logger.warning("Skipping scenario record %d: missing id or name", idx)
                continue
            data, warnings = validate_scenario_payload(record)
            for w in warnings:
                logger.warning("Scenario %s: %s", record["id"], w)
            data.setdefault("createdAt", now)
            if stamp_updated or "updatedAt" not in data:
                data["updatedAt"] = now
            try:
                parsed.append(Scenario.model_validate(data))
            except ValidationError as exc:
                logger.warning(
                    "Skipping scenario %s: %d validation error(s): %s",
                    record["id"], exc.error_count(), exc.errors()[0]["msg"],
                )
        return parsed

    def import_json(self, payload: str) -> list[Scenario]:
        """
        Append the scenarios in *payload* and return the ones accepted.

        Records without an ``id`` or ``name`` (or failing schema validation)
        are skipped with a warning. Imported records get a fresh
        ``updated_at``.

        Raises
        ------
        ValueError
            If *payload* is not valid JSON or is not a JSON array.
        """
        imported = json.loads(payload)
        if not isinstance(imported, list):
            raise ValueError("Invalid format")
        accepted = self._parse_records(imported, stamp_updated=True)
        self._scenarios.extend(accepted)
        logger.info("Imported %d of %d scenario record(s)", len(accepted), len(imported))
        return accepted

    @classmethod
    def from_json(
        cls,
        payload: str | None,
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> ScenarioLibrary:
        """
        Rebuild a library from previously exported JSON.

        An empty payload gives the default scenarios. A corrupt payload is
        logged at ERROR and also gives the defaults.
        """
        library = cls(id_factory=id_factory, clock=clock)
        if not payload:
            return library
        try:
            records = json.loads(payload)
            if not isinstance(records, list):
                raise ValueError("Invalid format")
        except ValueError as exc:
            logger.error("Error loading scenarios, using defaults: %s", exc)
            return library
        library._scenarios = library._parse_records(records, stamp_updated=False)
        return library
