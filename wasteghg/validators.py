"""
validators.py – Normalisation and sanity checks for raw form and import data.

Each ``validate_*`` function:
* Accepts a raw dict as typed into a calculator form or read from a
  scenario JSON file.
* Returns a (normalised_dict, warnings_list) tuple.

Normalisation steps
-------------------
* Strip thousands separators and spaces from numeric strings and cast to float.
* Parse timestamps leniently and reformat them as ISO-8601.

Validation checks add warnings but do NOT correct data – the caller decides
whether to show them. Percentages that do not sum to 100 are passed through
unchanged. The only value ever dropped is an unparseable scenario timestamp.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable, Mapping

from dateutil import parser as dateutil_parser

from wasteghg.constants import PERCENT_SUM_TOLERANCE


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _to_float(value: Any) -> float | None:
    """
    Try to convert *value* to float.

    Strips commas, spaces, and a trailing percent sign before conversion.
    Returns None on failure.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = re.sub(r"[,%\s]", "", value)
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def _to_iso_datetime(value: Any) -> str | None:
    """
    Parse *value* as a timestamp and return an ISO-8601 string.

    Accepts datetime objects, ISO strings and common formats such as
    ``03/15/2025 10:30``. Returns None on failure.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return dateutil_parser.parse(str(value)).isoformat()
    except (ValueError, OverflowError):
        return None


def _normalise_numbers(
    section: str,
    raw: Mapping[str, Any] | None,
    warnings: list[str],
) -> dict[str, Any]:
    """Cast every value of *raw* to float, warning about unparseable entries."""
    out: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        number = _to_float(value)
        if number is None:
            warnings.append(f"{section}.{key}: could not parse number '{value}'")
            out[key] = value
            continue
        if number < 0:
            warnings.append(f"{section}.{key} is negative ({number:g})")
        out[key] = number
    return out


def check_percent_sum(
    section: str,
    values: Iterable[float],
    tolerance: float = PERCENT_SUM_TOLERANCE,
) -> str | None:
    """Return a warning if *values* do not sum to 100 within *tolerance*."""
    total = sum(v for v in values if isinstance(v, (int, float)))
    if abs(total - 100.0) > tolerance:
        return f"{section} sums to {total:g}% (expected 100%)"
    return None


# ─────────────────────────────────────────────────────────────
# Compositions / allocations
# ─────────────────────────────────────────────────────────────

def validate_percentages(
    raw: Mapping[str, Any],
    section: str = "composition",
) -> tuple[dict[str, Any], list[str]]:
    """
    Normalise a material or pathway percentage mapping.

    Returns
    -------
    (normalised_dict, warnings)
    """
    warnings: list[str] = []
    d = _normalise_numbers(section, raw, warnings)
    msg = check_percent_sum(section, d.values())
    if msg:
        warnings.append(msg)
    return d, warnings


# ─────────────────────────────────────────────────────────────
# Pathway form input
# ─────────────────────────────────────────────────────────────

_NESTED_PERCENT_KEYS = ("composition",)
_NESTED_NUMBER_KEYS = ("fuelUse", "fuel_use", "energyRecovery", "energy_recovery")


def validate_pathway_input(
    raw: Mapping[str, Any],
) -> tuple[dict[str, Any], list[str]]:
    """
    Normalise a calculator form payload before it reaches ``calc_*``.

    Top-level and nested numeric strings (``"1,200"``) become floats; text
    fields such as ``fuelType`` are kept as-is.

    Returns
    -------
    (normalised_dict, warnings)
    """
    warnings: list[str] = []
    d: dict[str, Any] = {}

    for key, value in raw.items():
        if key in _NESTED_PERCENT_KEYS and isinstance(value, Mapping):
            d[key], extra = validate_percentages(value, key)
            warnings.extend(extra)
        elif key in _NESTED_NUMBER_KEYS and isinstance(value, Mapping):
            d[key] = {
                k: (_to_float(v) if _to_float(v) is not None else v)
                for k, v in value.items()
            }
        elif isinstance(value, str) and _to_float(value) is not None:
            d[key] = _to_float(value)
        else:
            d[key] = value
        if isinstance(d[key], (int, float)) and not isinstance(d[key], bool) and d[key] < 0:
            warnings.append(f"{key} is negative ({d[key]:g})")

    return d, warnings


# ─────────────────────────────────────────────────────────────
# Scenario records
# ─────────────────────────────────────────────────────────────

_SCENARIO_SECTIONS = {
    "wasteComposition": "waste composition",
    "treatmentAllocation": "treatment allocation",
}


def validate_scenario_payload(
    raw: Mapping[str, Any],
) -> tuple[dict[str, Any], list[str]]:
    """
    Normalise one scenario record from a JSON import.

    * Composition and allocation values are cast to float and checked to sum
      to 100.
    * Fleet values are cast to float; negatives are flagged.
    * ``createdAt`` / ``updatedAt`` are re-emitted as ISO-8601. An
      unparseable timestamp is dropped with a warning so the caller can
      stamp a fresh one.

    Returns
    -------
    (normalised_dict, warnings)
    """
    warnings: list[str] = []
    d = dict(raw)
    label = d.get("name") or d.get("id") or "scenario"

    for key, section in _SCENARIO_SECTIONS.items():
        if isinstance(d.get(key), Mapping):
            d[key], extra = validate_percentages(d[key], section)
            warnings.extend(f"{label}: {w}" for w in extra)

    if isinstance(d.get("fleet"), Mapping):
        fleet_warnings: list[str] = []
        d["fleet"] = _normalise_numbers("fleet", d["fleet"], fleet_warnings)
        warnings.extend(f"{label}: {w}" for w in fleet_warnings)

    for key in ("createdAt", "updatedAt"):
        if key not in d:
            continue
        original = d[key]
        d[key] = _to_iso_datetime(original)
        if d[key] is None:
            del d[key]
            if original:
                warnings.append(f"{label}: could not parse {key} '{original}'")

    return d, warnings
