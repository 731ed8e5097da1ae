"""
config.py – Load and validate engine settings from the environment.

All configuration is read from environment variables (or a .env file at the
repository root or next to the package). Every setting has a default, so an
empty environment is valid. Call `get_config()` once at startup.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from wasteghg.constants import DEFAULT_TOTAL_WASTE_TONNES
from wasteghg.emission_factors import GRID_ELECTRICITY_EF

# Package directory: wasteghg/
_PACKAGE_ROOT = Path(__file__).resolve().parent
# Repository root (so .env can live next to pyproject.toml)
_REPO_ROOT = _PACKAGE_ROOT.parent

# Load .env from the repository root first, then the package (package overrides).
_env_repo = _REPO_ROOT / ".env"
_env_package = _PACKAGE_ROOT / ".env"
if _env_repo.exists():
    load_dotenv(_env_repo, override=True)
if _env_package.exists():
    load_dotenv(_env_package, override=True)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Validated runtime configuration."""

    grid_electricity_factor: float = GRID_ELECTRICITY_EF   # kg CO₂e / kWh
    total_waste_tonnes: float = DEFAULT_TOTAL_WASTE_TONNES  # per month
    scenarios_file: Path | None = None
    log_level: str = "INFO"


def _positive_float(name: str, default: float, errors: list[str]) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        errors.append(f"{name}={raw!r} is not a number")
        return default
    if value <= 0:
        errors.append(f"{name}={raw!r} must be positive")
    return value


def get_config() -> Config:
    """
    Read environment variables, validate them, and return a Config.

    Variables
    ---------
    WASTE_GHG_GRID_EF
        Grid electricity factor in kg CO₂e/kWh (default 0.855).
    WASTE_GHG_TOTAL_WASTE_TONNES
        Monthly tonnage used for scenario totals (default 1000).
    WASTE_GHG_SCENARIOS_FILE
        Optional path to a scenario JSON file.
    WASTE_GHG_LOG_LEVEL
        Logging level name (default INFO).

    Raises
    ------
    EnvironmentError
        If any variable is set to an invalid value. All problems are listed.
    """
    errors: list[str] = []

    grid = _positive_float("WASTE_GHG_GRID_EF", GRID_ELECTRICITY_EF, errors)
    tonnes = _positive_float(
        "WASTE_GHG_TOTAL_WASTE_TONNES", DEFAULT_TOTAL_WASTE_TONNES, errors,
    )

    log_level = (os.environ.get("WASTE_GHG_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        errors.append(
            f"WASTE_GHG_LOG_LEVEL={log_level!r} is not one of {', '.join(_LOG_LEVELS)}"
        )

    if errors:
        raise EnvironmentError(
            "Invalid environment variable(s):\n  " + "\n  ".join(errors)
            + "\nCopy .env.example → .env and fix the values."
        )

    scenarios_file = os.environ.get("WASTE_GHG_SCENARIOS_FILE")
    path: Path | None = None
    if scenarios_file:
        path = Path(scenarios_file)
        # Relative paths that do not exist from the CWD are taken from the repo root.
        if not path.is_absolute() and not path.exists():
            path = _REPO_ROOT / path

    return Config(
        grid_electricity_factor=grid,
        total_waste_tonnes=tonnes,
        scenarios_file=path,
        log_level=log_level,
    )
