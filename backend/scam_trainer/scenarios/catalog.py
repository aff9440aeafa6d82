"""Scenario catalog loaded from a JSON file."""

import json
import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import TypeAdapter

from scam_trainer.models.scenario import Scenario

logger = logging.getLogger(__name__)

BUNDLED_SCENARIOS = Path(__file__).parent / "scenarios.json"

_scenario_list = TypeAdapter(list[Scenario])


class ScenarioCatalogError(Exception):
    """The scenario file is missing or invalid."""

    pass


def scenarios_path() -> Path:
    """Scenario file in use: SCENARIOS_PATH env var or the bundled file."""
    return Path(os.getenv("SCENARIOS_PATH", str(BUNDLED_SCENARIOS)))


def load_scenarios(path: Path) -> list[Scenario]:
    """Parse and validate a scenario file.

    Raises:
        ScenarioCatalogError: If the file cannot be read, is invalid, or repeats an id.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ScenarioCatalogError(f"Cannot read scenarios from {path}: {e}") from e

    try:
        scenarios = _scenario_list.validate_python(data)
    except ValueError as e:
        raise ScenarioCatalogError(f"Invalid scenario file {path}: {e}") from e

    seen: set[str] = set()
    for scenario in scenarios:
        if scenario.id in seen:
            raise ScenarioCatalogError(f"Duplicate scenario id '{scenario.id}' in {path}")
        seen.add(scenario.id)

    logger.info(f"Loaded {len(scenarios)} scenario(s) from {path}")
    return scenarios


@lru_cache(maxsize=1)
def _catalog() -> tuple[Scenario, ...]:
    return tuple(load_scenarios(scenarios_path()))


def list_scenarios() -> list[Scenario]:
    return list(_catalog())


def get_scenario(scenario_id: str) -> Scenario | None:
    for scenario in _catalog():
        if scenario.id == scenario_id:
            return scenario
    return None


def reload_scenarios() -> None:
    """Drop the cached catalog so the next lookup re-reads the file."""
    _catalog.cache_clear()
