"""Scam scenario catalog."""

from scam_trainer.scenarios.catalog import (
    ScenarioCatalogError,
    get_scenario,
    list_scenarios,
    load_scenarios,
    reload_scenarios,
)

__all__ = [
    "ScenarioCatalogError",
    "get_scenario",
    "list_scenarios",
    "load_scenarios",
    "reload_scenarios",
]
