"""Scenario catalog API routes."""

from fastapi import APIRouter, HTTPException

from scam_trainer.models.scenario import ScenarioSummary
from scam_trainer.scenarios import get_scenario, list_scenarios

router = APIRouter()


@router.get("/scenarios")
async def list_all_scenarios() -> list[ScenarioSummary]:
    """List the scenarios a trainee can pick from."""
    return [ScenarioSummary.from_scenario(s) for s in list_scenarios()]


@router.get("/scenarios/{scenario_id}")
async def get_one_scenario(scenario_id: str) -> ScenarioSummary:
    """Get a single scenario card."""
    scenario = get_scenario(scenario_id)
    if not scenario:
        raise HTTPException(status_code=404, detail=f"Scenario '{scenario_id}' not found")
    return ScenarioSummary.from_scenario(scenario)
