"""Pydantic models for scam scenarios."""

from enum import Enum

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    """How hard the scam is to spot."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Scenario(BaseModel):
    """A scam scenario the trainee can play through.

    Only ``system_prompt`` (seeds the session) and ``title`` (labels the
    closing analysis) are consumed by the conversation core.
    """

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    system_prompt: str = Field(..., min_length=1)


class ScenarioSummary(BaseModel):
    """Scenario card without the persona instruction."""

    id: str
    title: str
    description: str
    difficulty: Difficulty

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "ScenarioSummary":
        return cls(
            id=scenario.id,
            title=scenario.title,
            description=scenario.description,
            difficulty=scenario.difficulty,
        )
