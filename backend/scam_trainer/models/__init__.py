"""Pydantic models for the scam awareness trainer."""

from scam_trainer.models.credential import CredentialStatus, CredentialUpdate
from scam_trainer.models.scenario import Difficulty, Scenario, ScenarioSummary
from scam_trainer.models.trainee import TraineeProfile

__all__ = [
    "CredentialStatus",
    "CredentialUpdate",
    "Difficulty",
    "Scenario",
    "ScenarioSummary",
    "TraineeProfile",
]
