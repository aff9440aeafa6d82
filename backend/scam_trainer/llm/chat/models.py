"""Pydantic models for conversation sessions."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from scam_trainer.models.scenario import ScenarioSummary
from scam_trainer.models.trainee import TraineeProfile


class Speaker(str, Enum):
    """Who produced a turn. Values are the upstream protocol roles."""

    INITIATOR = "user"
    COUNTERPART = "model"


class SessionState(str, Enum):
    """In-flight state of a session."""

    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class Turn(BaseModel):
    """One message unit of the transcript."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_content(self) -> dict[str, Any]:
        """Render as a ``contents`` entry of a generateContent request."""
        return {"role": self.speaker.value, "parts": [{"text": self.content}]}


class CreateSessionRequest(BaseModel):
    """Request to start a simulated conversation."""

    scenario_id: str
    trainee: TraineeProfile
    start: bool = Field(
        default=True,
        description="Ask the counterpart for an opening message right away",
    )


class CreateSessionResponse(BaseModel):
    """Response after starting a session."""

    session_id: str
    scenario: ScenarioSummary
    created_at: datetime
    opener: str | None = None
    error: str | None = None


class SendMessageRequest(BaseModel):
    """A trainee chat message."""

    text: str


class SendMessageResponse(BaseModel):
    """The counterpart's reply."""

    reply: str


class AnalysisResponse(BaseModel):
    """Post-conversation critique, lightly marked up (p, b, ul, li)."""

    feedback: str


class SessionInfo(BaseModel):
    """Information about an active session."""

    session_id: str
    scenario_id: str
    scenario_title: str
    state: SessionState
    created_at: datetime
    last_activity: datetime
    turn_count: int
    resolved_endpoint: str | None = None
    transcript: list[Turn] = Field(
        default_factory=list,
        description="Turns after the priming pair",
    )
