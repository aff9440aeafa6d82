"""Conversation session API endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from scam_trainer.db import credential_store
from scam_trainer.llm.chat.manager import ManagedSession, get_session_manager
from scam_trainer.llm.chat.models import (
    AnalysisResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    SendMessageRequest,
    SendMessageResponse,
    SessionInfo,
)
from scam_trainer.llm.chat.session import EmptyTurnError, SessionBusyError
from scam_trainer.llm.gemini_client import GeminiError, GenerationRequestFailed
from scam_trainer.models.scenario import ScenarioSummary
from scam_trainer.scenarios import get_scenario

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_text(error: GeminiError) -> str:
    """Chat-visible failure text."""
    message = error.message if isinstance(error, GenerationRequestFailed) else str(error)
    return f"Error: {message}"


def _require_session(session_id: str) -> ManagedSession:
    managed = get_session_manager().get_session(session_id)
    if not managed:
        raise HTTPException(status_code=404, detail="Session not found")
    return managed


# Registered before /sessions/{session_id} so "stats" is not taken for an id
@router.get("/sessions/stats")
async def get_session_stats() -> dict[str, Any]:
    """Get session statistics (admin endpoint)."""
    return get_session_manager().get_stats()


@router.post("/sessions")
async def create_session(request: CreateSessionRequest) -> CreateSessionResponse:
    """Start a simulated conversation for a scenario.

    With ``start`` set, the counterpart's opening message is requested right
    away. A failure there is reported in ``error`` and the session is kept.
    """
    scenario = get_scenario(request.scenario_id)
    if not scenario:
        raise HTTPException(status_code=404, detail="Scenario not found")

    credential, _ = await credential_store.get_credential()
    if not credential:
        raise HTTPException(status_code=428, detail="No API key configured")

    managed = get_session_manager().create_session(
        scenario=scenario,
        credential=credential,
        trainee=request.trainee,
    )
    response = CreateSessionResponse(
        session_id=managed.session_id,
        scenario=ScenarioSummary.from_scenario(scenario),
        created_at=managed.session.created_at,
    )

    if request.start:
        try:
            response.opener = await managed.session.open()
        except GeminiError as e:
            logger.error(f"Start scenario error: {e}")
            response.error = _error_text(e)

    return response


@router.get("/sessions")
async def list_sessions() -> list[SessionInfo]:
    """List active sessions."""
    return get_session_manager().list_sessions()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> SessionInfo:
    """Get information about a session, including its transcript."""
    return _require_session(session_id).info()


@router.post("/sessions/{session_id}/messages")
async def send_message(session_id: str, request: SendMessageRequest) -> SendMessageResponse:
    """Send a trainee message and return the counterpart's reply."""
    managed = _require_session(session_id)

    try:
        reply = await managed.session.send_turn(request.text.strip())
    except EmptyTurnError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except GeminiError as e:
        raise HTTPException(status_code=502, detail=_error_text(e))

    return SendMessageResponse(reply=reply)


@router.post("/sessions/{session_id}/analysis")
async def analyze_session(session_id: str) -> AnalysisResponse:
    """Produce the closing critique. Upstream failures yield a fallback text."""
    managed = _require_session(session_id)
    feedback = await managed.session.analyze(managed.scenario.title)
    return AnalysisResponse(feedback=feedback)


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str) -> dict[str, str]:
    """Explicitly end a session."""
    closed = await get_session_manager().close_session(session_id)
    if not closed:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "closed", "session_id": session_id}
