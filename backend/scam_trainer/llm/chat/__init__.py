"""Conversation session infrastructure for the scam simulation.

This module provides the core abstractions:
- ConversationSession: ordered transcript, chat exchange and closing analysis
- SessionManager: in-memory session lifecycle with idle cleanup
"""

from scam_trainer.llm.chat.manager import ManagedSession, SessionManager, get_session_manager
from scam_trainer.llm.chat.models import (
    AnalysisResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    SendMessageRequest,
    SendMessageResponse,
    SessionInfo,
    SessionState,
    Speaker,
    Turn,
)
from scam_trainer.llm.chat.session import (
    AnalysisOutcome,
    ConversationSession,
    EmptyTurnError,
    SessionBusyError,
    SessionError,
)

__all__ = [
    "AnalysisOutcome",
    "AnalysisResponse",
    "ConversationSession",
    "CreateSessionRequest",
    "CreateSessionResponse",
    "EmptyTurnError",
    "ManagedSession",
    "SendMessageRequest",
    "SendMessageResponse",
    "SessionBusyError",
    "SessionError",
    "SessionInfo",
    "SessionManager",
    "SessionState",
    "Speaker",
    "Turn",
    "get_session_manager",
]
