"""SessionManager handles conversation session lifecycle and storage."""

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from scam_trainer.llm.chat.models import SessionInfo, Speaker
from scam_trainer.llm.chat.prompts import build_persona_prompt
from scam_trainer.llm.chat.session import ConversationSession
from scam_trainer.llm.gemini_client import GeminiClient
from scam_trainer.models.scenario import Scenario
from scam_trainer.models.trainee import TraineeProfile

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT_MINUTES = 30
CLEANUP_INTERVAL = 60  # seconds

# Singleton manager instance
_manager: "SessionManager | None" = None


@dataclass
class ManagedSession:
    """A live conversation plus the scenario it was started from."""

    session: ConversationSession
    scenario: Scenario
    trainee: TraineeProfile | None = None

    @property
    def session_id(self) -> str:
        return self.session.session_id

    def info(self) -> SessionInfo:
        turns = self.session.transcript
        return SessionInfo(
            session_id=self.session.session_id,
            scenario_id=self.scenario.id,
            scenario_title=self.scenario.title,
            state=self.session.state,
            created_at=self.session.created_at,
            last_activity=self.session.last_activity,
            turn_count=len(turns),
            resolved_endpoint=self.session.resolved_endpoint,
            transcript=list(turns[2:]),
        )


class SessionManager:
    """Manages conversation session lifecycle.

    Responsibilities:
    - Create sessions from a scenario, trainee profile and credential
    - Store active sessions (in-memory)
    - Cleanup idle sessions
    - Get/close sessions by ID
    """

    def __init__(
        self,
        session_timeout_minutes: int | None = None,
        client_factory: Callable[..., GeminiClient] = GeminiClient,
    ):
        """Initialize the session manager.

        Args:
            session_timeout_minutes: How long idle sessions live before cleanup.
                Defaults to SESSION_TIMEOUT_MINUTES env var.
            client_factory: Callable building a GeminiClient from an API key.
        """
        if session_timeout_minutes is None:
            session_timeout_minutes = int(
                os.getenv("SESSION_TIMEOUT_MINUTES", DEFAULT_SESSION_TIMEOUT_MINUTES)
            )
        self._sessions: dict[str, ManagedSession] = {}
        self._session_timeout = timedelta(minutes=session_timeout_minutes)
        self._client_factory = client_factory
        self._cleanup_task: asyncio.Task | None = None

    @property
    def active_session_count(self) -> int:
        return len(self._sessions)

    def create_session(
        self,
        scenario: Scenario,
        credential: str,
        trainee: TraineeProfile | None = None,
    ) -> ManagedSession:
        """Create a new conversation for a scenario.

        Each session gets its own client and resolver, so no two sessions
        share a transcript or a memoized endpoint.
        """
        client = self._client_factory(api_key=credential)
        session = ConversationSession(
            system_prompt=build_persona_prompt(scenario.system_prompt, trainee),
            client=client,
            scenario_label=scenario.title,
            owns_client=True,
        )
        managed = ManagedSession(session=session, scenario=scenario, trainee=trainee)
        self._sessions[session.session_id] = managed
        logger.info(
            f"Created session {session.session_id} for scenario {scenario.id} "
            f"(total sessions: {len(self._sessions)})"
        )
        return managed

    def get_session(self, session_id: str) -> ManagedSession | None:
        """Get a session by ID, refreshing its idle timer."""
        managed = self._sessions.get(session_id)
        if managed:
            managed.session.last_activity = datetime.now()
        return managed

    def list_sessions(self) -> list[SessionInfo]:
        return [m.info() for m in self._sessions.values()]

    async def close_session(self, session_id: str) -> bool:
        """Close and remove a session.

        Returns:
            True if session was found and closed, False otherwise.
        """
        managed = self._sessions.pop(session_id, None)
        if managed:
            await managed.session.close()
            logger.info(f"Closed session {session_id}")
            return True
        return False

    async def close_all(self) -> int:
        """Close every session. Returns the number closed."""
        session_ids = list(self._sessions.keys())
        for session_id in session_ids:
            await self.close_session(session_id)
        return len(session_ids)

    async def cleanup_expired(self) -> int:
        """Close sessions that have been idle too long.

        Sessions waiting on a reply are left alone.
        """
        now = datetime.now()
        expired_ids = [
            sid for sid, m in self._sessions.items()
            if not m.session.is_processing
            and now - m.session.last_activity > self._session_timeout
        ]

        for session_id in expired_ids:
            logger.info(f"Cleaning up expired session {session_id}")
            await self.close_session(session_id)

        if expired_ids:
            logger.info(f"Cleaned up {len(expired_ids)} expired session(s)")

        return len(expired_ids)

    async def start_cleanup_task(self) -> None:
        """Start the background cleanup task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Started session cleanup background task")

    async def stop_cleanup_task(self) -> None:
        """Stop the background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Stopped session cleanup background task")

    async def _cleanup_loop(self) -> None:
        """Background loop that cleans up expired sessions."""
        while True:
            try:
                await asyncio.sleep(CLEANUP_INTERVAL)
                await self.cleanup_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Error in session cleanup task: {e}")

    async def shutdown(self) -> None:
        """Stop background work and close all sessions."""
        await self.stop_cleanup_task()
        await self.close_all()
        logger.info("Session manager shutdown complete")

    def get_stats(self) -> dict[str, Any]:
        now = datetime.now()
        return {
            "active_sessions": len(self._sessions),
            "sessions_by_scenario": self._count_by_scenario(),
            "exchanges": sum(
                sum(1 for t in m.session.transcript[2:] if t.speaker is Speaker.COUNTERPART)
                for m in self._sessions.values()
            ),
            "oldest_session_age_seconds": self._oldest_session_age(now),
            "cleanup_task_running": self._cleanup_task is not None,
        }

    def _count_by_scenario(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for m in self._sessions.values():
            counts[m.scenario.id] = counts.get(m.scenario.id, 0) + 1
        return counts

    def _oldest_session_age(self, now: datetime) -> float | None:
        if not self._sessions:
            return None
        oldest = min(m.session.created_at for m in self._sessions.values())
        return (now - oldest).total_seconds()


def get_session_manager() -> SessionManager:
    """Get the singleton session manager instance."""
    global _manager
    if _manager is None:
        _manager = SessionManager()
    return _manager


async def init_session_manager() -> SessionManager:
    """Initialize the session manager and start background tasks."""
    manager = get_session_manager()
    await manager.start_cleanup_task()
    return manager


async def shutdown_session_manager() -> None:
    """Shutdown the session manager."""
    global _manager
    if _manager:
        await _manager.shutdown()
        _manager = None
