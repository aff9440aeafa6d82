"""ConversationSession drives one simulated scam conversation.

The session owns an ordered transcript that always starts with a priming
pair (persona instruction, then the counterpart's acknowledgement). Each chat
exchange appends the trainee's turn and the counterpart's reply; the closing
analysis is requested on a disposable copy and never touches the transcript.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from scam_trainer.llm.chat.models import SessionState, Speaker, Turn
from scam_trainer.llm.chat.prompts import (
    ANALYSIS_FALLBACK,
    OPENER_INSTRUCTION,
    PRIMING_ACK,
    build_analysis_prompt,
)
from scam_trainer.llm.gemini_client import GeminiClient, GeminiError
from scam_trainer.llm.model_resolver import ModelResolver

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base exception for session misuse."""

    pass


class EmptyTurnError(SessionError, ValueError):
    """The trainee's message is empty after trimming."""

    pass


class SessionBusyError(SessionError):
    """A reply is still pending for this session."""

    pass


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of an analysis request; failures carry the fallback text."""

    text: str
    ok: bool
    error: GeminiError | None = None

    @classmethod
    def fallback(cls, error: GeminiError) -> "AnalysisOutcome":
        return cls(text=ANALYSIS_FALLBACK, ok=False, error=error)


class ConversationSession:
    """One active simulated conversation.

    At most one ``send_turn`` may be in flight; a second call made while a
    reply is pending is rejected with ``SessionBusyError``.
    """

    def __init__(
        self,
        system_prompt: str,
        client: GeminiClient,
        resolver: ModelResolver | None = None,
        scenario_label: str = "",
        session_id: str | None = None,
        owns_client: bool = False,
    ):
        """Create a session and seed the priming pair.

        Args:
            system_prompt: Persona instruction for the counterpart.
            client: Generation API client carrying the credential.
            resolver: Optional resolver; one is built from ``client`` if omitted.
            scenario_label: Context text for the closing analysis.
            session_id: Optional identifier (generated if not given).
            owns_client: Whether ``close()`` should also close ``client``.
        """
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.scenario_label = scenario_label
        self.resolver = resolver or ModelResolver(client)
        self.created_at = datetime.now()
        self.last_activity = self.created_at
        self._client = client
        self._owns_client = owns_client
        self._state = SessionState.IDLE
        self._turns: list[Turn] = [
            Turn(speaker=Speaker.INITIATOR, content=system_prompt),
            Turn(speaker=Speaker.COUNTERPART, content=PRIMING_ACK),
        ]

    @property
    def transcript(self) -> tuple[Turn, ...]:
        """Snapshot of all turns, priming pair included."""
        return tuple(self._turns)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._state is SessionState.AWAITING_REPLY

    @property
    def resolved_endpoint(self) -> str | None:
        return self.resolver.resolved_endpoint

    def contents(self) -> list[dict[str, Any]]:
        """Transcript in upstream wire shape."""
        return [turn.to_content() for turn in self._turns]

    async def open(self) -> str:
        """Ask the counterpart to speak first.

        The kick-off instruction is an ordinary trainee turn, so it stays in
        the transcript like any other.
        """
        return await self.send_turn(OPENER_INSTRUCTION)

    async def send_turn(self, text: str) -> str:
        """Send a trainee message and return the counterpart's reply.

        The trainee's turn is kept even when the request fails, so it is
        re-sent as context with the next successful exchange.

        Raises:
            EmptyTurnError: ``text`` is blank; nothing is appended or sent.
            SessionBusyError: A previous turn is still awaiting its reply.
            GenerationRequestFailed: Upstream returned a non-success status.
            MalformedResponse: Upstream reply lacks the expected shape.
        """
        if not text or not text.strip():
            raise EmptyTurnError("Message must not be empty.")
        if self._state is SessionState.AWAITING_REPLY:
            raise SessionBusyError("Session is still waiting for the previous reply.")

        self._state = SessionState.AWAITING_REPLY
        self.last_activity = datetime.now()
        try:
            self._turns.append(Turn(speaker=Speaker.INITIATOR, content=text))
            endpoint = await self.resolver.resolve_endpoint()
            try:
                reply = await self._client.generate_content(endpoint, self.contents())
            except GeminiError as e:
                logger.error(f"Chat turn failed in session {self.session_id}: {e}")
                raise
            self._turns.append(Turn(speaker=Speaker.COUNTERPART, content=reply))
            return reply
        finally:
            self._state = SessionState.IDLE
            self.last_activity = datetime.now()

    async def analyze(self, scenario_label: str | None = None) -> str:
        """Return a marked-up critique of the conversation so far.

        Never raises for upstream failures; the fixed fallback text is
        returned instead.
        """
        outcome = await self.request_analysis(scenario_label)
        return outcome.text

    async def request_analysis(self, scenario_label: str | None = None) -> AnalysisOutcome:
        """Request the critique on a disposable copy of the transcript."""
        label = self.scenario_label if scenario_label is None else scenario_label
        instruction = Turn(speaker=Speaker.INITIATOR, content=build_analysis_prompt(label))
        contents = self.contents() + [instruction.to_content()]

        self.last_activity = datetime.now()
        try:
            endpoint = await self.resolver.resolve_endpoint()
            text = await self._client.generate_content(endpoint, contents)
        except GeminiError as e:
            logger.warning(f"Analysis failed in session {self.session_id}, using fallback: {e}")
            return AnalysisOutcome.fallback(e)

        return AnalysisOutcome(text=text, ok=True)

    async def close(self) -> None:
        """Release the HTTP client if this session owns it."""
        if self._owns_client:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning(f"Error closing client: {e}")
        logger.info(f"Conversation session {self.session_id} closed")
