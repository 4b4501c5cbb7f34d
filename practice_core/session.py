"""Debate practice session state machine

A session moves through

    SELECTING -> DEBATING -> SCORING -> RESULTS [-> LEADERBOARD] -> SELECTING

and may be restarted from any state. Provider failures are absorbed into the
conversation; store failures during completion keep the session in SCORING so
that ``end()`` can be called again.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from debate_partner.exceptions import ProviderError

from .config import (
    APOLOGY_MESSAGE,
    DEFAULT_PERSONA,
    DEFAULT_PERSONAS,
    LOSS_FEEDBACK,
    OPENING_LINE,
    WIN_FEEDBACK,
)
from .events import EventEmitter
from .exceptions import (
    AuthenticationRequiredError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    TurnInFlightError,
    ValidationError,
)
from .identity import IdentityManager
from .partner import ChatHandle, DebatePartner
from .ranking import Standing, leaderboard
from .repository import DebateRepository
from .scoring import HeuristicTurnScorer, TurnScorer
from .types import (
    Debate,
    DebateMessage,
    DebateScore,
    Persona,
    SessionState,
    TurnOutcome,
    new_id,
)
from .voice import Transcriber

logger = logging.getLogger(__name__)


class CancellationToken:
    """Marks the provider calls of one debate run as still wanted"""

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def find_persona(name: str) -> Persona:
    """Look up a catalogue persona by name, or make a custom one"""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Persona is required", field="persona")
    for persona in DEFAULT_PERSONAS:
        if persona.name.lower() == name.lower():
            return persona
    return Persona(name=name)


class DebateSession:
    """One user's practice session"""

    def __init__(
        self,
        identity: IdentityManager,
        debates: DebateRepository,
        partner: DebatePartner,
        scorer: Optional[TurnScorer] = None,
        tick_interval: float = 1.0,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or new_id()
        self.identity = identity
        self.debates = debates
        self.partner = partner
        self.scorer = scorer or HeuristicTurnScorer()
        self.tick_interval = tick_interval
        self.events = EventEmitter()
        self.last_active = datetime.now(timezone.utc)

        self.state = SessionState.SELECTING
        self.persona: Persona = DEFAULT_PERSONA
        self.topic = ""
        self.pending_input = ""
        self._timer_task: Optional[asyncio.Task] = None
        self._reset_run()

    def _reset_run(self) -> None:
        self.debate: Optional[Debate] = None
        self.messages: list[DebateMessage] = []
        self.user_score = 0
        self.ai_score = 0
        self.elapsed_seconds = 0
        self.turn_in_flight = False
        self.result: Optional[DebateScore] = None
        self.completed_debate: Optional[Debate] = None
        self.last_error: Optional[str] = None
        self._chat: Optional[ChatHandle] = None
        self._token = CancellationToken()
        self._profile_updated = False
        self._completing = False

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def touch(self) -> None:
        self.last_active = datetime.now(timezone.utc)

    def _set_state(self, state: SessionState) -> None:
        previous = self.state
        self.state = state
        logger.debug("Session %s: %s -> %s", self.session_id, previous.value, state.value)
        self.events.emit("state_changed", previous=previous.value, state=state.value)

    def _require_state(self, action: str, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidTransitionError(f"Cannot {action} while {self.state.value}")

    def _start_timer(self) -> None:
        self._stop_timer()
        self._timer_task = asyncio.create_task(self._tick())

    def _stop_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self.elapsed_seconds += 1

    def _append(self, message: DebateMessage) -> None:
        self.messages.append(message)
        if message.sender == "user":
            self.user_score += message.score_impact
        else:
            self.ai_score += message.score_impact
        self.events.emit("message_appended", message=message.to_dict())

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_persona(self, persona: Union[str, Persona]) -> Persona:
        self._require_state("select a persona", SessionState.SELECTING)
        self.persona = persona if isinstance(persona, Persona) else find_persona(persona)
        return self.persona

    def set_topic(self, topic: str) -> None:
        self._require_state("change the topic", SessionState.SELECTING)
        self.topic = topic or ""

    def set_input(self, text: str) -> None:
        self.pending_input = text or ""

    async def listen(self, transcriber: Transcriber) -> str:
        """Fill the pending input from a one-shot voice transcript"""
        transcript = await transcriber.listen()
        self.set_input(transcript)
        return transcript

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(
        self,
        topic: Optional[str] = None,
        persona: Optional[Union[str, Persona]] = None,
    ) -> Debate:
        """Create the debate record and post the opening line

        Raises:
            ValidationError: If the topic is empty
            AuthenticationRequiredError: If nobody is signed in
            NotFoundError: If the signed-in account has no profile
        """
        self._require_state("start a debate", SessionState.SELECTING)
        if persona is not None:
            self.select_persona(persona)
        if topic is not None:
            self.set_topic(topic)

        topic = self.topic.strip()
        if not topic:
            raise ValidationError("Topic is required", field="topic")

        account = await self.identity.get_session()
        if account is None:
            raise AuthenticationRequiredError()
        if await self.identity.get_profile(account.id) is None:
            raise NotFoundError("Profile", account.id)

        token = self._token
        debate = await self.debates.create_debate(account.id, topic, self.persona.name)
        self._chat = self.partner.start_chat(self.persona, topic)
        try:
            opening = await self.partner.open_debate(self.persona, topic)
        except ProviderError as e:
            logger.warning("Opening line failed, using the default: %s", e)
            opening = OPENING_LINE.format(topic=topic, persona=self.persona.name.lower())
        if token.cancelled:
            logger.info("Session %s restarted while starting, dropping debate %s", self.session_id, debate.id)
            return debate

        message = await self.debates.add_message(debate.id, "ai", opening, 0)
        if token.cancelled:
            return debate

        self.debate = debate
        self.topic = topic
        self._append(message)
        self.events.emit("turn_received", text=opening)
        self._set_state(SessionState.DEBATING)
        self._start_timer()
        logger.info("Session %s started debate %s (%s)", self.session_id, debate.id, self.persona.name)
        return debate

    async def submit_turn(self, text: Optional[str] = None) -> TurnOutcome:
        """Post the user's argument and wait for the opponent's reply

        Only one turn may be in flight at a time. A failed reply is replaced
        by an apology worth zero points and the debate continues.

        Raises:
            TurnInFlightError: If the previous reply is still pending
            ValidationError: If there is nothing to submit
        """
        self._require_state("submit a turn", SessionState.DEBATING)
        if self.turn_in_flight:
            raise TurnInFlightError()

        text = (self.pending_input if text is None else text).strip()
        if not text:
            raise ValidationError("Message is required", field="message")

        token = self._token
        self.turn_in_flight = True
        try:
            user_message = await self.debates.add_message(
                self.debate.id, "user", text, self.scorer.score("user", text)
            )
            if token.cancelled:
                return TurnOutcome(user_message=user_message, dropped=True)
            self._append(user_message)
            self.pending_input = ""

            try:
                reply = await self.partner.reply_to_turn(self._chat, text)
            except ProviderError as e:
                logger.warning("Session %s: opponent reply failed: %s", self.session_id, e)
                reply = None

            if token.cancelled:
                logger.info("Session %s: dropping reply that arrived after restart", self.session_id)
                return TurnOutcome(user_message=user_message, dropped=True)

            if reply is None:
                content, impact = APOLOGY_MESSAGE, 0
            else:
                content, impact = reply, self.scorer.score("ai", reply)

            ai_message = await self.debates.add_message(self.debate.id, "ai", content, impact)
            if token.cancelled:
                return TurnOutcome(user_message=user_message, dropped=True)
            self._append(ai_message)
            self.events.emit("turn_received", text=content)
            return TurnOutcome(
                user_message=user_message,
                ai_message=ai_message,
                provider_failed=reply is None,
            )
        finally:
            if not token.cancelled:
                self.turn_in_flight = False

    async def end(self) -> Optional[DebateScore]:
        """Stop the debate, have the transcript judged and record the result

        Calling ``end()`` again while in SCORING retries a completion whose
        store write failed, without asking the judge again.

        Returns:
            The judge's verdict, or None if judging failed and the debate
            went back to DEBATING

        Raises:
            TurnInFlightError: If an opponent reply is still pending
            InvalidTransitionError: If the result is already being stored
            PersistenceError: If the result could not be stored (state stays SCORING)
        """
        if self._completing:
            raise InvalidTransitionError("Cannot end the debate while its result is being stored")
        if self.state == SessionState.SCORING and self.result is not None:
            return await self._complete(self.debate, self._token, self.result)

        self._require_state("end the debate", SessionState.DEBATING)
        if self.turn_in_flight:
            raise TurnInFlightError()

        self._stop_timer()
        self.events.emit("speech_cancelled")
        self._set_state(SessionState.SCORING)

        debate = self.debate
        token = self._token
        try:
            score = await self.partner.score_transcript(list(self.messages), self.topic, self.persona)
        except ProviderError as e:
            if token.cancelled:
                return None
            logger.warning("Session %s: scoring failed: %s", self.session_id, e)
            self.last_error = str(e)
            self._set_state(SessionState.DEBATING)
            self._start_timer()
            return None

        if token.cancelled:
            logger.info("Session %s: dropping verdict that arrived after restart", self.session_id)
            return None

        self.result = score
        self.last_error = None
        self.events.emit("scored", **score.to_dict())
        return await self._complete(debate, token, score)

    async def _complete(
        self,
        debate: Debate,
        token: CancellationToken,
        score: DebateScore,
    ) -> DebateScore:
        """Store the verdict on the debate and on its owner's profile

        A restart while this runs does not stop the writes, so a completed
        debate is always counted on the profile. Only the run that ``token``
        belongs to is updated.
        """
        duration = self.elapsed_seconds
        completed = self.completed_debate
        profile_updated = self._profile_updated
        self._completing = True
        try:
            if completed is None:
                feedback = WIN_FEEDBACK if score.user_score > score.ai_score else LOSS_FEEDBACK
                completed = await self.debates.complete_debate(
                    debate.id,
                    user_score=score.user_score,
                    ai_score=score.ai_score,
                    duration_seconds=duration,
                    feedback=feedback,
                )
                if not token.cancelled:
                    self.completed_debate = completed
            if not profile_updated:
                await self.identity.record_result(debate.user_id, score.user_score, score.ai_score)
                if not token.cancelled:
                    self._profile_updated = True
        except PersistenceError as e:
            logger.error("Session %s: could not store the result: %s", self.session_id, e)
            if not token.cancelled:
                self.last_error = str(e)
                self.events.emit("completion_failed", error=str(e))
            raise
        finally:
            if not token.cancelled:
                self._completing = False

        if token.cancelled:
            logger.info("Session %s restarted while storing debate %s", self.session_id, debate.id)
            return score
        self._set_state(SessionState.RESULTS)
        return score

    def restart(self) -> None:
        """Abandon the current run and go back to persona/topic selection

        Stored debates and profiles are left untouched, except that a verdict
        already being stored is still written. Replies still in flight are
        dropped when they arrive.
        """
        self._token.cancel()
        self._stop_timer()
        self.events.emit("speech_cancelled")
        self._reset_run()
        self.persona = DEFAULT_PERSONA
        self.topic = ""
        self.pending_input = ""
        if self.state != SessionState.SELECTING:
            self._set_state(SessionState.SELECTING)

    async def view_leaderboard(self) -> list[Standing]:
        self._require_state("view the leaderboard", SessionState.RESULTS)
        self._set_state(SessionState.LEADERBOARD)
        return await self.standings()

    async def standings(self) -> list[Standing]:
        return leaderboard(await self.identity.list_profiles())

    def back_to_selection(self) -> None:
        self._require_state("leave the leaderboard", SessionState.LEADERBOARD)
        self.restart()

    # ------------------------------------------------------------------

    def close(self) -> None:
        self._token.cancel()
        self._stop_timer()

    def snapshot(self) -> dict:
        """JSON-ready view of the session"""
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "topic": self.topic,
            "persona": self.persona.to_dict(),
            "debate_id": self.debate.id if self.debate else None,
            "messages": [m.to_dict() for m in self.messages],
            "user_score": self.user_score,
            "ai_score": self.ai_score,
            "elapsed_seconds": self.elapsed_seconds,
            "turn_in_flight": self.turn_in_flight,
            "pending_input": self.pending_input,
            "result": self.result.to_dict() if self.result else None,
            "feedback": self.completed_debate.feedback if self.completed_debate else None,
            "last_error": self.last_error,
        }


class SessionManager:
    """Manages live debate sessions"""

    def __init__(
        self,
        factory: Callable[..., DebateSession],
        session_timeout_minutes: int = 30,
    ):
        self._factory = factory
        self._sessions: dict[str, DebateSession] = {}
        self._timeout = timedelta(minutes=session_timeout_minutes)

    def create_session(self, **kwargs) -> DebateSession:
        """Create a new session in the selection state

        Keyword arguments are passed to the session factory.
        """
        self._cleanup_expired()
        session = self._factory(**kwargs)
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[DebateSession]:
        """Get a session by ID

        Args:
            session_id: The session ID

        Returns:
            DebateSession if found and not idle for too long, None otherwise
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None

        if datetime.now(timezone.utc) - session.last_active > self._timeout:
            self.delete_session(session_id)
            return None

        session.touch()
        return session

    def delete_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def _cleanup_expired(self) -> None:
        now = datetime.now(timezone.utc)
        expired = [
            sid for sid, session in self._sessions.items()
            if now - session.last_active > self._timeout
        ]
        for sid in expired:
            self.delete_session(sid)

    @property
    def active_session_count(self) -> int:
        self._cleanup_expired()
        return len(self._sessions)
