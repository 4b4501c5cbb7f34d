"""Interface of the AI debate partner consumed by the session"""

from dataclasses import dataclass, field

from .types import DebateMessage, DebateScore, Persona


@dataclass
class ChatHandle:
    """Conversation state for one debate with the partner"""
    persona: Persona
    topic: str
    history: list[dict] = field(default_factory=list)

    def commit(self, user_text: str, reply: str) -> None:
        self.history.append({"role": "user", "content": user_text})
        self.history.append({"role": "assistant", "content": reply})


class DebatePartner:
    """Supplies opening lines, turn replies and transcript scores

    Implementations raise ``ProviderError`` on failure and never retry.
    """

    async def open_debate(self, persona: Persona, topic: str) -> str:
        raise NotImplementedError

    def start_chat(self, persona: Persona, topic: str) -> ChatHandle:
        return ChatHandle(persona=persona, topic=topic)

    async def reply_to_turn(self, handle: ChatHandle, user_text: str) -> str:
        raise NotImplementedError

    async def score_transcript(
        self,
        messages: list[DebateMessage],
        topic: str,
        persona: Persona,
    ) -> DebateScore:
        raise NotImplementedError


def winner_for(user_score: int, ai_score: int) -> str:
    if user_score > ai_score:
        return "user"
    if ai_score > user_score:
        return "ai"
    return "draw"
