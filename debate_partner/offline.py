"""Offline debate partner for use without network access"""

import random
from typing import Optional

from practice_core.partner import ChatHandle, DebatePartner, winner_for
from practice_core.types import DebateMessage, DebateScore, Persona

from .prompts import create_opening_line

CANNED_REPLIES = [
    "That's an interesting point, but have you considered the counterargument that...",
    "I appreciate your perspective, however, the evidence suggests otherwise...",
    "While I understand your reasoning, there are several flaws in that logic...",
    "That's a compelling argument, but let me challenge you with this...",
    "I see where you're coming from, but the data shows a different picture...",
]


class OfflineDebatePartner(DebatePartner):
    """Canned replies and a judge that totals the per-turn score impacts"""

    source = "offline"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def open_debate(self, persona: Persona, topic: str) -> str:
        return create_opening_line(persona, topic)

    async def reply_to_turn(self, handle: ChatHandle, user_text: str) -> str:
        reply = self.rng.choice(CANNED_REPLIES)
        handle.commit(user_text, reply)
        return reply

    async def score_transcript(
        self,
        messages: list[DebateMessage],
        topic: str,
        persona: Persona,
    ) -> DebateScore:
        user_total = sum(m.score_impact for m in messages if m.sender == "user")
        ai_total = sum(m.score_impact for m in messages if m.sender == "ai")
        user_score = min(100, user_total)
        ai_score = min(100, ai_total)
        return DebateScore(
            user_score=user_score,
            ai_score=ai_score,
            justification="Scored offline from the running totals of each side.",
            winner=winner_for(user_score, ai_score),
        )
