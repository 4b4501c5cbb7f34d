"""Debate partner backed by Groq chat completions"""

import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ValidationError, field_validator

from practice_core.config import LLM_MAX_TOKENS_JUDGE, LLM_MAX_TOKENS_TURN, LLM_MODEL
from practice_core.partner import ChatHandle, DebatePartner, winner_for
from practice_core.types import DebateMessage, DebateScore, Persona

from .exceptions import MalformedResponseError
from .groq_client import GroqClient
from .prompts import (
    JUDGE_SYSTEM_PROMPT,
    create_judge_prompt,
    create_opening_line,
    create_opponent_prompt,
)

logger = logging.getLogger(__name__)


class JudgeVerdict(BaseModel):
    """Shape of the judge's JSON answer"""
    user_score: int
    ai_score: int
    justification: str = ""
    winner: Literal["user", "ai", "draw"]

    @field_validator("user_score", "ai_score", mode="before")
    @classmethod
    def _clamp(cls, v) -> int:
        return max(0, min(100, int(round(float(v)))))

    @field_validator("winner", mode="before")
    @classmethod
    def _lower(cls, v: str) -> str:
        return (v or "").strip().lower()


class GroqDebatePartner(DebatePartner):
    """In-character opponent and transcript judge on Groq"""

    def __init__(self, client: Optional[GroqClient] = None, model: str = LLM_MODEL):
        self.client = client or GroqClient()
        self.model = model

    async def open_debate(self, persona: Persona, topic: str) -> str:
        return create_opening_line(persona, topic)

    async def reply_to_turn(self, handle: ChatHandle, user_text: str) -> str:
        messages = [{"role": "system", "content": create_opponent_prompt(handle.persona, handle.topic)}]
        messages.extend(handle.history)
        messages.append({"role": "user", "content": user_text})

        reply = await self.client.chat(messages, max_tokens=LLM_MAX_TOKENS_TURN, model=self.model)
        handle.commit(user_text, reply)
        return reply

    async def score_transcript(
        self,
        messages: list[DebateMessage],
        topic: str,
        persona: Persona,
    ) -> DebateScore:
        prompt = create_judge_prompt(messages, topic, persona)
        text = await self.client.chat(
            [
                {"role": "system", "content": JUDGE_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=LLM_MAX_TOKENS_JUDGE,
            model=self.model,
            json_mode=True,
        )
        return parse_verdict(text)


def parse_verdict(text: str) -> DebateScore:
    """Parse the judge's JSON answer into a DebateScore

    Scores are clamped to 0..100 and the winner always follows the scores.

    Raises:
        MalformedResponseError: If the text is not a valid verdict
    """
    try:
        verdict = JudgeVerdict.model_validate(json.loads(text))
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning("Unreadable judge verdict: %s", e)
        raise MalformedResponseError(f"Unreadable judge verdict: {e}") from e

    winner = winner_for(verdict.user_score, verdict.ai_score)
    if winner != verdict.winner:
        logger.info("Judge winner %s disagrees with scores, using %s", verdict.winner, winner)

    return DebateScore(
        user_score=verdict.user_score,
        ai_score=verdict.ai_score,
        justification=verdict.justification,
        winner=winner,
    )
