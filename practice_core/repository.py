"""Debate and media records on top of the store"""

import logging
from typing import Callable, Optional, Type, TypeVar

from .exceptions import CorruptDataError, InvalidTransitionError, NotFoundError, ValidationError
from .store import Collection, Store
from .types import Debate, DebateMessage, MediaAnalysis, Record, Sender, new_id, utc_now

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


def _to_records(collection: Collection, cls: Type[R], items: list[dict]) -> list[R]:
    try:
        return [cls.from_dict(item) for item in items]
    except TypeError as e:
        logger.error("Malformed record in %s: %s", collection.value, e)
        raise CorruptDataError(collection.value, str(e)) from e


async def load_records(store: Store, collection: Collection, cls: Type[R]) -> list[R]:
    """Load a collection and convert each stored dict to ``cls``

    Raises:
        CorruptDataError: If a stored record is missing required fields
    """
    return _to_records(collection, cls, await store.load(collection))


async def update_records(
    store: Store,
    collection: Collection,
    cls: Type[R],
    fn: Callable[[list[R]], list[R]],
) -> list[R]:
    """Replace a collection with ``fn(records)`` while holding its write lock"""
    written: list[R] = []

    def apply(items: list[dict]) -> list[dict]:
        written[:] = fn(_to_records(collection, cls, items))
        return [r.to_dict() for r in written]

    await store.update(collection, apply)
    return written


class DebateRepository:
    """Debates and their messages"""

    def __init__(self, store: Store):
        self.store = store

    async def create_debate(self, user_id: str, topic: str, persona: str) -> Debate:
        """Create an ongoing debate with zero scores"""
        topic = (topic or "").strip()
        if not topic:
            raise ValidationError("Topic is required", field="topic")
        debate = Debate(id=new_id(), user_id=user_id, topic=topic, persona=persona)
        await update_records(self.store, Collection.DEBATES, Debate, lambda debates: debates + [debate])
        logger.info("Created debate %s for user %s", debate.id, user_id)
        return debate

    async def get_debate(self, debate_id: str) -> Debate:
        for debate in await load_records(self.store, Collection.DEBATES, Debate):
            if debate.id == debate_id:
                return debate
        raise NotFoundError("Debate", debate_id)

    async def add_message(
        self,
        debate_id: str,
        sender: Sender,
        content: str,
        score_impact: int = 0,
    ) -> DebateMessage:
        """Append a message to a debate's transcript"""
        message = DebateMessage(
            id=new_id(),
            debate_id=debate_id,
            sender=sender,
            content=content,
            score_impact=max(0, int(score_impact)),
        )
        await update_records(
            self.store, Collection.MESSAGES, DebateMessage, lambda messages: messages + [message]
        )
        return message

    async def list_messages(self, debate_id: str) -> list[DebateMessage]:
        """Messages of one debate in creation order"""
        messages = await load_records(self.store, Collection.MESSAGES, DebateMessage)
        return [m for m in messages if m.debate_id == debate_id]

    async def complete_debate(
        self,
        debate_id: str,
        user_score: int,
        ai_score: int,
        duration_seconds: int,
        feedback: str,
    ) -> Debate:
        """Mark a debate completed with its final scores

        This is the only mutation a debate ever receives.

        Raises:
            NotFoundError: If the debate does not exist
            InvalidTransitionError: If the debate is already completed
        """
        completed: Optional[Debate] = None

        def complete(debates: list[Debate]) -> list[Debate]:
            nonlocal completed
            for debate in debates:
                if debate.id == debate_id:
                    break
            else:
                raise NotFoundError("Debate", debate_id)

            if debate.status == "completed":
                raise InvalidTransitionError(f"Debate {debate_id} is already completed")

            debate.status = "completed"
            debate.user_score = max(0, int(user_score))
            debate.ai_score = max(0, int(ai_score))
            debate.duration_seconds = max(0, int(duration_seconds))
            debate.feedback = feedback
            debate.completed_at = utc_now()
            completed = debate
            return debates

        await update_records(self.store, Collection.DEBATES, Debate, complete)
        logger.info(
            "Completed debate %s (user %d, ai %d)", debate_id, completed.user_score, completed.ai_score
        )
        return completed

    async def list_by_user(self, user_id: str, limit: Optional[int] = None) -> list[Debate]:
        """Debates of one user, newest first"""
        debates = [
            d for d in await load_records(self.store, Collection.DEBATES, Debate)
            if d.user_id == user_id
        ]
        debates.sort(key=lambda d: d.created_at, reverse=True)
        return debates[:limit] if limit is not None else debates


class MediaRepository:
    """Saved topic analyses"""

    def __init__(self, store: Store):
        self.store = store

    async def add_analysis(self, user_id: str, topic: str, **fields) -> MediaAnalysis:
        topic = (topic or "").strip()
        if not topic:
            raise ValidationError("Topic is required", field="topic")
        analysis = MediaAnalysis(id=new_id(), user_id=user_id, topic=topic, **fields)
        await update_records(
            self.store, Collection.ANALYSES, MediaAnalysis, lambda analyses: [analysis] + analyses
        )
        return analysis

    async def list_by_user(self, user_id: str) -> list[MediaAnalysis]:
        """Analyses of one user, newest first"""
        analyses = await load_records(self.store, Collection.ANALYSES, MediaAnalysis)
        return [a for a in analyses if a.user_id == user_id]
