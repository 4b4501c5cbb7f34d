"""Tests for the debate and media repositories."""

import json

import pytest

from practice_core import (
    CorruptDataError,
    InvalidTransitionError,
    MediaRepository,
    NotFoundError,
    ValidationError,
)


class TestDebateRepository:
    """Tests for DebateRepository."""

    async def test_create_debate_defaults(self, debates):
        debate = await debates.create_debate("u1", "  Remote work  ", "Neutral")

        assert debate.topic == "Remote work"
        assert debate.status == "ongoing"
        assert (debate.user_score, debate.ai_score, debate.duration_seconds) == (0, 0, 0)
        assert debate.completed_at is None
        assert await debates.get_debate(debate.id) == debate

    async def test_empty_topic_rejected(self, debates):
        with pytest.raises(ValidationError):
            await debates.create_debate("u1", "", "Neutral")

    async def test_get_unknown_debate(self, debates):
        with pytest.raises(NotFoundError):
            await debates.get_debate("missing")

    async def test_messages_in_creation_order(self, debates):
        debate = await debates.create_debate("u1", "X", "Neutral")
        other = await debates.create_debate("u1", "Y", "Neutral")
        await debates.add_message(debate.id, "ai", "opening")
        await debates.add_message(other.id, "ai", "elsewhere")
        await debates.add_message(debate.id, "user", "reply", 7)

        messages = await debates.list_messages(debate.id)

        assert [m.content for m in messages] == ["opening", "reply"]
        assert messages[1].score_impact == 7

    async def test_negative_impact_clamped(self, debates):
        message = await debates.add_message("d1", "user", "text", -3)
        assert message.score_impact == 0

    async def test_complete_once(self, debates):
        debate = await debates.create_debate("u1", "X", "Neutral")

        completed = await debates.complete_debate(debate.id, 70, 30, 95, "Well done")

        assert completed.status == "completed"
        assert (completed.user_score, completed.ai_score, completed.duration_seconds) == (70, 30, 95)
        assert completed.completed_at is not None
        with pytest.raises(InvalidTransitionError):
            await debates.complete_debate(debate.id, 10, 90, 5, "again")
        assert (await debates.get_debate(debate.id)).user_score == 70

    async def test_complete_unknown_debate(self, debates):
        with pytest.raises(NotFoundError):
            await debates.complete_debate("missing", 1, 1, 1, "")

    async def test_list_by_user(self, debates):
        for topic in ["A", "B", "C"]:
            await debates.create_debate("u1", topic, "Neutral")
        await debates.create_debate("u2", "D", "Neutral")

        mine = await debates.list_by_user("u1")

        assert sorted(d.topic for d in mine) == ["A", "B", "C"]
        created = [d.created_at for d in mine]
        assert created == sorted(created, reverse=True)
        assert len(await debates.list_by_user("u1", limit=2)) == 2

    async def test_record_missing_fields_is_corrupt(self, debates, medium):
        medium.set("debate_practice.debates", json.dumps([{"id": "d1"}]))
        with pytest.raises(CorruptDataError):
            await debates.list_by_user("u1")


class TestMediaRepository:
    """Tests for MediaRepository."""

    async def test_newest_first_per_user(self, store):
        media = MediaRepository(store)
        await media.add_analysis("u1", "First", summary="s")
        await media.add_analysis("u2", "Other")
        await media.add_analysis("u1", "Second", pros=["a"], sentiment_score=0.5)

        analyses = await media.list_by_user("u1")

        assert [a.topic for a in analyses] == ["Second", "First"]
        assert analyses[0].pros == ["a"]

    async def test_topic_required(self, store):
        with pytest.raises(ValidationError):
            await MediaRepository(store).add_analysis("u1", " ")
