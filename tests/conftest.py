"""
Shared pytest fixtures for the debate practice test suite.

Stores run on an in-memory medium with no artificial latency, and the AI
partner is a scripted fake whose replies, failures and timing the tests
control.
"""

import asyncio
from typing import Optional

import pytest

from practice_core import (
    DebateRepository,
    DebateScore,
    DebateSession,
    IdentityManager,
    MemoryMedium,
    StoreUnavailableError,
    Store,
)
from practice_core.partner import DebatePartner


class FlakyMedium(MemoryMedium):
    """Memory medium whose writes fail for selected keys"""

    def __init__(self):
        super().__init__()
        self.fail_keys: set[str] = set()

    def set(self, key: str, value: str) -> None:
        if key in self.fail_keys:
            raise StoreUnavailableError(f"Cannot write '{key}'")
        super().set(key, value)


class FakePartner(DebatePartner):
    """Scripted AI partner"""

    def __init__(self, replies: Optional[list[str]] = None, score: Optional[DebateScore] = None):
        self.replies = list(replies or ["That claim ignores the economic evidence entirely."])
        self.score = score or DebateScore(
            user_score=80, ai_score=40, justification="Clear and well supported.", winner="user"
        )
        self.reply_error: Optional[Exception] = None
        self.score_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.scored_with = None
        self.calls = 0

    async def open_debate(self, persona, topic):
        return f"I am the {persona.name}. I will argue against: {topic}."

    async def reply_to_turn(self, handle, user_text):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.reply_error is not None:
            raise self.reply_error
        reply = self.replies[(self.calls - 1) % len(self.replies)]
        handle.commit(user_text, reply)
        return reply

    async def score_transcript(self, messages, topic, persona):
        self.scored_with = (list(messages), topic, persona)
        if self.score_error is not None:
            raise self.score_error
        return self.score


@pytest.fixture
def medium():
    return FlakyMedium()


@pytest.fixture
def store(medium):
    return Store(medium, latency=0)


@pytest.fixture
def identity(store):
    return IdentityManager(store)


@pytest.fixture
def debates(store):
    return DebateRepository(store)


@pytest.fixture
def partner():
    return FakePartner()


@pytest.fixture
async def account(identity):
    """A signed-up (and therefore signed-in) account"""
    account, _ = await identity.sign_up("ada@example.com", "s3cret-pass", "ada")
    return account


@pytest.fixture
async def session(identity, debates, partner):
    s = DebateSession(identity, debates, partner, tick_interval=3600)
    yield s
    s.close()


@pytest.fixture
def slow_store(medium):
    """Store over the same medium whose calls yield to the event loop"""
    return Store(medium, latency=0.005)
