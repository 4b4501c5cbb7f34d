"""Data classes for debate practice"""

from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Literal
import uuid


Sender = Literal["user", "ai"]
Winner = Literal["user", "ai", "draw"]
DebateStatus = Literal["ongoing", "completed"]


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current time as an ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


class Record:
    """Mixin for records kept in a store collection"""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict):
        """Build a record from a stored dict, ignoring unknown keys

        Raises:
            TypeError: If a required field is missing
        """
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class AccountRecord(Record):
    """Stored account, including the credential hash"""
    id: str
    email: str
    secret_hash: str
    created_at: str = field(default_factory=utc_now)

    def public(self) -> "Account":
        return Account(id=self.id, email=self.email, created_at=self.created_at)


@dataclass
class Account(Record):
    """Account as seen outside the identity manager"""
    id: str
    email: str
    created_at: str


@dataclass
class Profile(Record):
    """Public debater profile, one per account"""
    id: str
    username: str
    avatar_url: str = ""
    total_debates: int = 0
    wins: int = 0
    total_score: int = 0
    rank: str = "Novice"
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)


@dataclass
class Debate(Record):
    """One practice debate"""
    id: str
    user_id: str
    topic: str
    persona: str
    status: DebateStatus = "ongoing"
    user_score: int = 0
    ai_score: int = 0
    duration_seconds: int = 0
    feedback: str = ""
    created_at: str = field(default_factory=utc_now)
    completed_at: Optional[str] = None


@dataclass
class DebateMessage(Record):
    """A single message inside a debate"""
    id: str
    debate_id: str
    sender: Sender
    content: str
    score_impact: int = 0
    timestamp: str = field(default_factory=utc_now)


@dataclass
class MediaAnalysis(Record):
    """A saved topic analysis"""
    id: str
    user_id: str
    topic: str
    summary: str = ""
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    sentiment_score: float = 0
    engagement_data: dict = field(default_factory=lambda: {"labels": [], "values": []})
    guest_personas: list[dict] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)


@dataclass
class Persona:
    """AI debating style the partner impersonates"""
    name: str
    description: str = ""
    image_url: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
        }


@dataclass
class DebateScore:
    """Verdict from the transcript judge"""
    user_score: int
    ai_score: int
    justification: str
    winner: Winner

    def to_dict(self) -> dict:
        return {
            "user_score": self.user_score,
            "ai_score": self.ai_score,
            "justification": self.justification,
            "winner": self.winner,
        }


class SessionState(str, Enum):
    """States of a practice session"""
    SELECTING = "selecting"
    DEBATING = "debating"
    SCORING = "scoring"
    RESULTS = "results"
    LEADERBOARD = "leaderboard"


@dataclass
class TurnOutcome:
    """Messages produced by one submitted turn"""
    user_message: DebateMessage
    ai_message: Optional[DebateMessage] = None
    provider_failed: bool = False
    dropped: bool = False

    def to_dict(self) -> dict:
        return {
            "user_message": self.user_message.to_dict(),
            "ai_message": self.ai_message.to_dict() if self.ai_message else None,
            "provider_failed": self.provider_failed,
            "dropped": self.dropped,
        }
