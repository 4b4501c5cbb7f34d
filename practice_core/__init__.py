"""Practice Core - session lifecycle and persistence for debate practice"""

from .types import (
    Account,
    Profile,
    Debate,
    DebateMessage,
    MediaAnalysis,
    Persona,
    DebateScore,
    SessionState,
    TurnOutcome,
)
from .config import DEFAULT_PERSONAS, DEFAULT_PERSONA
from .exceptions import (
    PracticeError,
    ValidationError,
    DuplicateAccountError,
    InvalidCredentialError,
    AuthenticationRequiredError,
    NotFoundError,
    InvalidTransitionError,
    TurnInFlightError,
    PersistenceError,
    CorruptDataError,
    StoreUnavailableError,
)
from .store import Collection, Medium, MemoryMedium, SqlMedium, Store
from .repository import DebateRepository, MediaRepository
from .identity import CredentialHasher, IdentityManager
from .ranking import Standing, ProfileSummary, rank_label, rank, podium, leaderboard, summarize
from .scoring import TurnScorer, HeuristicTurnScorer
from .events import EventEmitter, SessionEvent
from .partner import ChatHandle, DebatePartner
from .voice import Speaker, Transcriber, VoicevoxSpeaker, VoiceRelay
from .session import CancellationToken, DebateSession, SessionManager, find_persona

__all__ = [
    "Account",
    "Profile",
    "Debate",
    "DebateMessage",
    "MediaAnalysis",
    "Persona",
    "DebateScore",
    "SessionState",
    "TurnOutcome",
    "DEFAULT_PERSONAS",
    "DEFAULT_PERSONA",
    "PracticeError",
    "ValidationError",
    "DuplicateAccountError",
    "InvalidCredentialError",
    "AuthenticationRequiredError",
    "NotFoundError",
    "InvalidTransitionError",
    "TurnInFlightError",
    "PersistenceError",
    "CorruptDataError",
    "StoreUnavailableError",
    "Collection",
    "Medium",
    "MemoryMedium",
    "SqlMedium",
    "Store",
    "DebateRepository",
    "MediaRepository",
    "CredentialHasher",
    "IdentityManager",
    "Standing",
    "ProfileSummary",
    "rank_label",
    "rank",
    "podium",
    "leaderboard",
    "summarize",
    "TurnScorer",
    "HeuristicTurnScorer",
    "EventEmitter",
    "SessionEvent",
    "ChatHandle",
    "DebatePartner",
    "Speaker",
    "Transcriber",
    "VoicevoxSpeaker",
    "VoiceRelay",
    "CancellationToken",
    "DebateSession",
    "SessionManager",
    "find_persona",
]
