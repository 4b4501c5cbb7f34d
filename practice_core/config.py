"""Default configuration for debate practice"""

import os

from .types import Persona

# Personas offered on the selection screen. The first one is the default.
DEFAULT_PERSONAS = [
    Persona(
        name="Neutral",
        description="Even-handed and measured. Weighs both sides before pushing back.",
    ),
    Persona(
        name="Aggressive",
        description="Attacks every weak point immediately and concedes nothing.",
    ),
    Persona(
        name="Diplomatic",
        description="Polite and conciliatory, but steers firmly toward the opposing view.",
    ),
    Persona(
        name="Skeptical",
        description="Doubts every claim and asks for evidence before accepting anything.",
    ),
    Persona(
        name="Enthusiastic",
        description="Energetic and upbeat, argues with conviction and vivid examples.",
    ),
    Persona(
        name="Pragmatic Scientist",
        description="Focuses on data, evidence, and logical reasoning. Avoids emotional arguments.",
        image_url="https://picsum.photos/seed/scientist/400",
    ),
    Persona(
        name="Passionate Activist",
        description="Appeals to emotion, ethics, and social impact. Uses strong, persuasive language.",
        image_url="https://picsum.photos/seed/activist/400",
    ),
    Persona(
        name="Skeptical Journalist",
        description="Questions everything, probes for weaknesses in arguments, and demands clarification.",
        image_url="https://picsum.photos/seed/journalist/400",
    ),
    Persona(
        name="Optimistic Technologist",
        description="Highlights the benefits of progress and innovation, often downplaying risks.",
        image_url="https://picsum.photos/seed/tech/400",
    ),
]

DEFAULT_PERSONA = DEFAULT_PERSONAS[0]

# Rank labels, ascending by the minimum total_score required
RANK_THRESHOLDS = [
    (500, "Grandmaster"),
    (300, "Expert"),
    (150, "Adept"),
    (75, "Apprentice"),
    (0, "Novice"),
]
DEFAULT_RANK = "Novice"

PODIUM_SIZE = 3
LEADERBOARD_SIZE = 50
PROFILE_HISTORY_SIZE = 10

# Per-turn heuristic bounds
TURN_SCORE_MIN = 5
TURN_SCORE_MAX = 19

WIN_FEEDBACK = (
    "Excellent debate! Your arguments were well-structured and persuasive. "
    "Keep developing your critical thinking skills."
)
LOSS_FEEDBACK = (
    "Good effort! The AI presented stronger counterarguments this time. "
    "Review the key points and try again."
)
APOLOGY_MESSAGE = "I seem to be having trouble formulating a response. Please try again."

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

# Store
STORE_KEY_PREFIX = "debate_practice"
DEFAULT_DB_URL = "sqlite:///./debate_practice.db"
DEFAULT_STORE_LATENCY_MS = 200

# LLM settings
LLM_MODEL = "llama-3.3-70b-versatile"
LLM_MAX_TOKENS_TURN = 300
LLM_MAX_TOKENS_JUDGE = 800

# Voice
DEFAULT_VOICEVOX_URL = "http://localhost:50021"
DEFAULT_VOICE_PLAYER = "afplay"


def get_db_url() -> str:
    """Database URL for the durable store medium"""
    return os.getenv("DEBATE_DB_URL", DEFAULT_DB_URL)


def get_store_latency() -> float:
    """Artificial store delay in seconds"""
    return int(os.getenv("STORE_LATENCY_MS", str(DEFAULT_STORE_LATENCY_MS))) / 1000


def get_session_timeout_minutes() -> int:
    return int(os.getenv("SESSION_TIMEOUT_MINUTES", "30"))


def use_offline_partner() -> bool:
    return os.getenv("OFFLINE_PARTNER", "").lower() in ("1", "true", "yes")


OPENING_LINE = (
    'I\'m ready to debate "{topic}" with you. As a {persona} opponent, '
    "I'll challenge your arguments. Please present your opening statement."
)
