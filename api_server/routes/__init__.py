"""API routes"""

from .health import router as health_router
from .auth import router as auth_router
from .debate import router as debate_router
from .leaderboard import router as leaderboard_router
from .media import router as media_router

__all__ = ["health_router", "auth_router", "debate_router", "leaderboard_router", "media_router"]
