"""Health check endpoint"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from api_server.context import AppContext, get_context

router = APIRouter()

VERSION = "1.0.0"


@router.get("/health")
async def health_check(context: AppContext = Depends(get_context)):
    """Health check endpoint

    Returns:
        Health status with timestamp, version and live session count
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
        "active_sessions": context.sessions.active_session_count,
    }
