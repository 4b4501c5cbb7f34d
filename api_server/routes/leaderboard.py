"""Leaderboard and profile statistics"""

from fastapi import APIRouter, Depends, Query

from api_server.context import AppContext, get_context
from practice_core import NotFoundError, leaderboard, podium, summarize
from practice_core.config import LEADERBOARD_SIZE

router = APIRouter(tags=["leaderboard"])


@router.get("/leaderboard")
async def read_leaderboard(
    limit: int = Query(default=LEADERBOARD_SIZE, ge=1, le=LEADERBOARD_SIZE),
    context: AppContext = Depends(get_context),
):
    """Top debaters by total score, with the podium split out"""
    profiles = await context.identity.list_profiles()
    return {
        "podium": [s.to_dict() for s in podium(profiles)],
        "entries": [s.to_dict() for s in leaderboard(profiles, limit=limit)],
    }


@router.get("/profiles/{profile_id}/summary")
async def read_profile_summary(profile_id: str, context: AppContext = Depends(get_context)):
    profile = await context.identity.get_profile(profile_id)
    if profile is None:
        raise NotFoundError("Profile", profile_id)
    debates = await context.debates.list_by_user(profile_id)
    return summarize(profile, debates).to_dict()
