"""Debate session endpoints"""

from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from pydantic import BaseModel, Field

from api_server.context import AppContext, get_context
from api_server.middleware.rate_limit import get_judge_rate_limit_string, get_rate_limit_string, limiter
from practice_core import DEFAULT_PERSONAS, DebateSession

router = APIRouter(prefix="/debate", tags=["debate"])


class StartRequest(BaseModel):
    """Request to start a debate"""
    topic: str = Field(..., max_length=200)
    persona: Optional[str] = Field(default=None, max_length=60)


class InputRequest(BaseModel):
    """Pending input, e.g. a voice transcript"""
    text: str = Field(..., max_length=2000)


class TurnRequest(BaseModel):
    """A user turn. Without a message the pending input is submitted."""
    message: Optional[str] = Field(default=None, max_length=2000)


def get_debate_session(session_id: str, context: AppContext) -> DebateSession:
    session = context.sessions.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session


@router.get("/personas")
async def list_personas():
    return [persona.to_dict() for persona in DEFAULT_PERSONAS]


@router.post("/sessions", status_code=201)
async def create_session(
    context: AppContext = Depends(get_context),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    """Create a practice session in the persona/topic selection state

    The AI partner is bound to the session here. The API key can be provided
    via X-API-Key header or GROQ_API_KEY env var.
    """
    partner = context.partner_factory(x_api_key)
    session = context.sessions.create_session(partner=partner)
    return session.snapshot()


@router.get("/sessions/{session_id}")
async def read_session(session_id: str, context: AppContext = Depends(get_context)):
    return get_debate_session(session_id, context).snapshot()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, context: AppContext = Depends(get_context)):
    if not context.sessions.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/start")
@limiter.limit(get_rate_limit_string())
async def start_debate(
    request: Request,
    session_id: str,
    body: StartRequest,
    context: AppContext = Depends(get_context),
):
    """Start the debate on a topic against the chosen persona"""
    session = get_debate_session(session_id, context)
    await session.start(topic=body.topic, persona=body.persona)
    return session.snapshot()


@router.post("/sessions/{session_id}/input")
async def set_input(session_id: str, body: InputRequest, context: AppContext = Depends(get_context)):
    session = get_debate_session(session_id, context)
    session.set_input(body.text)
    return session.snapshot()


@router.post("/sessions/{session_id}/turn")
@limiter.limit(get_rate_limit_string())
async def submit_turn(
    request: Request,
    session_id: str,
    body: TurnRequest,
    context: AppContext = Depends(get_context),
):
    """Submit one argument and return the opponent's reply

    Returns 409 while the previous reply is still pending.
    """
    session = get_debate_session(session_id, context)
    outcome = await session.submit_turn(body.message)
    return {"outcome": outcome.to_dict(), "session": session.snapshot()}


@router.post("/sessions/{session_id}/end")
@limiter.limit(get_judge_rate_limit_string())
async def end_debate(
    request: Request,
    session_id: str,
    context: AppContext = Depends(get_context),
):
    """Have the debate judged and record the result

    ``result`` is null when judging failed and the debate continues. A 503
    means the result was judged but not stored; call again to retry.
    """
    session = get_debate_session(session_id, context)
    result = await session.end()
    return {
        "result": result.to_dict() if result else None,
        "session": session.snapshot(),
    }


@router.post("/sessions/{session_id}/restart")
async def restart(session_id: str, context: AppContext = Depends(get_context)):
    session = get_debate_session(session_id, context)
    session.restart()
    return session.snapshot()


@router.post("/sessions/{session_id}/leaderboard")
async def view_leaderboard(session_id: str, context: AppContext = Depends(get_context)):
    session = get_debate_session(session_id, context)
    standings = await session.view_leaderboard()
    return {
        "standings": [s.to_dict() for s in standings],
        "session": session.snapshot(),
    }


@router.post("/sessions/{session_id}/back")
async def back_to_selection(session_id: str, context: AppContext = Depends(get_context)):
    session = get_debate_session(session_id, context)
    session.back_to_selection()
    return session.snapshot()
