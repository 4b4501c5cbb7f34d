"""Saved topic analyses of the signed-in user"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api_server.context import AppContext, get_context
from practice_core import AuthenticationRequiredError

router = APIRouter(prefix="/media", tags=["media"])


class GuestPersona(BaseModel):
    name: str
    expertise: str = ""
    stance: str = ""


class EngagementData(BaseModel):
    labels: list[str] = Field(default_factory=list)
    values: list[float] = Field(default_factory=list)


class AnalysisInput(BaseModel):
    topic: str = Field(..., max_length=200)
    summary: str = ""
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    sentiment_score: float = 0
    engagement_data: EngagementData = Field(default_factory=EngagementData)
    guest_personas: list[GuestPersona] = Field(default_factory=list)


async def _current_account_id(context: AppContext) -> str:
    account = await context.identity.get_session()
    if account is None:
        raise AuthenticationRequiredError()
    return account.id


@router.post("/analyses", status_code=201)
async def add_analysis(body: AnalysisInput, context: AppContext = Depends(get_context)):
    user_id = await _current_account_id(context)
    fields = body.model_dump()
    topic = fields.pop("topic")
    analysis = await context.media.add_analysis(user_id, topic, **fields)
    return analysis.to_dict()


@router.get("/analyses")
async def list_analyses(context: AppContext = Depends(get_context)):
    user_id = await _current_account_id(context)
    return [a.to_dict() for a in await context.media.list_by_user(user_id)]
