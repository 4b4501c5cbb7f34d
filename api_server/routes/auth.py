"""Account endpoints: sign-up, sign-in, sign-out, current session, profile edits"""

from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api_server.context import AppContext, get_context
from practice_core import AuthenticationRequiredError

router = APIRouter(prefix="/auth", tags=["auth"])


class SignUpRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)
    username: str = Field(..., max_length=40)


class SignInRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class ProfileUpdate(BaseModel):
    """Fields a user may edit on their own profile"""
    username: Optional[str] = Field(default=None, min_length=1, max_length=40)
    avatar_url: Optional[str] = Field(default=None, max_length=500)


@router.post("/signup", status_code=201)
async def sign_up(body: SignUpRequest, context: AppContext = Depends(get_context)):
    account, profile = await context.identity.sign_up(body.email, body.password, body.username)
    return {"user": account.to_dict(), "profile": profile.to_dict()}


@router.post("/signin")
async def sign_in(body: SignInRequest, context: AppContext = Depends(get_context)):
    account = await context.identity.sign_in(body.email, body.password)
    profile = await context.identity.get_profile(account.id)
    return {"user": account.to_dict(), "profile": profile.to_dict() if profile else None}


@router.post("/signout")
async def sign_out(context: AppContext = Depends(get_context)):
    await context.identity.sign_out()
    return {"message": "Signed out"}


@router.get("/session")
async def read_session(context: AppContext = Depends(get_context)):
    """Current account and profile, both null when signed out"""
    account = await context.identity.get_session()
    if account is None:
        return {"user": None, "profile": None}
    profile = await context.identity.get_profile(account.id)
    return {"user": account.to_dict(), "profile": profile.to_dict() if profile else None}


@router.patch("/profile")
async def update_profile(body: ProfileUpdate, context: AppContext = Depends(get_context)):
    account = await context.identity.get_session()
    if account is None:
        raise AuthenticationRequiredError()
    updates = body.model_dump(exclude_none=True)
    profile = await context.identity.update_profile(account.id, updates)
    return profile.to_dict()
