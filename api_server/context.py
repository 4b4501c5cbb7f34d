"""Shared services for the API: store, identity, repositories, live sessions"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from debate_partner import GroqClient, GroqDebatePartner, OfflineDebatePartner
from practice_core import (
    DebatePartner,
    DebateRepository,
    DebateSession,
    IdentityManager,
    MediaRepository,
    SessionManager,
    SqlMedium,
    Store,
)
from practice_core.config import (
    get_db_url,
    get_session_timeout_minutes,
    get_store_latency,
    use_offline_partner,
)

logger = logging.getLogger("api_server")

PartnerFactory = Callable[[Optional[str]], DebatePartner]


def default_partner_factory(api_key: Optional[str] = None) -> DebatePartner:
    """Groq partner with the given key, or the offline one when configured

    Raises:
        APIKeyError: If no Groq key is available
    """
    if use_offline_partner():
        return OfflineDebatePartner()
    return GroqDebatePartner(GroqClient(api_key=api_key))


@dataclass
class AppContext:
    store: Store
    identity: IdentityManager
    debates: DebateRepository
    media: MediaRepository
    sessions: SessionManager
    partner_factory: PartnerFactory


def build_context(
    store: Optional[Store] = None,
    partner_factory: Optional[PartnerFactory] = None,
    tick_interval: float = 1.0,
    session_timeout_minutes: Optional[int] = None,
) -> AppContext:
    """Wire the core services together"""
    if store is None:
        store = Store(SqlMedium(get_db_url()), latency=get_store_latency())
        logger.info("Using store at %s", get_db_url())
    identity = IdentityManager(store)
    debates = DebateRepository(store)

    def new_session(partner: DebatePartner) -> DebateSession:
        return DebateSession(identity, debates, partner, tick_interval=tick_interval)

    sessions = SessionManager(
        new_session,
        session_timeout_minutes=session_timeout_minutes or get_session_timeout_minutes(),
    )
    return AppContext(
        store=store,
        identity=identity,
        debates=debates,
        media=MediaRepository(store),
        sessions=sessions,
        partner_factory=partner_factory or default_partner_factory,
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency: the app's context, built on first use"""
    if getattr(request.app.state, "context", None) is None:
        request.app.state.context = build_context()
    return request.app.state.context
