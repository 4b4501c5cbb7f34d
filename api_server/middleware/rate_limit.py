"""Rate limiting for endpoints that call the AI partner

Turn and start requests share one per-minute limit. Ending a debate runs the
transcript judge, the most expensive call, and has its own tighter limit.
"""

import os
from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

DEFAULT_PER_MINUTE = 30
DEFAULT_JUDGE_PER_MINUTE = 10


def get_client_ip(request: Request) -> str:
    """Get client IP address, handling proxies"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(key_func=get_client_ip)


def setup_rate_limit(app: FastAPI) -> None:
    """Attach the limiter and its 429 handler to the app"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _per_minute(env_var: str, default: int) -> str:
    value = os.getenv(env_var, "").strip()
    per_minute = int(value) if value.isdigit() and int(value) > 0 else default
    return f"{per_minute}/minute"


def get_rate_limit_string() -> str:
    """Limit for opening lines and turns, from RATE_LIMIT_PER_MINUTE"""
    return _per_minute("RATE_LIMIT_PER_MINUTE", DEFAULT_PER_MINUTE)


def get_judge_rate_limit_string() -> str:
    """Limit for judged debate endings, from RATE_LIMIT_JUDGE_PER_MINUTE"""
    return _per_minute("RATE_LIMIT_JUDGE_PER_MINUTE", DEFAULT_JUDGE_PER_MINUTE)
