"""Map core and provider exceptions to HTTP responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from debate_partner import APIKeyError, ProviderError, RateLimitError
from practice_core import (
    AuthenticationRequiredError,
    DuplicateAccountError,
    InvalidCredentialError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    PracticeError,
    TurnInFlightError,
    ValidationError,
)

logger = logging.getLogger("api_server")

STATUS_CODES = [
    (ValidationError, 400),
    (InvalidCredentialError, 401),
    (AuthenticationRequiredError, 401),
    (NotFoundError, 404),
    (DuplicateAccountError, 409),
    (InvalidTransitionError, 409),
    (TurnInFlightError, 409),
    (PersistenceError, 503),
]


def status_for(exc: PracticeError) -> int:
    for cls, status in STATUS_CODES:
        if isinstance(exc, cls):
            return status
    return 500


async def practice_error_handler(request: Request, exc: PracticeError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("Request failed: %s", exc)
    body = {"detail": str(exc)}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if isinstance(exc, PersistenceError):
        body["retryable"] = True
    return JSONResponse(status_code=status, content=body)


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    if isinstance(exc, RateLimitError):
        return JSONResponse(
            status_code=429,
            content={"detail": f"Rate limit exceeded. Retry after {exc.retry_after} seconds."},
            headers={"Retry-After": str(exc.retry_after)},
        )
    if isinstance(exc, APIKeyError):
        return JSONResponse(
            status_code=401,
            content={"detail": "A Groq API key is required. Send it in the X-API-Key header."},
        )
    logger.warning("Provider error: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def setup_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PracticeError, practice_error_handler)
    app.add_exception_handler(ProviderError, provider_error_handler)
