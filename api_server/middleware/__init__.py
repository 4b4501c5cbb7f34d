"""Middleware: CORS, rate limiting and request logging"""

from .cors import setup_cors
from .rate_limit import setup_rate_limit, limiter
from .logging import setup_logging, LoggingMiddleware

__all__ = [
    "setup_cors",
    "setup_rate_limit",
    "limiter",
    "setup_logging",
    "LoggingMiddleware",
]
