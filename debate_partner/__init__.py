"""AI debate partner: opponent replies and transcript judging"""

from .exceptions import ProviderError, RateLimitError, APIKeyError, MalformedResponseError
from practice_core.partner import ChatHandle, DebatePartner
from .groq_client import GroqClient
from .groq_partner import GroqDebatePartner
from .offline import OfflineDebatePartner

__all__ = [
    "ProviderError",
    "RateLimitError",
    "APIKeyError",
    "MalformedResponseError",
    "ChatHandle",
    "DebatePartner",
    "GroqClient",
    "GroqDebatePartner",
    "OfflineDebatePartner",
]
