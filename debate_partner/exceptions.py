"""Exceptions for the AI debate partner"""


class ProviderError(Exception):
    """Base exception for AI provider failures"""
    pass


class RateLimitError(ProviderError):
    """Raised when API rate limit is exceeded"""

    def __init__(self, message: str = "API rate limit exceeded", retry_after: int = 60):
        super().__init__(message)
        self.retry_after = retry_after


class APIKeyError(ProviderError):
    """Raised when API key is missing or invalid"""

    def __init__(self, message: str = "API key is missing or invalid"):
        super().__init__(message)


class MalformedResponseError(ProviderError):
    """Raised when the provider's answer cannot be understood"""

    def __init__(self, message: str = "Malformed provider response"):
        super().__init__(message)
