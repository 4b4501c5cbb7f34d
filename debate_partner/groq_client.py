"""Async Groq API client"""

import logging
import os
from typing import Optional

from .exceptions import APIKeyError, ProviderError, RateLimitError

logger = logging.getLogger(__name__)


class GroqClient:
    """Client for Groq chat completions"""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0):
        """Initialize the Groq client

        Args:
            api_key: Groq API key. If not provided, reads from GROQ_API_KEY env var.
            timeout: Request timeout in seconds

        Raises:
            APIKeyError: If no API key is provided or found in environment
        """
        self.api_key = api_key or os.getenv("GROQ_API_KEY")
        if not self.api_key:
            raise APIKeyError(
                "GROQ_API_KEY not found. Set it as an environment variable or pass it to the constructor."
            )
        self.timeout = timeout
        self._client = None

    def _get_client(self):
        """Lazy initialization of the async Groq client"""
        if self._client is None:
            from groq import AsyncGroq
            self._client = AsyncGroq(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    async def chat(
        self,
        messages: list[dict],
        max_tokens: int = 300,
        model: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        """Run one chat completion. Failures are not retried.

        Args:
            messages: Chat messages (system/user/assistant)
            max_tokens: Maximum tokens in response
            model: Model to use (defaults to DEFAULT_MODEL)
            json_mode: Ask the model for a JSON object

        Returns:
            Response text

        Raises:
            RateLimitError: If rate limited
            APIKeyError: If the key is rejected
            ProviderError: For other API errors
        """
        import groq

        client = self._get_client()
        kwargs = {
            "model": model or self.DEFAULT_MODEL,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**kwargs)
        except groq.RateLimitError as e:
            retry_after = e.response.headers.get("retry-after", "60")
            raise RateLimitError(
                "API rate limit exceeded",
                retry_after=int(retry_after) if retry_after.isdigit() else 60,
            ) from e
        except groq.AuthenticationError as e:
            raise APIKeyError("Invalid API key") from e
        except groq.APIError as e:
            logger.warning("Groq API error: %s", e)
            raise ProviderError(f"Groq API error: {e}") from e

        content = response.choices[0].message.content
        if not content:
            raise ProviderError("Empty response from Groq")
        return content.strip()
