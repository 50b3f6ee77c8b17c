"""
Google Gemini API client wrapper with timeout handling and structured logging.

Uses the google-genai SDK (``from google import genai``). One instance is
created at application startup and shared by every service that needs text
generation. Each call makes exactly one attempt; retry policy belongs to the
caller (see ``services.itinerary_service.RetryingItineraryService``).

Usage:
    from clients.gemini_client import GeminiClient

    client = GeminiClient()
    text = await client.generate_content(
        prompt="Generate a detailed trip plan from ...",
        request_id="req-123",
    )
"""

import asyncio
import logging
from typing import Optional

from google import genai
from google.genai import types

from utils.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Async wrapper for Google Gemini API with timeout and logging."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialise Gemini client.

        A missing key does not fail here: the client is still constructed so
        the application can start, and every call raises ConfigurationError
        before touching the network.

        Args:
            api_key: Gemini API key (defaults to settings.GEMINI_KEY).
            model_name: Model identifier (defaults to settings.GEMINI_MODEL).
            timeout: Request timeout in seconds.
        """
        # Lazy import to avoid circular dependency at module level
        from config.settings import settings

        self.api_key = api_key if api_key is not None else settings.GEMINI_KEY
        self.model_name = model_name or settings.GEMINI_MODEL
        self.timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT

        self.client = genai.Client(api_key=self.api_key) if self.api_key else None

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def generate_content(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> str:
        """
        Generate text content via Gemini API.

        Args:
            prompt: The user prompt text.
            system_instruction: Optional system-level instruction.
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum output tokens.
            request_id: ID for log correlation.

        Returns:
            Generated text string (never empty).

        Raises:
            ConfigurationError: No API key configured.
            UpstreamError: The call raised, timed out, or returned no text.
        """
        from config.settings import settings

        if not self.is_configured:
            raise ConfigurationError(
                "Gemini API key required; set GEMINI_KEY in .env"
            )

        temp = temperature if temperature is not None else settings.GEMINI_TEMPERATURE
        tokens = max_tokens or settings.GEMINI_MAX_TOKENS

        generation_config = types.GenerateContentConfig(
            temperature=temp,
            max_output_tokens=tokens,
        )

        if system_instruction:
            generation_config.system_instruction = system_instruction

        logger.debug(
            "Calling Gemini API",
            extra={
                "request_id": request_id,
                "model": self.model_name,
                "prompt_length": len(prompt),
                "temperature": temp,
                "timeout": self.timeout,
            },
        )

        try:
            loop = asyncio.get_running_loop()
            # Use asyncio timeout to prevent hanging
            response = await asyncio.wait_for(
                loop.run_in_executor(
                    None,
                    lambda: self.client.models.generate_content(
                        model=self.model_name,
                        contents=prompt,
                        config=generation_config,
                    ),
                ),
                timeout=self.timeout,
            )
            result_text = response.text or ""
        except asyncio.TimeoutError:
            logger.warning(
                "Gemini API timeout",
                extra={"request_id": request_id, "timeout": self.timeout},
            )
            raise UpstreamError(
                service="Gemini",
                error=f"timeout after {self.timeout}s",
            )
        except Exception as exc:
            logger.warning(
                "Gemini API error",
                extra={
                    "request_id": request_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise UpstreamError(service="Gemini", error=str(exc)) from exc

        if not result_text.strip():
            raise UpstreamError(service="Gemini", error="empty response")

        logger.info(
            "Gemini API success",
            extra={
                "request_id": request_id,
                "response_length": len(result_text),
                "model": self.model_name,
            },
        )
        return result_text
