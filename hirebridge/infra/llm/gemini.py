"""
HireBridge - Gemini LLM Adapter.

The text-completion oracle used for answer scoring and narrative evaluation.
The core only depends on the `TextOracle` protocol; this module provides the
Google Gemini implementation.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import google.generativeai as genai
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from hirebridge.core.config import Settings, get_settings
from hirebridge.core.exceptions import (
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    MissingAPIKeyError,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class TextOracle(Protocol):
    """Anything that turns a prompt into free text."""

    async def complete(self, prompt: str) -> str:
        ...


class GeminiOracle:
    """
    Gemini-powered text oracle.

    Configures the client lazily so that constructing the oracle never
    touches the network or requires credentials.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._api_key = api_key or self._settings.GEMINI_API_KEY
        self._model_name = model_name or self._settings.GEMINI_MODEL
        self._model = None
        self._configured = False

    def _configure(self) -> None:
        """Configure the Gemini API client (lazy initialization)."""
        if self._configured:
            return

        if not self._api_key:
            raise MissingAPIKeyError("GEMINI_API_KEY")

        genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(self._model_name)
        self._configured = True
        logger.info(f"✅ Gemini API configured ({self._model_name})")

    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the stripped response text."""
        self._configure()
        return await self._generate(prompt, temperature=self._settings.ORACLE_TEMPERATURE)

    @retry(
        retry=retry_if_exception_type(LLMRateLimitError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _generate(self, prompt: str, temperature: float = 0.7) -> str:
        """Internal method to call Gemini API."""
        timeout = self._settings.ORACLE_TIMEOUT_SECONDS
        try:
            generation_config = genai.GenerationConfig(
                temperature=temperature,
                max_output_tokens=1024,
            )

            response = await self._model.generate_content_async(
                prompt,
                generation_config=generation_config,
                request_options={"timeout": timeout},
            )

            if not response.text:
                raise LLMResponseError("Empty response from Gemini")

            return response.text.strip()

        except LLMResponseError:
            raise
        except genai.types.BlockedPromptException as e:
            logger.warning(f"Prompt blocked: {e}")
            raise LLMResponseError("Content was blocked by safety filters")
        except TimeoutError:
            raise LLMTimeoutError("Gemini", timeout)
        except Exception as e:
            error_str = str(e).lower()
            if "429" in error_str or "rate" in error_str:
                raise LLMRateLimitError("Gemini", retry_after=60)
            if "deadline" in error_str or "timeout" in error_str:
                raise LLMTimeoutError("Gemini", timeout)
            if "connection" in error_str or "network" in error_str:
                raise LLMConnectionError("Gemini", str(e))
            logger.error(f"Gemini error: {e}")
            raise LLMResponseError(str(e))


def create_oracle(settings: Settings | None = None) -> TextOracle | None:
    """
    Build the configured oracle, or None when it is disabled.

    Without an oracle the interview runs entirely on local fallbacks.
    """
    settings = settings or get_settings()

    if not settings.oracle_configured:
        if settings.ORACLE_ENABLED:
            logger.warning("⚠️ GEMINI_API_KEY not set; using local fallbacks")
        else:
            logger.info("Oracle disabled by configuration; using local fallbacks")
        return None

    return GeminiOracle(settings=settings)
