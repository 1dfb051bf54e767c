"""
OpenAI-compatible Provider - chat-completions client for the suggestion oracle.

The default deployment talks to DeepSeek's OpenAI-compatible endpoint
(``deepseek-chat``), but any server speaking the chat-completions
protocol works: only ``base_url``, ``model`` and the bearer key change.

Role in p5-repair:
=================
Every LLM-assisted pass (parentheses, undefined variables, not-a-function,
CSS, CDN tags, shader blocks) sends one system turn plus one user turn
and expects a short JSON or code answer back.
"""

import time
import logging
from typing import Optional

from openai import AsyncOpenAI

from p5_repair.core.config import settings
from p5_repair.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("p5_repair.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI-compatible provider implementation.

    Usage:
        provider = OpenAIProvider()
        response = await provider.generate(
            prompt="Fix the parentheses on line 12...",
            system_prompt="You are an expert JavaScript developer...",
            max_tokens=1024,
        )
    """

    provider_type = ProviderType.OPENAI

    def __init__(
        self,
        model: str = None,
        api_key: str = None,
        base_url: str = None,
        timeout: float = None,
    ):
        """
        Initialize the provider.

        Args:
            model: Model name (default: settings.SUGGESTION_MODEL)
            api_key: Bearer key (default: settings.SUGGESTION_API_KEY)
            base_url: Endpoint root (default: settings.SUGGESTION_BASE_URL)
            timeout: Per-request timeout in seconds
        """
        self.model = model or settings.SUGGESTION_MODEL
        self.api_key = api_key or settings.SUGGESTION_API_KEY
        self.base_url = base_url or settings.SUGGESTION_BASE_URL
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT

        if self.api_key:
            # No retries: a failed round trip falls through to the heuristics
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
            logger.info(f"Suggestion provider initialized: {self.model} @ {self.base_url}")
        else:
            self._client = None
            logger.warning("Suggestion API key not configured - oracle unavailable")

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        """
        Generate a chat completion.

        Args:
            prompt: The user turn
            system_prompt: Optional system instructions
            temperature: Sampling temperature
            max_tokens: Maximum response length

        Returns:
            AIResponse with the generated content
        """
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="Suggestion API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": prompt})

            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )

            latency_ms = self._measure_latency(start_time)

            if not response.choices:
                return self._create_error_response(
                    error="Response contained no choices",
                    model=self.model,
                    latency_ms=latency_ms,
                )

            content = response.choices[0].message.content or ""
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
                completion_tokens=response.usage.completion_tokens if response.usage else 0,
            )

            logger.info(f"Suggestion request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

            return AIResponse(
                content=content,
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            logger.error(f"Suggestion request failed: {e}")
            return self._create_error_response(
                error=str(e),
                model=self.model,
                latency_ms=latency_ms
            )
