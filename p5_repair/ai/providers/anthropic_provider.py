"""
Anthropic Provider - Claude as an alternative suggestion backend.

Selected with ``SUGGESTION_PROVIDER=anthropic``. Same contract as the
OpenAI-compatible provider: one system prompt, one user turn, never raises.
"""

import time
import logging
from typing import Optional

from anthropic import AsyncAnthropic

from p5_repair.core.config import settings
from p5_repair.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("p5_repair.ai.anthropic")


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider implementation."""

    provider_type = ProviderType.ANTHROPIC

    def __init__(self, model: str = None, api_key: str = None, timeout: float = None):
        """
        Initialize the Anthropic provider.

        Args:
            model: Model name (default: settings.ANTHROPIC_MODEL)
            api_key: API key (default: settings.ANTHROPIC_API_KEY)
            timeout: Per-request timeout in seconds
        """
        self.model = model or settings.ANTHROPIC_MODEL
        self.api_key = api_key or settings.ANTHROPIC_API_KEY

        if self.api_key:
            self._client = AsyncAnthropic(
                api_key=self.api_key,
                timeout=timeout or settings.AI_REQUEST_TIMEOUT,
                max_retries=0,
            )
            logger.info(f"Anthropic provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Anthropic API key not configured - provider unavailable")

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
        """Generate a response using Claude."""
        start_time = time.time()

        if not self._client:
            return self._create_error_response(
                error="Anthropic API key not configured",
                model=self.model,
                latency_ms=self._measure_latency(start_time)
            )

        try:
            request_params = {
                "model": self.model,
                "max_tokens": max_tokens,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": temperature,
            }
            if system_prompt:
                request_params["system"] = system_prompt

            response = await self._client.messages.create(**request_params)
            latency_ms = self._measure_latency(start_time)

            # Claude returns a list of content blocks
            content = ""
            for block in response.content or []:
                if hasattr(block, "text"):
                    content += block.text

            usage = TokenUsage(
                prompt_tokens=response.usage.input_tokens if response.usage else 0,
                completion_tokens=response.usage.output_tokens if response.usage else 0,
            )

            logger.info(f"Anthropic request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

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
            logger.error(f"Anthropic generation failed: {e}")
            return self._create_error_response(
                error=str(e),
                model=self.model,
                latency_ms=latency_ms
            )
