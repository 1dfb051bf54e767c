"""
Suggestion oracle - the narrow interface between repair passes and an LLM.

Passes only ever call ``suggest(system_prompt, user_prompt, max_tokens)``
and get text back. Any failure (no credential, provider error, empty
answer) surfaces as ``SuggestionUnavailable`` so the pass can fall back
to its mechanical patcher. Calls are attempted exactly once.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from p5_repair.ai.providers import AIProvider, create_provider
from p5_repair.core.config import settings

logger = logging.getLogger("p5_repair.repair.suggestion")


class SuggestionUnavailable(Exception):
    """The oracle could not produce an answer. Always recoverable."""


class SuggestionOracle(ABC):
    """Abstract suggestion oracle."""

    @abstractmethod
    async def suggest(self, system_prompt: str, user_prompt: str, max_tokens: int = 1024) -> str:
        """
        Ask for a suggestion.

        Args:
            system_prompt: System turn
            user_prompt: User turn
            max_tokens: Maximum response size

        Returns:
            Free-form response text

        Raises:
            SuggestionUnavailable: on any failure
        """
        pass


class ProviderSuggestionOracle(SuggestionOracle):
    """
    Oracle backed by an AIProvider.

    Usage:
        oracle = ProviderSuggestionOracle()  # provider from settings
        try:
            text = await oracle.suggest(system, prompt, max_tokens=1024)
        except SuggestionUnavailable:
            ...  # fall back
    """

    def __init__(self, provider: Optional[AIProvider] = None, temperature: Optional[float] = None):
        """
        Args:
            provider: Provider to call (default: create_provider())
            temperature: Sampling temperature (default: settings.SUGGESTION_TEMPERATURE)
        """
        self._provider = provider
        self.temperature = settings.SUGGESTION_TEMPERATURE if temperature is None else temperature

    @property
    def provider(self) -> AIProvider:
        if self._provider is None:
            self._provider = create_provider()
        return self._provider

    async def suggest(self, system_prompt: str, user_prompt: str, max_tokens: int = 1024) -> str:
        try:
            provider = self.provider
        except Exception as e:
            logger.error(f"Could not create suggestion provider: {e}")
            raise SuggestionUnavailable(f"Suggestion provider unavailable: {e}") from e

        if not provider.is_configured:
            raise SuggestionUnavailable("Suggestion provider has no credential configured")

        response = await provider.generate(
            prompt=user_prompt,
            system_prompt=system_prompt,
            temperature=self.temperature,
            max_tokens=max_tokens,
        )

        if not response.success:
            raise SuggestionUnavailable(response.error or "Suggestion request failed")

        content = (response.content or "").strip()
        if not content:
            raise SuggestionUnavailable("Suggestion response was empty")

        logger.debug(f"Suggestion received: {response.to_dict()}")
        return content
