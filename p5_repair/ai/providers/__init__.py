"""
AI Providers Module - interchangeable LLM clients for the suggestion oracle.

    provider = create_provider()          # follows settings.SUGGESTION_PROVIDER
    response = await provider.generate(prompt, system_prompt=...)
"""

from typing import Optional

from p5_repair.core.config import settings
from p5_repair.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from p5_repair.ai.providers.openai_provider import OpenAIProvider
from p5_repair.ai.providers.anthropic_provider import AnthropicProvider


def create_provider(name: Optional[str] = None) -> AIProvider:
    """Build the provider named by ``name`` or ``settings.SUGGESTION_PROVIDER``."""
    name = (name or settings.SUGGESTION_PROVIDER).lower()
    if name == ProviderType.ANTHROPIC.value:
        return AnthropicProvider()
    if name == ProviderType.OPENAI.value:
        return OpenAIProvider()
    raise ValueError(f"Unknown suggestion provider: {name}")


__all__ = [
    "AIProvider",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "OpenAIProvider",
    "AnthropicProvider",
    "create_provider",
]
