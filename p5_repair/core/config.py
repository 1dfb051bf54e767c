"""
Configuration module - centralized settings for the repair tool.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Repair settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To point the suggestion oracle at another OpenAI-compatible endpoint:
        export SUGGESTION_BASE_URL=https://my-proxy.example.com/v1
        export DEEPSEEK_API_KEY=sk-...
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    # APP_NAME: Display name shown in API docs and logging
    APP_NAME: str = "p5-repair"

    # DEBUG: Verbose logging for the CLI and the HTTP endpoint
    DEBUG: bool = False

    # ---------------------------------------------------------------------------
    # SUGGESTION ORACLE (LLM) SETTINGS
    # ---------------------------------------------------------------------------
    # SUGGESTION_PROVIDER: "openai" (any OpenAI-compatible endpoint) or "anthropic"
    SUGGESTION_PROVIDER: str = "openai"

    # SUGGESTION_API_KEY: Bearer credential for the OpenAI-compatible endpoint
    # - DEEPSEEK_API_KEY is accepted as well
    # - Empty key = oracle unavailable, every pass falls back to heuristics
    SUGGESTION_API_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("SUGGESTION_API_KEY", "DEEPSEEK_API_KEY"),
    )

    SUGGESTION_BASE_URL: str = "https://api.deepseek.com"
    SUGGESTION_MODEL: str = "deepseek-chat"

    # Low temperature keeps patches close to the input
    SUGGESTION_TEMPERATURE: float = 0.1

    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-sonnet-4-5"

    # AI Request timeout in seconds
    AI_REQUEST_TIMEOUT: int = 30

    # ---------------------------------------------------------------------------
    # PAGE EXECUTION (PLAYWRIGHT) SETTINGS
    # ---------------------------------------------------------------------------
    # PAGE_LOAD_TIMEOUT_MS: Upper bound for "load until network idle"
    PAGE_LOAD_TIMEOUT_MS: int = 30000

    # PAGE_SETTLE_MS: Quiescence delay after load so setup()/draw() can throw
    PAGE_SETTLE_MS: int = 2000

    # SHADER_SETTLE_MS: Shader programs compile lazily on first render
    SHADER_SETTLE_MS: int = 3000

    BROWSER_ARGS: List[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

    # ---------------------------------------------------------------------------
    # PATCHING HEURISTICS
    # ---------------------------------------------------------------------------
    # FUZZY_MATCH_THRESHOLD: Similarity must be strictly greater than this
    FUZZY_MATCH_THRESHOLD: float = 0.7

    # STYLE_WRAP_LIMIT: Max bare CSS regions wrapped in a single run
    STYLE_WRAP_LIMIT: int = 5


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from p5_repair.core.config import settings
settings = Settings()
