"""
Test configuration and fixtures for pytest.

This module provides shared fakes used across all tests:
- MockProvider (scripted AIProvider, no network)
- FakeSuggestionOracle (scripted answers or always unavailable)
- FakePageExecutor (scripted error events, no browser)
- Document builders
"""

from typing import List, Optional

import pytest

from p5_repair.ai.monitoring import RepairLogger
from p5_repair.ai.providers.base import AIProvider, AIResponse, ProviderType
from p5_repair.repair.contracts.events import ErrorEvent, EventType
from p5_repair.repair.fixers.llm.suggestion import SuggestionOracle, SuggestionUnavailable
from p5_repair.repair.sandbox.page_executor import PageExecutor


# ---------------------------------------------------------------------------
# PROVIDER / ORACLE FAKES
# ---------------------------------------------------------------------------

class MockProvider(AIProvider):
    """Mock provider that returns predefined responses."""

    provider_type = ProviderType.OPENAI
    model = "mock-model"

    def __init__(self, responses: Optional[List[AIResponse]] = None, configured: bool = True):
        self.responses = responses or [
            AIResponse(content="[]", provider=ProviderType.OPENAI, model=self.model)
        ]
        self.configured = configured
        self.call_count = 0
        self.calls = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, **kwargs) -> AIResponse:
        self.calls.append(kwargs)
        response = self.responses[min(self.call_count, len(self.responses) - 1)]
        self.call_count += 1
        return response


class FakeSuggestionOracle(SuggestionOracle):
    """
    Oracle returning scripted text.

    With no responses it behaves like an oracle without a credential.
    """

    def __init__(self, responses: Optional[List[str]] = None):
        self.responses = responses or []
        self.call_count = 0
        self.calls = []

    async def suggest(self, system_prompt: str, user_prompt: str, max_tokens: int = 1024) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "max_tokens": max_tokens,
        })
        self.call_count += 1
        if not self.responses:
            raise SuggestionUnavailable("no credential")
        return self.responses[min(self.call_count - 1, len(self.responses) - 1)]


class FakePageExecutor(PageExecutor):
    """Executor returning the same events on every run."""

    def __init__(self, events: Optional[List[ErrorEvent]] = None):
        self.events = events or []
        self.calls = []

    async def execute(self, html: str, settle_ms: Optional[int] = None) -> List[ErrorEvent]:
        self.calls.append({"html": html, "settle_ms": settle_ms})
        return list(self.events)


def page_error(message: str, stack: Optional[str] = None) -> ErrorEvent:
    return ErrorEvent(type=EventType.PAGE_ERROR, message=message, stack=stack)


def console_error(message: str) -> ErrorEvent:
    return ErrorEvent(type=EventType.CONSOLE_ERROR, message=message)


# ---------------------------------------------------------------------------
# DOCUMENT BUILDERS
# ---------------------------------------------------------------------------

def make_page(script: str = "", style: Optional[str] = None, head: str = "") -> str:
    """Minimal p5 page with one inline script and an optional style block."""
    style_block = f"<style>{style}</style>\n" if style is not None else ""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        "<title>Sketch</title>\n"
        f"{head}"
        f"{style_block}"
        "</head>\n"
        "<body>\n"
        f"<script>\n{script}\n</script>\n"
        "</body>\n"
        "</html>\n"
    )


CLEAN_PAGE = make_page(
    script=(
        "function setup() {\n"
        "  createCanvas(400, 400);\n"
        "}\n"
        "function draw() {\n"
        "  background(220);\n"
        "}"
    ),
    style="\nbody {\n  margin: 0;\n}\n",
)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def sink() -> RepairLogger:
    """Event sink that keeps every record for assertions."""
    return RepairLogger(run_id="test")


@pytest.fixture
def unavailable_oracle() -> FakeSuggestionOracle:
    return FakeSuggestionOracle()


@pytest.fixture
def quiet_executor() -> FakePageExecutor:
    """Executor reporting no errors at all."""
    return FakePageExecutor()
