"""
PromptBuilder Base - Abstract base class for per-pass prompt builders.

Each builder owns one system prompt, one user-prompt template, and the
parser that turns the free-form answer back into something its pass can
verify and apply. Builders never call the oracle themselves.
"""

from abc import ABC, abstractmethod
from typing import Any, List


def numbered_context(
    lines: List[str],
    target: int,
    radius: int,
    marker: str = ">",
    separator: str = " ",
) -> str:
    """
    Render ``lines`` around a 1-based ``target`` line with line numbers.

    The target line is prefixed with ``marker``, all others with spaces.
    """
    start = max(0, target - radius)
    end = min(len(lines), target + radius)
    rendered = []
    for i in range(start, end):
        number = i + 1
        prefix = marker if number == target else " " * len(marker)
        rendered.append(f"{prefix}{separator}{number}: {lines[i]}")
    return "\n".join(rendered)


class PromptBuilder(ABC):
    """
    Abstract base class for prompt builders.

    Subclasses define the system prompt and token budget for one repair
    concern, render a context object into a user prompt, and parse the
    answer.
    """

    max_tokens: int = 1024
    """Response budget passed to the oracle."""

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """
        System prompt for the oracle.

        Returns:
            System prompt string
        """
        pass

    @abstractmethod
    def build(self, context: Any) -> str:
        """
        Build the user prompt.

        Args:
            context: Builder-specific context dataclass

        Returns:
            User prompt string
        """
        pass

    @abstractmethod
    def parse_response(self, response: str, context: Any) -> Any:
        """
        Parse the oracle answer.

        Must not raise: unusable answers yield an empty list or None so the
        calling pass can fall back.
        """
        pass
