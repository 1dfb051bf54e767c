"""
ErrorEvent - what the page-execution oracle reports.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(Enum):
    """Channel the event was captured from."""

    PAGE_ERROR = "pageerror"
    """Uncaught exception in page script."""

    CONSOLE_ERROR = "console"
    """console.error() output (also covers WebGL/shader warnings)."""

    CONSOLE_MESSAGE = "console-message"
    """Any other console output; THREE.js prints shader logs at warning level."""

    REQUEST_FAILED = "requestfailed"
    """A subresource (script, stylesheet) failed to load."""


@dataclass(frozen=True)
class ErrorEvent:
    """
    One observation from a page run.

    Transient: produced by the executor, consumed by the classifier.
    """

    type: EventType
    message: str
    stack: Optional[str] = None
    url: Optional[str] = None

    @property
    def text(self) -> str:
        """Message plus stack, for pattern matching."""
        if self.stack and self.stack not in self.message:
            return f"{self.message}\n{self.stack}"
        return self.message
