"""
Issues - located, classified defects awaiting remediation.

Each detector produces one of these. They are consumed either by a
deterministic patcher or by the suggestion-assisted path.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ParenIssueKind(Enum):
    """Types of delimiter imbalance."""

    MISSING_CLOSE = "missing-close"
    """An ``(`` that is never closed."""

    EXTRA_CLOSE = "extra-close"
    """A ``)`` with no matching ``(``."""

    @property
    def description(self) -> str:
        if self is ParenIssueKind.MISSING_CLOSE:
            return "Missing closing parenthesis"
        return "Extra closing parenthesis"


@dataclass(frozen=True)
class ParenIssue:
    """
    Unbalanced parenthesis inside one script body.

    Example:
        ParenIssue(kind=ParenIssueKind.MISSING_CLOSE, index=17)
    """

    kind: ParenIssueKind
    """Missing or extra close."""

    index: int
    """Character offset of the offending paren within the script content."""

    def describe(self) -> str:
        return f"{self.kind.value} at offset {self.index}"


@dataclass(frozen=True)
class UndefinedVariableIssue:
    """A ``ReferenceError: X is not defined`` observed at runtime."""

    name: str
    """The undefined identifier."""

    line_number: Optional[int] = None
    """Line reported by the browser, if any (document-relative)."""

    message: str = ""
    """Original error text."""

    @property
    def dedup_key(self) -> str:
        return f"{self.name}:{self.line_number or 0}"


@dataclass(frozen=True)
class NotAFunctionIssue:
    """A ``TypeError: obj.fn is not a function`` observed at runtime."""

    object_name: str
    function_name: str

    @property
    def reference(self) -> str:
        """The dotted call target as it appears in source."""
        return f"{self.object_name}.{self.function_name}"

    @property
    def is_global(self) -> bool:
        return self.object_name == "window"

    def call_pattern(self) -> "re.Pattern":
        """
        Regex locating call sites in a script.

        Global functions also match when called bare (``foo(``).
        """
        fn = re.escape(self.function_name)
        if self.is_global:
            return re.compile(rf"(?<![\w$.])(?:window\.)?{fn}\s*\(")
        return re.compile(rf"(?<![\w$]){re.escape(self.object_name)}\.{fn}(?![\w$])")


@dataclass(frozen=True)
class CssIssue:
    """One malformed-CSS finding inside a ``<style>`` block."""

    detail: str
