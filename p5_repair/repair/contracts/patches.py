"""
Patches - proposed concrete text replacements.

LinePatch carries the text it expects to find so that it can be verified
against the current document before being applied. BlockPatch replaces a
contiguous range of lines (used for commenting out whole statements).
All line numbers are 1-based, as exchanged with the suggestion oracle.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class LinePatch:
    """
    Replace text on one line.

    Example:
        LinePatch(
            line_number=3,
            original="createFish(p.random(3);",
            fixed="createFish(p.random(3));",
            explanation="Added missing )",
        )
    """

    line_number: int
    """1-based line within the script."""

    original: str
    """Text expected on the line."""

    fixed: str
    """Replacement text."""

    explanation: str = ""
    """Diagnostic only, never applied."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fixed_key: str = "fixed") -> Optional["LinePatch"]:
        """
        Build from an oracle JSON object.

        Returns None when the object is not patch-shaped.
        """
        if not isinstance(data, dict):
            return None
        try:
            line_number = int(data.get("lineNumber"))
        except (TypeError, ValueError):
            return None
        fixed = data.get(fixed_key)
        if fixed is None:
            return None
        return cls(
            line_number=line_number,
            original=str(data.get("original") or ""),
            fixed=str(fixed),
            explanation=str(data.get("explanation") or ""),
        )

    def describe(self) -> str:
        return f"line {self.line_number}: {self.explanation or 'replace text'}"


@dataclass
class BlockPatch:
    """Replace lines ``start_line..end_line`` (inclusive, 1-based)."""

    start_line: int
    end_line: int
    replacement: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["BlockPatch"]:
        if not isinstance(data, dict):
            return None
        try:
            start_line = int(data.get("startLine"))
            end_line = int(data.get("endLine"))
        except (TypeError, ValueError):
            return None
        replacement = data.get("replacement")
        if not replacement:
            return None
        return cls(start_line=start_line, end_line=end_line, replacement=str(replacement))

    def is_fully_commented(self) -> bool:
        """True if every replacement line is a ``//`` comment."""
        return all(line.strip().startswith("//") for line in self.replacement.split("\n"))

    def keeps_balance(self, original: str) -> bool:
        """
        True if replacing ``original`` leaves the live ``{}``/``()`` counts unchanged.

        The replacement is all comments, so this only holds when the
        replaced span is balanced on its own.
        """
        return original.count("{") == original.count("}") and original.count("(") == original.count(")")

    def describe(self) -> str:
        return f"lines {self.start_line}-{self.end_line}"
