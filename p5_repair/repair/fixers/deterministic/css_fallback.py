"""
Mechanical CSS repair, used when the suggestion oracle cannot help.

Two rewrites only:
- a bare ``: value`` at the start of a declaration gets a placeholder
  ``position`` property name
- a ``;`` is added before any ``}`` whose preceding non-space character
  is not ``;``, ``{`` or ``}``
"""

import re

NAMELESS_DECLARATION = re.compile(r"(^|[{;])(\s*):\s", re.MULTILINE)
UNTERMINATED_DECLARATION = re.compile(r"([^;{}\s])(\s*)\}")

PLACEHOLDER_PROPERTY = "position"


def normalize_whitespace(css: str) -> str:
    return re.sub(r"\s+", " ", css).strip()


def apply_css_fallback(css: str) -> str:
    """Apply both rewrites and return the new CSS text."""
    css = NAMELESS_DECLARATION.sub(rf"\1\2{PLACEHOLDER_PROPERTY}: ", css)
    css = UNTERMINATED_DECLARATION.sub(r"\1;\2}", css)
    return css


def css_changed(before: str, after: str) -> bool:
    """True when the texts differ beyond whitespace."""
    return normalize_whitespace(before) != normalize_whitespace(after)
