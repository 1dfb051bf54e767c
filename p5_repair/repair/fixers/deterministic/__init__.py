"""
Deterministic fixers - local patchers that never call an oracle.
"""

from .css_fallback import apply_css_fallback, css_changed, normalize_whitespace
from .markup_normalizer import ALLOWED_TAGS, normalize_markup
from .paren_fixer import EXTRA_CLOSE_MARKER, apply_paren_fixes, find_close_position
from .style_wrapper import wrap_bare_css, wrap_css

__all__ = [
    "apply_css_fallback",
    "css_changed",
    "normalize_whitespace",
    "ALLOWED_TAGS",
    "normalize_markup",
    "EXTRA_CLOSE_MARKER",
    "apply_paren_fixes",
    "find_close_position",
    "wrap_bare_css",
    "wrap_css",
]
