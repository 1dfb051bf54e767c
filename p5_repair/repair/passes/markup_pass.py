"""
Markup and style-tag passes - the two purely textual document rewrites.
"""

from typing import Tuple

from ..fixers.deterministic import normalize_markup, wrap_bare_css
from .base import RepairPass


class MarkupPass(RepairPass):
    """Rewrite entity-encoded head markup into literal tags."""

    name = "markup"

    async def repair(self, html: str) -> Tuple[str, int]:
        fixed, count = normalize_markup(html)
        if count:
            self.sink.log_fix(self.name, "document", f"rewrote {count} encoded tag(s)")
        return fixed, count


class StyleTagPass(RepairPass):
    """Wrap CSS that sits outside any <style> element."""

    name = "style-tags"

    async def repair(self, html: str) -> Tuple[str, int]:
        fixed, count = wrap_bare_css(html)
        if count:
            self.sink.log_fix(self.name, "document", f"wrapped {count} bare CSS region(s) in <style>")
        return fixed, count
