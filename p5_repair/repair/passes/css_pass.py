"""
CSS pass - repair malformed <style> bodies.

Blocks the validator flags are sent to the oracle with line numbers.
Its answer is applied only if it differs from the original beyond
whitespace. When the oracle is unavailable, or answers with something
that is not CSS, the mechanical fallback runs instead. One fix per
changed style block.
"""

import logging
from typing import Optional, Tuple

from ..analyzers.blocks import EmbeddedBlock, extract_styles, replace_block_contents
from ..analyzers.css_analyzer import validate_css
from ..fixers.deterministic import apply_css_fallback, css_changed
from ..fixers.llm.prompt_builders import CSSPromptBuilder, CssContext
from .base import RepairPass

logger = logging.getLogger(__name__)


class CssPass(RepairPass):
    """Validate every style block and repair the ones with findings."""

    name = "css"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = CSSPromptBuilder()

    async def repair(self, html: str) -> Tuple[str, int]:
        updates = []
        for block in extract_styles(html):
            if not block.content.strip():
                continue
            result = validate_css(block.content)
            if not result.has_errors:
                continue

            logger.info(f"Found CSS issues in style tag: {', '.join(result.details)}")
            new_content = await self._repair_block(block, result.details)
            if new_content is not None:
                updates.append((block, new_content))

        if not updates:
            return html, 0
        return replace_block_contents(html, updates), len(updates)

    async def _repair_block(self, block: EmbeddedBlock, details) -> Optional[str]:
        """New block content, or None when the block is left as is."""
        location = f"style at line {block.start_line}"
        context = CssContext(css=block.content, details=list(details))

        response = await self.ask(self.builder, context)
        if response is not None:
            suggestion = self.builder.parse_response(response, context)
            if suggestion.no_changes:
                logger.info("Suggestion confirms CSS is valid, no changes needed")
                return None
            if suggestion.css is not None:
                if not css_changed(block.content, suggestion.css):
                    logger.info("Suggested CSS matches the original, no changes needed")
                    return None
                self.sink.log_fix(self.name, location, "applied suggested CSS", {"issues": context.details})
                return f"\n{suggestion.css}\n    "
            self.sink.log_skip(self.name, f"{location}: response did not contain CSS")

        fixed = apply_css_fallback(block.content)
        if not css_changed(block.content, fixed):
            logger.info("No changes needed after CSS fallback")
            return None
        self.sink.log_fix(self.name, location, "applied mechanical CSS fixes", {"issues": context.details})
        return fixed
