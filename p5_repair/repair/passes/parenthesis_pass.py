"""
Parenthesis pass - balance ``(`` and ``)`` in every inline script.

Scripts containing shader code are never touched. For the others, the
oracle is asked for targeted line fixes first; if it is unavailable or
none of its fixes can be applied, the deterministic patcher repairs every
detected issue.
"""

import logging
from typing import List, Optional, Tuple

from ..analyzers.blocks import extract_scripts, replace_block_contents
from ..analyzers.delimiters import detect_paren_issues
from ..contracts.issues import ParenIssue
from ..fixers.deterministic import apply_paren_fixes
from ..fixers.llm.patch_applier import LinePatchApplier
from ..fixers.llm.prompt_builders import ParenContext, ParenPromptBuilder
from .base import RepairPass

logger = logging.getLogger(__name__)


class ParenthesisPass(RepairPass):
    """Suggestion-first, deterministic-fallback delimiter repair."""

    name = "parentheses"

    def __init__(self, *args, applier: Optional[LinePatchApplier] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = ParenPromptBuilder()
        self.applier = applier or LinePatchApplier()

    async def repair(self, html: str) -> Tuple[str, int]:
        updates = []
        fix_count = 0

        for block in extract_scripts(html):
            issues = detect_paren_issues(block.content)
            if not issues:
                continue

            logger.info(f"Found {len(issues)} parenthesis issue(s) in script at line {block.start_line}")
            fixed, count = await self._fix_script(block.content, issues)
            if count:
                updates.append((block, fixed))
                fix_count += count
                self.sink.log_fix(
                    self.name,
                    f"script at line {block.start_line}",
                    f"fixed {count} parenthesis issue(s)",
                    {"issues": [issue.describe() for issue in issues]},
                )

        if not updates:
            return html, 0
        return replace_block_contents(html, updates), fix_count

    async def _fix_script(self, script: str, issues: List[ParenIssue]) -> Tuple[str, int]:
        context = ParenContext(script=script, issues=issues)
        response = await self.ask(self.builder, context)

        if response is not None:
            patches = self.builder.parse_response(response, context)
            result = self.applier.apply(script, patches, issues)
            for patch, reason in result.failed:
                self.sink.log_skip(self.name, f"{patch.describe()}: {reason}")
            if result.success:
                return result.content, result.fix_count
            logger.info("No suggested fixes could be applied, using basic method")

        return apply_paren_fixes(script, issues)
