"""
Not-a-function pass - comment out blocks that call a missing function.

For every ``X.fn is not a function`` observed at runtime, each inline
script calling ``X.fn`` has the enclosing statement or block of every
call site commented out. The oracle proposes the replacements. A proposal
is discarded unless every line is a ``//`` comment and the lines it
replaces balance their own braces and parens. Call sites left without an
accepted proposal get the mechanical comment-out.
"""

import logging
import re
from typing import List, Tuple

from ..analyzers.block_boundary import BlockSpan, comment_out_block, find_code_block
from ..analyzers.blocks import extract_scripts, replace_block_contents
from ..contracts.issues import NotAFunctionIssue
from ..contracts.patches import BlockPatch
from ..fixers.llm.prompt_builders import NotAFunctionContext, NotAFunctionPromptBuilder
from ..validators.error_classifier import ErrorClassifier
from .base import RepairPass

logger = logging.getLogger(__name__)


LEADING_WHITESPACE = re.compile(r"^\s*")


def apply_block_patches(script: str, patches: List[BlockPatch]) -> Tuple[str, List[BlockPatch]]:
    """
    Apply block replacements from the bottom of the script up.

    Each replacement line is prefixed with the indentation of the block's
    first line. Patches out of range or overlapping one already applied
    are dropped.

    Returns:
        (patched script, patches applied)
    """
    lines = script.split("\n")
    applied: List[BlockPatch] = []
    taken: List[BlockSpan] = []

    for patch in sorted(patches, key=lambda p: p.start_line, reverse=True):
        if not 1 <= patch.start_line <= patch.end_line <= len(lines):
            logger.warning(f"Block patch {patch.describe()} out of range")
            continue
        span = BlockSpan(patch.start_line - 1, patch.end_line - 1)
        if any(span.overlaps(other) for other in taken):
            logger.warning(f"Block patch {patch.describe()} overlaps an applied patch")
            continue

        indentation = LEADING_WHITESPACE.match(lines[span.start_line]).group(0)
        replacement = [indentation + line for line in patch.replacement.split("\n")]
        lines[span.start_line:span.end_line + 1] = replacement
        taken.append(span)
        applied.append(patch)

    return "\n".join(lines), applied


class NotAFunctionPass(RepairPass):
    """Comment out call sites of functions reported as not a function."""

    name = "not-a-function"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = NotAFunctionPromptBuilder()
        self.classifier = ErrorClassifier()

    async def repair(self, html: str) -> Tuple[str, int]:
        if self.executor is None:
            self.sink.log_skip(self.name, "no page executor configured")
            return html, 0

        events = await self.executor.execute(html)
        issues = self.classifier.missing_functions(events)
        if not issues:
            return html, 0

        fix_count = 0
        for issue in issues:
            logger.info(f"Processing missing function: {issue.reference}")
            updates = []
            for block in extract_scripts(html):
                patched = await self._patch_script(block.content, issue)
                if patched != block.content:
                    updates.append((block, patched))
                    fix_count += 1
                    self.sink.log_fix(
                        self.name,
                        f"script at line {block.start_line}",
                        f"commented out calls to {issue.reference}",
                    )
            if updates:
                html = replace_block_contents(html, updates)

        return html, fix_count

    async def _patch_script(self, script: str, issue: NotAFunctionIssue) -> str:
        pattern = issue.call_pattern()
        lines = script.split("\n")
        problem_lines = [i + 1 for i, line in enumerate(lines) if pattern.search(line)]
        if not problem_lines:
            return script

        spans = [find_code_block(lines, n - 1) for n in problem_lines]
        context = NotAFunctionContext(
            script=script, issue=issue, problem_lines=problem_lines, spans=spans
        )

        proposed: List[BlockPatch] = []
        response = await self.ask(self.builder, context)
        if response is not None:
            proposed = self.builder.parse_response(response, context)
        accepted = self._accept(lines, proposed)

        uncovered = [
            span for span in spans
            if not any(span.overlaps(BlockSpan(p.start_line - 1, p.end_line - 1)) for p in accepted)
        ]
        if uncovered:
            logger.info(f"Commenting out {len(uncovered)} call site(s) of {issue.reference} mechanically")
            accepted.extend(self._accept(lines, self._mechanical_patches(lines, uncovered, issue)))

        patched, applied = apply_block_patches(script, accepted)
        return patched if applied else script

    def _accept(self, lines: List[str], patches: List[BlockPatch]) -> List[BlockPatch]:
        accepted = []
        for patch in patches:
            original = "\n".join(lines[max(patch.start_line - 1, 0):patch.end_line])
            if not patch.is_fully_commented():
                self.sink.log_skip(self.name, f"{patch.describe()}: replacement is not fully commented")
            elif not patch.keeps_balance(original):
                self.sink.log_skip(self.name, f"{patch.describe()}: replaced lines leave braces unbalanced")
            else:
                accepted.append(patch)
        return accepted

    @staticmethod
    def _mechanical_patches(
        lines: List[str], spans: List[BlockSpan], issue: NotAFunctionIssue
    ) -> List[BlockPatch]:
        patches = []
        for span in spans:
            first, last = span.display()
            patches.append(BlockPatch(
                start_line=first,
                end_line=last,
                replacement=comment_out_block(lines, span, issue.reference),
            ))
        return patches
