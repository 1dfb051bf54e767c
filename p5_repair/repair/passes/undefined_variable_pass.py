"""
Undefined-variable pass - make ``X is not defined`` errors go away.

For each distinct undefined identifier, every inline script mentioning it
is patched:

- declared only inside a conditional block: a top-level default
  declaration is prepended, no oracle call
- otherwise the oracle proposes whole-line replacements (null check,
  default value, or declaration)
- oracle unavailable: a top-level default declaration is prepended

Each applied replacement or insertion counts as one fix.
"""

import logging
import re
from typing import Dict, List, Tuple

from ..analyzers.blocks import extract_scripts
from ..analyzers.scope_analyzer import check_conditional_declaration
from ..contracts.issues import UndefinedVariableIssue
from ..contracts.patches import LinePatch
from ..fixers.llm.prompt_builders import UndefinedVariableContext, UndefinedVariablePromptBuilder
from ..validators.error_classifier import ErrorClassifier
from .base import RepairPass

logger = logging.getLogger(__name__)


def default_declaration(name: str, comment: str) -> str:
    """Declaration shaped for the common ``X.uniforms.value`` access chain."""
    return f"let {name} = {{ uniforms: {{ value: {{ x: 0, y: 0 }} }} }}; // {comment}"


def apply_line_replacements(script: str, name: str, patches: List[LinePatch]) -> Tuple[str, int]:
    """
    Apply whole-line replacements.

    A valid line number replaces that line. Otherwise the ``original``
    text is replaced wherever it first occurs. Failing both, a default
    declaration is prepended.
    """
    lines = script.split("\n")
    count = 0
    for patch in patches:
        if 0 < patch.line_number <= len(lines):
            logger.info(f"Line {patch.line_number}: {lines[patch.line_number - 1]!r} -> {patch.fixed!r}")
            lines[patch.line_number - 1] = patch.fixed
        else:
            current = "\n".join(lines)
            if patch.original and patch.original in current:
                lines = current.replace(patch.original, patch.fixed, 1).split("\n")
            else:
                lines.insert(0, default_declaration(name, "Auto-declared at top level to fix undefined error"))
        count += 1
    return "\n".join(lines), count


class UndefinedVariablePass(RepairPass):
    """Declare, default or guard identifiers the page reports as undefined."""

    name = "undefined-variables"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = UndefinedVariablePromptBuilder()
        self.classifier = ErrorClassifier()

    async def repair(self, html: str) -> Tuple[str, int]:
        if not extract_scripts(html):
            return html, 0
        if self.executor is None:
            self.sink.log_skip(self.name, "no page executor configured")
            return html, 0

        events = await self.executor.execute(html)
        issues = self.classifier.undefined_variables(events)
        if not issues:
            logger.info("No undefined variable errors detected")
            return html, 0

        by_name: Dict[str, List[UndefinedVariableIssue]] = {}
        for issue in issues:
            by_name.setdefault(issue.name, []).append(issue)
        logger.info(f"Unique undefined variables: {', '.join(by_name)}")

        fix_count = 0
        for name, named_issues in by_name.items():
            pattern = re.compile(rf"\b{re.escape(name)}\b")
            # Offsets shift after each edit, so re-extract per script
            index = 0
            while True:
                scripts = extract_scripts(html)
                if index >= len(scripts):
                    break
                block = scripts[index]
                index += 1
                if not pattern.search(block.content):
                    continue

                fixed, count = await self._fix_script(block.content, name, named_issues[0])
                if count:
                    html = block.replace_content(html, fixed)
                    fix_count += count
                    self.sink.log_fix(
                        self.name,
                        f"script at line {block.start_line}",
                        f"fixed undefined variable '{name}'",
                        {"fixes": count},
                    )

        return html, fix_count

    async def _fix_script(self, script: str, name: str, issue: UndefinedVariableIssue) -> Tuple[str, int]:
        declaration = check_conditional_declaration(script, name)
        if declaration is not None:
            logger.info(
                f"'{name}' declared inside {declaration.block_type} block at line {declaration.line_number}"
            )
            line = default_declaration(name, "Added at top level to fix variable scoping issue")
            return f"{line}\n{script}", 1

        context = UndefinedVariableContext(script=script, name=name, message=issue.message)
        response = await self.ask(self.builder, context)
        if response is None:
            line = default_declaration(name, "Added global declaration as fallback fix")
            return f"{line}\n{script}", 1

        patches = self.builder.parse_response(response, context)
        if not patches:
            self.sink.log_skip(self.name, f"no usable fix for '{name}'")
            return script, 0
        return apply_line_replacements(script, name, patches)
