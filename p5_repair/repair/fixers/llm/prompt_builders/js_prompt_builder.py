"""
JS prompt builders - prompts for the three script-level repair concerns.

- ParenPromptBuilder: targeted fixes for unbalanced parentheses
- UndefinedVariablePromptBuilder: minimal fixes for ``X is not defined``
- NotAFunctionPromptBuilder: comment out blocks calling a missing function

Every answer is a JSON array. Parsing tolerates fences, prose around the
array, and (for undefined variables) malformed JSON.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ....analyzers.block_boundary import BlockSpan
from ....contracts.issues import NotAFunctionIssue, ParenIssue
from ....contracts.patches import BlockPatch, LinePatch
from ....validators.error_classifier import char_index_to_position
from ..response_parser import extract_fields, extract_json_array
from .base import PromptBuilder, numbered_context

logger = logging.getLogger(__name__)


PAREN_SYSTEM_PROMPT = (
    "You are an expert JavaScript developer specializing in fixing syntax errors in P5.js code. "
    "You provide precise, targeted fixes for code issues without rewriting entire blocks of code."
)

UNDEFINED_VARIABLE_SYSTEM_PROMPT = (
    "You are an expert JavaScript developer specializing in emergency fixes for undefined variable "
    "errors. You provide minimal, targeted fixes that allow code to compile and run without errors."
)

NOT_A_FUNCTION_SYSTEM_PROMPT = (
    "You are instructed to comment out entire code blocks containing problematic function calls. "
    "You preserve indentation and maintain syntactic correctness by commenting out all lines in the "
    "blocks, not just individual lines."
)


# =============================================================================
# PARENTHESES
# =============================================================================

@dataclass
class ParenContext:
    """One script body and the delimiter issues found in it."""

    script: str
    issues: List[ParenIssue]


class ParenPromptBuilder(PromptBuilder):
    """
    Asks for ``{lineNumber, original, fixed, explanation}`` objects.

    Each issue is shown with five lines of context either side, the
    offending line marked with ``>``.
    """

    CONTEXT_RADIUS = 5

    @property
    def system_prompt(self) -> str:
        return PAREN_SYSTEM_PROMPT

    def build(self, context: ParenContext) -> str:
        lines = context.script.split("\n")
        descriptions = []
        blocks = []
        for issue in context.issues:
            line_number, column = char_index_to_position(context.script, issue.index)
            descriptions.append(
                f"- {issue.kind.value} at line {line_number}, column {column}: {issue.kind.description}"
            )
            header = f"--- Context for {issue.kind.value} at line {line_number}, column {column} ---"
            body = numbered_context(lines, line_number, self.CONTEXT_RADIUS, marker="> ", separator="")
            blocks.append(f"{header}\n{body}\n")

        return f"""I have a JavaScript file with {len(context.issues)} parentheses issues. Please help me fix these issues WITHOUT rewriting the entire file - just apply targeted fixes.

Issues detected:
{chr(10).join(descriptions)}

Here's the code context:

{chr(10).join(blocks)}

IMPORTANT INSTRUCTIONS:
1. DO NOT rewrite the entire file - only provide specific fixes for each issue
2. For each fix, tell me:
   - The exact line number that needs to be fixed
   - The exact string that needs to be replaced
   - The exact string to replace it with
3. Format your answer as a JSON array of fix objects like this:
[
  {{
    "lineNumber": 42,
    "original": "createFish(p.random(p.width), p.random(p.height), p.floor(p.random(3));",
    "fixed": "createFish(p.random(p.width), p.random(p.height), p.floor(p.random(3)));",
    "explanation": "Added missing closing parenthesis after p.random(3)"
  }}
]
4. If a line has multiple issues, provide one fix that addresses all of them in a single replacement
5. Be precise about where to add or remove parentheses - consider the context carefully
6. DO NOT include explanations in the JSON, only the fix objects in the array"""

    def parse_response(self, response: str, context: ParenContext) -> List[LinePatch]:
        data = extract_json_array(response)
        if not data:
            return []
        patches = [LinePatch.from_dict(item) for item in data]
        return [p for p in patches if p is not None]


# =============================================================================
# UNDEFINED VARIABLES
# =============================================================================

@dataclass
class UndefinedVariableContext:
    """A script referencing an undefined identifier."""

    script: str
    name: str
    message: str = ""

    def occurrence_lines(self) -> List[int]:
        """1-based line of every whole-word occurrence, in order."""
        pattern = re.compile(rf"\b{re.escape(self.name)}\b")
        return [
            self.script.count("\n", 0, match.start()) + 1
            for match in pattern.finditer(self.script)
        ]


class UndefinedVariablePromptBuilder(PromptBuilder):
    """
    Asks for ``{lineNumber, original, replacement, explanation}`` objects.

    The parser degrades through three levels: JSON array, regex field
    extraction, then a mechanical ``(window.NAME || {})`` guard on the
    first occurrence.
    """

    CONTEXT_RADIUS = 5
    PATCH_FIELDS = ("lineNumber", "original", "replacement")

    @property
    def system_prompt(self) -> str:
        return UNDEFINED_VARIABLE_SYSTEM_PROMPT

    def build(self, context: UndefinedVariableContext) -> str:
        lines = context.script.split("\n")
        name = context.name
        occurrences = []
        for i, line_number in enumerate(context.occurrence_lines(), start=1):
            snippet = numbered_context(lines, line_number, self.CONTEXT_RADIUS)
            actual = lines[line_number - 1].strip()
            occurrences.append(
                f"\nOCCURRENCE {i} (Line {line_number}):\n```javascript\n{snippet}\n```\n"
                f'ACTUAL LINE TO FIX: "{actual}"\n'
            )

        return f"""I need an EMERGENCY FIX for an undefined variable in my JavaScript code. The browser is reporting this error:

ERROR: {context.message}

The undefined variable is: "{name}"

I need you to provide the MINIMAL POSSIBLE CHANGES to make the code execute without errors. Here are all occurrences of the variable in the code:

{chr(10).join(occurrences)}

IMPORTANT INSTRUCTIONS:
1. DO NOT rewrite the entire code - just make the smallest possible changes to fix the error
2. Consider these approaches, in order of preference:
   a) Add a defensive null check (e.g., `if ({name}) {{...}}` or `{name} && {name}.property`)
   b) Initialize the variable with a sensible default value
   c) Add a variable declaration at the appropriate scope
3. Format your answer as a JSON array of fix objects like this:
[
  {{
    "lineNumber": exact_line_number,
    "original": "EXACT original line to replace (must match exactly)",
    "replacement": "complete replacement line",
    "explanation": "Brief explanation of what the fix does"
  }}
]
4. Make sure the 'original' field EXACTLY matches an entire line in the code
5. Provide complete line replacements, not partial snippets
6. If multiple approaches are possible, choose the SAFEST one that will prevent runtime errors

Remember, this is an EMERGENCY FIX - prioritize getting the code to run without errors over perfect code."""

    def parse_response(self, response: str, context: UndefinedVariableContext) -> List[LinePatch]:
        data = extract_json_array(response)
        if data:
            patches = [LinePatch.from_dict(item, fixed_key="replacement") for item in data]
            patches = [p for p in patches if p is not None]
            if patches:
                return patches

        fields = extract_fields(response, self.PATCH_FIELDS)
        if "lineNumber" in fields and ("original" in fields or "replacement" in fields):
            logger.info(f"Recovered fix for '{context.name}' by field extraction")
            line_number = int(fields["lineNumber"])
            lines = context.script.split("\n")
            original = fields.get("original")
            if original is None and 0 < line_number <= len(lines):
                original = lines[line_number - 1]
            return [LinePatch(
                line_number=line_number,
                original=original or "",
                fixed=fields.get("replacement") or f"let {context.name} = window.{context.name} || {{}};",
                explanation="recovered from malformed response",
            )]

        patch = self.guard_first_occurrence(context) or self.declare_before_first_use(context)
        return [patch] if patch else []

    @staticmethod
    def guard_first_occurrence(context: UndefinedVariableContext) -> Optional[LinePatch]:
        """
        Replace the first occurrence on its line with ``(window.NAME || {})``.

        Returns None when the name does not occur.
        """
        lines = context.script.split("\n")
        occurrences = context.occurrence_lines()
        if not occurrences:
            return None
        line_number = occurrences[0]
        line = lines[line_number - 1]
        guarded = re.sub(
            rf"\b{re.escape(context.name)}\b",
            f"(window.{context.name} || {{}})",
            line,
            count=1,
        )
        return LinePatch(
            line_number=line_number,
            original=line,
            fixed=guarded,
            explanation=f"guarded '{context.name}' with a window fallback",
        )

    @staticmethod
    def declare_before_first_use(context: UndefinedVariableContext) -> Optional[LinePatch]:
        """Prefix the first line mentioning the name with ``let NAME = {};``."""
        lines = context.script.split("\n")
        for i, line in enumerate(lines):
            if context.name in line:
                return LinePatch(
                    line_number=i + 1,
                    original=line,
                    fixed=f"let {context.name} = {{}}; // Auto-declared to fix error\n{line}",
                    explanation="added variable declaration",
                )
        return None


# =============================================================================
# NOT A FUNCTION
# =============================================================================

@dataclass
class NotAFunctionContext:
    """Call sites of a missing function inside one script."""

    script: str
    issue: NotAFunctionIssue
    problem_lines: List[int] = field(default_factory=list)
    """1-based lines containing a call."""

    spans: List[BlockSpan] = field(default_factory=list)
    """Inferred enclosing span for each problem line (same order)."""


class NotAFunctionPromptBuilder(PromptBuilder):
    """
    Asks for ``{startLine, endLine, replacement}`` objects that comment out
    each enclosing block. Lines inside the block are marked ``*`` in the
    context, the call site itself ``>``.
    """

    CONTEXT_RADIUS = 3

    @property
    def system_prompt(self) -> str:
        return NOT_A_FUNCTION_SYSTEM_PROMPT

    def _render_occurrence(self, lines: List[str], line_number: int, span: BlockSpan) -> str:
        start = max(0, span.start_line - self.CONTEXT_RADIUS)
        end = min(len(lines) - 1, span.end_line + self.CONTEXT_RADIUS)
        rendered = []
        for i in range(start, end + 1):
            number = i + 1
            if number == line_number:
                marker = ">"
            elif span.contains(i):
                marker = "*"
            else:
                marker = " "
            rendered.append(f"{marker} {number}: {lines[i]}")
        return "\n".join(rendered)

    def build(self, context: NotAFunctionContext) -> str:
        lines = context.script.split("\n")
        reference = context.issue.reference
        occurrences = []
        for i, (line_number, span) in enumerate(zip(context.problem_lines, context.spans), start=1):
            first, last = span.display()
            snippet = self._render_occurrence(lines, line_number, span)
            block = "\n".join(lines[span.start_line:span.end_line + 1])
            occurrences.append(
                f"\nOCCURRENCE {i} (Line {line_number}, inside block from line {first} to {last}):\n"
                f"```javascript\n{snippet}\n```\n\n"
                f"The block content to comment out is:\n```javascript\n{block}\n```\n"
            )

        return f"""I need to fix "{reference} is not a function" errors by commenting out ENTIRE CODE BLOCKS.

Here are the problematic blocks where this function is called:

{chr(10).join(occurrences)}

EXTREMELY IMPORTANT INSTRUCTIONS:
1. DO NOT fix or replace functionality
2. COMMENT OUT THE ENTIRE CODE BLOCK for each occurrence
3. For each block, create a single replacement that:
   - Comments out EVERY line in the block
   - Preserves indentation
   - Adds a first comment line explaining what was commented out
4. Maintain syntactic correctness - DO NOT leave unmatched braces or parentheses
5. If a function call is part of a larger statement or within callbacks, comment the ENTIRE block

For each block to replace, provide:
1. The start line number
2. The end line number
3. The complete replacement with ALL LINES commented

Format your response as JSON:
[
  {{
    "startLine": 123,
    "endLine": 128,
    "replacement": "    // ERROR: Block commented out due to missing function {reference}\\n    // Original block:\\n    // line 1\\n    // line 2\\n    // etc."
  }}
]

ONLY return the JSON array with no additional text."""

    def parse_response(self, response: str, context: NotAFunctionContext) -> List[BlockPatch]:
        data = extract_json_array(response, bare_first=True)
        if not data:
            return []
        patches = [BlockPatch.from_dict(item) for item in data]
        return [p for p in patches if p is not None]
