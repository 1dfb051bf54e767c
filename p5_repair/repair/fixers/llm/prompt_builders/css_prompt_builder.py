"""
CSSPromptBuilder - asks for a complete corrected ``<style>`` body.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from ..response_parser import extract_code_block
from .base import PromptBuilder


CSS_SYSTEM_PROMPT = (
    "You are an expert CSS developer who specializes in fixing syntax errors in CSS code. "
    "You provide complete, fixed CSS code that maintains the original styling intent while "
    "fixing all syntax issues. You only make changes when actual errors exist."
)

NO_CHANGES_SENTINEL = "NO_CHANGES_NEEDED"

# Lines opening with a character no selector, declaration or brace starts with
NON_CSS_LINE = re.compile(r"^(?![\s{}.#a-zA-Z0-9@*:-]).+$\n?", re.MULTILINE)


@dataclass
class CssContext:
    """One style body and the validator's findings."""

    css: str
    details: List[str]


@dataclass
class CssSuggestion:
    """Parsed CSS answer."""

    css: Optional[str] = None
    """Cleaned CSS, when the answer contained any."""

    no_changes: bool = False
    """The oracle answered with the no-changes sentinel."""

    @property
    def usable(self) -> bool:
        return self.no_changes or self.css is not None


class CSSPromptBuilder(PromptBuilder):
    """Line-numbered CSS in, full CSS (or the sentinel) out."""

    @property
    def system_prompt(self) -> str:
        return CSS_SYSTEM_PROMPT

    def build(self, context: CssContext) -> str:
        numbered = "\n".join(
            f"{i:>3}: {line}" for i, line in enumerate(context.css.split("\n"), start=1)
        )
        return f"""I have CSS code in a style tag with potential syntax issues. Please help me fix these issues.

Here's the CSS content:
```css
{numbered}
```

Detected issues: {", ".join(context.details)}

IMPORTANT INSTRUCTIONS:
1. FIX ONLY ACTUAL SYNTAX ERRORS. If the CSS is already correct, say "{NO_CHANGES_SENTINEL}".
2. Fix syntax errors (missing semicolons, properties, invalid values, etc.)
3. Keep the same selectors and general styling intent
4. Provide the COMPLETE fixed CSS block
5. Do not add new styles or remove intentional styles
6. Format the CSS consistently
7. If a property is missing a name before the colon, use an appropriate property name based on context

RESPOND WITH JUST THE FIXED CSS CONTENT, starting with the first selector and ending with the last closing brace. If no changes are needed, just respond with "{NO_CHANGES_SENTINEL}"."""

    def parse_response(self, response: str, context: CssContext) -> CssSuggestion:
        text = (response or "").strip()
        if text == NO_CHANGES_SENTINEL:
            return CssSuggestion(no_changes=True)
        if "{" not in text and "}" not in text:
            return CssSuggestion()

        css = extract_code_block(text, languages=("css",)) or text
        css = NON_CSS_LINE.sub("", css).strip()
        return CssSuggestion(css=css)
