"""
Resource prompt builders - external script tags and shader materials.

Both answers are a single replacement snippet rather than a patch list.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..response_parser import extract_code_block
from .base import PromptBuilder


CDN_SYSTEM_PROMPT = (
    "You are an expert web developer. When given a broken script tag and error, provide only "
    "the corrected script tag with no additional explanation."
)

SHADER_SYSTEM_PROMPT = (
    "You are an expert in THREE.js and GLSL shader programming. Fix shader syntax errors and "
    "return only the corrected code block."
)

SCRIPT_TAG_PATTERN = re.compile(r"<script[^>]*>[^<]*</script>")


@dataclass
class CdnContext:
    """A script tag whose resource failed to load."""

    tag: str
    src: str
    error: str


class CdnPromptBuilder(PromptBuilder):
    """Asks for a corrected ``<script src=...></script>`` tag."""

    max_tokens = 256

    @property
    def system_prompt(self) -> str:
        return CDN_SYSTEM_PROMPT

    def build(self, context: CdnContext) -> str:
        return f"""I need to fix this script tag that's failing to load:

`{context.tag}`

The error is: "{context.error}"

Please provide a working replacement for this script tag. The most common issues are:
1. Typo in the URL
2. Using incorrect CDN domain
3. Incorrect package name (e.g., "p@1.8.0" instead of "p5@1.8.0")
4. Missing or invalid version number
5. Malformed URL syntax

Give me ONLY the full corrected script tag with no explanation."""

    def parse_response(self, response: str, context: CdnContext) -> Optional[str]:
        """The first complete script tag in the answer, if it differs."""
        match = SCRIPT_TAG_PATTERN.search(response or "")
        if not match or match.group(0) == context.tag:
            return None
        return match.group(0)


@dataclass
class ShaderContext:
    """A ShaderMaterial constructor block and the compile errors."""

    block: str
    error: str


class ShaderPromptBuilder(PromptBuilder):
    """Asks for the whole corrected ``new THREE.ShaderMaterial({...})`` block."""

    max_tokens = 2048

    @property
    def system_prompt(self) -> str:
        return SHADER_SYSTEM_PROMPT

    def build(self, context: ShaderContext) -> str:
        return f"""Fix the syntax errors in this THREE.ShaderMaterial block. The browser reports this shader compilation error:

{context.error}

Here's the ShaderMaterial code with syntax issues:

```javascript
{context.block}
```

IMPORTANT: Return ONLY the complete, corrected ShaderMaterial block with all syntax errors fixed. Do not add explanations or additional code."""

    def parse_response(self, response: str, context: ShaderContext) -> Optional[str]:
        """Fenced code if present, else the whole answer. None when unchanged."""
        text = (response or "").strip()
        fixed = extract_code_block(text, languages=("javascript", "js")) or text
        if not fixed or fixed == context.block:
            return None
        return fixed
