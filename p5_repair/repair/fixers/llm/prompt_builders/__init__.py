"""
Prompt builders for suggestion-assisted repairs.
"""

from .base import PromptBuilder, numbered_context
from .css_prompt_builder import CSSPromptBuilder, CssContext, CssSuggestion, NO_CHANGES_SENTINEL
from .js_prompt_builder import (
    NotAFunctionContext,
    NotAFunctionPromptBuilder,
    ParenContext,
    ParenPromptBuilder,
    UndefinedVariableContext,
    UndefinedVariablePromptBuilder,
)
from .resource_prompt_builder import CdnContext, CdnPromptBuilder, ShaderContext, ShaderPromptBuilder

__all__ = [
    "PromptBuilder",
    "numbered_context",
    "CSSPromptBuilder",
    "CssContext",
    "CssSuggestion",
    "NO_CHANGES_SENTINEL",
    "NotAFunctionContext",
    "NotAFunctionPromptBuilder",
    "ParenContext",
    "ParenPromptBuilder",
    "UndefinedVariableContext",
    "UndefinedVariablePromptBuilder",
    "CdnContext",
    "CdnPromptBuilder",
    "ShaderContext",
    "ShaderPromptBuilder",
]
