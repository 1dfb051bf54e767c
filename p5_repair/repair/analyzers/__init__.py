"""
Analyzers - pure text analysis over the document and its embedded blocks.
"""

from .blocks import (
    EmbeddedBlock,
    extract_scripts,
    extract_styles,
    has_style_tag,
    replace_block_contents,
)
from .block_boundary import BlockSpan, comment_out_block, find_code_block
from .css_analyzer import CssValidationResult, is_likely_css, validate_css
from .delimiters import SHADER_MARKERS, detect_paren_issues, is_shader_source
from .scope_analyzer import ConditionalDeclaration, check_conditional_declaration

__all__ = [
    "EmbeddedBlock",
    "extract_scripts",
    "extract_styles",
    "has_style_tag",
    "replace_block_contents",
    "BlockSpan",
    "comment_out_block",
    "find_code_block",
    "CssValidationResult",
    "is_likely_css",
    "validate_css",
    "SHADER_MARKERS",
    "detect_paren_issues",
    "is_shader_source",
    "ConditionalDeclaration",
    "check_conditional_declaration",
]
