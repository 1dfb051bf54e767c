"""
Balanced-delimiter detection for script bodies.

A plain stack scan over ``(`` and ``)``. Strings, comments and regex
literals are not skipped: parentheses inside them are counted like any
other. Shader sources are exempt entirely because GLSL embedded in
template strings would make the scan misfire.
"""

import logging
from typing import List

from ..contracts.issues import ParenIssue, ParenIssueKind

logger = logging.getLogger(__name__)


# Case-sensitive substrings that identify GPU shader code
SHADER_MARKERS = (
    "ShaderMaterial",
    "vertexShader",
    "fragmentShader",
    "gl_FragColor",
    "uniform ",
    "varying ",
)


def is_shader_source(source: str) -> bool:
    """True if ``source`` contains any shader marker."""
    return any(marker in source for marker in SHADER_MARKERS)


def detect_paren_issues(source: str) -> List[ParenIssue]:
    """
    Find unbalanced parentheses.

    Args:
        source: Script content

    Returns:
        Issues in ascending index order. Every extra-close precedes every
        missing-close (an unmatched ``(`` before a stray ``)`` would have
        matched it). Empty for shader sources.
    """
    if is_shader_source(source):
        logger.debug("Skipping parenthesis detection for shader content")
        return []

    stack: List[int] = []
    issues: List[ParenIssue] = []

    for index, char in enumerate(source):
        if char == "(":
            stack.append(index)
        elif char == ")":
            if stack:
                stack.pop()
            else:
                issues.append(ParenIssue(ParenIssueKind.EXTRA_CLOSE, index))

    issues.extend(ParenIssue(ParenIssueKind.MISSING_CLOSE, index) for index in stack)
    return issues
