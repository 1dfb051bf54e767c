"""
CSS heuristics: "is this text CSS?" and "is this style block malformed?".

Both are shape checks on raw text, not a CSS parser. The malformed-CSS
validator deliberately errs towards "valid": a block showing a normal
selector, a named property and a property:value pair is not flagged when
only a single problem was found.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


# is_likely_css
PROPERTY_PATTERN = re.compile(r"[a-zA-Z-]+\s*:\s*[^;{}]+(;|\})")
RULE_PATTERN = re.compile(r"[a-zA-Z#.][^{]*\{[^}]*\}")
CODE_PATTERN = re.compile(r"function |var |const |let |return |if \(|else |for \(|while \(")
COMMON_PROPERTY_PATTERN = re.compile(
    r"(margin|padding|background|color|font|width|height|position|display)"
)
SHORT_TEXT_LIMIT = 100

# validate_css
SELECTORLESS_PROPERTY = re.compile(r"^\s*[a-zA-Z0-9_-]+\s*:")
NAMELESS_VALUE = re.compile(r"^\s*:\s+[^;]+;", re.MULTILINE)
NAMELESS_VALUE_IN_RULE = re.compile(r"\{[^}]*?\n\s*:[^;]+;")
VALID_SELECTOR = re.compile(r"[a-zA-Z0-9_\-#.:]+ \{")
VALID_PROPERTY = re.compile(r"\s+[a-zA-Z0-9_\-]+\s*:")
VALID_VALUE = re.compile(r":[^;]+;")


def is_likely_css(text: str) -> bool:
    """
    Heuristic CSS predicate.

    True when the text has a ``property: value;`` (or ``...}``) pair, a
    ``selector { ... }`` rule, and no imperative-code tokens. Texts under
    100 characters must also mention a common property name.
    """
    has_properties = PROPERTY_PATTERN.search(text) is not None
    has_rules = RULE_PATTERN.search(text) is not None
    looks_like_code = CODE_PATTERN.search(text) is not None

    if len(text) < SHORT_TEXT_LIMIT:
        has_common = COMMON_PROPERTY_PATTERN.search(text) is not None
        return has_properties and has_rules and has_common and not looks_like_code

    return has_properties and has_rules and not looks_like_code


@dataclass
class CssValidationResult:
    """Outcome of validate_css."""

    has_errors: bool
    """True if the block should be repaired."""

    details: List[str] = field(default_factory=list)
    """Human-readable findings (kept even when suppressed)."""

    suppressed: bool = False
    """True when findings were overridden as a likely false positive."""


def _next_non_empty(lines: List[str], index: int) -> Optional[str]:
    for line in lines[index + 1:]:
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def _is_comment(line: str) -> bool:
    return line.startswith("/*") or line.endswith("*/") or line.startswith("//")


def validate_css(content: str) -> CssValidationResult:
    """
    Heuristic well-formedness check for the body of a <style> element.

    Args:
        content: CSS text

    Returns:
        CssValidationResult listing every finding
    """
    details: List[str] = []

    if SELECTORLESS_PROPERTY.match(content):
        details.append("Found property declaration without selector")

    open_braces = content.count("{")
    close_braces = content.count("}")
    if open_braces != close_braces:
        details.append(f"Unbalanced braces: {open_braces} opening vs {close_braces} closing")

    if NAMELESS_VALUE.search(content):
        details.append("Found property value without property name")

    if NAMELESS_VALUE_IN_RULE.search(content):
        details.append("Found property with missing name")

    lines = content.split("\n")
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if (
            line
            and not line.startswith(("{", "}", "@"))
            and "::" not in line
            and "@media" not in line
            and "@supports" not in line
            and line.count(":") > 1
        ):
            details.append(f"Multiple colons in property at line {number}: {line}")

        if "(" in line and ");" in line and not line.endswith(");"):
            details.append(f"Possible misplaced semicolon in function call at line {number}: {line}")

    in_rule = False
    rule_has_errors = False
    for i, raw in enumerate(lines):
        line = raw.strip()
        if not line:
            continue
        if "{" in line:
            in_rule = True
            rule_has_errors = False
        elif "}" in line:
            if rule_has_errors:
                details.append(f"Rule ending at line {i + 1} has property syntax errors")
            in_rule = False
            rule_has_errors = False
        elif in_rule and not _is_comment(line):
            if ":" not in line:
                rule_has_errors = True
            following = _next_non_empty(lines, i)
            if following and "}" not in following and not line.endswith(";"):
                rule_has_errors = True

    has_errors = bool(details)
    suppressed = False
    if (
        has_errors
        and len(details) <= 1
        and VALID_SELECTOR.search(content)
        and VALID_PROPERTY.search(content)
        and VALID_VALUE.search(content)
    ):
        logger.debug(f"Ignoring potential false positive in CSS validation: {details[0]}")
        has_errors = False
        suppressed = True

    return CssValidationResult(has_errors=has_errors, details=details, suppressed=suppressed)
