"""
Scope analysis for undefined-variable errors.

Detects the common sketch bug where a variable is declared only inside
an ``if``/loop/``try`` body and then used from ``draw()`` or elsewhere
after that body did not run. Brace nesting is tracked character by
character. Each ``{`` is tagged with the control keyword that opened it
(or none, for functions, object literals and plain blocks).
"""

import re
from dataclasses import dataclass
from typing import List, Optional

CONDITIONAL_KEYWORDS = ("if", "else", "for", "while", "switch", "try", "catch")

KEYWORD_PATTERN = re.compile(r"\b(if|else|for|while|switch|try|catch|function|class)\b")


@dataclass(frozen=True)
class ConditionalDeclaration:
    """Where a conditionally-executed declaration was found."""

    line_number: int
    """1-based line within the script."""

    line: str
    block_type: str
    """Innermost conditional keyword enclosing the declaration."""


def _declaration_pattern(name: str) -> re.Pattern:
    return re.compile(rf"\b(var|let|const)\s+{re.escape(name)}(?![\w$])")


def check_conditional_declaration(code: str, name: str) -> Optional[ConditionalDeclaration]:
    """
    Find a ``var``/``let``/``const`` declaration of ``name`` that sits
    inside a conditional, loop or try/catch body.

    Args:
        code: Script content
        name: Identifier reported as undefined

    Returns:
        The first such declaration, or None
    """
    declaration = _declaration_pattern(name)
    # One entry per open brace: the opening keyword, or None
    stack: List[Optional[str]] = []
    pending: Optional[str] = None
    paren_depth = 0

    for number, line in enumerate(code.split("\n"), start=1):
        decl_match = declaration.search(line)
        decl_at = decl_match.start() if decl_match else -1

        keywords = {m.start(): m.group(1) for m in KEYWORD_PATTERN.finditer(line)}

        for col, char in enumerate(line):
            if col == decl_at:
                enclosing = [kind for kind in stack if kind in CONDITIONAL_KEYWORDS]
                if enclosing:
                    return ConditionalDeclaration(
                        line_number=number,
                        line=line,
                        block_type=enclosing[-1],
                    )
            if col in keywords:
                pending = keywords[col]
            elif char == "{":
                stack.append(pending)
                pending = None
            elif char == "}":
                if stack:
                    stack.pop()
            elif char == "(":
                paren_depth += 1
            elif char == ")":
                paren_depth = max(0, paren_depth - 1)
            elif char == ";" and paren_depth == 0:
                # Braceless bodies (`if (x) y = 1;`) end here
                pending = None

    return None
