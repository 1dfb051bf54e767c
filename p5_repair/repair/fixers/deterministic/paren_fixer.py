"""
Deterministic parenthesis patcher.

Used when the suggestion oracle is unavailable or produced nothing usable.

- missing-close: a ``)`` is inserted where the unclosed call ends, i.e.
  before the first ``;``, ``{`` or ``}`` that follows it at its own
  nesting depth (or at the end of the script, before trailing
  whitespace). ``createFish(p.random(3);`` becomes
  ``createFish(p.random(3));``.
- extra-close: the stray ``)`` is replaced by an inert comment so columns
  after it do not collapse.

Issues are applied from the highest offset down, so no running offset is
needed and earlier offsets stay valid.
"""

import logging
from typing import List, Optional, Tuple

from ...analyzers.delimiters import detect_paren_issues
from ...contracts.issues import ParenIssue, ParenIssueKind

logger = logging.getLogger(__name__)


# Contains no parenthesis so a second scan does not see it again
EXTRA_CLOSE_MARKER = "/* removed extra paren */"

STATEMENT_TERMINATORS = (";", "{", "}")


def find_close_position(source: str, open_index: int) -> int:
    """
    Where to insert the ``)`` closing the paren at ``open_index``.

    Scans forward tracking nested parens; stops at the first statement
    terminator at depth zero. Whitespace before that point is skipped
    backwards so the paren hugs the expression.
    """
    depth = 0
    position = len(source)
    for i in range(open_index + 1, len(source)):
        char = source[i]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char in STATEMENT_TERMINATORS and depth <= 0:
            position = i
            break

    while position > open_index + 1 and source[position - 1].isspace():
        position -= 1
    return position


def apply_paren_fixes(source: str, issues: Optional[List[ParenIssue]] = None) -> Tuple[str, int]:
    """
    Patch every delimiter issue in ``source``.

    Args:
        source: Script content
        issues: Pre-computed issues (detected from ``source`` when omitted)

    Returns:
        (patched source, number of issues fixed)
    """
    if issues is None:
        issues = detect_paren_issues(source)
    if not issues:
        return source, 0

    fixed = source
    for issue in sorted(issues, key=lambda i: i.index, reverse=True):
        if issue.kind is ParenIssueKind.MISSING_CLOSE:
            at = find_close_position(fixed, issue.index)
            fixed = fixed[:at] + ")" + fixed[at:]
        else:
            fixed = fixed[:issue.index] + EXTRA_CLOSE_MARKER + fixed[issue.index + 1:]

    logger.info(f"Fixed {len(issues)} parenthesis issue(s) using basic method")
    return fixed, len(issues)
