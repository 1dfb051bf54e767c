"""
Block-boundary inference.

Given a line implicated in an error, find the statement or block that
encloses it so the whole span can be commented out without leaving a
dangling brace or paren.

This is a textual heuristic. Braces and parens inside strings, comments
and template literals are counted, so nested template-literal braces can
defeat it. Callers must validate any replacement they build from the
span (every line a ``//`` comment, the replaced lines balanced) before
accepting it.
"""

from dataclasses import dataclass
from typing import List


CONTINUATION_SUFFIXES = ("(", "{", ".", "=>", "&&", "||", "?", ":")

CONTROL_OPENERS = ("if ", "for ", "while ", "function ", " => ", "try ", "catch ", "else ")


@dataclass(frozen=True)
class BlockSpan:
    """Inclusive 0-based line range."""

    start_line: int
    end_line: int

    def display(self) -> tuple:
        """1-based range for prompts and logs."""
        return (self.start_line + 1, self.end_line + 1)

    def contains(self, index: int) -> bool:
        return self.start_line <= index <= self.end_line

    def overlaps(self, other: "BlockSpan") -> bool:
        return self.start_line <= other.end_line and other.start_line <= self.end_line

    def __len__(self) -> int:
        return self.end_line - self.start_line + 1


def _continues_into_next(line: str) -> bool:
    stripped = line.strip()
    if stripped.endswith(CONTINUATION_SUFFIXES):
        return True
    return any(opener in stripped for opener in CONTROL_OPENERS)


def _is_balanced(span_lines: List[str]) -> bool:
    text = "\n".join(span_lines)
    return text.count("{") == text.count("}") and text.count("(") == text.count(")")


def find_code_block(lines: List[str], index: int) -> BlockSpan:
    """
    Infer the span enclosing ``lines[index]``.

    1. Walk backwards while the previous line continues into this one
       (trailing operator/opener, or a control-structure keyword).
    2. Count braces and parens from the start through ``index``; while
       either is unbalanced, extend forward until both balance.
    3. If that leaves a single line containing a call, widen to the
       nearest statement terminators instead.
    4. A span whose own braces or parens do not balance is dropped in
       favour of the target line alone.

    Args:
        lines: Script lines
        index: 0-based line index

    Returns:
        BlockSpan with ``start_line <= index <= end_line``
    """
    if not 0 <= index < len(lines):
        raise IndexError(f"line index {index} out of range")

    start = index
    for i in range(index - 1, -1, -1):
        if _continues_into_next(lines[i]):
            start = i
        else:
            break

    end = index
    segment = "\n".join(lines[start:index + 1])
    braces = segment.count("{") - segment.count("}")
    parens = segment.count("(") - segment.count(")")

    if braces > 0 or parens > 0:
        for i in range(index + 1, len(lines)):
            braces += lines[i].count("{") - lines[i].count("}")
            parens += lines[i].count("(") - lines[i].count(")")
            end = i
            if braces == 0 and parens == 0:
                break

    if start == end:
        line = lines[index].strip()
        if "(" in line and ")" in line:
            for i in range(index - 1, -1, -1):
                if lines[i].strip().endswith((";", "{", "}")):
                    start = i + 1
                    break
            for i in range(index, len(lines)):
                if lines[i].strip().endswith((";", "}")):
                    end = i
                    break

    if not _is_balanced(lines[start:end + 1]):
        start = end = index

    return BlockSpan(start, end)


def comment_out_block(lines: List[str], span: BlockSpan, reference: str) -> str:
    """
    Mechanical comment-out replacement for ``span``.

    The first line names the missing function; every original line
    follows behind ``// ``.
    """
    body = [f"// {line}" for line in lines[span.start_line:span.end_line + 1]]
    header = f"// ERROR: Block commented out due to missing function {reference}"
    return "\n".join([header] + body)
