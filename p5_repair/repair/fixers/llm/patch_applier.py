"""
LinePatchApplier - applies oracle-suggested line patches to a script.

Each patch is verified against the current line before it is applied:

1. exact: ``original`` is a substring of the line -> replace it in place
2. fuzzy: similarity(line, original) > threshold -> overwrite the line
3. heuristic: the line carries a known delimiter issue -> insert or strip
   a ``)`` directly

Patches that pass none of these, or that point outside the script, are
recorded as failed and logged. They never abort the run.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from p5_repair.core.config import settings

from ...contracts.issues import ParenIssue, ParenIssueKind
from ...contracts.patches import LinePatch
from ...validators.error_classifier import char_index_to_position

logger = logging.getLogger(__name__)


LAST_CLOSE_PAREN = re.compile(r"\)([^)]*$)")


def string_similarity(first: str, second: str) -> float:
    """
    Character-overlap similarity in ``[0, 1]``.

    Counts the characters of the shorter string that occur anywhere in
    the longer one and divides by the longer string's length. Order and
    repetition are ignored, so short or repetitive lines can over-match.
    Two empty strings are identical (1.0).
    """
    longer, shorter = (first, second) if len(first) > len(second) else (second, first)
    if not longer:
        return 1.0
    matches = sum(1 for char in shorter if char in longer)
    return matches / len(longer)


@dataclass
class ApplyResult:
    """Result of applying line patches."""

    success: bool
    """True if at least one patch was applied."""

    content: str
    """The patched script (or the original if nothing applied)."""

    applied: List[LinePatch] = field(default_factory=list)
    """Patches that were applied."""

    failed: List[Tuple[LinePatch, str]] = field(default_factory=list)
    """Patches that were skipped, with the reason."""

    @property
    def fix_count(self) -> int:
        return len(self.applied)

    def describe(self) -> str:
        """Generate human-readable description."""
        lines = [f"Applied: {len(self.applied)}, Failed: {len(self.failed)}"]
        for patch in self.applied:
            lines.append(f"  + {patch.describe()}")
        for patch, reason in self.failed:
            lines.append(f"  - {patch.describe()}: {reason}")
        return "\n".join(lines)


def heuristic_line_fix(line: str, kind: ParenIssueKind) -> str:
    """
    Type-directed repair of a single line.

    missing-close: ``)`` before the first ``;``, or appended when the line
    does not end in ``;``. extra-close: the last ``)`` is removed.
    """
    if kind is ParenIssueKind.MISSING_CLOSE:
        if not line.strip().endswith(";"):
            return line + ")"
        return line.replace(";", ");", 1)
    return LAST_CLOSE_PAREN.sub(r"\1", line, count=1)


class LinePatchApplier:
    """
    Applies LinePatch objects with exact, fuzzy, then heuristic matching.

    Usage:
        applier = LinePatchApplier()
        result = applier.apply(script, patches, issues)
        print(result.describe())
    """

    def __init__(self, threshold: Optional[float] = None):
        """
        Args:
            threshold: Fuzzy-match threshold, compared with strict ``>``
        """
        self.threshold = settings.FUZZY_MATCH_THRESHOLD if threshold is None else threshold

    def apply(
        self,
        source: str,
        patches: List[LinePatch],
        issues: Optional[List[ParenIssue]] = None,
    ) -> ApplyResult:
        """
        Apply patches in order.

        Args:
            source: Script content
            patches: Suggested patches (1-based line numbers)
            issues: Delimiter issues detected in ``source``, for the
                heuristic fallback

        Returns:
            ApplyResult with the patched content
        """
        lines = source.split("\n")
        issue_kinds = self._issue_kinds_by_line(source, issues or [])
        applied: List[LinePatch] = []
        failed: List[Tuple[LinePatch, str]] = []

        for patch in patches:
            index = patch.line_number - 1
            if not 0 <= index < len(lines):
                failed.append((patch, "line number out of range"))
                logger.warning(f"Invalid line number in suggested fix: {patch.line_number}")
                continue

            current = lines[index]
            if patch.original and patch.original in current:
                lines[index] = current.replace(patch.original, patch.fixed, 1)
                applied.append(patch)
                logger.info(f"Fixed line {patch.line_number}: {patch.explanation or 'applied suggested fix'}")
                continue

            similarity = string_similarity(current, patch.original)
            if similarity > self.threshold:
                lines[index] = patch.fixed
                applied.append(patch)
                logger.info(f"Fixed line {patch.line_number} (fuzzy match, similarity {similarity:.2f})")
                continue

            kind = issue_kinds.get(patch.line_number)
            if kind is not None:
                lines[index] = heuristic_line_fix(current, kind)
                applied.append(patch)
                logger.info(f"Fixed line {patch.line_number}: {kind.description.lower()} (fallback method)")
                continue

            failed.append((patch, f"original text not found (similarity {similarity:.2f})"))
            logger.warning(f"Couldn't apply fix to line {patch.line_number}: original string not found")

        return ApplyResult(
            success=bool(applied),
            content="\n".join(lines) if applied else source,
            applied=applied,
            failed=failed,
        )

    @staticmethod
    def _issue_kinds_by_line(source: str, issues: List[ParenIssue]) -> Dict[int, ParenIssueKind]:
        """First issue kind on each 1-based line."""
        kinds: Dict[int, ParenIssueKind] = {}
        for issue in issues:
            line, _ = char_index_to_position(source, issue.index)
            kinds.setdefault(line, issue.kind)
        return kinds
