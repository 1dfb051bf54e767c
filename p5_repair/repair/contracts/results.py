"""
Results - per-pass outcome and the cumulative fix tally.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PassResult:
    """Outcome of running one repair pass over the document."""

    name: str
    """Pass name (``parentheses``, ``css``, ...)."""

    html: str
    """Document after the pass (unchanged when fix_count == 0)."""

    fix_count: int = 0
    """Fixes this pass contributed to the tally."""

    skipped: bool = False
    """True when the pass did not run (pre-empted or not applicable)."""

    error: Optional[str] = None
    """Exception text if the pass aborted."""

    duration_ms: float = 0.0

    @property
    def changed(self) -> bool:
        return self.fix_count > 0


@dataclass
class RepairReport:
    """
    Result of a full pipeline run.

    Example:
        report = await pipeline.run(html)
        if report.total_fixes:
            path.write_text(report.html)
        print(report.describe())
    """

    original_html: str
    html: str
    passes: List[PassResult] = field(default_factory=list)
    preempted_by: Optional[str] = None
    """Name of the pass that stopped the run early, if any."""

    @property
    def total_fixes(self) -> int:
        return sum(p.fix_count for p in self.passes)

    @property
    def per_pass(self) -> Dict[str, int]:
        return {p.name: p.fix_count for p in self.passes if not p.skipped}

    @property
    def errors(self) -> List[str]:
        return [f"{p.name}: {p.error}" for p in self.passes if p.error]

    def fixes_for(self, name: str) -> int:
        return sum(p.fix_count for p in self.passes if p.name == name)

    def describe(self) -> str:
        """Generate human-readable description."""
        if not self.total_fixes:
            return "No issues found"
        parts = [f"{count} {name}" for name, count in self.per_pass.items() if count]
        return f"Fixed {self.total_fixes} issues ({', '.join(parts)})"
