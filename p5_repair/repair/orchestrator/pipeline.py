"""
RepairPipeline - runs every repair pass over one document.

Passes run strictly in order, each reading the text the previous one
produced. A pass that raises contributes zero fixes and the run goes on.
A pass flagged ``preempts_remaining`` that applies a fix ends the run.

Usage:
    pipeline = RepairPipeline()
    report = await pipeline.run(html)
    print(report.describe())

    # Or, for a file on disk (writes <path>.backup first)
    report = await pipeline.process_file("sketch.html")
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

from p5_repair.ai.monitoring import RepairLogger

from ..contracts.results import PassResult, RepairReport
from ..fixers.llm.suggestion import ProviderSuggestionOracle, SuggestionOracle
from ..passes import RepairPass, default_passes
from ..sandbox.page_executor import PageExecutor, PlaywrightPageExecutor

logger = logging.getLogger("p5_repair.repair.pipeline")


BACKUP_SUFFIX = ".backup"


class RepairPipeline:
    """
    Ordered sequence of repair passes sharing one oracle pair and sink.

    Components are created lazily so tests can inject fakes without
    touching Playwright or any provider SDK.
    """

    def __init__(
        self,
        passes: Optional[List[RepairPass]] = None,
        oracle: Optional[SuggestionOracle] = None,
        executor: Optional[PageExecutor] = None,
        sink: Optional[RepairLogger] = None,
    ):
        """
        Args:
            passes: Passes in run order (default: every pass)
            oracle: Suggestion oracle (default: ProviderSuggestionOracle)
            executor: Page executor (default: PlaywrightPageExecutor)
            sink: Structured event sink shared by all passes
        """
        self._passes = passes
        self._oracle = oracle
        self._executor = executor
        self.sink = sink or RepairLogger()

    def _get_oracle(self) -> SuggestionOracle:
        """Get or create the suggestion oracle."""
        if self._oracle is None:
            self._oracle = ProviderSuggestionOracle()
        return self._oracle

    def _get_executor(self) -> PageExecutor:
        """Get or create the page executor."""
        if self._executor is None:
            self._executor = PlaywrightPageExecutor()
        return self._executor

    @property
    def passes(self) -> List[RepairPass]:
        if self._passes is None:
            self._passes = default_passes()
        return self._passes

    async def run(self, html: str) -> RepairReport:
        """
        Run every pass over ``html``.

        Args:
            html: Document text

        Returns:
            RepairReport with the final text and per-pass results
        """
        report = RepairReport(original_html=html, html=html)
        oracle = self._get_oracle()
        executor = self._get_executor()
        current = html

        for repair_pass in self.passes:
            repair_pass.bind(oracle=oracle, executor=executor, sink=self.sink)

            if report.preempted_by:
                report.passes.append(PassResult(name=repair_pass.name, html=current, skipped=True))
                continue

            logger.info(f"Running pass: {repair_pass.name}")
            result = await self._run_guarded(repair_pass, current)
            report.passes.append(result)
            current = result.html

            if result.fix_count and repair_pass.preempts_remaining:
                logger.info(f"{repair_pass.name} fixes applied - skipping remaining passes")
                report.preempted_by = repair_pass.name

        report.html = current
        self.sink.log_run_summary(report.total_fixes, report.per_pass)
        logger.info(report.describe())
        return report

    async def _run_guarded(self, repair_pass: RepairPass, html: str) -> PassResult:
        start = time.time()
        try:
            return await repair_pass.run(html)
        except Exception as e:
            duration_ms = (time.time() - start) * 1000
            logger.exception(f"Pass {repair_pass.name} failed: {e}")
            self.sink.log_pass_completed(repair_pass.name, 0, duration_ms, error=str(e))
            return PassResult(
                name=repair_pass.name,
                html=html,
                error=str(e),
                duration_ms=duration_ms,
            )

    async def process_file(self, path: Union[str, Path]) -> RepairReport:
        """
        Repair a file in place.

        ``<path>.backup`` is always written first. The file itself is
        rewritten only when at least one fix was applied.

        Raises:
            FileNotFoundError: if ``path`` does not exist
        """
        path = Path(path)
        original = path.read_text(encoding="utf-8")

        backup = path.with_name(path.name + BACKUP_SUFFIX)
        backup.write_text(original, encoding="utf-8")
        logger.info(f"Backup created at: {backup}")

        report = await self.run(original)

        if report.total_fixes > 0:
            path.write_text(report.html, encoding="utf-8")
            logger.info(f"Fixed {report.total_fixes} issues in {path}")
        else:
            logger.info(f"No issues found in {path}")

        return report


def create_default_pipeline(
    oracle: Optional[SuggestionOracle] = None,
    executor: Optional[PageExecutor] = None,
    sink: Optional[RepairLogger] = None,
) -> RepairPipeline:
    """Pipeline with every pass in the standard order."""
    return RepairPipeline(passes=default_passes(), oracle=oracle, executor=executor, sink=sink)
