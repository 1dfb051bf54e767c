"""
RepairPass - Abstract base class for pipeline passes.

Each pass takes the whole document, returns the whole document plus the
number of fixes it applied, and reports through the shared RepairLogger.
Dependencies (suggestion oracle, page executor, event sink) are bound by
the pipeline before the first run so a pass can also be used alone.

Usage:
    class MyPass(RepairPass):
        name = "my-pass"

        async def repair(self, html: str) -> Tuple[str, int]:
            return html, 0
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from p5_repair.ai.monitoring import RepairLogger

from ..contracts.results import PassResult
from ..fixers.llm.prompt_builders.base import PromptBuilder
from ..fixers.llm.suggestion import SuggestionOracle, SuggestionUnavailable
from ..sandbox.page_executor import PageExecutor


class RepairPass(ABC):
    """
    Abstract base class for repair passes.

    Subclasses must implement:
    - name: Stable identifier used in the tally and logs
    - repair(): Transform the document and count fixes

    A pass that raises is recorded by the pipeline as zero fixes with the
    exception text. Oracle failures are never raised: ``ask()`` turns them
    into ``None`` so the pass can fall back.
    """

    name: str = "pass"

    preempts_remaining: bool = False
    """When True and the pass fixes something, later passes are skipped."""

    def __init__(
        self,
        oracle: Optional[SuggestionOracle] = None,
        executor: Optional[PageExecutor] = None,
        sink: Optional[RepairLogger] = None,
    ):
        self.oracle = oracle
        self.executor = executor
        self.sink = sink or RepairLogger()

    def bind(
        self,
        oracle: Optional[SuggestionOracle] = None,
        executor: Optional[PageExecutor] = None,
        sink: Optional[RepairLogger] = None,
    ) -> "RepairPass":
        """Fill in dependencies the pass was not constructed with."""
        if self.oracle is None:
            self.oracle = oracle
        if self.executor is None:
            self.executor = executor
        if sink is not None:
            self.sink = sink
        return self

    def applies_to(self, html: str) -> bool:
        """Whether the pass should run on this document at all."""
        return True

    @abstractmethod
    async def repair(self, html: str) -> Tuple[str, int]:
        """
        Repair the document.

        Args:
            html: Full document text

        Returns:
            (document, fix_count). The document must be unchanged when
            fix_count is 0.
        """
        pass

    async def run(self, html: str) -> PassResult:
        """Run the pass with timing and sink reporting."""
        if not self.applies_to(html):
            self.sink.log_skip(self.name, "not applicable to document")
            return PassResult(name=self.name, html=html, skipped=True)

        self.sink.log_pass_started(self.name)
        start = time.time()
        fixed, count = await self.repair(html)
        duration_ms = (time.time() - start) * 1000
        if count == 0:
            fixed = html

        self.sink.log_pass_completed(self.name, count, duration_ms)
        return PassResult(name=self.name, html=fixed, fix_count=count, duration_ms=duration_ms)

    async def ask(self, builder: PromptBuilder, context: Any) -> Optional[str]:
        """
        Send one prompt to the oracle.

        Returns:
            Response text, or None when no oracle is bound or it is unavailable
        """
        if self.oracle is None:
            self.sink.log_skip(self.name, "no suggestion oracle configured")
            return None

        prompt = builder.build(context)
        self.sink.log_oracle_request(self.name, prompt, builder.max_tokens)
        try:
            response = await self.oracle.suggest(builder.system_prompt, prompt, builder.max_tokens)
        except SuggestionUnavailable as e:
            self.sink.log_oracle_response(self.name, error=str(e))
            return None

        self.sink.log_oracle_response(self.name, content=response)
        return response

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
