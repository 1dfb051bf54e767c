"""
Repair Logger - Structured logging for repair runs.

Every pass reports what it did through this sink: fixes applied,
suggestions skipped, oracle round trips, and the final tally. Records
are emitted as one JSON object per line on the ``p5_repair.repair``
logger and are also kept in memory so callers (tests, the HTTP
endpoint) can inspect them after a run.

Log Format:
==========
Each record includes:
- event name
- run id (for tracing one document through all passes)
- pass name
- timestamp
- event-specific fields

The sink only observes. Nothing in the pipeline reads it back to make
a decision.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from p5_repair.ai.providers.base import AIResponse

logger = logging.getLogger("p5_repair.repair.events")


class RepairLogger:
    """
    Structured logger for repair operations.

    Usage:
        sink = RepairLogger(run_id="sketch.html")

        sink.log_fix("parentheses", "line 12", "inserted missing )")
        sink.log_skip("parentheses", "line 99 out of range")
        sink.log_pass_completed("parentheses", fix_count=1, duration_ms=4.2)

        for record in sink.records:
            print(record["event"])
    """

    def __init__(self, run_id: str = "", keep_records: bool = True):
        """
        Args:
            run_id: Identifier attached to every record
            keep_records: Keep emitted records in ``self.records``
        """
        self._logger = logger
        self.run_id = run_id
        self.keep_records = keep_records
        self.records: List[Dict[str, Any]] = []

    def _emit(self, level: int, label: str, data: Dict[str, Any]) -> None:
        data["run_id"] = self.run_id
        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        if self.keep_records:
            self.records.append(data)
        self._logger.log(level, f"{label}: {json.dumps(data, default=str)}")

    def log_pass_started(self, pass_name: str) -> None:
        self._emit(logging.DEBUG, "Pass Started", {
            "event": "pass_started",
            "pass": pass_name,
        })

    def log_fix(
        self,
        pass_name: str,
        location: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log a single applied fix.

        Args:
            pass_name: Pass that applied the fix
            location: Human-readable location ("line 12", "<head>", a URL)
            description: What changed
            metadata: Additional context
        """
        data = {
            "event": "fix_applied",
            "pass": pass_name,
            "location": location,
            "description": description,
        }
        if metadata:
            data["metadata"] = metadata
        self._emit(logging.INFO, "Fix Applied", data)

    def log_skip(self, pass_name: str, reason: str) -> None:
        """Log a suggestion or patch that was not applied."""
        self._emit(logging.WARNING, "Patch Skipped", {
            "event": "patch_skipped",
            "pass": pass_name,
            "reason": reason,
        })

    def log_pass_completed(
        self,
        pass_name: str,
        fix_count: int,
        duration_ms: float = 0.0,
        error: Optional[str] = None,
    ) -> None:
        """
        Log the outcome of one pass.

        Args:
            pass_name: Pass name
            fix_count: Fixes the pass contributed to the tally
            duration_ms: Wall time of the pass
            error: Exception text if the pass was aborted
        """
        data = {
            "event": "pass_completed",
            "pass": pass_name,
            "fix_count": fix_count,
            "duration_ms": round(duration_ms, 2),
        }
        if error:
            data["error"] = error
        level = logging.ERROR if error else logging.INFO
        self._emit(level, "Pass Completed", data)

    def log_oracle_request(self, pass_name: str, prompt: str, max_tokens: int) -> None:
        self._emit(logging.DEBUG, "Oracle Request", {
            "event": "oracle_request",
            "pass": pass_name,
            "prompt_length": len(prompt),
            "prompt_preview": prompt[:100] + "..." if len(prompt) > 100 else prompt,
            "max_tokens": max_tokens,
        })

    def log_oracle_response(
        self,
        pass_name: str,
        response: Optional[AIResponse] = None,
        content: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Log an oracle round trip.

        Can be called with the provider's AIResponse or with the bare
        text (or error) returned by a suggestion oracle.
        """
        if response:
            data = {
                "event": "oracle_response",
                "pass": pass_name,
                "provider": response.provider.value,
                "model": response.model,
                "success": response.success,
                "latency_ms": round(response.latency_ms, 2),
                "tokens": response.usage.total_tokens,
                "response_length": len(response.content),
            }
            if not response.success:
                data["error"] = response.error
        else:
            data = {
                "event": "oracle_response",
                "pass": pass_name,
                "success": error is None,
                "response_length": len(content) if content else 0,
            }
            if error:
                data["error"] = error
        level = logging.INFO if data["success"] else logging.WARNING
        self._emit(level, "Oracle Response", data)

    def log_run_summary(self, total_fixes: int, per_pass: Dict[str, int]) -> None:
        self._emit(logging.INFO, "Run Summary", {
            "event": "run_summary",
            "total_fixes": total_fixes,
            "per_pass": per_pass,
        })

    def events(self, name: str) -> List[Dict[str, Any]]:
        """Records with ``event == name``."""
        return [r for r in self.records if r["event"] == name]
