"""
Monitoring Module - structured observability for repair runs.

    from p5_repair.ai.monitoring import RepairLogger

    sink = RepairLogger(run_id="sketch.html")
    sink.log_fix("parentheses", "line 12", "inserted missing )")
"""

from p5_repair.ai.monitoring.logger import RepairLogger

__all__ = ["RepairLogger"]
