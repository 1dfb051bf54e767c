"""
p5 repair engine.

Detects common defects in self-contained p5.js / THREE.js pages and
applies targeted textual patches, asking a suggestion oracle first where
one helps and falling back to local heuristics otherwise.

Usage:
    from p5_repair.repair import RepairPipeline

    report = await RepairPipeline().run(html)
"""

from .contracts import PassResult, RepairReport
from .orchestrator import RepairPipeline, create_default_pipeline

__all__ = [
    "PassResult",
    "RepairReport",
    "RepairPipeline",
    "create_default_pipeline",
]
