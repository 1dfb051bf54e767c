"""
Orchestrator module - composes the repair passes into one pipeline.
"""

from .pipeline import BACKUP_SUFFIX, RepairPipeline, create_default_pipeline

__all__ = [
    "BACKUP_SUFFIX",
    "RepairPipeline",
    "create_default_pipeline",
]
