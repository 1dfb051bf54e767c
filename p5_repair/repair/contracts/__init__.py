"""
Contracts - data types shared by detectors, patchers and passes.
"""

from .events import ErrorEvent, EventType
from .issues import (
    CssIssue,
    NotAFunctionIssue,
    ParenIssue,
    ParenIssueKind,
    UndefinedVariableIssue,
)
from .patches import BlockPatch, LinePatch
from .results import PassResult, RepairReport

__all__ = [
    "ErrorEvent",
    "EventType",
    "CssIssue",
    "NotAFunctionIssue",
    "ParenIssue",
    "ParenIssueKind",
    "UndefinedVariableIssue",
    "BlockPatch",
    "LinePatch",
    "PassResult",
    "RepairReport",
]
