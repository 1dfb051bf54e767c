"""
Repair passes, in pipeline order.

Usage:
    from p5_repair.repair.passes import default_passes

    for repair_pass in default_passes():
        result = await repair_pass.run(html)
        html = result.html
"""

from typing import List

from .base import RepairPass
from .cdn_pass import CdnPass
from .css_pass import CssPass
from .markup_pass import MarkupPass, StyleTagPass
from .not_a_function_pass import NotAFunctionPass
from .parenthesis_pass import ParenthesisPass
from .shader_pass import ShaderPass
from .undefined_variable_pass import UndefinedVariablePass


PASS_ORDER = (
    MarkupPass,
    StyleTagPass,
    CdnPass,
    NotAFunctionPass,
    CssPass,
    UndefinedVariablePass,
    ParenthesisPass,
    ShaderPass,
)


def default_passes() -> List[RepairPass]:
    """One fresh instance of every pass, in pipeline order."""
    return [pass_class() for pass_class in PASS_ORDER]


__all__ = [
    "RepairPass",
    "CdnPass",
    "CssPass",
    "MarkupPass",
    "StyleTagPass",
    "NotAFunctionPass",
    "ParenthesisPass",
    "ShaderPass",
    "UndefinedVariablePass",
    "PASS_ORDER",
    "default_passes",
]
