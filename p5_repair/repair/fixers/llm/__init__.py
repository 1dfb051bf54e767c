"""
Suggestion-assisted fixers.

The oracle proposes; the local appliers verify before anything changes.
"""

from .patch_applier import ApplyResult, LinePatchApplier, heuristic_line_fix, string_similarity
from .response_parser import extract_code_block, extract_fields, extract_json_array
from .suggestion import ProviderSuggestionOracle, SuggestionOracle, SuggestionUnavailable

__all__ = [
    "ApplyResult",
    "LinePatchApplier",
    "heuristic_line_fix",
    "string_similarity",
    "extract_code_block",
    "extract_fields",
    "extract_json_array",
    "ProviderSuggestionOracle",
    "SuggestionOracle",
    "SuggestionUnavailable",
]
