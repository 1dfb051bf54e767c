"""
Validators - classification of page-execution events.
"""

from .error_classifier import (
    ErrorClassifier,
    char_index_to_position,
    deduplicate_events,
    extract_function_refs,
    extract_line_number,
    extract_url_from_message,
    extract_variable_name,
)

__all__ = [
    "ErrorClassifier",
    "char_index_to_position",
    "deduplicate_events",
    "extract_function_refs",
    "extract_line_number",
    "extract_url_from_message",
    "extract_variable_name",
]
