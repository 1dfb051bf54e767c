"""
Error-Message Classifier - turn browser error text into Issues.

The page-execution oracle reports raw ErrorEvents from several listeners;
the same fault often arrives twice (as a page error and as a console
error). This module extracts identifiers and line numbers from that text
and deduplicates by ``(identifier, line or 0)``.

All extraction is regex-based and best-effort: an unrecognised message
yields no Issue rather than an exception.

Usage:
    classifier = ErrorClassifier()
    events = await executor.execute(html)

    for issue in classifier.undefined_variables(events):
        print(issue.name, issue.line_number)
"""

import re
from typing import Iterable, List, Optional, Tuple

from ..contracts.events import ErrorEvent, EventType
from ..contracts.issues import NotAFunctionIssue, UndefinedVariableIssue


UNDEFINED_VARIABLE_PATTERN = re.compile(
    r"(?:ReferenceError:|Error:)?\s*([a-zA-Z0-9_$]+) is not defined", re.IGNORECASE
)

# Priority order: plain message, stack-trace prefixed, then every X.Y occurrence
NOT_A_FUNCTION_PATTERN = re.compile(
    r"(?:TypeError: )?([a-zA-Z0-9_$.]+) is not a function", re.IGNORECASE
)
NOT_A_FUNCTION_STACK_PATTERN = re.compile(
    r"(?:SES_UNCAUGHT_EXCEPTION: )?TypeError: ([a-zA-Z0-9_$.]+)\.([a-zA-Z0-9_$]+) is not a function",
    re.IGNORECASE,
)
NOT_A_FUNCTION_GENERIC_PATTERN = re.compile(
    r"([a-zA-Z0-9_$.]+)\.([a-zA-Z0-9_$]+)(?:\(\))? is not (?:a )?function", re.IGNORECASE
)

STACK_LINE_PATTERN = re.compile(r":(\d+):(\d+)")
MESSAGE_LINE_PATTERN = re.compile(r"line\s+(\d+)", re.IGNORECASE)

QUOTED_URL_PATTERN = re.compile(r'"((?:https?:)?//[^"]+)"')
PREFIXED_URL_PATTERN = re.compile(r"(?:from|at|resource:|loading)\s+((?:https?:)?//[^\s]+)", re.IGNORECASE)
ANY_URL_PATTERN = re.compile(r"((?:https?:)?//[^\s\"']+)", re.IGNORECASE)

GLOBAL_OBJECT = "window"


def extract_variable_name(message: str) -> Optional[str]:
    """``ReferenceError: foo is not defined`` -> ``foo``."""
    match = UNDEFINED_VARIABLE_PATTERN.search(message or "")
    return match.group(1) if match else None


def _split_reference(dotted: str) -> Tuple[str, str]:
    if "." in dotted:
        obj, _, fn = dotted.rpartition(".")
        return obj, fn
    return GLOBAL_OBJECT, dotted


def extract_function_refs(message: str) -> List[Tuple[str, str]]:
    """
    Every ``(object, function)`` named in a "not a function" message.

    A bare ``foo is not a function`` maps to ``("window", "foo")``.
    Deduplicated, in discovery order.
    """
    message = message or ""
    found: List[Tuple[str, str]] = []

    match = NOT_A_FUNCTION_PATTERN.search(message)
    if match:
        found.append(_split_reference(match.group(1)))

    match = NOT_A_FUNCTION_STACK_PATTERN.search(message)
    if match:
        found.append((match.group(1), match.group(2)))

    for match in NOT_A_FUNCTION_GENERIC_PATTERN.finditer(message):
        found.append((match.group(1), match.group(2)))

    unique: List[Tuple[str, str]] = []
    for ref in found:
        if ref not in unique:
            unique.append(ref)
    return unique


def extract_line_number(stack: Optional[str] = None, message: Optional[str] = None) -> Optional[int]:
    """Line from a ``:line:col`` stack token, else from ``line N`` in the message."""
    if stack:
        match = STACK_LINE_PATTERN.search(stack)
        if match:
            return int(match.group(1))
    if message:
        match = MESSAGE_LINE_PATTERN.search(message)
        if match:
            return int(match.group(1))
    return None


def extract_url_from_message(message: str) -> Optional[str]:
    """First URL in a console message: quoted, after a prefix word, or anywhere."""
    if not message:
        return None
    for pattern in (QUOTED_URL_PATTERN, PREFIXED_URL_PATTERN, ANY_URL_PATTERN):
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def char_index_to_position(text: str, index: int) -> Tuple[int, int]:
    """
    Map a character offset to ``(line, column)``, both 1-based.

    Offsets past the end clamp to the last position.
    """
    index = max(0, min(index, len(text)))
    line = text.count("\n", 0, index) + 1
    line_start = text.rfind("\n", 0, index) + 1
    return line, index - line_start + 1


def deduplicate_events(events: Iterable[ErrorEvent]) -> List[UndefinedVariableIssue]:
    """
    Undefined-variable issues keyed by ``(name, line or 0)``.

    Events without an extractable identifier are dropped.
    """
    seen = set()
    issues = []
    for event in events:
        name = extract_variable_name(event.message)
        if not name:
            continue
        if event.type == EventType.PAGE_ERROR:
            line = extract_line_number(stack=event.stack, message=event.message)
        else:
            line = extract_line_number(message=event.message)
        issue = UndefinedVariableIssue(name=name, line_number=line, message=event.message)
        if issue.dedup_key in seen:
            continue
        seen.add(issue.dedup_key)
        issues.append(issue)
    return issues


class ErrorClassifier:
    """
    Selects the events relevant to each remediation and classifies them.
    """

    ERROR_CHANNELS = (EventType.PAGE_ERROR, EventType.CONSOLE_ERROR)

    def is_reference_error(self, event: ErrorEvent) -> bool:
        if event.type not in self.ERROR_CHANNELS:
            return False
        return "is not defined" in event.message or "ReferenceError" in event.message

    def is_type_error(self, event: ErrorEvent) -> bool:
        if event.type not in self.ERROR_CHANNELS:
            return False
        if event.type == EventType.PAGE_ERROR:
            return "is not a function" in event.message
        return any(
            token in event.message
            for token in ("is not a function", "TypeError", "UNCAUGHT_EXCEPTION")
        )

    def undefined_variables(self, events: Iterable[ErrorEvent]) -> List[UndefinedVariableIssue]:
        """
        Args:
            events: Raw events from one page run

        Returns:
            One issue per distinct ``(name, line)``
        """
        return deduplicate_events(e for e in events if self.is_reference_error(e))

    def missing_functions(self, events: Iterable[ErrorEvent]) -> List[NotAFunctionIssue]:
        """
        Args:
            events: Raw events from one page run

        Returns:
            One issue per distinct ``(object, function)`` pair
        """
        issues: List[NotAFunctionIssue] = []
        for event in events:
            if not self.is_type_error(event):
                continue
            for obj, fn in extract_function_refs(event.text):
                issue = NotAFunctionIssue(object_name=obj, function_name=fn)
                if issue not in issues:
                    issues.append(issue)
        return issues
