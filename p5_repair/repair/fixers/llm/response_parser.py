"""
Response parsing for suggestion-oracle output.

The oracle enforces no schema. Answers arrive as bare JSON, JSON inside
a fenced block, JSON wrapped in prose, or prose only. Every helper here
returns None (never raises) when nothing usable can be extracted.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


FENCED_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\s*```")
BARE_ARRAY_PATTERN = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")


def _load_array(text: str) -> Optional[List[Any]]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    return None


def extract_json_array(response: str, bare_first: bool = False) -> Optional[List[Any]]:
    """
    Pull a JSON array of objects out of an oracle response.

    Tries the fenced-block form and the bare-array form, in that order
    (reversed with ``bare_first``). A single JSON object is wrapped in a
    list.

    Args:
        response: Raw response text
        bare_first: Look for a bare ``[{...}]`` before fenced blocks

    Returns:
        The parsed list, or None
    """
    if not response:
        return None

    def _fenced() -> Optional[List[Any]]:
        match = FENCED_BLOCK_PATTERN.search(response)
        return _load_array(match.group(1).strip()) if match else None

    def _bare() -> Optional[List[Any]]:
        match = BARE_ARRAY_PATTERN.search(response)
        return _load_array(match.group(0)) if match else None

    strategies = (_bare, _fenced) if bare_first else (_fenced, _bare)
    for strategy in strategies:
        result = strategy()
        if result is not None:
            return result

    # The whole answer may be JSON with no fence at all
    result = _load_array(response.strip())
    if result is None:
        logger.warning("Could not extract JSON fixes from suggestion response")
    return result


def extract_fields(response: str, fields: Sequence[str]) -> Dict[str, str]:
    """
    Last-resort extraction of ``"field": "value"`` / ``"field": 12`` pairs.

    Used when the answer is JSON-ish but not parseable (unescaped quotes,
    trailing commas). Only the first occurrence of each field is read.
    """
    found: Dict[str, str] = {}
    for name in fields:
        string_match = re.search(rf"""{name}["']?\s*:\s*["']([^"']+)["']""", response)
        if string_match:
            found[name] = string_match.group(1)
            continue
        number_match = re.search(rf"""{name}["']?\s*:\s*(\d+)""", response)
        if number_match:
            found[name] = number_match.group(1)
    return found


def extract_code_block(response: str, languages: Sequence[str] = ()) -> Optional[str]:
    """
    Contents of the first fenced code block.

    Args:
        response: Raw response text
        languages: Accepted info strings (any, or none, when empty)

    Returns:
        The block body stripped, or None when there is no fence
    """
    if languages:
        tags = "|".join(re.escape(lang) for lang in languages)
        pattern = rf"```(?:{tags})?\s*([\s\S]*?)\s*```"
    else:
        pattern = r"```[\w-]*\s*([\s\S]*?)\s*```"
    match = re.search(pattern, response or "")
    if match and match.group(1):
        return match.group(1).strip()
    return None
