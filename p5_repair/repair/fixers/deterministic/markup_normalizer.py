"""
Malformed-Markup Normalizer.

Generated pages sometimes come back with their head markup
entity-encoded (``&lt;script src="..."&gt;``). Three rewrites restore it:

1. encoded script tags with a ``src`` -> ``<script src="URL"></script>``
2. encoded empty-bracket titles (``&lt;&gt;My Sketch``) -> ``<title>My Sketch</title>``
3. any other encoded tag whose name is allow-listed -> the literal tag,
   attributes kept

Encoded tags outside the allow-list (``&lt;div&gt;``) are left alone:
they are most likely meant to be displayed as text.
"""

import logging
import re
from typing import Tuple

logger = logging.getLogger(__name__)


ENCODED_SCRIPT_PATTERN = re.compile(
    r'&lt;\s*(?:script)?\s*src="([^"]+)"(?:\s*&gt;)?(?:\s*&lt;/script\s*&gt;)?', re.IGNORECASE
)
ENCODED_TITLE_PATTERN = re.compile(
    r"&lt;\s*&gt;\s*([^<&]+)(?:</title>|&lt;/title&gt;)?", re.IGNORECASE
)
ENCODED_TAG_PATTERN = re.compile(r"&lt;(/?[a-zA-Z]+)([^&]*)&gt;")

ALLOWED_TAGS = frozenset(["script", "/script", "title", "/title", "style", "/style", "link", "meta"])


def normalize_markup(html: str) -> Tuple[str, int]:
    """
    Rewrite entity-encoded head markup into literal tags.

    Args:
        html: Document text

    Returns:
        (normalized document, number of rewrites)
    """
    fix_count = 0

    def _script(match: re.Match) -> str:
        nonlocal fix_count
        fix_count += 1
        logger.info(f"Fixed malformed script tag: {match.group(1)}")
        return f'<script src="{match.group(1)}"></script>'

    def _title(match: re.Match) -> str:
        nonlocal fix_count
        fix_count += 1
        content = match.group(1)
        logger.info(f'Fixed malformed title tag: "{content.strip()}"')
        return f"<title>{content}</title>"

    def _tag(match: re.Match) -> str:
        nonlocal fix_count
        name = match.group(1)
        if name.lower() not in ALLOWED_TAGS:
            return match.group(0)
        fix_count += 1
        logger.info(f"Fixed malformed {name} tag")
        return f"<{name}{match.group(2)}>"

    html = ENCODED_SCRIPT_PATTERN.sub(_script, html)
    html = ENCODED_TITLE_PATTERN.sub(_title, html)
    html = ENCODED_TAG_PATTERN.sub(_tag, html)
    return html, fix_count
