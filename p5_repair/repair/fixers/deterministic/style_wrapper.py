"""
Style-Block Inference - wrap bare CSS text in <style> tags.

Primary strategy: four positional patterns for CSS that directly follows
``</script>``, ``</title>``, a ``<meta>`` tag or ``<head>``. After each
wrap the current document is scanned again, because wrapping one region
often exposes the next. The loop is bounded by ``STYLE_WRAP_LIMIT``.

Secondary strategy, only when the primary found nothing and the document
has no <style> element at all: any selector-prefixed rule set
(``body``, ``html``, ``#id``, ``.class``). The bare text is removed and
the wrapped block is placed before ``</head>`` (or before ``<body``, or
in place when the document has neither).
"""

import logging
import re
from typing import Optional, Tuple

from p5_repair.core.config import settings

from ...analyzers.blocks import has_style_tag
from ...analyzers.css_analyzer import is_likely_css

logger = logging.getLogger(__name__)


_CSS_TAIL = r"\s*(\s*body\s*\{[^<]+?\}.*?(?=</?\w|$))"

POSITIONAL_PATTERNS = (
    re.compile(r"</script>" + _CSS_TAIL, re.DOTALL),
    re.compile(r"</title>" + _CSS_TAIL, re.DOTALL),
    re.compile(r"<meta[^>]*>" + _CSS_TAIL, re.DOTALL),
    re.compile(r"<head>" + _CSS_TAIL, re.DOTALL),
)

STANDALONE_PATTERN = re.compile(
    r"(?:^|\n|\r)(\s*(?:body|html|#[\w-]+|\.[\w-]+)[^{<>]*\{[^}]+\}(?:\s*[\w.#*:][^{<>]*\{[^}]+\})*)"
)


def wrap_css(css: str) -> str:
    return f"<style>\n{css}\n</style>"


def _wrap_next_positional(html: str) -> Optional[str]:
    """Wrap the first positional match that looks like CSS, or return None."""
    for pattern in POSITIONAL_PATTERNS:
        match = pattern.search(html)
        if not match:
            continue
        css = match.group(1)
        if not is_likely_css(css):
            continue
        start, end = match.span(1)
        return html[:start] + wrap_css(css) + html[end:]
    return None


def _wrap_standalone(html: str) -> Optional[str]:
    match = STANDALONE_PATTERN.search(html)
    if not match or not is_likely_css(match.group(1)):
        return None

    css = match.group(1)
    start, end = match.span(1)
    styled = wrap_css(css.strip("\r\n"))

    # The captured CSS never contains "<", so removing it keeps both anchors intact
    remaining = html[:start] + html[end:]
    if "</head>" in remaining:
        return remaining.replace("</head>", f"{styled}\n</head>", 1)
    if "<body" in remaining:
        return remaining.replace("<body", f"{styled}\n<body", 1)
    return html[:start] + styled + html[end:]


def wrap_bare_css(html: str, limit: Optional[int] = None) -> Tuple[str, int]:
    """
    Wrap CSS that sits outside any <style> element.

    Args:
        html: Document text
        limit: Max positional wraps (default: settings.STYLE_WRAP_LIMIT)

    Returns:
        (document, number of regions wrapped)
    """
    limit = settings.STYLE_WRAP_LIMIT if limit is None else limit
    fix_count = 0

    while fix_count < limit:
        wrapped = _wrap_next_positional(html)
        if wrapped is None:
            break
        html = wrapped
        fix_count += 1
        logger.info("Wrapped CSS content in style tags")

    if fix_count == 0 and not has_style_tag(html):
        wrapped = _wrap_standalone(html)
        if wrapped is not None:
            html = wrapped
            fix_count += 1
            logger.info("Wrapped standalone CSS content in style tags")

    return html, fix_count
