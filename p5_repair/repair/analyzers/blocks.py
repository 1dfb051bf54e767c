"""
EmbeddedBlock - <script> / <style> regions of the document.

Blocks are located with a regex rather than a parser so that offsets
point into the exact text under repair; everything outside a patched
block is preserved byte-for-byte. BeautifulSoup is only used to read the
attributes of an opening tag.

Blocks must be extracted fresh for every pass: any earlier patch shifts
offsets.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup


SCRIPT_PATTERN = re.compile(r"<script[^>]*>([\s\S]*?)</script>", re.IGNORECASE)
STYLE_PATTERN = re.compile(r"<style[^>]*>([\s\S]*?)</style>", re.IGNORECASE)
STYLE_OPEN_PATTERN = re.compile(r"<style[^>]*>", re.IGNORECASE)


@dataclass
class EmbeddedBlock:
    """
    One <script> or <style> element.

    Example:
        for block in extract_scripts(html):
            print(block.line_range, block.content[:40])
    """

    tag: str
    """``script`` or ``style``."""

    tag_match: str
    """The whole element, opening tag through closing tag."""

    content: str
    """Inner text."""

    start_offset: int
    """Offset of ``tag_match`` in the document."""

    content_offset: int
    """Offset of ``content`` in the document."""

    start_line: int
    """1-based document line on which the element starts."""

    attrs: Dict[str, str] = field(default_factory=dict)
    """Attributes of the opening tag."""

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.tag_match)

    @property
    def src(self) -> Optional[str]:
        return self.attrs.get("src")

    @property
    def lines(self) -> List[str]:
        return self.content.split("\n")

    @property
    def line_range(self) -> Tuple[int, int]:
        """1-based document lines covered by the content."""
        return (self.start_line, self.start_line + len(self.lines) - 1)

    def replace_content(self, html: str, new_content: str) -> str:
        """Splice ``new_content`` into ``html`` in place of this block's content."""
        end = self.content_offset + len(self.content)
        return html[:self.content_offset] + new_content + html[end:]


def _parse_attrs(opening_tag: str, tag: str) -> Dict[str, str]:
    soup = BeautifulSoup(opening_tag, "html.parser")
    element = soup.find(tag)
    if element is None:
        return {}
    attrs = {}
    for name, value in element.attrs.items():
        attrs[name] = " ".join(value) if isinstance(value, list) else value
    return attrs


def _extract(html: str, pattern: re.Pattern, tag: str, skip_empty: bool) -> List[EmbeddedBlock]:
    blocks = []
    for match in pattern.finditer(html):
        content = match.group(1)
        if skip_empty and not content.strip():
            continue
        opening = match.group(0)[:match.start(1) - match.start(0)]
        blocks.append(EmbeddedBlock(
            tag=tag,
            tag_match=match.group(0),
            content=content,
            start_offset=match.start(),
            content_offset=match.start(1),
            start_line=html.count("\n", 0, match.start()) + 1,
            attrs=_parse_attrs(opening, tag),
        ))
    return blocks


def extract_scripts(html: str, include_empty: bool = False) -> List[EmbeddedBlock]:
    """
    All <script> elements in document order.

    Args:
        html: Document text
        include_empty: Keep elements whose body is blank (external scripts)
    """
    return _extract(html, SCRIPT_PATTERN, "script", skip_empty=not include_empty)


def extract_styles(html: str) -> List[EmbeddedBlock]:
    """All <style> elements in document order."""
    return _extract(html, STYLE_PATTERN, "style", skip_empty=False)


def has_style_tag(html: str) -> bool:
    return STYLE_OPEN_PATTERN.search(html) is not None


def replace_block_contents(html: str, updates: Iterable[Tuple[EmbeddedBlock, str]]) -> str:
    """
    Apply several content replacements extracted from the same ``html``.

    Applied from the last block to the first so offsets stay valid.
    """
    for block, new_content in sorted(updates, key=lambda u: u[0].content_offset, reverse=True):
        html = block.replace_content(html, new_content)
    return html
