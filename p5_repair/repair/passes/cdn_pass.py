"""
CDN pass - repair external <script src> tags whose resource failed to load.

The page is executed once. Failed requests for script-like URLs, and
console errors that name a URL, are matched back to the document's
external script tags. For each match the oracle is asked for a
corrected tag; tags it cannot help with are left untouched.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..analyzers.blocks import EmbeddedBlock, extract_scripts
from ..contracts.events import ErrorEvent, EventType
from ..fixers.llm.prompt_builders import CdnContext, CdnPromptBuilder
from ..validators.error_classifier import extract_url_from_message
from .base import RepairPass

logger = logging.getLogger(__name__)


SCRIPT_URL_HINTS = (".js", "/js/", "script")


@dataclass
class FailedResource:
    url: str
    error: str


def _last_segment(url: str) -> str:
    return url.rstrip().split("/")[-1]


def failed_script_resources(events: List[ErrorEvent]) -> List[FailedResource]:
    """Script-like failed loads, from network failures and URL-bearing console errors."""
    failed: List[FailedResource] = []
    for event in events:
        if event.type == EventType.REQUEST_FAILED and event.url:
            if any(hint in event.url for hint in SCRIPT_URL_HINTS):
                failed.append(FailedResource(url=event.url, error=event.message))
        elif event.type == EventType.CONSOLE_ERROR:
            url = extract_url_from_message(event.message)
            if url:
                failed.append(FailedResource(url=url, error=event.message))
    return failed


def external_scripts(html: str) -> List[EmbeddedBlock]:
    """<script> elements carrying a ``src`` attribute."""
    return [block for block in extract_scripts(html, include_empty=True) if block.src]


def match_script(resource: FailedResource, scripts: List[EmbeddedBlock]) -> Optional[EmbeddedBlock]:
    """First tag whose src contains, or is contained in, the failed URL, or shares its file name."""
    for script in scripts:
        if script.src in resource.url or resource.url in script.src:
            return script
        if "/" in resource.url and "/" in script.src and _last_segment(resource.url) == _last_segment(script.src):
            return script
    return None


class CdnPass(RepairPass):
    """Ask the oracle for corrected script tags for failed CDN loads."""

    name = "cdn"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = CdnPromptBuilder()

    async def repair(self, html: str) -> Tuple[str, int]:
        if self.executor is None:
            self.sink.log_skip(self.name, "no page executor configured")
            return html, 0

        events = await self.executor.execute(html)
        failed = failed_script_resources(events)
        if not failed:
            logger.info("No CDN resource loading errors detected")
            return html, 0

        scripts = external_scripts(html)
        problems: List[Tuple[EmbeddedBlock, str]] = []
        for resource in failed:
            script = match_script(resource, scripts)
            if script and all(script.tag_match != seen.tag_match for seen, _ in problems):
                problems.append((script, resource.error))

        if not problems:
            logger.info("Could not match failed resources to script tags")
            return html, 0

        fix_count = 0
        for script, error in problems:
            context = CdnContext(tag=script.tag_match, src=script.src, error=error)
            response = await self.ask(self.builder, context)
            if response is None:
                continue
            replacement = self.builder.parse_response(response, context)
            if replacement is None or script.tag_match not in html:
                self.sink.log_skip(self.name, f"no usable replacement for {script.src}")
                continue
            html = html.replace(script.tag_match, replacement, 1)
            fix_count += 1
            self.sink.log_fix(self.name, script.src, f"replaced script tag with {replacement}")

        return html, fix_count
