"""
Shader pass - repair THREE.ShaderMaterial blocks that fail to compile.

Runs only when the document constructs a ShaderMaterial. The page is
executed with a longer settle delay so the WebGL programs get compiled;
if THREE reports a shader error, each ``new THREE.ShaderMaterial({...})``
block is sent to the oracle together with the first error. There is no
mechanical fallback. A successful rewrite ends the run.
"""

import logging
import re
from typing import List, Tuple

from p5_repair.core.config import settings

from ..contracts.events import ErrorEvent, EventType
from ..fixers.llm.prompt_builders import ShaderContext, ShaderPromptBuilder
from .base import RepairPass

logger = logging.getLogger(__name__)


SHADER_MATERIAL_PATTERN = re.compile(r"new THREE\.ShaderMaterial\(", re.IGNORECASE)
SHADER_BLOCK_PATTERN = re.compile(r"new THREE\.ShaderMaterial\(\{[\s\S]*?\}\);?")

CONSOLE_SHADER_TOKENS = ("SHADER_INFO", "THREE.WebGLProgram: Shader Error")
PAGE_SHADER_TOKENS = ("SHADER_INFO", "Shader Error")


def contains_shader_material(html: str) -> bool:
    return SHADER_MATERIAL_PATTERN.search(html) is not None


def shader_errors(events: List[ErrorEvent]) -> List[str]:
    """Shader compile diagnostics from any console output or page error."""
    errors = []
    for event in events:
        if event.type in (EventType.CONSOLE_ERROR, EventType.CONSOLE_MESSAGE):
            tokens = CONSOLE_SHADER_TOKENS
        elif event.type == EventType.PAGE_ERROR:
            tokens = PAGE_SHADER_TOKENS
        else:
            continue
        if any(token in event.message for token in tokens):
            errors.append(event.message)
    return errors


class ShaderPass(RepairPass):
    """Suggestion-only repair of ShaderMaterial constructor blocks."""

    name = "shader"
    preempts_remaining = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = ShaderPromptBuilder()

    def applies_to(self, html: str) -> bool:
        return contains_shader_material(html)

    async def repair(self, html: str) -> Tuple[str, int]:
        if self.executor is None:
            self.sink.log_skip(self.name, "no page executor configured")
            return html, 0

        events = await self.executor.execute(html, settle_ms=settings.SHADER_SETTLE_MS)
        errors = shader_errors(events)
        if not errors:
            logger.info("No THREE.ShaderMaterial compilation errors detected")
            return html, 0

        logger.info(f"Found {len(errors)} shader compilation error(s)")
        fixed_html = html
        fix_count = 0
        for match in SHADER_BLOCK_PATTERN.finditer(html):
            block = match.group(0)
            context = ShaderContext(block=block, error=errors[0])
            response = await self.ask(self.builder, context)
            if response is None:
                continue
            fixed = self.builder.parse_response(response, context)
            if fixed is None or block not in fixed_html:
                continue
            fixed_html = fixed_html.replace(block, fixed, 1)
            fix_count += 1
            self.sink.log_fix(self.name, f"offset {match.start()}", "rewrote ShaderMaterial block")

        return fixed_html, fix_count
