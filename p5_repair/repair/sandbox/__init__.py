"""
Sandbox - page execution in a headless browser.
"""

from .page_executor import PageExecutor, PlaywrightPageExecutor

__all__ = ["PageExecutor", "PlaywrightPageExecutor"]
