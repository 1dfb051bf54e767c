"""
Tests for the error classifier and the page executor's event mapping.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from p5_repair.repair.contracts.events import ErrorEvent, EventType
from p5_repair.repair.sandbox.page_executor import PlaywrightPageExecutor
from p5_repair.repair.validators.error_classifier import (
    ErrorClassifier,
    char_index_to_position,
    extract_function_refs,
    extract_line_number,
    extract_url_from_message,
    extract_variable_name,
)

from conftest import console_error, page_error


class TestExtractors:
    """Tests for the regex extractors."""

    def test_variable_name(self):
        """Test the identifier is read from a ReferenceError."""
        assert extract_variable_name("Uncaught ReferenceError: myVar is not defined") == "myVar"

    def test_variable_name_unrecognised(self):
        """Test other messages yield None."""
        assert extract_variable_name("Something else went wrong") is None

    def test_dotted_function_ref(self):
        """Test obj.fn is split at the last dot."""
        assert extract_function_refs("TypeError: p.foo is not a function") == [("p", "foo")]

    def test_nested_function_ref(self):
        """Test a nested receiver keeps its dots."""
        refs = extract_function_refs("TypeError: this.scene.addFish is not a function")

        assert refs[0] == ("this.scene", "addFish")

    def test_bare_function_ref_maps_to_window(self):
        """Test a bare name is attributed to the global object."""
        assert extract_function_refs("TypeError: spawn is not a function") == [("window", "spawn")]

    def test_line_from_stack(self):
        """Test the stack's :line:col token wins."""
        assert extract_line_number(stack="at draw (file:///tmp/x.html:12:5)", message="line 3") == 12

    def test_line_from_message(self):
        """Test the message is used when there is no stack."""
        assert extract_line_number(message="error on line 3") == 3
        assert extract_line_number() is None

    def test_quoted_url(self):
        """Test a quoted URL is preferred."""
        message = 'Failed to load resource "https://cdn.example.com/p5.js" (404)'
        assert extract_url_from_message(message) == "https://cdn.example.com/p5.js"

    def test_bare_url(self):
        """Test any URL in the message is found."""
        message = "GET https://cdn.example.com/p5.js net::ERR_ABORTED 404"
        assert extract_url_from_message(message) == "https://cdn.example.com/p5.js"

    def test_char_index_to_position(self):
        """Test offsets map to 1-based line and column."""
        assert char_index_to_position("ab\ncd", 4) == (2, 2)
        assert char_index_to_position("ab\ncd", 0) == (1, 1)


class TestErrorClassifier:
    """Tests for issue classification and deduplication."""

    def test_undefined_variables_deduplicated(self):
        """Test the same fault from two listeners yields one issue."""
        events = [
            console_error("Uncaught ReferenceError: fish is not defined"),
            console_error("Uncaught ReferenceError: fish is not defined"),
        ]

        issues = ErrorClassifier().undefined_variables(events)

        assert len(issues) == 1
        assert issues[0].name == "fish"

    def test_undefined_variables_keyed_by_line(self):
        """Test a different line is a different issue."""
        events = [
            page_error("ReferenceError: fish is not defined", stack="at draw (file:///x.html:12:5)"),
            console_error("Uncaught ReferenceError: fish is not defined"),
        ]

        issues = ErrorClassifier().undefined_variables(events)

        assert [(i.name, i.line_number) for i in issues] == [("fish", 12), ("fish", None)]

    def test_console_messages_ignored(self):
        """Test non-error console output is never classified."""
        events = [ErrorEvent(type=EventType.CONSOLE_MESSAGE, message="fish is not defined")]

        assert ErrorClassifier().undefined_variables(events) == []

    def test_missing_functions(self):
        """Test not-a-function errors become issues."""
        events = [
            page_error("TypeError: p.foo is not a function"),
            console_error("Uncaught TypeError: p.foo is not a function"),
        ]

        issues = ErrorClassifier().missing_functions(events)

        assert len(issues) == 1
        assert issues[0].reference == "p.foo"

    def test_call_pattern_for_member(self):
        """Test member calls are matched, longer names are not."""
        issue = ErrorClassifier().missing_functions([page_error("TypeError: p.foo is not a function")])[0]
        pattern = issue.call_pattern()

        assert pattern.search("  p.foo(1);")
        assert not pattern.search("  p.fooBar(1);")
        assert not pattern.search("  top.foo(1);")

    def test_call_pattern_for_global(self):
        """Test a global function matches bare and window-qualified calls."""
        issue = ErrorClassifier().missing_functions([page_error("TypeError: spawn is not a function")])[0]
        pattern = issue.call_pattern()

        assert issue.is_global
        assert pattern.search("spawn(1);")
        assert pattern.search("window.spawn(1);")
        assert not pattern.search("obj.spawn(1);")


class TestPlaywrightEventMapping:
    """Tests for the executor's listener adapters (no browser)."""

    def test_page_error_prefixed_with_name(self):
        """Test the error name is prepended to the message."""
        error = SimpleNamespace(name="ReferenceError", message="fish is not defined", stack="at x:1:2")

        event = PlaywrightPageExecutor._page_error(error)

        assert event.type == EventType.PAGE_ERROR
        assert event.message == "ReferenceError: fish is not defined"
        assert event.stack == "at x:1:2"

    def test_console_error_and_message(self):
        """Test console.error and other console output are told apart."""
        error = PlaywrightPageExecutor._console(SimpleNamespace(type="error", text="boom"))
        warning = PlaywrightPageExecutor._console(SimpleNamespace(type="warning", text="SHADER_INFO"))

        assert error.type == EventType.CONSOLE_ERROR
        assert warning.type == EventType.CONSOLE_MESSAGE

    def test_request_failed(self):
        """Test failed requests carry their URL."""
        request = SimpleNamespace(url="https://cdn.example.com/p5.js", failure="net::ERR_NAME_NOT_RESOLVED")

        event = PlaywrightPageExecutor._request_failed(request)

        assert event.type == EventType.REQUEST_FAILED
        assert event.url == "https://cdn.example.com/p5.js"

    @pytest.mark.asyncio
    async def test_execute_returns_empty_on_failure(self):
        """Test a browser failure yields no events rather than an exception."""
        executor = PlaywrightPageExecutor(settle_ms=0)

        with patch.object(executor, "_run", AsyncMock(side_effect=RuntimeError("no browser"))):
            events = await executor.execute("<html></html>")

        assert events == []

    @pytest.mark.asyncio
    async def test_execute_passes_settle_override(self):
        """Test the per-call settle delay reaches the browser run."""
        executor = PlaywrightPageExecutor(settle_ms=10)
        run = AsyncMock(return_value=[])

        with patch.object(executor, "_run", run):
            await executor.execute("<html></html>", settle_ms=3000)

        url, settle = run.call_args.args
        assert url.startswith("file://")
        assert settle == 3000
