"""Tests for preview code location.

The sandbox executor is replaced by a scripted fake that records the
code it was asked to run.
"""

import pytest

from docforge.errors import PreviewError
from docforge.preview import (
    NO_DEFINITION_MESSAGE,
    NOT_AN_OBJECT_MESSAGE,
    clean_code_for_preview,
    friendly_preview_error,
    locate_preview_block,
    render_preview,
)


class FakeExecutor:
    """Returns (or raises) the scripted results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def __call__(self, code, data):
        self.calls.append((code, data))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestCleanCodeForPreview:
    """Tests for clean_code_for_preview function."""

    def test_strips_fences_and_module_syntax(self):
        """Markdown fences, imports and default exports are removed."""
        code = (
            "```javascript\n"
            "import x from 'y';\n"
            "export default async function exportPDF(data) { return {}; }\n"
            "```"
        )
        cleaned = clean_code_for_preview(code)
        assert "```" not in cleaned
        assert "import" not in cleaned
        assert "export default" not in cleaned
        assert "async function exportPDF(data) { return {}; }" in cleaned

    def test_strips_require_and_use_strict(self):
        """require() declarations and "use strict" directives are removed."""
        code = "const fs = require('fs');\n'use strict';\nconst dd = {};"
        cleaned = clean_code_for_preview(code)
        assert "use strict" not in cleaned
        assert "require" not in cleaned
        assert "const dd = {};" in cleaned

    def test_named_export_keeps_declaration(self):
        """A named export keeps its declaration without the export keyword."""
        cleaned = clean_code_for_preview("export const dd = {};")
        assert cleaned == "const dd = {};"


class TestLocatePreviewBlock:
    """Tests for locate_preview_block function."""

    def test_function_declaration(self):
        """The entry function declaration is located in full."""
        code = (
            "const a = 1;\n"
            "async function exportPDF(data) { return { content: [] }; }\n"
            "render();"
        )
        block = locate_preview_block(code)
        assert block.text == "async function exportPDF(data) { return { content: [] }; }"

    def test_first_object_literal(self):
        """Without an entry function the first object literal is located."""
        block = locate_preview_block("var dd = { content: ['x'] };")
        assert block.text == "{ content: ['x'] }"

    def test_nothing_found(self):
        """Text without braces yields no block."""
        assert locate_preview_block("no braces here") is None
        assert locate_preview_block("") is None


class TestRenderPreview:
    """Tests for render_preview strategies."""

    def test_full_code_succeeds(self):
        """A successful full-code run returns its definition and receives the data."""
        execute = FakeExecutor({"content": ["Hello"]})
        result = render_preview("async function exportPDF(d) { return {}; }", [1], execute)
        assert result == {"content": ["Hello"]}
        assert execute.calls[0][1] == [1]

    def test_missing_content_added(self):
        """A definition without content gets an empty content list."""
        execute = FakeExecutor({"pageSize": "A4"})
        assert render_preview("x", None, execute) == {"pageSize": "A4", "content": []}

    def test_function_block_fallback(self):
        """A failing full run falls back to the entry function block."""
        code = (
            "broken syntax here (\n"
            "async function exportPDF(data) { return { content: [] }; }"
        )
        execute = FakeExecutor(SyntaxError("Unexpected token"), {"pageSize": "A4"})

        result = render_preview(code, {}, execute)

        assert result == {"pageSize": "A4", "content": []}
        assert execute.calls[1][0] == (
            "async function exportPDF(data) { return { content: [] }; }"
        )

    def test_object_literal_fallback(self):
        """Without an entry function the first object literal is evaluated."""
        code = "garbage(; var dd = { content: [] };"
        execute = FakeExecutor(SyntaxError("Unexpected token ;"), {"content": []})

        result = render_preview(code, {}, execute)

        assert result == {"content": []}
        assert execute.calls[1][0] == "return { content: [] };"

    def test_all_strategies_fail(self):
        """When every strategy fails the first error is reported in friendly form."""
        code = "async function exportPDF(data) { return broken; }"
        execute = FakeExecutor(
            SyntaxError("Unexpected token }"), RuntimeError("still broken")
        )

        with pytest.raises(PreviewError) as exc_info:
            render_preview(code, {}, execute)

        assert str(exc_info.value).startswith("Syntax Error in generated code")

    def test_no_block_to_fall_back_to(self):
        """A failure with no block to fall back to reports the original message."""
        execute = FakeExecutor(RuntimeError("boom"))
        with pytest.raises(PreviewError, match="boom"):
            render_preview("no braces", {}, execute)

    def test_none_result(self):
        """A run that returns nothing reports a missing definition."""
        with pytest.raises(PreviewError, match=NO_DEFINITION_MESSAGE):
            render_preview("x", {}, FakeExecutor(None))

    def test_false_result(self):
        """A falsy scalar result reports a missing definition."""
        with pytest.raises(PreviewError, match=NO_DEFINITION_MESSAGE):
            render_preview("x", {}, FakeExecutor(False))

    def test_non_object_result(self):
        """A string result is rejected as not an object."""
        with pytest.raises(PreviewError, match=NOT_AN_OBJECT_MESSAGE):
            render_preview("x", {}, FakeExecutor("a string"))

    def test_list_result_returned(self):
        """A list result is accepted as the document content."""
        result = render_preview("x", {}, FakeExecutor(["Hello", {"text": "World"}]))
        assert result == ["Hello", {"text": "World"}]

    def test_empty_content_replaced(self):
        """A null content value is replaced by an empty list."""
        execute = FakeExecutor({"content": None, "pageSize": "A4"})
        assert render_preview("x", {}, execute) == {"content": [], "pageSize": "A4"}

    def test_empty_object_gets_content(self):
        """An empty object still counts as a definition."""
        assert render_preview("x", {}, FakeExecutor({})) == {"content": []}


class TestFriendlyPreviewError:
    """Tests for friendly_preview_error function."""

    def test_runtime_error(self):
        """Undefined property access becomes a runtime hint."""
        exc = TypeError("Cannot read properties of undefined (reading 'rows')")
        assert friendly_preview_error(exc).startswith("Runtime Error")

    def test_other_message_passed_through(self):
        """Unrecognized messages pass through unchanged."""
        assert friendly_preview_error(ValueError("odd failure")) == "odd failure"

    def test_empty_message(self):
        """An exception without a message gets the generic preview message."""
        assert friendly_preview_error(RuntimeError()) == "Failed to generate PDF preview."
