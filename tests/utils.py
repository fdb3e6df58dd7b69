"""Shared test utilities for docforge tests.

Provides common mock classes and sample responses used across test modules.
"""

import json
from unittest.mock import MagicMock


class MockChoice:
    """Mock LiteLLM choice object."""

    def __init__(self, content: str | None, finish_reason: str = "stop"):
        self.message = MagicMock()
        self.message.content = content
        self.finish_reason = finish_reason


class MockResponse:
    """Mock LiteLLM response object."""

    def __init__(self, content: str | None, finish_reason: str = "stop"):
        self.choices = [MockChoice(content, finish_reason)]


PDF_CODE = (
    "async function exportPDF(data) {\n"
    "  const rows = data?.rows ?? [];\n"
    "  return { content: [{ text: 'Invoice' }, { table: { body: rows } }] };\n"
    "}"
)

EXCEL_CODE = (
    "async function exportToExcel(data) {\n"
    "  const wb = new ExcelJS.Workbook();\n"
    "  wb.addWorksheet('Sheet1');\n"
    "  return wb;\n"
    "}"
)


def sample_response(**overrides) -> dict:
    """Return a well-formed model response, with top-level keys overridden."""
    doc = {
        "summary": {
            "fileType": "pdf",
            "detectedTables": {"count": 1, "dimensions": ["4x3"]},
            "headers": {"title": "Invoice", "subtitle": "March"},
            "matchedTemplate": {"isMatch": False},
        },
        "pdfMakeCode": PDF_CODE,
        "excelJSCode": EXCEL_CODE,
        "extractedData": [{"item": "Widget", "qty": 2}],
    }
    doc.update(overrides)
    return doc


def sample_response_text(**overrides) -> str:
    """Return sample_response() serialized as the model would send it."""
    return json.dumps(sample_response(**overrides))
