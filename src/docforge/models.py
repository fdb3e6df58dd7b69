"""Data model for analysis results and pipeline signals.

All values are immutable once built; pipeline stages create new values
rather than mutating their inputs.
"""

from dataclasses import dataclass, field
from typing import Any

from docforge.constants import (
    DATA_KEY,
    DEFAULT_SUMMARY_TITLE,
    EXCEL_CODE_KEY,
    EXCEL_FAILURE_SENTINEL,
    EXCEL_FUNCTION_NAME,
    EXCEL_PREAMBLE,
    PDF_CODE_KEY,
    PDF_FAILURE_SENTINEL,
    PDF_FUNCTION_NAME,
    PDF_PREAMBLE,
    SCHEMA_KEYS,
    SUMMARY_KEY,
    UNKNOWN_FILE_TYPE,
)


# =============================================================================
# Response schema descriptor
# =============================================================================


@dataclass(frozen=True)
class CodeField:
    """A top-level response key whose value is a source-code string."""

    key: str
    attribute: str
    function_name: str
    preamble: str
    sentinel: str


@dataclass(frozen=True)
class ResponseSchema:
    """Known top-level keys of the model response, in declaration order.

    The fuzzy extractor bounds each string field by the marker of the key
    that follows it, so the order matters.
    """

    keys: tuple[str, ...]
    code_fields: tuple[CodeField, ...]
    summary_key: str = SUMMARY_KEY
    data_key: str = DATA_KEY

    def next_key(self, key: str) -> str | None:
        """Return the key declared after ``key``, or None for the last one."""
        try:
            index = self.keys.index(key)
        except ValueError:
            return None
        if index + 1 < len(self.keys):
            return self.keys[index + 1]
        return None


DEFAULT_SCHEMA = ResponseSchema(
    keys=SCHEMA_KEYS,
    code_fields=(
        CodeField(
            key=PDF_CODE_KEY,
            attribute="pdf_make_code",
            function_name=PDF_FUNCTION_NAME,
            preamble=PDF_PREAMBLE,
            sentinel=PDF_FAILURE_SENTINEL,
        ),
        CodeField(
            key=EXCEL_CODE_KEY,
            attribute="excel_js_code",
            function_name=EXCEL_FUNCTION_NAME,
            preamble=EXCEL_PREAMBLE,
            sentinel=EXCEL_FAILURE_SENTINEL,
        ),
    ),
)


# =============================================================================
# Analysis result
# =============================================================================


@dataclass(frozen=True)
class DetectedTables:
    count: int = 0
    # Advisory; its length need not match count
    dimensions: tuple[str, ...] = ()


@dataclass(frozen=True)
class Headers:
    title: str = DEFAULT_SUMMARY_TITLE
    subtitle: str = ""


@dataclass(frozen=True)
class MatchedTemplate:
    is_match: bool = False
    template_name: str | None = None
    match_confidence: str | None = None
    reasoning: str | None = None


@dataclass(frozen=True)
class AnalysisSummary:
    file_type: str = UNKNOWN_FILE_TYPE
    detected_tables: DetectedTables = field(default_factory=DetectedTables)
    headers: Headers = field(default_factory=Headers)
    matched_template: MatchedTemplate | None = None

    def to_dict(self) -> dict:
        """Return the camelCase shape the model emits."""
        data: dict[str, Any] = {
            "fileType": self.file_type,
            "detectedTables": {
                "count": self.detected_tables.count,
                "dimensions": list(self.detected_tables.dimensions),
            },
            "headers": {"title": self.headers.title, "subtitle": self.headers.subtitle},
        }
        if self.matched_template is not None:
            template: dict[str, Any] = {"isMatch": self.matched_template.is_match}
            if self.matched_template.template_name is not None:
                template["templateName"] = self.matched_template.template_name
            if self.matched_template.match_confidence is not None:
                template["matchConfidence"] = self.matched_template.match_confidence
            if self.matched_template.reasoning is not None:
                template["reasoning"] = self.matched_template.reasoning
            data["matchedTemplate"] = template
        return data


@dataclass(frozen=True)
class AnalysisResult:
    """Fully populated output of the parsing pipeline.

    Code fields are never absent: unrecoverable ones hold a sentinel
    comment string instead.
    """

    summary: AnalysisSummary
    pdf_make_code: str
    excel_js_code: str
    extracted_data: Any = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            SUMMARY_KEY: self.summary.to_dict(),
            PDF_CODE_KEY: self.pdf_make_code,
            EXCEL_CODE_KEY: self.excel_js_code,
            DATA_KEY: self.extracted_data,
        }


# =============================================================================
# Stage signals
# =============================================================================


@dataclass(frozen=True)
class Repaired:
    """Successful structural parse."""

    value: Any
    strategy: str


@dataclass(frozen=True)
class RepairFailure:
    """Structural parse failed; the orchestrator should try fuzzy extraction."""

    reason: str


@dataclass(frozen=True)
class FieldNotFound:
    """A single field could not be located; a default is substituted."""

    key: str
