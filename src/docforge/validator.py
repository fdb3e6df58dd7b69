"""Output contract enforcement.

Turns whatever mapping the parsing stages produced into a fully
populated AnalysisResult, substituting typed defaults for anything
missing or mistyped. This is the terminal stage of the pipeline and
never fails.
"""

import copy
import json
import logging
import math
from collections.abc import Mapping
from typing import Any

from docforge.constants import DEFAULT_SUMMARY_TITLE, FILE_TYPES, UNKNOWN_FILE_TYPE
from docforge.models import (
    DEFAULT_SCHEMA,
    AnalysisResult,
    AnalysisSummary,
    DetectedTables,
    Headers,
    MatchedTemplate,
    ResponseSchema,
)

logger = logging.getLogger(__name__)


def validate(candidate: Any, schema: ResponseSchema = DEFAULT_SCHEMA) -> AnalysisResult:
    """Coerce a parsed candidate into an AnalysisResult.

    Args:
        candidate: Mapping produced by structural repair or fuzzy
            extraction. Anything else is treated as an empty mapping.
        schema: Response schema naming the summary, code and data keys.

    Returns:
        An AnalysisResult with every field present. The candidate is not
        modified.
    """
    if not isinstance(candidate, Mapping):
        logger.debug("Validator received %s, using defaults", type(candidate).__name__)
        candidate = {}

    codes = {}
    for code_field in schema.code_fields:
        value = candidate.get(code_field.key)
        if not isinstance(value, str) or not value.strip():
            logger.warning("Field %s missing, substituting failure comment", code_field.key)
            value = code_field.sentinel
        codes[code_field.attribute] = value

    return AnalysisResult(
        summary=coerce_summary(candidate.get(schema.summary_key)),
        extracted_data=coerce_extracted_data(candidate.get(schema.data_key)),
        **codes,
    )


def coerce_summary(raw: Any) -> AnalysisSummary:
    """Build an AnalysisSummary, defaulting everything that is unusable."""
    if not isinstance(raw, Mapping):
        return AnalysisSummary()

    file_type = str(raw.get("fileType") or "").strip().lower()
    if file_type not in FILE_TYPES:
        file_type = UNKNOWN_FILE_TYPE

    return AnalysisSummary(
        file_type=file_type,
        detected_tables=coerce_detected_tables(raw.get("detectedTables")),
        headers=_coerce_headers(raw.get("headers")),
        matched_template=_coerce_matched_template(raw.get("matchedTemplate")),
    )


def coerce_detected_tables(raw: Any) -> DetectedTables:
    """Normalize ``detectedTables``: numeric count, sequence of dimensions."""
    if not isinstance(raw, Mapping):
        return DetectedTables()
    return DetectedTables(
        count=coerce_count(raw.get("count")),
        dimensions=_coerce_dimensions(raw.get("dimensions")),
    )


def coerce_count(value: Any) -> int:
    """Coerce a table count to a non-negative int, defaulting to 0.

    Numbers are truncated; numeric strings are parsed; anything else
    (including NaN and infinities) yields 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return max(0, int(value))
    return 0


def coerce_extracted_data(value: Any) -> Any:
    """Return the data payload as a list or dict.

    None becomes an empty list. A string holding a JSON array/object is
    decoded; any other scalar is wrapped in a single-element list. A
    container nested too deeply to copy is replaced by an empty list.
    """
    if value is None:
        return []
    if isinstance(value, (list, dict)):
        try:
            return copy.deepcopy(value)
        except RecursionError:
            logger.warning("extractedData is nested too deeply, using an empty list")
            return []
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except (json.JSONDecodeError, ValueError, RecursionError):
            decoded = None
        if isinstance(decoded, (list, dict)):
            return decoded
    return [value]


def _coerce_dimensions(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    if value:
        return (str(value),)
    return ()


def _coerce_headers(raw: Any) -> Headers:
    if not isinstance(raw, Mapping):
        return Headers()
    title = raw.get("title")
    subtitle = raw.get("subtitle")
    return Headers(
        title=str(title) if title is not None else DEFAULT_SUMMARY_TITLE,
        subtitle=str(subtitle) if subtitle is not None else "",
    )


def _coerce_matched_template(raw: Any) -> MatchedTemplate | None:
    if not isinstance(raw, Mapping):
        return None
    is_match = raw.get("isMatch", False)
    if isinstance(is_match, str):
        is_match = is_match.strip().lower() == "true"
    return MatchedTemplate(
        is_match=bool(is_match),
        template_name=_optional_str(raw.get("templateName")),
        match_confidence=_optional_str(raw.get("matchConfidence")),
        reasoning=_optional_str(raw.get("reasoning")),
    )


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None else None
