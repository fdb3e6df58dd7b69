"""Response parsing pipeline.

Runs the recovery cascade over a raw model response:

    RAW_INPUT -> SANITIZED -> STRUCTURED_PARSE_ATTEMPTED
        success -> VALIDATED
        failure -> FUZZY_EXTRACTION_ATTEMPTED
            success -> VALIDATED
            failure -> REJECTED

Every stage is a pure function of the previous stage's output. There is
no retry loop here; transient model failures are retried by the client.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from docforge.constants import DEFAULT_MIN_CODE_LENGTH
from docforge.errors import EmptyInputError, ResponseParseError, UnrecoverableExtractionError
from docforge.escapes import normalize_escapes
from docforge.fuzzy import extract_field, extract_function, extract_object, extract_value
from docforge.models import (
    DEFAULT_SCHEMA,
    AnalysisResult,
    FieldNotFound,
    RepairFailure,
    Repaired,
    ResponseSchema,
)
from docforge.repair import repair
from docforge.sanitizer import sanitize
from docforge.validator import validate

logger = logging.getLogger(__name__)


class Stage(Enum):
    RAW_INPUT = "raw_input"
    SANITIZED = "sanitized"
    STRUCTURED_PARSE_ATTEMPTED = "structured_parse_attempted"
    FUZZY_EXTRACTION_ATTEMPTED = "fuzzy_extraction_attempted"
    VALIDATED = "validated"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ParseOutcome:
    """Terminal state of one pipeline run.

    Exactly one of ``result`` (stage VALIDATED) and ``error`` (stage
    REJECTED) is set. ``failures`` holds the recoverable signals
    (RepairFailure, FieldNotFound) collected on the way.
    """

    stage: Stage
    trail: tuple[Stage, ...]
    result: AnalysisResult | None = None
    error: ResponseParseError | None = None
    strategy: str | None = None
    failures: tuple[RepairFailure | FieldNotFound, ...] = ()
    input_length: int = 0

    @property
    def ok(self) -> bool:
        return self.stage is Stage.VALIDATED


def run_pipeline(
    raw: str | None,
    schema: ResponseSchema = DEFAULT_SCHEMA,
    min_code_length: int = DEFAULT_MIN_CODE_LENGTH,
) -> ParseOutcome:
    """Run the full recovery cascade. Never raises.

    Args:
        raw: The model's raw response text.
        schema: Known top-level keys in declaration order.
        min_code_length: Fuzzy-extracted code shorter than this triggers
            the function-declaration fallback.

    Returns:
        A ParseOutcome in stage VALIDATED or REJECTED.
    """
    trail = [Stage.RAW_INPUT]
    failures: list[RepairFailure | FieldNotFound] = []
    input_length = len(raw) if raw else 0

    text = sanitize(raw)
    trail.append(Stage.SANITIZED)
    if not text:
        logger.warning("Model output is empty")
        return _rejected(trail, failures, EmptyInputError(), input_length)

    trail.append(Stage.STRUCTURED_PARSE_ATTEMPTED)
    repaired = repair(text)
    if isinstance(repaired, Repaired):
        candidate = _structured_candidate(repaired.value, schema)
        if candidate is not None:
            trail.append(Stage.VALIDATED)
            logger.info("Response parsed (%s)", repaired.strategy)
            return ParseOutcome(
                stage=Stage.VALIDATED,
                trail=tuple(trail),
                result=validate(candidate, schema),
                strategy=repaired.strategy,
                failures=tuple(failures),
                input_length=input_length,
            )
        failures.append(RepairFailure("parsed response has no code fields"))
    else:
        failures.append(repaired)
    logger.warning("Standard parsing failed. Attempting fuzzy extraction...")

    trail.append(Stage.FUZZY_EXTRACTION_ATTEMPTED)
    candidate = _fuzzy_candidate(text, schema, min_code_length, failures)
    if candidate is None:
        logger.error("All parsing attempts failed")
        return _rejected(trail, failures, UnrecoverableExtractionError(), input_length)

    trail.append(Stage.VALIDATED)
    logger.info("Response recovered by fuzzy extraction")
    return ParseOutcome(
        stage=Stage.VALIDATED,
        trail=tuple(trail),
        result=validate(candidate, schema),
        strategy="fuzzy",
        failures=tuple(failures),
        input_length=input_length,
    )


def parse_response(
    raw: str | None,
    schema: ResponseSchema = DEFAULT_SCHEMA,
    min_code_length: int = DEFAULT_MIN_CODE_LENGTH,
) -> AnalysisResult:
    """Parse a raw model response into an AnalysisResult.

    Raises:
        EmptyInputError: The response is empty.
        UnrecoverableExtractionError: No code field could be recovered.
    """
    outcome = run_pipeline(raw, schema, min_code_length)
    if outcome.error is not None:
        raise outcome.error
    return outcome.result


def _structured_candidate(value: Any, schema: ResponseSchema) -> dict | None:
    """Accept a structurally parsed value if it carries any code.

    Returns a new mapping with escapes normalized in the code fields, or
    None to hand over to fuzzy extraction.
    """
    if not isinstance(value, Mapping):
        return None
    if not any(_has_text(value.get(f.key)) for f in schema.code_fields):
        return None

    candidate = dict(value)
    for code_field in schema.code_fields:
        code = candidate.get(code_field.key)
        if isinstance(code, str):
            candidate[code_field.key] = normalize_escapes(code)
    return candidate


def _fuzzy_candidate(
    text: str,
    schema: ResponseSchema,
    min_code_length: int,
    failures: list,
) -> dict | None:
    """Recover fields one by one. None if no code field was found."""
    candidate: dict[str, Any] = {}

    for code_field in schema.code_fields:
        code = extract_field(text, code_field.key, schema.next_key(code_field.key))
        if code is None or len(code) < min_code_length:
            fallback = extract_function(text, code_field.function_name)
            if fallback is not None:
                code = fallback
        if not _has_text(code):
            failures.append(FieldNotFound(code_field.key))
            continue
        if "import" not in code:
            code = code_field.preamble + code
        candidate[code_field.key] = normalize_escapes(code)

    if not candidate:
        return None

    summary = extract_object(text, schema.summary_key)
    if summary is None:
        failures.append(FieldNotFound(schema.summary_key))
    else:
        candidate[schema.summary_key] = summary

    data = extract_value(text, schema.data_key)
    if data is None:
        failures.append(FieldNotFound(schema.data_key))
    else:
        candidate[schema.data_key] = data

    return candidate


def _rejected(
    trail: list[Stage],
    failures: list,
    error: ResponseParseError,
    input_length: int,
) -> ParseOutcome:
    trail.append(Stage.REJECTED)
    return ParseOutcome(
        stage=Stage.REJECTED,
        trail=tuple(trail),
        error=error,
        failures=tuple(failures),
        input_length=input_length,
    )


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
