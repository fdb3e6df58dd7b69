"""Structural repair of near-JSON model output.

Tries progressively more permissive fixes before giving up:

1. Direct parse (the text, then its outermost ``{...}`` span).
2. Quote bare object keys.
3. Append the closers missing from a truncated document.

A failure here is not an error. It returns RepairFailure, which tells the
pipeline to fall back to fuzzy per-field extraction.
"""

import json
import logging
import re
from typing import Any

from docforge.models import RepairFailure, Repaired

logger = logging.getLogger(__name__)

# Identifier directly after "{" or "," and followed by ":" is an object key
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z0-9_]+?)\s*:")

_CLOSER_FOR = {"{": "}", "[": "]"}


def repair(text: str) -> Repaired | RepairFailure:
    """Parse ``text`` as JSON, repairing common model mistakes.

    Valid JSON is returned unchanged. Otherwise bare keys are quoted and,
    if that is not enough, missing closing braces/brackets are appended.

    Args:
        text: Sanitized model output.

    Returns:
        Repaired with the parsed value and the strategy that worked, or
        RepairFailure describing why every strategy failed.
    """
    if not text or not text.strip():
        return RepairFailure("no text to parse")

    # Step 1: direct parse
    for candidate in _with_outermost_span(text):
        ok, value = _try_parse(candidate)
        if ok:
            return Repaired(value=value, strategy="direct")

    first_brace = text.find("{")
    if first_brace == -1:
        return RepairFailure("no JSON object found")
    body = text[first_brace:]

    # Step 2: quote bare keys
    quoted = quote_bare_keys(body)
    if quoted != body:
        for candidate in _with_outermost_span(quoted):
            ok, value = _try_parse(candidate)
            if ok:
                logger.debug("Parsed response after quoting bare keys")
                return Repaired(value=value, strategy="bare_keys")

    # Step 3: append missing closers. Quoting can rewrite "{ key:" inside
    # string values, so the unquoted body goes first.
    bases = (body,) if quoted == body else (body, quoted)
    for base in bases:
        for candidate in (balance_closers(base), count_closers(base)):
            if candidate == base:
                continue
            ok, value = _try_parse(candidate)
            if ok:
                logger.debug("Parsed response after appending missing closers")
                return Repaired(value=value, strategy="balanced")

    logger.debug("Structural repair failed for %d chars of text", len(text))
    return RepairFailure("text is not parseable JSON after repair")


def quote_bare_keys(text: str) -> str:
    """Quote identifiers used as object keys (``{key: 1}`` -> ``{"key": 1}``)."""
    return _BARE_KEY_RE.sub(r'\1"\2":', text)


def balance_closers(text: str) -> str:
    """Close every unmatched ``{``/``[`` in reverse order of opening.

    Bracket counting is global and ignores strings and comments. A
    trailing comma left by truncation is dropped first.
    """
    trimmed = _trim_trailing_comma(text)
    unmatched: list[str] = []
    for char in trimmed:
        if char in _CLOSER_FOR:
            unmatched.append(char)
        elif char in ("}", "]") and unmatched:
            unmatched.pop()
    return trimmed + "".join(_CLOSER_FOR[char] for char in reversed(unmatched))


def count_closers(text: str) -> str:
    """Append the brace deficit as ``}`` characters, then the bracket deficit as ``]``."""
    trimmed = _trim_trailing_comma(text)
    braces = trimmed.count("{") - trimmed.count("}")
    brackets = trimmed.count("[") - trimmed.count("]")
    return trimmed + "}" * max(braces, 0) + "]" * max(brackets, 0)


def outermost_object(text: str) -> str | None:
    """Return the span from the first ``{`` to the last ``}``, if any."""
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last <= first:
        return None
    return text[first : last + 1]


def _with_outermost_span(text: str) -> list[str]:
    candidates = [text]
    span = outermost_object(text)
    if span is not None and span != text:
        candidates.append(span)
    return candidates


def _trim_trailing_comma(text: str) -> str:
    trimmed = text.rstrip()
    if trimmed.endswith(","):
        trimmed = trimmed[:-1].rstrip()
    return trimmed


def _try_parse(text: str) -> tuple[bool, Any]:
    try:
        return (True, json.loads(text))
    except (json.JSONDecodeError, ValueError, RecursionError):
        return (False, None)
