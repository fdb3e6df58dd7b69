"""Fuzzy, key-bounded field extraction.

When the response cannot be parsed as a whole, individual fields are
recovered by locating textual markers instead: a string field runs from
its ``"key": "`` marker up to the marker of the key that follows it. This
ignores JSON structure on purpose so that an unescaped quote or a
truncated tail in one field does not cost the others.

Nothing in this module raises on malformed input; a missing field is
reported as None.
"""

import json
import logging
import re
from typing import Any

from docforge.repair import quote_bare_keys
from docforge.scanner import find_block_after, scan_balanced

logger = logging.getLogger(__name__)

# Escapes undone when a raw captured span is decoded
_ESCAPE_RE = re.compile(r'\\([\\"nrt])')
_ESCAPE_MAP = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}

_VALUE_OPENER_RE = re.compile(r"[\[{]")


def _key_marker(key: str) -> str:
    # Quoted or bare key, not the tail of a longer identifier
    return rf"(?<![\w$])[\"']?{re.escape(key)}[\"']?\s*:\s*"


def unescape_json_string(raw: str | None) -> str:
    """Decode the escapes of a raw JSON string body in a single pass.

    ``\\\\`` becomes ``\\``; ``\\"``, ``\\n``, ``\\r`` and ``\\t`` become
    their literal characters. Anything else is left as is.
    """
    if not raw:
        return ""
    return _ESCAPE_RE.sub(lambda m: _ESCAPE_MAP[m.group(1)], raw)


def extract_field(text: str, key: str, next_key: str | None = None) -> str | None:
    """Extract the string value of ``key`` bounded by ``next_key``.

    Args:
        text: Sanitized, possibly malformed model output.
        key: The field to extract (matched case-insensitively).
        next_key: The key declared after ``key`` in the schema, if any.

    Returns:
        The unescaped field content, or None if the ``"key": "`` marker
        is absent.
    """
    if not text:
        return None

    start_match = re.search(_key_marker(key) + r"[\"']", text, re.IGNORECASE)
    if start_match is None:
        return None
    content_start = start_match.end()

    content_end = -1
    if next_key:
        end_pattern = rf"[\"'],\s*[\"']?{re.escape(next_key)}[\"']?\s*:"
        end_match = re.search(end_pattern, text[content_start:], re.IGNORECASE)
        if end_match is not None:
            content_end = content_start + end_match.start()

    if content_end == -1:
        # Last field, or the successor marker is mangled: assume the
        # document closes with braces/brackets outside the string.
        last_quote = text.rfind('"', content_start)
        content_end = last_quote if last_quote != -1 else len(text)

    return unescape_json_string(text[content_start:content_end])


def extract_object(text: str, key: str) -> dict | None:
    """Extract and parse the ``{...}`` value of ``key``.

    Returns:
        The parsed mapping, or None if the key, a balanced block, or a
        parseable object is missing.
    """
    if not text:
        return None

    block = find_block_after(text, _key_marker(key) + r"\{", flags=re.IGNORECASE)
    if block is None:
        return None

    for candidate in (block.text, quote_bare_keys(block.text)):
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, ValueError, RecursionError):
            continue
        if isinstance(value, dict):
            return value
    logger.debug("Found %s block but could not parse it", key)
    return None


def extract_value(text: str, key: str) -> Any | None:
    """Extract and parse the array or object value of ``key``.

    The value starts at the first ``[`` or ``{`` after the key and is
    scanned in the matching bracket mode.

    Returns:
        The parsed list or dict, or None.
    """
    if not text:
        return None

    key_match = re.search(_key_marker(key), text, re.IGNORECASE)
    if key_match is None:
        return None

    start_match = _VALUE_OPENER_RE.search(text, key_match.end())
    if start_match is None:
        return None
    start = start_match.start()
    opener = text[start]
    closer = "]" if opener == "[" else "}"

    block = scan_balanced(text, start, opener, closer)
    if block is None:
        logger.debug("Value of %s is not closed", key)
        return None
    try:
        return json.loads(block.text)
    except (json.JSONDecodeError, ValueError, RecursionError):
        logger.debug("Value of %s is not valid JSON", key)
        return None


def extract_function(text: str, name: str) -> str | None:
    """Carve out the declaration of function ``name`` from free text.

    Recognizes ``async function name(``, ``function name(`` and
    ``const name = async``. The returned block runs from the declaration
    keyword through the closing brace of the body.
    """
    if not text:
        return None

    pattern = (
        rf"(async\s+function\s+{re.escape(name)}\s*\("
        rf"|function\s+{re.escape(name)}\s*\("
        rf"|const\s+{re.escape(name)}\s*=\s*async)"
    )
    match = re.search(pattern, text, re.IGNORECASE)
    if match is None:
        return None
    block = scan_balanced(text, match.start())
    return block.text if block is not None else None
