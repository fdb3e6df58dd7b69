"""Preview code location.

Prepares extracted pdfmake code for the sandboxed preview executor and
falls back to progressively smaller code blocks when the full snippet
does not run. The executor itself is external: any callable taking
``(code, data)`` and returning the document definition it produced, or
raising on failure.
"""

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from docforge.constants import PDF_FUNCTION_NAME
from docforge.errors import PreviewError
from docforge.sanitizer import sanitize
from docforge.scanner import ExtractedBlock, scan_balanced

logger = logging.getLogger(__name__)

Executor = Callable[[str, Any], Any]

_FENCE_RE = re.compile(r"```(?:javascript|js)?", re.IGNORECASE)

# Module syntax the sandbox cannot evaluate, with replacements
_MODULE_SYNTAX_RULES = (
    (re.compile(r"^\s*import\s+[\s\S]*?from\s+[\"'].*?[\"'];?", re.MULTILINE), ""),
    (re.compile(r"^\s*import\s+[\"'].*?[\"'];?", re.MULTILINE), ""),
    (re.compile(r"^\s*(?:const|let|var)\s+\w+\s*=\s*require\(.*?\);?", re.MULTILINE), ""),
    (re.compile(r"^\s*export\s+default\s+", re.MULTILINE), ""),
    (
        re.compile(
            r"^\s*export\s+(const|let|var|function|async|class|type|interface)\s",
            re.MULTILINE,
        ),
        r"\1 ",
    ),
    (re.compile(r"^\s*export\s*\{[\s\S]*?\}\s*;?", re.MULTILINE), ""),
    (re.compile(r"[\"']use strict[\"'];?"), ""),
)

NO_DEFINITION_MESSAGE = (
    "Could not detect a document definition. "
    "The code must return the 'docDefinition' object."
)
NOT_AN_OBJECT_MESSAGE = "Generated document definition is not an object."


def _function_pattern(name: str) -> re.Pattern:
    escaped = re.escape(name)
    return re.compile(
        rf"(async\s+function\s+{escaped}|const\s+{escaped}\s*=\s*async|function\s+{escaped})"
    )


def clean_code_for_preview(code: str) -> str:
    """Strip fences, string-wrapper artifacts and module syntax from code."""
    cleaned = sanitize(code, strip_artifacts=True)
    cleaned = _FENCE_RE.sub("", cleaned)
    for pattern, replacement in _MODULE_SYNTAX_RULES:
        cleaned = pattern.sub(replacement, cleaned)
    return cleaned


def locate_preview_block(
    code: str, function_name: str = PDF_FUNCTION_NAME
) -> ExtractedBlock | None:
    """Locate the block worth executing on its own.

    The declaration of ``function_name`` when present, otherwise the
    first top-level object literal.

    Returns:
        The ExtractedBlock, or None if nothing balanced was found.
    """
    if not code:
        return None
    match = _function_pattern(function_name).search(code)
    if match is not None:
        return scan_balanced(code, match.start())
    first_brace = code.find("{")
    if first_brace == -1:
        return None
    return scan_balanced(code, first_brace)


def render_preview(
    code: str,
    data: Any,
    execute: Executor,
    function_name: str = PDF_FUNCTION_NAME,
) -> dict | list:
    """Produce a document definition by running code in the sandbox.

    Strategy 1 runs the whole cleaned snippet. If that raises, strategy 2
    runs only the ``function_name`` declaration; if the snippet declares
    no such function, strategy 3 evaluates its first object literal.

    Args:
        code: Extracted pdfmake code.
        data: The extracted data payload passed to the code.
        execute: Sandbox executor, ``execute(code, data) -> definition``.
        function_name: Entry point the code is expected to declare.

    Returns:
        The document definition. An object gets an empty ``content`` list
        when its content is missing or empty; a list is returned as is.

    Raises:
        PreviewError: No strategy produced an object.
    """
    try:
        definition = execute(clean_code_for_preview(code), data)
    except Exception as first_error:
        logger.debug("Full-code preview failed: %s", first_error)
        definition = _run_fallbacks(code, data, execute, function_name, first_error)

    # Empty containers still count as a definition
    if not definition and not isinstance(definition, (Mapping, list, tuple)):
        raise PreviewError(NO_DEFINITION_MESSAGE)
    if isinstance(definition, (list, tuple)):
        return list(definition)
    if not isinstance(definition, Mapping):
        raise PreviewError(NOT_AN_OBJECT_MESSAGE)
    if not definition.get("content"):
        return {**definition, "content": []}
    return dict(definition)


def _run_fallbacks(
    code: str,
    data: Any,
    execute: Executor,
    function_name: str,
    first_error: Exception,
) -> Any:
    if _function_pattern(function_name).search(code) is not None:
        block = locate_preview_block(code, function_name)
        if block is None:
            raise PreviewError(friendly_preview_error(first_error)) from first_error
        try:
            return execute(clean_code_for_preview(block.text), data)
        except Exception as e:
            logger.warning("Function extraction strategy failed: %s", e)
            raise PreviewError(friendly_preview_error(first_error)) from first_error

    block = locate_preview_block(code, function_name)
    if block is None:
        raise PreviewError(friendly_preview_error(first_error)) from first_error
    try:
        return execute(f"return {block.text};", data)
    except Exception as e:
        logger.warning("Object literal strategy failed: %s", e)
        raise PreviewError(friendly_preview_error(first_error)) from first_error


def friendly_preview_error(exc: Exception) -> str:
    """Turn a sandbox failure into a message that tells the user what to do."""
    msg = str(exc) or "Failed to generate PDF preview."
    if isinstance(exc, SyntaxError) or "Unexpected token" in msg:
        return (
            f"Syntax Error in generated code: {msg}. The AI might have "
            f"produced invalid JavaScript. Try regenerating."
        )
    if "Cannot read properties of undefined" in msg or "docType" in msg:
        return (
            "Runtime Error: The generated code tried to access data that "
            "doesn't exist. Check the extracted data to see if it matches "
            "what the code expects."
        )
    return msg
