"""Utility functions for docforge.

Contains helper functions for:
- Reading text inputs (targets and reference files)
- Prompt size limiting
- Error message formatting
"""

import logging
import os

from docforge.constants import TRUNCATION_MARKER

logger = logging.getLogger(__name__)


# =============================================================================
# Text inputs
# =============================================================================


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def is_binary_file(path: str) -> bool:
    """Check if a file appears to be binary by looking for NUL bytes."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(512)
            return b"\x00" in chunk
    except OSError:
        return False


def read_text_input(path: str) -> str:
    """Read a text file given on the command line.

    Args:
        path: File path; ``~`` is expanded.

    Returns:
        The file contents, decoded as UTF-8 with replacement.

    Raises:
        OSError: The file cannot be read.
        ValueError: The file is binary.
    """
    expanded = os.path.expanduser(path)
    if is_binary_file(expanded):
        raise ValueError(f"{path} is a binary file; only text inputs are supported")
    with open(expanded, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def read_reference_file(path: str) -> tuple[str, str]:
    """Read a reference template for the prompt.

    Args:
        path: Path of the reference file.

    Returns:
        Tuple of (name, content) where content is the file text or a
        bracketed status note when it cannot be used.
    """
    name = os.path.basename(path)
    try:
        return (name, read_text_input(path))
    except ValueError:
        logger.warning("Skipping binary reference file %s", path)
        return (name, "[binary file: contents not included]")
    except OSError as e:
        logger.warning("Failed to process reference file %s: %s", path, e)
        return (name, f"[could not read file: {e}]")


# =============================================================================
# Error formatting
# =============================================================================


def friendly_error(model: str, exc: Exception) -> str:
    """Extract a clean, one-line error message from a litellm exception.

    Detects common root causes and returns actionable guidance instead of
    raw tracebacks.

    Args:
        model: The model string that failed.
        exc: The exception raised by litellm.

    Returns:
        A concise, human-readable error string.
    """
    from docforge.config import get_provider_from_model

    msg = str(exc)
    exc_type = type(exc).__name__

    # Detect trailing \r in API keys (Windows line endings in .env files)
    if "\\r" in msg or "\r" in msg or "Illegal header value" in msg:
        provider = get_provider_from_model(model)
        return (
            f"API key for '{provider}' has a trailing carriage return (\\r). "
            f"This usually means your .env file has Windows-style (CRLF) line endings. "
            f"Fix: run `sed -i 's/\\r$//' .env` or re-save with Unix (LF) line endings."
        )

    if "Connection error" in msg or "ConnectionError" in msg:
        return f"Connection error — cannot reach {model}. Check network access and firewall rules."

    if "LLM Provider NOT provided" in msg:
        return (
            f"Unrecognized model format '{model}'. "
            f"litellm could not determine the provider. "
            f"Check the model string follows 'provider/model-name' format."
        )

    if "content_filter" in msg:
        return f"Content filter activated for {model} — model refused to respond."

    # Generic: extract just the first meaningful line, drop tracebacks
    first_line = msg.split("\n")[0].strip()
    for prefix in ("litellm.InternalServerError: ", "litellm.BadRequestError: ",
                    "litellm.APIConnectionError: ", "litellm.AuthenticationError: "):
        if prefix in first_line:
            first_line = first_line.split(prefix, 1)[-1]
    return f"{exc_type}: {first_line}"
