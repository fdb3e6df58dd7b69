"""Text sanitization for model output and extracted code.

Normalizes the invisible and typographic noise that generative models
leave around JSON and code: zero-width marks, smart quotes, Markdown
code fences, and stray string-wrapper artifacts.
"""

import re

# Zero-width space, non-joiner, joiner, and byte-order mark
_INVISIBLE_RE = re.compile("[\u200b-\u200d\ufeff]")
_SMART_SINGLE_RE = re.compile("[\u2018\u2019]")
_SMART_DOUBLE_RE = re.compile("[\u201c\u201d]")

# Leading fence with optional language tag, and a trailing bare fence
_LEADING_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_TRAILING_FENCE_RE = re.compile(r"\r?\n?[ \t]*```$")

# Remains of a JSON string wrapper around a code snippet
_LEADING_ARTIFACT_RE = re.compile(r"^[\"']")
_TRAILING_ARTIFACT_RE = re.compile(r"[\"']\s*,?\s*$")


def sanitize(text: str | None, strip_artifacts: bool = False) -> str:
    """Normalize raw model text.

    Strips invisible marks, maps curly quotes to straight quotes, removes a
    leading language-tagged fence and a trailing fence, and trims
    whitespace. Fence (and artifact) stripping repeats until nothing more
    changes, so the function is idempotent.

    Args:
        text: Raw text. None is treated as empty.
        strip_artifacts: Also strip a stray leading quote and a stray
            trailing quote/comma. Only meant for code snippets; a JSON
            document legitimately ends with a quote when truncated.

    Returns:
        The cleaned text, possibly unchanged. Never raises.
    """
    if not text:
        return ""

    cleaned = _INVISIBLE_RE.sub("", text)
    cleaned = _SMART_SINGLE_RE.sub("'", cleaned)
    cleaned = _SMART_DOUBLE_RE.sub('"', cleaned)
    cleaned = cleaned.strip()

    while True:
        stripped = _LEADING_FENCE_RE.sub("", cleaned, count=1)
        stripped = _TRAILING_FENCE_RE.sub("", stripped, count=1)
        if strip_artifacts:
            stripped = _LEADING_ARTIFACT_RE.sub("", stripped, count=1)
            stripped = _TRAILING_ARTIFACT_RE.sub("", stripped, count=1)
        stripped = stripped.strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped
