"""Repair of double-escaped newlines in generated code.

Models sometimes emit the two characters ``\\n`` where a line break was
meant, so a decoded code string reads ``function() {\\n  return 1;\\n}``.
The rules below put real line breaks back at structural boundaries only.

Known limitation: the rules are lexical. An escaped newline inside a
string literal that happens to sit next to one of these punctuation
marks (e.g. ``"a;\\n"``) is rewritten too.
"""

import re

# (pattern, replacement), applied in order
_ESCAPE_RULES = (
    (re.compile(r"\\n\s*//"), "\n //"),  # line break before a comment
    (re.compile(r"//(.*?)\\n"), r"//\1" + "\n"),  # comment swallowing the next line
    (re.compile(r";\s*\\n"), ";\n"),
    (re.compile(r"\{\s*\\n"), "{\n"),
    (re.compile(r"\}\s*\\n"), "}\n"),
    (re.compile(r",\s*\\n"), ",\n"),
    (re.compile(r"\[\s*\\n"), "[\n"),
    (re.compile(r"\)\s*\\n"), ")\n"),
)


def normalize_escapes(code: str | None) -> str:
    """Restore real line breaks after statement and block punctuation.

    Args:
        code: A whole extracted code block.

    Returns:
        The code with literal ``\\n`` sequences adjacent to ``;``, ``{``,
        ``}``, ``,``, ``[``, ``)`` and ``//`` comments turned into newlines.
        Empty input is returned as an empty string.
    """
    if not code:
        return ""
    for pattern, replacement in _ESCAPE_RULES:
        code = pattern.sub(replacement, code)
    return code
