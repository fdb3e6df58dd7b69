"""Balanced-block scanning over JavaScript/JSON-like text.

Locates the shortest well-nested ``{...}`` (or ``[...]``) span starting at
a given offset. String literals, escape sequences, and line/block comments
are tracked so that braces inside them are never counted. The scan is
purely lexical and never backtracks.

Used by the fuzzy extractor to carve out nested object values and by the
preview locator to carve out callable code blocks.
"""

import re
from dataclasses import dataclass

QUOTE_CHARS = ('"', "'", "`")
ESCAPE_CHAR = "\\"

LINE_COMMENT = "line"
BLOCK_COMMENT = "block"


@dataclass
class ScanState:
    """Transient state of a single scan.

    A string delimiter and a comment mode are never active at the same
    time; escape_pending only matters while inside a string.
    """

    depth: int = 0
    string_delimiter: str | None = None
    comment_mode: str | None = None
    escape_pending: bool = False
    seen_open: bool = False


@dataclass(frozen=True)
class ExtractedBlock:
    """A substring of the source and its ``[start, end)`` offsets."""

    text: str
    start: int
    end: int


def scan_balanced(
    text: str,
    start_index: int = 0,
    opener: str = "{",
    closer: str = "}",
) -> ExtractedBlock | None:
    """Return the shortest balanced block starting at ``start_index``.

    The block runs from ``start_index`` (which need not be the opener
    itself, e.g. a ``function`` keyword) through the closer that brings
    the depth back to zero after the first opener.

    Args:
        text: Source text to scan.
        start_index: Offset to start scanning from.
        opener: Structural opening character ("{" or "[").
        closer: Matching closing character.

    Returns:
        The ExtractedBlock, or None if the text ends before the block
        closes or no opener is found.
    """
    if not text or start_index < 0 or start_index >= len(text):
        return None

    state = ScanState()
    length = len(text)
    i = start_index

    while i < length:
        char = text[i]

        if state.string_delimiter is not None:
            if state.escape_pending:
                state.escape_pending = False
            elif char == ESCAPE_CHAR:
                state.escape_pending = True
            elif char == state.string_delimiter:
                state.string_delimiter = None
            i += 1
            continue

        if state.comment_mode == LINE_COMMENT:
            if char == "\n":
                state.comment_mode = None
            i += 1
            continue

        if state.comment_mode == BLOCK_COMMENT:
            if char == "*" and text[i + 1 : i + 2] == "/":
                state.comment_mode = None
                i += 2
            else:
                i += 1
            continue

        if char in QUOTE_CHARS:
            state.string_delimiter = char
            i += 1
            continue

        if char == "/":
            following = text[i + 1 : i + 2]
            if following == "/":
                state.comment_mode = LINE_COMMENT
                i += 2
                continue
            if following == "*":
                state.comment_mode = BLOCK_COMMENT
                i += 2
                continue

        if char == opener:
            state.depth += 1
            state.seen_open = True
        elif char == closer and state.depth > 0:
            state.depth -= 1
            if state.seen_open and state.depth == 0:
                return ExtractedBlock(
                    text=text[start_index : i + 1],
                    start=start_index,
                    end=i + 1,
                )
        i += 1

    return None


def find_block_after(
    text: str,
    pattern: str | re.Pattern,
    opener: str = "{",
    closer: str = "}",
    flags: int = 0,
) -> ExtractedBlock | None:
    """Find ``pattern`` and return the balanced block opening after it.

    The scan starts at the opener the match ends with, or else at the
    first opener after the match, so the returned block always starts
    with the opener.

    Args:
        text: Source text to search.
        pattern: Regex (string or compiled) marking where to look.
        opener: Structural opening character.
        closer: Matching closing character.
        flags: Regex flags when ``pattern`` is a string.

    Returns:
        The ExtractedBlock, or None if the marker or a balanced block
        is missing.
    """
    match = re.search(pattern, text, flags) if isinstance(pattern, str) else pattern.search(text)
    if match is None:
        return None
    if match.group(0).endswith(opener):
        start = match.end() - 1
    else:
        start = text.find(opener, match.end())
    if start == -1:
        return None
    return scan_balanced(text, start, opener, closer)
