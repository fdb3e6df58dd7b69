"""Exceptions raised by docforge.

Recoverable conditions inside the pipeline (a failed structural parse, a
missing field) are plain values in docforge.models. Only the conditions
below cross the public API as exceptions.
"""

from docforge.constants import EMPTY_RESPONSE_MESSAGE, MALFORMED_RESPONSE_MESSAGE


class DocforgeError(Exception):
    """Base class for all docforge errors."""


class ResponseParseError(DocforgeError):
    """Raised when a model response cannot be turned into a result."""

    default_message = MALFORMED_RESPONSE_MESSAGE

    def __init__(self, diagnostic: str | None = None):
        self.diagnostic = diagnostic or self.default_message
        super().__init__(self.diagnostic)


class EmptyInputError(ResponseParseError):
    """The model returned no text at all."""

    default_message = EMPTY_RESPONSE_MESSAGE


class UnrecoverableExtractionError(ResponseParseError):
    """Neither code field could be recovered from the response."""


class ModelRequestError(DocforgeError):
    """Raised when the model call itself is rejected."""


class PreviewError(DocforgeError):
    """Raised when no preview strategy yields a document definition."""
