"""
Custom exception hierarchy for document rule checking.

Each exception type maps to one stage of the analysis pipeline, so the HTTP
layer can decide between a client error and a server error without parsing
messages.

Invalid citations are deliberately absent here: they are downgraded to empty
evidence by the evidence validator and never fail a request.
"""

from __future__ import annotations


class RuleCheckError(Exception):
    """Base exception for all analysis failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InputError(RuleCheckError):
    """The caller sent a missing file, missing rules, or malformed rules JSON."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INVALID_INPUT", message, details)


class ExtractionError(RuleCheckError):
    """The document could not be turned into text."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("EXTRACTION_FAILED", message, details)


class ModelCallError(RuleCheckError):
    """The language model service failed or timed out."""

    def __init__(
        self, message: str, details: dict | None = None, retryable: bool = False
    ):
        self.retryable = retryable
        super().__init__("MODEL_CALL_FAILED", message, details)


class ResponseParseError(RuleCheckError):
    """The model reply contained no recoverable JSON array."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("RESPONSE_PARSE_FAILED", message, details)
