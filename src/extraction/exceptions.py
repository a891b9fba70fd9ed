"""
Error taxonomy for transcript processing and run submission.
"""

from __future__ import annotations

from typing import Optional

from src.models.enums import ErrorKind


class TranscriptEngineError(Exception):
    """Base exception. ``kind`` names the category, ``http_status`` the wire status."""

    kind: ErrorKind = ErrorKind.UPSTREAM
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": self.message}


class InputValidationError(TranscriptEngineError):
    """Raised when a request is missing, oversized or malformed. No model call is made."""

    kind = ErrorKind.VALIDATION
    http_status = 400


class UnauthenticatedError(TranscriptEngineError):
    """Raised when the session credential is missing or invalid."""

    kind = ErrorKind.UNAUTHENTICATED
    http_status = 401


class UpstreamError(TranscriptEngineError):
    """Raised when the model gateway fails or returns a non-success status."""

    kind = ErrorKind.UPSTREAM
    http_status = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class RateLimitedError(UpstreamError):
    """Raised when the gateway reports 429."""

    kind = ErrorKind.RATE_LIMITED
    http_status = 429


class PaymentRequiredError(UpstreamError):
    """Raised when the gateway reports 402."""

    kind = ErrorKind.PAYMENT_REQUIRED
    http_status = 402


class ParseFailureError(TranscriptEngineError):
    """Raised when the model replied with something that is not usable JSON.

    The raw reply is kept verbatim so the operator can see what the model said.
    """

    kind = ErrorKind.PARSE_FAILURE
    http_status = 422

    def __init__(self, message: str, raw_content: str):
        super().__init__(message)
        self.raw_content = raw_content

    def to_payload(self) -> dict:
        return {"error": self.message, "raw_content": self.raw_content}


class PersistenceError(TranscriptEngineError):
    """Raised when a run could not be saved. Non-fatal for the submission."""

    kind = ErrorKind.PERSISTENCE
    http_status = 500


class ExtractionTimeoutError(TranscriptEngineError):
    """Raised when the client-side bound on a submission expires."""

    kind = ErrorKind.TIMEOUT
    http_status = 504


class SubmissionCancelledError(TranscriptEngineError):
    """Raised when an in-flight submission is cancelled by the caller."""

    kind = ErrorKind.CANCELLED
    http_status = 499


class SubmissionInProgressError(TranscriptEngineError):
    """Raised when a session already has a submission in flight."""

    kind = ErrorKind.VALIDATION
    http_status = 409
