"""Extraction package: prompt building, request validation and reply normalization."""

from src.extraction.exceptions import (
    ExtractionTimeoutError,
    InputValidationError,
    ParseFailureError,
    PaymentRequiredError,
    PersistenceError,
    RateLimitedError,
    SubmissionCancelledError,
    SubmissionInProgressError,
    TranscriptEngineError,
    UnauthenticatedError,
    UpstreamError,
)
from src.extraction.normalizer import (
    ParseFailure,
    StructuredSuccess,
    TransportFailure,
    classify_gateway_status,
    coerce_output,
    normalize_reply,
    strip_code_fences,
)
from src.extraction.prompt_builder import OUTPUT_SCHEMA_SKELETON, build_messages, build_prompt
from src.extraction.validation import validate_request

__all__ = [
    "ExtractionTimeoutError",
    "InputValidationError",
    "OUTPUT_SCHEMA_SKELETON",
    "ParseFailure",
    "ParseFailureError",
    "PaymentRequiredError",
    "PersistenceError",
    "RateLimitedError",
    "StructuredSuccess",
    "SubmissionCancelledError",
    "SubmissionInProgressError",
    "TranscriptEngineError",
    "TransportFailure",
    "UnauthenticatedError",
    "UpstreamError",
    "build_messages",
    "build_prompt",
    "classify_gateway_status",
    "coerce_output",
    "normalize_reply",
    "strip_code_fences",
    "validate_request",
]
