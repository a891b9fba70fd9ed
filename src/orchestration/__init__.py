"""Submission orchestration: bounded sessions and the submit-then-persist flow."""

from src.orchestration.context import SubmissionSession, timeout_message
from src.orchestration.submission import PERSIST_WARNING, SubmissionResult, SubmissionRunner

__all__ = [
    "PERSIST_WARNING",
    "SubmissionResult",
    "SubmissionRunner",
    "SubmissionSession",
    "timeout_message",
]
