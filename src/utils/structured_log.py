"""Structured logging for a machine-parseable audit trail of submissions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from structlog.processors import JSONRenderer
from structlog.typing import Processor

_configured = False
_logger: structlog.BoundLogger | None = None


def configure_run_logging(log_dir: str) -> None:
    """One-time setup. Writes JSON lines to {log_dir}/audit.jsonl."""
    global _configured, _logger
    if _configured:
        return
    audit_path = Path(log_dir) / "audit.jsonl"
    audit_path.parent.mkdir(parents=True, exist_ok=True)
    file_handle = open(audit_path, "a", encoding="utf-8")

    def _file_logger_factory(*args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file_handle)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        JSONRenderer(),
    ]
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=_file_logger_factory,
        cache_logger_on_first_use=True,
    )
    _configured = True
    _logger = structlog.get_logger()


def reset_run_logging() -> None:
    """Drop the configured logger so the next configure call starts fresh."""
    global _configured, _logger
    _configured = False
    _logger = None
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def bind_submission(submission_id: str, user_id: str | None = None) -> None:
    """Bind submission context so every audit line carries submission_id and user_id."""
    structlog.contextvars.bind_contextvars(submission_id=submission_id, user_id=user_id)


def unbind_submission() -> None:
    structlog.contextvars.unbind_contextvars("submission_id", "user_id")


def log_model_call(
    model: str,
    status: str,
    *,
    latency_ms: int | None = None,
    response_chars: int | None = None,
    tokens_in: int | None = None,
    tokens_out: int | None = None,
) -> None:
    """Log one outbound model call."""
    payload: dict[str, Any] = {"model": model, "status": status}
    if latency_ms is not None:
        payload["latency_ms"] = latency_ms
    if response_chars is not None:
        payload["response_chars"] = response_chars
    if tokens_in is not None:
        payload["tokens_in"] = tokens_in
    if tokens_out is not None:
        payload["tokens_out"] = tokens_out
    if _logger is not None:
        _logger.info("model_call", **payload)


def log_submission(
    status: str,
    *,
    model: str | None = None,
    error_kind: str | None = None,
    error: str | None = None,
    run_id: str | None = None,
    elapsed_s: float | None = None,
    counts: dict[str, int] | None = None,
) -> None:
    """Log the terminal outcome of a submission (success, failure, timeout ...)."""
    payload: dict[str, Any] = {"status": status}
    if model is not None:
        payload["model"] = model
    if error_kind is not None:
        payload["error_kind"] = error_kind
    if error is not None:
        payload["error"] = error
    if run_id is not None:
        payload["run_id"] = run_id
    if elapsed_s is not None:
        payload["elapsed_s"] = round(elapsed_s, 2)
    if counts is not None:
        payload["counts"] = counts
    if _logger is not None:
        _logger.info("submission", **payload)


def load_events_from_jsonl(path: str) -> list[dict[str, Any]]:
    """Read an audit.jsonl file. Skips lines that fail to parse."""
    result: list[dict[str, Any]] = []
    try:
        with open(path, encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                try:
                    result.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except OSError:
        pass
    return result
