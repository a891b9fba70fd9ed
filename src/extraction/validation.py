"""Request validation run before any outbound model call."""

from __future__ import annotations

import logging

from src.extraction.exceptions import InputValidationError
from src.models import ExtractionRequest, LimitsConfig, SettingsConfig

logger = logging.getLogger(__name__)


def validate_request(request: ExtractionRequest, settings: SettingsConfig) -> ExtractionRequest:
    """Check required fields, size ceilings and model selection.

    Returns a copy with ``model`` defaulted and ``system_prompt`` coerced to a
    string. Raises InputValidationError with a descriptive message otherwise.
    """
    limits: LimitsConfig = settings.limits

    if not request.transcript or not isinstance(request.transcript, str):
        raise InputValidationError("Transcript is required and must be a string")
    if not request.context_pack or not isinstance(request.context_pack, str):
        raise InputValidationError("Context pack is required and must be a string")
    if request.system_prompt is not None and not isinstance(request.system_prompt, str):
        raise InputValidationError("System prompt must be a string")

    if len(request.transcript) > limits.transcript_max_chars:
        raise InputValidationError(
            f"Transcript exceeds maximum length of {limits.transcript_max_chars} characters"
        )
    if len(request.context_pack) > limits.context_pack_max_chars:
        raise InputValidationError(
            f"Context pack exceeds maximum length of {limits.context_pack_max_chars} characters"
        )
    system_prompt = request.system_prompt or ""
    if len(system_prompt) > limits.system_prompt_max_chars:
        raise InputValidationError(
            f"System prompt exceeds maximum length of {limits.system_prompt_max_chars} characters"
        )

    model_key = request.model or settings.default_model
    allowed = settings.allowed_models()
    if model_key not in allowed:
        raise InputValidationError(
            f"Invalid model selection. Allowed models: {', '.join(allowed)}"
        )

    logger.debug(
        "Request accepted: model=%s transcript=%d chars context=%d chars",
        model_key,
        len(request.transcript),
        len(request.context_pack),
    )
    return request.model_copy(update={"model": model_key, "system_prompt": system_prompt})
