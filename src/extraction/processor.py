"""Server-side processing of one transcript: validate, prompt, call, normalize."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from src.extraction.normalizer import normalize_reply
from src.extraction.prompt_builder import build_prompt
from src.extraction.validation import validate_request
from src.llm.provider import LLMProvider
from src.models import ExtractionRequest, SettingsConfig, SREDOutput

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of a successful processing call.

    Exactly one of ``output`` (structured mode) or ``content`` (unstructured
    mode) is set.
    """

    model_used: str
    output: Optional[SREDOutput] = None
    content: Optional[str] = None
    data: Any = None

    @property
    def is_structured(self) -> bool:
        return self.output is not None

    def to_payload(self) -> dict:
        if self.output is not None:
            return {"output": self.output.model_dump(mode="json"), "model_used": self.model_used}
        return {"content": self.content, "model_used": self.model_used}


class TranscriptProcessor:
    def __init__(self, settings: SettingsConfig, provider: Optional[LLMProvider] = None):
        self.settings = settings
        self.provider = provider or LLMProvider(settings)

    async def process(self, request: ExtractionRequest) -> ProcessResult:
        """Run one extraction.

        Raises InputValidationError before any model call when the request is
        invalid, UpstreamError (or a subclass) on gateway failure, and
        ParseFailureError when a structured reply is not usable JSON.
        """
        request = validate_request(request, self.settings)
        structured = not request.disable_structured_output
        logger.info(
            "Processing transcript with model %s (transcript=%d chars, context=%d chars)",
            request.model,
            len(request.transcript),
            len(request.context_pack),
        )

        prompt = build_prompt(request.context_pack, request.transcript, structured=structured)
        reply, resolved = await self.provider.complete(
            request.model, prompt, system_prompt=request.system_prompt
        )

        if not structured:
            return ProcessResult(model_used=resolved.model, content=reply)

        normalized = normalize_reply(reply, strict=self.settings.extraction.strict_schema)
        if not normalized.ok:
            raise normalized.to_exception()
        return ProcessResult(model_used=resolved.model, output=normalized.output, data=normalized.data)
