"""PydanticAI-backed client implementing the LLMBackend protocol.

Used when ``llm.backend`` is ``pydantic_ai``: the model key resolves to a
PydanticAI model string (``openai:``, ``anthropic:``, ``google-gla:`` ...) and
the provider is called directly instead of through the gateway. The reply is
requested as plain text so it goes through the same normalizer as gateway
replies.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from src.config.defaults import FALLBACK_SYSTEM_MESSAGE
from src.extraction.exceptions import UpstreamError
from src.utils import structured_log

logger = logging.getLogger(__name__)


class PydanticAIClient:
    """Provider-agnostic client backed by a PydanticAI Agent."""

    def __init__(self, temperature: Optional[float] = None):
        self.temperature = temperature

    async def complete(self, prompt: str, *, model: str, system_prompt: str = "") -> str:
        agent: Agent[None, str] = Agent(
            model,
            output_type=str,
            system_prompt=system_prompt or FALLBACK_SYSTEM_MESSAGE,
        )
        settings = ModelSettings(temperature=self.temperature) if self.temperature is not None else None
        started = time.monotonic()
        try:
            result = await agent.run(prompt, model_settings=settings)
        except Exception as exc:
            structured_log.log_model_call(model=model, status="error")
            raise UpstreamError(f"Model call failed: {exc}") from exc
        usage = result.usage()
        structured_log.log_model_call(
            model=model,
            status="success",
            latency_ms=int((time.monotonic() - started) * 1000),
            tokens_in=usage.input_tokens,
            tokens_out=usage.output_tokens,
        )
        return result.output
