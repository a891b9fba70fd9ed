"""Model-key resolution and backend selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.extraction.exceptions import InputValidationError
from src.llm.base_client import LLMBackend
from src.models import SettingsConfig

_log = logging.getLogger(__name__)


@dataclass
class ResolvedModel:
    key: str
    model: str
    display_name: str


class LLMProvider:
    """Maps an operator-facing model key to a concrete model and calls the backend."""

    def __init__(self, settings: SettingsConfig, backend: Optional[LLMBackend] = None):
        self.settings = settings
        self.backend = backend or self._default_backend(settings)

    @staticmethod
    def _default_backend(settings: SettingsConfig) -> LLMBackend:
        if settings.llm.backend == "pydantic_ai":
            from src.llm.pydantic_client import PydanticAIClient

            return PydanticAIClient(temperature=settings.llm.temperature)
        from src.llm.gateway_client import GatewayClient

        return GatewayClient(settings.gateway)

    def resolve(self, key: str) -> ResolvedModel:
        if key not in self.settings.models:
            allowed = ", ".join(self.settings.allowed_models())
            raise InputValidationError(f"Invalid model selection. Allowed models: {allowed}")
        entry = self.settings.models[key]
        model = entry.model
        if self.settings.llm.backend == "pydantic_ai":
            model = self.settings.direct_models.get(key, model)
        return ResolvedModel(key=key, model=model, display_name=entry.display_name or model)

    async def complete(self, key: str, prompt: str, *, system_prompt: str = "") -> tuple[str, ResolvedModel]:
        resolved = self.resolve(key)
        _log.info("Using model: %s (%s)", resolved.display_name, resolved.model)
        text = await self.backend.complete(prompt, model=resolved.model, system_prompt=system_prompt)
        return text, resolved
