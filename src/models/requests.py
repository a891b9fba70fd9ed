"""Request payloads accepted by the processing endpoint and the submission flow."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.run import RunMetadata


class ExtractionRequest(BaseModel):
    """Body of a transcript-processing call.

    Field names follow the gateway contract (``contextPack``, ``systemPrompt``,
    ``disableStructuredOutput``); snake_case names are accepted as well. Types
    are loose on purpose so that missing or mistyped values reach
    ``validate_request`` and produce its descriptive messages.
    """

    model_config = ConfigDict(populate_by_name=True)

    transcript: Any = None
    context_pack: Any = Field(default=None, alias="contextPack")
    model: Any = None
    system_prompt: Any = Field(default=None, alias="systemPrompt")
    disable_structured_output: bool = Field(default=False, alias="disableStructuredOutput")


class SubmissionForm(BaseModel):
    """Everything the operator fills in for one run."""

    model_config = ConfigDict(protected_namespaces=())

    transcript: str
    context_pack: str
    model: str = "gemini"
    system_prompt: str = ""
    disable_structured_output: bool = False
    metadata: RunMetadata = Field(default_factory=RunMetadata)

    def to_request(self) -> ExtractionRequest:
        return ExtractionRequest(
            transcript=self.transcript,
            context_pack=self.context_pack,
            model=self.model,
            system_prompt=self.system_prompt,
            disable_structured_output=self.disable_structured_output,
        )
