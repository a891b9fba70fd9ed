"""Configuration models loaded from YAML."""

from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field


class GatewayConfig(BaseModel):
    base_url: str = "https://ai.gateway.lovable.dev/v1"
    api_key_env: str = "MODEL_GATEWAY_API_KEY"
    request_timeout_seconds: float = Field(gt=0, default=300.0)


class ModelEntry(BaseModel):
    model: str
    display_name: Optional[str] = None


def _default_models() -> Dict[str, ModelEntry]:
    return {
        "openai": ModelEntry(model="openai/gpt-5", display_name="GPT-5"),
        "claude": ModelEntry(model="google/gemini-2.5-pro", display_name="Gemini Pro"),
        "gemini": ModelEntry(model="google/gemini-2.5-flash", display_name="Gemini Flash"),
    }


def _default_direct_models() -> Dict[str, str]:
    return {
        "openai": "openai:gpt-5",
        "claude": "anthropic:claude-sonnet-4-5",
        "gemini": "google-gla:gemini-2.5-flash",
    }


class LLMConfig(BaseModel):
    backend: Literal["gateway", "pydantic_ai"] = "gateway"
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)


class LimitsConfig(BaseModel):
    transcript_max_chars: int = Field(ge=1, default=500_000)
    context_pack_max_chars: int = Field(ge=1, default=100_000)
    system_prompt_max_chars: int = Field(ge=1, default=10_000)


class SubmissionConfig(BaseModel):
    timeout_seconds: float = Field(gt=0, default=300.0)
    tick_seconds: float = Field(gt=0, default=1.0)


class ExtractionConfig(BaseModel):
    strict_schema: bool = Field(
        default=False,
        description="Demote JSON replies that do not match the SR&ED schema to parse failures.",
    )


class StorageConfig(BaseModel):
    db_path: str = "data/runs.db"
    export_dir: str = "data/exports"


class AuthConfig(BaseModel):
    session_tokens_env: str = "SRED_SESSION_TOKENS"


class LoggingSettings(BaseModel):
    level: Literal["minimal", "normal", "detailed", "full"] = "normal"
    log_file: Optional[str] = None
    structured_log_dir: Optional[str] = "logs"


class SettingsConfig(BaseModel):
    default_model: str = "gemini"
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    models: Dict[str, ModelEntry] = Field(default_factory=_default_models)
    direct_models: Dict[str, str] = Field(default_factory=_default_direct_models)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def allowed_models(self) -> list[str]:
        return list(self.models)
