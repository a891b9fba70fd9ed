"""YAML and env loader with fail-fast validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Set

import yaml
from dotenv import load_dotenv

from src.models import SettingsConfig

DEFAULT_SETTINGS_PATH = "config/settings.yaml"


def _read_yaml(path: str) -> dict:
    resolved = Path(path)
    if not resolved.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with resolved.open("r", encoding="utf-8") as file_obj:
        loaded = yaml.safe_load(file_obj) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Expected object at root of YAML file: {path}")
    return loaded


def load_settings(settings_path: Optional[str] = None) -> SettingsConfig:
    """Load settings from YAML (path from argument, SRED_SETTINGS, or the default)."""
    load_dotenv()
    path = settings_path or os.getenv("SRED_SETTINGS", DEFAULT_SETTINGS_PATH)
    return SettingsConfig.model_validate(_read_yaml(path))


def get_required_env_keys(settings: SettingsConfig) -> list[str]:
    """Env vars that must be set for the configured backend.

    The gateway backend needs the gateway key; the PydanticAI backend needs
    the provider keys implied by the configured model prefixes.
    """
    if settings.llm.backend == "gateway":
        return [settings.gateway.api_key_env]
    prefix_to_env = {
        "google-gla:": "GEMINI_API_KEY",
        "google-vertex:": "GEMINI_API_KEY",
        "anthropic:": "ANTHROPIC_API_KEY",
        "openai:": "OPENAI_API_KEY",
        "groq:": "GROQ_API_KEY",
        "mistral:": "MISTRAL_API_KEY",
    }
    required: Set[str] = set()
    for model in settings.direct_models.values():
        for prefix, env_key in prefix_to_env.items():
            if model.startswith(prefix):
                required.add(env_key)
    return sorted(required)


def validate_secret_env(settings: SettingsConfig) -> list[str]:
    """Return the names of required env vars that are not set."""
    load_dotenv()
    return [key for key in get_required_env_keys(settings) if not os.getenv(key)]


def load_session_tokens(settings: SettingsConfig) -> Set[str]:
    """Accepted bearer tokens, comma-separated in the configured env var."""
    raw = os.getenv(settings.auth.session_tokens_env, "")
    return {token.strip() for token in raw.split(",") if token.strip()}
