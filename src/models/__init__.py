"""Model exports."""

from src.models.config import (
    AuthConfig,
    ExtractionConfig,
    GatewayConfig,
    LimitsConfig,
    LLMConfig,
    LoggingSettings,
    ModelEntry,
    SettingsConfig,
    StorageConfig,
    SubmissionConfig,
)
from src.models.enums import (
    BigPictureType,
    Bucket,
    BulletStatus,
    Confidence,
    ErrorKind,
    IterationStatus,
    ModelKey,
)
from src.models.requests import ExtractionRequest, SubmissionForm
from src.models.run import Run, RunEvaluation, RunMetadata
from src.models.sred import (
    DRAFTING_SECTIONS,
    BigPictureItem,
    CandidateProject,
    Citation,
    DraftingBullet,
    DraftingMaterial,
    IterationItem,
    SREDOutput,
    WorkPerformedItem,
)

__all__ = [
    "AuthConfig",
    "BigPictureItem",
    "BigPictureType",
    "Bucket",
    "BulletStatus",
    "CandidateProject",
    "Citation",
    "Confidence",
    "DRAFTING_SECTIONS",
    "DraftingBullet",
    "DraftingMaterial",
    "ErrorKind",
    "ExtractionConfig",
    "ExtractionRequest",
    "GatewayConfig",
    "IterationItem",
    "IterationStatus",
    "LimitsConfig",
    "LLMConfig",
    "LoggingSettings",
    "ModelEntry",
    "ModelKey",
    "Run",
    "RunEvaluation",
    "RunMetadata",
    "SettingsConfig",
    "SREDOutput",
    "StorageConfig",
    "SubmissionConfig",
    "SubmissionForm",
    "WorkPerformedItem",
]
