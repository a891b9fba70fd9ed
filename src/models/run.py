"""Run record and evaluation models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from src.models.enums import Bucket
from src.models.sred import (
    BigPictureItem,
    CandidateProject,
    DraftingMaterial,
    IterationItem,
    SREDOutput,
    WorkPerformedItem,
)


_TIMESTAMP = TypeAdapter(datetime)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RunMetadata(BaseModel):
    """Optional labels an operator attaches to a submission."""

    client_name: Optional[str] = None
    fiscal_year: Optional[str] = None
    meeting_type: Optional[str] = None
    context_pack_name: Optional[str] = None
    context_pack_version: Optional[str] = None
    prompt_name: Optional[str] = None
    prompt_version: Optional[str] = None


class RunEvaluation(BaseModel):
    """Human review scores (1-5) and notes per bucket. Unset fields are left untouched."""

    eval_candidate_projects: Optional[int] = Field(default=None, ge=1, le=5)
    eval_big_picture: Optional[int] = Field(default=None, ge=1, le=5)
    eval_work_performed: Optional[int] = Field(default=None, ge=1, le=5)
    eval_iterations: Optional[int] = Field(default=None, ge=1, le=5)
    eval_drafting_material: Optional[int] = Field(default=None, ge=1, le=5)
    eval_notes_candidate_projects: Optional[str] = None
    eval_notes_big_picture: Optional[str] = None
    eval_notes_work_performed: Optional[str] = None
    eval_notes_iterations: Optional[str] = None
    eval_notes_drafting_material: Optional[str] = None
    eval_notes_overall: Optional[str] = None

    @classmethod
    def for_bucket(
        cls, bucket: Bucket, score: Optional[int] = None, notes: Optional[str] = None
    ) -> "RunEvaluation":
        values = {}
        if score is not None:
            values[f"eval_{bucket.value}"] = score
        if notes is not None:
            values[f"eval_notes_{bucket.value}"] = notes
        return cls.model_validate(values)


class Run(BaseModel):
    """One persisted submission: inputs, model used, output and evaluation.

    Immutable after creation except for the ``eval_*`` fields.
    """

    model_config = ConfigDict(protected_namespaces=())

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = Field(default_factory=_utc_now_iso)
    user_id: Optional[str] = None
    transcript_text: str
    client_name: Optional[str] = None
    fiscal_year: Optional[str] = None
    meeting_type: Optional[str] = None
    context_pack_text: str
    context_pack_name: Optional[str] = None
    context_pack_version: Optional[str] = None
    model_used: str
    prompt_text: str = ""
    prompt_name: Optional[str] = None
    prompt_version: Optional[str] = None
    is_structured: bool = True
    output_candidate_projects: Optional[List[CandidateProject]] = None
    output_big_picture: Optional[List[BigPictureItem]] = None
    output_work_performed: Optional[List[WorkPerformedItem]] = None
    output_iterations: Optional[List[IterationItem]] = None
    output_drafting_material: Optional[DraftingMaterial] = None
    raw_output: Optional[str] = None
    eval_candidate_projects: Optional[int] = None
    eval_big_picture: Optional[int] = None
    eval_work_performed: Optional[int] = None
    eval_iterations: Optional[int] = None
    eval_drafting_material: Optional[int] = None
    eval_notes_candidate_projects: Optional[str] = None
    eval_notes_big_picture: Optional[str] = None
    eval_notes_work_performed: Optional[str] = None
    eval_notes_iterations: Optional[str] = None
    eval_notes_drafting_material: Optional[str] = None
    eval_notes_overall: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        *,
        transcript: str,
        context_pack: str,
        system_prompt: str,
        model_used: str,
        metadata: Optional[RunMetadata] = None,
        output: Optional[SREDOutput] = None,
        raw_output: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> "Run":
        meta = metadata or RunMetadata()
        fields = dict(
            transcript_text=transcript,
            context_pack_text=context_pack,
            prompt_text=system_prompt,
            model_used=model_used,
            user_id=user_id,
            is_structured=output is not None,
            raw_output=raw_output,
            **meta.model_dump(),
        )
        if output is not None:
            fields.update(
                output_candidate_projects=output.candidate_projects,
                output_big_picture=output.big_picture,
                output_work_performed=output.work_performed,
                output_iterations=output.iterations,
                output_drafting_material=output.drafting_material,
            )
        return cls(**fields)

    @property
    def output(self) -> SREDOutput:
        """Structured output with absent buckets normalized to empty."""
        return SREDOutput(
            candidate_projects=self.output_candidate_projects or [],
            big_picture=self.output_big_picture or [],
            work_performed=self.output_work_performed or [],
            iterations=self.output_iterations or [],
            drafting_material=self.output_drafting_material or DraftingMaterial(),
        )

    @property
    def created_datetime(self) -> datetime:
        """``created_at`` parsed as ISO 8601, accepting a trailing ``Z``."""
        return _TIMESTAMP.validate_python(self.created_at)

    def with_evaluation(self, evaluation: RunEvaluation) -> "Run":
        return self.model_copy(update=evaluation.model_dump(exclude_none=True))
