"""SR&ED extraction output models.

Every scalar field is optional: models routinely omit fields, and renderers
treat ``None`` as "absent" rather than as an empty string. Enumerated fields
prefer the enum member and keep any other string verbatim (e.g. ``"high"``).
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import BigPictureType, BulletStatus, Confidence, IterationStatus


class Citation(BaseModel):
    quote: Optional[str] = None
    location: Optional[str] = None


class CandidateProject(BaseModel):
    label: Optional[str] = None
    description: Optional[str] = None
    signals: Optional[str] = None
    confidence: Optional[Union[Confidence, str]] = Field(default=None, union_mode="left_to_right")
    citations: List[Citation] = Field(default_factory=list)


class BigPictureItem(BaseModel):
    content: Optional[str] = None
    type: Optional[Union[BigPictureType, str]] = Field(default=None, union_mode="left_to_right")
    citations: List[Citation] = Field(default_factory=list)


class WorkPerformedItem(BaseModel):
    component: Optional[str] = None
    activity: Optional[str] = None
    issue_addressed: Optional[str] = None
    citations: List[Citation] = Field(default_factory=list)


class IterationItem(BaseModel):
    initial_approach: Optional[str] = None
    work_done: Optional[str] = None
    observations: Optional[str] = None
    change: Optional[str] = None
    status: Optional[Union[IterationStatus, str]] = Field(default=None, union_mode="left_to_right")
    sequence_cue: Optional[str] = None
    citations: List[Citation] = Field(default_factory=list)


class DraftingBullet(BaseModel):
    bullet: Optional[str] = None
    status: Optional[Union[BulletStatus, str]] = Field(default=None, union_mode="left_to_right")
    clarification_needed: Optional[str] = None
    citation: Optional[Citation] = None


# (field name, human title) in display order.
DRAFTING_SECTIONS: Tuple[Tuple[str, str], ...] = (
    ("big_picture_232", "Big Picture (232)"),
    ("work_performed_244_246", "Work Performed (244/246)"),
    ("iterations_bullets", "Iterations"),
    ("results_outcomes_248", "Results/Outcomes (248)"),
)


class DraftingMaterial(BaseModel):
    big_picture_232: List[DraftingBullet] = Field(default_factory=list)
    work_performed_244_246: List[DraftingBullet] = Field(default_factory=list)
    iterations_bullets: List[DraftingBullet] = Field(default_factory=list)
    results_outcomes_248: List[DraftingBullet] = Field(default_factory=list)

    def sections(self) -> List[Tuple[str, List[DraftingBullet]]]:
        return [(name, getattr(self, name)) for name, _ in DRAFTING_SECTIONS]

    def all_bullets(self) -> List[DraftingBullet]:
        bullets: List[DraftingBullet] = []
        for _, section in self.sections():
            bullets.extend(section)
        return bullets


class SREDOutput(BaseModel):
    """Root extraction result: the five buckets, always present once normalized."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "candidate_projects": [],
                "big_picture": [],
                "work_performed": [
                    {
                        "component": "Cache layer",
                        "activity": "Prototype read-through caching",
                        "issue_addressed": "Consistency under concurrent writes",
                        "citations": [
                            {
                                "quote": "We tried caching but it broke consistency.",
                                "location": "Alice 00:01",
                            }
                        ],
                    }
                ],
                "iterations": [],
                "drafting_material": {},
            }
        }
    )

    candidate_projects: List[CandidateProject] = Field(default_factory=list)
    big_picture: List[BigPictureItem] = Field(default_factory=list)
    work_performed: List[WorkPerformedItem] = Field(default_factory=list)
    iterations: List[IterationItem] = Field(default_factory=list)
    drafting_material: DraftingMaterial = Field(default_factory=DraftingMaterial)

    def bucket_counts(self) -> dict[str, int]:
        return {
            "candidate_projects": len(self.candidate_projects),
            "big_picture": len(self.big_picture),
            "work_performed": len(self.work_performed),
            "iterations": len(self.iterations),
            "drafting_material": len(self.drafting_material.all_bullets()),
        }
