"""
Shared grouped representation of an extraction result.

Every projector (CSV, HTML, terminal) renders from the ``Report`` built here,
so bucket titles, ordering and per-entry labelling are decided in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from src.models import (
    DRAFTING_SECTIONS,
    BigPictureItem,
    BigPictureType,
    Bucket,
    BulletStatus,
    CandidateProject,
    Citation,
    DraftingBullet,
    IterationItem,
    SREDOutput,
    WorkPerformedItem,
)

UNCLASSIFIED_GROUP = "unclassified"

BIG_PICTURE_GROUPS: Tuple[Tuple[str, str], ...] = (
    (BigPictureType.GOAL.value, "Goals"),
    (BigPictureType.CONSTRAINT.value, "Constraints"),
    (BigPictureType.UNCERTAINTY.value, "Uncertainties"),
    (UNCLASSIFIED_GROUP, "Unclassified"),
)

_KNOWN_BIG_PICTURE_TYPES = frozenset(t.value for t in BigPictureType)


@dataclass(frozen=True)
class BucketSpec:
    key: Bucket
    title: str
    description: str
    csv_heading: str
    columns: Tuple[str, ...]


BUCKET_SPECS: Tuple[BucketSpec, ...] = (
    BucketSpec(
        Bucket.CANDIDATE_PROJECTS,
        "1. Candidate Projects / Sub-Projects",
        "Pre-drafting sensemaking: proposed groupings of SR&ED efforts",
        "CANDIDATE PROJECTS",
        ("Label", "Description", "Confidence", "Signals"),
    ),
    BucketSpec(
        Bucket.BIG_PICTURE,
        "2. Big Picture (232)",
        "Why the work existed: technical goals, constraints, uncertainties",
        "BIG PICTURE",
        ("Type", "Content", "Citation Quote", "Citation Location"),
    ),
    BucketSpec(
        Bucket.WORK_PERFORMED,
        "3. Work Performed (244/246)",
        "Ground truth of activity: components, technical actions, issues addressed",
        "WORK PERFORMED",
        ("Component", "Activity", "Issue Addressed", "Citation Quote"),
    ),
    BucketSpec(
        Bucket.ITERATIONS,
        "4. Iterations",
        "How understanding evolved: attempt arcs with observations and pivots",
        "ITERATIONS",
        ("Sequence", "Status", "Initial Approach", "Observations", "Change"),
    ),
    BucketSpec(
        Bucket.DRAFTING_MATERIAL,
        "5. Drafting Raw Material",
        "Bridge to human drafting: concise bullets ready for SR&ED claim writing",
        "DRAFTING MATERIAL",
        ("Section", "Bullet", "Status", "Clarification Needed", "Citation"),
    ),
)


def _text(value) -> str:
    if value is None:
        return ""
    return getattr(value, "value", value)


@dataclass
class EntryView:
    """One displayable item.

    ``fields`` only holds labelled values that are present; ``cells`` is the
    full tabular row with absent values rendered as empty strings.
    """

    entry_id: str
    title: str
    badge: Optional[str]
    body: str = ""
    fields: List[Tuple[str, str]] = field(default_factory=list)
    cells: List[str] = field(default_factory=list)
    citations: List[Citation] = field(default_factory=list)
    group: Optional[str] = None
    note: Optional[str] = None


@dataclass
class GroupView:
    key: str
    title: str
    entries: List[EntryView]

    @property
    def count(self) -> int:
        return len(self.entries)


@dataclass
class BucketView:
    key: Bucket
    title: str
    description: str
    csv_heading: str
    columns: Tuple[str, ...]
    entries: List[EntryView]
    groups: List[GroupView] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def non_empty_groups(self) -> List[GroupView]:
        return [group for group in self.groups if group.entries]


@dataclass
class SummaryCounts:
    candidate_projects: int
    big_picture: int
    work_performed: int
    iterations: int
    drafting_bullets: int
    draft_ready: int
    needs_clarification: int


@dataclass
class Report:
    buckets: List[BucketView]
    summary: SummaryCounts

    def bucket(self, key: Bucket) -> BucketView:
        for view in self.buckets:
            if view.key == key:
                return view
        raise KeyError(key)


def _present(pairs: Sequence[Tuple[str, Optional[str]]]) -> List[Tuple[str, str]]:
    return [(label, _text(value)) for label, value in pairs if value]


def _big_picture_group(value) -> str:
    key = _text(value)
    if key in _KNOWN_BIG_PICTURE_TYPES:
        return key
    return UNCLASSIFIED_GROUP


def _first(citations: List[Citation]) -> Citation:
    return citations[0] if citations else Citation()


def _project_entry(index: int, item: CandidateProject) -> EntryView:
    return EntryView(
        entry_id=f"{Bucket.CANDIDATE_PROJECTS.value}.{index}",
        title=item.label or f"Project {index + 1}",
        badge=_text(item.confidence) or None,
        body=item.description or "",
        fields=_present([("Signals", item.signals)]),
        cells=[_text(item.label), _text(item.description), _text(item.confidence), _text(item.signals)],
        citations=list(item.citations),
    )


def _big_picture_entry(index: int, item: BigPictureItem) -> EntryView:
    citation = _first(item.citations)
    return EntryView(
        entry_id=f"{Bucket.BIG_PICTURE.value}.{index}",
        title=item.content or "",
        badge=_text(item.type) or None,
        body=item.content or "",
        cells=[_text(item.type), _text(item.content), _text(citation.quote), _text(citation.location)],
        citations=list(item.citations),
        group=_big_picture_group(item.type),
    )


def _work_entry(index: int, item: WorkPerformedItem) -> EntryView:
    citation = _first(item.citations)
    return EntryView(
        entry_id=f"{Bucket.WORK_PERFORMED.value}.{index}",
        title=item.component or f"Work item {index + 1}",
        badge=None,
        fields=_present([("Activity", item.activity), ("Issue Addressed", item.issue_addressed)]),
        cells=[_text(item.component), _text(item.activity), _text(item.issue_addressed), _text(citation.quote)],
        citations=list(item.citations),
    )


def _iteration_entry(index: int, item: IterationItem) -> EntryView:
    return EntryView(
        entry_id=f"{Bucket.ITERATIONS.value}.{index}",
        title=item.sequence_cue or f"Iteration {index + 1}",
        badge=_text(item.status) or None,
        fields=_present(
            [
                ("Initial Approach", item.initial_approach),
                ("Work Done", item.work_done),
                ("Observations", item.observations),
                ("Change", item.change),
            ]
        ),
        cells=[
            _text(item.sequence_cue),
            _text(item.status),
            _text(item.initial_approach),
            _text(item.observations),
            _text(item.change),
        ],
        citations=list(item.citations),
    )


def _bullet_entry(section: str, section_title: str, index: int, item: DraftingBullet) -> EntryView:
    citation = item.citation or Citation()
    return EntryView(
        entry_id=f"{Bucket.DRAFTING_MATERIAL.value}.{section}.{index}",
        title=item.bullet or "",
        badge=_text(item.status) or None,
        body=item.bullet or "",
        note=item.clarification_needed or None,
        cells=[
            section_title,
            _text(item.bullet),
            _text(item.status),
            _text(item.clarification_needed),
            _text(citation.quote),
        ],
        citations=[item.citation] if item.citation else [],
        group=section,
    )


def _bucket(spec: BucketSpec, entries: List[EntryView], groups: Optional[List[GroupView]] = None) -> BucketView:
    return BucketView(
        key=spec.key,
        title=spec.title,
        description=spec.description,
        csv_heading=spec.csv_heading,
        columns=spec.columns,
        entries=entries,
        groups=groups or [],
    )


def build_report(output: SREDOutput) -> Report:
    """Group an extraction result into the five display buckets."""
    specs = {spec.key: spec for spec in BUCKET_SPECS}

    projects = [_project_entry(i, item) for i, item in enumerate(output.candidate_projects)]

    big_picture = [_big_picture_entry(i, item) for i, item in enumerate(output.big_picture)]
    big_picture_groups = [
        GroupView(key, title, [entry for entry in big_picture if entry.group == key])
        for key, title in BIG_PICTURE_GROUPS
    ]

    work = [_work_entry(i, item) for i, item in enumerate(output.work_performed)]
    iterations = [_iteration_entry(i, item) for i, item in enumerate(output.iterations)]

    drafting_groups: List[GroupView] = []
    drafting: List[EntryView] = []
    for section, section_title in DRAFTING_SECTIONS:
        bullets = getattr(output.drafting_material, section)
        section_entries = [_bullet_entry(section, section_title, i, b) for i, b in enumerate(bullets)]
        drafting_groups.append(GroupView(section, section_title, section_entries))
        drafting.extend(section_entries)

    all_bullets = output.drafting_material.all_bullets()
    summary = SummaryCounts(
        candidate_projects=len(projects),
        big_picture=len(big_picture),
        work_performed=len(work),
        iterations=len(iterations),
        drafting_bullets=len(all_bullets),
        draft_ready=sum(1 for b in all_bullets if b.status == BulletStatus.DRAFT_READY),
        needs_clarification=sum(1 for b in all_bullets if b.status == BulletStatus.NEEDS_CLARIFICATION),
    )

    return Report(
        buckets=[
            _bucket(specs[Bucket.CANDIDATE_PROJECTS], projects),
            _bucket(specs[Bucket.BIG_PICTURE], big_picture, big_picture_groups),
            _bucket(specs[Bucket.WORK_PERFORMED], work),
            _bucket(specs[Bucket.ITERATIONS], iterations),
            _bucket(specs[Bucket.DRAFTING_MATERIAL], drafting, drafting_groups),
        ],
        summary=summary,
    )
