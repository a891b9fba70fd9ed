"""
Canned model replies and runs for testing.
"""

import json
from typing import Any, Dict

from src.models import Run, RunMetadata, SREDOutput

TRANSCRIPT = "Alice 00:01: We tried caching but it broke consistency."

CONTEXT_PACK = "Focus on technological uncertainty and systematic investigation."

CACHING_REPLY: Dict[str, Any] = {
    "candidate_projects": [
        {
            "label": "Consistent caching layer",
            "description": "Caching under concurrent writes",
            "signals": "Distinct system, distinct goal",
            "confidence": "High",
            "citations": [
                {"quote": "We tried caching but it broke consistency.", "location": "Alice 00:01"}
            ],
        }
    ],
    "big_picture": [
        {
            "content": "Keep reads consistent while caching",
            "type": "uncertainty",
            "citations": [
                {"quote": "We tried caching but it broke consistency.", "location": "Alice 00:01"}
            ],
        }
    ],
    "work_performed": [
        {
            "component": "Cache layer",
            "activity": "Prototype read-through caching",
            "issue_addressed": "Consistency under concurrent writes",
            "citations": [
                {"quote": "We tried caching but it broke consistency.", "location": "Alice 00:01"}
            ],
        }
    ],
    "iterations": [
        {
            "initial_approach": "Read-through cache",
            "work_done": "Added cache in front of the store",
            "observations": "Stale reads after writes",
            "change": "Evaluate invalidation strategies",
            "status": "unresolved",
            "sequence_cue": "first attempt",
            "citations": [
                {"quote": "We tried caching but it broke consistency.", "location": "Alice 00:01"}
            ],
        }
    ],
    "drafting_material": {
        "big_picture_232": [
            {
                "bullet": "It was uncertain whether caching could preserve read consistency.",
                "status": "draft-ready",
                "citation": {
                    "quote": "We tried caching but it broke consistency.",
                    "location": "Alice 00:01",
                },
            }
        ],
        "work_performed_244_246": [
            {
                "bullet": "Prototyped a read-through cache.",
                "status": "needs-clarification",
                "clarification_needed": "Which store was cached?",
                "citation": {
                    "quote": "We tried caching but it broke consistency.",
                    "location": "Alice 00:01",
                },
            }
        ],
        "iterations_bullets": [],
        "results_outcomes_248": [],
    },
}

EMPTY_REPLY: Dict[str, Any] = {
    "candidate_projects": [],
    "big_picture": [],
    "work_performed": [],
    "iterations": [],
    "drafting_material": {
        "big_picture_232": [],
        "work_performed_244_246": [],
        "iterations_bullets": [],
        "results_outcomes_248": [],
    },
}


def reply_text(data: Dict[str, Any], fenced: bool = False) -> str:
    text = json.dumps(data, indent=2)
    if fenced:
        return f"```json\n{text}\n```"
    return text


def make_run(output: SREDOutput = None, **overrides) -> Run:
    """A structured run over the caching reply unless ``output`` is given.

    ``overrides`` replace Run fields after construction (id, created_at,
    client_name, ...).
    """
    run = Run.from_result(
        transcript=TRANSCRIPT,
        context_pack=CONTEXT_PACK,
        system_prompt="You are an analyst.",
        model_used="google/gemini-2.5-flash",
        metadata=RunMetadata(client_name="Acme Corp", fiscal_year="2024", meeting_type="Technical interview"),
        output=output if output is not None else SREDOutput.model_validate(CACHING_REPLY),
    )
    if overrides:
        run = run.model_copy(update=overrides)
    return run
