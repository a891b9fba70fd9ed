"""Prompt construction for SR&ED transcript extraction."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from src.config.defaults import FALLBACK_SYSTEM_MESSAGE

SECTION_SEPARATOR = "---"

_CITATION_EXAMPLE = {
    "quote": "Direct quote from transcript",
    "location": "Speaker name and timestamp if available",
}

_BULLET_EXAMPLE = {
    "bullet": "Concise, factual bullet for drafting",
    "status": "draft-ready | needs-clarification",
    "clarification_needed": "What's missing (if needs-clarification)",
    "citation": {"quote": "Direct quote", "location": "Location reference"},
}

# Example skeleton of the required reply; keys mirror src.models.sred.SREDOutput.
OUTPUT_SCHEMA_EXAMPLE: Dict[str, Any] = {
    "candidate_projects": [
        {
            "label": "Project/sub-project name using client language",
            "description": "Brief description of what it covers",
            "signals": "Signals supporting the grouping (distinct goal, system, time period)",
            "confidence": "High | Medium | Low",
            "citations": [_CITATION_EXAMPLE],
        }
    ],
    "big_picture": [
        {
            "content": "Technical goal, constraint, or uncertainty",
            "type": "goal | constraint | uncertainty",
            "citations": [_CITATION_EXAMPLE],
        }
    ],
    "work_performed": [
        {
            "component": "Component, module, system, or process area (client language)",
            "activity": "Concrete technical activity (build, test, debug, etc.)",
            "issue_addressed": "What issue this activity was addressing",
            "citations": [_CITATION_EXAMPLE],
        }
    ],
    "iterations": [
        {
            "initial_approach": "Initial idea, hypothesis, or approach",
            "work_done": "What they tried",
            "observations": "What happened (results, learnings)",
            "change": "What changed next (pivot, refinement, abandonment)",
            "status": "complete | incomplete | unresolved",
            "sequence_cue": "Any before/after or timeline indicators",
            "citations": [_CITATION_EXAMPLE],
        }
    ],
    "drafting_material": {
        "big_picture_232": [_BULLET_EXAMPLE],
        "work_performed_244_246": [_BULLET_EXAMPLE],
        "iterations_bullets": [_BULLET_EXAMPLE],
        "results_outcomes_248": [_BULLET_EXAMPLE],
    },
}

OUTPUT_SCHEMA_SKELETON = json.dumps(OUTPUT_SCHEMA_EXAMPLE, indent=2, ensure_ascii=False)

CRITICAL_RULES = (
    "1. Every item MUST have at least one citation with a direct quote from the transcript",
    "2. If something cannot be cited from the transcript, do not include it",
    "3. Return ONLY the JSON object, no markdown, no explanation",
    "4. Use the exact structure shown above",
    "5. All string values must be properly escaped for JSON",
)


def _output_instructions() -> str:
    return (
        "OUTPUT INSTRUCTIONS:\n\n"
        "You must return a JSON object with exactly 5 keys corresponding to the SR&ED "
        "output buckets. Each bucket should contain an array of items with citations.\n\n"
        "Return ONLY valid JSON in this exact structure:\n\n"
        f"{OUTPUT_SCHEMA_SKELETON}\n\n"
        "CRITICAL RULES:\n" + "\n".join(CRITICAL_RULES) + "\n"
    )


def build_prompt(context_pack: str, transcript: str, *, structured: bool = True) -> str:
    """Assemble the user instruction: context pack, transcript, then output rules.

    With ``structured=False`` the output-instruction block is left out and the
    model is free to answer in prose.
    """
    parts = [
        context_pack,
        SECTION_SEPARATOR,
        f"TRANSCRIPT TO ANALYZE:\n\n{transcript}",
    ]
    if structured:
        parts.extend([SECTION_SEPARATOR, _output_instructions()])
    return "\n" + "\n\n".join(parts) + "\n"


def build_messages(system_prompt: str, prompt: str) -> List[Dict[str, str]]:
    """Chat messages for the gateway; an empty system prompt uses the built-in analyst role."""
    return [
        {"role": "system", "content": system_prompt or FALLBACK_SYSTEM_MESSAGE},
        {"role": "user", "content": prompt},
    ]
