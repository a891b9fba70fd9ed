"""JSON export and import of runs."""

from __future__ import annotations

import json
from typing import Iterable, List

from src.models import Run


def export_run_json(run: Run) -> str:
    """Pretty-print the full run record."""
    return json.dumps(run.model_dump(mode="json"), indent=2, ensure_ascii=False)


def export_runs_json(runs: Iterable[Run]) -> str:
    return json.dumps([run.model_dump(mode="json") for run in runs], indent=2, ensure_ascii=False)


def load_run_json(text: str) -> Run:
    return Run.model_validate_json(text)


def load_runs_json(text: str) -> List[Run]:
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Expected a JSON array of runs")
    return [Run.model_validate(item) for item in data]
