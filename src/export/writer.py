"""Write run exports to disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from src.export.csv_exporter import render_csv
from src.export.html_report import render_html
from src.export.json_exporter import export_run_json, export_runs_json
from src.export.naming import all_runs_filename, run_filename
from src.models import Run

logger = logging.getLogger(__name__)

RENDERERS: Dict[str, Callable[[Run], str]] = {
    "json": export_run_json,
    "csv": render_csv,
    "html": render_html,
}

MEDIA_TYPES: Dict[str, str] = {
    "json": "application/json",
    "csv": "text/csv",
    "html": "text/html",
}


def render_export(run: Run, fmt: str) -> str:
    renderer = RENDERERS.get(fmt)
    if renderer is None:
        raise ValueError(f"Unsupported export format: {fmt}. Choose from: {', '.join(RENDERERS)}")
    return renderer(run)


def write_export(run: Run, fmt: str, out_dir: Union[str, Path]) -> Path:
    """Render ``run`` as ``fmt`` into ``out_dir`` and return the written path."""
    content = render_export(run, fmt)
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / run_filename(run, fmt)
    path.write_text(content, encoding="utf-8")
    logger.info("Exported run %s as %s to %s", run.id, fmt, path)
    return path


def write_all_runs(runs: Iterable[Run], out_dir: Union[str, Path], filename: Optional[str] = None) -> Path:
    runs = list(runs)
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (filename or all_runs_filename())
    path.write_text(export_runs_json(runs), encoding="utf-8")
    logger.info("Exported %d runs to %s", len(runs), path)
    return path
