"""Flattened CSV export of a run."""

from __future__ import annotations

import csv
import io
from typing import List

from src.export.report_view import build_report
from src.models import Run

CSV_TITLE = "SR&ED Run Export"
CSV_DATE_FORMAT = "%Y-%m-%d %H:%M"


def _header_rows(run: Run) -> List[List[str]]:
    return [
        [CSV_TITLE],
        [""],
        ["Run ID", run.id],
        ["Date", run.created_datetime.strftime(CSV_DATE_FORMAT)],
        ["Client", run.client_name or ""],
        ["Model", run.model_used],
        [""],
    ]


def build_rows(run: Run) -> List[List[str]]:
    """All CSV rows for a run: header block then one section per bucket."""
    rows = _header_rows(run)
    report = build_report(run.output)
    for index, bucket in enumerate(report.buckets):
        rows.append([f"=== {bucket.csv_heading} ==="])
        rows.append(list(bucket.columns))
        rows.extend(entry.cells for entry in bucket.entries)
        if index < len(report.buckets) - 1:
            rows.append([""])
    return rows


def render_csv(run: Run) -> str:
    """Render a run as CSV with every cell quoted and rows joined by newlines."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(build_rows(run))
    return buffer.getvalue().rstrip("\n")
