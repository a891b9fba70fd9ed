"""Export package: shared report view, CSV, HTML, terminal and JSON projections."""

from src.export.csv_exporter import render_csv
from src.export.html_report import render_html
from src.export.interactive import InteractiveView
from src.export.json_exporter import export_run_json, export_runs_json, load_run_json, load_runs_json
from src.export.naming import all_runs_filename, filename_base, run_filename
from src.export.report_view import BucketView, EntryView, GroupView, Report, build_report
from src.export.writer import MEDIA_TYPES, render_export, write_all_runs, write_export

__all__ = [
    "all_runs_filename",
    "build_report",
    "export_run_json",
    "export_runs_json",
    "filename_base",
    "load_run_json",
    "load_runs_json",
    "render_csv",
    "render_export",
    "render_html",
    "run_filename",
    "write_all_runs",
    "write_export",
    "BucketView",
    "EntryView",
    "GroupView",
    "InteractiveView",
    "MEDIA_TYPES",
    "Report",
]
