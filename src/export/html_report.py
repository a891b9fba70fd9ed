"""
Standalone HTML report for a run.

The document is self-contained (inlined CSS, no scripts) so it can be
emailed or printed as-is.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from src.export.report_view import BucketView, EntryView, GroupView, Report, build_report
from src.models import Bucket, BulletStatus, Citation, Run
from src.utils.html_utils import css_token, escape_html

SECTION_HEADINGS = {
    Bucket.CANDIDATE_PROJECTS: "Candidate Projects",
    Bucket.BIG_PICTURE: "Big Picture",
    Bucket.WORK_PERFORMED: "Work Performed",
    Bucket.ITERATIONS: "Iterations",
    Bucket.DRAFTING_MATERIAL: "Drafting Material",
}

DRAFTING_HEADINGS = {
    "big_picture_232": "Big Picture (Form 232)",
    "work_performed_244_246": "Work Performed (Form 244/246)",
    "iterations_bullets": "Iterations",
    "results_outcomes_248": "Results & Outcomes (Form 248)",
}

REPORT_CSS = """
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      line-height: 1.6;
      color: #1a1a2e;
      background: #f8f9fa;
      padding: 2rem;
    }
    .container { max-width: 900px; margin: 0 auto; }
    .header {
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      color: white;
      padding: 2rem;
      border-radius: 12px;
      margin-bottom: 1.5rem;
    }
    .header h1 { font-size: 1.75rem; margin-bottom: 0.5rem; }
    .header-meta { display: flex; flex-wrap: wrap; gap: 1.5rem; font-size: 0.9rem; opacity: 0.9; }
    .summary, .section {
      background: white;
      border-radius: 12px;
      padding: 1.5rem;
      margin-bottom: 1.5rem;
      box-shadow: 0 2px 8px rgba(0,0,0,0.08);
    }
    .summary h2 { font-size: 1rem; color: #666; margin-bottom: 1rem; text-transform: uppercase; letter-spacing: 0.5px; }
    .summary-stats { display: flex; flex-wrap: wrap; gap: 1rem; }
    .stat { background: #f0f4ff; padding: 0.75rem 1.25rem; border-radius: 8px; font-weight: 600; color: #4f46e5; }
    .stat.success { background: #ecfdf5; color: #059669; }
    .stat.warning { background: #fffbeb; color: #d97706; }
    .section-header {
      display: flex;
      align-items: center;
      gap: 0.75rem;
      margin-bottom: 1rem;
      padding-bottom: 0.75rem;
      border-bottom: 2px solid #f0f0f0;
    }
    .section-header h2 { font-size: 1.25rem; }
    .section-count {
      background: #e0e7ff;
      color: #4338ca;
      padding: 0.25rem 0.75rem;
      border-radius: 100px;
      font-size: 0.85rem;
      font-weight: 600;
    }
    .card { background: #fafafa; border: 1px solid #e5e5e5; border-radius: 8px; padding: 1rem; margin-bottom: 0.75rem; }
    .card:last-child { margin-bottom: 0; }
    .card-header { display: flex; align-items: center; gap: 0.5rem; margin-bottom: 0.5rem; }
    .card-title { font-weight: 600; }
    .card-content { color: #444; }
    .field { margin-top: 0.25rem; }
    .badge {
      display: inline-block;
      padding: 0.2rem 0.6rem;
      border-radius: 100px;
      font-size: 0.75rem;
      font-weight: 600;
      text-transform: uppercase;
    }
    .badge-High { background: #fee2e2; color: #b91c1c; }
    .badge-Medium, .badge-constraint, .badge-incomplete { background: #fef3c7; color: #92400e; }
    .badge-Low, .badge-complete { background: #dcfce7; color: #166534; }
    .badge-goal { background: #dbeafe; color: #1e40af; }
    .badge-uncertainty { background: #f3e8ff; color: #7c3aed; }
    .badge-unresolved { background: #fee2e2; color: #b91c1c; }
    .bullet-item {
      padding: 1rem;
      background: #fafafa;
      border-left: 4px solid #e5e5e5;
      margin-bottom: 0.75rem;
      border-radius: 0 8px 8px 0;
    }
    .bullet-item.draft-ready { border-left-color: #10b981; background: #f0fdf4; }
    .bullet-item.needs-clarification { border-left-color: #f59e0b; background: #fffbeb; }
    .bullet-text { font-size: 1rem; margin-bottom: 0.5rem; }
    .bullet-status { font-size: 0.8rem; font-weight: 600; }
    .bullet-status.ready { color: #059669; }
    .bullet-status.clarify { color: #d97706; }
    .clarification-note {
      margin-top: 0.5rem;
      padding: 0.5rem;
      background: #fef3c7;
      border-radius: 4px;
      font-size: 0.85rem;
      color: #92400e;
    }
    .citation {
      margin-top: 0.5rem;
      margin-left: 1rem;
      padding: 0.5rem;
      background: #f5f5f5;
      border-left: 3px solid #d4d4d8;
      border-radius: 4px;
      font-size: 0.85rem;
      color: #666;
      font-style: italic;
    }
    .citation-location { font-size: 0.75rem; color: #999; margin-top: 0.25rem; font-style: normal; }
    .subsection { margin-bottom: 1.5rem; }
    .subsection:last-child { margin-bottom: 0; }
    .subsection-header { font-weight: 600; margin-bottom: 0.75rem; color: #374151; }
    .footer { text-align: center; padding: 1rem; color: #999; font-size: 0.85rem; }
    @media print {
      body { background: white; padding: 0; }
      .section { box-shadow: none; border: 1px solid #ddd; }
      .header { background: #333; -webkit-print-color-adjust: exact; print-color-adjust: exact; }
    }
"""


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%B ") + str(value.day) + value.strftime(", %Y %H:%M")


def _citation_html(citation: Citation) -> str:
    location = ""
    if citation.location:
        location = f'<div class="citation-location">{escape_html(citation.location)}</div>'
    return f'<blockquote class="citation">"{escape_html(citation.quote)}"{location}</blockquote>'


def _citations_html(citations: List[Citation]) -> str:
    return "".join(_citation_html(c) for c in citations)


def _badge_html(value: Optional[str]) -> str:
    if not value:
        return ""
    return f'<span class="badge badge-{css_token(value)}">{escape_html(value)}</span>'


def _fields_html(entry: EntryView) -> str:
    return "".join(
        f'<div class="field"><strong>{escape_html(label)}:</strong> {escape_html(value)}</div>'
        for label, value in entry.fields
    )


def _card_html(entry: EntryView, *, show_title: bool = True) -> str:
    header = ""
    if show_title:
        header = (
            f'<div class="card-header"><span class="card-title">{escape_html(entry.title)}</span>'
            f"{_badge_html(entry.badge)}</div>"
        )
    body = f"<div>{escape_html(entry.body)}</div>" if entry.body else ""
    return (
        f'<div class="card">{header}'
        f'<div class="card-content">{body}{_fields_html(entry)}</div>'
        f"{_citations_html(entry.citations)}</div>"
    )


def _bullet_html(entry: EntryView) -> str:
    ready = entry.badge == BulletStatus.DRAFT_READY.value
    status = (
        '<div class="bullet-status ready">&#10003; Draft Ready</div>'
        if ready
        else '<div class="bullet-status clarify">&#9888; Needs Clarification</div>'
    )
    note = f'<div class="clarification-note">{escape_html(entry.note)}</div>' if entry.note else ""
    return (
        f'<div class="bullet-item {css_token(entry.badge)}">'
        f'<div class="bullet-text">{escape_html(entry.body)}</div>'
        f"{status}{note}{_citations_html(entry.citations)}</div>"
    )


def _subsection_html(title: str, group: GroupView, render) -> str:
    cards = "".join(render(entry) for entry in group.entries)
    return (
        f'<div class="subsection"><div class="subsection-header">{escape_html(title)} ({group.count})</div>'
        f"{cards}</div>"
    )


def _bucket_body(bucket: BucketView) -> str:
    if bucket.key == Bucket.BIG_PICTURE:
        return "".join(
            _subsection_html(group.title, group, lambda e: _card_html(e, show_title=False))
            for group in bucket.non_empty_groups()
        )
    if bucket.key == Bucket.DRAFTING_MATERIAL:
        return "".join(
            _subsection_html(DRAFTING_HEADINGS.get(group.key, group.title), group, _bullet_html)
            for group in bucket.non_empty_groups()
        )
    return "".join(_card_html(entry) for entry in bucket.entries)


def _section_html(bucket: BucketView) -> str:
    return (
        '<div class="section">'
        f'<div class="section-header"><h2>{SECTION_HEADINGS[bucket.key]}</h2>'
        f'<span class="section-count">{bucket.count}</span></div>'
        f"{_bucket_body(bucket)}</div>"
    )


def _summary_html(report: Report) -> str:
    s = report.summary
    stats = [
        f'<div class="stat">{s.candidate_projects} Projects</div>',
        f'<div class="stat">{s.big_picture} Big Picture</div>',
        f'<div class="stat">{s.work_performed} Work Items</div>',
        f'<div class="stat">{s.iterations} Iterations</div>',
        f'<div class="stat">{s.drafting_bullets} Drafting Bullets</div>',
        f'<div class="stat success">&#10003; {s.draft_ready} Draft-Ready</div>',
    ]
    if s.needs_clarification > 0:
        stats.append(f'<div class="stat warning">&#9888; {s.needs_clarification} Need Clarification</div>')
    return (
        '<div class="summary"><h2>Executive Summary</h2>'
        f'<div class="summary-stats">{"".join(stats)}</div></div>'
    )


def _header_html(run: Run) -> str:
    meta = [f"<span>{_format_timestamp(run.created_datetime)}</span>"]
    if run.client_name:
        meta.append(f"<span>{escape_html(run.client_name)}</span>")
    if run.fiscal_year:
        meta.append(f"<span>FY {escape_html(run.fiscal_year)}</span>")
    meta.append(f"<span>{escape_html(run.model_used)}</span>")
    return (
        '<div class="header"><h1>SR&amp;ED Analysis Report</h1>'
        f'<div class="header-meta">{"".join(meta)}</div></div>'
    )


def render_html(run: Run, generated_at: Optional[datetime] = None) -> str:
    """Render a run as a standalone HTML document.

    Only buckets with content get a section; the summary always lists every
    count. ``generated_at`` defaults to now and appears in the footer.
    """
    report = build_report(run.output)
    generated = generated_at or datetime.now()
    sections = "".join(_section_html(bucket) for bucket in report.buckets if not bucket.is_empty)
    title_client = escape_html(run.client_name) if run.client_name else "Unknown Client"
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>SR&amp;ED Run Report - {title_client}</title>
  <style>{REPORT_CSS}</style>
</head>
<body>
  <div class="container">
    {_header_html(run)}
    {_summary_html(report)}
    {sections}
    <div class="footer">Generated on {_format_timestamp(generated)} &bull; Run ID: {escape_html(run.id)}</div>
  </div>
</body>
</html>
"""
