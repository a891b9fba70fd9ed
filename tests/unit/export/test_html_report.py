"""
Unit tests for the standalone HTML report.
"""

from datetime import datetime

import pytest

from src.export.html_report import render_html
from src.models import SREDOutput
from tests.fixtures.sample_outputs import make_run

GENERATED = datetime(2024, 3, 6, 9, 30)


@pytest.mark.unit
@pytest.mark.fast
class TestRenderHtml:
    def test_document_shell(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert html.startswith("<!DOCTYPE html>")
        assert "<style>" in html
        assert "<title>SR&amp;ED Run Report - Acme Corp</title>" in html

    def test_header_meta(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert "March 5, 2024 14:07" in html
        assert "<span>Acme Corp</span>" in html
        assert "<span>FY 2024</span>" in html
        assert "<span>google/gemini-2.5-flash</span>" in html

    def test_summary_counts(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert '<div class="stat">1 Projects</div>' in html
        assert '<div class="stat">2 Drafting Bullets</div>' in html
        assert "1 Draft-Ready" in html
        assert "1 Need Clarification" in html

    def test_big_picture_grouped(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert "Uncertainties (1)" in html
        assert "Goals (" not in html

    def test_drafting_subsections(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert "Big Picture (Form 232) (1)" in html
        assert "Work Performed (Form 244/246) (1)" in html
        assert "Results &amp; Outcomes (Form 248)" not in html
        assert '<div class="bullet-item needs-clarification">' in html
        assert '<div class="clarification-note">Which store was cached?</div>' in html

    def test_citations_as_quoted_blocks(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert '<blockquote class="citation">"We tried caching but it broke consistency."' in html
        assert '<div class="citation-location">Alice 00:01</div>' in html

    def test_footer(self, sample_run):
        html = render_html(sample_run, generated_at=GENERATED)
        assert f"Generated on March 6, 2024 09:30 &bull; Run ID: {sample_run.id}" in html

    def test_empty_sections_omitted(self):
        html = render_html(make_run(SREDOutput()), generated_at=GENERATED)
        assert '<div class="section">' not in html
        assert '<div class="stat">0 Projects</div>' in html
        assert "Need Clarification" not in html

    def test_user_text_is_escaped(self):
        output = SREDOutput.model_validate(
            {
                "work_performed": [
                    {
                        "component": "<script>alert('x')</script>",
                        "activity": 'Compared "A" & B',
                        "citations": [{"quote": "</blockquote><b>", "location": "Bob's mic"}],
                    }
                ]
            }
        )
        html = render_html(make_run(output, client_name="R&D <Labs>"), generated_at=GENERATED)

        assert "<script>" not in html
        assert "&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;" in html
        assert "Compared &quot;A&quot; &amp; B" in html
        assert "&lt;/blockquote&gt;&lt;b&gt;" in html
        assert "Bob&#x27;s mic" in html
        assert "R&amp;D &lt;Labs&gt;" in html
