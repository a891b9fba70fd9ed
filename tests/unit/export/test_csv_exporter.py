"""
Unit tests for CSV export.
"""

import pytest

import json

from src.export.csv_exporter import render_csv
from src.extraction.normalizer import normalize_reply
from src.models import SREDOutput
from tests.fixtures.sample_outputs import TRANSCRIPT, make_run


@pytest.mark.unit
@pytest.mark.fast
class TestRenderCsv:
    def test_header_block(self, sample_run):
        lines = render_csv(sample_run).split("\n")
        assert lines[:7] == [
            '"SR&ED Run Export"',
            '""',
            f'"Run ID","{sample_run.id}"',
            '"Date","2024-03-05 14:07"',
            '"Client","Acme Corp"',
            '"Model","google/gemini-2.5-flash"',
            '""',
        ]

    def test_sections_and_rows(self, sample_run):
        lines = render_csv(sample_run).split("\n")
        assert lines[7] == '"=== CANDIDATE PROJECTS ==="'
        assert lines[8] == '"Label","Description","Confidence","Signals"'
        assert lines[9] == (
            '"Consistent caching layer","Caching under concurrent writes","High","Distinct system, distinct goal"'
        )
        assert '"=== BIG PICTURE ==="' in lines
        assert '"Type","Content","Citation Quote","Citation Location"' in lines
        assert (
            '"uncertainty","Keep reads consistent while caching",'
            '"We tried caching but it broke consistency.","Alice 00:01"'
        ) in lines
        assert '"Sequence","Status","Initial Approach","Observations","Change"' in lines

    def test_drafting_rows_carry_section_label(self, sample_run):
        lines = render_csv(sample_run).split("\n")
        assert lines[-2] == (
            '"Big Picture (232)","It was uncertain whether caching could preserve read consistency.",'
            '"draft-ready","","We tried caching but it broke consistency."'
        )
        assert lines[-1].startswith('"Work Performed (244/246)","Prototyped a read-through cache.",')
        assert '"needs-clarification","Which store was cached?"' in lines[-1]

    def test_quotes_are_doubled(self):
        output = SREDOutput.model_validate(
            {"candidate_projects": [{"label": 'The "fast" path', "description": "a,b"}]}
        )
        csv_text = render_csv(make_run(output))
        assert '"The ""fast"" path","a,b","",""' in csv_text.split("\n")

    def test_empty_run_has_every_section(self):
        output = SREDOutput()
        lines = render_csv(make_run(output, client_name=None)).split("\n")
        assert '"Client",""' in lines
        for heading in ("CANDIDATE PROJECTS", "BIG PICTURE", "WORK PERFORMED", "ITERATIONS", "DRAFTING MATERIAL"):
            assert f'"=== {heading} ==="' in lines
        assert lines[-1] == '"Section","Bullet","Status","Clarification Needed","Citation"'


@pytest.mark.unit
@pytest.mark.fast
def test_alice_reply_to_work_performed_rows():
    quote = "We tried caching but it broke consistency."
    assert quote in TRANSCRIPT
    reply = json.dumps(
        {
            "work_performed": [
                {
                    "component": "Cache layer",
                    "activity": "Tried caching",
                    "citations": [{"quote": quote, "location": "Alice 00:01"}],
                }
            ]
        }
    )

    result = normalize_reply(f"```json\n{reply}\n```")
    assert result.ok
    assert len(result.output.work_performed) == 1

    lines = render_csv(make_run(result.output)).split("\n")
    heading = lines.index('"=== WORK PERFORMED ==="')
    assert lines[heading + 1] == '"Component","Activity","Issue Addressed","Citation Quote"'
    assert lines[heading + 2] == f'"Cache layer","Tried caching","","{quote}"'
    assert lines[heading + 3] == '""'
    assert sum(quote in line for line in lines) == 1
