"""
Unit tests for the shared report representation.
"""

import pytest

from src.export.report_view import BUCKET_SPECS, build_report
from src.models import Bucket, SREDOutput
from tests.fixtures.sample_outputs import CACHING_REPLY


@pytest.mark.unit
@pytest.mark.fast
class TestBuildReport:
    def test_five_buckets_in_order(self, caching_output):
        report = build_report(caching_output)
        assert [b.key for b in report.buckets] == [spec.key for spec in BUCKET_SPECS]
        assert report.buckets[0].title == "1. Candidate Projects / Sub-Projects"
        assert report.buckets[4].title == "5. Drafting Raw Material"

    def test_summary_counts(self, caching_output):
        summary = build_report(caching_output).summary
        assert summary.candidate_projects == 1
        assert summary.big_picture == 1
        assert summary.work_performed == 1
        assert summary.iterations == 1
        assert summary.drafting_bullets == 2
        assert summary.draft_ready == 1
        assert summary.needs_clarification == 1

    def test_empty_output_is_total(self):
        report = build_report(SREDOutput())
        assert all(bucket.is_empty for bucket in report.buckets)
        assert report.summary.drafting_bullets == 0

    def test_big_picture_grouped_by_type(self):
        data = dict(
            CACHING_REPLY,
            big_picture=[
                {"content": "Reduce latency", "type": "goal"},
                {"content": "Legacy schema", "type": "constraint"},
                {"content": "No label"},
                {"content": "Will it scale?", "type": "uncertainty"},
            ],
        )
        bucket = build_report(SREDOutput.model_validate(data)).bucket(Bucket.BIG_PICTURE)
        groups = {group.title: [e.body for e in group.entries] for group in bucket.groups}

        assert [g.title for g in bucket.groups] == ["Goals", "Constraints", "Uncertainties", "Unclassified"]
        assert groups["Goals"] == ["Reduce latency"]
        assert groups["Unclassified"] == ["No label"]
        assert bucket.count == 4

    def test_drafting_grouped_by_section(self, caching_output):
        bucket = build_report(caching_output).bucket(Bucket.DRAFTING_MATERIAL)
        assert [g.title for g in bucket.non_empty_groups()] == ["Big Picture (232)", "Work Performed (244/246)"]
        assert bucket.entries[1].note == "Which store was cached?"

    def test_entry_fields_only_present_values(self):
        output = SREDOutput.model_validate({"work_performed": [{"component": "Cache", "activity": "Tested"}]})
        entry = build_report(output).bucket(Bucket.WORK_PERFORMED).entries[0]
        assert entry.fields == [("Activity", "Tested")]
        assert entry.cells == ["Cache", "Tested", "", ""]

    def test_entry_ids_are_stable(self, caching_output):
        report = build_report(caching_output)
        ids = [e.entry_id for b in report.buckets for e in b.entries]
        assert "work_performed.0" in ids
        assert "drafting_material.work_performed_244_246.0" in ids

    def test_off_enum_type_is_unclassified_but_shown(self):
        output = SREDOutput.model_validate({"big_picture": [{"content": "Ship it", "type": "Goal"}]})
        bucket = build_report(output).bucket(Bucket.BIG_PICTURE)
        groups = bucket.non_empty_groups()
        assert [g.title for g in groups] == ["Unclassified"]
        assert groups[0].entries[0].badge == "Goal"
        assert groups[0].entries[0].cells[0] == "Goal"
