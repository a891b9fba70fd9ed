"""
Unit tests for the rich terminal view.
"""

import pytest
from rich.console import Console

from src.export.interactive import EMPTY_BUCKET_MESSAGE, InteractiveView
from src.models import SREDOutput

QUOTE = "We tried caching but it broke consistency."


def _render(view: InteractiveView) -> str:
    console = Console(record=True, width=200, color_system=None)
    view.print(console)
    return console.export_text()


@pytest.mark.unit
@pytest.mark.fast
class TestInteractiveView:
    def test_bucket_titles_and_badges(self, caching_output):
        text = _render(InteractiveView(caching_output))
        assert "1. Candidate Projects / Sub-Projects" in text
        assert "Why the work existed" in text
        assert "1 item" in text
        assert "2 items" in text

    def test_empty_buckets_show_empty_state(self):
        text = _render(InteractiveView(SREDOutput()))
        assert text.count(EMPTY_BUCKET_MESSAGE) == 5
        assert "0 items" in text

    def test_citations_collapsed_by_default(self, caching_output):
        view = InteractiveView(caching_output)
        text = _render(view)
        assert "1 citation" in text
        assert QUOTE not in text
        assert not view.is_expanded("work_performed.0")

    def test_toggle_expands_one_group(self, caching_output):
        view = InteractiveView(caching_output)
        assert view.toggle("work_performed.0") is True

        text = _render(view)

        assert text.count(QUOTE) == 1
        assert "Alice 00:01" in text
        assert view.toggle("work_performed.0") is False
        assert QUOTE not in _render(view)

    def test_expand_all(self, caching_output):
        view = InteractiveView(caching_output)
        view.expand_all()
        assert _render(view).count(QUOTE) == len(view.group_ids) == 6

    def test_collapse_all(self, caching_output):
        view = InteractiveView(caching_output)
        view.expand_all()
        view.collapse_all()
        assert not any(view.is_expanded(g) for g in view.group_ids)
        assert QUOTE not in _render(view)

    def test_state_is_per_instance(self, caching_output):
        first = InteractiveView(caching_output)
        second = InteractiveView(caching_output)
        first.toggle("iterations.0")
        assert not second.is_expanded("iterations.0")

    def test_unknown_group(self, caching_output):
        with pytest.raises(KeyError):
            InteractiveView(caching_output).toggle("nope.0")

    def test_clarification_shown_for_bullets(self, caching_output):
        text = _render(InteractiveView(caching_output))
        assert "Needs clarification: Which store was cached?" in text
