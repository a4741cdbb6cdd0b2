from __future__ import annotations

from survey_dashboard.core.data_loader import RecordStore
from survey_dashboard.core.models import SummaryRecord, VIEW_ITEMS, VIEW_SCALES
from survey_dashboard.core.notes import (
    CI_NOTE,
    build_view_notes,
    chart_title,
    find_small_sample_groups,
)
from survey_dashboard.core.selection import SelectionState


def test_notes_hidden_for_overall(store: RecordStore) -> None:
    notes = build_view_notes(SelectionState().apply(store))
    assert not notes.visible
    assert notes.lines == []
    assert notes.warning is None


def test_notes_shown_without_warning_for_large_groups(store: RecordStore) -> None:
    notes = build_view_notes(SelectionState(demographic="Gender").apply(store))
    assert notes.visible
    assert notes.lines[0] == CI_NOTE
    assert len(notes.lines) == 3
    assert notes.small_sample_groups == []
    assert notes.warning is None


def test_notes_flag_small_sample_groups(store: RecordStore) -> None:
    notes = build_view_notes(SelectionState(demographic="Grade").apply(store))
    assert notes.small_sample_groups == ["9th"]
    assert notes.warning is not None
    assert "n < 30" in notes.warning


def test_small_sample_uses_first_record_of_each_group() -> None:
    filtered = [
        SummaryRecord(item="a", demographic="D", group="G", n=40),
        SummaryRecord(item="b", demographic="D", group="G", n=5),
        SummaryRecord(item="a", demographic="D", group="H", n=5),
        SummaryRecord(item="a", demographic="D", group="K", n=None),
    ]
    assert find_small_sample_groups(["G", "H", "K", "Missing"], filtered) == ["H"]
    assert find_small_sample_groups(["G", "H"], filtered, threshold=50) == ["G", "H"]


def test_chart_title() -> None:
    assert chart_title(VIEW_ITEMS, "Overall") == "Item Means"
    assert chart_title(VIEW_SCALES, "Overall") == "Scale Score Means"
    assert chart_title(VIEW_ITEMS, "Gender") == "Item Means by Gender"
