from __future__ import annotations

from typing import Any

from survey_dashboard.core.models import Metadata, ScoreTypes, SummaryRecord
from survey_dashboard.core.reshape import (
    discover_groups,
    filter_by_demographic,
    partition_by_category,
    pivot,
)


def _record(**overrides: Any) -> SummaryRecord:
    base: dict[str, Any] = {
        "item": "a",
        "demographic": "Overall",
        "group": "X",
        "item_label": None,
        "mean": 1.0,
        "sd": 0.5,
        "n": 10,
        "ci_lower": 0.8,
        "ci_upper": 1.2,
    }
    base.update(overrides)
    return SummaryRecord(**base)


def test_filter_by_demographic_keeps_every_match_in_order(records: tuple[SummaryRecord, ...]) -> None:
    for key in {r.demographic for r in records}:
        subset = filter_by_demographic(records, key)
        assert all(r.demographic == key for r in subset)
        assert subset == [r for r in records if r.demographic == key]


def test_filter_by_demographic_is_case_sensitive_and_empty_is_not_an_error(
    records: tuple[SummaryRecord, ...],
) -> None:
    assert filter_by_demographic(records, "gender") == []
    assert filter_by_demographic(records, "Nope") == []
    assert filter_by_demographic([], "Overall") == []


def test_partition_splits_exclusively_and_drops_unclassified(
    records: tuple[SummaryRecord, ...],
    metadata: Metadata,
) -> None:
    subset = filter_by_demographic(records, "Gender")
    item_subset, scale_subset = partition_by_category(subset, metadata)

    assert [r.item for r in item_subset] == ["i1", "i1", "i2"]
    assert [r.item for r in scale_subset] == ["s1"]
    assert not set(map(id, item_subset)) & set(map(id, scale_subset))
    assert all(r.item != "orphan" for r in item_subset + scale_subset)
    assert len(item_subset) + len(scale_subset) == len(subset) - 1


def test_partition_with_empty_category_lists_drops_everything() -> None:
    metadata = Metadata(sample_size=0, demographics=("Overall",), score_types=ScoreTypes())
    item_subset, scale_subset = partition_by_category([_record()], metadata)
    assert item_subset == []
    assert scale_subset == []


def test_discover_groups_is_distinct_first_occurrence() -> None:
    subset = [
        _record(group="Male"),
        _record(item="b", group="Female"),
        _record(item="c", group="Male"),
    ]
    assert discover_groups(subset) == ["Male", "Female"]
    assert discover_groups([]) == []


def test_discover_groups_does_not_sort() -> None:
    subset = [_record(group="Zeta"), _record(group="Alpha"), _record(group="Mu")]
    assert discover_groups(subset) == ["Zeta", "Alpha", "Mu"]


def test_pivot_one_row_per_item_in_first_occurrence_order() -> None:
    subset = [
        _record(item="b", group="X"),
        _record(item="a", group="X"),
        _record(item="b", group="Y"),
        _record(item="c", group="X"),
    ]
    rows = pivot(subset)
    assert [row.item for row in rows] == ["b", "a", "c"]
    assert sorted(rows[0].groups) == ["X", "Y"]


def test_pivot_later_duplicate_overwrites_all_fields() -> None:
    subset = [
        _record(item="a", group="X", mean=1, n=10, sd=0.1, ci_lower=0.5, ci_upper=1.5),
        _record(item="a", group="X", mean=2, n=20, sd=0.2, ci_lower=1.5, ci_upper=2.5),
    ]
    rows = pivot(subset)
    assert len(rows) == 1

    flat = rows[0].to_flat_dict()
    assert flat["X"] == 2
    assert flat["X_n"] == 20
    assert flat["X_sd"] == 0.2
    assert flat["X_ci"] == [1.5, 2.5]


def test_pivot_sparse_groups_leave_keys_unset() -> None:
    subset = [
        _record(item="a", group="Male"),
        _record(item="b", group="Female", mean=4.0, n=5, sd=0.3, ci_lower=3.7, ci_upper=4.3),
    ]
    rows = pivot(subset)
    row_b = rows[1].to_flat_dict()

    for key in ("Male", "Male_ci", "Male_n", "Male_sd"):
        assert key not in row_b
    assert row_b["Female"] == 4.0
    assert row_b["Female_ci"] == [3.7, 4.3]
    assert row_b["Female_n"] == 5
    assert row_b["Female_sd"] == 0.3
    assert rows[1].get("Male") is None


def test_pivot_label_comes_from_first_row_and_falls_back_to_item_key() -> None:
    rows = pivot(
        [
            _record(item="a", group="X", item_label="First"),
            _record(item="a", group="Y", item_label="Second"),
            _record(item="b", group="X", item_label=None),
            _record(item="c", group="X", item_label=""),
        ]
    )
    assert [row.label for row in rows] == ["First", "b", "c"]


def test_pivot_passes_malformed_values_through_unchanged() -> None:
    rows = pivot([_record(mean=5.0, ci_lower=6.0, ci_upper=4.0, n=-3, sd=None)])
    flat = rows[0].to_flat_dict()
    assert flat["X"] == 5.0
    assert flat["X_ci"] == [6.0, 4.0]
    assert flat["X_n"] == -3
    assert flat["X_sd"] is None


def test_pivot_does_not_mutate_its_input() -> None:
    subset = [_record(item="a", group="X"), _record(item="a", group="Y")]
    before = list(subset)
    pivot(subset)
    assert subset == before


def test_pivot_of_empty_subset_is_empty() -> None:
    assert pivot([]) == []
