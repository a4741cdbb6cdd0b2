from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from survey_dashboard.core.data_loader import RecordStore
from survey_dashboard.core.models import Metadata, SummaryRecord

RAW_SUMMARIES: list[dict[str, Any]] = [
    {"item": "i1", "item_label": "Item One", "demographic": "Overall", "group": "All",
     "mean": 3.2, "sd": 0.8, "n": 150, "ci_lower": 3.0, "ci_upper": 3.4},
    {"item": "s1", "item_label": "Scale One", "demographic": "Overall", "group": "All",
     "mean": 2.9, "sd": 0.6, "n": 150, "ci_lower": 2.8, "ci_upper": 3.0},
    {"item": "i1", "item_label": "Item One", "demographic": "Gender", "group": "Male",
     "mean": 3.1, "sd": 0.9, "n": 70, "ci_lower": 2.9, "ci_upper": 3.3},
    {"item": "i1", "item_label": "Item One", "demographic": "Gender", "group": "Female",
     "mean": 3.3, "sd": 0.7, "n": 80, "ci_lower": 3.1, "ci_upper": 3.5},
    {"item": "i2", "item_label": None, "demographic": "Gender", "group": "Female",
     "mean": 4.0, "sd": 0.5, "n": 79, "ci_lower": 3.9, "ci_upper": 4.1},
    {"item": "s1", "item_label": "Scale One", "demographic": "Gender", "group": "Male",
     "mean": 2.7, "sd": 0.6, "n": 70, "ci_lower": 2.5, "ci_upper": 2.9},
    {"item": "orphan", "item_label": "Orphan", "demographic": "Gender", "group": "Male",
     "mean": 1.0, "sd": 0.1, "n": 70, "ci_lower": 0.9, "ci_upper": 1.1},
    {"item": "i1", "item_label": "Item One", "demographic": "Grade", "group": "9th",
     "mean": 3.0, "sd": 1.0, "n": 12, "ci_lower": 2.4, "ci_upper": 3.6},
    {"item": "i1", "item_label": "Item One", "demographic": "Grade", "group": "10th",
     "mean": 3.4, "sd": 0.8, "n": 138, "ci_lower": 3.3, "ci_upper": 3.5},
]

RAW_METADATA: dict[str, Any] = {
    "sample_size": 150,
    "demographics": ["Overall", "Gender", "Grade"],
    "score_types": {"items": ["i1", "i2"], "scales": ["s1"]},
}


@pytest.fixture
def records() -> tuple[SummaryRecord, ...]:
    return tuple(SummaryRecord.from_mapping(row) for row in RAW_SUMMARIES)


@pytest.fixture
def metadata() -> Metadata:
    return Metadata.from_mapping(RAW_METADATA)


@pytest.fixture
def store(records: tuple[SummaryRecord, ...], metadata: Metadata) -> RecordStore:
    return RecordStore(records=records, metadata=metadata)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "summaries.json").write_text(json.dumps(RAW_SUMMARIES), encoding="utf-8")
    (tmp_path / "metadata.json").write_text(json.dumps(RAW_METADATA), encoding="utf-8")
    return tmp_path
