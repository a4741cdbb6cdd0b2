from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

OVERALL_DEMOGRAPHIC = "Overall"

VIEW_ITEMS = "items"
VIEW_SCALES = "scales"
VIEWS = (VIEW_ITEMS, VIEW_SCALES)


@dataclass(frozen=True)
class SummaryRecord:
    """
    One precomputed statistic row: a single item for a single subgroup of a
    single demographic grouping.

    Statistical fields are carried exactly as they arrive from the export
    (no coercion, no range checks); ci_lower <= mean <= ci_upper is expected
    but not enforced here.
    """
    item: str
    demographic: str
    group: str
    item_label: Optional[str] = None
    mean: Any = None
    sd: Any = None
    n: Any = None
    ci_lower: Any = None
    ci_upper: Any = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "SummaryRecord":
        """
        Build a record from one flat JSON object.

        'item', 'demographic' and 'group' are required strings (KeyError or
        TypeError otherwise); everything else defaults to None.
        """
        for key in ("item", "demographic", "group"):
            if not isinstance(raw[key], str):
                raise TypeError(f"{key!r} must be a string, got {type(raw[key]).__name__}")
        return cls(
            item=raw["item"],
            demographic=raw["demographic"],
            group=raw["group"],
            item_label=raw.get("item_label"),
            mean=raw.get("mean"),
            sd=raw.get("sd"),
            n=raw.get("n"),
            ci_lower=raw.get("ci_lower"),
            ci_upper=raw.get("ci_upper"),
        )

    @property
    def display_label(self) -> str:
        return self.item_label or self.item


@dataclass(frozen=True)
class ScoreTypes:
    items: Tuple[str, ...] = ()
    scales: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Metadata:
    sample_size: Any
    demographics: Tuple[str, ...]
    score_types: ScoreTypes

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Metadata":
        score_types = raw["score_types"]
        return cls(
            sample_size=raw.get("sample_size"),
            demographics=tuple(raw.get("demographics") or ()),
            score_types=ScoreTypes(
                items=tuple(score_types.get("items") or ()),
                scales=tuple(score_types.get("scales") or ()),
            ),
        )


@dataclass(frozen=True)
class GroupStats:
    mean: Any
    ci_lower: Any
    ci_upper: Any
    n: Any
    sd: Any

    @classmethod
    def from_record(cls, record: SummaryRecord) -> "GroupStats":
        return cls(
            mean=record.mean,
            ci_lower=record.ci_lower,
            ci_upper=record.ci_upper,
            n=record.n,
            sd=record.sd,
        )

    @property
    def ci(self) -> List[Any]:
        return [self.ci_lower, self.ci_upper]


@dataclass
class PivotedRow:
    """
    One output row per item. Groups without data for this item are simply
    absent from `groups`.
    """
    item: str
    label: str
    groups: Dict[str, GroupStats] = field(default_factory=dict)

    def get(self, group: str) -> Optional[GroupStats]:
        return self.groups.get(group)

    def to_flat_dict(self) -> Dict[str, Any]:
        """
        Chart-ready form: {item, label, <g>, <g>_ci, <g>_n, <g>_sd, ...}.
        """
        flat: Dict[str, Any] = {"item": self.item, "label": self.label}
        for group, stats in self.groups.items():
            flat[group] = stats.mean
            flat[f"{group}_ci"] = stats.ci
            flat[f"{group}_n"] = stats.n
            flat[f"{group}_sd"] = stats.sd
        return flat


@dataclass(frozen=True)
class DashboardView:
    """
    Everything the page needs for one (demographic, view) selection.

    `filtered` is the demographic-level subset before the item/scale split.
    """
    demographic: str
    view: str
    groups: List[str]
    rows: List[PivotedRow]
    filtered: List[SummaryRecord]

    @property
    def is_empty(self) -> bool:
        return not self.rows
