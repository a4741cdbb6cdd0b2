from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Sequence

import logging

from survey_dashboard.core.models import (
    OVERALL_DEMOGRAPHIC,
    VIEW_ITEMS,
    VIEW_SCALES,
    VIEWS,
    DashboardView,
    Metadata,
    SummaryRecord,
)
from survey_dashboard.core.reshape import (
    discover_groups,
    filter_by_demographic,
    partition_by_category,
    pivot,
)

if TYPE_CHECKING:
    from survey_dashboard.core.data_loader import RecordStore

logger = logging.getLogger(__name__)

# Where subgroup columns are discovered:
#   "category"    -> only subgroups present in the items/scales subset (default)
#   "demographic" -> every subgroup of the selected demographic (the page)
GROUPS_FROM_DEMOGRAPHIC = "demographic"
GROUPS_FROM_CATEGORY = "category"


def _check_view(view: str) -> str:
    if view not in VIEWS:
        raise ValueError(f"Unknown view {view!r}. Expected one of {list(VIEWS)}.")
    return view


def recompute(
    records: Sequence[SummaryRecord],
    metadata: Metadata,
    demographic: str,
    view: str,
    groups_from: str = GROUPS_FROM_CATEGORY,
) -> DashboardView:
    """
    Run filter -> partition -> group discovery -> pivot from scratch.

    Pure: nothing is cached between calls and the inputs are not modified.
    """
    _check_view(view)

    filtered = filter_by_demographic(records, demographic)
    item_subset, scale_subset = partition_by_category(filtered, metadata)
    selected = item_subset if view == VIEW_ITEMS else scale_subset

    if groups_from == GROUPS_FROM_CATEGORY:
        groups = discover_groups(selected)
    elif groups_from == GROUPS_FROM_DEMOGRAPHIC:
        groups = discover_groups(filtered)
    else:
        raise ValueError(f"Unknown groups_from {groups_from!r}.")

    rows = pivot(selected)

    logger.debug(
        "Recomputed view demographic=%s view=%s: %d row(s), %d group(s)",
        demographic, view, len(rows), len(groups),
    )

    return DashboardView(
        demographic=demographic,
        view=view,
        groups=groups,
        rows=rows,
        filtered=filtered,
    )


@dataclass(frozen=True)
class SelectionState:
    """
    The two independent selections the page holds.

    Transitions return a new state; apply() always recomputes in full.
    """
    demographic: str = OVERALL_DEMOGRAPHIC
    view: str = VIEW_ITEMS

    def select_demographic(self, demographic: str) -> "SelectionState":
        return replace(self, demographic=demographic)

    def select_view(self, view: str) -> "SelectionState":
        return replace(self, view=_check_view(view))

    def toggle_view(self) -> "SelectionState":
        return self.select_view(VIEW_SCALES if self.view == VIEW_ITEMS else VIEW_ITEMS)

    def apply(self, store: "RecordStore", groups_from: str = GROUPS_FROM_CATEGORY) -> DashboardView:
        return recompute(
            store.records, store.metadata, self.demographic, self.view, groups_from=groups_from
        )
