from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import logging

from survey_dashboard.core.models import (
    GroupStats,
    Metadata,
    PivotedRow,
    SummaryRecord,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Filter stage
# ---------------------------------------------------------------------------

def filter_by_demographic(
    records: Iterable[SummaryRecord],
    demographic: str,
) -> List[SummaryRecord]:
    """
    Keep the records of one demographic grouping, in input order.

    Exact, case-sensitive match. No match is not an error: the result is
    simply empty.
    """
    return [r for r in records if r.demographic == demographic]


def partition_by_category(
    subset: Iterable[SummaryRecord],
    metadata: Metadata,
) -> Tuple[List[SummaryRecord], List[SummaryRecord]]:
    """
    Split a filtered subset into (item_subset, scale_subset).

    Items listed in neither metadata.score_types.items nor .scales are dropped
    from both outputs. The metadata and the records come from separate export
    steps and can drift apart; that drift must not break the page.
    """
    item_keys = set(metadata.score_types.items)
    scale_keys = set(metadata.score_types.scales)

    item_subset: List[SummaryRecord] = []
    scale_subset: List[SummaryRecord] = []
    unclassified = set()

    for r in subset:
        if r.item in item_keys:
            item_subset.append(r)
        elif r.item in scale_keys:
            scale_subset.append(r)
        else:
            unclassified.add(r.item)

    if unclassified:
        logger.debug(
            "Excluding %d unclassified item(s) from both views: %s",
            len(unclassified),
            sorted(unclassified),
        )

    return item_subset, scale_subset


# ---------------------------------------------------------------------------
# Group discovery
# ---------------------------------------------------------------------------

def discover_groups(subset: Iterable[SummaryRecord]) -> List[str]:
    """
    Distinct subgroup names in first-occurrence order.

    This order drives series, legend and table-column order downstream.
    """
    return list(dict.fromkeys(r.group for r in subset))


# ---------------------------------------------------------------------------
# Pivot stage
# ---------------------------------------------------------------------------

def pivot(subset: Iterable[SummaryRecord]) -> List[PivotedRow]:
    """
    Reshape item x group records into one row per item.

    Rows come out in first-occurrence item order. The label is taken from the
    first record seen for the item (falling back to the item key). When two
    records share an (item, group) pair the later one overwrites all of the
    earlier one's stats.
    """
    rows: Dict[str, PivotedRow] = {}

    for r in subset:
        row = rows.get(r.item)
        if row is None:
            row = PivotedRow(item=r.item, label=r.display_label)
            rows[r.item] = row
        row.groups[r.group] = GroupStats.from_record(r)

    return list(rows.values())
