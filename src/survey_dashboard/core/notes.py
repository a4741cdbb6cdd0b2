from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from survey_dashboard.config import SMALL_SAMPLE_THRESHOLD
from survey_dashboard.core.models import (
    OVERALL_DEMOGRAPHIC,
    VIEW_ITEMS,
    DashboardView,
    SummaryRecord,
)

CI_NOTE = "Error bars represent 95% confidence intervals"
LIKERT_NOTE = (
    "Items are scored on a 1-5 Likert scale "
    "(1 = Strongly Disagree, 5 = Strongly Agree)"
)
REVERSED_NOTE = "Reverse-coded items are marked with [REVERSED] in the full labels"
SMALL_SAMPLE_WARNING = (
    "Some subgroups have small sample sizes (n < {threshold}). Interpret with caution."
)


@dataclass
class ViewNotes:
    """
    Footnotes shown under a subgroup breakdown.

    Nothing is shown for the Overall demographic, where there is a single
    group and the caveats do not apply.
    """
    visible: bool
    lines: List[str] = field(default_factory=list)
    small_sample_groups: List[str] = field(default_factory=list)
    warning: str | None = None


def _is_small(n: object, threshold: int) -> bool:
    try:
        return n is not None and float(n) < threshold
    except (TypeError, ValueError):
        return False


def find_small_sample_groups(
    groups: Sequence[str],
    filtered: Iterable[SummaryRecord],
    threshold: int = SMALL_SAMPLE_THRESHOLD,
) -> List[str]:
    """
    Groups whose first record in the demographic subset has n below threshold.

    Only the first record seen for each group is checked.
    """
    first_n: Dict[str, object] = {}
    for r in filtered:
        if r.group not in first_n:
            first_n[r.group] = r.n
    return [g for g in groups if g in first_n and _is_small(first_n[g], threshold)]


def build_view_notes(
    view: DashboardView,
    threshold: int = SMALL_SAMPLE_THRESHOLD,
) -> ViewNotes:
    if view.demographic == OVERALL_DEMOGRAPHIC:
        return ViewNotes(visible=False)

    small = find_small_sample_groups(view.groups, view.filtered, threshold=threshold)
    warning = SMALL_SAMPLE_WARNING.format(threshold=threshold) if small else None

    return ViewNotes(
        visible=True,
        lines=[CI_NOTE, LIKERT_NOTE, REVERSED_NOTE],
        small_sample_groups=small,
        warning=warning,
    )


def chart_title(view: str, demographic: str) -> str:
    title = "Item Means" if view == VIEW_ITEMS else "Scale Score Means"
    if demographic != OVERALL_DEMOGRAPHIC:
        title += f" by {demographic}"
    return title
