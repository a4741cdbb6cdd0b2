from __future__ import annotations

from typing import Any, List, Optional, Sequence

import pandas as pd
import plotly.graph_objects as go

from survey_dashboard.config import ITEM_AXIS_RANGE, SERIES_COLORS
from survey_dashboard.core.models import VIEW_ITEMS, DashboardView

PLACEHOLDER = "-"
STAT_COLUMNS = ["N", "Mean", "SD"]


def _fmt2(x: Any) -> str:
    if x is None:
        return PLACEHOLDER
    try:
        return f"{float(x):.2f}"
    except (TypeError, ValueError):
        return str(x)


def _error_arrays(mean: Any, ci_lower: Any, ci_upper: Any) -> tuple[Optional[float], Optional[float]]:
    try:
        return float(ci_upper) - float(mean), float(mean) - float(ci_lower)
    except (TypeError, ValueError):
        return None, None


def build_bar_chart(
    view: DashboardView,
    colors: Sequence[str] = SERIES_COLORS,
    height: int = 400,
) -> go.Figure:
    """
    Horizontal grouped bars: one trace per subgroup, one bar per item.

    Bars are positioned by item key and labelled with the item label, so
    items sharing a label keep separate rows.

    Items without data for a subgroup get a gap (None) in that trace. Error
    bars span the 95% CI.
    """
    fig = go.Figure()
    items = [row.item for row in view.rows]
    bar_width = 0.12 if len(view.groups) > 4 else 0.2

    for idx, group in enumerate(view.groups):
        means: List[Any] = []
        err_plus: List[Optional[float]] = []
        err_minus: List[Optional[float]] = []
        hover: List[str] = []

        for row in view.rows:
            stats = row.get(group)
            if stats is None:
                means.append(None)
                err_plus.append(None)
                err_minus.append(None)
                hover.append("")
                continue
            means.append(stats.mean)
            plus, minus = _error_arrays(stats.mean, stats.ci_lower, stats.ci_upper)
            err_plus.append(plus)
            err_minus.append(minus)
            n_part = f" (n={stats.n})" if stats.n else ""
            hover.append(f"{group}: {_fmt2(stats.mean)}{n_part}")

        fig.add_trace(
            go.Bar(
                x=means,
                y=items,
                name=group,
                orientation="h",
                width=bar_width,
                marker_color=colors[idx % len(colors)],
                error_x=dict(type="data", symmetric=False, array=err_plus, arrayminus=err_minus),
                hovertext=hover,
                hovertemplate="%{hovertext}<extra></extra>",
            )
        )

    xaxis: dict = dict(tickformat=".1f")
    if view.view == VIEW_ITEMS:
        xaxis["range"] = list(ITEM_AXIS_RANGE)
    else:
        xaxis["autorange"] = True

    fig.update_layout(
        barmode="group",
        height=height,
        margin=dict(l=150, r=30, t=20, b=20),
        xaxis=xaxis,
        yaxis=dict(
            type="category",
            autorange="reversed",
            tickmode="array",
            tickvals=items,
            ticktext=[row.label for row in view.rows],
            tickfont=dict(size=12),
        ),
        legend=dict(orientation="h"),
    )
    return fig


def build_summary_table(view: DashboardView) -> pd.DataFrame:
    """
    N / Mean / SD per subgroup, one row per item label.

    Columns are a (group, stat) MultiIndex in discovered group order; cells
    with no data hold the placeholder.
    """
    columns = pd.MultiIndex.from_tuples(
        [(g, stat) for g in view.groups for stat in STAT_COLUMNS],
        names=["group", "stat"],
    )
    if not view.rows:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="Item"))

    data = []
    for row in view.rows:
        cells: List[Any] = []
        for g in view.groups:
            stats = row.get(g)
            if stats is None:
                cells.extend([PLACEHOLDER] * len(STAT_COLUMNS))
                continue
            cells.append(stats.n if stats.n else PLACEHOLDER)
            cells.append(_fmt2(stats.mean))
            cells.append(_fmt2(stats.sd))
        data.append(cells)

    return pd.DataFrame(
        data,
        columns=columns,
        index=pd.Index([row.label for row in view.rows], name="Item"),
    )
