from __future__ import annotations

import logging
from typing import List, Optional

import streamlit as st

from survey_dashboard.config import APP_NAME, APP_SUBTITLE, APP_VERSION, FOOTER_TEXT
from survey_dashboard.core.data_loader import LoadFailure, RecordStore, RecordStoreHolder
from survey_dashboard.core.models import OVERALL_DEMOGRAPHIC, VIEW_ITEMS, VIEW_SCALES, DashboardView
from survey_dashboard.core.notes import build_view_notes, chart_title
from survey_dashboard.core.selection import GROUPS_FROM_DEMOGRAPHIC, SelectionState
from survey_dashboard.ui.charts import build_bar_chart, build_summary_table

logger = logging.getLogger(__name__)

HOLDER_KEY = "record_store_holder"
DEMOGRAPHIC_KEY = "selected_demographic"
VIEW_KEY = "selected_view"

VIEW_LABELS = {
    VIEW_ITEMS: "Individual Items",
    VIEW_SCALES: "Scale Scores",
}


def _get_holder() -> RecordStoreHolder:
    holder = st.session_state.get(HOLDER_KEY)
    if holder is None:
        holder = RecordStoreHolder()
        st.session_state[HOLDER_KEY] = holder
    return holder


def _ensure_loaded(holder: RecordStoreHolder) -> None:
    if holder.state != "loading":
        return
    with st.spinner("Loading data..."):
        holder.load_blocking()


def _render_load_error(error: LoadFailure) -> None:
    st.header("Error Loading Data")
    st.error(str(error))
    st.subheader("To generate the data:")
    st.markdown("\n".join(f"{i}. {step}" for i, step in enumerate(error.remediation, start=1)))
    if error.detail:
        with st.expander("Details", expanded=False):
            st.code(error.detail)


def _render_controls(demographics: List[str]) -> SelectionState:
    col1, col2 = st.columns(2)

    with col1:
        options = demographics or [OVERALL_DEMOGRAPHIC]
        if st.session_state.get(DEMOGRAPHIC_KEY) not in options:
            st.session_state[DEMOGRAPHIC_KEY] = (
                OVERALL_DEMOGRAPHIC if OVERALL_DEMOGRAPHIC in options else options[0]
            )
        demographic = st.selectbox("Group By:", options=options, key=DEMOGRAPHIC_KEY)

    with col2:
        st.session_state.setdefault(VIEW_KEY, VIEW_ITEMS)
        view = st.radio(
            "View:",
            options=list(VIEW_LABELS.keys()),
            format_func=lambda k: VIEW_LABELS[k],
            horizontal=True,
            key=VIEW_KEY,
        )

    return SelectionState().select_demographic(demographic).select_view(view)


def _render_chart_section(view: DashboardView) -> None:
    st.subheader(chart_title(view.view, view.demographic))
    if view.is_empty:
        st.info("No data for this selection.")
    st.plotly_chart(build_bar_chart(view), use_container_width=True)


def _render_table_section(view: DashboardView) -> None:
    st.subheader("Summary Statistics")
    st.dataframe(build_summary_table(view), use_container_width=True)


def _render_notes(view: DashboardView) -> None:
    notes = build_view_notes(view)
    if not notes.visible:
        return
    st.subheader("Notes")
    st.markdown("\n".join(f"- {line}" for line in notes.lines))
    if notes.warning:
        st.warning(notes.warning)


def render_dashboard(store: RecordStore, selection: Optional[SelectionState] = None) -> DashboardView:
    selection = selection or _render_controls(list(store.metadata.demographics))
    view = selection.apply(store, groups_from=GROUPS_FROM_DEMOGRAPHIC)

    _render_chart_section(view)
    _render_table_section(view)
    _render_notes(view)
    return view


def run_app() -> None:
    st.set_page_config(page_title=APP_NAME, page_icon="📊", layout="wide")

    holder = _get_holder()
    _ensure_loaded(holder)

    if holder.error is not None:
        _render_load_error(holder.error)
        return
    if holder.store is None:
        st.info("Loading data...")
        return

    store = holder.store
    st.title(APP_NAME)
    st.caption(f"{APP_SUBTITLE} (N = {store.metadata.sample_size})")

    render_dashboard(store)

    st.divider()
    st.caption(f"{FOOTER_TEXT} | v{APP_VERSION}")
