# ABOUTME: Report tab shared by the discharge, AWS and rain gauge views
# ABOUTME: Window and station pickers, paginated table and export buttons over one engine

from datetime import datetime

import pandas as pd
import streamlit as st

from dashboard_components.export_coordinator import ExportFormat


def _window_inputs(engine, key):
    window = engine.window
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        start_date = st.date_input("From date", value=window.start.date(), key=f"{key}_start_date")
    with col2:
        start_time = st.time_input("From time", value=window.start.time(), key=f"{key}_start_time", step=60)
    with col3:
        end_date = st.date_input("To date", value=window.end.date(), key=f"{key}_end_date")
    with col4:
        end_time = st.time_input("To time", value=window.end.time(), key=f"{key}_end_time", step=60)
    return engine.set_window(
        start=datetime.combine(start_date, start_time),
        end=datetime.combine(end_date, end_time),
    )


def _render_table(engine):
    state = engine.state
    columns = engine.config.columns
    if state.error:
        st.error(state.error)
        return
    if not state.rows:
        st.info("No records for the selected window and stations")
        return
    frame = pd.DataFrame(state.rows, columns=[c.key for c in columns])
    frame.columns = [c.header for c in columns]
    st.dataframe(frame, hide_index=True, use_container_width=True)


def render_report_tab(engine, coordinator, options, run):
    """
    Render one report view.

    Parameters:
    -----------
    engine : ReportQueryEngine
        Engine owning this view's state
    coordinator : ExportCoordinator
        Export coordinator bound to the same engine
    options : list of StationOption
        Station picker entries
    run : callable
        Runs a coroutine to completion (asyncio.run in the Streamlit host)
    """
    config = engine.config
    key = config.id

    st.header(config.title)
    st.caption(config.badge)

    # First activation loads every station's first page
    run(engine.initialize())

    validation = _window_inputs(engine, key)
    if not validation.is_valid:
        st.warning(validation.message)

    titles = {option.id: option.title for option in options}
    selected = st.multiselect(
        config.station_label,
        options=list(titles),
        default=[s for s in engine.selected_ids if s in titles],
        format_func=lambda station: titles.get(station, station),
        key=f"{key}_stations",
        placeholder="All stations",
    )
    engine.set_selection(selected)

    col_gen, col_pdf, col_xls, col_status = st.columns([1, 1, 1, 3])
    with col_gen:
        if st.button("Generate", key=f"{key}_generate", type="primary", disabled=engine.state.is_loading):
            run(engine.generate())
    with col_pdf:
        if st.button("Export PDF", key=f"{key}_export_pdf",
                     disabled=coordinator.is_exporting or not validation.is_valid):
            run(coordinator.export_as(ExportFormat.PDF))
    with col_xls:
        if st.button("Export Excel", key=f"{key}_export_excel",
                     disabled=coordinator.is_exporting or not validation.is_valid):
            run(coordinator.export_as(ExportFormat.SPREADSHEET))
    with col_status:
        badge = engine.status_badge()
        if badge:
            st.caption(badge)

    note = coordinator.notification
    if note is not None:
        if note.kind == 'success':
            st.success(note.message)
        else:
            st.error(note.message)

    _render_table(engine)

    col_prev, col_page, col_next = st.columns([1, 4, 1])
    with col_prev:
        if st.button("◀ Previous", key=f"{key}_prev", disabled=engine.state.page <= 1):
            run(engine.change_page(-1))
            st.rerun()
    with col_next:
        if st.button("Next ▶", key=f"{key}_next", disabled=engine.state.page >= engine.page_count):
            run(engine.change_page(1))
            st.rerun()
    with col_page:
        st.caption(f"{engine.status_text()} · {engine.page_label()}")
