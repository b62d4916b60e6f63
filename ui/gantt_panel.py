# ui/gantt_panel.py
from datetime import date, timedelta

import streamlit as st
import plotly.express as px

from utils.permissions import Action
from utils.progress import compute_project_progress
from utils.timeline import timeline_df_for_project

STATUS_COLORS = {
    "Planned": "#9CA3AF",
    "Active": "#2563EB",
    "Overdue": "#DC2626",
    "Completed": "#16A34A",
}


def render_gantt_panel(state, project_id: str):
    st.subheader("Sprints")
    facade = state.facade
    changed = False

    if facade.can(project_id, Action.EDIT_CONTENT):
        with st.expander("New sprint"):
            with st.form("new_sprint", clear_on_submit=True):
                s_title = st.text_input("Sprint title", placeholder="Sprint 1")
                c1, c2 = st.columns(2)
                s_start = c1.date_input("Start", value=date.today())
                s_end = c2.date_input("End", value=date.today() + timedelta(days=14))
                s_desc = st.text_area("Goal / description", height=68)
                if st.form_submit_button("Create sprint"):
                    outcome = facade.create_sprint(project_id, s_title, s_start, s_end, s_desc)
                    if outcome:
                        state.selected_sprint_id = outcome.value.id
                        changed = True
        for s in state.store.sprints_for(project_id):
            if not s.is_completed and st.button(f"Complete {s.title}", key=f"complete_{s.id}"):
                changed = bool(facade.complete_sprint(s.id)) or changed

    st.metric("Project progress", f"{compute_project_progress(state.store, project_id):.0f}%")
    df = timeline_df_for_project(state.store, project_id)
    if df.empty:
        st.info("Add sprints to see the timeline.")
    else:
        fig = px.timeline(df, x_start="Start", x_end="Finish", y="Item",
                          color="Status", hover_data=["Progress"],
                          color_discrete_map=STATUS_COLORS)
        fig.update_yaxes(autorange="reversed", title=None)
        fig.update_layout(margin=dict(l=20, r=20, t=10, b=30), height=360)
        st.plotly_chart(fig, use_container_width=True, config={"displaylogo": False})
    return changed
