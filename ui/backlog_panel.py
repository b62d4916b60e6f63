# ui/backlog_panel.py
import streamlit as st
import pandas as pd

from models.base import PRIORITIES
from utils.permissions import Action


def render_backlog_panel(state, project_id: str):
    st.subheader("Backlog")
    facade = state.facade
    can_edit = facade.can(project_id, Action.EDIT_CONTENT)
    changed = False

    if can_edit:
        with st.form("new_backlog_item", clear_on_submit=True):
            c1, c2, c3 = st.columns([3, 1, 1])
            b_title = c1.text_input("Title")
            b_priority = c2.selectbox("Priority", PRIORITIES, index=1)
            b_points = c3.number_input("Points", min_value=0, step=1, value=0)
            b_desc = st.text_area("Description", height=68)
            if st.form_submit_button("Add to backlog"):
                changed = bool(facade.create_backlog_item(
                    project_id, title=b_title, description=b_desc,
                    priority=b_priority, story_points=int(b_points),
                ))

    items = state.store.backlog_for(project_id)
    if not items:
        st.info("The backlog is empty.")
        return changed

    df = pd.DataFrame([{"Title": b.title, "Priority": b.priority, "Points": b.story_points,
                        "Description": b.description or ""} for b in items])
    st.dataframe(df, use_container_width=True, hide_index=True)
    if not can_edit:
        return changed

    open_sprints = [s for s in state.store.sprints_for(project_id) if not s.is_completed]
    for b in items:
        c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
        c1.write(b.title)
        target = c2.selectbox("Sprint", options=open_sprints, format_func=lambda s: s.title,
                              key=f"bl_sprint_{b.id}", label_visibility="collapsed")
        if c3.button("To sprint", key=f"bl_move_{b.id}", disabled=target is None):
            changed = bool(facade.move_backlog_item_to_sprint(b.id, target.id)) or changed
        if c4.button("Delete", key=f"bl_del_{b.id}"):
            changed = bool(facade.delete_backlog_item(b.id)) or changed
    return changed
