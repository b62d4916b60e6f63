# ui/projects_panel.py

import streamlit as st

from utils.permissions import role_for

__all__ = ["render_projects", "render_new_project"]


def render_projects(state):
    """Display a dropdown of projects the user can see and return the selected project_id."""
    projects = state.store.visible_projects(state.identity)
    if not projects:
        st.info("You don't belong to any projects yet. Create one or accept an invitation.")
        return None

    ids = [p.id for p in projects]
    idx = ids.index(state.selected_project_id) if state.selected_project_id in ids else 0

    def _label(p):
        role = role_for(state.identity, p, state.store.collaborators_for(p.id))
        return f"{p.title} ({role})"

    chosen = st.selectbox("Open project", options=projects, index=idx, format_func=_label,
                          key="project_picker")
    state.selected_project_id = chosen.id
    return chosen.id


def render_new_project(state):
    """Form to create a new project."""
    with st.form("new_project", clear_on_submit=True):
        p_title = st.text_input("Project title", placeholder="Website Relaunch")
        p_desc = st.text_area("Description", placeholder="Short project description…")
        p_goal = st.text_input("End goal", placeholder="What does done look like?")
        submitted = st.form_submit_button("Create project", use_container_width=True)

    if submitted:
        outcome = state.facade.create_project(p_title, p_desc, p_goal)
        if outcome:
            state.selected_project_id = outcome.value.id
            return True
    return False
