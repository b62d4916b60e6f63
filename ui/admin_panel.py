# ui/admin_panel.py
import streamlit as st

from utils.permissions import Action


def render_admin_panel(state, project_id: str):
    """Project details for editors and above; deletion is owner-only."""
    facade = state.facade
    project = state.store.projects.get(project_id)
    if project is None:
        return False
    changed = False

    if facade.can(project_id, Action.EDIT_CONTENT):
        with st.form(f"edit_project_{project_id}"):
            new_title = st.text_input("Title", value=project.title)
            new_desc = st.text_area("Description", value=project.description or "", height=90)
            new_goal = st.text_input("End goal", value=project.end_goal or "")
            if st.form_submit_button("Save project"):
                changed = bool(facade.update_project(project_id, title=new_title,
                                                     description=new_desc, end_goal=new_goal))

    if not facade.can(project_id, Action.DELETE_PROJECT):
        st.caption("Only the owner can delete this project.")
        return changed

    st.markdown("**Danger zone**")
    confirm = st.checkbox("I understand this deletes all sprints, tasks, backlog and collaborators",
                          key=f"confirm_delete_{project_id}")
    if st.button("Delete project (irreversible)", disabled=not confirm, key=f"delete_{project_id}"):
        if facade.delete_project(project_id):
            state.selected_project_id = None
            state.selected_sprint_id = None
            changed = True
    return changed
