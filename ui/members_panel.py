# ui/members_panel.py
import streamlit as st
import pandas as pd

from models import ROLES
from utils.permissions import Action


def render_members_panel(state, project_id: str):
    st.subheader("Collaborators")
    facade = state.facade
    can_manage = facade.can(project_id, Action.MANAGE_COLLABORATORS)
    changed = False

    if can_manage:
        with st.form("invite_member", clear_on_submit=True):
            inv_email = st.text_input("Invite by email", placeholder="bob@example.com")
            role_new = st.selectbox("Role", list(ROLES), index=1)
            add_btn = st.form_submit_button("Send invitation")
        if add_btn:
            changed = bool(facade.invite(project_id, inv_email, role_new))
    else:
        st.caption("Only the owner and admins can invite collaborators.")

    rows = state.store.collaborators_for(project_id)
    data = [{"Email": c.email, "Role": c.role, "Status": c.status,
             "Invited": c.created_at.date() if c.created_at else None} for c in rows]
    st.dataframe(pd.DataFrame(data) if data else pd.DataFrame(columns=["Email", "Role", "Status", "Invited"]),
                 use_container_width=True, hide_index=True)

    if can_manage and rows:
        st.markdown("**Manage access**")
        for c in rows:
            if c.email == state.identity.email:
                continue
            c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
            c1.write(f"{c.email} · _{c.status}_")
            new_role = c2.selectbox("Role", list(ROLES), index=ROLES.index(c.role),
                                    key=f"role_{c.id}", label_visibility="collapsed")
            if c3.button("Save", key=f"save_role_{c.id}") and new_role != c.role:
                changed = bool(facade.update_collaborator_role(c.id, new_role)) or changed
            if c4.button("Remove", key=f"remove_{c.id}"):
                changed = bool(facade.remove_collaborator(c.id)) or changed
    return changed
