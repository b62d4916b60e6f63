# ui/invitations_panel.py
import streamlit as st


def render_invitations_panel(state):
    st.subheader("Invitations")
    outcome = state.facade.pending_invitations()
    if not outcome:
        return False
    invites = outcome.value
    if not invites:
        st.info("No pending invitations.")
        return False

    changed = False
    for inv in invites:
        with st.container(border=True):
            st.markdown(f"**{inv.project.title}** — invited as _{inv.role}_")
            if inv.project.description:
                st.caption(inv.project.description)
            c1, c2 = st.columns(2)
            if c1.button("Accept", key=f"accept_{inv.id}", use_container_width=True):
                res = state.facade.accept_invitation(inv.id)
                if res:
                    state.selected_project_id = res.value.project.id
                    changed = True
            if c2.button("Decline", key=f"decline_{inv.id}", use_container_width=True):
                changed = bool(state.facade.reject_invitation(inv.id)) or changed
    return changed
