# main.py

#============================================================#
#                         Scrumify-PM                        #
#============================================================#
# Purpose     : Scrumify-PM is an agile project manager with #
#               sprints, kanban boards, backlog and invited  #
#               collaborators (SQLite/Postgres powered)      #
#============================================================#

import streamlit as st

import db
from services.auth import SessionAuth
from services.notifications import SmtpInvitationSender
from services.session import build_app_state
from ui.admin_panel import render_admin_panel
from ui.backlog_panel import render_backlog_panel
from ui.gantt_panel import render_gantt_panel
from ui.invitations_panel import render_invitations_panel
from ui.members_panel import render_members_panel
from ui.notices import show_notices
from ui.projects_panel import render_new_project, render_projects
from ui.tasks_panel import render_tasks_panel
from utils.config import configure_logging
from utils.errors import ScrumError
from utils.permissions import role_for


def force_rerun():
    fn = getattr(st, "rerun", None) or getattr(st, "experimental_rerun", None)
    if fn:
        fn()


st.set_page_config(
    page_title="Scrumify - Agile Project Manager",
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ======================  GLOBAL CSS  ======================
st.markdown("""
<style>
:root{
  --tab-active:#2563eb;
  --tab-bg:#f6f7fb;
  --tab-text:#374151;
}
.stTabs [role="tablist"]{gap:10px;padding:6px 2px 14px 2px;border-bottom:0;}
.stTabs [role="tab"]{
  background:var(--tab-bg); color:var(--tab-text);
  border:1px solid #e5e7eb; border-radius:999px; padding:10px 16px;
  font-weight:600; transition:all .18s;
}
.stTabs [role="tab"][aria-selected="true"]{
  background:var(--tab-active); color:#fff; border-color:transparent;
}
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def _init_db_once():
    configure_logging()
    db.init_db()
    return db.SqlStore()


@st.cache_resource
def _invitation_sender():
    return SmtpInvitationSender.from_settings()


backend = _init_db_once()


def _on_identity_change(identity):
    old = st.session_state.pop("app_state", None)
    if old is not None:
        old.close()
    if identity is not None:
        st.session_state["app_state"] = build_app_state(identity, backend, _invitation_sender())


def _auth() -> SessionAuth:
    auth = st.session_state.get("auth")
    if auth is None:
        auth = SessionAuth()
        auth.on_identity_change(_on_identity_change)
        st.session_state["auth"] = auth
    return auth


# ======================  AUTH GATE  ======================
def full_screen_login(auth: SessionAuth):
    _, col, _ = st.columns([1, 2.2, 1])
    with col:
        st.markdown("<h2 style='text-align:center;'>Scrumify</h2>", unsafe_allow_html=True)
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Your email", placeholder="you@example.com")
            name = st.text_input("Your name (optional)")
            submitted = st.form_submit_button("Sign in / Continue", use_container_width=True)
        if submitted:
            try:
                auth.sign_in(email, name)
            except ScrumError as e:
                st.warning(e.message)
            else:
                force_rerun()


def handle_accept_link(state):
    """Invitation emails link to ?id=<collaborator>&projectId=<project>."""
    invite_id = st.query_params.get("id")
    if not invite_id:
        return
    st.info("You followed an invitation link.")
    c1, c2 = st.columns(2)
    accepted = c1.button("Accept invitation", key="link_accept")
    declined = c2.button("Decline invitation", key="link_decline")
    if accepted:
        res = state.facade.accept_invitation(invite_id)
        if res:
            state.selected_project_id = res.value.project.id
    elif declined:
        state.facade.reject_invitation(invite_id)
    if accepted or declined:
        st.query_params.clear()
        force_rerun()


auth = _auth()
identity = auth.current_identity()
if identity is None:
    full_screen_login(auth)
    st.stop()

state = st.session_state["app_state"]
handle_accept_link(state)

# ======================  SIDEBAR  ======================
with st.sidebar:
    st.caption(f"Signed in as **{identity.email}**")
    if st.button("Sign out", use_container_width=True):
        auth.sign_out()
        force_rerun()
    if st.button("Refresh", use_container_width=True):
        state.facade.refresh()
    st.markdown("---")
    st.subheader("Projects")
    project_id = render_projects(state)
    with st.expander("New project"):
        if render_new_project(state):
            force_rerun()

if project_id is None:
    if render_invitations_panel(state):
        force_rerun()
    show_notices(state)
    st.stop()

project = state.store.projects[project_id]
role = role_for(identity, project, state.store.collaborators_for(project_id))
st.title(project.title)
st.caption(f"Your role: {role}" + (f" · Goal: {project.end_goal}" if project.end_goal else ""))
if project.description:
    st.markdown(project.description)

# ---------- Tabs ----------
tab_board, tab_backlog, tab_sprints, tab_people, tab_invites, tab_settings = st.tabs(
    ["Board", "Backlog", "Sprints", "Collaborators", "Invitations", "Settings"]
)

changed = False
with tab_board:
    changed = render_tasks_panel(state, project_id) or changed
with tab_backlog:
    changed = render_backlog_panel(state, project_id) or changed
with tab_sprints:
    changed = render_gantt_panel(state, project_id) or changed
with tab_people:
    changed = render_members_panel(state, project_id) or changed
with tab_invites:
    changed = render_invitations_panel(state) or changed
with tab_settings:
    changed = render_admin_panel(state, project_id) or changed

if changed:
    force_rerun()
show_notices(state)
