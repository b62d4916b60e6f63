# ui/tasks_panel.py
import streamlit as st

from models.base import PRIORITIES
from utils.board import is_reserved
from utils.permissions import Action
from utils.progress import compute_sprint_progress

PRIORITY_BADGES = {"low": "🟢", "medium": "🟡", "high": "🔴"}


def pick_sprint(state, project_id: str, key: str):
    sprints = state.store.sprints_for(project_id)
    if not sprints:
        return None
    ids = [s.id for s in sprints]
    open_ids = [s.id for s in sprints if not s.is_completed]
    current = state.selected_sprint_id if state.selected_sprint_id in ids else (open_ids or ids)[0]
    chosen = st.selectbox("Sprint", options=sprints, index=ids.index(current), key=key,
                          format_func=lambda s: f"{s.title}{' ✔' if s.is_completed else ''}")
    state.selected_sprint_id = chosen.id
    return chosen


def render_tasks_panel(state, project_id: str):
    st.subheader("Board")
    facade = state.facade
    sprint = pick_sprint(state, project_id, key="board_sprint")
    if sprint is None:
        st.info("Create a sprint first to get a board.")
        return False

    can_edit = facade.can(project_id, Action.EDIT_CONTENT)
    if not can_edit:
        st.info("View-only access. Ask an owner or admin to upgrade your role to edit.")
    elif state.store.missing_default_columns(sprint.id):
        facade.ensure_default_columns(sprint.id)

    st.progress(int(compute_sprint_progress(state.store, sprint.id)),
                text=f"{compute_sprint_progress(state.store, sprint.id):.0f}% done")

    changed = False
    board = state.store.columns_with_tasks(sprint.id)
    if can_edit:
        with st.form("new_task", clear_on_submit=True):
            c1, c2, c3, c4 = st.columns([3, 1, 1, 2])
            t_title = c1.text_input("Task title")
            t_priority = c2.selectbox("Priority", PRIORITIES, index=1)
            t_points = c3.number_input("Points", min_value=0, step=1, value=0)
            t_assignee = c4.text_input("Assignee")
            t_desc = st.text_area("Description", height=68)
            t_column = st.selectbox("Column", options=board, format_func=lambda c: c.title) if board else None
            submit_task = st.form_submit_button("Add task")
        if submit_task:
            changed = bool(facade.create_task(
                sprint.id, t_column.id if t_column else None, title=t_title, description=t_desc,
                priority=t_priority, story_points=int(t_points), assignee=t_assignee,
            ))

    cols = st.columns(max(len(board), 1))
    for col_ui, column in zip(cols, board):
        with col_ui:
            st.markdown(f"**{column.title}** · {len(column.tasks)} · {column.story_points} pts")
            for t in column.tasks:
                with st.expander(f"{PRIORITY_BADGES.get(t.priority, '')} {t.title}"):
                    if t.description:
                        st.write(t.description)
                    st.caption(f"{t.story_points} pts · {t.assignee or 'unassigned'}")
                    if not can_edit:
                        continue
                    others = [c for c in board if c.id != column.id]
                    dest = st.selectbox("Move to", options=others, format_func=lambda c: c.title,
                                        key=f"mv_{t.id}")
                    b1, b2 = st.columns(2)
                    if b1.button("Move", key=f"mvb_{t.id}") and dest is not None:
                        changed = bool(facade.move_task(t.id, dest.id)) or changed
                    if b2.button("Delete", key=f"del_{t.id}"):
                        changed = bool(facade.delete_task(t.id)) or changed
                    with st.form(f"edit_task_{t.id}"):
                        e_title = st.text_input("Title", value=t.title)
                        e_assignee = st.text_input("Assignee", value=t.assignee or "")
                        e_points = st.number_input("Points", min_value=0, step=1, value=t.story_points)
                        e_priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index(t.priority))
                        if st.form_submit_button("Save task"):
                            changed = bool(facade.update_task(
                                t.id, title=e_title, assignee=e_assignee,
                                story_points=int(e_points), priority=e_priority,
                            )) or changed
            if can_edit and not is_reserved(column.title):
                if st.button("Delete column", key=f"delcol_{column.id}"):
                    changed = bool(facade.delete_column(column.id)) or changed

    if can_edit:
        with st.expander("Add column"):
            new_col = st.text_input("Column title", key="new_column_title")
            if st.button("Create column", key="create_column"):
                changed = bool(facade.create_column(sprint.id, new_col)) or changed
    return changed
