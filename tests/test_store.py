# tests/test_store.py
from datetime import date, datetime

import pytest

from models import BacklogItem, BoardColumn, Collaborator, Project, Sprint, Task
from models.user import Identity
from services.store import ProjectStore
from utils.errors import NotFound, ValidationFailed

ALICE = Identity(id="u-alice", email="alice@x.com")
BOB = Identity(id="u-bob", email="bob@x.com")


def _task(tid, column_id, points=1, sprint_id="s1"):
    return Task(id=tid, title=f"Task {tid}", column_id=column_id, sprint_id=sprint_id,
                story_points=points, created_at=datetime(2025, 1, 1, 9, int(tid[-1])))


@pytest.fixture
def store():
    s = ProjectStore()
    s.put(Project(id="p1", title="Website Relaunch", owner_id="u-alice"))
    s.put(Sprint(id="s1", project_id="p1", title="Sprint 1",
                 start_date=date(2025, 1, 6), end_date=date(2025, 1, 20)))
    for cid, title in (("c1", "TO DO"), ("c2", "IN PROGRESS"), ("c3", "DONE")):
        s.put(BoardColumn(id=cid, sprint_id="s1", title=title))
    s.put(BacklogItem(id="b1", project_id="p1", title="Newsletter"))
    s.put(Collaborator(id="k1", project_id="p1", email="bob@x.com", role="viewer", status="pending"))
    return s


def test_columns_with_tasks_joins_by_column(store):
    store.put(_task("t1", "c1"))
    store.put(_task("t2", "c3", points=5))
    board = store.columns_with_tasks("s1")
    assert [c.title for c in board] == ["TO DO", "IN PROGRESS", "DONE"]
    assert [t.id for t in board[0].tasks] == ["t1"]
    assert board[2].story_points == 5


def test_columns_with_tasks_follows_moves(store):
    store.put(_task("t1", "c1"))
    store.put(_task("t1", "c2"))
    board = store.columns_with_tasks("s1")
    assert board[0].tasks == [] and [t.id for t in board[1].tasks] == ["t1"]


def test_task_needs_a_loaded_column(store):
    with pytest.raises(NotFound):
        store.put(_task("t9", "nope"))
    assert "t9" not in store.tasks


def test_removing_a_column_takes_its_tasks(store):
    store.put(_task("t1", "c2"))
    store.remove_column("c2")
    assert "t1" not in store.tasks


def test_remove_project_cascades(store):
    store.put(_task("t1", "c1"))
    store.remove_project("p1")
    assert not any([store.projects, store.sprints, store.columns, store.tasks,
                    store.backlog_items, store.collaborators])


def test_missing_default_columns(store):
    assert store.missing_default_columns("s1") == []
    store.remove_column("c2")
    assert store.missing_default_columns("s1") == ["IN PROGRESS"]


def test_visible_projects_needs_ownership_or_accepted_invite(store):
    assert [p.id for p in store.visible_projects(ALICE)] == ["p1"]
    assert store.visible_projects(BOB) == []
    store.put(store.collaborators["k1"].model_copy(update={"status": "accepted"}))
    assert [p.id for p in store.visible_projects(BOB)] == ["p1"]


def test_load_skips_orphaned_tasks():
    s = ProjectStore()
    s.load({
        "projects": [{"id": "p1", "title": "P", "owner_id": "u"}],
        "sprints": [{"id": "s1", "project_id": "p1", "title": "S",
                     "start_date": "2025-01-01", "end_date": "2025-01-10"}],
        "columns": [{"id": "c1", "sprint_id": "s1", "title": "TO DO"}],
        "tasks": [{"id": "t1", "title": "ok", "column_id": "c1", "sprint_id": "s1"},
                  {"id": "t2", "title": "lost", "column_id": "gone", "sprint_id": "s1"}],
    })
    assert list(s.tasks) == ["t1"]


def test_malformed_load_leaves_store_untouched(store):
    with pytest.raises(ValidationFailed):
        store.load({"projects": [{"id": "p2", "title": "No owner"}]})
    assert list(store.projects) == ["p1"]


def test_replace_project_swaps_only_that_project(store):
    store.put(Project(id="p2", title="Other", owner_id="u-alice"))
    store.replace_project("p1", {
        "projects": [{"id": "p1", "title": "Renamed", "owner_id": "u-alice"}],
        "backlog_items": [],
    })
    assert store.projects["p1"].title == "Renamed"
    assert "p2" in store.projects
    assert store.backlog_for("p1") == [] and store.sprints_for("p1") == []
