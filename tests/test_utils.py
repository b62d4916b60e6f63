# tests/test_utils.py
from datetime import date

from models import BoardColumn, Project, Sprint, Task
from services.store import ProjectStore
from utils.progress import compute_project_progress, compute_sprint_progress
from utils.timeline import sprint_status, timeline_df_for_project


def _store():
    s = ProjectStore()
    s.put(Project(id="p1", title="P", owner_id="u"))
    s.put(Sprint(id="s1", project_id="p1", title="Sprint 1",
                 start_date=date(2025, 1, 6), end_date=date(2025, 1, 20)))
    s.put(Sprint(id="s2", project_id="p1", title="Sprint 2", is_completed=True,
                 start_date=date(2025, 1, 20), end_date=date(2025, 1, 20)))
    s.put(BoardColumn(id="todo", sprint_id="s1", title="TO DO"))
    s.put(BoardColumn(id="done", sprint_id="s1", title="DONE"))
    return s


def test_compute_sprint_progress_uses_story_points():
    s = _store()
    s.put(Task(id="t1", title="a", column_id="todo", sprint_id="s1", story_points=3))
    s.put(Task(id="t2", title="b", column_id="done", sprint_id="s1", story_points=1))
    assert compute_sprint_progress(s, "s1") == 25.0


def test_compute_sprint_progress_falls_back_to_task_count():
    s = _store()
    s.put(Task(id="t1", title="a", column_id="todo", sprint_id="s1"))
    s.put(Task(id="t2", title="b", column_id="done", sprint_id="s1"))
    assert compute_sprint_progress(s, "s1") == 50.0
    assert compute_project_progress(s, "p1") == 75.0


def test_timeline_df_for_project():
    df = timeline_df_for_project(_store(), "p1", today=date(2025, 1, 10))
    assert list(df["Item"]) == ["Sprint 1", "Sprint 2"]
    assert list(df["Status"]) == ["Active", "Completed"]
    # zero-length sprint still gets a visible bar
    assert df.iloc[1]["Finish"] == date(2025, 1, 21)


def test_sprint_status_planned_and_overdue():
    s = _store().sprints["s1"]
    assert sprint_status(s, date(2025, 1, 1)) == "Planned"
    assert sprint_status(s, date(2025, 2, 1)) == "Overdue"
