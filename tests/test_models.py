# tests/test_models.py
from datetime import date, datetime

import pytest

from models import BacklogItem, Collaborator, Sprint, Task
from utils.errors import ValidationFailed


def test_sprint_row_dates_are_parsed():
    s = Sprint.from_row({
        "id": "s1", "project_id": "p1", "title": "Sprint 1",
        "start_date": "2025-01-06", "end_date": "2025-01-20",
        "is_completed": False, "created_at": "2025-01-01T10:00:00",
    })
    assert s.start_date == date(2025, 1, 6)
    assert s.created_at == datetime(2025, 1, 1, 10, 0)


def test_collaborator_email_is_normalized():
    c = Collaborator.from_row({"id": "c1", "project_id": "p1", "email": " Bob@X.COM ",
                               "role": "editor", "status": "pending"})
    assert c.email == "bob@x.com"


@pytest.mark.parametrize("row", [
    {"id": "c1", "project_id": "p1", "email": "bob@x.com", "role": "owner", "status": "pending"},
    {"id": "c1", "project_id": "p1", "email": "bob@x.com", "role": "viewer", "status": "maybe"},
    {"id": "c1", "email": "bob@x.com", "role": "viewer", "status": "pending"},
])
def test_malformed_collaborator_rows_are_rejected(row):
    with pytest.raises(ValidationFailed):
        Collaborator.from_row(row)


def test_task_defaults_and_priority():
    t = Task.from_row({"id": "t1", "title": "Hero", "priority": "HIGH", "story_points": "3",
                       "column_id": "c1", "sprint_id": "s1", "assignee": None})
    assert t.priority == "high"
    assert t.story_points == 3


def test_negative_story_points_rejected():
    with pytest.raises(ValidationFailed):
        BacklogItem.from_row({"id": "b1", "project_id": "p1", "title": "x", "story_points": -1})


def test_extra_join_fields_are_ignored():
    b = BacklogItem.from_row({"id": "b1", "project_id": "p1", "title": "x", "projects": {"id": "p1"}})
    assert b.to_row()["title"] == "x"
