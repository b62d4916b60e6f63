# models/task.py
from typing import Optional

from pydantic import field_validator

from models.base import Record, check_priority, check_story_points


class Task(Record):
    title: str
    description: Optional[str] = None
    priority: str = "medium"
    assignee: Optional[str] = ""
    story_points: int = 0
    column_id: str
    sprint_id: str

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v):
        return check_priority(v)

    @field_validator("story_points", mode="before")
    @classmethod
    def normalize_story_points(cls, v):
        return check_story_points(v)
