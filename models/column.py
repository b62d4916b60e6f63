# models/column.py
from typing import List

from sqlmodel import SQLModel

from models.base import Record
from models.task import Task


class BoardColumn(Record):
    sprint_id: str
    title: str


class ColumnWithTasks(SQLModel):
    id: str
    title: str
    tasks: List[Task] = []

    @property
    def story_points(self) -> int:
        return sum(t.story_points for t in self.tasks)
