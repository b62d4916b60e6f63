# models/project.py
from typing import Optional

from models.base import Record


class Project(Record):
    title: str
    description: Optional[str] = None
    end_goal: Optional[str] = None
    owner_id: str


class ProjectSummary(Record):
    """Minimal project fields shown next to a pending invitation."""

    title: str
    description: Optional[str] = None
