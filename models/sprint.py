# models/sprint.py
from datetime import date
from typing import Optional

from pydantic import field_validator

from models.base import Record, parse_date


class Sprint(Record):
    project_id: str
    title: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_completed: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_date(v)
