# models/base.py
import re
from datetime import date, datetime
from typing import Optional

from dateutil import parser
from pydantic import ValidationError, field_validator
from sqlmodel import SQLModel

from utils.errors import ValidationFailed

PRIORITIES = ("low", "medium", "high")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def parse_date(x):
    if x is None or x == "":
        return None
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    return parser.parse(str(x)).date()


def parse_datetime(x):
    if x is None or x == "":
        return None
    if isinstance(x, datetime):
        return x
    if isinstance(x, date):
        return datetime(x.year, x.month, x.day)
    return parser.parse(str(x))


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: Optional[str]) -> bool:
    return bool(EMAIL_RE.match(normalize_email(email)))


class Record(SQLModel):
    """Typed view of one persisted row. Built from `snake_case` row dicts."""

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_timestamps(cls, v):
        try:
            return parse_datetime(v)
        except (ValueError, OverflowError):
            raise ValueError(f"not a timestamp: {v!r}")

    @classmethod
    def from_row(cls, row):
        try:
            return cls.model_validate(dict(row))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ()))
            raise ValidationFailed(
                f"Malformed {cls.__name__} row ({field}: {first.get('msg')})"
            ) from e
        except (TypeError, ValueError) as e:
            raise ValidationFailed(f"Malformed {cls.__name__} row: {e}") from e

    def to_row(self) -> dict:
        return self.model_dump()


def check_priority(v):
    v = (v or "medium").strip().lower()
    if v not in PRIORITIES:
        raise ValueError(f"priority must be one of {', '.join(PRIORITIES)}")
    return v


def check_story_points(v):
    v = int(v or 0)
    if v < 0:
        raise ValueError("story points cannot be negative")
    return v
