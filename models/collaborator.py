# models/collaborator.py
from typing import Optional

from pydantic import field_validator

from models.base import Record, normalize_email
from models.project import ProjectSummary

ROLES = ("viewer", "editor", "admin")
STATUSES = ("pending", "accepted", "rejected")


class Collaborator(Record):
    project_id: str
    email: str
    role: str = "viewer"
    status: str = "pending"

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, v):
        return normalize_email(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v not in ROLES:
            raise ValueError(f"role must be one of {', '.join(ROLES)}")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v not in STATUSES:
            raise ValueError(f"status must be one of {', '.join(STATUSES)}")
        return v


class Invitation(Collaborator):
    """A pending collaborator row joined with its project summary."""

    project: Optional[ProjectSummary] = None
