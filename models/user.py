# models/user.py
from typing import Optional

from sqlmodel import SQLModel


class Identity(SQLModel):
    """The signed-in user as the auth provider reports it."""

    id: str
    email: str
    name: Optional[str] = None
