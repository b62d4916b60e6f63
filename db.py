# db.py

#============================================================#
#                         Scrumify-PM                        #
#============================================================#
# Purpose     : Scrumify-PM is an agile project manager with #
#               sprints, kanban boards, backlog and invited  #
#               collaborators (SQLite/Postgres powered)      #
#                                                            #
# Change Log  :                                              #
#  - V1.0.0 : Initial release.                               #
#============================================================#


from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict

from sqlalchemy import (
    create_engine, event, Column, String, Date, DateTime, ForeignKey,
    Integer, Boolean, CheckConstraint, UniqueConstraint
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from utils.config import setting, int_setting
from utils.errors import BackendUnavailable, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

# ---- Engine / Session ----
DATABASE_URL = setting("DATABASE_URL", "sqlite:///scrumify.db")
DB_CONNECT_TIMEOUT = int_setting("DB_CONNECT_TIMEOUT", 10)


def _connect_args(url: str) -> Dict:
    if url.startswith("sqlite"):
        return {"timeout": DB_CONNECT_TIMEOUT, "check_same_thread": False}
    if url.startswith("postgres"):
        return {"connect_timeout": DB_CONNECT_TIMEOUT}
    return {}


def make_engine(url: str, **kwargs):
    kwargs.setdefault("connect_args", _connect_args(url))
    eng = create_engine(url, pool_pre_ping=True, future=True, **kwargs)
    if url.startswith("sqlite"):
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()
    return eng


def make_sessionmaker(eng):
    return sessionmaker(autocommit=False, autoflush=False, bind=eng,
                        future=True, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
SessionLocal = make_sessionmaker(engine)
Base = declarative_base()

ROLES = ("viewer", "editor", "admin")
INVITE_STATUSES = ("pending", "accepted", "rejected")
PRIORITIES = ("low", "medium", "high")


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)


class Project(Base):
    __tablename__ = "projects"
    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    end_goal = Column(String, nullable=True)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    sprints = relationship("Sprint", back_populates="project", cascade="all, delete-orphan")
    backlog_items = relationship("BacklogItem", back_populates="project", cascade="all, delete-orphan")
    collaborators = relationship("Collaborator", back_populates="project", cascade="all, delete-orphan")


class Collaborator(Base):
    __tablename__ = "collaborators"
    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), index=True, nullable=False)
    email = Column(String, index=True, nullable=False)
    role = Column(String, default="viewer", nullable=False)
    status = Column(String, default="pending", nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    project = relationship("Project", back_populates="collaborators")
    __table_args__ = (
        CheckConstraint("role IN ('viewer','editor','admin')", name="ck_collaborator_role"),
        CheckConstraint("status IN ('pending','accepted','rejected')", name="ck_collaborator_status"),
        UniqueConstraint("project_id", "email", name="uq_collaborator_project_email"),
    )


class Sprint(Base):
    __tablename__ = "sprints"
    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    project = relationship("Project", back_populates="sprints")
    columns = relationship("BoardColumn", back_populates="sprint", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="sprint", cascade="all, delete-orphan")


class BoardColumn(Base):
    __tablename__ = "columns"
    id = Column(String(36), primary_key=True, default=_uuid)
    sprint_id = Column(String(36), ForeignKey("sprints.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    sprint = relationship("Sprint", back_populates="columns")
    tasks = relationship("Task", back_populates="column", cascade="all, delete-orphan")
    __table_args__ = (UniqueConstraint("sprint_id", "title", name="uq_sprint_column_title"),)


class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(36), primary_key=True, default=_uuid)
    column_id = Column(String(36), ForeignKey("columns.id"), index=True, nullable=False)
    sprint_id = Column(String(36), ForeignKey("sprints.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, default="medium", nullable=False)
    assignee = Column(String, nullable=True)
    story_points = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    column = relationship("BoardColumn", back_populates="tasks")
    sprint = relationship("Sprint", back_populates="tasks")
    __table_args__ = (
        CheckConstraint("priority IN ('low','medium','high')", name="ck_task_priority"),
    )


class BacklogItem(Base):
    __tablename__ = "backlog_items"
    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, default="medium", nullable=False)
    story_points = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    project = relationship("Project", back_populates="backlog_items")
    __table_args__ = (
        CheckConstraint("priority IN ('low','medium','high')", name="ck_backlog_priority"),
    )


TABLES = {
    "projects": Project,
    "sprints": Sprint,
    "columns": BoardColumn,
    "tasks": Task,
    "backlog_items": BacklogItem,
    "collaborators": Collaborator,
}


def init_db(eng=None):
    Base.metadata.create_all(eng or engine)


def _as_dict(obj) -> Dict:
    """Return a plain dict to avoid detached lazy loads."""
    return {c.key: getattr(obj, c.key) for c in obj.__table__.columns}


# ---- users (backing the auth provider) ----
def _get_or_create_user(session, email: str, name: Optional[str] = None) -> User:
    email = email.strip().lower()
    user = session.query(User).filter(User.email == email).one_or_none()
    if not user:
        user = User(email=email, name=name)
        session.add(user)
        session.commit()
    elif name and not user.name:
        user.name = name
        session.commit()
    return user


def login(email: str, name: Optional[str] = None, session_factory=None) -> Dict:
    try:
        with (session_factory or SessionLocal)() as s:
            user = _get_or_create_user(s, email, name)
            return {"id": user.id, "email": user.email, "name": user.name}
    except SQLAlchemyError as e:
        logger.exception("Sign-in for %s failed", email)
        raise BackendUnavailable("Could not reach the user directory.") from e


# ---- relational store ----
class SqlStore:
    """Uniform list/insert/update/delete over the project tables.

    Rows go in and come out as `snake_case` dicts; SQLAlchemy errors are
    translated to `BackendUnavailable` here and never leak further.
    """

    def __init__(self, session_factory=None):
        self._sessions = session_factory or SessionLocal

    @staticmethod
    def _model(table: str):
        model = TABLES.get(table)
        if model is None:
            raise ValidationFailed(f"Unknown table '{table}'")
        return model

    def list(self, table: str, **filters) -> List[Dict]:
        model = self._model(table)
        try:
            with self._sessions() as s:
                q = s.query(model)
                for key, value in filters.items():
                    col = getattr(model, key)
                    if isinstance(value, (list, tuple, set, frozenset)):
                        q = q.filter(col.in_(list(value)))
                    else:
                        q = q.filter(col == value)
                return [_as_dict(r) for r in q.order_by(model.created_at.asc()).all()]
        except SQLAlchemyError as e:
            logger.exception("list %s %s failed", table, filters)
            raise BackendUnavailable(f"Could not load {table}.") from e

    def get(self, table: str, row_id: str) -> Optional[Dict]:
        rows = self.list(table, id=row_id)
        return rows[0] if rows else None

    def insert(self, table: str, row: Dict) -> Dict:
        model = self._model(table)
        columns = {c.key for c in model.__table__.columns}
        values = {k: v for k, v in row.items() if k in columns and v is not None}
        now = utcnow()
        values.setdefault("created_at", now)
        values.setdefault("updated_at", now)
        try:
            with self._sessions() as s:
                obj = model(**values)
                s.add(obj)
                s.commit()
                return _as_dict(obj)
        except IntegrityError as e:
            logger.warning("insert into %s rejected: %s", table, e.orig)
            raise ValidationFailed(f"The {table} row conflicts with existing data.") from e
        except SQLAlchemyError as e:
            logger.exception("insert into %s failed", table)
            raise BackendUnavailable(f"Could not save to {table}.") from e

    def update(self, table: str, row_id: str, patch: Dict) -> Dict:
        model = self._model(table)
        columns = {c.key for c in model.__table__.columns} - {"id", "created_at"}
        try:
            with self._sessions() as s:
                obj = s.get(model, row_id)
                if not obj:
                    raise NotFound(f"No {table} row with id {row_id}")
                for key, value in patch.items():
                    if key in columns:
                        setattr(obj, key, value)
                obj.updated_at = patch.get("updated_at") or utcnow()
                s.commit()
                return _as_dict(obj)
        except IntegrityError as e:
            logger.warning("update of %s/%s rejected: %s", table, row_id, e.orig)
            raise ValidationFailed(f"The {table} change conflicts with existing data.") from e
        except SQLAlchemyError as e:
            logger.exception("update of %s/%s failed", table, row_id)
            raise BackendUnavailable(f"Could not update {table}.") from e

    def delete(self, table: str, row_id: str) -> None:
        model = self._model(table)
        try:
            with self._sessions() as s:
                obj = s.get(model, row_id)
                if not obj:
                    raise NotFound(f"No {table} row with id {row_id}")
                s.delete(obj)
                s.commit()
        except SQLAlchemyError as e:
            logger.exception("delete of %s/%s failed", table, row_id)
            raise BackendUnavailable(f"Could not delete from {table}.") from e
