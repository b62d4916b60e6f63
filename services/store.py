# services/store.py
import logging
from typing import Dict, Iterable, List, Optional

from models import (
    BacklogItem, BoardColumn, Collaborator, ColumnWithTasks, Project, Sprint, Task
)
from utils.board import column_sort_key, missing_defaults, normalize_title
from utils.errors import NotFound
from utils.permissions import role_for

logger = logging.getLogger(__name__)

# table name -> record type, in load order (parents before children)
RECORD_TYPES = {
    "projects": Project,
    "collaborators": Collaborator,
    "sprints": Sprint,
    "columns": BoardColumn,
    "tasks": Task,
    "backlog_items": BacklogItem,
}


class ProjectStore:
    """In-memory copy of everything the signed-in user can see.

    One store per session. Writes happen only after the relational store
    confirmed them, so this is a cache of confirmed state. Two reruns
    mutating it back to back are not serialised. Permission checks read the
    collaborator rows held here, so access revoked by another session only
    takes effect after `refresh`.
    """

    def __init__(self):
        self.projects: Dict[str, Project] = {}
        self.collaborators: Dict[str, Collaborator] = {}
        self.sprints: Dict[str, Sprint] = {}
        self.columns: Dict[str, BoardColumn] = {}
        self.tasks: Dict[str, Task] = {}
        self.backlog_items: Dict[str, BacklogItem] = {}

    def _table(self, name: str) -> Dict:
        return getattr(self, name)

    def clear(self) -> None:
        for name in RECORD_TYPES:
            self._table(name).clear()

    # ---- loading ----
    def load(self, rows_by_table: Dict[str, Iterable[dict]], replace: bool = True) -> None:
        """Map raw rows to records, then swap them in.

        Mapping happens first so a malformed row leaves the store untouched.
        """
        staged = {
            name: [RECORD_TYPES[name].from_row(r) for r in rows_by_table.get(name, [])]
            for name in RECORD_TYPES
        }
        known_columns = {c.id for c in staged["columns"]}
        if not replace:
            known_columns.update(self.columns)
        orphans = [t for t in staged["tasks"] if t.column_id not in known_columns]
        if orphans:
            logger.warning("Skipping %d task(s) whose column is missing", len(orphans))
            staged["tasks"] = [t for t in staged["tasks"] if t.column_id in known_columns]
        if replace:
            self.clear()
        for name in RECORD_TYPES:
            table = self._table(name)
            for record in staged[name]:
                table[record.id] = record

    # ---- generic writes ----
    def put(self, record) -> None:
        if isinstance(record, Task):
            self.put_task(record)
        elif isinstance(record, Project):
            self.projects[record.id] = record
        elif isinstance(record, Collaborator):
            self.collaborators[record.id] = record
        elif isinstance(record, Sprint):
            self.sprints[record.id] = record
        elif isinstance(record, BoardColumn):
            self.columns[record.id] = record
        elif isinstance(record, BacklogItem):
            self.backlog_items[record.id] = record
        else:
            raise TypeError(f"Cannot store {type(record).__name__}")

    def put_task(self, task: Task) -> None:
        if task.column_id not in self.columns:
            raise NotFound(f"Column {task.column_id} is not loaded; task '{task.title}' would be orphaned.")
        self.tasks[task.id] = task

    def discard(self, table: str, record_id: str) -> None:
        if table == "projects":
            self.remove_project(record_id)
        elif table == "sprints":
            self.remove_sprint(record_id)
        elif table == "columns":
            self.remove_column(record_id)
        else:
            self._table(table).pop(record_id, None)

    def remove_column(self, column_id: str) -> None:
        for tid in [t.id for t in self.tasks.values() if t.column_id == column_id]:
            del self.tasks[tid]
        self.columns.pop(column_id, None)

    def remove_sprint(self, sprint_id: str) -> None:
        for cid in [c.id for c in self.columns.values() if c.sprint_id == sprint_id]:
            self.remove_column(cid)
        for tid in [t.id for t in self.tasks.values() if t.sprint_id == sprint_id]:
            del self.tasks[tid]
        self.sprints.pop(sprint_id, None)

    def remove_project(self, project_id: str) -> None:
        for sid in [s.id for s in self.sprints.values() if s.project_id == project_id]:
            self.remove_sprint(sid)
        for bid in [b.id for b in self.backlog_items.values() if b.project_id == project_id]:
            del self.backlog_items[bid]
        for cid in [c.id for c in self.collaborators.values() if c.project_id == project_id]:
            del self.collaborators[cid]
        self.projects.pop(project_id, None)

    # ---- lookups ----
    def get(self, table: str, record_id: str):
        record = self._table(table).get(record_id)
        if record is None:
            raise NotFound(f"No {table.rstrip('s').replace('_', ' ')} with id {record_id} is loaded.")
        return record

    def project_of_sprint(self, sprint_id: str) -> Project:
        return self.get("projects", self.get("sprints", sprint_id).project_id)

    def project_of_column(self, column_id: str) -> Project:
        return self.project_of_sprint(self.get("columns", column_id).sprint_id)

    def project_of_task(self, task_id: str) -> Project:
        return self.project_of_sprint(self.get("tasks", task_id).sprint_id)

    # ---- derived views ----
    def collaborators_for(self, project_id: str) -> List[Collaborator]:
        return sorted((c for c in self.collaborators.values() if c.project_id == project_id),
                      key=lambda c: c.email)

    def sprints_for(self, project_id: str) -> List[Sprint]:
        return sorted((s for s in self.sprints.values() if s.project_id == project_id),
                      key=lambda s: (s.start_date, s.title))

    def backlog_for(self, project_id: str) -> List[BacklogItem]:
        return sorted((b for b in self.backlog_items.values() if b.project_id == project_id),
                      key=lambda b: (b.created_at is None, b.created_at))

    def columns_for(self, sprint_id: str) -> List[BoardColumn]:
        return sorted((c for c in self.columns.values() if c.sprint_id == sprint_id),
                      key=lambda c: column_sort_key(c.title))

    def tasks_in_column(self, column_id: str) -> List[Task]:
        return [t for t in self.tasks.values() if t.column_id == column_id]

    def column_by_title(self, sprint_id: str, title: str) -> Optional[BoardColumn]:
        wanted = normalize_title(title)
        return next((c for c in self.columns_for(sprint_id) if normalize_title(c.title) == wanted), None)

    def columns_with_tasks(self, sprint_id: str) -> List[ColumnWithTasks]:
        """Join columns and tasks of one sprint; recomputed on every call."""
        by_column: Dict[str, List[Task]] = {}
        for t in self.tasks.values():
            by_column.setdefault(t.column_id, []).append(t)
        return [
            ColumnWithTasks(
                id=c.id, title=c.title,
                tasks=sorted(by_column.get(c.id, []), key=lambda t: (t.created_at is None, t.created_at)),
            )
            for c in self.columns_for(sprint_id)
        ]

    def missing_default_columns(self, sprint_id: str) -> List[str]:
        return missing_defaults(c.title for c in self.columns_for(sprint_id))

    def visible_projects(self, actor) -> List[Project]:
        if actor is None:
            return []
        visible = [p for p in self.projects.values()
                   if role_for(actor, p, self.collaborators_for(p.id)) is not None]
        return sorted(visible, key=lambda p: (p.created_at is None, p.created_at), reverse=True)

    def replace_project(self, project_id: str, rows_by_table: Dict[str, Iterable[dict]]) -> None:
        """Swap one project's local data for freshly fetched rows."""
        fresh = ProjectStore()
        fresh.load(rows_by_table)
        self.remove_project(project_id)
        for name in RECORD_TYPES:
            self._table(name).update(fresh._table(name))


def fetch_project_rows(backend, project_ids: Iterable[str]) -> Dict[str, List[dict]]:
    """Read every row belonging to the given projects from the relational store."""
    ids = sorted(set(project_ids))
    if not ids:
        return {name: [] for name in RECORD_TYPES}
    sprints = backend.list("sprints", project_id=ids)
    sprint_ids = [s["id"] for s in sprints]
    return {
        "projects": backend.list("projects", id=ids),
        "collaborators": backend.list("collaborators", project_id=ids),
        "sprints": sprints,
        "columns": backend.list("columns", sprint_id=sprint_ids) if sprint_ids else [],
        "tasks": backend.list("tasks", sprint_id=sprint_ids) if sprint_ids else [],
        "backlog_items": backend.list("backlog_items", project_id=ids),
    }
