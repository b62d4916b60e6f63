# services/mutations.py
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from models import BacklogItem, BoardColumn, Project, Sprint, Task
from models.base import check_priority, check_story_points, normalize_email, parse_date
from services.store import fetch_project_rows
from utils.board import BLOCKER_MESSAGES, TODO, column_delete_blocker, normalize_title
from utils.errors import NotFound, ScrumError, ValidationFailed
from utils.permissions import Action, can_mutate, require

logger = logging.getLogger(__name__)

TASK_FIELDS = ("title", "description", "priority", "assignee", "story_points")
BACKLOG_FIELDS = ("title", "description", "priority", "story_points")
SPRINT_FIELDS = ("title", "description", "start_date", "end_date")
PROJECT_FIELDS = ("title", "description", "end_goal")


@dataclass
class Outcome:
    ok: bool
    value: Any = None
    error: Optional[ScrumError] = None
    blocked: Optional[str] = None  # policy reason, e.g. "has_tasks"

    def __bool__(self):
        return self.ok


def _clean(data: Dict, allowed, require_title: bool) -> Dict:
    """Keep known fields and validate them before anything leaves the process."""
    out = {k: v for k, v in data.items() if k in allowed}
    if "title" in out or require_title:
        title = (out.get("title") or "").strip()
        if not title:
            raise ValidationFailed("Title is required.")
        out["title"] = title
    try:
        if "priority" in out:
            out["priority"] = check_priority(out["priority"])
        if "story_points" in out:
            out["story_points"] = check_story_points(out["story_points"])
        for key in ("start_date", "end_date"):
            if key in out:
                out[key] = parse_date(out[key])
    except (TypeError, ValueError) as e:
        raise ValidationFailed(str(e)) from e
    if "assignee" in out:
        out["assignee"] = (out["assignee"] or "").strip()
    return out


def _check_sprint_dates(start, end) -> None:
    if start is None or end is None:
        raise ValidationFailed("Sprints need a start and an end date.")
    if end < start:
        raise ValidationFailed("End date must be after start date.")


class MutationFacade:
    """Entry point for every UI mutation.

    Each call runs permission check -> relational store -> local store patch
    -> notice. Errors become an error notice plus a failed Outcome and the
    local store stays as it was. Nothing is retried here.
    """

    def __init__(self, actor, backend, store, notices, invitations):
        self.actor = actor
        self.backend = backend
        self.store = store
        self.notices = notices
        self.invitations = invitations

    def _run(self, title: str, fn: Callable[[], Any], message="", quiet: bool = False) -> Outcome:
        try:
            value = fn()
        except ScrumError as e:
            logger.info("mutation failed (%s): %s", title, e.message)
            self.notices.error(e.title, e.message)
            return Outcome(False, error=e)
        if not quiet:
            self.notices.success(title, message(value) if callable(message) else message)
        return Outcome(True, value)

    def _require(self, project: Project, action: Action) -> None:
        require(self.actor, project, self.store.collaborators_for(project.id), action)

    def can(self, project_id: str, action: Action) -> bool:
        project = self.store.projects.get(project_id)
        if project is None:
            return False
        return can_mutate(self.actor, project, self.store.collaborators_for(project_id), action)

    # ---- loading ----
    def refresh(self) -> Outcome:
        """Reload every project the actor owns or has accepted."""
        def load():
            owned = self.backend.list("projects", owner_id=self.actor.id)
            joined = self.backend.list("collaborators", email=normalize_email(self.actor.email),
                                       status="accepted")
            ids = {p["id"] for p in owned} | {c["project_id"] for c in joined}
            self.store.load(fetch_project_rows(self.backend, ids))
            return self.store.visible_projects(self.actor)
        return self._run("Projects loaded", load, quiet=True)

    # ---- projects ----
    def create_project(self, title: str, description: str = "", end_goal: str = "") -> Outcome:
        def create():
            fields = _clean({"title": title, "description": description, "end_goal": end_goal},
                            PROJECT_FIELDS, require_title=True)
            row = self.backend.insert("projects", dict(fields, owner_id=self.actor.id))
            project = Project.from_row(row)
            self.store.put(project)
            return project
        return self._run("Project created", create,
                         lambda p: f"{p.title} has been created successfully.")

    def update_project(self, project_id: str, **data) -> Outcome:
        def update():
            self._require(self.store.get("projects", project_id), Action.EDIT_CONTENT)
            row = self.backend.update("projects", project_id,
                                      _clean(data, PROJECT_FIELDS, require_title=False))
            project = Project.from_row(row)
            self.store.put(project)
            return project
        return self._run("Project updated", update,
                         lambda p: f"{p.title} has been updated successfully.")

    def delete_project(self, project_id: str) -> Outcome:
        def delete():
            project = self.store.get("projects", project_id)
            self._require(project, Action.DELETE_PROJECT)
            self.backend.delete("projects", project_id)
            self.store.remove_project(project_id)
            return project
        return self._run("Project deleted", delete,
                         lambda p: f"{p.title} has been deleted successfully.")

    # ---- sprints ----
    def create_sprint(self, project_id: str, title: str, start_date, end_date,
                      description: str = "") -> Outcome:
        def create():
            self._require(self.store.get("projects", project_id), Action.EDIT_CONTENT)
            fields = _clean({"title": title, "description": description,
                             "start_date": start_date, "end_date": end_date},
                            SPRINT_FIELDS, require_title=True)
            _check_sprint_dates(fields["start_date"], fields["end_date"])
            row = self.backend.insert("sprints", dict(fields, project_id=project_id,
                                                      is_completed=False))
            sprint = Sprint.from_row(row)
            self.store.put(sprint)
            return sprint
        return self._run("Sprint created", create,
                         lambda s: f"{s.title} has been created successfully.")

    def update_sprint(self, sprint_id: str, **data) -> Outcome:
        def update():
            sprint = self.store.get("sprints", sprint_id)
            self._require(self.store.project_of_sprint(sprint_id), Action.EDIT_CONTENT)
            patch = _clean(data, SPRINT_FIELDS, require_title=False)
            _check_sprint_dates(patch.get("start_date", sprint.start_date),
                                patch.get("end_date", sprint.end_date))
            updated = Sprint.from_row(self.backend.update("sprints", sprint_id, patch))
            self.store.put(updated)
            return updated
        return self._run("Sprint updated", update,
                         lambda s: f"{s.title} has been updated successfully.")

    def complete_sprint(self, sprint_id: str) -> Outcome:
        def complete():
            self._require(self.store.project_of_sprint(sprint_id), Action.EDIT_CONTENT)
            updated = Sprint.from_row(self.backend.update("sprints", sprint_id, {"is_completed": True}))
            self.store.put(updated)
            return updated
        return self._run("Sprint completed", complete,
                         lambda s: f"{s.title} has been marked as completed.")

    # ---- columns ----
    def _ensure_default_columns(self, sprint_id: str):
        created = []
        for title in self.store.missing_default_columns(sprint_id):
            row = self.backend.insert("columns", {"sprint_id": sprint_id, "title": title})
            column = BoardColumn.from_row(row)
            self.store.put(column)
            created.append(column)
        if created:
            logger.info("Created default columns %s for sprint %s",
                        [c.title for c in created], sprint_id)
        return created

    def ensure_default_columns(self, sprint_id: str) -> Outcome:
        """Create TO DO / IN PROGRESS / DONE where missing; no-op for read-only users."""
        def ensure():
            project = self.store.project_of_sprint(sprint_id)
            if not self.can(project.id, Action.EDIT_CONTENT):
                return []
            return self._ensure_default_columns(sprint_id)
        return self._run("Default columns created", ensure, quiet=True)

    def create_column(self, sprint_id: str, title: str) -> Outcome:
        def create():
            self._require(self.store.project_of_sprint(sprint_id), Action.EDIT_CONTENT)
            name = normalize_title(title)
            if not name:
                raise ValidationFailed("Column title is required.")
            self._ensure_default_columns(sprint_id)
            if self.store.column_by_title(sprint_id, name):
                raise ValidationFailed(f'A column named "{name}" already exists.')
            column = BoardColumn.from_row(
                self.backend.insert("columns", {"sprint_id": sprint_id, "title": name}))
            self.store.put(column)
            return column
        return self._run("Column created", create,
                         lambda c: f"{c.title} column has been created successfully.")

    def delete_column(self, column_id: str) -> Outcome:
        try:
            column = self.store.get("columns", column_id)
            self._require(self.store.project_of_column(column_id), Action.EDIT_CONTENT)
        except ScrumError as e:
            self.notices.error(e.title, e.message)
            return Outcome(False, error=e)

        blocker = column_delete_blocker(column.title, len(self.store.tasks_in_column(column_id)))
        if blocker:
            title = "Cannot delete default column" if blocker == "reserved" else "Cannot delete column"
            self.notices.error(title, BLOCKER_MESSAGES[blocker])
            return Outcome(False, value=column, blocked=blocker)

        def delete():
            self.backend.delete("columns", column_id)
            self.store.remove_column(column_id)
            return column
        return self._run("Column deleted", delete,
                         lambda c: f"{c.title} column has been deleted successfully.")

    # ---- tasks ----
    def _column_in_sprint(self, column_id: str, sprint_id: str) -> BoardColumn:
        column = self.store.get("columns", column_id)
        if column.sprint_id != sprint_id:
            raise ValidationFailed("That column belongs to another sprint.")
        return column

    def create_task(self, sprint_id: str, column_id: Optional[str] = None, **data) -> Outcome:
        def create():
            self._require(self.store.project_of_sprint(sprint_id), Action.EDIT_CONTENT)
            fields = _clean(data, TASK_FIELDS, require_title=True)
            column = self._column_in_sprint(column_id, sprint_id) if column_id else None
            self._ensure_default_columns(sprint_id)
            column = column or self.store.column_by_title(sprint_id, TODO)
            row = self.backend.insert("tasks", dict(fields, sprint_id=sprint_id, column_id=column.id))
            task = Task.from_row(row)
            self.store.put_task(task)
            return task
        return self._run("Task created", create,
                         lambda t: f"{t.title} has been created successfully.")

    def update_task(self, task_id: str, **data) -> Outcome:
        def update():
            self._require(self.store.project_of_task(task_id), Action.EDIT_CONTENT)
            patch = _clean(data, TASK_FIELDS, require_title=False)
            task = Task.from_row(self.backend.update("tasks", task_id, patch))
            self.store.put_task(task)
            return task
        return self._run("Task updated", update,
                         lambda t: f"{t.title} has been updated successfully.")

    def delete_task(self, task_id: str) -> Outcome:
        def delete():
            task = self.store.get("tasks", task_id)
            self._require(self.store.project_of_task(task_id), Action.EDIT_CONTENT)
            self.backend.delete("tasks", task_id)
            self.store.discard("tasks", task_id)
            return task
        return self._run("Task deleted", delete,
                         lambda t: f"{t.title} has been deleted successfully.")

    def move_task(self, task_id: str, destination_column_id: str) -> Outcome:
        def move():
            task = self.store.get("tasks", task_id)
            self._require(self.store.project_of_task(task_id), Action.EDIT_CONTENT)
            column = self._column_in_sprint(destination_column_id, task.sprint_id)
            if task.column_id == column.id:
                return task
            moved = Task.from_row(self.backend.update("tasks", task_id, {"column_id": column.id}))
            self.store.put_task(moved)
            return moved
        return self._run("Task moved", move,
                         lambda t: f"{t.title} is now in {self.store.columns[t.column_id].title}.")

    # ---- backlog ----
    def create_backlog_item(self, project_id: str, **data) -> Outcome:
        def create():
            self._require(self.store.get("projects", project_id), Action.EDIT_CONTENT)
            fields = _clean(data, BACKLOG_FIELDS, require_title=True)
            item = BacklogItem.from_row(
                self.backend.insert("backlog_items", dict(fields, project_id=project_id)))
            self.store.put(item)
            return item
        return self._run("Backlog item created", create,
                         lambda b: f"{b.title} has been added to the backlog.")

    def update_backlog_item(self, item_id: str, **data) -> Outcome:
        def update():
            item = self.store.get("backlog_items", item_id)
            self._require(self.store.get("projects", item.project_id), Action.EDIT_CONTENT)
            patch = _clean(data, BACKLOG_FIELDS, require_title=False)
            updated = BacklogItem.from_row(self.backend.update("backlog_items", item_id, patch))
            self.store.put(updated)
            return updated
        return self._run("Backlog item updated", update,
                         lambda b: f"{b.title} has been updated successfully.")

    def delete_backlog_item(self, item_id: str) -> Outcome:
        def delete():
            item = self.store.get("backlog_items", item_id)
            self._require(self.store.get("projects", item.project_id), Action.EDIT_CONTENT)
            self.backend.delete("backlog_items", item_id)
            self.store.discard("backlog_items", item_id)
            return item
        return self._run("Backlog item deleted", delete,
                         lambda b: f"{b.title} has been deleted from the backlog.")

    def _compensate_task(self, task_id: str, cause: ScrumError) -> None:
        """Drop the task created for a backlog move whose item delete failed."""
        logger.warning("Rolling back task %s after failed backlog delete: %s", task_id, cause.message)
        try:
            self.backend.delete("tasks", task_id)
        except NotFound:
            pass
        except ScrumError as e:
            logger.warning("Could not roll back task %s; the work item now exists twice: %s",
                           task_id, e.message)

    def move_backlog_item_to_sprint(self, item_id: str, sprint_id: str) -> Outcome:
        """Delete the backlog item and recreate it as a task in the sprint's TO DO column."""
        def move():
            item = self.store.get("backlog_items", item_id)
            sprint = self.store.get("sprints", sprint_id)
            if sprint.project_id != item.project_id:
                raise ValidationFailed("The sprint belongs to another project.")
            self._require(self.store.get("projects", item.project_id), Action.EDIT_CONTENT)
            self._ensure_default_columns(sprint_id)
            todo = self.store.column_by_title(sprint_id, TODO)

            row = self.backend.insert("tasks", {
                "title": item.title, "description": item.description,
                "priority": item.priority, "story_points": item.story_points,
                "assignee": "", "sprint_id": sprint_id, "column_id": todo.id,
            })
            try:
                self.backend.delete("backlog_items", item_id)
            except NotFound:
                pass
            except ScrumError as e:
                self._compensate_task(row["id"], e)
                raise
            task = Task.from_row(row)
            self.store.put_task(task)
            self.store.discard("backlog_items", item_id)
            return task
        return self._run("Item moved to sprint", move,
                         lambda t: f"{t.title} has been moved to the selected sprint.")

    # ---- collaborators ----
    def invite(self, project_id: str, email: str, role: str) -> Outcome:
        return self._run(
            "Collaborator invited",
            lambda: self.invitations.invite(project_id, self.actor, email, role),
            lambda c: f"Invitation sent to {c.email}.",
        )

    def accept_invitation(self, collaborator_id: str) -> Outcome:
        return self._run(
            "Invitation accepted",
            lambda: self.invitations.accept(collaborator_id, self.actor.email),
            lambda r: f"You now have access to {r.project.title}.",
        )

    def reject_invitation(self, collaborator_id: str) -> Outcome:
        return self._run(
            "Invitation declined",
            lambda: self.invitations.reject(collaborator_id, self.actor.email),
            "You have declined to join the project.",
        )

    def pending_invitations(self) -> Outcome:
        return self._run("Invitations loaded",
                         lambda: self.invitations.list_pending_for(self.actor.email), quiet=True)

    def update_collaborator_role(self, collaborator_id: str, role: str) -> Outcome:
        return self._run(
            "Collaborator updated",
            lambda: self.invitations.update_role(collaborator_id, self.actor, role),
            lambda c: f"{c.email} is now {c.role}.",
        )

    def remove_collaborator(self, collaborator_id: str) -> Outcome:
        return self._run(
            "Collaborator removed",
            lambda: self.invitations.remove(collaborator_id, self.actor),
            lambda c: f"{c.email} has been removed from the project.",
        )
