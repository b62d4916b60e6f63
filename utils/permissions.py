# utils/permissions.py
from enum import Enum
from typing import Iterable, Optional

from models.base import normalize_email
from utils.errors import PermissionDenied


class Action(str, Enum):
    READ = "read"
    EDIT_CONTENT = "edit_content"  # sprints, columns, tasks, backlog
    MANAGE_COLLABORATORS = "manage_collaborators"
    DELETE_PROJECT = "delete_project"


OWNER = "owner"

# Only the owner may delete a project, so no collaborator role grants it.
ROLE_ACTIONS = {
    "viewer": frozenset({Action.READ}),
    "editor": frozenset({Action.READ, Action.EDIT_CONTENT}),
    "admin": frozenset({Action.READ, Action.EDIT_CONTENT, Action.MANAGE_COLLABORATORS}),
}


def accepted_membership(actor, project, collaborators: Iterable):
    email = normalize_email(actor.email)
    for c in collaborators:
        if c.project_id == project.id and c.email == email and c.status == "accepted":
            return c
    return None


def role_for(actor, project, collaborators: Iterable) -> Optional[str]:
    """'owner', the accepted collaborator role, or None when the actor has no access."""
    if actor is None or project is None:
        return None
    if actor.id == project.owner_id:
        return OWNER
    membership = accepted_membership(actor, project, collaborators)
    return membership.role if membership else None


def can_mutate(actor, project, collaborators: Iterable, action: Action) -> bool:
    role = role_for(actor, project, collaborators)
    if role == OWNER:
        return True
    if role is None:
        return False
    return Action(action) in ROLE_ACTIONS.get(role, frozenset())


def require(actor, project, collaborators: Iterable, action: Action) -> None:
    if not can_mutate(actor, project, collaborators, action):
        what = Action(action).value.replace("_", " ")
        title = getattr(project, "title", "this project")
        raise PermissionDenied(f"You are not allowed to {what} on {title}.")
