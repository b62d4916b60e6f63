# tests/test_permissions.py
import pytest

from models import Collaborator, Project
from models.user import Identity
from utils.errors import PermissionDenied
from utils.permissions import Action, can_mutate, require, role_for

OWNER = Identity(id="u-alice", email="alice@x.com")
BOB = Identity(id="u-bob", email="bob@x.com")
PROJECT = Project(id="p1", title="Website Relaunch", owner_id="u-alice")


def collab(role, status="accepted", email="bob@x.com", project_id="p1"):
    return Collaborator(id=f"c-{role}-{status}", project_id=project_id, email=email,
                        role=role, status=status)


def test_owner_may_do_everything():
    for action in Action:
        assert can_mutate(OWNER, PROJECT, [], action)


@pytest.mark.parametrize("role,allowed", [
    ("viewer", {Action.READ}),
    ("editor", {Action.READ, Action.EDIT_CONTENT}),
    ("admin", {Action.READ, Action.EDIT_CONTENT, Action.MANAGE_COLLABORATORS}),
])
def test_accepted_roles(role, allowed):
    for action in Action:
        assert can_mutate(BOB, PROJECT, [collab(role)], action) == (action in allowed)


@pytest.mark.parametrize("role", ["viewer", "editor", "admin"])
def test_pending_collaborator_has_no_rights(role):
    for action in Action:
        assert not can_mutate(BOB, PROJECT, [collab(role, status="pending")], action)


def test_stranger_has_no_rights():
    assert role_for(BOB, PROJECT, []) is None
    assert not can_mutate(BOB, PROJECT, [collab("admin", email="carol@x.com")], Action.READ)


def test_membership_on_other_project_does_not_count():
    assert not can_mutate(BOB, PROJECT, [collab("admin", project_id="p2")], Action.READ)


def test_delete_project_is_owner_only():
    everyone = [collab(r) for r in ("viewer", "editor", "admin")]
    assert can_mutate(OWNER, PROJECT, everyone, Action.DELETE_PROJECT)
    for c in everyone:
        assert not can_mutate(BOB, PROJECT, [c], Action.DELETE_PROJECT)


def test_email_match_ignores_case():
    shouty = Identity(id="u-bob", email="  BOB@X.com ")
    assert role_for(shouty, PROJECT, [collab("editor")]) == "editor"


def test_require_raises_permission_denied():
    with pytest.raises(PermissionDenied):
        require(BOB, PROJECT, [collab("viewer")], Action.EDIT_CONTENT)
    require(OWNER, PROJECT, [], Action.DELETE_PROJECT)
