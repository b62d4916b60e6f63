# services/invitations.py
import logging
from typing import List, NamedTuple, Optional

from models import Collaborator, Invitation, Project, ProjectSummary, ROLES
from models.base import is_valid_email, normalize_email
from services.notifications import InvitationEmail
from services.store import fetch_project_rows
from utils.errors import (
    DuplicateInvitation, InvalidTransition, NotFound, NotificationFailed,
    PermissionDenied, ScrumError, ValidationFailed,
)
from utils.permissions import Action, require

logger = logging.getLogger(__name__)

PENDING, ACCEPTED, REJECTED = "pending", "accepted", "rejected"

TRANSITIONS = {
    PENDING: {ACCEPTED, REJECTED},
    ACCEPTED: set(),
    REJECTED: set(),
}

# statuses that block a second invitation for the same (project, email)
OPEN_STATUSES = (PENDING, ACCEPTED)


def check_transition(current: str, target: str) -> None:
    if current not in TRANSITIONS:
        raise InvalidTransition(f"Unknown invitation status '{current}'.")
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(f"This invitation was already {current}; it cannot become {target}.")


def validate_role(role: Optional[str]) -> str:
    role = (role or "").strip().lower()
    if role not in ROLES:
        raise ValidationFailed(f"Role must be one of {', '.join(ROLES)}.")
    return role


class AcceptResult(NamedTuple):
    collaborator: Collaborator
    project: Project


class InvitationService:
    """Lifecycle of collaborator invitations: pending -> accepted | rejected.

    `backend` is the relational store, `store` the session's ProjectStore and
    `sender` anything with `send_invitation_email(InvitationEmail) -> SendResult`.
    Rejected rows are deleted, so a rejected email can be invited again.
    """

    def __init__(self, backend, store, sender):
        self.backend = backend
        self.store = store
        self.sender = sender

    # ---- helpers ----
    def _fetch_collaborator(self, collaborator_id: str) -> Collaborator:
        rows = self.backend.list("collaborators", id=collaborator_id)
        if not rows:
            raise NotFound("This invitation no longer exists.")
        return Collaborator.from_row(rows[0])

    @staticmethod
    def _check_invitee(collaborator: Collaborator, acting_email: str) -> None:
        if collaborator.email != normalize_email(acting_email):
            raise PermissionDenied("Only the invited user can answer this invitation.")

    def _merge_project(self, project_id: str) -> Project:
        rows = fetch_project_rows(self.backend, [project_id])
        if not rows["projects"]:
            raise NotFound("The project for this invitation no longer exists.")
        self.store.replace_project(project_id, rows)
        return self.store.get("projects", project_id)

    def _send(self, project: Project, inviter, collaborator: Collaborator):
        payload = InvitationEmail(
            to=collaborator.email,
            project_title=project.title,
            inviter_email=normalize_email(inviter.email) or "A team member",
            project_id=project.id,
            role=collaborator.role,
            collaborator_id=collaborator.id,
        )
        try:
            result = self.sender.send_invitation_email(payload)
        except Exception as e:
            logger.exception("Invitation sender raised for %s", collaborator.email)
            return False, str(e) or type(e).__name__
        return result.success, result.error

    def _compensate(self, collaborator: Collaborator, reason: str) -> None:
        logger.warning("Rolling back invitation %s for %s: %s",
                       collaborator.id, collaborator.email, reason)
        try:
            self.backend.delete("collaborators", collaborator.id)
        except NotFound:
            pass
        except ScrumError as e:
            logger.error("Could not remove invitation %s after failed email: %s",
                         collaborator.id, e.message)
            raise NotificationFailed(
                f"Email failed ({reason}) and the invitation could not be withdrawn: {e.message}"
            ) from e

    # ---- operations ----
    def invite(self, project_id: str, inviter, email: str, role: str) -> Collaborator:
        email = normalize_email(email)
        if not is_valid_email(email):
            raise ValidationFailed("Please enter a valid email address.")
        role = validate_role(role)

        project = self.store.get("projects", project_id)
        require(inviter, project, self.store.collaborators_for(project_id), Action.MANAGE_COLLABORATORS)
        if email == normalize_email(inviter.email):
            raise ValidationFailed("You cannot invite yourself.")

        existing = self.backend.list("collaborators", project_id=project_id,
                                     email=email, status=list(OPEN_STATUSES))
        if existing:
            status = existing[0]["status"]
            raise DuplicateInvitation(
                f"{email} is already a collaborator." if status == ACCEPTED
                else f"{email} already has a pending invitation."
            )

        try:
            row = self.backend.insert("collaborators", {
                "project_id": project_id, "email": email, "role": role, "status": PENDING,
            })
        except ValidationFailed as e:
            # unique (project_id, email): another session invited first
            raise DuplicateInvitation(f"{email} was invited to this project already.") from e
        collaborator = Collaborator.from_row(row)

        ok, error = self._send(project, inviter, collaborator)
        if not ok:
            self._compensate(collaborator, error or "unknown error")
            raise NotificationFailed(error or "The invitation email could not be sent.")

        self.store.put(collaborator)
        logger.info("Invited %s to project %s as %s", email, project_id, role)
        return collaborator

    def accept(self, collaborator_id: str, acting_email: str) -> AcceptResult:
        collaborator = self._fetch_collaborator(collaborator_id)
        self._check_invitee(collaborator, acting_email)

        if collaborator.status == ACCEPTED:
            logger.info("Invitation %s already accepted", collaborator_id)
        else:
            check_transition(collaborator.status, ACCEPTED)
            if not self.backend.list("projects", id=collaborator.project_id):
                raise NotFound("The project for this invitation no longer exists.")
            row = self.backend.update("collaborators", collaborator_id, {"status": ACCEPTED})
            collaborator = Collaborator.from_row(row)
            logger.info("%s accepted invitation to project %s",
                        collaborator.email, collaborator.project_id)

        project = self._merge_project(collaborator.project_id)
        return AcceptResult(collaborator, project)

    def reject(self, collaborator_id: str, acting_email: str) -> None:
        collaborator = self._fetch_collaborator(collaborator_id)
        self._check_invitee(collaborator, acting_email)
        check_transition(collaborator.status, REJECTED)
        self.backend.delete("collaborators", collaborator_id)
        self.store.discard("collaborators", collaborator_id)
        logger.info("%s rejected invitation to project %s",
                    collaborator.email, collaborator.project_id)

    def list_pending_for(self, email: str) -> List[Invitation]:
        email = normalize_email(email)
        rows = self.backend.list("collaborators", email=email, status=PENDING)
        if not rows:
            return []
        project_ids = sorted({r["project_id"] for r in rows})
        projects = {p["id"]: p for p in self.backend.list("projects", id=project_ids)}

        invitations = []
        for r in rows:
            project = projects.get(r["project_id"])
            if project is None:
                logger.debug("Skipping invitation %s: project %s is gone", r["id"], r["project_id"])
                continue
            summary = ProjectSummary.from_row(project)
            invitations.append(Invitation.from_row(dict(r, project=summary.model_dump())))
        return invitations

    # ---- collaborator management ----
    def _managed(self, collaborator_id: str, actor) -> Collaborator:
        collaborator = self.store.get("collaborators", collaborator_id)
        project = self.store.get("projects", collaborator.project_id)
        require(actor, project, self.store.collaborators_for(project.id), Action.MANAGE_COLLABORATORS)
        if collaborator.email == normalize_email(actor.email):
            raise PermissionDenied("You cannot change your own access.")
        return collaborator

    def update_role(self, collaborator_id: str, actor, role: str) -> Collaborator:
        role = validate_role(role)
        self._managed(collaborator_id, actor)
        row = self.backend.update("collaborators", collaborator_id, {"role": role})
        updated = Collaborator.from_row(row)
        self.store.put(updated)
        return updated

    def remove(self, collaborator_id: str, actor) -> Collaborator:
        collaborator = self._managed(collaborator_id, actor)
        self.backend.delete("collaborators", collaborator_id)
        self.store.discard("collaborators", collaborator_id)
        return collaborator
