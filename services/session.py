# services/session.py
import logging
from dataclasses import dataclass
from typing import Optional

from models.user import Identity
from services.invitations import InvitationService
from services.mutations import MutationFacade
from services.notifications import NoticeLog
from services.store import ProjectStore

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Everything one signed-in session owns. Built at sign-in, dropped at sign-out."""

    identity: Identity
    store: ProjectStore
    notices: NoticeLog
    invitations: InvitationService
    facade: MutationFacade
    selected_project_id: Optional[str] = None
    selected_sprint_id: Optional[str] = None

    def close(self) -> None:
        self.store.clear()
        self.notices.drain()


def build_app_state(identity: Identity, backend, sender, load: bool = True) -> AppState:
    store = ProjectStore()
    notices = NoticeLog()
    invitations = InvitationService(backend, store, sender)
    facade = MutationFacade(identity, backend, store, notices, invitations)
    state = AppState(identity, store, notices, invitations, facade)
    if load:
        facade.refresh()
    logger.info("Session state ready for %s", identity.email)
    return state
