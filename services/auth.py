# services/auth.py
import logging
from typing import Callable, List, Optional

import db
from models.base import is_valid_email, normalize_email
from models.user import Identity
from utils.errors import ValidationFailed

logger = logging.getLogger(__name__)


class SessionAuth:
    """Email sign-in backed by the `users` table.

    Listeners registered with `on_identity_change` run after every sign-in
    and sign-out; the app uses this to build and tear down the session state.
    """

    def __init__(self, login_fn=None):
        self._login = login_fn or db.login
        self._identity: Optional[Identity] = None
        self._listeners: List[Callable[[Optional[Identity]], None]] = []

    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def on_identity_change(self, callback: Callable[[Optional[Identity]], None]):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def _emit(self) -> None:
        for cb in list(self._listeners):
            cb(self._identity)

    def sign_in(self, email: str, name: Optional[str] = None) -> Identity:
        if not is_valid_email(email):
            raise ValidationFailed("Please enter a valid email address.")
        row = self._login(normalize_email(email), (name or "").strip() or None)
        self._identity = Identity(**row)
        logger.info("Signed in %s", self._identity.email)
        self._emit()
        return self._identity

    def sign_out(self) -> None:
        if self._identity is not None:
            logger.info("Signed out %s", self._identity.email)
        self._identity = None
        self._emit()
