# tests/test_auth.py
import pytest

import db
from services.auth import SessionAuth
from utils.errors import ValidationFailed


@pytest.fixture
def auth(sessions):
    return SessionAuth(lambda email, name: db.login(email, name, session_factory=sessions))


def test_sign_in_rejects_bad_email(auth):
    with pytest.raises(ValidationFailed):
        auth.sign_in("not-an-email")
    assert auth.current_identity() is None


def test_listeners_follow_sign_in_and_out(auth):
    seen = []
    unsubscribe = auth.on_identity_change(seen.append)

    me = auth.sign_in("  Dana@X.com", "Dana")
    assert me.email == "dana@x.com" and me.name == "Dana"
    auth.sign_out()
    assert seen == [me, None]
    assert auth.current_identity() is None

    unsubscribe()
    auth.sign_in("dana@x.com")
    assert len(seen) == 2


def test_same_email_same_identity(auth):
    first = auth.sign_in("erin@x.com")
    auth.sign_out()
    assert auth.sign_in("ERIN@x.com").id == first.id
