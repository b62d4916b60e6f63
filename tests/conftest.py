# tests/conftest.py
from datetime import date

import pytest
from sqlalchemy.pool import StaticPool

import db
from models.user import Identity
from services.session import build_app_state
from helpers import FakeSender, SpyBackend


@pytest.fixture
def sessions():
    eng = db.make_engine("sqlite://", poolclass=StaticPool)
    db.init_db(eng)
    return db.make_sessionmaker(eng)


@pytest.fixture
def backend(sessions):
    return SpyBackend(db.SqlStore(sessions))


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def make_user(sessions, backend, sender):
    def _make(email, via=None, mail=None):
        identity = Identity(**db.login(email, session_factory=sessions))
        return build_app_state(identity, via or backend, mail or sender)
    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice@x.com")


@pytest.fixture
def bob(make_user):
    return make_user("bob@x.com")


@pytest.fixture
def project(alice):
    return alice.facade.create_project("Website Relaunch", "New marketing site", "Launch by Q3").value


@pytest.fixture
def sprint(alice, project):
    return alice.facade.create_sprint(project.id, "Sprint 1", date(2025, 1, 6), date(2025, 1, 20)).value
