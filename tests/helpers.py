# tests/helpers.py
from services.notifications import SendResult


class FakeSender:
    def __init__(self, error=None, raises=None):
        self.sent = []
        self.error = error
        self.raises = raises

    def send_invitation_email(self, invite):
        self.sent.append(invite)
        if self.raises:
            raise self.raises
        if self.error:
            return SendResult(False, self.error)
        return SendResult(True)


class SpyBackend:
    """Records every relational-store call before passing it through."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def __getattr__(self, name):
        attr = getattr(self.inner, name)

        def wrapper(*args, **kwargs):
            self.calls.append((name,) + args[:1])
            return attr(*args, **kwargs)
        return wrapper

    def writes(self):
        return [c for c in self.calls if c[0] in ("insert", "update", "delete")]


class FailingBackend(SpyBackend):
    """Passes reads through and fails the named write operations."""

    def __init__(self, inner, fail_on=("insert", "update", "delete"), error=None):
        super().__init__(inner)
        self.fail_on = set(fail_on)
        self.error = error

    def __getattr__(self, name):
        if name in self.fail_on:
            def fail(*args, **kwargs):
                self.calls.append((name,) + args[:1])
                raise self.error
            return fail
        return super().__getattr__(name)


def join(owner, member, project, role):
    """owner invites member with role, member accepts."""
    invite = owner.facade.invite(project.id, member.identity.email, role)
    assert invite.ok, invite.error
    accepted = member.facade.accept_invitation(invite.value.id)
    assert accepted.ok, accepted.error
    return accepted.value.collaborator
