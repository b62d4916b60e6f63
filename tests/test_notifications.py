# tests/test_notifications.py
import smtplib

import pytest

from services.notifications import (
    InvitationEmail, NoticeLog, SmtpInvitationSender, accept_url, render_invitation,
)


@pytest.fixture
def invite():
    return InvitationEmail(to="bob@x.com", project_title="Website <Relaunch>",
                           inviter_email="alice@x.com", project_id="p1",
                           role="editor", collaborator_id="c1")


def test_accept_url_carries_both_ids():
    assert accept_url("https://app.example.com/", "c1", "p1") == \
        "https://app.example.com/accept-invitation?id=c1&projectId=p1"


def test_render_invitation_escapes_html(invite):
    subject, text, body = render_invitation(invite, "http://localhost:8501")
    assert subject == "Invitation to collaborate on Website <Relaunch>"
    assert "as a editor" in text
    assert "Website &lt;Relaunch&gt;" in body
    assert "accept-invitation?id=c1&amp;projectId=p1" in body


def test_missing_fields_are_reported(invite):
    sender = SmtpInvitationSender(host="smtp.example.com")
    invite.to = ""
    assert sender.send_invitation_email(invite) == (False, "Missing required fields")


def test_unconfigured_sender(invite):
    result = SmtpInvitationSender(host="").send_invitation_email(invite)
    assert not result.success
    assert result.error == "SMTP not configured"


class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port, self.timeout = host, port, timeout
        self.tls = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.tls = True

    def login(self, user, password):
        pass

    def send_message(self, msg):
        FakeSMTP.sent.append((self, msg))


def test_sends_multipart_message(monkeypatch, invite):
    FakeSMTP.sent = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    sender = SmtpInvitationSender(host="smtp.example.com", port=2525, timeout=3,
                                  from_addr="team@example.com")
    assert sender.send_invitation_email(invite).success

    smtp, msg = FakeSMTP.sent[0]
    assert (smtp.port, smtp.timeout, smtp.tls) == (2525, 3, True)
    assert msg["To"] == "bob@x.com" and msg["From"] == "team@example.com"
    assert msg.is_multipart()


def test_smtp_failure_becomes_error_result(monkeypatch, invite):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")
    monkeypatch.setattr(smtplib, "SMTP", refuse)
    result = SmtpInvitationSender(host="smtp.example.com").send_invitation_email(invite)
    assert result == (False, "connection refused")


def test_from_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "mail.internal")
    monkeypatch.setenv("SMTP_PORT", "25")
    monkeypatch.setenv("SMTP_TLS", "false")
    sender = SmtpInvitationSender.from_settings()
    assert (sender.host, sender.port, sender.use_tls) == ("mail.internal", 25, False)
    assert sender.is_configured()


def test_notice_log_drains():
    log = NoticeLog()
    log.success("Saved")
    log.error("Nope", "broken")
    assert [n.level for n in log.items] == ["success", "error"]
    assert len(log.drain()) == 2
    assert log.items == []
