# services/notifications.py
import html
import logging
import smtplib
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from typing import List, NamedTuple, Optional
from urllib.parse import urlencode

from utils.config import bool_setting, int_setting, setting

logger = logging.getLogger(__name__)


# ---- user-facing notices (toast equivalents) ----
@dataclass
class Notice:
    level: str  # "success" | "error" | "info"
    title: str
    message: str = ""
    at: datetime = field(default_factory=datetime.now)


class NoticeLog:
    """Collects notices during one script run; the UI drains and shows them."""

    def __init__(self):
        self._items: List[Notice] = []

    def success(self, title: str, message: str = "") -> None:
        self._items.append(Notice("success", title, message))

    def error(self, title: str, message: str = "") -> None:
        logger.info("error notice: %s - %s", title, message)
        self._items.append(Notice("error", title, message))

    def info(self, title: str, message: str = "") -> None:
        self._items.append(Notice("info", title, message))

    @property
    def items(self) -> List[Notice]:
        return list(self._items)

    def drain(self) -> List[Notice]:
        items, self._items = self._items, []
        return items


# ---- invitation email ----
@dataclass
class InvitationEmail:
    to: str
    project_title: str
    inviter_email: str
    project_id: str
    role: str
    collaborator_id: str


class SendResult(NamedTuple):
    success: bool
    error: Optional[str] = None


def accept_url(app_url: str, collaborator_id: str, project_id: str) -> str:
    query = urlencode({"id": collaborator_id, "projectId": project_id})
    return f"{app_url.rstrip('/')}/accept-invitation?{query}"


def render_invitation(invite: InvitationEmail, app_url: str):
    subject = f"Invitation to collaborate on {invite.project_title}"
    link = accept_url(app_url, invite.collaborator_id, invite.project_id)
    text = (
        f"{invite.inviter_email} has invited you to collaborate on the project "
        f"\"{invite.project_title}\" as a {invite.role}.\n\n"
        f"Accept the invitation: {link}\n\n"
        "If you didn't expect this invitation, you can safely ignore this email."
    )
    body = f"""
        <h1>You've been invited to collaborate</h1>
        <p>{html.escape(invite.inviter_email)} has invited you to collaborate on the project
        "{html.escape(invite.project_title)}" as a {html.escape(invite.role)}.</p>
        <p>Click the link below to accept the invitation:</p>
        <p><a href="{html.escape(link)}">Accept Invitation</a></p>
        <p>If you didn't expect this invitation, you can safely ignore this email.</p>
    """
    return subject, text, body


class SmtpInvitationSender:
    def __init__(self, host: str, port: int = 587, user: str = "", password: str = "",
                 from_addr: str = "scrumify@example.com", use_tls: bool = True,
                 timeout: int = 10, app_url: str = "http://localhost:8501"):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_addr = from_addr
        self.use_tls = use_tls
        self.timeout = timeout
        self.app_url = app_url

    @classmethod
    def from_settings(cls) -> "SmtpInvitationSender":
        return cls(
            host=str(setting("SMTP_HOST", "")).strip(),
            port=int_setting("SMTP_PORT", 587),
            user=str(setting("SMTP_USER", "")).strip(),
            password=str(setting("SMTP_PASSWORD", "")),
            from_addr=str(setting("SMTP_FROM", "scrumify@example.com")).strip(),
            use_tls=bool_setting("SMTP_TLS", True),
            timeout=int_setting("SMTP_TIMEOUT", 10),
            app_url=str(setting("APP_URL", "http://localhost:8501")),
        )

    def is_configured(self) -> bool:
        return bool(self.host and self.from_addr)

    def send_invitation_email(self, invite: InvitationEmail) -> SendResult:
        if not (invite.to and invite.project_title and invite.inviter_email):
            return SendResult(False, "Missing required fields")
        if not self.is_configured():
            return SendResult(False, "SMTP not configured")

        subject, text, body = render_invitation(invite, self.app_url)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_addr
        msg["To"] = invite.to
        msg.set_content(text)
        msg.add_alternative(body, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Invitation email to %s failed: %s", invite.to, exc)
            return SendResult(False, str(exc)[:400])
        logger.info("Invitation email sent to %s for project %s", invite.to, invite.project_id)
        return SendResult(True)
