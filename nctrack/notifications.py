"""Assignment and status-change email notifications.

Sends run as FastAPI background tasks after the response has been written.
Every failure is logged and dropped here; nothing propagates to the request.
"""

import html
import logging
import re
import smtplib
from email.message import EmailMessage

from fastapi import Request

from nctrack.config import Settings
from nctrack.errors import NotificationError
from nctrack.schemas.nonconformance import NCRead

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

SEVERITY_COLORS = {
    "Low": "#6b7280",
    "Medium": "#eab308",
    "High": "#f97316",
    "Critical": "#ef4444",
}


def is_valid_email(address: str | None) -> bool:
    return bool(address) and EMAIL_RE.match(address) is not None


class Notifier:
    """Composes NC emails and hands them to SMTP."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _link(self, nc: NCRead) -> str:
        return f"{self.settings.app_base_url.rstrip('/')}/ncs/{nc.id}"

    def _wrap(self, heading: str, greeting_name: str, intro: str, details: str, nc: NCRead) -> str:
        return f"""
<h2>{heading}</h2>
<p>Hello {html.escape(greeting_name)},</p>
<p>{intro}</p>
<div style="background-color: #f3f4f6; padding: 15px; border-radius: 5px; margin: 20px 0;">
  <h3 style="margin-top: 0;">NC #{nc.id}: {html.escape(nc.title)}</h3>
{details}
</div>
<p><a href="{self._link(nc)}">View NC Details</a></p>
<hr>
<p style="color: #6b7280; font-size: 12px;">This is an automated notification from the NC Tracker system.</p>
"""

    def _message(self, to: str, subject: str, body_html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.email_from
        msg["To"] = to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(body_html, subtype="html")
        return msg

    def build_assignment_message(self, nc: NCRead, assigned_to: str, email: str) -> EmailMessage:
        color = SEVERITY_COLORS.get(nc.severity, "#6b7280")
        due = nc.due_date.isoformat() if nc.due_date else "Not set"
        details = (
            f"  <p><strong>Status:</strong> {html.escape(nc.status)}</p>\n"
            f'  <p><strong>Severity:</strong> <span style="color: {color};">{html.escape(nc.severity)}</span></p>\n'
            f"  <p><strong>Department:</strong> {html.escape(nc.department or 'Not specified')}</p>\n"
            f"  <p><strong>Due Date:</strong> {due}</p>\n"
            f"  <p><strong>Description:</strong></p>\n"
            f"  <p>{html.escape(nc.description)}</p>"
        )
        body = self._wrap(
            "Non-Conformance Assignment Notification",
            assigned_to,
            "A non-conformance has been assigned to you. Please review and take appropriate action.",
            details,
            nc,
        )
        return self._message(email, f"NC #{nc.id} Assigned to You: {nc.title}", body)

    def build_status_change_message(
        self, nc: NCRead, assigned_to: str | None, email: str, old_status: str
    ) -> EmailMessage:
        color = SEVERITY_COLORS.get(nc.severity, "#6b7280")
        details = (
            f"  <p><strong>Previous Status:</strong> {html.escape(old_status)}</p>\n"
            f"  <p><strong>New Status:</strong> {html.escape(nc.status)}</p>\n"
            f'  <p><strong>Severity:</strong> <span style="color: {color};">{html.escape(nc.severity)}</span></p>\n'
            f"  <p><strong>Department:</strong> {html.escape(nc.department or 'Not specified')}</p>"
        )
        body = self._wrap(
            "Non-Conformance Status Update",
            assigned_to or email,
            f"The status of NC #{nc.id} assigned to you has been updated.",
            details,
            nc,
        )
        return self._message(email, f"NC #{nc.id} Status Updated: {nc.status}", body)

    def deliver(self, msg: EmailMessage) -> None:
        """Send over SMTP. Raises NotificationError on any transport failure."""
        if not self.settings.notifications_enabled:
            logger.info("Notifications disabled; not sending %r to %s", msg["Subject"], msg["To"])
            return
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as smtp:
                if self.settings.smtp_starttls:
                    smtp.starttls()
                if self.settings.smtp_user:
                    smtp.login(self.settings.smtp_user, self.settings.smtp_password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(str(exc)) from exc

    def send_assignment(self, nc: NCRead, assigned_to: str, email: str) -> None:
        try:
            if not is_valid_email(email):
                raise NotificationError(f"invalid address {email!r}")
            self.deliver(self.build_assignment_message(nc, assigned_to, email))
            logger.info("Assignment email sent to %s for NC #%s", email, nc.id)
        except NotificationError as exc:
            logger.warning("Assignment email for NC #%s not sent: %s", nc.id, exc)

    def send_status_change(
        self, nc: NCRead, assigned_to: str | None, email: str, old_status: str
    ) -> None:
        try:
            if not is_valid_email(email):
                raise NotificationError(f"invalid address {email!r}")
            self.deliver(self.build_status_change_message(nc, assigned_to, email, old_status))
            logger.info("Status change email sent to %s for NC #%s", email, nc.id)
        except NotificationError as exc:
            logger.warning("Status change email for NC #%s not sent: %s", nc.id, exc)


def get_notifier(request: Request) -> Notifier:
    """Dependency for the process-wide notifier."""
    return request.app.state.notifier
