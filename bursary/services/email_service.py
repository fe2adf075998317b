# bursary/services/email_service.py

import os
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from fastapi import Request
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from loguru import logger

from bursary.core.config import Settings, settings
from bursary.core.exceptions import NotificationError

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "email")

EVENT_SUBMITTED = "submitted"
EVENT_WITHDRAWN = "withdrawn"
EVENT_STATUS_CHANGED = "status_changed"

_TEMPLATES = {
    EVENT_SUBMITTED: "application_received.html",
    EVENT_WITHDRAWN: "application_withdrawn.html",
    EVENT_STATUS_CHANGED: "status_updated.html",
}


def build_payload(
    recipient_email: str,
    recipient_name: str,
    bursary_title: str,
    event_kind: str,
    status: Optional[str] = None,
    remarks: Optional[str] = None,
) -> dict:
    """
    Plain dict handed to the background task, so it does not depend on
    the request's DB session once the response is sent.
    """
    return {
        "recipient_email": recipient_email,
        "recipient_name": recipient_name,
        "bursary_title": bursary_title,
        "event_kind": event_kind,
        "status": status,
        "remarks": remarks,
    }


class EmailNotifier:
    """
    Renders lifecycle emails and delivers them over SMTP.
    Created once at startup and shared by reference.
    """

    def __init__(self, config: Settings):
        self.config = config
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html"]),
        )

    # ---------------------------------------------------------
    # RENDERING
    # ---------------------------------------------------------
    def render(self, payload: dict) -> tuple[str, str]:
        kind = payload.get("event_kind")
        template_name = _TEMPLATES.get(kind)
        if not template_name:
            raise NotificationError(f"Unknown notification kind '{kind}'")

        if kind == EVENT_SUBMITTED:
            subject = "Bursary Application Confirmation"
        elif kind == EVENT_WITHDRAWN:
            subject = "Bursary Application Withdrawn"
        elif payload.get("status"):
            # Header values must stay on one line
            status_label = " ".join(str(payload["status"]).split())
            subject = f"Bursary Application Status Update: {status_label}"
        else:
            subject = "Bursary Application Status Update"

        context = {
            "full_name": payload.get("recipient_name"),
            "bursary_title": payload.get("bursary_title"),
            "status": payload.get("status"),
            "remarks": payload.get("remarks"),
            "date": datetime.now().strftime("%b %d, %Y, %I:%M %p"),
            "portal_url": f"{self.config.FRONTEND_URL}/dashboard",
            "sender_name": self.config.EMAILS_FROM_NAME,
        }
        try:
            html_content = self.env.get_template(template_name).render(context)
        except TemplateError as e:
            raise NotificationError(f"Template '{template_name}' failed to render: {e}")

        return subject, html_content

    # ---------------------------------------------------------
    # DELIVERY
    # ---------------------------------------------------------
    def send_email_via_smtp(self, to_email: str, subject: str, html_content: str) -> bool:
        """
        Returns False when SMTP is not configured; raises NotificationError
        when the server rejects or the connection fails.
        """
        if not self.config.SMTP_HOST:
            logger.warning(f"SMTP host not configured. Skipping email '{subject}' to {to_email}")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.config.EMAILS_FROM_NAME} <{self.config.EMAILS_FROM_EMAIL}>"
        msg["To"] = to_email
        msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=15) as server:
                server.ehlo()

                # Mail catchers on 1025 run without TLS
                if self.config.SMTP_PORT in [587, 2525]:
                    server.starttls()
                    server.ehlo()

                if self.config.SMTP_USER and self.config.SMTP_PASSWORD:
                    server.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD)

                server.sendmail(self.config.EMAILS_FROM_EMAIL, to_email, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery to {to_email} failed: {e}")

        logger.info(f"Email sent to {to_email}: {subject}")
        return True

    def notify(self, payload: dict) -> bool:
        """
        Single best-effort delivery attempt. Never raises; the outcome is
        only logged.
        """
        to_email = payload.get("recipient_email")
        if not to_email:
            logger.warning(f"No recipient for '{payload.get('event_kind')}' notification. Skipping.")
            return False

        try:
            subject, html_content = self.render(payload)
            return self.send_email_via_smtp(to_email, subject, html_content)
        except NotificationError as e:
            logger.error(f"Notification failed: {e.message}")
        except Exception:
            logger.exception(f"Unexpected error while notifying {to_email}")
        return False


def get_notifier(request: Request) -> EmailNotifier:
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = EmailNotifier(settings)
        request.app.state.notifier = notifier
    return notifier
