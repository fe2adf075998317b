import smtplib
from unittest.mock import patch, MagicMock

import pytest

from bursary.core.config import Settings
from bursary.core.exceptions import NotificationError
from bursary.services.email_service import EmailNotifier, build_payload


def _notifier(**overrides):
    config = Settings(
        SMTP_HOST="smtp.test.local",
        SMTP_PORT=587,
        SMTP_USER="mailer",
        SMTP_PASSWORD="mailer-pass",
        **overrides,
    )
    return EmailNotifier(config)


def _payload(kind="submitted", **extra):
    return build_payload(
        recipient_email="zanele@example.com",
        recipient_name="Zanele Ndlovu",
        bursary_title="Agriculture Bursary",
        event_kind=kind,
        **extra,
    )


@patch("bursary.services.email_service.smtplib.SMTP")
def test_submitted_email_is_sent(mock_smtp):
    mock_server_instance = MagicMock()
    mock_smtp.return_value.__enter__.return_value = mock_server_instance

    assert _notifier().notify(_payload()) is True

    mock_smtp.assert_called_once()
    mock_server_instance.starttls.assert_called()
    mock_server_instance.login.assert_called_with("mailer", "mailer-pass")
    mock_server_instance.sendmail.assert_called_once()

    recipient = mock_server_instance.sendmail.call_args[0][1]
    assert recipient == "zanele@example.com"


def test_render_status_changed_includes_status_and_remarks():
    subject, html = _notifier().render(_payload("status_changed", status="Approved", remarks="Well done"))

    assert subject == "Bursary Application Status Update: Approved"
    assert "Approved" in html
    assert "Well done" in html
    assert "Zanele Ndlovu" in html


def test_render_escapes_user_input():
    payload = build_payload(
        recipient_email="x@example.com",
        recipient_name="<script>alert(1)</script>",
        bursary_title="Arts Bursary",
        event_kind="withdrawn",
    )
    subject, html = _notifier().render(payload)

    assert subject == "Bursary Application Withdrawn"
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_unknown_kind_raises():
    with pytest.raises(NotificationError):
        _notifier().render(_payload("archived"))


@patch("bursary.services.email_service.smtplib.SMTP")
def test_smtp_failure_is_logged_not_raised(mock_smtp):
    mock_smtp.return_value.__enter__.side_effect = smtplib.SMTPConnectError(421, "busy")

    assert _notifier().notify(_payload()) is False


@patch("bursary.services.email_service.smtplib.SMTP")
def test_missing_smtp_host_skips_delivery(mock_smtp):
    notifier = EmailNotifier(Settings(SMTP_HOST=None))

    assert notifier.notify(_payload()) is False
    mock_smtp.assert_not_called()


@patch("bursary.services.email_service.smtplib.SMTP")
def test_missing_recipient_skips_delivery(mock_smtp):
    payload = _payload()
    payload["recipient_email"] = None

    assert _notifier().notify(payload) is False
    mock_smtp.assert_not_called()


@patch("bursary.services.email_service.smtplib.SMTP")
def test_status_subject_stays_on_one_line(mock_smtp):
    mock_server_instance = MagicMock()
    mock_smtp.return_value.__enter__.return_value = mock_server_instance

    notifier = _notifier()
    payload = _payload("status_changed", status="Approved\r\nBcc: x@example.com")

    subject, _ = notifier.render(payload)
    assert subject == "Bursary Application Status Update: Approved Bcc: x@example.com"

    assert notifier.notify(payload) is True
    mock_server_instance.sendmail.assert_called_once()
    recipient = mock_server_instance.sendmail.call_args[0][1]
    assert recipient == "zanele@example.com"


def test_render_status_changed_without_label():
    subject, html = _notifier().render(_payload("status_changed"))

    assert subject == "Bursary Application Status Update"
    assert "New status" not in html
    assert "has been updated" in html
