from datetime import datetime
from types import SimpleNamespace

import smtplib

import pytest

from app.core.errors import DeliveryFailedError, NoRecipientsConfiguredError
from app.services import notification as notification_module
from app.services.invitation import InvitationService
from app.services.notification import NotificationService, build_notification_service, normalize_recipients
from tests.conftest import FakeSMTP


class FakeTwilioClient:
    def __init__(self, failing=()):
        self.messages = self
        self.sent = []
        self.failing = set(failing)
        self.init_kwargs = None

    def __call__(self, *args, **kwargs):
        self.init_kwargs = kwargs
        return self

    def create(self, **kwargs):
        if kwargs["to"] in self.failing:
            raise RuntimeError(f"carrier rejected {kwargs['to']}")
        self.sent.append(kwargs)
        return SimpleNamespace(sid=f"SM{len(self.sent)}", status="queued")


def _sms_service() -> NotificationService:
    service = NotificationService()
    service.configure_sms(account_sid="AC123", auth_token="secret", from_number="+15550000000", timeout_seconds=3)
    return service


def test_bulk_sms_continues_past_a_failing_recipient(monkeypatch):
    fake = FakeTwilioClient(failing={"+15550000002"})
    monkeypatch.setattr(notification_module, "Client", fake)

    result = _sms_service().send_sms_bulk("help", ["+15550000001", "+15550000002", "+15550000003"])

    assert result.sent == 2
    assert result.failed == 1
    assert result.ok
    assert set(result.errors) == {"+15550000002"}
    assert "carrier rejected" in result.errors["+15550000002"]
    assert sorted(message["to"] for message in fake.sent) == ["+15550000001", "+15550000003"]
    assert all(message["from_"] == "+15550000000" for message in fake.sent)
    assert fake.init_kwargs["http_client"].timeout == 3


def test_bulk_sms_without_recipients_raises(monkeypatch):
    monkeypatch.setattr(notification_module, "Client", FakeTwilioClient())

    with pytest.raises(NoRecipientsConfiguredError):
        _sms_service().send_sms_bulk("help", [])
    with pytest.raises(NoRecipientsConfiguredError):
        _sms_service().send_sms_bulk("help", [None, "  "])


def test_bulk_sms_all_failures_raise_with_details(monkeypatch):
    numbers = ["+15550000001", "+15550000002"]
    monkeypatch.setattr(notification_module, "Client", FakeTwilioClient(failing=numbers))

    with pytest.raises(DeliveryFailedError) as exc_info:
        _sms_service().send_sms_bulk("help", numbers)

    assert "+15550000001" in exc_info.value.message
    assert set(exc_info.value.details["errors"]) == set(numbers)


def test_bulk_sms_without_sender_configuration_raises():
    with pytest.raises(DeliveryFailedError):
        NotificationService().send_sms_bulk("help", ["+15550000001"])


def test_bulk_sms_prefers_messaging_service(monkeypatch):
    fake = FakeTwilioClient()
    monkeypatch.setattr(notification_module, "Client", fake)
    service = NotificationService()
    service.configure_sms(account_sid="AC123", auth_token="secret", messaging_service_sid="MG123")

    service.send_sms_bulk("help", ["+15550000001"])

    assert fake.sent[0]["messaging_service_sid"] == "MG123"
    assert "from_" not in fake.sent[0]


def test_normalize_recipients_keeps_first_occurrence_order():
    assert normalize_recipients(["+1", None, " +2 ", "+1", "", "+3"]) == ["+1", "+2", "+3"]


def test_build_from_settings(sms_settings, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_sender", "noreply@example.com")

    service = build_notification_service(settings)

    assert service.sms_available
    assert service.email_available
    assert service.email_config.host == "smtp.example.com"


def test_invitation_email_success(monkeypatch):
    fake = FakeSMTP("smtp.example.com", 587, timeout=10)
    monkeypatch.setattr(smtplib, "SMTP", lambda host, port, timeout=None: fake)

    service = NotificationService()
    service.configure_email(
        host="smtp.example.com",
        port=587,
        sender="noreply@example.com",
        username="user",
        password="pass",
        starttls=True,
    )

    sent = service.send_invitation_email(
        to="new@example.com",
        invitation_link="http://app.test/setup-credentials?token=abc",
        expires_at=datetime(2026, 1, 12),
        invited_by_name="Alex Admin",
    )

    assert sent is True
    assert fake.started_tls is True
    assert fake.logged_in == ("user", "pass")
    message = fake.sent_messages[0]
    assert message["To"] == "new@example.com"
    html = message.get_body(preferencelist=("html",)).get_content()
    text = message.get_body(preferencelist=("plain",)).get_content()
    assert "http://app.test/setup-credentials?token=abc" in html
    assert "Alex Admin" in html
    assert "Jan 12, 2026" in text


def test_invitation_email_failure_is_reported_not_raised(monkeypatch):
    def broken_smtp(host, port, timeout=None):
        raise OSError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", broken_smtp)
    service = NotificationService()
    service.configure_email(host="smtp.example.com", port=587, sender="noreply@example.com")

    assert (
        service.send_invitation_email(
            to="new@example.com",
            invitation_link="http://app.test/x",
            expires_at=datetime(2026, 1, 12),
        )
        is False
    )


def test_invitation_create_sends_email(db_session, admin_user, monkeypatch):
    fake = FakeSMTP("smtp.example.com", 587)
    monkeypatch.setattr(smtplib, "SMTP", lambda host, port, timeout=None: fake)
    notifier = NotificationService()
    notifier.configure_email(host="smtp.example.com", port=587, sender="noreply@example.com", starttls=False)

    created = InvitationService(db_session, notification_service=notifier).create(
        "mailme@example.com", requested_by=admin_user.id
    )

    assert created.email_sent is True
    assert fake.started_tls is False
    assert fake.sent_messages[0]["To"] == "mailme@example.com"
