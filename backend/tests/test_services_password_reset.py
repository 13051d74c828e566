from __future__ import annotations

import smtplib
from datetime import datetime, timedelta

import pytest
from sqlmodel import Session, select

from app.core.errors import (
    AlreadyUsedError,
    ExpiredError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from app.models.audit import AuditLog
from app.models.password_reset import PasswordResetToken
from app.services.accounts import AccountService
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.services.password_reset import PasswordResetService
from tests.conftest import DEFAULT_PASSWORD, FakeSMTP


def _email_notifier(monkeypatch) -> tuple[NotificationService, FakeSMTP]:
    fake = FakeSMTP("smtp.example.com", 587)
    monkeypatch.setattr(smtplib, "SMTP", lambda host, port, timeout=None: fake)
    notifier = NotificationService()
    notifier.configure_email(host="smtp.example.com", port=587, sender="noreply@example.com", starttls=False)
    return notifier, fake


def test_request_reset_emails_single_use_link(db_session: Session, coach_user, monkeypatch):
    notifier, fake = _email_notifier(monkeypatch)
    service = PasswordResetService(db_session, notification_service=notifier, audit_service=AuditService(db_session))

    record = service.request_reset("Coach@Example.com")

    assert record is not None
    assert record.user_id == coach_user.id
    delta = record.expires_at - datetime.utcnow()
    assert timedelta(minutes=59) < delta <= timedelta(minutes=60)
    message = fake.sent_messages[0]
    assert message["To"] == "coach@example.com"
    assert message["Subject"] == "Reset your CoachAlly password"
    text = message.get_body(preferencelist=("plain",)).get_content()
    assert f"http://app.test/reset-password?token={record.token}" in text
    assert "Jordan Coach" in text
    events = [row.event_type for row in db_session.exec(select(AuditLog)).all()]
    assert events == ["password_reset_requested"]


@pytest.mark.parametrize("email", ["nobody@example.com", "not-an-email", ""])
def test_request_reset_for_unknown_address_is_silent(db_session: Session, coach_user, monkeypatch, email):
    notifier, fake = _email_notifier(monkeypatch)

    assert PasswordResetService(db_session, notification_service=notifier).request_reset(email) is None
    assert fake.sent_messages == []
    assert db_session.exec(select(PasswordResetToken)).all() == []


def test_request_reset_skips_inactive_accounts(db_session: Session, coach_user):
    coach_user.is_active = False
    db_session.add(coach_user)
    db_session.commit()

    assert PasswordResetService(db_session).request_reset("coach@example.com") is None


def test_new_request_retires_earlier_links(db_session: Session, coach_user):
    service = PasswordResetService(db_session)
    first = service.request_reset("coach@example.com")
    second = service.request_reset("coach@example.com")

    with pytest.raises(AlreadyUsedError):
        service.verify(first.token)
    assert service.verify(second.token).id == second.id


def test_reset_password_changes_credentials_once(db_session: Session, coach_user):
    service = PasswordResetService(db_session, audit_service=AuditService(db_session))
    record = service.request_reset("coach@example.com")

    result = service.reset_password(record.token, "brand-new-pass", confirm_password="brand-new-pass")

    assert result.user_id == coach_user.id
    accounts = AccountService(db_session)
    assert accounts.check_credentials("coach@example.com", "brand-new-pass").id == coach_user.id
    with pytest.raises(UnauthorizedError):
        accounts.check_credentials("coach@example.com", DEFAULT_PASSWORD)
    with pytest.raises(AlreadyUsedError):
        service.reset_password(record.token, "another-pass")
    events = {row.event_type for row in db_session.exec(select(AuditLog)).all()}
    assert "password_reset_completed" in events


@pytest.mark.parametrize(
    ("password", "confirm"),
    [("short", None), ("", None), ("longenough", "different")],
)
def test_reset_password_validates_input(db_session: Session, coach_user, password, confirm):
    service = PasswordResetService(db_session)
    record = service.request_reset("coach@example.com")

    with pytest.raises(InvalidInputError):
        service.reset_password(record.token, password, confirm_password=confirm)

    assert service.verify(record.token).used_at is None


def test_reset_password_rejects_unknown_and_expired_tokens(db_session: Session, coach_user):
    service = PasswordResetService(db_session)
    record = service.request_reset("coach@example.com")
    record.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db_session.add(record)
    db_session.commit()

    with pytest.raises(NotFoundError):
        service.reset_password("does-not-exist", "longenough")
    with pytest.raises(ExpiredError):
        service.reset_password(record.token, "longenough")


def test_failed_password_write_releases_the_token(db_session: Session, coach_user, monkeypatch):
    service = PasswordResetService(db_session)
    record = service.request_reset("coach@example.com")

    def failing_set_password(self, user_id, password):
        raise UpstreamError("Failed to update password")

    with monkeypatch.context() as patch:
        patch.setattr(AccountService, "set_password", failing_set_password)
        with pytest.raises(UpstreamError):
            service.reset_password(record.token, "longenough")

    assert service.verify(record.token).used_at is None
    assert service.reset_password(record.token, "longenough").email == "coach@example.com"
