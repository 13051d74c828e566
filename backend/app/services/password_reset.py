from __future__ import annotations

from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.config import settings
from app.core.errors import (
    AlreadyUsedError,
    ExpiredError,
    InvalidInputError,
    NotFoundError,
    ServiceError,
    UpstreamError,
)
from app.core.logging_setup import logger, mask_token
from app.models.base import utcnow
from app.models.password_reset import PasswordResetToken
from app.schemas.auth import PasswordResetResponse
from app.services.accounts import AccountService
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.services.tokens import password_reset_tokens
from app.utils.email_validation import normalize_email

INVALID_TOKEN_MESSAGE = "Invalid password reset token"
USED_TOKEN_MESSAGE = "This password reset link has already been used"
EXPIRED_TOKEN_MESSAGE = "This password reset link has expired"


class PasswordResetService:
    """Self-service password recovery through single-use links sent by e-mail.

    Requesting a reset never reveals whether the address belongs to an account. Each new request
    retires the user's earlier links, so only the most recent one can be redeemed.
    """

    def __init__(
        self,
        session: Session,
        notification_service: NotificationService | None = None,
        audit_service: AuditService | None = None,
    ) -> None:
        self.session = session
        self.accounts = AccountService(session)
        self.tokens = password_reset_tokens(session)
        self.notification_service = notification_service
        self.audit_service = audit_service

    @staticmethod
    def build_link(token: str) -> str:
        return f"{settings.resolved_public_app_url()}/reset-password?token={token}"

    def request_reset(self, email: str) -> PasswordResetToken | None:
        try:
            normalized_email = normalize_email(email)
        except InvalidInputError:
            return None
        user = self.accounts.get_user_by_email(normalized_email)
        if user is None or not user.is_active:
            logger.info("Password reset requested for unknown or inactive address %s", normalized_email)
            return None

        now = utcnow()
        outstanding = self.session.exec(
            select(PasswordResetToken)
            .where(PasswordResetToken.user_id == user.id)
            .where(PasswordResetToken.used_at.is_(None))  # type: ignore[union-attr]
        ).all()
        for previous in outstanding:
            self.tokens.invalidate(previous, at=now)

        token = self.tokens.issue()
        record = PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=now + timedelta(minutes=settings.password_reset_ttl_minutes),
        )
        self.session.add(record)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store password reset token for %s: %s", normalized_email, exc)
            raise UpstreamError("Failed to start password reset") from exc
        self.session.refresh(record)

        email_sent = False
        if self.notification_service is not None:
            profile = self.accounts.get_profile(user.id)
            email_sent = self.notification_service.send_password_reset_email(
                to=user.email,
                reset_link=self.build_link(token),
                expires_at=record.expires_at,
                full_name=profile.full_name if profile else None,
            )

        logger.info(
            "Password reset %s issued for user %s (token=%s, email_sent=%s)",
            record.id,
            user.id,
            mask_token(token),
            email_sent,
        )
        if self.audit_service:
            self.audit_service.record_event(
                event_type="password_reset_requested",
                actor_id=user.id,
                entity_type="user",
                entity_id=user.id,
                details={"email_sent": email_sent},
            )
        return record

    def verify(self, token: str | None) -> PasswordResetToken:
        try:
            record = self.tokens.find(token)
        except NotFoundError:
            raise NotFoundError(INVALID_TOKEN_MESSAGE) from None
        if record.is_expired(utcnow()):
            raise ExpiredError(EXPIRED_TOKEN_MESSAGE)
        if self.tokens.is_invalidated(record):
            raise AlreadyUsedError(USED_TOKEN_MESSAGE)
        return record

    def reset_password(
        self,
        token: str | None,
        password: str | None,
        confirm_password: str | None = None,
    ) -> PasswordResetResponse:
        if not (token or "").strip() or not password:
            raise InvalidInputError("Token and password are required")
        if len(password) < settings.min_password_length:
            raise InvalidInputError(
                f"Password must be at least {settings.min_password_length} characters"
            )
        if confirm_password is not None and confirm_password != password:
            raise InvalidInputError("Passwords do not match")

        record = self.verify(token)
        if not self.tokens.claim(record):
            raise AlreadyUsedError(USED_TOKEN_MESSAGE)

        try:
            user = self.accounts.set_password(record.user_id, password)
        except ServiceError:
            self.tokens.release(record)
            raise

        logger.info("Password reset %s completed for user %s", record.id, user.id)
        if self.audit_service:
            self.audit_service.record_event(
                event_type="password_reset_completed",
                actor_id=user.id,
                entity_type="user",
                entity_id=user.id,
            )
        return PasswordResetResponse(user_id=user.id, email=user.email)
