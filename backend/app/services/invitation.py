from __future__ import annotations

from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.config import settings
from app.core.errors import (
    AlreadyUsedError,
    ConflictError,
    ExpiredError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    ServiceError,
    UpstreamError,
)
from app.core.logging_setup import logger, mask_token
from app.models.base import utcnow
from app.models.invitation import Invitation
from app.models.user import UserRole
from app.schemas.invitation import InvitationCreated, SetupCredentialsResponse
from app.services.accounts import AccountService
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.services.tokens import invitation_tokens
from app.utils.email_validation import normalize_email

INVALID_TOKEN_MESSAGE = "Invalid invitation token"
USED_TOKEN_MESSAGE = "This invitation has already been used"
EXPIRED_TOKEN_MESSAGE = "This invitation has expired"


class InvitationService:
    """Invitation-based provisioning of worker accounts.

    Per email an invitation moves ``NONE -> PENDING -> CONSUMED | EXPIRED``; expired rows are
    deleted the next time the same address is invited.
    """

    def __init__(
        self,
        session: Session,
        notification_service: NotificationService | None = None,
        audit_service: AuditService | None = None,
    ) -> None:
        self.session = session
        self.accounts = AccountService(session)
        self.tokens = invitation_tokens(session)
        self.notification_service = notification_service
        self.audit_service = audit_service

    @staticmethod
    def build_link(token: str) -> str:
        return f"{settings.resolved_public_app_url()}/setup-credentials?token={token}"

    def create(self, email: str, requested_by: UUID) -> InvitationCreated:
        if not self.accounts.is_admin(requested_by):
            raise ForbiddenError("Only admins can send invitations")

        normalized_email = normalize_email(email)
        if self.accounts.email_in_use(normalized_email):
            raise ConflictError("A user with this email already exists")

        now = utcnow()
        existing = self.session.exec(select(Invitation).where(Invitation.email == normalized_email)).all()
        for invitation in existing:
            if invitation.is_expired(now):
                self.session.delete(invitation)
            elif invitation.used_at is None:
                raise ConflictError("An active invitation already exists for this email")

        token = self.tokens.issue()
        invitation = Invitation(
            email=normalized_email,
            token=token,
            invited_by=requested_by,
            expires_at=now + timedelta(days=settings.invitation_ttl_days),
        )
        self.session.add(invitation)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store invitation for %s: %s", normalized_email, exc)
            raise UpstreamError("Failed to create invitation") from exc
        self.session.refresh(invitation)

        link = self.build_link(token)
        email_sent = False
        if self.notification_service is not None:
            inviter = self.accounts.get_profile(requested_by)
            email_sent = self.notification_service.send_invitation_email(
                to=normalized_email,
                invitation_link=link,
                expires_at=invitation.expires_at,
                invited_by_name=inviter.full_name if inviter else None,
            )

        logger.info(
            "Invitation %s created for %s by %s (token=%s, email_sent=%s)",
            invitation.id,
            normalized_email,
            requested_by,
            mask_token(token),
            email_sent,
        )
        if self.audit_service:
            self.audit_service.record_event(
                event_type="invitation_created",
                actor_id=requested_by,
                actor_role=UserRole.ADMIN.value,
                entity_type="invitation",
                entity_id=invitation.id,
                details={"email": normalized_email, "email_sent": email_sent},
            )

        return InvitationCreated(
            id=invitation.id,
            email=invitation.email,
            token=token,
            link=link,
            expires_at=invitation.expires_at,
            email_sent=email_sent,
        )

    def verify(self, token: str | None) -> Invitation:
        try:
            invitation = self.tokens.find(token)
        except NotFoundError:
            raise NotFoundError(INVALID_TOKEN_MESSAGE) from None
        # An expired invitation reports as expired even when it was also used.
        if invitation.is_expired(utcnow()):
            raise ExpiredError(EXPIRED_TOKEN_MESSAGE)
        if self.tokens.is_invalidated(invitation):
            raise AlreadyUsedError(USED_TOKEN_MESSAGE)
        return invitation

    def consume(
        self,
        token: str | None,
        full_name: str | None,
        password: str | None,
        confirm_password: str | None = None,
    ) -> SetupCredentialsResponse:
        """Create the worker account for ``token`` and mark the invitation used.

        The token is claimed with a conditional update before the account is created, so of two
        concurrent calls only one gets past the claim. When the profile cannot be stored, the new
        account is deleted and the claim released, leaving the invitation usable.
        """
        if not (token or "").strip() or not (full_name or "").strip() or not password:
            raise InvalidInputError("Token, full name and password are required")
        if len(password) < settings.min_password_length:
            raise InvalidInputError(
                f"Password must be at least {settings.min_password_length} characters"
            )
        if confirm_password is not None and confirm_password != password:
            raise InvalidInputError("Passwords do not match")

        invitation = self.verify(token)
        if not self.tokens.claim(invitation):
            raise AlreadyUsedError(USED_TOKEN_MESSAGE)

        try:
            user = self.accounts.create_account(invitation.email, password)
        except ServiceError:
            self.tokens.release(invitation)
            raise

        try:
            self.accounts.create_profile(user, full_name=full_name, role=UserRole.WORKER)
        except ServiceError as exc:
            logger.error("Profile creation failed for %s, rolling back account: %s", invitation.email, exc)
            try:
                self.accounts.delete_account(user.id)
            finally:
                self.tokens.release(invitation)
            raise

        logger.info("Invitation %s consumed by user %s", invitation.id, user.id)
        if self.audit_service:
            self.audit_service.record_event(
                event_type="invitation_consumed",
                actor_id=user.id,
                actor_role=UserRole.WORKER.value,
                entity_type="invitation",
                entity_id=invitation.id,
                details={"email": invitation.email},
            )
        return SetupCredentialsResponse(user_id=user.id, email=user.email)
