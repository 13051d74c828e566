from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.config import settings
from app.core.errors import (
    ConflictError,
    DeliveryFailedError,
    ForbiddenError,
    InvalidInputError,
    NoRecipientsConfiguredError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from app.core.logging_setup import logger, mask_token
from app.models.client import Client
from app.models.emergency import AlertOutcome, AlertSource
from app.models.safety import ClientSafetyToken
from app.schemas.safety import AlertResult, SafetyLinkResponse
from app.services.accounts import AccountService
from app.services.emergency import EmergencyService, collect_recipients, compose_client_alert, outcome_for
from app.services.notification import NotificationService, build_notification_service
from app.services.tokens import safety_tokens

INVALID_LINK_MESSAGE = "Invalid or expired safety link"


class SafetyLinkService:
    """Client safety links: one live SOS token per client, revocable by the owning coach."""

    def __init__(self, session: Session, notification_service: NotificationService | None = None) -> None:
        self.session = session
        self.tokens = safety_tokens(session)
        self.accounts = AccountService(session)
        self.notification_service = notification_service or build_notification_service(settings)
        self.emergency = EmergencyService(session, self.notification_service)

    @staticmethod
    def build_link(token: str) -> str:
        return f"{settings.resolved_public_app_url()}/sos/{token}"

    def _live_token(self, client_id: UUID) -> ClientSafetyToken | None:
        statement = (
            select(ClientSafetyToken)
            .where(ClientSafetyToken.client_id == client_id)
            .where(ClientSafetyToken.revoked_at.is_(None))  # type: ignore[union-attr]
            .order_by(ClientSafetyToken.created_at.desc())  # type: ignore[attr-defined]
        )
        return self.session.exec(statement).first()

    def _response(self, record: ClientSafetyToken, client: Client, is_existing: bool) -> SafetyLinkResponse:
        return SafetyLinkResponse(
            token=record.token,
            link=self.build_link(record.token),
            is_existing=is_existing,
            client_name=client.full_name,
        )

    def generate(self, client_id: UUID, requested_by: UUID) -> SafetyLinkResponse:
        client = self.session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client not found")
        if client.coach_id != requested_by:
            raise ForbiddenError("You do not have access to this client")

        live = self._live_token(client.id)
        if live is not None:
            return self._response(live, client, is_existing=True)

        record = ClientSafetyToken(client_id=client.id, token=self.tokens.issue(), created_by=requested_by)
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # Another request stored a live token for this client first.
            self.session.rollback()
            live = self._live_token(client.id)
            if live is not None:
                return self._response(live, client, is_existing=True)
            raise ConflictError("Could not create safety link") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store safety token for client %s: %s", client.id, exc)
            raise UpstreamError("Failed to generate safety link") from exc
        self.session.refresh(record)

        logger.info("Safety link created for client %s (token=%s)", client.id, mask_token(record.token))
        return self._response(record, client, is_existing=False)

    def revoke(
        self,
        requested_by: UUID,
        client_id: UUID | None = None,
        token_id: UUID | None = None,
    ) -> ClientSafetyToken:
        if client_id is None and token_id is None:
            raise InvalidInputError("client_id or token_id is required")

        if token_id is not None:
            record = self.session.get(ClientSafetyToken, token_id)
            if record is not None and self.tokens.is_invalidated(record):
                record = None
        else:
            record = self._live_token(client_id)  # type: ignore[arg-type]
        if record is None:
            raise NotFoundError("No active safety link found")

        client = self.session.get(Client, record.client_id)
        if client is None or client.coach_id != requested_by:
            raise ForbiddenError("You do not have access to this client")

        self.tokens.invalidate(record)
        logger.info("Safety link %s revoked for client %s", record.id, record.client_id)
        return record

    def trigger(self, token: str | None, latitude: float | None, longitude: float | None) -> AlertResult:
        """Send the SOS alert for a live safety token.

        Dispatch failures never surface as errors here: the caller gets ``use_fallback=True`` with
        the composed message and numbers so the alert can be sent by hand.
        """
        try:
            record = self.tokens.find(token)
        except NotFoundError:
            raise UnauthorizedError(INVALID_LINK_MESSAGE) from None
        if self.tokens.is_invalidated(record):
            raise UnauthorizedError(INVALID_LINK_MESSAGE)
        client = self.session.get(Client, record.client_id)
        if client is None:
            raise UnauthorizedError(INVALID_LINK_MESSAGE)

        coach = self.accounts.get_profile(client.coach_id)
        message = compose_client_alert(
            client.full_name,
            coach.full_name if coach else None,
            latitude,
            longitude,
        )
        recipients = collect_recipients([client.emergency_contact_phone])
        log_kwargs = {
            "source": AlertSource.CLIENT_SOS,
            "coach_id": client.coach_id,
            "client_id": client.id,
            "message": message,
            "recipients": recipients,
            "latitude": latitude,
            "longitude": longitude,
        }

        try:
            result = self.notification_service.send_sms_bulk(message, recipients)
        except (NoRecipientsConfiguredError, DeliveryFailedError) as exc:
            logger.warning("SOS for client %s needs manual fallback: %s", client.id, exc.message)
            self.emergency.log_alert(
                outcome=AlertOutcome.FALLBACK,
                details={"error": exc.message, "kind": exc.kind},
                **log_kwargs,
            )
            return AlertResult(
                success=False,
                use_fallback=True,
                message=message,
                phone_numbers=recipients,
                failed_count=len(exc.details.get("errors", {})),
                client_name=client.full_name,
                detail=exc.message,
            )

        self.emergency.log_alert(outcome=outcome_for(result), result=result, **log_kwargs)
        return AlertResult(
            success=True,
            use_fallback=False,
            message=message,
            phone_numbers=recipients,
            sent_count=result.sent,
            failed_count=result.failed,
            client_name=client.full_name,
            detail="Emergency alert sent successfully",
        )
