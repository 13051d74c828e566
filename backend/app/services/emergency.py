from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import DeliveryFailedError, NoRecipientsConfiguredError
from app.core.logging_setup import logger
from app.models.emergency import AlertOutcome, AlertSource, EmergencyLog
from app.models.user import User
from app.schemas.emergency import CoachSOSResponse
from app.services.accounts import AccountService
from app.services.notification import DispatchResult, NotificationService, normalize_recipients

LOCATION_UNAVAILABLE = "Location not available"


def build_location_link(latitude: float | None, longitude: float | None) -> str:
    if latitude is None or longitude is None:
        return LOCATION_UNAVAILABLE
    return f"https://maps.google.com/maps?q={latitude},{longitude}"


def format_alert_time(moment: datetime | None = None) -> str:
    """Render ``moment`` (UTC, naive or aware) in the configured alert timezone."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        zone = ZoneInfo(settings.alert_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown alert timezone %r, using UTC", settings.alert_timezone)
        zone = ZoneInfo("UTC")
    local = moment.astimezone(zone)
    return local.strftime("%b %d, %Y, %I:%M %p %Z")


def compose_client_alert(
    client_name: str,
    coach_name: str | None,
    latitude: float | None,
    longitude: float | None,
    moment: datetime | None = None,
) -> str:
    return (
        "SOS ALERT - CLIENT EMERGENCY\n\n"
        f"Client: {client_name}\n"
        f"Coach: {coach_name or 'Unknown'}\n"
        f"Time: {format_alert_time(moment)}\n\n"
        f"Location: {build_location_link(latitude, longitude)}\n\n"
        "This alert was triggered via the client's safety link. Please respond immediately."
    )


def compose_coach_alert(
    coach_name: str | None,
    coach_email: str | None,
    latitude: float | None,
    longitude: float | None,
    moment: datetime | None = None,
) -> str:
    return (
        "EMERGENCY ALERT - CoachAlly\n\n"
        f"Coach: {coach_name or 'Unknown'}\n"
        f"Email: {coach_email or 'Unknown'}\n"
        f"Time: {format_alert_time(moment)}\n\n"
        f"Location: {build_location_link(latitude, longitude)}\n\n"
        "Please respond immediately!"
    )


def collect_recipients(extra: Iterable[str | None] = ()) -> list[str]:
    """Configured emergency numbers first, then ``extra``; blanks and repeats dropped."""
    return normalize_recipients([*settings.emergency_numbers(), *extra])


def outcome_for(result: DispatchResult) -> AlertOutcome:
    if result.failed == 0:
        return AlertOutcome.SENT
    return AlertOutcome.PARTIAL


class EmergencyService:
    def __init__(self, session: Session, notification_service: NotificationService) -> None:
        self.session = session
        self.notification_service = notification_service

    def log_alert(
        self,
        *,
        source: AlertSource,
        coach_id: UUID | None,
        message: str,
        outcome: AlertOutcome,
        recipients: list[str],
        client_id: UUID | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        result: DispatchResult | None = None,
        details: dict | None = None,
    ) -> EmergencyLog | None:
        log = EmergencyLog(
            coach_id=coach_id,
            client_id=client_id,
            source=source.value,
            latitude=latitude,
            longitude=longitude,
            message_sent=message,
            recipients_count=len(recipients),
            sent_count=result.sent if result else 0,
            failed_count=result.failed if result else 0,
            outcome=outcome.value,
            details={**(details or {}), **({"errors": result.errors} if result and result.errors else {})},
        )
        logger.info(
            "Emergency alert source=%s coach=%s client=%s lat=%s lng=%s outcome=%s recipients=%s",
            source.value,
            coach_id,
            client_id,
            latitude,
            longitude,
            outcome.value,
            len(recipients),
        )
        self.session.add(log)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to persist emergency log: %s", exc)
            return None
        self.session.refresh(log)
        return log

    def coach_alert(self, user: User, latitude: float | None, longitude: float | None) -> CoachSOSResponse:
        profile = AccountService(self.session).get_profile(user.id)
        message = compose_coach_alert(
            profile.full_name if profile else None,
            user.email,
            latitude,
            longitude,
        )
        recipients = collect_recipients()
        try:
            result = self.notification_service.send_sms_bulk(message, recipients)
        except (NoRecipientsConfiguredError, DeliveryFailedError) as exc:
            self.log_alert(
                source=AlertSource.COACH_SOS,
                coach_id=user.id,
                message=message,
                outcome=AlertOutcome.FAILED,
                recipients=recipients,
                latitude=latitude,
                longitude=longitude,
                details={"error": exc.message},
            )
            raise

        self.log_alert(
            source=AlertSource.COACH_SOS,
            coach_id=user.id,
            message=message,
            outcome=outcome_for(result),
            recipients=recipients,
            latitude=latitude,
            longitude=longitude,
            result=result,
        )
        return CoachSOSResponse(sent_to=result.sent, failed=result.failed)
