from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.api.deps import get_current_active_user, get_db, get_notification_service
from app.models.user import User, UserRole
from app.schemas.safety import (
    SafetyLinkGenerateRequest,
    SafetyLinkResponse,
    SafetyLinkRevokeRequest,
    SafetyLinkRevokeResponse,
)
from app.services.audit import AuditService
from app.services.notification import NotificationService
from app.services.safety_link import SafetyLinkService

router = APIRouter(prefix="/safety-link", tags=["safety-link"])


@router.post("/generate", response_model=SafetyLinkResponse)
def generate_link(
    payload: SafetyLinkGenerateRequest,
    request: Request,
    session: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> SafetyLinkResponse:
    response = SafetyLinkService(session, notifier).generate(payload.client_id, requested_by=current_user.id)
    if not response.is_existing:
        AuditService(session).record_event(
            event_type="safety_link_generated",
            actor_id=current_user.id,
            actor_role=UserRole.WORKER.value,
            entity_type="client",
            entity_id=payload.client_id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    return response


@router.post("/revoke", response_model=SafetyLinkRevokeResponse)
def revoke_link(
    payload: SafetyLinkRevokeRequest,
    request: Request,
    session: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> SafetyLinkRevokeResponse:
    record = SafetyLinkService(session, notifier).revoke(
        current_user.id,
        client_id=payload.client_id,
        token_id=payload.token_id,
    )
    AuditService(session).record_event(
        event_type="safety_link_revoked",
        actor_id=current_user.id,
        actor_role=UserRole.WORKER.value,
        entity_type="client",
        entity_id=record.client_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        details={"token_id": str(record.id)},
    )
    return SafetyLinkRevokeResponse()
