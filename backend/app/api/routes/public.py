from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.deps import get_db, get_notification_service
from app.schemas.safety import AlertResult, SOSTriggerRequest
from app.services.notification import NotificationService
from app.services.safety_link import SafetyLinkService

router = APIRouter(prefix="/public", tags=["public"])


@router.post("/safety-link/sos", response_model=AlertResult)
def trigger_sos(
    payload: SOSTriggerRequest,
    session: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> AlertResult:
    return SafetyLinkService(session, notifier).trigger(payload.token, payload.latitude, payload.longitude)
