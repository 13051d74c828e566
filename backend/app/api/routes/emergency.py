from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.deps import get_current_active_user, get_db, get_notification_service
from app.models.user import User
from app.schemas.emergency import CoachSOSRequest, CoachSOSResponse
from app.services.emergency import EmergencyService
from app.services.notification import NotificationService

router = APIRouter(prefix="/emergency", tags=["emergency"])


@router.post("/sos", response_model=CoachSOSResponse)
def coach_sos(
    payload: CoachSOSRequest,
    session: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(get_current_active_user),
) -> CoachSOSResponse:
    return EmergencyService(session, notifier).coach_alert(current_user, payload.latitude, payload.longitude)
