from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.deps import get_db, require_roles
from app.models.user import User, UserRole
from app.schemas.admin import AdminStatsResponse, CoachListResponse, InvitationListResponse
from app.services.admin import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStatsResponse)
def admin_stats(
    session: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
) -> AdminStatsResponse:
    return AdminService(session).stats()


@router.get("/coaches", response_model=CoachListResponse)
def list_coaches(
    session: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
) -> CoachListResponse:
    return AdminService(session).list_coaches()


@router.get("/invitations", response_model=InvitationListResponse)
def list_invitations(
    session: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
) -> InvitationListResponse:
    return AdminService(session).list_invitations()
