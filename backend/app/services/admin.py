from __future__ import annotations

from datetime import datetime, time

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.base import utcnow
from app.models.entry import Entry
from app.models.invitation import Invitation
from app.models.user import Profile, UserRole
from app.schemas.admin import AdminStats, AdminStatsResponse, CoachListResponse, InvitationListResponse
from app.schemas.auth import ProfileRead
from app.schemas.invitation import InvitationRead


def invitation_status(invitation: Invitation, now: datetime) -> str:
    if invitation.is_expired(now):
        return "expired"
    if invitation.used_at is not None:
        return "used"
    return "pending"


class AdminService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _count(self, statement) -> int:  # type: ignore[no-untyped-def]
        return int(self.session.exec(statement).one() or 0)

    def _coaches_query(self):  # type: ignore[no-untyped-def]
        return (
            select(Profile)
            .where(Profile.role == UserRole.WORKER.value)
            .order_by(Profile.created_at.desc())  # type: ignore[attr-defined]
        )

    def stats(self, recent_limit: int = 5) -> AdminStatsResponse:
        now = utcnow()
        start_of_day = datetime.combine(now.date(), time.min)
        stats = AdminStats(
            total_coaches=self._count(
                select(func.count()).select_from(Profile).where(Profile.role == UserRole.WORKER.value)
            ),
            pending_invitations=self._count(
                select(func.count())
                .select_from(Invitation)
                .where(Invitation.used_at.is_(None))  # type: ignore[union-attr]
                .where(Invitation.expires_at > now)
            ),
            total_entries=self._count(select(func.count()).select_from(Entry)),
            today_entries=self._count(
                select(func.count()).select_from(Entry).where(Entry.created_at >= start_of_day)
            ),
        )
        recent = self.session.exec(self._coaches_query().limit(recent_limit)).all()
        return AdminStatsResponse(
            stats=stats,
            recent_coaches=[ProfileRead.model_validate(profile) for profile in recent],
        )

    def list_coaches(self) -> CoachListResponse:
        coaches = [ProfileRead.model_validate(profile) for profile in self.session.exec(self._coaches_query()).all()]
        return CoachListResponse(coaches=coaches, count=len(coaches))

    def list_invitations(self) -> InvitationListResponse:
        now = utcnow()
        rows = self.session.exec(
            select(Invitation).order_by(Invitation.created_at.desc())  # type: ignore[attr-defined]
        ).all()
        invitations = []
        for invitation in rows:
            item = InvitationRead.model_validate(invitation)
            item.status = invitation_status(invitation, now)
            invitations.append(item)
        return InvitationListResponse(invitations=invitations, count=len(invitations))
