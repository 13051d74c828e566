from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.api.deps import get_db, require_roles
from app.models.user import User, UserRole
from app.schemas.audit import AuditEventList, AuditEventRead
from app.services.audit import AuditService

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("/events", response_model=AuditEventList)
def list_events(
    event_type: Optional[str] = None,
    entity_id: Optional[UUID] = None,
    actor_id: Optional[UUID] = None,
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    session: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
) -> AuditEventList:
    items, total = AuditService(session).list_events(
        event_type=event_type,
        entity_id=entity_id,
        actor_id=actor_id,
        start_at=start_at,
        end_at=end_at,
        page=page,
        page_size=page_size,
    )
    return AuditEventList(
        items=[AuditEventRead.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )
