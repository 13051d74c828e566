from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.logging_setup import logger
from app.models.audit import AuditLog, AuthLog


class AuditService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def record_auth(
        self,
        user_id: UUID | None,
        event_type: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        success: bool = True,
    ) -> None:
        log = AuthLog(
            user_id=user_id,
            event_type=event_type,
            ip_address=ip_address,
            user_agent=user_agent,
            success=success,
        )
        self._persist(log)

    def record_event(
        self,
        event_type: str,
        actor_id: UUID | None = None,
        actor_role: str | None = None,
        entity_type: str | None = None,
        entity_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict | None = None,
    ) -> None:
        log = AuditLog(
            event_type=event_type,
            actor_id=actor_id,
            actor_role=actor_role,
            entity_type=entity_type,
            entity_id=entity_id,
            ip_address=ip_address,
            user_agent=user_agent,
            details=details or {},
        )
        self._persist(log)

    def list_events(
        self,
        event_type: Optional[str] = None,
        entity_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
        start_at: Optional[datetime] = None,
        end_at: Optional[datetime] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[AuditLog], int]:
        query = select(AuditLog)
        if event_type:
            query = query.where(AuditLog.event_type == event_type)
        if entity_id:
            query = query.where(AuditLog.entity_id == entity_id)
        if actor_id:
            query = query.where(AuditLog.actor_id == actor_id)
        if start_at:
            query = query.where(AuditLog.created_at >= start_at)
        if end_at:
            query = query.where(AuditLog.created_at <= end_at)

        total = self.session.exec(
            select(func.count()).select_from(query.subquery())
        ).one()

        items = self.session.exec(
            query.order_by(AuditLog.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).all()
        return list(items), total

    def _persist(self, log: AuditLog | AuthLog) -> None:
        # Audit rows must never break the workflow that produced them.
        self.session.add(log)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:  # pragma: no cover - storage dependent
            self.session.rollback()
            logger.error("Failed to persist %s '%s': %s", type(log).__name__, log.event_type, exc)
