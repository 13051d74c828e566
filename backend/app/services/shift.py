from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import ConflictError, NotFoundError, UpstreamError
from app.core.logging_setup import logger
from app.models.base import utcnow
from app.models.shift import Shift


class ShiftService:
    """Clock-in/clock-out with GPS capture for visit verification."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_active_shift(self, worker_id: UUID) -> Shift | None:
        statement = (
            select(Shift)
            .where(Shift.worker_id == worker_id)
            .where(Shift.clock_out_at.is_(None))  # type: ignore[union-attr]
            .order_by(Shift.clock_in_at.desc())  # type: ignore[attr-defined]
        )
        return self.session.exec(statement).first()

    def clock_in(self, worker_id: UUID, latitude: float | None = None, longitude: float | None = None) -> Shift:
        if self.get_active_shift(worker_id) is not None:
            raise ConflictError("You are already clocked in")
        shift = Shift(
            worker_id=worker_id,
            clock_in_at=utcnow(),
            clock_in_lat=latitude,
            clock_in_lng=longitude,
        )
        self.session.add(shift)
        self._commit()
        self.session.refresh(shift)
        logger.info("Worker %s clocked in (shift %s)", worker_id, shift.id)
        return shift

    def clock_out(self, worker_id: UUID, latitude: float | None = None, longitude: float | None = None) -> Shift:
        shift = self.get_active_shift(worker_id)
        if shift is None:
            raise NotFoundError("No active shift found")
        shift.clock_out_at = utcnow()
        shift.clock_out_lat = latitude
        shift.clock_out_lng = longitude
        shift.updated_at = utcnow()
        self.session.add(shift)
        self._commit()
        self.session.refresh(shift)
        logger.info("Worker %s clocked out (shift %s, %.2fh)", worker_id, shift.id, shift.duration_hours())
        return shift

    def list_shifts(self, worker_id: UUID, limit: int = 50) -> list[Shift]:
        statement = (
            select(Shift)
            .where(Shift.worker_id == worker_id)
            .order_by(Shift.clock_in_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        return list(self.session.exec(statement).all())

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Shift update failed: %s", exc)
            raise UpstreamError("Failed to save shift") from exc
