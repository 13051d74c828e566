from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import UpstreamError
from app.core.logging_setup import logger
from app.models.entry import Entry, SiteStatus
from app.schemas.entry import EntryCreate, Mood
from app.services.client import ClientService
from app.services.shift import ShiftService

MOOD_STATUS = {
    Mood.GOOD: SiteStatus.GREEN,
    Mood.NEUTRAL: SiteStatus.YELLOW,
    Mood.BAD: SiteStatus.RED,
}


class EntryService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.clients = ClientService(session)
        self.shifts = ShiftService(session)

    def create_entry(self, worker_id: UUID, payload: EntryCreate) -> Entry:
        client = self.clients.get_owned_client(payload.client_id, worker_id)
        active = self.shifts.get_active_shift(worker_id)
        entry = Entry(
            worker_id=worker_id,
            shift_id=active.id if active else None,
            client_name=client.full_name,
            status=MOOD_STATUS[payload.mood],
            raw_transcript=payload.raw_transcript,
            formatted_note=payload.formatted_note,
            summary=payload.summary,
            tags=list(payload.tags),
            consumer_hours=payload.consumer_hours,
            gps_lat=payload.latitude,
            gps_lng=payload.longitude,
        )
        self.session.add(entry)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to save entry for worker %s: %s", worker_id, exc)
            raise UpstreamError("Failed to save entry") from exc
        self.session.refresh(entry)
        logger.info("Entry %s saved for client %s", entry.id, client.id)
        return entry

    def list_entries(self, worker_id: UUID, client_name: str | None = None, limit: int = 50) -> list[Entry]:
        statement = select(Entry).where(Entry.worker_id == worker_id)
        if client_name:
            statement = statement.where(Entry.client_name == client_name)
        statement = statement.order_by(Entry.created_at.desc()).limit(limit)  # type: ignore[attr-defined]
        return list(self.session.exec(statement).all())
