from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, List
from uuid import UUID

from sqlmodel import Session, select

from app.core.errors import InvalidInputError, NotFoundError
from app.models.client import Client
from app.models.entry import Entry
from app.models.shift import Shift
from app.services.accounts import AccountService


@dataclass
class ShiftRow:
    day: date
    clock_in_at: datetime
    clock_out_at: datetime
    coach_hours: float
    consumer_hours: float | None = None


@dataclass
class NarrativeEntry:
    created_at: datetime
    status: str
    formatted_note: str


@dataclass
class NarrativeDay:
    day: date
    label: str
    entries: List[NarrativeEntry] = field(default_factory=list)


@dataclass
class AggregatedReport:
    client: Client
    coach_name: str | None
    start_date: date
    end_date: date
    shifts: List[ShiftRow] = field(default_factory=list)
    days: List[NarrativeDay] = field(default_factory=list)
    total_coach_hours: float = 0.0
    total_consumer_hours: float = 0.0


def day_label(value: date) -> str:
    """``Monday, January 5, 2026``."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def report_window(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    if end_date < start_date:
        raise InvalidInputError("end_date must not be before start_date")
    return (
        datetime.combine(start_date, time(0, 0, 0)),
        datetime.combine(end_date, time(23, 59, 59, 999999)),
    )


class ReportingService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.accounts = AccountService(session)

    def _resolve_client(self, client_id: UUID, requested_by: UUID) -> Client:
        client = self.session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client not found")
        if client.coach_id != requested_by and not self.accounts.is_admin(requested_by):
            raise NotFoundError("Client not found")
        return client

    def aggregate(
        self,
        client_id: UUID,
        start_date: date,
        end_date: date,
        requested_by: UUID,
    ) -> AggregatedReport:
        """Collect the coach's closed shifts and the client's notes for a date range.

        Consumer hours attach to a shift through the first note written on the same calendar day.
        Several shifts on one day all pick up that same note.
        """
        window_start, window_end = report_window(start_date, end_date)
        client = self._resolve_client(client_id, requested_by)
        coach_id = client.coach_id

        shifts = self.session.exec(
            select(Shift)
            .where(Shift.worker_id == coach_id)
            .where(Shift.clock_out_at.is_not(None))  # type: ignore[union-attr]
            .where(Shift.clock_in_at >= window_start)
            .where(Shift.clock_in_at <= window_end)
            .order_by(Shift.clock_in_at)
        ).all()

        entries = self.session.exec(
            select(Entry)
            .where(Entry.worker_id == coach_id)
            .where(Entry.client_name == client.full_name)
            .where(Entry.created_at >= window_start)
            .where(Entry.created_at <= window_end)
            .order_by(Entry.created_at)
        ).all()

        first_entry_by_day: Dict[date, Entry] = {}
        for entry in entries:
            first_entry_by_day.setdefault(entry.created_at.date(), entry)

        rows: List[ShiftRow] = []
        for shift in shifts:
            shift_day = shift.clock_in_at.date()
            matched = first_entry_by_day.get(shift_day)
            rows.append(
                ShiftRow(
                    day=shift_day,
                    clock_in_at=shift.clock_in_at,
                    clock_out_at=shift.clock_out_at,  # type: ignore[arg-type]
                    coach_hours=shift.duration_hours(),
                    consumer_hours=matched.consumer_hours if matched else None,
                )
            )

        days: Dict[date, NarrativeDay] = {}
        for entry in entries:
            if not entry.formatted_note:
                continue
            entry_day = entry.created_at.date()
            bucket = days.setdefault(entry_day, NarrativeDay(day=entry_day, label=day_label(entry_day)))
            status = entry.status.value if hasattr(entry.status, "value") else str(entry.status)
            bucket.entries.append(
                NarrativeEntry(created_at=entry.created_at, status=status, formatted_note=entry.formatted_note)
            )

        profile = self.accounts.get_profile(coach_id)
        return AggregatedReport(
            client=client,
            coach_name=profile.full_name if profile else None,
            start_date=start_date,
            end_date=end_date,
            shifts=rows,
            days=[days[key] for key in sorted(days)],
            total_coach_hours=sum(row.coach_hours for row in rows),
            total_consumer_hours=sum(row.consumer_hours or 0.0 for row in rows),
        )
