from __future__ import annotations

from uuid import uuid4

import pytest

from app.core.errors import ConflictError, NotFoundError
from app.models.entry import SiteStatus
from app.schemas.client import ClientCreate, ClientUpdate
from app.schemas.entry import EntryCreate, Mood
from app.services.client import ClientService
from app.services.entry import EntryService
from app.services.shift import ShiftService
from tests.conftest import create_client_record


def test_clock_in_and_out(db_session, coach_user):
    service = ShiftService(db_session)

    shift = service.clock_in(coach_user.id, 34.05, -118.25)

    assert shift.is_open
    assert shift.clock_in_lat == 34.05
    assert service.get_active_shift(coach_user.id).id == shift.id

    closed = service.clock_out(coach_user.id, 34.06, -118.26)

    assert closed.id == shift.id
    assert not closed.is_open
    assert closed.clock_out_lng == -118.26
    assert closed.duration_hours() >= 0
    assert service.get_active_shift(coach_user.id) is None
    assert [item.id for item in service.list_shifts(coach_user.id)] == [shift.id]


def test_double_clock_in_conflicts(db_session, coach_user):
    service = ShiftService(db_session)
    service.clock_in(coach_user.id)

    with pytest.raises(ConflictError):
        service.clock_in(coach_user.id)


def test_clock_out_without_shift(db_session, coach_user):
    with pytest.raises(NotFoundError):
        ShiftService(db_session).clock_out(coach_user.id)


def test_shifts_are_per_worker(db_session, coach_user, other_coach):
    service = ShiftService(db_session)
    service.clock_in(coach_user.id)

    assert service.get_active_shift(other_coach.id) is None
    service.clock_in(other_coach.id)


def test_entry_links_active_shift_and_maps_mood(db_session, coach_user):
    client = create_client_record(db_session, coach_user)
    shift = ShiftService(db_session).clock_in(coach_user.id)

    entry = EntryService(db_session).create_entry(
        coach_user.id,
        EntryCreate(
            client_id=client.id,
            mood=Mood.GOOD,
            formatted_note="**Tasks & Productivity:** Stocked shelves.",
            tags=["Tasks"],
            consumer_hours=2.5,
        ),
    )

    assert entry.shift_id == shift.id
    assert entry.client_name == "Casey Client"
    assert entry.status == SiteStatus.GREEN
    assert entry.tags == ["Tasks"]


def test_entry_without_shift(db_session, coach_user):
    client = create_client_record(db_session, coach_user)

    entry = EntryService(db_session).create_entry(
        coach_user.id,
        EntryCreate(client_id=client.id, mood=Mood.BAD, formatted_note="Rough morning."),
    )

    assert entry.shift_id is None
    assert entry.status == SiteStatus.RED
    assert [item.id for item in EntryService(db_session).list_entries(coach_user.id, "Casey Client")] == [entry.id]


def test_entry_for_someone_elses_client_is_not_found(db_session, coach_user, other_coach):
    client = create_client_record(db_session, coach_user)

    with pytest.raises(NotFoundError):
        EntryService(db_session).create_entry(
            other_coach.id,
            EntryCreate(client_id=client.id, formatted_note="Not mine."),
        )


def test_client_crud(db_session, coach_user, other_coach):
    service = ClientService(db_session)

    created = service.create_client(coach_user.id, ClientCreate(full_name="  Sam Client  ", vendor="Pathways"))

    assert created.full_name == "Sam Client"
    assert service.find_by_name(coach_user.id, "Sam Client").id == created.id
    assert service.find_by_name(other_coach.id, "Sam Client") is None
    assert service.list_clients(other_coach.id) == []

    updated = service.update_client(created.id, coach_user.id, ClientUpdate(job_site="Grocery Outlet"))

    assert updated.job_site == "Grocery Outlet"
    assert updated.vendor == "Pathways"
    assert updated.updated_at is not None
    with pytest.raises(NotFoundError):
        service.update_client(created.id, other_coach.id, ClientUpdate(job_site="Elsewhere"))
    with pytest.raises(NotFoundError):
        service.get_owned_client(uuid4(), coach_user.id)
