from datetime import datetime, timedelta

from sqlmodel import Session, select

from app.models.audit import AuditLog, AuthLog
from app.models.user import User, UserRole
from app.services.audit import AuditService
from tests.conftest import create_client_record


def test_audit_service_records_events(db_session: Session, coach_user: User) -> None:
    service = AuditService(db_session)
    client = create_client_record(db_session, coach_user)

    service.record_event(
        event_type="safety_link_generated",
        actor_id=coach_user.id,
        actor_role=UserRole.WORKER.value,
        entity_type="client",
        entity_id=client.id,
        ip_address="127.0.0.1",
        user_agent="pytest",
        details={"is_existing": False},
    )

    stored = db_session.exec(select(AuditLog)).one()
    assert stored.entity_id == client.id
    assert stored.entity_type == "client"
    assert stored.actor_id == coach_user.id
    assert stored.details["is_existing"] is False


def test_audit_service_filters_and_pages(db_session: Session, admin_user: User) -> None:
    service = AuditService(db_session)

    past = datetime.utcnow() - timedelta(days=1)
    for index in range(3):
        service.record_event("invitation_created", actor_id=admin_user.id, details={"index": index})
    service.record_event("invitation_consumed", actor_id=None)

    items, total = service.list_events(
        event_type="invitation_created",
        start_at=past,
        end_at=datetime.utcnow() + timedelta(minutes=1),
        page=1,
        page_size=2,
    )

    assert total == 3
    assert len(items) == 2
    assert {item.event_type for item in items} == {"invitation_created"}

    everything, total_all = service.list_events()
    assert total_all == 4
    assert len(everything) == 4


def test_audit_service_records_auth(db_session: Session, coach_user: User) -> None:
    service = AuditService(db_session)

    service.record_auth(
        user_id=coach_user.id,
        event_type="login",
        ip_address="10.0.0.1",
        user_agent="pytest",
        success=False,
    )

    stored = db_session.exec(select(AuthLog)).one()
    assert stored.user_id == coach_user.id
    assert stored.success is False
    assert stored.ip_address == "10.0.0.1"
