from __future__ import annotations

import uuid

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

from app.api.deps import get_db
from app.core.config import settings
from app.db import session as db_session_module
from app.db.session import enable_sqlite_foreign_keys
from app.main import app
from app.models.client import Client
from app.models.user import User, UserRole
from app.services.accounts import AccountService

DEFAULT_PASSWORD = "password123"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep a developer's .env from reaching real SMTP, Twilio or OpenAI endpoints."""
    for name in (
        "smtp_host",
        "smtp_sender",
        "twilio_account_sid",
        "twilio_auth_token",
        "twilio_from_number",
        "twilio_messaging_service_sid",
        "emergency_contact_1",
        "emergency_contact_2",
        "openai_api_key",
    ):
        monkeypatch.setattr(settings, name, None)
    monkeypatch.setattr(settings, "public_app_url", "http://app.test")
    monkeypatch.setattr(settings, "alert_timezone", "America/Los_Angeles")
    yield


@pytest.fixture()
def db_engine(tmp_path):
    db_path = tmp_path / f"test_{uuid.uuid4().hex}.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    SQLModel.metadata.create_all(bind=engine)

    original_engine = db_session_module.engine
    db_session_module.engine = engine

    def override_dependency():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_dependency

    yield engine

    app.dependency_overrides.pop(get_db, None)
    db_session_module.engine = original_engine
    engine.dispose()


@pytest.fixture()
def client(db_engine) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(db_engine) -> Session:
    with Session(db_engine) as session:
        yield session


@pytest.fixture()
def sms_settings(monkeypatch):
    monkeypatch.setattr(settings, "twilio_account_sid", "AC123")
    monkeypatch.setattr(settings, "twilio_auth_token", "secret")
    monkeypatch.setattr(settings, "twilio_from_number", "+15550000000")
    monkeypatch.setattr(settings, "emergency_contact_1", "+15550000001")
    monkeypatch.setattr(settings, "emergency_contact_2", "+15550000002")
    yield


def create_user(
    session: Session,
    email: str | None = None,
    *,
    role: UserRole = UserRole.WORKER,
    full_name: str = "Test Coach",
    password: str = DEFAULT_PASSWORD,
) -> User:
    accounts = AccountService(session)
    user = accounts.create_account(email or f"{uuid.uuid4().hex[:8]}@example.com", password)
    accounts.create_profile(user, full_name=full_name, role=role)
    return user


def create_client_record(session: Session, coach: User, **overrides) -> Client:
    data = {"full_name": "Casey Client", "uci_number": "UCI-001", "vendor": "Pathways"}
    data.update(overrides)
    record = Client(coach_id=coach.id, **data)
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


@pytest.fixture()
def admin_user(db_session) -> User:
    return create_user(db_session, "admin@example.com", role=UserRole.ADMIN, full_name="Alex Admin")


@pytest.fixture()
def coach_user(db_session) -> User:
    return create_user(db_session, "coach@example.com", full_name="Jordan Coach")


@pytest.fixture()
def other_coach(db_session) -> User:
    return create_user(db_session, "other@example.com", full_name="Riley Other")


def login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
    response = client.post(
        f"{settings.api_v1_str}/auth/login",
        json={"username": email, "password": password},
    )
    assert response.status_code == status.HTTP_200_OK, response.json()
    return response.json()


def auth_headers(token: dict[str, str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {token['access_token']}"}


class FakeSMTP:
    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.logged_in = None
        self.sent_messages = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, message):
        self.sent_messages.append(message)
