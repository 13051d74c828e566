from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from app.core.errors import NotFoundError
from app.models.invitation import Invitation
from app.models.safety import ClientSafetyToken
from app.services.tokens import generate_token, invitation_tokens, safety_tokens
from tests.conftest import create_client_record


def test_issue_produces_distinct_tokens():
    tokens = {generate_token() for _ in range(10_000)}
    assert len(tokens) == 10_000


def test_issue_is_url_safe_and_long_enough():
    token = generate_token()
    # 32 random bytes encode to 43 URL-safe base64 characters.
    assert len(token) >= 43
    assert all(ch.isalnum() or ch in "-_" for ch in token)


def _store_invitation(session, admin_user, token: str) -> Invitation:
    invitation = Invitation(
        email="someone@example.com",
        token=token,
        invited_by=admin_user.id,
        expires_at=datetime.utcnow() + timedelta(days=7),
    )
    session.add(invitation)
    session.commit()
    session.refresh(invitation)
    return invitation


def test_find_returns_matching_record(db_session, admin_user):
    store = invitation_tokens(db_session)
    stored = _store_invitation(db_session, admin_user, store.issue())

    found = store.find(stored.token)

    assert found.id == stored.id


@pytest.mark.parametrize("token", [None, "", "   ", "does-not-exist"])
def test_find_unknown_token_raises_not_found(db_session, token):
    with pytest.raises(NotFoundError):
        invitation_tokens(db_session).find(token)


def test_invalidate_is_idempotent(db_session, admin_user):
    store = invitation_tokens(db_session)
    invitation = _store_invitation(db_session, admin_user, store.issue())

    store.invalidate(invitation)
    first_marker = invitation.used_at
    store.invalidate(invitation)

    assert first_marker is not None
    assert invitation.used_at == first_marker
    assert store.is_invalidated(invitation)


def test_claim_succeeds_only_once(db_session, admin_user):
    store = invitation_tokens(db_session)
    invitation = _store_invitation(db_session, admin_user, store.issue())

    assert store.claim(invitation) is True
    assert store.claim(invitation) is False

    store.release(invitation)
    assert invitation.used_at is None
    assert store.claim(invitation) is True


def test_safety_store_uses_revoked_marker(db_session, coach_user):
    client = create_client_record(db_session, coach_user)
    store = safety_tokens(db_session)

    record = ClientSafetyToken(client_id=client.id, token=store.issue(), created_by=coach_user.id)
    db_session.add(record)
    db_session.commit()

    store.invalidate(record)

    assert record.revoked_at is not None
    assert store.is_invalidated(store.find(record.token))


def test_invitation_round_trips_through_the_session(db_session, admin_user):
    expires_at = datetime(2026, 1, 19, 8, 30)
    invitation = Invitation(
        email="roundtrip@example.com",
        token=generate_token(),
        invited_by=admin_user.id,
        expires_at=expires_at,
    )
    db_session.add(invitation)
    db_session.commit()
    invitation_id = invitation.id
    db_session.expunge_all()

    stored = db_session.get(Invitation, invitation_id)

    assert stored.expires_at == expires_at
    assert stored.created_at is not None
    assert stored.used_at is None
    assert stored.is_expired(datetime(2026, 1, 19, 8, 29)) is False
    assert stored.is_expired(datetime(2026, 1, 19, 8, 30)) is True
