from __future__ import annotations

import secrets
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from app.core.errors import NotFoundError, UpstreamError
from app.core.logging_setup import logger
from app.models.base import utcnow
from app.models.invitation import Invitation
from app.models.password_reset import PasswordResetToken
from app.models.safety import ClientSafetyToken

TOKEN_BYTES = 32

RecordT = TypeVar("RecordT", bound=SQLModel)


def generate_token() -> str:
    """Random URL-safe bearer token carrying 256 bits of entropy."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class TokenStore(Generic[RecordT]):
    """Opaque bearer tokens stored on ``model`` with a nullable terminal ``marker`` column.

    A record whose marker is set (``used_at`` for invitations and password resets,
    ``revoked_at`` for safety tokens) is finished for good; ``invalidate`` only ever moves
    it forward.
    """

    def __init__(self, session: Session, model: type[RecordT], marker: str) -> None:
        self.session = session
        self.model = model
        self.marker = marker

    @staticmethod
    def issue() -> str:
        return generate_token()

    def find(self, token: str | None) -> RecordT:
        normalized = (token or "").strip()
        if not normalized:
            raise NotFoundError("Token not found")
        statement = select(self.model).where(self.model.token == normalized)  # type: ignore[attr-defined]
        record = self.session.exec(statement).first()
        if record is None:
            raise NotFoundError("Token not found")
        return record

    def is_invalidated(self, record: RecordT) -> bool:
        return getattr(record, self.marker) is not None

    def invalidate(self, record: RecordT, at: datetime | None = None) -> RecordT:
        if self.is_invalidated(record):
            return record
        setattr(record, self.marker, at or utcnow())
        record.updated_at = utcnow()  # type: ignore[attr-defined]
        self.session.add(record)
        self._commit()
        self.session.refresh(record)
        return record

    def claim(self, record: RecordT, at: datetime | None = None) -> bool:
        """Set the marker only if nobody else did; True when this caller won the race."""
        marker_column = getattr(self.model, self.marker)
        statement = (
            update(self.model)
            .where(self.model.id == record.id)  # type: ignore[attr-defined]
            .where(marker_column.is_(None))
            .values({self.marker: at or utcnow(), "updated_at": utcnow()})
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        self._commit()
        self.session.refresh(record)
        return result.rowcount == 1

    def release(self, record: RecordT) -> None:
        """Undo a claim whose follow-up work had to be compensated."""
        setattr(record, self.marker, None)
        record.updated_at = utcnow()  # type: ignore[attr-defined]
        self.session.add(record)
        self._commit()

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Token store write failed on %s: %s", self.model.__name__, exc)
            raise UpstreamError("Failed to update token") from exc


def invitation_tokens(session: Session) -> TokenStore[Invitation]:
    return TokenStore(session, Invitation, marker="used_at")


def safety_tokens(session: Session) -> TokenStore[ClientSafetyToken]:
    return TokenStore(session, ClientSafetyToken, marker="revoked_at")


def password_reset_tokens(session: Session) -> TokenStore[PasswordResetToken]:
    return TokenStore(session, PasswordResetToken, marker="used_at")
