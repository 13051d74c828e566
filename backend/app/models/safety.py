from datetime import datetime
from uuid import UUID

from sqlalchemy import Index, text
from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class ClientSafetyToken(UUIDModel, TimestampedModel, table=True):
    __tablename__ = "client_safety_tokens"
    __table_args__ = (
        Index(
            "uq_client_safety_tokens_live_client",
            "client_id",
            unique=True,
            sqlite_where=text("revoked_at IS NULL"),
            postgresql_where=text("revoked_at IS NULL"),
        ),
    )

    client_id: UUID = Field(foreign_key="clients.id", index=True)
    token: str = Field(index=True, unique=True, max_length=128)
    created_by: UUID = Field(foreign_key="users.id")
    revoked_at: datetime | None = Field(default=None)
