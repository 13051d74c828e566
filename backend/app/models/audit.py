from __future__ import annotations

from uuid import UUID

from sqlalchemy import JSON
from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class AuditLog(UUIDModel, TimestampedModel, table=True):
    __tablename__ = "audit_logs"

    event_type: str = Field(index=True)
    actor_id: UUID | None = Field(default=None, foreign_key="users.id")
    actor_role: str | None = Field(default=None)
    entity_type: str | None = Field(default=None, max_length=64)
    entity_id: UUID | None = Field(default=None, index=True)
    ip_address: str | None = Field(default=None)
    user_agent: str | None = Field(default=None)
    details: dict | None = Field(default_factory=dict, sa_type=JSON)


class AuthLog(UUIDModel, TimestampedModel, table=True):
    __tablename__ = "auth_logs"

    user_id: UUID | None = Field(default=None, foreign_key="users.id", index=True)
    event_type: str = Field(index=True)
    ip_address: str | None = Field(default=None)
    user_agent: str | None = Field(default=None)
    success: bool = Field(default=True)
