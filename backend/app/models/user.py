from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlmodel import Field, SQLModel

from app.models.base import TimestampedModel, UUIDModel, utcnow


class UserRole(str, Enum):
    ADMIN = "admin"
    WORKER = "worker"


class User(UUIDModel, TimestampedModel, table=True):
    """Login account held by the identity layer."""

    __tablename__ = "users"

    email: str = Field(index=True, unique=True, max_length=255)
    password_hash: str
    is_active: bool = Field(default=True)
    last_login_at: datetime | None = Field(default=None)


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"

    id: UUID = Field(foreign_key="users.id", primary_key=True)
    email: str = Field(index=True, max_length=255)
    full_name: str | None = Field(default=None, max_length=180)
    role: str = Field(default=UserRole.WORKER.value, index=True, max_length=16)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime | None = Field(default=None)
