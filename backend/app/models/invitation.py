from datetime import datetime
from uuid import UUID

from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class Invitation(UUIDModel, TimestampedModel, table=True):
    __tablename__ = "invitations"

    email: str = Field(index=True, max_length=255)
    token: str = Field(index=True, unique=True, max_length=128)
    invited_by: UUID = Field(foreign_key="users.id", index=True)
    expires_at: datetime = Field(nullable=False)
    used_at: datetime | None = Field(default=None)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
