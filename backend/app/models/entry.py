from enum import Enum
from uuid import UUID

from sqlalchemy import JSON
from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class SiteStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class Entry(UUIDModel, TimestampedModel, table=True):
    """Field note recorded by a coach for one client."""

    __tablename__ = "entries"

    worker_id: UUID = Field(foreign_key="users.id", index=True)
    shift_id: UUID | None = Field(default=None, foreign_key="shifts.id")
    client_name: str | None = Field(default=None, max_length=180, index=True)
    status: SiteStatus = Field(default=SiteStatus.YELLOW)
    raw_transcript: str | None = Field(default=None)
    formatted_note: str | None = Field(default=None)
    summary: str | None = Field(default=None)
    tags: list | None = Field(default_factory=list, sa_type=JSON)
    consumer_hours: float | None = Field(default=None)
    gps_lat: float | None = Field(default=None)
    gps_lng: float | None = Field(default=None)
