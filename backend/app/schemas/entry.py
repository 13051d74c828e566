from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.entry import SiteStatus


class Mood(str, Enum):
    GOOD = "good"
    NEUTRAL = "neutral"
    BAD = "bad"


class EntryCreate(BaseModel):
    client_id: UUID
    mood: Mood = Mood.NEUTRAL
    raw_transcript: str | None = None
    formatted_note: str = Field(min_length=1)
    summary: str | None = None
    tags: list[str] = Field(default_factory=list)
    consumer_hours: float | None = Field(default=None, ge=0, le=24)
    latitude: float | None = None
    longitude: float | None = None


class EntryRead(BaseModel):
    id: UUID
    worker_id: UUID
    shift_id: UUID | None = None
    client_name: str | None = None
    status: SiteStatus
    raw_transcript: str | None = None
    formatted_note: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    consumer_hours: float | None = None
    gps_lat: float | None = None
    gps_lng: float | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
