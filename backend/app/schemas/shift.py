from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ClockRequest(BaseModel):
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class ShiftRead(BaseModel):
    id: UUID
    worker_id: UUID
    clock_in_at: datetime
    clock_in_lat: float | None = None
    clock_in_lng: float | None = None
    clock_out_at: datetime | None = None
    clock_out_lat: float | None = None
    clock_out_lng: float | None = None
    duration_hours: float | None = None

    model_config = ConfigDict(from_attributes=True)
