from datetime import datetime
from uuid import UUID

from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class Shift(UUIDModel, TimestampedModel, table=True):
    __tablename__ = "shifts"

    worker_id: UUID = Field(foreign_key="users.id", index=True)
    clock_in_at: datetime = Field(nullable=False, index=True)
    clock_in_lat: float | None = Field(default=None)
    clock_in_lng: float | None = Field(default=None)
    clock_out_at: datetime | None = Field(default=None, index=True)
    clock_out_lat: float | None = Field(default=None)
    clock_out_lng: float | None = Field(default=None)

    @property
    def is_open(self) -> bool:
        return self.clock_out_at is None

    def duration_hours(self) -> float:
        if self.clock_out_at is None:
            return 0.0
        return (self.clock_out_at - self.clock_in_at).total_seconds() / 3600
