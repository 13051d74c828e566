from enum import Enum
from uuid import UUID

from sqlalchemy import JSON
from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class AlertSource(str, Enum):
    CLIENT_SOS = "client_sos"
    COACH_SOS = "coach_sos"


class AlertOutcome(str, Enum):
    SENT = "sent"
    PARTIAL = "partial"
    FALLBACK = "fallback"
    FAILED = "failed"


class EmergencyLog(UUIDModel, TimestampedModel, table=True):
    __tablename__ = "emergency_logs"

    coach_id: UUID | None = Field(default=None, foreign_key="users.id", index=True)
    client_id: UUID | None = Field(default=None, foreign_key="clients.id", index=True)
    source: str = Field(default=AlertSource.CLIENT_SOS.value, max_length=32)
    latitude: float | None = Field(default=None)
    longitude: float | None = Field(default=None)
    message_sent: str
    recipients_count: int = Field(default=0)
    sent_count: int = Field(default=0)
    failed_count: int = Field(default=0)
    outcome: str = Field(default=AlertOutcome.FALLBACK.value, max_length=16)
    details: dict | None = Field(default_factory=dict, sa_type=JSON)
