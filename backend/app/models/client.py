from __future__ import annotations

from uuid import UUID

from sqlmodel import Field

from app.models.base import TimestampedModel, UUIDModel


class Client(UUIDModel, TimestampedModel, table=True):
    """Consumer receiving job-coaching services."""

    __tablename__ = "clients"

    coach_id: UUID = Field(foreign_key="users.id", index=True)
    full_name: str = Field(max_length=180, index=True)
    uci_number: str | None = Field(default=None, max_length=64)
    employer_worksite: str | None = Field(default=None, max_length=255)
    job_title: str | None = Field(default=None, max_length=180)
    job_site: str | None = Field(default=None, max_length=255)
    vendor: str | None = Field(default=None, max_length=180)
    se_service_provider: str | None = Field(default=None, max_length=180)
    counselor_name: str | None = Field(default=None, max_length=180)
    hourly_wage: float | None = Field(default=None)
    goals: str | None = Field(default=None)
    ipe_goal: str | None = Field(default=None)
    emergency_contact_name: str | None = Field(default=None, max_length=180)
    emergency_contact_phone: str | None = Field(default=None, max_length=32)
