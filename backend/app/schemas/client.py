from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ClientBase(BaseModel):
    uci_number: str | None = Field(default=None, max_length=64)
    employer_worksite: str | None = Field(default=None, max_length=255)
    job_title: str | None = Field(default=None, max_length=180)
    job_site: str | None = Field(default=None, max_length=255)
    vendor: str | None = Field(default=None, max_length=180)
    se_service_provider: str | None = Field(default=None, max_length=180)
    counselor_name: str | None = Field(default=None, max_length=180)
    hourly_wage: float | None = Field(default=None, ge=0)
    goals: str | None = None
    ipe_goal: str | None = None
    emergency_contact_name: str | None = Field(default=None, max_length=180)
    emergency_contact_phone: str | None = Field(default=None, max_length=32)


class ClientCreate(ClientBase):
    full_name: str = Field(min_length=1, max_length=180)


class ClientUpdate(ClientBase):
    full_name: str | None = Field(default=None, min_length=1, max_length=180)


class ClientRead(ClientBase):
    id: UUID
    coach_id: UUID
    full_name: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
