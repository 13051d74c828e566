from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class InvitationCreate(BaseModel):
    email: EmailStr


class InvitationCreated(BaseModel):
    id: UUID
    email: str
    token: str
    link: str
    expires_at: datetime
    email_sent: bool = False


class InvitationVerifyResponse(BaseModel):
    id: UUID
    email: str


class SetupCredentialsRequest(BaseModel):
    token: str
    full_name: str = Field(default="", max_length=180)
    password: str
    confirm_password: str | None = None


class SetupCredentialsResponse(BaseModel):
    user_id: UUID
    email: str
    message: str = "Account created successfully"


class InvitationRead(BaseModel):
    id: UUID
    email: str
    invited_by: UUID
    expires_at: datetime
    used_at: datetime | None = None
    created_at: datetime
    status: str = "pending"

    model_config = ConfigDict(from_attributes=True)
