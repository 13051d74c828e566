from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str | None = None


class LoginRequest(BaseModel):
    username: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ProfileRead(BaseModel):
    id: UUID
    email: str
    full_name: str | None = None
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ForgotPasswordResponse(BaseModel):
    message: str = "If an account exists for this email, a reset link has been sent"


class ResetPasswordRequest(BaseModel):
    token: str
    password: str
    confirm_password: str | None = None


class PasswordResetResponse(BaseModel):
    user_id: UUID
    email: str
    message: str = "Password updated successfully"
