from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class SafetyLinkGenerateRequest(BaseModel):
    client_id: UUID


class SafetyLinkResponse(BaseModel):
    token: str
    link: str
    is_existing: bool
    client_name: str | None = None


class SafetyLinkRevokeRequest(BaseModel):
    client_id: UUID | None = None
    token_id: UUID | None = None

    @model_validator(mode="after")
    def _require_target(self) -> "SafetyLinkRevokeRequest":
        if self.client_id is None and self.token_id is None:
            raise ValueError("client_id or token_id is required")
        return self


class SafetyLinkRevokeResponse(BaseModel):
    success: bool = True
    message: str = "Safety link revoked"


class SOSTriggerRequest(BaseModel):
    token: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class AlertResult(BaseModel):
    success: bool
    use_fallback: bool
    message: str
    phone_numbers: list[str] = Field(default_factory=list)
    sent_count: int = 0
    failed_count: int = 0
    client_name: str | None = None
    detail: str | None = None
