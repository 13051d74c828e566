from pydantic import BaseModel, Field

from app.schemas.auth import ProfileRead
from app.schemas.invitation import InvitationRead


class AdminStats(BaseModel):
    total_coaches: int = 0
    pending_invitations: int = 0
    total_entries: int = 0
    today_entries: int = 0


class AdminStatsResponse(BaseModel):
    stats: AdminStats
    recent_coaches: list[ProfileRead] = Field(default_factory=list)


class CoachListResponse(BaseModel):
    coaches: list[ProfileRead] = Field(default_factory=list)
    count: int = 0


class InvitationListResponse(BaseModel):
    invitations: list[InvitationRead] = Field(default_factory=list)
    count: int = 0
