from pydantic import BaseModel


class CoachSOSRequest(BaseModel):
    latitude: float | None = None
    longitude: float | None = None


class CoachSOSResponse(BaseModel):
    success: bool = True
    message: str = "Emergency alert sent successfully"
    sent_to: int
    failed: int = 0
