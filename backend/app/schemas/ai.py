from pydantic import BaseModel, Field

from app.schemas.entry import Mood


class TranscriptionResponse(BaseModel):
    transcript: str


class FormatNoteRequest(BaseModel):
    transcript: str = Field(min_length=1)
    client_name: str | None = None
    client_goals: str | None = None
    ipe_goal: str | None = None
    mood: Mood = Mood.NEUTRAL


class FormattedNote(BaseModel):
    formatted_note: str
    summary: str = ""
    tags: list[str] = Field(default_factory=list)
