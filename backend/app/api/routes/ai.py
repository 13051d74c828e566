from fastapi import APIRouter, Depends, File, UploadFile

from app.api.deps import get_ai_service, get_current_active_user
from app.models.user import User
from app.schemas.ai import FormatNoteRequest, FormattedNote, TranscriptionResponse
from app.services.ai import AIService

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(
    audio: UploadFile = File(...),
    service: AIService = Depends(get_ai_service),
    current_user: User = Depends(get_current_active_user),
) -> TranscriptionResponse:
    data = await audio.read()
    transcript = service.transcribe(audio.filename, audio.content_type, data)
    return TranscriptionResponse(transcript=transcript)


@router.post("/format-note", response_model=FormattedNote)
def format_note(
    payload: FormatNoteRequest,
    service: AIService = Depends(get_ai_service),
    current_user: User = Depends(get_current_active_user),
) -> FormattedNote:
    return service.format_note(
        payload.transcript,
        client_name=payload.client_name,
        client_goals=payload.client_goals,
        ipe_goal=payload.ipe_goal,
        mood=payload.mood,
    )
