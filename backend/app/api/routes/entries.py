from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.api.deps import get_current_active_user, get_db
from app.models.user import User
from app.schemas.entry import EntryCreate, EntryRead
from app.services.entry import EntryService

router = APIRouter(prefix="/entries", tags=["entries"])


@router.post("", response_model=EntryRead, status_code=status.HTTP_201_CREATED)
def create_entry(
    payload: EntryCreate,
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> EntryRead:
    entry = EntryService(session).create_entry(current_user.id, payload)
    return EntryRead.model_validate(entry)


@router.get("", response_model=list[EntryRead])
def list_entries(
    client_name: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[EntryRead]:
    entries = EntryService(session).list_entries(current_user.id, client_name=client_name, limit=limit)
    return [EntryRead.model_validate(entry) for entry in entries]
