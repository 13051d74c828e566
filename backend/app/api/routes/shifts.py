from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.api.deps import get_current_active_user, get_db
from app.models.shift import Shift
from app.models.user import User
from app.schemas.shift import ClockRequest, ShiftRead
from app.services.shift import ShiftService

router = APIRouter(prefix="/shifts", tags=["shifts"])


def _to_read(shift: Shift) -> ShiftRead:
    read = ShiftRead.model_validate(shift.model_dump())
    if shift.clock_out_at is not None:
        read.duration_hours = round(shift.duration_hours(), 2)
    return read


@router.post("/clock-in", response_model=ShiftRead, status_code=status.HTTP_201_CREATED)
def clock_in(
    payload: ClockRequest,
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ShiftRead:
    shift = ShiftService(session).clock_in(current_user.id, payload.latitude, payload.longitude)
    return _to_read(shift)


@router.post("/clock-out", response_model=ShiftRead)
def clock_out(
    payload: ClockRequest,
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ShiftRead:
    shift = ShiftService(session).clock_out(current_user.id, payload.latitude, payload.longitude)
    return _to_read(shift)


@router.get("/active", response_model=ShiftRead | None)
def active_shift(
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ShiftRead | None:
    shift = ShiftService(session).get_active_shift(current_user.id)
    return _to_read(shift) if shift else None


@router.get("", response_model=list[ShiftRead])
def list_shifts(
    limit: int = Query(default=50, ge=1, le=500),
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[ShiftRead]:
    return [_to_read(shift) for shift in ShiftService(session).list_shifts(current_user.id, limit=limit)]
