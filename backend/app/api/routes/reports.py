from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from app.api.deps import get_current_active_user, get_db
from app.models.user import User
from app.services.report import ReportService
from app.services.reporting import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/generate-pdf")
def generate_pdf(
    client_id: UUID = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    report = ReportingService(session).aggregate(client_id, start_date, end_date, requested_by=current_user.id)
    rendered = ReportService().render(report)
    return Response(
        content=rendered.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{rendered.filename}"',
            "X-Page-Count": str(rendered.page_count),
        },
    )
