"""Reports API routes — report data preview."""

from fastapi import APIRouter, Depends

from app.interfaces.deps import get_ticket_repository
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.report import ReportData, ReportParams
from app.application.services.report_service import generate_report_data

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.post("/preview", response_model=ReportData)
def report_preview(params: ReportParams, repo: TicketRepository = Depends(get_ticket_repository)):
    return generate_report_data(repo, params)
