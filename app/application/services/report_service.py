"""Report data — tickets and totals for a period, ready for export."""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

import pytz

from app.application.services.ticket_service import day_bounds
from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException
from app.domain.models.ticket import INTERNAL_STATUS_DONE, INTERNAL_STATUS_IN_REVIEW, INTERNAL_STATUS_PENDING
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.report import ReportData, ReportMetadata, ReportParams, ReportStatistics
from app.domain.schemas.ticket import TicketRead

settings = get_settings()
tz = pytz.timezone(settings.TIMEZONE)

RELATIVE_PERIODS = {
    "last7": (7, "Últimos 7 dias"),
    "last30": (30, "Últimos 30 dias"),
    "last90": (90, "Últimos 90 dias"),
    "last365": (365, "Último ano"),
}


def resolve_period(params: ReportParams, today: Optional[date] = None) -> Tuple[Optional[date], Optional[date], str]:
    """Turn the period selection into a date range and a display label."""
    today = today or datetime.now(tz).date()

    if params.period_type == "all":
        return None, None, "Todos os dados"

    if params.period_type == "custom":
        if not params.start_date or not params.end_date:
            raise BusinessRuleViolationException("Por favor, selecione as datas inicial e final")
        if params.start_date > params.end_date:
            raise BusinessRuleViolationException("A data inicial não pode ser maior que a data final")
        if params.start_date > today or params.end_date > today:
            raise BusinessRuleViolationException("Não é permitido selecionar datas futuras")
        label = f"{params.start_date.strftime('%d/%m/%Y')} a {params.end_date.strftime('%d/%m/%Y')}"
        return params.start_date, params.end_date, label

    days, label = RELATIVE_PERIODS[params.period_type]
    return today - timedelta(days=days), today, label


def generate_report_data(repo: TicketRepository, params: ReportParams, today: Optional[date] = None) -> ReportData:
    start_date, end_date, label = resolve_period(params, today)
    start, end = day_bounds(start_date, end_date)

    tickets = [TicketRead.model_validate(t) for t in repo.list_by_created_range(start, end)]

    statistics = ReportStatistics(
        total_value=round(sum(t.pnr_value or 0 for t in tickets), 2),
        pending_count=sum(1 for t in tickets if t.internal_status == INTERNAL_STATUS_PENDING),
        in_review_count=sum(1 for t in tickets if t.internal_status == INTERNAL_STATUS_IN_REVIEW),
        done_count=sum(1 for t in tickets if t.internal_status == INTERNAL_STATUS_DONE),
    )
    metadata = ReportMetadata(
        period=label,
        total_records=len(tickets),
        generated_at=datetime.now(tz),
    )
    return ReportData(metadata=metadata, statistics=statistics, tickets=tickets)
