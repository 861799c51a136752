"""Ticket service — operator edits, bulk status changes and dashboard stats."""

from datetime import date, datetime, time
from typing import List, Optional, Tuple

import pytz
import structlog

from app.application.services.tracking_codes import parse_tracking_codes
from app.config import get_settings
from app.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from app.domain.models.ticket import INTERNAL_STATUSES
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.ticket import (
    BulkStatusResult,
    DistributionItem,
    KpiStats,
    TicketInternalChange,
    TicketInternalUpdate,
    TicketRead,
    TicketStats,
    TrackingLookupResult,
)

settings = get_settings()
tz = pytz.timezone(settings.TIMEZONE)
logger = structlog.get_logger(__name__)


def _validate_status(status: str) -> None:
    if status not in INTERNAL_STATUSES:
        raise BusinessRuleViolationException(
            f"Status interno inválido: {status}",
            details={"allowed": list(INTERNAL_STATUSES)},
        )


def day_bounds(start_date: Optional[date], end_date: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Local calendar days → aware datetimes covering the whole of each day."""
    start = tz.localize(datetime.combine(start_date, time.min)) if start_date else None
    end = tz.localize(datetime.combine(end_date, time.max)) if end_date else None
    return start, end


def update_ticket_internal(repo: TicketRepository, ticket_id: str, changes: TicketInternalUpdate) -> TicketInternalChange:
    """Edit the operator-owned fields of one ticket.

    ``internal_status_updated_at`` only moves when the status really changes.
    The previous values are returned so the caller can revert the edit.
    """
    ticket = repo.get_by_ticket_id(ticket_id)
    if ticket is None:
        raise EntityNotFoundException(f"Ticket {ticket_id} não encontrado")

    previous_status = ticket.internal_status
    previous_notes = ticket.internal_notes

    values = {}
    status_changed = False
    if changes.internal_status is not None:
        _validate_status(changes.internal_status)
        if changes.internal_status != previous_status:
            values["internal_status"] = changes.internal_status
            values["internal_status_updated_at"] = datetime.now(tz)
            status_changed = True
    if changes.internal_notes is not None:
        values["internal_notes"] = changes.internal_notes

    if values:
        ticket = repo.update(ticket, values)
        logger.info("Ticket internal fields updated", ticket_id=ticket_id, fields=sorted(values))

    return TicketInternalChange(
        ticket=TicketRead.model_validate(ticket),
        previous_status=previous_status,
        previous_notes=previous_notes,
        status_changed=status_changed,
    )


def lookup_tracking_codes(repo: TicketRepository, text: str) -> TrackingLookupResult:
    """Resolve pasted codes (either key) for the bulk status flow."""
    codes = parse_tracking_codes(text)
    if not codes:
        return TrackingLookupResult(found_tickets=[], not_found_codes=[])

    tickets = [TicketRead.model_validate(t) for t in repo.find_by_codes(codes)]
    known = {t.ticket_id for t in tickets} | {t.spxtn for t in tickets if t.spxtn}
    return TrackingLookupResult(
        found_tickets=tickets,
        not_found_codes=[code for code in codes if code not in known],
    )


def bulk_update_status(repo: TicketRepository, ticket_ids: List[str], status: str) -> BulkStatusResult:
    """Set the same internal status on many tickets at once.

    Only tickets whose status actually changes are stamped and counted in ``updated``.
    """
    _validate_status(status)
    ticket_ids = list(dict.fromkeys(ticket_ids))

    existing = {t.ticket_id for t in repo.find_by_ticket_ids(ticket_ids)}
    not_found = [tid for tid in ticket_ids if tid not in existing]

    updated = repo.update_internal_status_many(
        [tid for tid in ticket_ids if tid in existing],
        status,
        datetime.now(tz),
    )
    logger.info("Bulk status update", status=status, updated=updated, not_found=len(not_found))
    return BulkStatusResult(updated=updated, not_found=not_found)


def get_dashboard_stats(
    repo: TicketRepository, start_date: Optional[date] = None, end_date: Optional[date] = None
) -> TicketStats:
    """KPIs, status distribution and top-5 drivers, optionally by creation period."""
    start, end = day_bounds(start_date, end_date)
    return TicketStats(
        kpis=KpiStats(**repo.get_kpis(start, end)),
        status_distribution=[DistributionItem(**r) for r in repo.get_status_distribution(start, end)],
        driver_distribution=[DistributionItem(**r) for r in repo.get_driver_distribution(start, end, limit=5)],
        start_date=start_date,
        end_date=end_date,
    )


def list_unique_drivers(repo: TicketRepository) -> List[str]:
    return repo.get_unique_drivers()
