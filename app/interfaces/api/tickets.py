"""Tickets API routes — list, filter, edit, bulk status, stats."""

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.interfaces.deps import get_ticket_repository
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.ticket import (
    BulkStatusRequest,
    BulkStatusResult,
    ColumnFilters,
    TicketInternalChange,
    TicketInternalUpdate,
    TicketPage,
    TicketPageParams,
    TicketStats,
    TrackingLookupRequest,
    TrackingLookupResult,
)
from app.application.services.ticket_query_service import fetch_page
from app.application.services.ticket_service import (
    bulk_update_status,
    get_dashboard_stats,
    list_unique_drivers,
    lookup_tracking_codes,
    update_ticket_internal,
)

router = APIRouter(prefix="/api/tickets", tags=["Tickets"])


@router.get("", response_model=TicketPage)
def list_tickets(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    search: Optional[str] = None,
    tracking: Optional[str] = None,
    driver: Optional[str] = None,
    value: Optional[str] = None,
    status: Optional[str] = None,
    internal: Optional[str] = None,
    notes: Optional[str] = None,
    sort_by: Literal["sla_deadline", "internal_status_updated_at"] = "sla_deadline",
    sort_order: Literal["asc", "desc"] = "asc",
    repo: TicketRepository = Depends(get_ticket_repository),
):
    params = TicketPageParams(
        page=page,
        page_size=page_size,
        search_term=search,
        filters=ColumnFilters(
            tracking=tracking,
            driver=driver,
            value=value,
            status=status,
            internal=internal,
            notes=notes,
        ),
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return fetch_page(repo, params)


@router.get("/drivers")
def drivers(repo: TicketRepository = Depends(get_ticket_repository)):
    return list_unique_drivers(repo)


@router.get("/stats", response_model=TicketStats)
def stats(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    repo: TicketRepository = Depends(get_ticket_repository),
):
    return get_dashboard_stats(repo, start_date, end_date)


@router.patch("/{ticket_id}", response_model=TicketInternalChange)
def update_internal(
    ticket_id: str,
    body: TicketInternalUpdate,
    repo: TicketRepository = Depends(get_ticket_repository),
):
    """Edit internal status and/or notes of one ticket."""
    return update_ticket_internal(repo, ticket_id, body)


@router.post("/lookup", response_model=TrackingLookupResult)
def lookup(body: TrackingLookupRequest, repo: TicketRepository = Depends(get_ticket_repository)):
    """Resolve pasted tracking codes / ticket ids (one per line, max 50)."""
    return lookup_tracking_codes(repo, body.codes)


@router.post("/bulk-status", response_model=BulkStatusResult)
def bulk_status(body: BulkStatusRequest, repo: TicketRepository = Depends(get_ticket_repository)):
    return bulk_update_status(repo, body.ticket_ids, body.status)
