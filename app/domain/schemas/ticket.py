"""Pydantic schemas for Ticket domain."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class TicketBase(BaseModel):
    ticket_id: str
    spxtn: Optional[str] = None
    driver_name: Optional[str] = None
    station: Optional[str] = None
    pnr_value: Optional[float] = None
    original_status: Optional[str] = None
    sla_deadline: Optional[datetime] = None


class TicketCreate(TicketBase):
    """Candidate ticket parsed from one CSV row. ``ticket_id`` may be empty."""
    pass


class TicketRead(TicketBase):
    id: int
    internal_status: str = "Pendente"
    internal_notes: Optional[str] = None
    internal_status_updated_at: Optional[datetime] = None
    created_time: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ColumnFilters(BaseModel):
    tracking: Optional[str] = None
    driver: Optional[str] = None
    value: Optional[str] = None
    status: Optional[str] = None
    internal: Optional[str] = None
    notes: Optional[str] = None


class TicketPageParams(BaseModel):
    page: int = 1
    page_size: int = 50
    search_term: Optional[str] = None
    filters: Optional[ColumnFilters] = None
    sort_by: Literal["sla_deadline", "internal_status_updated_at"] = "sla_deadline"
    sort_order: Literal["asc", "desc"] = "asc"


class SearchResult(BaseModel):
    searched_codes: list[str]
    found_codes: list[str]
    not_found_codes: list[str]


class TicketPage(BaseModel):
    data: list[TicketRead]
    count: int
    page: int
    page_size: int
    total_pages: int
    search_result: Optional[SearchResult] = None


class TicketInternalUpdate(BaseModel):
    internal_status: Optional[str] = None
    internal_notes: Optional[str] = None


class TicketInternalChange(BaseModel):
    """Outcome of an internal edit; previous values allow the caller to revert."""
    ticket: TicketRead
    previous_status: str
    previous_notes: Optional[str] = None
    status_changed: bool


class TrackingLookupRequest(BaseModel):
    codes: str


class TrackingLookupResult(BaseModel):
    found_tickets: list[TicketRead]
    not_found_codes: list[str]


class BulkStatusRequest(BaseModel):
    ticket_ids: list[str] = Field(min_length=1)
    status: str


class BulkStatusResult(BaseModel):
    updated: int
    not_found: list[str]


class KpiStats(BaseModel):
    total_tickets: int
    total_value: float
    pending_count: int


class DistributionItem(BaseModel):
    name: str
    value: int


class TicketStats(BaseModel):
    kpis: KpiStats
    status_distribution: list[DistributionItem]
    driver_distribution: list[DistributionItem]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
