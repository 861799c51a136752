"""Pydantic schemas for report data."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel

from app.domain.schemas.ticket import TicketRead

ReportPeriodType = Literal["all", "last7", "last30", "last90", "last365", "custom"]


class ReportParams(BaseModel):
    period_type: ReportPeriodType = "all"
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ReportMetadata(BaseModel):
    period: str
    total_records: int
    generated_at: datetime


class ReportStatistics(BaseModel):
    total_value: float
    pending_count: int
    in_review_count: int
    done_count: int


class ReportData(BaseModel):
    metadata: ReportMetadata
    statistics: ReportStatistics
    tickets: list[TicketRead]
