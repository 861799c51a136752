"""Pydantic schemas for the smart CSV import flow."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.domain.schemas.ticket import TicketCreate, TicketRead

ImportOperation = Literal["create", "update", "skip"]


class FieldChange(BaseModel):
    field: str
    old_value: Any = None
    new_value: Any = None


class ImportPreviewItem(BaseModel):
    ticket: TicketCreate
    operation: ImportOperation
    changes: list[FieldChange] = Field(default_factory=list)
    error: Optional[str] = None
    existing_ticket: Optional[TicketRead] = None


class ImportSummary(BaseModel):
    total: int = 0
    to_create: int = 0
    to_update: int = 0
    to_skip: int = 0


class ImportAnalysis(BaseModel):
    previews: list[ImportPreviewItem]
    summary: ImportSummary


class ImportProgress(BaseModel):
    current: int
    total: int
    processed: int
    total_items: int
    stage: str
    message: str


class ImportResult(BaseModel):
    success: bool
    total_processed: int = 0
    new_records: int = 0
    updated_records: int = 0
    skipped_records: int = 0
    errors: list[str] = Field(default_factory=list)
    log_id: Optional[int] = None


class ImportLogRead(BaseModel):
    id: int
    file_name: str
    imported_by: Optional[str] = None
    total_rows: int
    new_records: int
    updated_records: int
    skipped_records: int
    details: Optional[dict[str, Any]] = None
    import_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ClearDatabaseProgress(BaseModel):
    stage: Literal["counting", "deleting_logs", "deleting_tickets", "done"]
    message: str
    total_tickets: Optional[int] = None
    total_logs: Optional[int] = None


class ClearDatabaseResult(BaseModel):
    success: bool
    deleted_tickets: int = 0
    deleted_logs: int = 0
    error: Optional[str] = None
