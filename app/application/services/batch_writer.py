"""Batched writes for the import executor.

Inserts go out one chunk per statement. Updates are chunked only for
progress reporting and written row by row, because each row carries its
own preserved operator fields. Store failures are recorded and the run
continues with the next chunk or row.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError

from app.application.services.batch_fetcher import ProgressCallback
from app.application.services.batching import chunk_count, chunked
from app.config import get_settings
from app.domain.models.ticket import INTERNAL_STATUS_PENDING
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.imports import ImportPreviewItem, ImportProgress
from app.domain.schemas.ticket import TicketCreate

settings = get_settings()
logger = structlog.get_logger(__name__)

STAGE_INSERT = "inserting"
STAGE_UPDATE = "updating"

OPERATIONAL_FIELDS = ("driver_name", "station", "pnr_value", "original_status", "sla_deadline")


@dataclass
class WriteReport:
    created: int = 0
    updated: int = 0
    errors: List[str] = field(default_factory=list)


def describe_store_error(exc: Exception) -> str:
    """Short message for a store failure (the driver error, not the full SQL)."""
    return str(getattr(exc, "orig", None) or exc)[:300]


def build_insert_payload(ticket: TicketCreate) -> Dict[str, Any]:
    payload = ticket.model_dump(exclude_none=True)
    payload["internal_status"] = INTERNAL_STATUS_PENDING
    payload["internal_notes"] = ""
    return payload


def build_update_payload(item: ImportPreviewItem) -> Dict[str, Any]:
    """Operational columns from the row plus the stored operator fields, written back as they were.

    Operational columns are always written, so a value missing from the row
    clears the stored one.
    """
    candidate = item.ticket
    existing = item.existing_ticket

    carried = {
        "internal_status": existing.internal_status,
        "internal_notes": existing.internal_notes,
        "internal_status_updated_at": existing.internal_status_updated_at,
    }
    payload: Dict[str, Any] = {key: value for key, value in carried.items() if value is not None}
    payload.update({name: getattr(candidate, name) for name in OPERATIONAL_FIELDS})

    # Backfill the tracking code, never replace one
    if candidate.spxtn and not existing.spxtn:
        payload["spxtn"] = candidate.spxtn

    return payload


class TicketBatchWriter:
    """Applies classified import rows to the ticket store."""

    def __init__(self, repo: TicketRepository, chunk_size: int | None = None):
        self.repo = repo
        self.chunk_size = chunk_size or settings.WRITE_CHUNK_SIZE

    def iter_batches(
        self, creates: Sequence[ImportPreviewItem], updates: Sequence[ImportPreviewItem]
    ) -> Iterator[Tuple[str, List[ImportPreviewItem]]]:
        for chunk in chunked(creates, self.chunk_size):
            yield STAGE_INSERT, chunk
        for chunk in chunked(updates, self.chunk_size):
            yield STAGE_UPDATE, chunk

    def write(
        self,
        creates: Sequence[ImportPreviewItem],
        updates: Sequence[ImportPreviewItem],
        report: WriteReport,
        on_progress: Optional[ProgressCallback] = None,
    ) -> WriteReport:
        """Write every batch in order, accumulating counts and errors into ``report``."""
        total_batches = chunk_count(len(creates), self.chunk_size) + chunk_count(len(updates), self.chunk_size)
        total_items = len(creates) + len(updates)
        processed = 0

        for current, (stage, chunk) in enumerate(self.iter_batches(creates, updates), start=1):
            if stage == STAGE_INSERT:
                self._insert_chunk(chunk, current, report)
                message = f"Inserindo novos registros: lote {current} de {total_batches}"
            else:
                for item in chunk:
                    self._update_row(item, report)
                message = f"Atualizando registros: lote {current} de {total_batches}"

            processed += len(chunk)
            if on_progress:
                on_progress(ImportProgress(
                    current=current,
                    total=total_batches,
                    processed=processed,
                    total_items=total_items,
                    stage=stage,
                    message=message,
                ))

        return report

    def _insert_chunk(self, chunk: List[ImportPreviewItem], batch_number: int, report: WriteReport) -> None:
        try:
            report.created += self.repo.insert_many([build_insert_payload(item.ticket) for item in chunk])
        except SQLAlchemyError as exc:
            logger.warning("Insert batch failed", batch=batch_number, rows=len(chunk), error=str(exc))
            report.errors.append(f"Erro ao inserir lote {batch_number} ({len(chunk)} registros): {describe_store_error(exc)}")

    def _update_row(self, item: ImportPreviewItem, report: WriteReport) -> None:
        ticket_id = item.existing_ticket.ticket_id
        try:
            affected = self.repo.update_by_ticket_id(ticket_id, build_update_payload(item))
        except SQLAlchemyError as exc:
            logger.warning("Ticket update failed", ticket_id=ticket_id, error=str(exc))
            report.errors.append(f"Erro ao atualizar ticket {ticket_id}: {describe_store_error(exc)}")
            return

        if affected:
            report.updated += 1
        else:
            report.errors.append(f"Erro ao atualizar ticket {ticket_id}: registro não encontrado")
