"""Import executor — commits an analyzed preview and records the audit log."""

from typing import List, Optional, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError

from app.application.services.batch_fetcher import ProgressCallback
from app.application.services.batch_writer import TicketBatchWriter, WriteReport
from app.config import get_settings
from app.domain.repositories.import_log_repository import ImportLogRepository
from app.domain.schemas.imports import ImportPreviewItem, ImportResult

settings = get_settings()
logger = structlog.get_logger(__name__)


def build_log_details(previews: Sequence[ImportPreviewItem], errors: List[str]) -> dict:
    """Per-row outcome stored with the import log."""
    return {
        "items": [
            {
                "ticket_id": item.ticket.ticket_id,
                "operation": item.operation,
                "changes": [change.model_dump(mode="json") for change in item.changes],
                "error": item.error,
            }
            for item in previews
        ],
        "errors": list(errors),
    }


class ImportExecutor:
    """Runs the writes for a confirmed import. Never raises to the caller."""

    def __init__(self, writer: TicketBatchWriter, log_repo: ImportLogRepository):
        self.writer = writer
        self.log_repo = log_repo

    def execute(
        self,
        previews: Sequence[ImportPreviewItem],
        file_name: str = "import.csv",
        imported_by: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportResult:
        creates = [p for p in previews if p.operation == "create"]
        updates = [p for p in previews if p.operation == "update"]
        skipped = len(previews) - len(creates) - len(updates)

        report = WriteReport()
        try:
            self.writer.write(creates, updates, report, on_progress)
        except Exception as exc:
            logger.exception("Import aborted", file_name=file_name)
            report.errors.append(f"Erro inesperado durante a importação: {exc}")

        result = ImportResult(
            success=not report.errors,
            total_processed=len(previews),
            new_records=report.created,
            updated_records=report.updated,
            skipped_records=skipped,
            errors=report.errors,
        )
        result.log_id = self._save_log(previews, result, file_name, imported_by or settings.DEFAULT_IMPORTER)

        logger.info(
            "Import finished",
            file_name=file_name,
            success=result.success,
            created=result.new_records,
            updated=result.updated_records,
            skipped=result.skipped_records,
            errors=len(result.errors),
            log_id=result.log_id,
        )
        return result

    def _save_log(
        self, previews: Sequence[ImportPreviewItem], result: ImportResult, file_name: str, imported_by: str
    ) -> Optional[int]:
        try:
            log = self.log_repo.create({
                "file_name": file_name,
                "imported_by": imported_by,
                "total_rows": result.total_processed,
                "new_records": result.new_records,
                "updated_records": result.updated_records,
                "skipped_records": result.skipped_records,
                "details": build_log_details(previews, result.errors),
            })
        except SQLAlchemyError as exc:
            logger.error("Could not save import log", file_name=file_name, error=str(exc))
            return None
        return log.id
