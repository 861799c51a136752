"""Import history and full data reset."""

from typing import Any, Callable, Dict, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from app.domain.repositories.import_log_repository import ImportLogRepository
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.imports import ClearDatabaseProgress, ClearDatabaseResult, ImportLogRead

logger = structlog.get_logger(__name__)


def list_import_logs(repo: ImportLogRepository, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
    result = repo.list_paginated(page, page_size)
    result["items"] = [ImportLogRead.model_validate(log) for log in result["items"]]
    return result


def clear_all_data(
    ticket_repo: TicketRepository,
    log_repo: ImportLogRepository,
    on_progress: Optional[Callable[[ClearDatabaseProgress], None]] = None,
) -> ClearDatabaseResult:
    """Delete every import log and then every ticket."""

    def report(progress: ClearDatabaseProgress) -> None:
        if on_progress:
            on_progress(progress)

    deleted_logs = 0
    deleted_tickets = 0
    try:
        total_tickets = ticket_repo.count()
        total_logs = log_repo.count()
        report(ClearDatabaseProgress(
            stage="counting",
            message="Contando registros...",
            total_tickets=total_tickets,
            total_logs=total_logs,
        ))

        report(ClearDatabaseProgress(
            stage="deleting_logs",
            message="Excluindo histórico de importações...",
            total_logs=total_logs,
        ))
        deleted_logs = log_repo.delete_all()

        report(ClearDatabaseProgress(
            stage="deleting_tickets",
            message="Excluindo tickets...",
            total_tickets=total_tickets,
        ))
        deleted_tickets = ticket_repo.delete_all()

        report(ClearDatabaseProgress(stage="done", message="Banco de dados limpo"))
    except SQLAlchemyError as exc:
        logger.error("Clear database failed", error=str(exc))
        return ClearDatabaseResult(
            success=False,
            deleted_tickets=deleted_tickets,
            deleted_logs=deleted_logs,
            error=str(exc),
        )

    logger.warning("Database cleared", deleted_tickets=deleted_tickets, deleted_logs=deleted_logs)
    return ClearDatabaseResult(success=True, deleted_tickets=deleted_tickets, deleted_logs=deleted_logs)
