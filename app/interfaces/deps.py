"""
API Dependencies.

Repositories and import components are built per request from the request's
session, so every component receives its store handle explicitly.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.domain.models.ticket import Ticket
from app.domain.models.import_log import ImportLog
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.repositories.import_log_repository import ImportLogRepository
from app.infrastructure.repositories.ticket_repository import SQLAlchemyTicketRepository
from app.infrastructure.repositories.import_log_repository import SQLAlchemyImportLogRepository
from app.application.services.batch_fetcher import TicketBatchFetcher
from app.application.services.batch_writer import TicketBatchWriter
from app.application.services.import_analyzer import ImportAnalyzer
from app.application.services.import_executor import ImportExecutor

from app.infrastructure.database import get_db


def get_ticket_repository(db: Session = Depends(get_db)) -> TicketRepository:
    """Get ticket repository instance."""
    return SQLAlchemyTicketRepository(db, Ticket)


def get_import_log_repository(db: Session = Depends(get_db)) -> ImportLogRepository:
    """Get import log repository instance."""
    return SQLAlchemyImportLogRepository(db, ImportLog)


def get_import_analyzer(repo: TicketRepository = Depends(get_ticket_repository)) -> ImportAnalyzer:
    return ImportAnalyzer(TicketBatchFetcher(repo))


def get_import_executor(
    repo: TicketRepository = Depends(get_ticket_repository),
    log_repo: ImportLogRepository = Depends(get_import_log_repository),
) -> ImportExecutor:
    return ImportExecutor(TicketBatchWriter(repo), log_repo)
