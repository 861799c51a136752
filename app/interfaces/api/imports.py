"""Import API routes — preview and run smart CSV imports, history, reset."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    BusinessRuleViolationException,
    InvalidImportFileException,
    StoreUnavailableException,
)
from app.interfaces.deps import (
    get_import_analyzer,
    get_import_executor,
    get_import_log_repository,
    get_ticket_repository,
)
from app.domain.repositories.import_log_repository import ImportLogRepository
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.imports import ClearDatabaseResult, ImportAnalysis, ImportResult
from app.application.services.import_analyzer import ImportAnalyzer
from app.application.services.import_executor import ImportExecutor
from app.application.services.import_log_service import clear_all_data, list_import_logs
from app.application.services.ticket_csv_transformer import read_csv_rows, rows_to_tickets

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/imports", tags=["Imports"])

CLEAR_CONFIRMATION = "ZERAR"


async def _read_upload(file: UploadFile) -> list:
    if not file.filename:
        raise InvalidImportFileException("Arquivo não informado")
    if not file.filename.lower().endswith(".csv"):
        raise InvalidImportFileException("Apenas arquivos .csv são aceitos", details={"file_name": file.filename})

    content = await file.read()
    try:
        rows = read_csv_rows(content)
    except Exception as e:
        raise InvalidImportFileException(f"Erro ao ler arquivo: {e}", details={"file_name": file.filename}) from e

    if not rows:
        raise InvalidImportFileException("Arquivo vazio ou sem linhas válidas", details={"file_name": file.filename})
    return rows_to_tickets(rows)


def _analyze(analyzer: ImportAnalyzer, candidates: list, file_name: str) -> ImportAnalysis:
    try:
        return analyzer.analyze(candidates)
    except SQLAlchemyError as e:
        logger.error("Import analysis failed", file_name=file_name, error=str(e))
        raise StoreUnavailableException("Falha ao consultar registros existentes. Envie o arquivo novamente.") from e


@router.post("/preview", response_model=ImportAnalysis)
async def preview_import(
    file: UploadFile = File(...),
    analyzer: ImportAnalyzer = Depends(get_import_analyzer),
):
    """Classify every row as new / update / skip without writing anything."""
    candidates = await _read_upload(file)
    return _analyze(analyzer, candidates, file.filename)


@router.post("", response_model=ImportResult)
async def run_import(
    file: UploadFile = File(...),
    imported_by: Optional[str] = Form(None),
    analyzer: ImportAnalyzer = Depends(get_import_analyzer),
    executor: ImportExecutor = Depends(get_import_executor),
):
    """Analyze and commit an import. Write failures come back in ``errors``."""
    candidates = await _read_upload(file)
    analysis = _analyze(analyzer, candidates, file.filename)
    return executor.execute(analysis.previews, file_name=file.filename, imported_by=imported_by)


@router.get("/logs")
def import_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    repo: ImportLogRepository = Depends(get_import_log_repository),
):
    return list_import_logs(repo, page, page_size)


@router.delete("/data", response_model=ClearDatabaseResult)
def clear_data(
    confirm: str = Query(...),
    ticket_repo: TicketRepository = Depends(get_ticket_repository),
    log_repo: ImportLogRepository = Depends(get_import_log_repository),
):
    """Delete all tickets and import history. Requires ``confirm=ZERAR``."""
    if confirm != CLEAR_CONFIRMATION:
        raise BusinessRuleViolationException(f"Digite {CLEAR_CONFIRMATION} para confirmar")
    return clear_all_data(ticket_repo, log_repo)
