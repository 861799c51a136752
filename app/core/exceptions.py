"""
Global exception handling for the application.

Every error leaves the API in the same envelope::

    {"error": {"code": ..., "message": ..., "details": ..., "path": ...}}
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class BusinessRuleViolationException(AppError):
    """Business logic violation error."""
    def __init__(self, message: str = "Business rule violation", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class InvalidImportFileException(AppError):
    """Uploaded file is not a readable ticket CSV."""
    def __init__(self, message: str = "Arquivo inválido", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class StoreUnavailableException(AppError):
    """The ticket store could not answer; the whole operation should be retried."""
    def __init__(
        self,
        message: str = "Falha ao acessar o banco de dados. Tente novamente.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE, details)


def error_response(request: Request, status_code: int, code: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "path": request.url.path,
            }
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError):
        if exc.status_code >= 500:
            logger.error("Request aborted", path=request.url.path, code=exc.__class__.__name__, error=exc.message)
        return error_response(request, exc.status_code, exc.__class__.__name__, exc.message, exc.details)

    if isinstance(exc, SQLAlchemyError):
        logger.error("Database error", path=request.url.path, error=str(exc))
        return error_response(
            request,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "DatabaseError",
            StoreUnavailableException().message,
        )

    logger.exception("Unexpected error occurred", path=request.url.path)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "Erro inesperado. Tente novamente mais tarde.",
    )
