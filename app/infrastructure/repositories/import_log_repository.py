"""
SQLAlchemy Implementation of Import Log Repository.
"""

from typing import Any, Dict

from app.domain.models.import_log import ImportLog
from app.domain.repositories.import_log_repository import ImportLogRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyImportLogRepository(SQLAlchemyRepository[ImportLog], ImportLogRepository):
    """Import log repository implementation using SQLAlchemy."""

    def list_paginated(self, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        query = self.db.query(ImportLog)
        total = query.count()
        offset = (page - 1) * page_size
        logs = (
            query.order_by(ImportLog.import_date.desc(), ImportLog.id.desc())
            .offset(offset)
            .limit(page_size)
            .all()
        )

        return {
            "items": logs,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": (total + page_size - 1) // page_size,
        }
