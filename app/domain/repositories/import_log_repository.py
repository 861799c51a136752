"""
Import Log Repository Interface.
"""

from typing import Any, Dict

from app.domain.repositories.base import BaseRepository
from app.domain.models.import_log import ImportLog


class ImportLogRepository(BaseRepository[ImportLog]):
    """Interface for import audit log operations."""

    def list_paginated(self, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """List logs newest first with pagination metadata."""
        ...
