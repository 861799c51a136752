"""
Ticket Repository Interface.
Defines the store operations the import engine and dashboard rely on.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.domain.repositories.base import BaseRepository
from app.domain.models.ticket import Ticket


class TicketRepository(BaseRepository[Ticket]):
    """Interface for Ticket-specific operations."""

    def get_by_ticket_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get a single ticket by its business key."""
        ...

    def find_by_ticket_ids(self, ticket_ids: Sequence[str]) -> List[Ticket]:
        """Tickets whose ticket_id is in the given list (one IN query)."""
        ...

    def find_by_spxtns(self, spxtns: Sequence[str]) -> List[Ticket]:
        """Tickets whose tracking code is in the given list (one IN query)."""
        ...

    def find_by_codes(self, codes: Sequence[str]) -> List[Ticket]:
        """Tickets matching any of the codes by either key."""
        ...

    def insert_many(self, rows: List[Dict[str, Any]]) -> int:
        """Insert all rows in a single transaction."""
        ...

    def update_by_ticket_id(self, ticket_id: str, values: Dict[str, Any]) -> int:
        """Update one ticket by business key, returning the affected row count."""
        ...

    def update_internal_status_many(self, ticket_ids: Sequence[str], status: str, changed_at: datetime) -> int:
        """Set internal_status on many tickets at once."""
        ...

    def query_page(self, clauses: list, order_by: list, offset: int, limit: int) -> Tuple[List[Ticket], int]:
        """Run a filtered query, returning one page plus the total matching count."""
        ...

    def get_kpis(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
        """Total tickets, total value and pending count."""
        ...

    def get_status_distribution(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Ticket count grouped by original status."""
        ...

    def get_driver_distribution(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None, limit: int = 5
    ) -> List[Dict[str, Any]]:
        """Ticket count grouped by driver (top N)."""
        ...

    def get_unique_drivers(self) -> List[str]:
        """Distinct driver names, sorted."""
        ...

    def list_by_created_range(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Ticket]:
        """All tickets created inside the range, oldest SLA first."""
        ...
